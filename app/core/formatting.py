from typing import Any, Mapping, Sequence

from app.core.questions import QuestionSet


def format_selection(selection: Sequence[str]) -> str:
    return ", ".join(selection)


def format_answers(answers: Mapping[str, Any], question_set: QuestionSet) -> dict[str, str]:
    """Display strings for every multi-choice answer present, in selection order."""
    return {
        key: format_selection(answers[key])
        for key in question_set.multi_choice_keys
        if key in answers
    }
