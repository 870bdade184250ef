"""
Canonicalization of onboarding documents written by older schema versions.

Earlier documents came in two shapes: flat top-level ``questionN_*`` fields
(multi-choice answers as lists), and a nested ``responses`` object holding
comma-joined display strings next to ``<key>_array`` copies of the raw
selections, sometimes alongside the flat fields as well. Both map onto the
single canonical ``answers`` / ``formatted_answers`` pair.
"""
from typing import Any, Mapping, Optional

from app.core.formatting import format_answers
from app.core.questions import QuestionKind, QuestionSet


def split_formatted(value: str, options: tuple[str, ...]) -> list[str]:
    """
    Splits a comma-joined display string back into its options. Options may
    contain ", " themselves, so known options are matched before falling
    back to splitting on the separator.
    """
    selection = []
    remaining = value.strip()
    by_length = sorted(options, key=len, reverse=True)
    while remaining:
        match = next(
            (o for o in by_length if remaining == o or remaining.startswith(o + ", ")),
            None,
        )
        if match is None:
            match, _, _ = remaining.partition(", ")
        selection.append(match.strip())
        remaining = remaining[len(match):].removeprefix(", ").strip()
    return [item for item in selection if item]


def _first_present(*values: Any) -> Optional[Any]:
    for value in values:
        if value not in (None, "", []):
            return value
    return None


def canonicalize_legacy_document(document: Mapping[str, Any], question_set: QuestionSet) -> dict[str, Any]:
    nested = document.get("responses") or {}
    answers: dict[str, Any] = {}

    for question in question_set.questions:
        key = question.key
        value = _first_present(nested.get(f"{key}_array"), nested.get(key), document.get(key))
        if value is None:
            continue
        if question.kind is QuestionKind.MULTIPLE:
            if isinstance(value, str):
                value = split_formatted(value, question.options)
            value = list(dict.fromkeys(value))
        answers[key] = value

    return {
        "user_id": str(document.get("userId") or document.get("user_id") or ""),
        "username": document.get("username"),
        "question_set_version": question_set.version,
        "answers": answers,
        "formatted_answers": format_answers(answers, question_set),
    }
