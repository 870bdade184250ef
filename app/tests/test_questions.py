import pytest

from app.core.config import settings
from app.core.questions import (
    FREE_TEXT_MAX_LENGTH,
    QuestionKind,
    build_question_set,
    get_active_question_set,
    get_question_set,
    get_question_sets,
)


def test_shipped_question_sets():
    assert set(get_question_sets()) == {"trading-v1", "sports-v2"}


def test_trading_question_set_layout(trading_questions):
    assert trading_questions.keys == (
        "question1_tradingExperience",
        "question2_tradingGoals",
        "question3_tradingStyle",
        "question4_informationSources",
        "question5_tradingFrequency",
        "question6_additionalExperience",
    )
    assert trading_questions.multi_choice_keys == ("question3_tradingStyle", "question4_informationSources")
    experience = trading_questions.get("question1_tradingExperience")
    assert experience.kind is QuestionKind.SINGLE
    assert experience.options == ("Beginner", "Intermediate", "Advanced", "Expert")
    notes = trading_questions.get("question6_additionalExperience")
    assert notes.required is False
    assert notes.max_length == FREE_TEXT_MAX_LENGTH


def test_active_question_set_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "QUESTION_SET_VERSION", "sports-v2")
    assert get_active_question_set().version == "sports-v2"


def test_unknown_version():
    with pytest.raises(ValueError):
        get_question_set("trading-v0")


@pytest.mark.parametrize("entry", [
    {"key": "q1", "kind": "single"},
    {"key": "q1", "kind": "text", "options": ["a"]},
    {"key": "q1", "kind": "dropdown", "options": ["a"]},
])
def test_malformed_definitions_are_rejected(entry):
    with pytest.raises(ValueError):
        build_question_set("broken", {"questions": [entry]})


def test_duplicate_keys_are_rejected():
    entry = {"key": "q1", "kind": "text"}
    with pytest.raises(ValueError):
        build_question_set("broken", {"questions": [entry, entry]})
