import pytest

from app.core.validation import AnswerValidationError, ValidationErrorKind, validate_answers


def _kinds(exc_info) -> dict:
    return {error.field: error.kind for error in exc_info.value.errors}


def test_valid_answers_are_normalized_in_question_order(trading_questions, trading_answers):
    raw = dict(reversed(list(trading_answers.items())))

    normalized = validate_answers(raw, trading_questions)

    assert list(normalized) == [
        "question1_tradingExperience",
        "question3_tradingStyle",
        "question4_informationSources",
        "question5_tradingFrequency",
    ]
    assert normalized["question3_tradingStyle"] == ["Day Trading", "Swing Trading"]


def test_selection_order_is_kept_and_repeats_dropped(trading_questions, trading_answers):
    trading_answers["question3_tradingStyle"] = ["Scalping", "Day Trading", "Scalping"]

    normalized = validate_answers(trading_answers, trading_questions)

    assert normalized["question3_tradingStyle"] == ["Scalping", "Day Trading"]


@pytest.mark.parametrize("value", [None, "", "   "])
def test_required_single_choice_missing(trading_questions, trading_answers, value):
    trading_answers["question1_tradingExperience"] = value

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {"question1_tradingExperience": ValidationErrorKind.MISSING_FIELD}


def test_absent_required_keys_are_all_reported(trading_questions):
    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers({}, trading_questions)

    assert _kinds(exc_info) == {
        "question1_tradingExperience": ValidationErrorKind.MISSING_FIELD,
        "question3_tradingStyle": ValidationErrorKind.MISSING_FIELD,
        "question4_informationSources": ValidationErrorKind.MISSING_FIELD,
        "question5_tradingFrequency": ValidationErrorKind.MISSING_FIELD,
    }


def test_single_choice_outside_options(trading_questions, trading_answers):
    trading_answers["question1_tradingExperience"] = "Guru"

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    [error] = exc_info.value.errors
    assert error.field == "question1_tradingExperience"
    assert error.kind is ValidationErrorKind.INVALID_OPTION
    assert "Guru" in error.message


def test_multi_choice_with_one_bad_option(trading_questions, trading_answers):
    trading_answers["question3_tradingStyle"] = ["Day Trading", "Lottery"]

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {"question3_tradingStyle": ValidationErrorKind.INVALID_OPTION}


def test_empty_multi_choice_is_empty_selection(trading_questions, trading_answers):
    trading_answers["question4_informationSources"] = []

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {"question4_informationSources": ValidationErrorKind.EMPTY_SELECTION}


@pytest.mark.parametrize("key,value", [
    ("question1_tradingExperience", ["Beginner"]),
    ("question3_tradingStyle", "Day Trading"),
    ("question3_tradingStyle", ["Day Trading", 3]),
    ("question6_additionalExperience", 42),
])
def test_wrong_value_types(trading_questions, trading_answers, key, value):
    trading_answers[key] = value

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {key: ValidationErrorKind.INVALID_TYPE}


def test_unknown_keys_are_rejected(trading_questions, trading_answers):
    trading_answers["question7_favoriteColor"] = "Blue"

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {"question7_favoriteColor": ValidationErrorKind.UNKNOWN_FIELD}


def test_free_text_limit_is_inclusive(trading_questions, trading_answers):
    trading_answers["question6_additionalExperience"] = "x" * 1000

    normalized = validate_answers(trading_answers, trading_questions)

    assert len(normalized["question6_additionalExperience"]) == 1000


def test_free_text_over_limit(trading_questions, trading_answers):
    trading_answers["question6_additionalExperience"] = "x" * 1001

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(trading_answers, trading_questions)

    assert _kinds(exc_info) == {"question6_additionalExperience": ValidationErrorKind.TOO_LONG}


def test_blank_optional_text_is_left_out(trading_questions, trading_answers):
    trading_answers["question2_tradingGoals"] = ""

    normalized = validate_answers(trading_answers, trading_questions)

    assert "question2_tradingGoals" not in normalized


def test_every_failure_is_collected(trading_questions):
    raw = {
        "question1_tradingExperience": "Guru",
        "question3_tradingStyle": [],
        "question5_tradingFrequency": "Daily",
        "question6_additionalExperience": "y" * 2000,
    }

    with pytest.raises(AnswerValidationError) as exc_info:
        validate_answers(raw, trading_questions)

    assert _kinds(exc_info) == {
        "question1_tradingExperience": ValidationErrorKind.INVALID_OPTION,
        "question3_tradingStyle": ValidationErrorKind.EMPTY_SELECTION,
        "question4_informationSources": ValidationErrorKind.MISSING_FIELD,
        "question6_additionalExperience": ValidationErrorKind.TOO_LONG,
    }
