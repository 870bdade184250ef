from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from app.core.questions import Question, QuestionKind, QuestionSet


class ValidationErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    UNKNOWN_FIELD = "UnknownField"
    INVALID_TYPE = "InvalidType"
    INVALID_OPTION = "InvalidOption"
    EMPTY_SELECTION = "EmptySelection"
    TOO_LONG = "TooLong"


@dataclass(frozen=True)
class FieldError:
    field: str
    kind: ValidationErrorKind
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "kind": self.kind.value, "message": self.message}


class AnswerValidationError(Exception):
    """Raised with every field-level problem found in one answer set."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__(", ".join(f"{e.field}: {e.kind.value}" for e in errors))


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_single(question: Question, value: Any) -> list[FieldError]:
    if not isinstance(value, str):
        return [FieldError(question.key, ValidationErrorKind.INVALID_TYPE,
                           f"{question.key} must be a single option")]
    if value not in question.options:
        return [FieldError(question.key, ValidationErrorKind.INVALID_OPTION,
                           f"Invalid option for {question.key}: {value}")]
    return []


def _check_multiple(question: Question, value: Any) -> list[FieldError]:
    if not isinstance(value, list):
        return [FieldError(question.key, ValidationErrorKind.INVALID_TYPE,
                           f"{question.key} must be a list of options")]
    if not value:
        return [FieldError(question.key, ValidationErrorKind.EMPTY_SELECTION,
                           f"At least one option must be selected for {question.key}")]
    if not all(isinstance(item, str) for item in value):
        return [FieldError(question.key, ValidationErrorKind.INVALID_TYPE,
                           f"{question.key} options must be strings")]
    invalid = [item for item in value if item not in question.options]
    if invalid:
        return [FieldError(question.key, ValidationErrorKind.INVALID_OPTION,
                           f"Invalid option for {question.key}: {', '.join(invalid)}")]
    return []


def _check_text(question: Question, value: Any) -> list[FieldError]:
    if not isinstance(value, str):
        return [FieldError(question.key, ValidationErrorKind.INVALID_TYPE,
                           f"{question.key} must be text")]
    if len(value) > question.max_length:
        return [FieldError(question.key, ValidationErrorKind.TOO_LONG,
                           f"{question.key} must be at most {question.max_length} characters")]
    return []


_CHECKS = {
    QuestionKind.SINGLE: _check_single,
    QuestionKind.MULTIPLE: _check_multiple,
    QuestionKind.TEXT: _check_text,
}


def validate_answers(raw: Mapping[str, Any], question_set: QuestionSet) -> dict[str, Any]:
    """
    Validates a raw answer set against a question set.

    Returns the normalized answers in question-set order: multi-choice
    selections keep their selection order with repeated options dropped, and
    blank optional answers are left out. Raises AnswerValidationError
    carrying every failure when anything is wrong.
    """
    errors: list[FieldError] = []
    normalized: dict[str, Any] = {}

    for key in raw:
        if question_set.get(key) is None:
            errors.append(FieldError(key, ValidationErrorKind.UNKNOWN_FIELD,
                                     f"{key} is not part of question set {question_set.version}"))

    for question in question_set.questions:
        value = raw.get(question.key)
        if _is_blank(value):
            if question.required:
                errors.append(FieldError(question.key, ValidationErrorKind.MISSING_FIELD,
                                         f"{question.key} is required"))
            continue

        problems = _CHECKS[question.kind](question, value)
        if problems:
            errors.extend(problems)
            continue

        if question.kind is QuestionKind.MULTIPLE:
            normalized[question.key] = list(dict.fromkeys(value))
        else:
            normalized[question.key] = value

    if errors:
        raise AnswerValidationError(errors)
    return normalized
