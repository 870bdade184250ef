from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional

from app.core.config import question_sets, settings

FREE_TEXT_MAX_LENGTH = 1000


class QuestionKind(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    TEXT = "text"


@dataclass(frozen=True)
class Question:
    key: str
    title: str
    kind: QuestionKind
    required: bool = True
    options: tuple[str, ...] = ()
    max_length: int = FREE_TEXT_MAX_LENGTH

    @property
    def is_choice(self) -> bool:
        return self.kind is not QuestionKind.TEXT


@dataclass(frozen=True)
class QuestionSet:
    version: str
    title: str
    questions: tuple[Question, ...] = field(default_factory=tuple)

    def get(self, key: str) -> Optional[Question]:
        for question in self.questions:
            if question.key == key:
                return question
        return None

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(q.key for q in self.questions)

    @property
    def choice_questions(self) -> tuple[Question, ...]:
        return tuple(q for q in self.questions if q.is_choice)

    @property
    def multi_choice_keys(self) -> tuple[str, ...]:
        return tuple(q.key for q in self.questions if q.kind is QuestionKind.MULTIPLE)


def build_question_set(version: str, definition: dict) -> QuestionSet:
    """
    Builds a QuestionSet from its YAML definition, rejecting malformed entries
    so a bad definition fails at startup instead of at submission time.
    """
    questions = []
    seen = set()
    for entry in definition.get("questions") or []:
        kind = QuestionKind(entry["kind"])
        options = tuple(entry.get("options") or ())
        if kind is QuestionKind.TEXT and options:
            raise ValueError(f"{version}: free-text question {entry['key']} cannot declare options")
        if kind is not QuestionKind.TEXT and not options:
            raise ValueError(f"{version}: choice question {entry['key']} has no options")
        if entry["key"] in seen:
            raise ValueError(f"{version}: duplicate question key {entry['key']}")
        seen.add(entry["key"])
        questions.append(Question(
            key=entry["key"],
            title=entry.get("title", entry["key"]),
            kind=kind,
            required=bool(entry.get("required", True)),
            options=options,
            max_length=int(entry.get("max_length", FREE_TEXT_MAX_LENGTH)),
        ))
    return QuestionSet(version=version, title=definition.get("title", version), questions=tuple(questions))


@lru_cache
def get_question_sets() -> dict[str, QuestionSet]:
    return {
        version: build_question_set(version, definition)
        for version, definition in question_sets.items()
    }


def get_question_set(version: str) -> QuestionSet:
    registry = get_question_sets()
    if version not in registry:
        raise ValueError(f"Question set {version} not found")
    return registry[version]


def get_active_question_set() -> QuestionSet:
    return get_question_set(settings.QUESTION_SET_VERSION)
