"""Question record types shared by the collector and the analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


KEY_SEPARATOR = "|"


class QuestionKind(str, Enum):
    MULTIPLE = "multiple"
    BOOLEAN = "boolean"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class QuestionRecord:
    """One trivia question as returned by the remote API.

    The API does not provide an identifier; see :func:`quiz_key` for the
    derived identity.
    """

    kind: QuestionKind
    difficulty: Difficulty
    category: str
    question: str
    correct_answer: str
    incorrect_answers: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> "QuestionRecord":
        if not isinstance(payload, dict):
            raise ValueError(f"Question must be an object, got {type(payload).__name__}")

        missing = [
            name
            for name in ("type", "difficulty", "category", "question", "correct_answer")
            if not isinstance(payload.get(name), str)
        ]
        if missing:
            raise ValueError(f"Question is missing fields: {', '.join(missing)}")

        incorrect = payload.get("incorrect_answers", [])
        if not isinstance(incorrect, list) or not all(isinstance(item, str) for item in incorrect):
            raise ValueError("incorrect_answers must be a list of strings")

        try:
            kind = QuestionKind(payload["type"])
            difficulty = Difficulty(payload["difficulty"])
        except ValueError as exc:
            raise ValueError(f"Unsupported question attribute: {exc}") from exc

        return cls(
            kind=kind,
            difficulty=difficulty,
            category=payload["category"],
            question=payload["question"],
            correct_answer=payload["correct_answer"],
            incorrect_answers=tuple(incorrect),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "difficulty": self.difficulty.value,
            "category": self.category,
            "question": self.question,
            "correct_answer": self.correct_answer,
            "incorrect_answers": list(self.incorrect_answers),
        }


def quiz_key(record: QuestionRecord) -> str:
    """Return the uniqueness key of a record (question text + correct answer)."""
    return f"{record.question}{KEY_SEPARATOR}{record.correct_answer}"


@dataclass
class QuizCollection:
    """Persisted view of the collected questions.

    ``total_unique`` is always derived from ``quizzes`` so the two never
    disagree.
    """

    last_updated: str = ""
    quizzes: list[QuestionRecord] = field(default_factory=list)

    @property
    def total_unique(self) -> int:
        return len(self.quizzes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_unique": self.total_unique,
            "last_updated": self.last_updated,
            "quizzes": [quiz.to_dict() for quiz in self.quizzes],
        }
