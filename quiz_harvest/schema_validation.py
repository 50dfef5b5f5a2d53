"""JSON schema for the persisted question collection."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator


QUESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "difficulty", "category", "question", "correct_answer", "incorrect_answers"],
    "properties": {
        "type": {"enum": ["multiple", "boolean"]},
        "difficulty": {"enum": ["easy", "medium", "hard"]},
        "category": {"type": "string"},
        "question": {"type": "string"},
        "correct_answer": {"type": "string"},
        "incorrect_answers": {"type": "array", "items": {"type": "string"}},
    },
}

COLLECTION_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["total_unique", "last_updated", "quizzes"],
    "properties": {
        "total_unique": {"type": "integer", "minimum": 0},
        "last_updated": {"type": "string"},
        "quizzes": {"type": "array"},
    },
}


def validate_json_payload(payload: Any, schema: dict[str, Any], *, schema_name: str = "schema") -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda err: [str(item) for item in err.path])
    if not errors:
        return

    first = errors[0]
    path = ".".join(str(item) for item in first.path)
    location = path or "<root>"
    raise ValueError(f"JSON schema validation failed ({schema_name}) at {location}: {first.message}")


def validate_collection_payload(payload: Any) -> None:
    """Raise ``ValueError`` when ``payload`` is not a valid persisted collection."""
    validate_json_payload(payload, COLLECTION_SCHEMA, schema_name="quiz collection")


def validate_question_payload(payload: Any) -> None:
    """Raise ``ValueError`` when ``payload`` is not a valid stored question."""
    validate_json_payload(payload, QUESTION_SCHEMA, schema_name="quiz question")
