from __future__ import annotations

import pytest

from quiz_harvest.schema_validation import validate_collection_payload, validate_question_payload


def test_collection_payload_passes_when_well_formed() -> None:
    payload = {
        "total_unique": 1,
        "last_updated": "2026-10-19T08:00:00+00:00",
        "quizzes": [
            {
                "type": "multiple",
                "difficulty": "hard",
                "category": "Art",
                "question": "Who painted Guernica?",
                "correct_answer": "Pablo Picasso",
                "incorrect_answers": ["Dali", "Miro", "Goya"],
            }
        ],
    }

    validate_collection_payload(payload)


def test_question_payload_fails_on_unknown_type() -> None:
    payload = {
        "type": "essay",
        "difficulty": "hard",
        "category": "Art",
        "question": "q",
        "correct_answer": "a",
        "incorrect_answers": [],
    }

    with pytest.raises(ValueError, match="at type"):
        validate_question_payload(payload)


def test_collection_payload_ignores_individual_question_shape() -> None:
    validate_collection_payload({"total_unique": 1, "last_updated": "", "quizzes": [{"question": "q"}]})


def test_collection_payload_fails_when_quizzes_is_not_a_list() -> None:
    with pytest.raises(ValueError, match="at quizzes"):
        validate_collection_payload({"total_unique": 0, "last_updated": "", "quizzes": {}})


def test_collection_payload_fails_when_not_an_object() -> None:
    with pytest.raises(ValueError, match="<root>"):
        validate_collection_payload([])
