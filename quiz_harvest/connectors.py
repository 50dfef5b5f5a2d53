"""Open Trivia DB fetch client.

The client performs exactly one request per call and never raises: every
failure is logged and reported as an empty batch, which the polling loop
treats as a transient error.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from quiz_harvest.models import QuestionRecord
from quiz_harvest.settings import DEFAULT_API_URL, DEFAULT_BATCH_SIZE, DEFAULT_FETCH_TIMEOUT_SEC


RESPONSE_CODE_NAMES = {
    0: "success",
    1: "no_results",
    2: "invalid_parameter",
    3: "token_not_found",
    4: "token_empty",
    5: "rate_limit",
}
logger = logging.getLogger(__name__)


def _parse_results(results: Any) -> list[QuestionRecord]:
    if not isinstance(results, list):
        raise ValueError("results must be a list")
    return [QuestionRecord.from_dict(item) for item in results]


def fetch_quiz_batch(
    api_url: str = DEFAULT_API_URL,
    amount: int = DEFAULT_BATCH_SIZE,
    timeout: float = DEFAULT_FETCH_TIMEOUT_SEC,
) -> list[QuestionRecord]:
    """Fetch one batch of questions, or ``[]`` on any failure."""
    try:
        response = requests.get(api_url, params={"amount": amount}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        logger.warning("Quiz fetch failed (url=%s): %s", api_url, exc)
        return []
    except ValueError as exc:
        logger.warning("Quiz fetch returned invalid JSON (url=%s): %s", api_url, exc)
        return []

    if not isinstance(payload, dict):
        logger.warning("Quiz fetch returned unexpected payload type: %s", type(payload).__name__)
        return []

    response_code = payload.get("response_code")
    if response_code != 0:
        meaning = RESPONSE_CODE_NAMES.get(response_code, "unknown") if isinstance(response_code, int) else "unknown"
        logger.warning("Quiz API error (response_code=%r, meaning=%s)", response_code, meaning)
        return []

    try:
        return _parse_results(payload.get("results"))
    except ValueError as exc:
        logger.warning("Quiz API returned malformed results: %s", exc)
        return []
