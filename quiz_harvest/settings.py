"""Environment-driven configuration for the collector and analyzer."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Callable, TypeVar


DEFAULT_API_URL = "https://opentdb.com/api.php"
DEFAULT_BATCH_SIZE = 20
MAX_BATCH_SIZE = 50
DEFAULT_FETCH_TIMEOUT_SEC = 20.0
DEFAULT_OUTPUT_PATH = "unique_quizzes.json"
DEFAULT_SATURATION_THRESHOLD = 6
DEFAULT_PROBE_REQUESTS = 3
DEFAULT_DELAY_MIN_MS = 1200
DEFAULT_DELAY_MAX_MS = 4200

API_URL_ENV = "QUIZ_API_URL"
BATCH_SIZE_ENV = "QUIZ_BATCH_SIZE"
FETCH_TIMEOUT_SEC_ENV = "QUIZ_FETCH_TIMEOUT_SEC"
OUTPUT_PATH_ENV = "QUIZ_OUTPUT_PATH"
SATURATION_THRESHOLD_ENV = "QUIZ_SATURATION_THRESHOLD"
PROBE_REQUESTS_ENV = "QUIZ_PROBE_REQUESTS"
MAX_REQUESTS_ENV = "QUIZ_MAX_REQUESTS"
DELAY_MIN_MS_ENV = "QUIZ_DELAY_MIN_MS"
DELAY_MAX_MS_ENV = "QUIZ_DELAY_MAX_MS"
ANALYZER_STRICT_ENV = "ANALYZER_STRICT"
LOG_LEVEL_ENV = "LOG_LEVEL"

T = TypeVar("T", int, float)

logger = logging.getLogger(__name__)


def is_truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(
    env_name: str,
    default: T,
    parse: Callable[[str], T],
    accept: Callable[[T], bool],
) -> T:
    """Parse ``env_name`` with ``parse``; warn and return ``default`` unless ``accept`` passes."""
    raw_value = os.getenv(env_name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        parsed = parse(raw_value.strip())
    except ValueError:
        pass
    else:
        if accept(parsed):
            return parsed
    logger.warning("Invalid config env value; using default (env=%s, raw=%r, default=%s)", env_name, raw_value, default)
    return default


def _env_int(env_name: str, default: int, min_value: int = 0, max_value: int | None = None) -> int:
    return _env_number(
        env_name,
        default,
        int,
        lambda value: value >= min_value and (max_value is None or value <= max_value),
    )


def _env_positive_float(env_name: str, default: float) -> float:
    return _env_number(env_name, default, float, lambda value: value > 0)


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    batch_size: int = DEFAULT_BATCH_SIZE
    fetch_timeout_sec: float = DEFAULT_FETCH_TIMEOUT_SEC
    output_path: Path = Path(DEFAULT_OUTPUT_PATH)
    saturation_threshold: int = DEFAULT_SATURATION_THRESHOLD
    probe_requests: int = DEFAULT_PROBE_REQUESTS
    # None means the loop is bounded only by saturation.
    max_requests: int | None = None
    delay_min_ms: int = DEFAULT_DELAY_MIN_MS
    delay_max_ms: int = DEFAULT_DELAY_MAX_MS
    analyzer_strict: bool = False


def load_settings() -> Settings:
    """Build :class:`Settings` from the environment, falling back on bad values."""
    api_url = os.getenv(API_URL_ENV, "").strip() or DEFAULT_API_URL
    output_path = os.getenv(OUTPUT_PATH_ENV, "").strip() or DEFAULT_OUTPUT_PATH

    max_requests: int | None = _env_int(MAX_REQUESTS_ENV, 0, min_value=0)
    if not max_requests:
        max_requests = None

    delay_min_ms = _env_int(DELAY_MIN_MS_ENV, DEFAULT_DELAY_MIN_MS, min_value=0)
    delay_max_ms = _env_int(DELAY_MAX_MS_ENV, DEFAULT_DELAY_MAX_MS, min_value=0)
    if delay_max_ms <= delay_min_ms:
        logger.warning(
            "Delay bounds are inverted; using defaults (min_ms=%s, max_ms=%s)",
            delay_min_ms,
            delay_max_ms,
        )
        delay_min_ms, delay_max_ms = DEFAULT_DELAY_MIN_MS, DEFAULT_DELAY_MAX_MS

    return Settings(
        api_url=api_url,
        batch_size=_env_int(
            BATCH_SIZE_ENV, DEFAULT_BATCH_SIZE, min_value=1, max_value=MAX_BATCH_SIZE
        ),
        fetch_timeout_sec=_env_positive_float(FETCH_TIMEOUT_SEC_ENV, DEFAULT_FETCH_TIMEOUT_SEC),
        output_path=Path(output_path),
        saturation_threshold=_env_int(
            SATURATION_THRESHOLD_ENV, DEFAULT_SATURATION_THRESHOLD, min_value=1
        ),
        probe_requests=_env_int(PROBE_REQUESTS_ENV, DEFAULT_PROBE_REQUESTS, min_value=1),
        max_requests=max_requests,
        delay_min_ms=delay_min_ms,
        delay_max_ms=delay_max_ms,
        analyzer_strict=is_truthy(os.getenv(ANALYZER_STRICT_ENV, "")),
    )
