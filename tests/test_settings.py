import logging
from pathlib import Path

import pytest

from quiz_harvest import settings


@pytest.fixture(autouse=True)
def clear_quiz_env(monkeypatch):
    for name in (
        settings.API_URL_ENV,
        settings.BATCH_SIZE_ENV,
        settings.FETCH_TIMEOUT_SEC_ENV,
        settings.OUTPUT_PATH_ENV,
        settings.SATURATION_THRESHOLD_ENV,
        settings.PROBE_REQUESTS_ENV,
        settings.MAX_REQUESTS_ENV,
        settings.DELAY_MIN_MS_ENV,
        settings.DELAY_MAX_MS_ENV,
        settings.ANALYZER_STRICT_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_settings_defaults():
    loaded = settings.load_settings()

    assert loaded == settings.Settings()
    assert loaded.batch_size == 20
    assert loaded.saturation_threshold == 6
    assert loaded.probe_requests == 3
    assert loaded.max_requests is None
    assert loaded.output_path == Path("unique_quizzes.json")


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("QUIZ_BATCH_SIZE", "10")
    monkeypatch.setenv("QUIZ_MAX_REQUESTS", "100")
    monkeypatch.setenv("QUIZ_OUTPUT_PATH", "data/out.json")
    monkeypatch.setenv("ANALYZER_STRICT", "yes")

    loaded = settings.load_settings()

    assert loaded.batch_size == 10
    assert loaded.max_requests == 100
    assert loaded.output_path == Path("data/out.json")
    assert loaded.analyzer_strict is True


def test_invalid_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("QUIZ_BATCH_SIZE", "200")
    monkeypatch.setenv("QUIZ_FETCH_TIMEOUT_SEC", "-1")

    with caplog.at_level(logging.WARNING, logger="quiz_harvest.settings"):
        loaded = settings.load_settings()

    assert loaded.batch_size == 20
    assert loaded.fetch_timeout_sec == 20.0
    assert "QUIZ_BATCH_SIZE" in caplog.text
    assert "QUIZ_FETCH_TIMEOUT_SEC" in caplog.text


def test_inverted_delay_bounds_use_defaults(monkeypatch):
    monkeypatch.setenv("QUIZ_DELAY_MIN_MS", "3000")
    monkeypatch.setenv("QUIZ_DELAY_MAX_MS", "100")

    loaded = settings.load_settings()

    assert (loaded.delay_min_ms, loaded.delay_max_ms) == (1200, 4200)


def test_non_numeric_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("QUIZ_PROBE_REQUESTS", "three")
    monkeypatch.setenv("QUIZ_FETCH_TIMEOUT_SEC", "soon")

    with caplog.at_level(logging.WARNING, logger="quiz_harvest.settings"):
        loaded = settings.load_settings()

    assert loaded.probe_requests == 3
    assert loaded.fetch_timeout_sec == 20.0
    assert "QUIZ_PROBE_REQUESTS" in caplog.text
    assert "QUIZ_FETCH_TIMEOUT_SEC" in caplog.text
