"""Environment and configuration diagnostics for CLI."""

from __future__ import annotations

import json
import os

from quiz_harvest import settings


def _check_int(errors: list[str], env_name: str, default: str, min_value: int, max_value: int | None = None) -> None:
    text = os.getenv(env_name, default).strip()
    if not text:
        return
    try:
        value = int(text)
    except ValueError:
        errors.append(f"{env_name} must be an integer")
        return
    if value < min_value:
        errors.append(f"{env_name} must be >= {min_value}")
    elif max_value is not None and value > max_value:
        errors.append(f"{env_name} must be <= {max_value}")


def run_doctor() -> dict[str, list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    infos: list[str] = []

    api_url = os.getenv(settings.API_URL_ENV, "").strip()
    if api_url and not (api_url.startswith("http://") or api_url.startswith("https://")):
        errors.append(f"{settings.API_URL_ENV} must start with http:// or https://")
    infos.append(f"API endpoint: {api_url or settings.DEFAULT_API_URL}")

    _check_int(errors, settings.BATCH_SIZE_ENV, "20", 1, settings.MAX_BATCH_SIZE)
    _check_int(errors, settings.SATURATION_THRESHOLD_ENV, "6", 1)
    _check_int(errors, settings.PROBE_REQUESTS_ENV, "3", 1)
    _check_int(errors, settings.MAX_REQUESTS_ENV, "0", 0)
    _check_int(errors, settings.DELAY_MIN_MS_ENV, "1200", 0)
    _check_int(errors, settings.DELAY_MAX_MS_ENV, "4200", 0)

    timeout = os.getenv(settings.FETCH_TIMEOUT_SEC_ENV, "20").strip()
    if timeout:
        try:
            if float(timeout) <= 0:
                errors.append(f"{settings.FETCH_TIMEOUT_SEC_ENV} must be > 0")
        except ValueError:
            errors.append(f"{settings.FETCH_TIMEOUT_SEC_ENV} must be a number")

    try:
        delay_min = int(os.getenv(settings.DELAY_MIN_MS_ENV, str(settings.DEFAULT_DELAY_MIN_MS)))
        delay_max = int(os.getenv(settings.DELAY_MAX_MS_ENV, str(settings.DEFAULT_DELAY_MAX_MS)))
    except ValueError:
        pass
    else:
        if delay_max <= delay_min:
            errors.append(f"{settings.DELAY_MAX_MS_ENV} must be greater than {settings.DELAY_MIN_MS_ENV}")
        elif delay_min < 1000:
            warnings.append(f"{settings.DELAY_MIN_MS_ENV} is below 1000ms; the API may rate limit requests")

    if not os.getenv(settings.MAX_REQUESTS_ENV, "").strip():
        warnings.append(f"{settings.MAX_REQUESTS_ENV} is not set (collection is bounded only by saturation)")

    output_path = os.getenv(settings.OUTPUT_PATH_ENV, "").strip() or settings.DEFAULT_OUTPUT_PATH
    infos.append(f"Output file: {output_path}")

    return {"errors": errors, "warnings": warnings, "infos": infos}


def print_doctor_report() -> bool:
    result = run_doctor()
    errors = result["errors"]
    warnings = result["warnings"]

    print("Doctor report")
    print(f"- errors: {len(errors)}")
    print(f"- warnings: {len(warnings)}")

    for item in result["infos"]:
        print(f"INFO: {item}")
    for item in warnings:
        print(f"WARN: {item}")
    for item in errors:
        print(f"ERROR: {item}")

    ok = len(errors) == 0
    if ok:
        print("Doctor check passed.")
    return ok


def print_doctor_report_json() -> bool:
    result = run_doctor()
    ok = len(result["errors"]) == 0
    payload = {
        "ok": ok,
        "errors": result["errors"],
        "warnings": result["warnings"],
        "infos": result["infos"],
    }
    print(json.dumps(payload, ensure_ascii=False))
    return ok
