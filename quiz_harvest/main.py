"""Entry point for the quiz collector and analyzer."""
from dataclasses import replace
from functools import partial
import logging
import os
from pathlib import Path
import sys

from quiz_harvest.analyzer import analyze
from quiz_harvest.collector import (
    CollectionSummary,
    DelayStrategy,
    Fetcher,
    NoDelay,
    RandomDelay,
    check_idempotency,
    collect_until_saturated,
    load_state,
)
from quiz_harvest.connectors import fetch_quiz_batch
from quiz_harvest.doctor import print_doctor_report, print_doctor_report_json
from quiz_harvest.settings import LOG_LEVEL_ENV, Settings, load_settings


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _option_value(args: list[str], name: str) -> str | None:
    if name in args:
        idx = args.index(name)
        if idx + 1 < len(args):
            return args[idx + 1]
    return None


def run_collector(
    settings: Settings,
    fetch: Fetcher | None = None,
    delay: DelayStrategy | None = None,
) -> CollectionSummary | None:
    """Run the idempotency probe and, if needed, the polling loop.

    Returns ``None`` when the probe finds the stored collection complete.
    """
    if fetch is None:
        fetch = partial(
            fetch_quiz_batch,
            api_url=settings.api_url,
            amount=settings.batch_size,
            timeout=settings.fetch_timeout_sec,
        )
    if delay is None:
        delay = RandomDelay(settings.delay_min_ms, settings.delay_max_ms)

    state, _ = load_state(settings.output_path)
    probe = check_idempotency(state, fetch, delay, probe_requests=settings.probe_requests)
    if probe.is_complete:
        return None

    summary = collect_until_saturated(
        state,
        fetch,
        delay,
        saturation_threshold=settings.saturation_threshold,
        max_requests=settings.max_requests,
    )
    print("\nFinal statistics:")
    print(f"- Total requests: {summary.request_count}")
    print(f"- Total unique quizzes collected: {summary.total_unique}")
    print(f"- Stop reason: {summary.stop_reason}")
    print(f"- File: {summary.output_path}")
    if summary.failed_saves:
        print(f"- Failed saves: {len(summary.failed_saves)}")
    return summary


def handle_collect(args: list[str]) -> int:
    settings = load_settings()

    output = _option_value(args, "--output")
    if output:
        settings = replace(settings, output_path=Path(output))

    max_requests_text = _option_value(args, "--max-requests")
    if max_requests_text is not None:
        try:
            max_requests = int(max_requests_text)
        except ValueError:
            max_requests = -1
        if max_requests < 0:
            print(f"Invalid --max-requests value: {max_requests_text}")
            return 2
        settings = replace(settings, max_requests=max_requests or None)

    delay = NoDelay() if "--no-delay" in args else None

    try:
        run_collector(settings, delay=delay)
    except KeyboardInterrupt:
        print(f"\nCollection interrupted. Last saved data is in {settings.output_path}")
        return 130
    except Exception:
        logger.exception("Critical error during quiz collection")
        return 1

    print("\nScript completed successfully!")
    return 0


def handle_analyze(args: list[str]) -> int:
    settings = load_settings()
    input_path = _option_value(args, "--input") or settings.output_path
    strict = settings.analyzer_strict or "--strict" in args
    markdown_dir = _option_value(args, "--markdown-dir")
    return analyze(input_path, strict=strict, markdown_dir=markdown_dir)


def collect_main() -> int:
    configure_logging()
    return handle_collect(sys.argv[1:])


def analyze_main() -> int:
    configure_logging()
    return handle_analyze(sys.argv[1:])


def main():
    def print_main_usage() -> None:
        print("Usage: python -m quiz_harvest.main <command> [options]")
        print("Commands: collect, analyze, doctor")
        print("  collect [--output PATH] [--max-requests N] [--no-delay]")
        print("  analyze [--input PATH] [--strict] [--markdown-dir DIR]")
        print("  doctor [--json]")

    configure_logging()
    if len(sys.argv) > 1:
        cmd = sys.argv[1]
        if cmd in {"-h", "--help", "help"}:
            print_main_usage()
            return
        if cmd == "collect":
            code = handle_collect(sys.argv[2:])
            if code:
                raise SystemExit(code)
            return
        elif cmd == "analyze":
            code = handle_analyze(sys.argv[2:])
            if code:
                raise SystemExit(code)
            return
        elif cmd == "doctor":
            if "--json" in sys.argv[2:]:
                ok = print_doctor_report_json()
            else:
                ok = print_doctor_report()
            if not ok:
                raise SystemExit(1)
            return
        print(f"Unknown command: {cmd}")

    print_main_usage()


if __name__ == "__main__":
    main()
