"""Polling collector that accumulates unique trivia questions.

The collector keeps an insertion-ordered uniqueness index of questions,
polls the fetch client until the remote source looks saturated, and
rewrites the full collection file after every successful fetch. All state
lives in a :class:`CollectorState` that is built from the stored file and
threaded through the functions below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
import random
import time
from typing import Callable, Iterable, Protocol

from quiz_harvest.models import QuestionRecord, quiz_key
from quiz_harvest.settings import (
    DEFAULT_DELAY_MAX_MS,
    DEFAULT_DELAY_MIN_MS,
    DEFAULT_PROBE_REQUESTS,
    DEFAULT_SATURATION_THRESHOLD,
)
from quiz_harvest.storage import LoadResult, SaveResult, backup_collection, load_collection, save_collection


Fetcher = Callable[[], list[QuestionRecord]]
Saver = Callable[[Iterable[QuestionRecord], Path], SaveResult]
logger = logging.getLogger(__name__)


class QuizIndex:
    """Insertion-ordered set of questions keyed by :func:`quiz_key`."""

    def __init__(self, records: Iterable[QuestionRecord] = ()):
        self._entries: dict[str, QuestionRecord] = {}
        self.merge(records)

    def merge(self, batch: Iterable[QuestionRecord]) -> int:
        """Insert records whose key is new and return how many were inserted.

        Records already present are left untouched; a later duplicate never
        replaces the stored one.
        """
        added = 0
        for record in batch:
            key = quiz_key(record)
            if key in self._entries:
                continue
            self._entries[key] = record
            added += 1
        return added

    def records(self) -> list[QuestionRecord]:
        return list(self._entries.values())

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, record: object) -> bool:
        if isinstance(record, QuestionRecord):
            return quiz_key(record) in self._entries
        return record in self._entries


class DelayStrategy(Protocol):
    def wait(self) -> int:
        """Pause before the next request and return the delay in milliseconds."""


class RandomDelay:
    """Sleep for a fresh random number of milliseconds in ``[min_ms, max_ms)``."""

    def __init__(
        self,
        min_ms: int = DEFAULT_DELAY_MIN_MS,
        max_ms: int = DEFAULT_DELAY_MAX_MS,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ):
        if max_ms <= min_ms:
            raise ValueError(f"max_ms must be greater than min_ms (min_ms={min_ms}, max_ms={max_ms})")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._sleep = sleep
        self._rng = rng or random.Random()

    def next_delay_ms(self) -> int:
        return self._rng.randrange(self.min_ms, self.max_ms)

    def wait(self) -> int:
        delay_ms = self.next_delay_ms()
        self._sleep(delay_ms / 1000)
        return delay_ms


class NoDelay:
    def wait(self) -> int:
        return 0


@dataclass
class CollectorState:
    index: QuizIndex
    output_path: Path
    request_count: int = 0
    consecutive_empty: int = 0
    last_save: SaveResult | None = None


def load_state(output_path: Path | str) -> tuple[CollectorState, LoadResult]:
    """Build the collector state from the stored file (empty if unusable)."""
    path = Path(output_path)
    result = load_collection(path)
    if result.error:
        print(f"Could not load existing quizzes ({result.error}); starting empty.")
    elif result.found:
        print(f"Loaded {result.collection.total_unique} existing quizzes")
    if result.skipped:
        print(f"Skipped {len(result.skipped)} invalid stored quizzes.")
    # The next save overwrites the file, so keep a copy of anything not loaded.
    if result.found and (result.error or result.skipped):
        backup = backup_collection(path)
        if backup is not None:
            print(f"Backed up the previous file to {backup}")
    state = CollectorState(index=QuizIndex(result.collection.quizzes), output_path=path)
    return state, result


def persist(state: CollectorState, save: Saver = save_collection) -> SaveResult:
    result = save(state.index.records(), state.output_path)
    state.last_save = result
    if result.ok:
        print(f"Saved {result.total_unique} unique quizzes to {result.path}")
    else:
        logger.warning("Save failed; in-memory collection is ahead of %s: %s", result.path, result.error)
    return result


class ProbeVerdict(str, Enum):
    MUST_COLLECT = "must_collect"
    IDEMPOTENT = "idempotent"
    CONTINUE = "continue"


@dataclass
class ProbeResult:
    verdict: ProbeVerdict
    new_records: int = 0
    save: SaveResult | None = None

    @property
    def is_complete(self) -> bool:
        return self.verdict is ProbeVerdict.IDEMPOTENT


def check_idempotency(
    state: CollectorState,
    fetch: Fetcher,
    delay: DelayStrategy,
    save: Saver = save_collection,
    probe_requests: int = DEFAULT_PROBE_REQUESTS,
) -> ProbeResult:
    """Sample the source a few times to decide whether collection is finished."""
    print("Checking idempotency...")
    if len(state.index) == 0:
        print("No saved quizzes, starting collection from scratch.")
        return ProbeResult(ProbeVerdict.MUST_COLLECT)

    new_records = 0
    for attempt in range(1, probe_requests + 1):
        print(f"Test request {attempt}/{probe_requests}...")
        batch = fetch()
        if batch:
            new_records += state.index.merge(batch)
        if attempt < probe_requests:
            delay.wait()

    if new_records == 0:
        print("Idempotency confirmed - no new quizzes found.")
        print(f"Total unique quizzes: {len(state.index)}")
        return ProbeResult(ProbeVerdict.IDEMPOTENT)

    print(f"Found {new_records} new quizzes, continue collection.")
    return ProbeResult(ProbeVerdict.CONTINUE, new_records=new_records, save=persist(state, save))


@dataclass
class CollectionSummary:
    request_count: int
    total_unique: int
    added_total: int
    stop_reason: str
    output_path: Path
    failed_saves: list[SaveResult] = field(default_factory=list)


def collect_until_saturated(
    state: CollectorState,
    fetch: Fetcher,
    delay: DelayStrategy,
    save: Saver = save_collection,
    saturation_threshold: int = DEFAULT_SATURATION_THRESHOLD,
    max_requests: int | None = None,
) -> CollectionSummary:
    """Poll until ``saturation_threshold`` consecutive batches add nothing new.

    Empty batches are fetch failures: they are retried after a delay and do
    not touch the saturation counter. ``max_requests`` optionally caps the
    total number of requests for this run.
    """
    print("Starting quiz collection...")
    print(f"Current unique quizzes count: {len(state.index)}")

    added_total = 0
    failed_saves: list[SaveResult] = []

    def summary(stop_reason: str) -> CollectionSummary:
        return CollectionSummary(
            request_count=state.request_count,
            total_unique=len(state.index),
            added_total=added_total,
            stop_reason=stop_reason,
            output_path=state.output_path,
            failed_saves=failed_saves,
        )

    def limit_reached() -> bool:
        return max_requests is not None and state.request_count >= max_requests

    while True:
        state.request_count += 1
        print(f"\nRequest #{state.request_count}...")

        batch = fetch()
        if not batch:
            if limit_reached():
                print(f"Request limit reached ({max_requests}).")
                return summary("max_requests")
            print("Unable to retrieve quizzes, retrying after a delay...")
            delay.wait()
            continue

        added = state.index.merge(batch)
        added_total += added
        print(f"Received {len(batch)} quizzes, added {added} new unique")
        print(f"Total unique quizzes: {len(state.index)}")

        save_result = persist(state, save)
        if not save_result.ok:
            failed_saves.append(save_result)

        if added == 0:
            state.consecutive_empty += 1
            print(f"Empty results count: {state.consecutive_empty}/{saturation_threshold}")
            if state.consecutive_empty >= saturation_threshold:
                print("\nCollection completed! All unique quizzes collected.")
                return summary("saturated")
        else:
            state.consecutive_empty = 0

        if limit_reached():
            print(f"Request limit reached ({max_requests}).")
            return summary("max_requests")

        print("Waiting before next request...")
        delay.wait()
