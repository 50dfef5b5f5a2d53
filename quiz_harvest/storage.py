"""Load and save the persisted question collection.

Both operations report failures as values instead of raising so the caller
decides how severe a failure is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import shutil
import tempfile
from typing import Iterable

from quiz_harvest.models import QuestionRecord, QuizCollection
from quiz_harvest.schema_validation import validate_collection_payload, validate_question_payload


logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    collection: QuizCollection
    error: str | None = None
    found: bool = True
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SaveResult:
    ok: bool
    path: Path
    total_unique: int = 0
    error: str | None = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_collection(path: Path | str) -> LoadResult:
    """Read a collection file.

    A missing file yields an empty collection with ``found=False``. A file
    that cannot be read, parsed, or validated as a whole yields an empty
    collection and an ``error`` message. Individual questions that fail
    validation are skipped and listed in ``skipped``.
    """
    collection_path = Path(path)
    if not collection_path.exists():
        return LoadResult(QuizCollection(), found=False)

    try:
        payload = json.loads(collection_path.read_text(encoding="utf-8"))
        validate_collection_payload(payload)
    except (OSError, ValueError) as exc:
        logger.error("Error loading quiz collection (path=%s): %s", collection_path, exc)
        return LoadResult(QuizCollection(), error=str(exc))

    quizzes: list[QuestionRecord] = []
    skipped: list[str] = []
    for position, item in enumerate(payload["quizzes"]):
        try:
            validate_question_payload(item)
            quizzes.append(QuestionRecord.from_dict(item))
        except ValueError as exc:
            skipped.append(f"quizzes[{position}]: {exc}")
    if skipped:
        logger.warning(
            "Skipped %s invalid stored quizzes (path=%s); first: %s",
            len(skipped),
            collection_path,
            skipped[0],
        )

    if payload["total_unique"] != len(payload["quizzes"]):
        logger.warning(
            "Stored total_unique does not match quiz count (stored=%s, actual=%s)",
            payload["total_unique"],
            len(payload["quizzes"]),
        )
    return LoadResult(QuizCollection(last_updated=payload["last_updated"], quizzes=quizzes), skipped=skipped)


def backup_collection(path: Path | str) -> Path | None:
    """Copy ``path`` to a timestamped ``.bak`` sibling, or return ``None`` on failure."""
    collection_path = Path(path)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    backup_file = collection_path.with_name(f"{collection_path.stem}-{timestamp}.bak{collection_path.suffix}")
    try:
        shutil.copy2(collection_path, backup_file)
    except OSError as exc:
        logger.error("Error backing up quiz collection (path=%s): %s", collection_path, exc)
        return None
    return backup_file


def save_collection(records: Iterable[QuestionRecord], path: Path | str) -> SaveResult:
    """Overwrite ``path`` with the full collection.

    The file is written to a temporary sibling and swapped in, so a crash
    mid-write leaves the previous file intact.
    """
    collection_path = Path(path)
    collection = QuizCollection(last_updated=_now_iso(), quizzes=list(records))

    try:
        collection_path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temp_path = tempfile.mkstemp(
            prefix=f".{collection_path.name}.",
            suffix=".tmp",
            dir=str(collection_path.parent),
        )
        temp_file = Path(temp_path)
        try:
            with os.fdopen(file_descriptor, "w", encoding="utf-8", newline="\n") as handle:
                json.dump(collection.to_dict(), handle, ensure_ascii=False, indent=2)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            temp_file.replace(collection_path)
        finally:
            if temp_file.exists():
                temp_file.unlink(missing_ok=True)
    except OSError as exc:
        logger.error("Error saving quiz collection (path=%s): %s", collection_path, exc)
        return SaveResult(ok=False, path=collection_path, total_unique=collection.total_unique, error=str(exc))

    return SaveResult(ok=True, path=collection_path, total_unique=collection.total_unique)
