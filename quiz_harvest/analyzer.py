"""Descriptive statistics over a collected question file."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from pathlib import Path
from typing import Iterable

import markdown

from quiz_harvest.models import Difficulty, QuestionRecord, QuizCollection
from quiz_harvest.storage import load_collection


TOP_CATEGORY_LIMIT = 10
logger = logging.getLogger(__name__)


@dataclass
class QuizStats:
    total_unique: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_difficulty: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)
    top_categories: list[tuple[str, int]] = field(default_factory=list)
    examples: dict[str, QuestionRecord] = field(default_factory=dict)

    @property
    def category_total(self) -> int:
        return len(self.by_category)


def count_by(values: Iterable[str]) -> dict[str, int]:
    """Count values, keeping first-seen order."""
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return count / total * 100


def top_categories(category_counts: dict[str, int], limit: int = TOP_CATEGORY_LIMIT) -> list[tuple[str, int]]:
    # sorted() is stable, so ties keep first-seen order.
    return sorted(category_counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def examples_by_difficulty(quizzes: Iterable[QuestionRecord]) -> dict[str, QuestionRecord]:
    examples: dict[str, QuestionRecord] = {}
    for quiz in quizzes:
        examples.setdefault(quiz.difficulty.value, quiz)
    return {level.value: examples[level.value] for level in Difficulty if level.value in examples}


def build_stats(collection: QuizCollection) -> QuizStats:
    quizzes = collection.quizzes
    by_category = count_by(quiz.category for quiz in quizzes)
    return QuizStats(
        total_unique=collection.total_unique,
        by_type=count_by(quiz.kind.value for quiz in quizzes),
        by_difficulty=count_by(quiz.difficulty.value for quiz in quizzes),
        by_category=by_category,
        top_categories=top_categories(by_category),
        examples=examples_by_difficulty(quizzes),
    )


def _format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return value or "unknown"


def render_report(stats: QuizStats, last_updated: str = "") -> list[str]:
    """Return the console report as a list of lines."""
    lines: list[str] = []
    lines.append("STATISTICS OF COLLECTED QUIZZES")
    lines.append("")
    lines.append(f"Total unique quizzes: {stats.total_unique}")
    lines.append(f"Last updated: {_format_timestamp(last_updated)}")

    lines.append("")
    lines.append("By types:")
    for kind, count in stats.by_type.items():
        lines.append(f"   {kind}: {count} ({percentage(count, stats.total_unique):.1f}%)")

    lines.append("")
    lines.append("By difficulty:")
    for difficulty, count in stats.by_difficulty.items():
        lines.append(f"   {difficulty}: {count} ({percentage(count, stats.total_unique):.1f}%)")

    lines.append("")
    lines.append(f"Top-{TOP_CATEGORY_LIMIT} categories:")
    for position, (category, count) in enumerate(stats.top_categories, start=1):
        lines.append(f"   {position}. {category}: {count} quizzes")

    lines.append("")
    lines.append(f"Total categories: {stats.category_total}")

    lines.append("")
    lines.append("Examples of questions:")
    for difficulty, example in stats.examples.items():
        lines.append("")
        lines.append(f"   {difficulty.upper()}: {example.question}")
        lines.append(f"   Answer: {example.correct_answer}")
    return lines


def render_markdown(stats: QuizStats, last_updated: str = "") -> str:
    lines: list[str] = []
    lines.append("# Quiz Collection Statistics")
    lines.append("")
    lines.append(f"- Total unique quizzes: {stats.total_unique}")
    lines.append(f"- Last updated: {_format_timestamp(last_updated)}")
    lines.append(f"- Total categories: {stats.category_total}")
    lines.append("")
    for title, counts in (("By type", stats.by_type), ("By difficulty", stats.by_difficulty)):
        lines.append(f"## {title}")
        lines.append("")
        lines.append("| Value | Count | Share |")
        lines.append("|---|---:|---:|")
        for value, count in counts.items():
            lines.append(f"| {value} | {count} | {percentage(count, stats.total_unique):.1f}% |")
        lines.append("")
    lines.append(f"## Top {TOP_CATEGORY_LIMIT} categories")
    lines.append("")
    for position, (category, count) in enumerate(stats.top_categories, start=1):
        lines.append(f"{position}. {category}: {count}")
    lines.append("")
    lines.append("## Examples")
    lines.append("")
    for difficulty, example in stats.examples.items():
        lines.append(f"- **{difficulty}**: {example.question} (answer: {example.correct_answer})")
    return "\n".join(lines) + "\n"


def write_markdown_report(stats: QuizStats, output_dir: Path | str, last_updated: str = "") -> Path:
    """Write ``quiz-stats.md`` and an HTML rendering next to it."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    text = render_markdown(stats, last_updated)
    report_path = out_dir / "quiz-stats.md"
    report_path.write_text(text, encoding="utf-8")

    html_body = markdown.markdown(text, extensions=["tables"])
    html_doc = (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        "<head><meta charset=\"UTF-8\"><meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\">"
        "<title>Quiz Collection Statistics</title></head>\n"
        f"<body>{html_body}</body>\n"
        "</html>\n"
    )
    (out_dir / "quiz-stats.html").write_text(html_doc, encoding="utf-8")
    return report_path


def analyze(
    path: Path | str,
    *,
    strict: bool = False,
    markdown_dir: Path | str | None = None,
) -> int:
    """Print the report for ``path`` and return the process exit code.

    A missing file is not an error. A file that cannot be loaded, or a
    Markdown report that cannot be written, returns 1 only when ``strict``
    is set.
    """
    data_path = Path(path)
    result = load_collection(data_path)
    if not result.found:
        print(f"File {data_path} not found. Run the collector first.")
        return 0
    if result.error:
        logger.error("Error analyzing data (path=%s): %s", data_path, result.error)
        print(f"Error analyzing data: {result.error}")
        return 1 if strict else 0

    stats = build_stats(result.collection)
    for line in render_report(stats, result.collection.last_updated):
        print(line)
    if result.skipped:
        print(f"\nSkipped {len(result.skipped)} invalid stored quizzes.")

    if markdown_dir is not None:
        try:
            report_path = write_markdown_report(stats, markdown_dir, result.collection.last_updated)
        except OSError as exc:
            logger.error("Error writing markdown report (dir=%s): %s", markdown_dir, exc)
            print(f"\nError writing markdown report: {exc}")
            return 1 if strict else 0
        print(f"\nMarkdown report: {report_path}")
    return 0
