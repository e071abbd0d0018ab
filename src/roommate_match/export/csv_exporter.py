"""CSV export functionality for ranked candidates."""

import csv
from io import StringIO
from pathlib import Path
from typing import TextIO

from roommate_match.models.pydantic_models import CandidateMatch

# Columns to export
EXPORT_COLUMNS = [
    "rank",
    "user_id",
    "display_name",
    "score",
    "cached",
    "computed_at",
]


def match_to_row(match: CandidateMatch, rank: int) -> dict[str, str]:
    """Convert a CandidateMatch to a CSV row dictionary.

    Args:
        match: Candidate match.
        rank: 1-based position in the ranking.

    Returns:
        Dictionary with column names as keys.
    """
    return {
        "rank": str(rank),
        "user_id": match.user_id,
        "display_name": match.display_name or "",
        "score": str(match.score),
        "cached": "yes" if match.cached else "no",
        "computed_at": match.computed_at.isoformat() if match.computed_at else "",
    }


def export_to_csv(
    matches: list[CandidateMatch],
    output: Path | TextIO | None = None,
) -> str:
    """Export ranked candidates to CSV format.

    Args:
        matches: Candidates in ranking order.
        output: Optional file path or file-like object. If None, returns string.

    Returns:
        CSV string if output is None, empty string otherwise.
    """
    rows = [match_to_row(match, rank) for rank, match in enumerate(matches, 1)]

    if output is None:
        buffer = StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue()

    if isinstance(output, Path):
        with open(output, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        return ""

    writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return ""
