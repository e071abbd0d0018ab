"""JSON export functionality for ranked candidates."""

import json
from pathlib import Path
from typing import Any, TextIO

from roommate_match.models.pydantic_models import CandidateMatch


def match_to_dict(match: CandidateMatch) -> dict[str, Any]:
    """Convert a CandidateMatch to a JSON-serializable dictionary."""
    return match.model_dump(mode="json")


def export_to_json(
    matches: list[CandidateMatch],
    output: Path | TextIO | None = None,
    user_id: str | None = None,
    indent: int = 2,
) -> str:
    """Export ranked candidates to JSON format.

    Args:
        matches: Candidates in ranking order.
        output: Optional file path or file-like object. If None, returns string.
        user_id: Viewing user the ranking was computed for.
        indent: JSON indentation level.

    Returns:
        JSON string if output is None, empty string otherwise.
    """
    data = {
        "user_id": user_id,
        "count": len(matches),
        "matches": [match_to_dict(match) for match in matches],
    }

    if output is None:
        return json.dumps(data, indent=indent, ensure_ascii=False)

    if isinstance(output, Path):
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        return ""

    json.dump(data, output, indent=indent, ensure_ascii=False)
    return ""
