"""
Turn numeric lists (revenue timelines, numbered metrics) into data point chunks.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .....core.models import ChunkDraft
from ..boundaries import estimate_tokens, split_lines
from .base import ChunkingStrategy

# "2014 = $450/mo", "2015 = 1,500k (after launch)"
YEAR_VALUE_LINE = re.compile(
    r"^(\d{4})\s*=\s*\$?([\d,]+(?:\.\d+)?)(/month|/mo|k|m)?\s*(\(.*?\))?",
    re.IGNORECASE,
)
# "1. First item", "2) Second item"
INDEXED_LINE = re.compile(r"^(\d+)[.)]\s+(.+)$")

MONTHLY_SUFFIXES = {"/mo", "/month"}
SUMMARY_EVIDENCE_CHARS = 500


def parse_numeric_line(line: str) -> Optional[Dict[str, Any]]:
    """Parse one list line into a data point, or None if it is not numeric."""
    match = YEAR_VALUE_LINE.match(line)
    if match:
        year = int(match.group(1))
        suffix = match.group(3) or ""
        value = match.group(2) + suffix
        note = match.group(4).strip("()").strip() if match.group(4) else None
        fields: Dict[str, Any] = {"year": year, "value": value}
        if suffix.lower() in MONTHLY_SUFFIXES:
            fields["period"] = "monthly"
        return {
            "year": year,
            "value": value,
            "note": note or None,
            "raw_line": line,
            "fields": fields,
        }

    match = INDEXED_LINE.match(line)
    if match:
        index = int(match.group(1))
        value = match.group(2).strip()
        return {
            "index": index,
            "value": value,
            "raw_line": line,
            "fields": {"index": index, "value": value},
        }

    return None


def summarize_data_points(points: List[Dict[str, Any]]) -> str:
    if all("year" in point for point in points):
        years = [point["year"] for point in points]
        first, last = min(years), max(years)
        return (
            f"Revenue/metrics timeline from {first} to {last} showing "
            f"{len(points)} data points across {last - first + 1}-year period"
        )
    return f"Numeric list with {len(points)} data points"


def format_data_point(point: Dict[str, Any]) -> str:
    if "year" in point:
        text = f"In {point['year']}: {point['value']}"
        if point.get("note"):
            text += f" ({point['note']})"
        return text
    if "index" in point:
        return f"{point['index']}. {point['value']}"
    return point["raw_line"]


class ListToDataPointsStrategy(ChunkingStrategy):
    """One summary chunk plus one chunk per parsed data point."""

    def generate_chunks(self, item: Any, text: str) -> list[ChunkDraft]:
        points = [p for p in (parse_numeric_line(line) for line in split_lines(text)) if p]
        if not points:
            return []

        summary = summarize_data_points(points)
        chunks = [
            ChunkDraft(
                text=summary,
                role="metric",
                authority="medium",
                confidence=0.8,
                token_count=estimate_tokens(summary),
                source_text=text[:SUMMARY_EVIDENCE_CHARS],
                source_spans=[{"start": 0, "end": len(text), "basis": "raw_text"}],
                transformation_type="normalized",
            )
        ]

        for point in points:
            chunk_text = format_data_point(point)
            chunks.append(
                ChunkDraft(
                    text=chunk_text,
                    role="metric",
                    authority="medium",
                    confidence=0.7,
                    token_count=estimate_tokens(chunk_text),
                    source_text=point["raw_line"],
                    transformation_type="extractive",
                    metadata={
                        "data_type": "time_series" if "year" in point else "ordered_list",
                        "fields": point["fields"],
                    },
                )
            )

        return chunks
