"""Tests for timeframe to time-horizon bucketing."""

import pytest

from chunkflow.pipeline.steps.chunk.persistence import chunk_source_type, map_time_horizon

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "timeframe,expected",
    [
        ("2025", "current"),
        ("in 2023", "current"),
        ("2026", "near_term"),
        ("by 2030", "long_term"),
        ("next quarter", "near_term"),
        ("coming soon", "near_term"),
        ("long run", "long_term"),
        ("multi-year", "long_term"),
        ("Q3", "unknown"),
        ("unknown", "unknown"),
        ("  ", "unknown"),
        (None, "unknown"),
    ],
)
def test_map_time_horizon(timeframe, expected):
    assert map_time_horizon(timeframe, now_year=2025) == expected


def test_old_year_falls_back_to_keywords():
    assert map_time_horizon("2019", now_year=2025) == "unknown"
    assert map_time_horizon("the 2019 year", now_year=2025) == "long_term"


def test_year_must_stand_alone():
    assert map_time_horizon("sku20251", now_year=2025) == "unknown"


@pytest.mark.parametrize(
    "source,expected",
    [("manual", "text"), ("", "text"), (None, "text"), ("bookmark", "bookmark"), ("platform", "platform")],
)
def test_chunk_source_type(source, expected):
    assert chunk_source_type(source) == expected
