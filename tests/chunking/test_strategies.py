"""Tests for the deterministic chunking strategies."""

import pytest

from chunkflow.pipeline.steps.chunk.router import select_strategy
from chunkflow.pipeline.steps.chunk.strategies import (
    FallbackSentenceStrategy,
    ListToDataPointsStrategy,
    ShortPostClaimStrategy,
)
from chunkflow.pipeline.steps.chunk.strategies.fallback_sentence import (
    extract_candidate_sentences,
    score_sentence,
)
from chunkflow.pipeline.steps.chunk.strategies.list_to_data_points import parse_numeric_line

pytestmark = pytest.mark.unit

CHURN_TEXT = (
    "Churn hurts recurring revenue because it compounds over twelve months. "
    "We reduced churn from 8% to 3% in Q1 2024 by seeding onboarding emails."
)


class TestListToDataPoints:
    def test_three_year_timeline(self):
        text = "2014 = $450/mo\n2015 = $1500/mo\n2016 = $3000/mo"
        chunks = ListToDataPointsStrategy().generate_chunks(None, text)

        assert len(chunks) == 4
        summary, *points = chunks
        assert "2014 to 2016" in summary.text
        assert "3 data points" in summary.text
        assert summary.transformation_type == "normalized"
        assert summary.confidence == 0.8
        assert summary.source_spans == [{"start": 0, "end": len(text), "basis": "raw_text"}]

        assert [p.metadata["fields"]["year"] for p in points] == [2014, 2015, 2016]
        assert [p.metadata["fields"]["value"] for p in points] == ["450/mo", "1500/mo", "3000/mo"]
        assert points[0].text == "In 2014: 450/mo"
        assert points[0].source_text == "2014 = $450/mo"
        assert all(p.metadata["data_type"] == "time_series" for p in points)
        assert all(p.role == "metric" and p.confidence == 0.7 for p in points)
        assert all(p.transformation_type == "extractive" for p in points)

    def test_note_and_monthly_period(self):
        point = parse_numeric_line("2016 = $3,500/mo (after launch)")

        assert point["year"] == 2016
        assert point["value"] == "3,500/mo"
        assert point["note"] == "after launch"
        assert point["fields"] == {"year": 2016, "value": "3,500/mo", "period": "monthly"}

    def test_indexed_list(self):
        text = "1. Pick one niche\n2) Write every single day\n3. Publish weekly"
        chunks = ListToDataPointsStrategy().generate_chunks(None, text)

        assert chunks[0].text == "Numeric list with 3 data points"
        assert [c.text for c in chunks[1:]] == [
            "1. Pick one niche",
            "2. Write every single day",
            "3. Publish weekly",
        ]
        assert chunks[2].metadata == {
            "data_type": "ordered_list",
            "fields": {"index": 2, "value": "Write every single day"},
        }

    def test_unparseable_lines_are_ignored(self):
        text = "Our revenue:\n2019 = $10k\nfun year\n2020 = $25k"
        chunks = ListToDataPointsStrategy().generate_chunks(None, text)

        assert len(chunks) == 3
        assert chunks[1].text == "In 2019: 10k"

    def test_no_numeric_lines_yields_nothing(self):
        assert ListToDataPointsStrategy().generate_chunks(None, "nothing\nto parse\nhere") == []

    def test_summary_evidence_is_capped(self):
        text = "\n".join(f"{year} = ${year}" for year in range(1900, 2000))
        summary = ListToDataPointsStrategy().generate_chunks(None, text)[0]

        assert len(summary.source_text) == 500
        assert "1900 to 1999" in summary.text


class TestShortPostClaim:
    def test_first_two_qualifying_sentences(self):
        text = (
            "Most founders underprice their product in the first year of selling.\n"
            "Raise your prices every quarter until some customers start to complain.\n"
            "Then keep going until the complaints get a little louder than before."
        )
        chunks = ShortPostClaimStrategy().generate_chunks(None, text)

        assert [c.role for c in chunks] == ["strategic_claim", "instruction"]
        assert chunks[0].text.startswith("Most founders")
        assert chunks[1].text.startswith("Raise your prices")
        assert all(c.authority == "medium" and c.confidence == 0.6 for c in chunks)
        assert all(c.source_text == c.text for c in chunks)

    def test_url_lines_and_short_fragments_are_skipped(self):
        text = (
            "https://example.com/post this link opens the thread\n"
            "Wow.\n"
            "Too short here.\n"
            "Cold email still works when every line is written for one reader."
        )
        chunks = ShortPostClaimStrategy().generate_chunks(None, text)

        assert len(chunks) == 1
        assert chunks[0].text == "Cold email still works when every line is written for one reader."
        assert chunks[0].role == "strategic_claim"

    def test_nothing_qualifies(self):
        assert ShortPostClaimStrategy().generate_chunks(None, "Good job.\nGood job.\nGood job.") == []


class TestFallbackSentence:
    def test_churn_example(self):
        strategy = select_strategy("plain_text", 24)
        assert isinstance(strategy, FallbackSentenceStrategy)

        chunks = strategy.generate_chunks(None, CHURN_TEXT)

        assert len(chunks) == 2
        assert chunks[0].text.startswith("We reduced churn")
        assert chunks[1].text.startswith("Churn hurts")
        assert all(c.role == "heuristic" for c in chunks)
        assert all(c.authority == "low" and c.confidence == 0.5 for c in chunks)

    def test_scores(self):
        assert score_sentence("We reduced churn from 8% to 3% in Q1 2024 by seeding onboarding emails.") == 3.0
        assert score_sentence("Churn hurts recurring revenue because it compounds over twelve months.") == 1.5

    def test_each_signal_counts_once(self):
        assert score_sentence("You should use templates and add checklists but avoid long forms.") == 1.0
        assert (
            score_sentence(
                "Retention improves because onboarding therefore matters so much for every new customer."
            )
            == 2.5
        )

    def test_equal_scores_keep_document_order(self):
        text = (
            "Alpha teams ship faster because they review early. "
            "Beta teams learn quicker because they talk daily. "
            "Gamma teams grow steadily because they hire well. "
            "Delta teams churn less because they listen closely."
        )
        chunks = FallbackSentenceStrategy().generate_chunks(None, text)

        assert [c.text.split()[0] for c in chunks] == ["Alpha", "Beta", "Gamma"]

    def test_zero_score_sentences_are_dropped(self):
        text = "The weather was pleasant on the long walk home. Churn fell 40% after we fixed onboarding."
        chunks = FallbackSentenceStrategy().generate_chunks(None, text)

        assert [c.text for c in chunks] == ["Churn fell 40% after we fixed onboarding."]

    def test_candidates_skip_short_and_url_sentences(self):
        text = "Tiny one. https://example.com/a/very/long/path/to/something/else. A sentence that is long enough to count."
        assert extract_candidate_sentences(text) == ["A sentence that is long enough to count."]
