"""
Unit tests for sentinel.retrieval.remedies module.

Tests the keyword-boosted re-rank: boost matching, capping, ordering
and result metadata.
"""

import pytest

from src.core.config import settings
from src.sentinel.models import RemedyRecord, ScoreBreakdownEntry
from src.sentinel.retrieval import KeywordRemedyRetriever, RemedySearch


def factor(category: str, delta: int = -10) -> ScoreBreakdownEntry:
    return ScoreBreakdownEntry(factor=category, delta=delta, detail="", category=category)


class TestKeywordRemedyRetriever:
    """Tests for KeywordRemedyRetriever."""

    @pytest.fixture
    def retriever(self, remedy_corpus):
        return KeywordRemedyRetriever(remedy_corpus)

    def test_implements_protocol(self, retriever):
        """Retriever satisfies the RemedySearch protocol."""
        assert isinstance(retriever, RemedySearch)

    def test_default_boosts_come_from_settings(self, retriever):
        assert retriever.keyword_boosts == settings.sentinel.keyword_boosts
        assert retriever.keyword_boosts == {"500-error": 0.05, "declining-api-calls": 0.04}

    def test_critical_ranking(self, retriever):
        """500-error and decline factors boost the matching remedies."""
        result = retriever.rank([
            factor("declining-api-calls", -30),
            factor("500-error", -20),
            factor("critical-tickets", -30),
        ])

        assert [m.remedy.id for m in result.hits] == ["REM-2025-0442", "REM-2025-0391", "REM-2024-1204"]
        assert [m.similarity for m in result.hits] == [0.99, 0.92, 0.85]
        assert result.total == 3
        assert result.index == "remedies"
        assert result.query_type == "keyword-boosted re-rank"

    def test_no_matching_category_keeps_base(self, retriever):
        """Categories that are not boost keywords leave base similarity untouched."""
        result = retriever.rank([factor("negative-sentiment")])

        assert [m.similarity for m in result.hits] == [0.94, 0.87, 0.81]

    def test_boost_requires_pattern_token(self, retriever):
        """A decline factor only boosts remedies whose pattern names it."""
        result = retriever.rank([factor("declining-api-calls")])

        by_id = {m.remedy.id: m.similarity for m in result.hits}
        assert by_id["REM-2024-1204"] == 0.85
        assert by_id["REM-2025-0442"] == 0.94

    def test_boost_is_capped(self):
        """Adjusted similarity never exceeds 1.0."""
        remedy = RemedyRecord("REM-X", "500-error", "fix", "Enterprise", 1.0, "ok", 0.98)
        result = KeywordRemedyRetriever([remedy]).rank([factor("500-error")])

        assert result.hits[0].similarity == 1.0

    def test_top_k(self, retriever):
        """Only top_k hits are returned; total counts the corpus."""
        result = retriever.rank([factor("500-error")], top_k=1)

        assert len(result.hits) == 1
        assert result.total == 3
        assert result.top.remedy.id == "REM-2025-0442"

    def test_boost_can_reorder(self, sample_remedy):
        """A boosted lower-base remedy can overtake an unboosted one."""
        other = RemedyRecord("REM-Y", "quota", "raise quota", "Starter", 1.0, "ok", 0.52)
        retriever = KeywordRemedyRetriever([other, sample_remedy], keyword_boosts={"500-error": 0.05})

        result = retriever.rank([factor("500-error")])

        assert [m.remedy.id for m in result.hits] == ["REM-TEST-0001", "REM-Y"]
        assert result.hits[0].similarity == 0.55

    def test_ties_keep_corpus_order(self):
        """Equal scores keep their corpus order."""
        first = RemedyRecord("REM-A", "a", "", "", 1.0, "", 0.5)
        second = RemedyRecord("REM-B", "b", "", "", 1.0, "", 0.5)

        result = KeywordRemedyRetriever([first, second]).rank([])

        assert [m.remedy.id for m in result.hits] == ["REM-A", "REM-B"]

    def test_match_to_dict_uses_adjusted_similarity(self, retriever):
        """Serialized hits carry the adjusted score."""
        match = retriever.rank([factor("500-error")]).hits[0]

        assert match.to_dict()["similarity_score"] == 0.99
        assert match.to_dict()["remedy_id"] == "REM-2025-0442"
