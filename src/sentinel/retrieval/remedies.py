"""
Remedy Retrieval
================

Ranks past resolutions against the risk factors of the current
assessment.

The default implementation is a deterministic keyword-boosted re-rank
over a static corpus: each remedy starts from its stored base similarity
and gains a fixed boost for every risk category token that also appears
in its error pattern. Callers depend only on the RemedySearch protocol,
so an embedding-based nearest-neighbour search can be dropped in later.
"""

import logging
from typing import Dict, Iterable, Optional, Protocol, Sequence, runtime_checkable

from src.core.config import settings
from src.sentinel.models import RemedyMatch, RemedyRecord, RemedySearchResult, ScoreBreakdownEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class RemedySearch(Protocol):
    """Interface for remedy retrieval backends."""

    def rank(
        self,
        risk_factors: Sequence[ScoreBreakdownEntry],
        top_k: int = 3,
    ) -> RemedySearchResult:
        ...


class KeywordRemedyRetriever:
    """
    Keyword-boosted re-rank over a static remedy corpus.

    A boost applies when a risk factor's category equals the boost keyword
    and the remedy's pattern tokens contain the same keyword. Adjusted
    similarity is capped at 1.0 and rounded to 3 decimals.
    """

    index_name = "remedies"
    query_type = "keyword-boosted re-rank"

    def __init__(
        self,
        corpus: Iterable[RemedyRecord],
        keyword_boosts: Optional[Dict[str, float]] = None,
    ):
        self.corpus = list(corpus)
        self.keyword_boosts = dict(settings.sentinel.keyword_boosts if keyword_boosts is None else keyword_boosts)

    def _adjusted_similarity(self, remedy: RemedyRecord, categories: set) -> float:
        similarity = remedy.base_similarity
        tokens = set(remedy.pattern_tokens)
        for keyword, boost in self.keyword_boosts.items():
            if keyword in categories and keyword in tokens:
                similarity = min(similarity + boost, 1.0)
        return round(similarity, 3)

    def rank(
        self,
        risk_factors: Sequence[ScoreBreakdownEntry],
        top_k: int = 3,
    ) -> RemedySearchResult:
        """
        Rank the corpus for the given risk factors.

        Args:
            risk_factors: Breakdown entries of the current assessment
            top_k: Number of matches to return

        Returns:
            RemedySearchResult with at most top_k hits, best first
        """
        categories = {factor.category for factor in risk_factors}

        scored = [
            RemedyMatch(remedy=remedy, similarity=self._adjusted_similarity(remedy, categories))
            for remedy in self.corpus
        ]
        # sorted() is stable: ties keep corpus order
        scored = sorted(scored, key=lambda match: match.similarity, reverse=True)

        hits = scored[:top_k]
        logger.debug(
            f"Ranked {len(scored)} remedies for categories={sorted(categories)}: "
            f"{[(m.remedy.id, m.similarity) for m in hits]}"
        )

        return RemedySearchResult(
            hits=hits,
            total=len(scored),
            index=self.index_name,
            query_type=self.query_type,
        )
