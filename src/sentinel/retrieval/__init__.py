"""
Similarity Retriever
====================

Usage:
    from src.sentinel.retrieval import KeywordRemedyRetriever

    retriever = KeywordRemedyRetriever(store.get_remedies())
    result = retriever.rank(assessment.breakdown, top_k=3)
"""

from src.sentinel.retrieval.remedies import (
    RemedySearch,
    KeywordRemedyRetriever,
)

__all__ = [
    "RemedySearch",
    "KeywordRemedyRetriever",
]
