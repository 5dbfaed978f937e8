"""Ranking and reranking of retrieval results."""

from .ranking import CandidateRanker
from .reranking import LLMReranker
from .search_models import APICandidate, Match

__all__ = ["APICandidate", "CandidateRanker", "LLMReranker", "Match"]
