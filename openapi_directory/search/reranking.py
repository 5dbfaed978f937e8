"""LLM reranking of ranked candidates."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..constants import ALPHABET, MAX_SHORTLIST, SHORTLIST_PROMPT
from ..exceptions import LLMUnavailableError
from ..integrations.llm.base import LLMProvider
from ..openapi.tokenizer import normalize_text
from ..utils.prompts import objective_prefix
from .ranking import SpecMap, find_operation
from .search_models import APICandidate

logger = logging.getLogger(__name__)


class ShortlistChoice(BaseModel):
    """One pick of the shortlisting model."""

    index: str = Field(description="The letter of the API in the given list")
    reason: str = Field(default="", description="The reasoning for choosing the API, less than 10 words")


class Shortlist(BaseModel):
    """Shortlisting answer."""

    indexes: List[ShortlistChoice] = Field(default_factory=list)


class LLMReranker:
    """Ask a language model to reorder and filter ranked candidates.

    Reranking never touches the index. When the model is unavailable or answers nothing
    usable, the ranking is returned as it is.
    """

    def __init__(self, llm: LLMProvider, limit: int = MAX_SHORTLIST):
        self.llm = llm
        self.limit = limit

    def build_prompt(
        self,
        candidates: Sequence[APICandidate],
        spec_map: SpecMap,
        objective: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        choices = []
        for letter, candidate in zip(ALPHABET, candidates):
            document = spec_map.get(candidate.spec_id) or {}
            provider = (document.get("info") or {}).get("title") or candidate.spec_id
            operation = find_operation(
                spec_map, candidate.spec_id, candidate.path, candidate.http_method
            )
            description = normalize_text(
                (operation or {}).get("description")
                or (operation or {}).get("summary")
                or (operation or {}).get("operationId")
                or candidate.description
            )
            choices.append(
                f"{letter}. {provider}: {candidate.http_method.upper()} {candidate.path}\n"
                f"'{description}'"
            )

        return SHORTLIST_PROMPT.format(
            objective_prefix=objective_prefix(objective, context),
            choices="\n".join(choices),
            limit=self.limit,
        )

    def rerank(
        self,
        candidates: Sequence[APICandidate],
        spec_map: SpecMap,
        objective: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> List[APICandidate]:
        """Candidates in the order the model picked them, at most `limit` of them."""
        candidates = list(candidates)[: len(ALPHABET)]
        if not candidates:
            return []

        prompt = self.build_prompt(candidates, spec_map, objective, context)
        logger.debug(f"Asking LLM to shortlist the correct APIs:\n{prompt}")

        try:
            answer = self.llm.generate_structured(prompt, Shortlist)
        except LLMUnavailableError as e:
            logger.warning(f"LLM shortlisting unavailable, keeping ranking: {e}")
            return candidates

        picked: List[int] = []
        for choice in answer.indexes:
            letter = choice.index.strip().rstrip(".").upper()
            position = ALPHABET.find(letter) if len(letter) == 1 else -1
            if position < 0 or position >= len(candidates) or position in picked:
                logger.debug(f"Ignoring shortlist index {choice.index!r}")
                continue
            picked.append(position)
            if len(picked) >= self.limit:
                break

        if not picked:
            logger.warning("LLM shortlisted nothing usable, keeping ranking")
            return candidates

        logger.info(f"Shortlisted {len(picked)} of {len(candidates)} candidates")
        return [candidates[position] for position in picked]


__all__ = ["LLMReranker", "Shortlist", "ShortlistChoice"]
