"""
Input schema negotiation.

Large request schemas do not fit a language model's context. The negotiator splits the
input schema into token-bounded chunks and asks the model, chunk by chunk, which properties
matter for the objective. The picks are merged on top of the required properties, and the
result is deepened back against the full schema so nested structure survives.
"""

import json
import logging
from copy import deepcopy
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .config import config
from .constants import PROPERTY_SHORTLIST_PROMPT
from .integrations.llm.base import LLMProvider
from .schema.algebra import (
    JSONSchema,
    chunk_schema,
    deepen_schema,
    get_sub_schema,
    merge_schema,
    schema_type,
)
from .utils.prompts import objective_prefix

logger = logging.getLogger(__name__)

SCHEMA_KINDS = ("body", "query", "path")


class PropertyShortlist(BaseModel):
    """Properties relevant to the objective."""

    shortlist: List[str] = Field(default_factory=list, description="Names of relevant properties")


def _empty_like(schema: JSONSchema) -> JSONSchema:
    """Schema of the same kind as schema that selects no properties."""
    kind = schema_type(schema)
    if kind == "object":
        return {"type": "object", "properties": {}}
    if kind == "array":
        items = schema.get("items")
        if isinstance(items, dict) and schema_type(items) == "object":
            return {"type": "array", "items": {"type": "object", "properties": {}}}
        return {"type": "array"}
    return {"type": kind} if kind is not None else {}


class SchemaNegotiator:
    """Filter input schemas down to the properties an objective needs."""

    def __init__(self, llm: LLMProvider, token_limit: Optional[int] = None):
        """Initialize negotiator.

        Args:
            llm: Language model picking properties
            token_limit: Token budget per schema chunk (default: CHUNK_TOKEN_LIMIT)
        """
        self.llm = llm
        self.token_limit = token_limit or config.chunk_token_limit

    def filter_input_schema(
        self,
        objective: str,
        operation_label: str,
        required_schema: Optional[JSONSchema],
        input_schema: Optional[JSONSchema],
        context: Optional[Dict[str, Any]] = None,
    ) -> Optional[JSONSchema]:
        """Required properties plus the ones the model deems relevant.

        Args:
            objective: Objective to accomplish
            operation_label: Operation shown to the model, e.g. "PUT /pets"
            required_schema: Required-only view of the input schema
            input_schema: Full input schema
            context: Caller context (not shown to the model here)

        Returns:
            Filtered schema, or None when there is no input schema

        Raises:
            LLMUnavailableError: If the model cannot be reached
        """
        if input_schema is None:
            return deepcopy(required_schema)

        if required_schema and schema_type(required_schema) == schema_type(input_schema):
            filtered = deepcopy(required_schema)
        else:
            filtered = _empty_like(input_schema)

        for chunk in chunk_schema(input_schema, token_limit=self.token_limit):
            if not chunk.property_names:
                continue

            prompt = PROPERTY_SHORTLIST_PROMPT.format(
                objective_prefix=objective_prefix(objective, context, with_context=False),
                operation=operation_label,
                filtered_schema=json.dumps(filtered),
                chunk_schema=json.dumps(chunk.schema),
            )
            answer = self.llm.generate_structured(prompt, PropertyShortlist)

            allowed = set(chunk.property_names)
            picked = [name for name in dict.fromkeys(answer.shortlist) if name in allowed]
            dropped = [name for name in answer.shortlist if name not in allowed]
            if dropped:
                logger.debug(f"Ignoring unknown properties {dropped}")
            logger.debug(f"Shortlisted {picked} of {chunk.property_names}")

            filtered = merge_schema(filtered, get_sub_schema(chunk.schema, picked))

        return deepen_schema(input_schema, filtered)

    def filter_input_schemas(
        self,
        objective: str,
        operation_label: str,
        required: Dict[str, Optional[JSONSchema]],
        inputs: Dict[str, Optional[JSONSchema]],
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Optional[JSONSchema]]:
        """Filter the body, query and path schemas of an operation."""
        return {
            kind: self.filter_input_schema(
                objective,
                operation_label,
                required.get(kind),
                inputs.get(kind),
                context,
            )
            for kind in SCHEMA_KINDS
        }


__all__ = ["SchemaNegotiator", "PropertyShortlist"]
