"""Prompt fragments shared by the LLM-backed stages."""

import json
from typing import Any, Dict, Optional


def objective_prefix(
    objective: str, context: Optional[Dict[str, Any]] = None, with_context: bool = True
) -> str:
    """Opening lines stating the objective and, optionally, the caller's context."""
    lines = [f"I have this objective: '''{objective}'''"]
    if with_context and context:
        lines.append(
            "I also have some contextual data, think of these as variables that can be used "
            "to achieve the given objective."
        )
        lines.append("This context is represented as the following JSON:")
        lines.append(f"```{json.dumps(context, default=str)}```")
    return "\n".join(lines)


__all__ = ["objective_prefix"]
