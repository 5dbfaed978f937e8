"""Wiring shared by the CLI commands."""

import logging
import os
from typing import Dict, List, Optional, Tuple

from ..config import config
from ..directory import Directory
from ..embedding.index import EmbeddingIndex
from ..embedding.models import SentenceTransformerEmbeddings
from ..embedding.store import EmbeddingStore
from ..integrations.llm.base import LLMProvider
from ..integrations.llm.openrouter_client import OpenRouterClient
from ..monitoring.metrics import MetricsManager
from ..storage import create_vector_store
from ..utils.file import load_specification, spec_id_from_path

logger = logging.getLogger(__name__)


def build_metrics() -> MetricsManager:
    metrics = MetricsManager()
    if config.enable_telemetry:
        metrics.start_server(config.metrics_port)
    return metrics


def build_directory(use_llm: bool = True, metrics: Optional[MetricsManager] = None) -> Directory:
    """Directory backed by the configured model, vector store and cache."""
    index = EmbeddingIndex(
        provider=SentenceTransformerEmbeddings(),
        vector_store=create_vector_store(),
        store=EmbeddingStore(os.path.join(config.cache_dir, "embeddings.sqlite")),
        metrics=metrics,
    )

    llm = build_llm() if use_llm else None
    if use_llm and llm is None:
        logger.info("OPENROUTER_API_KEY not set, LLM summarizing and shortlisting disabled")

    return Directory(index, llm=llm, metrics=metrics)


def build_llm() -> Optional[LLMProvider]:
    """Configured language model, or None without an API key."""
    if not config.openrouter_api_key:
        return None
    return OpenRouterClient()


def load_spec_map(spec_files: Tuple[str, ...]) -> Dict[str, dict]:
    """Specification id to document for the given files."""
    return {spec_id_from_path(path): load_specification(path) for path in spec_files}


def format_scopes(scopes: List[str]) -> str:
    return ", ".join(scopes) if scopes else "-"
