"""
Embedding providers.

A provider maps texts to vectors (`create_embeddings(texts) -> {text: vector}`). The default
provider runs a sentence-transformers model locally and returns normalized vectors, so inner
product search equals cosine similarity.

Example Usage:
    from openapi_directory.embedding.models import SentenceTransformerEmbeddings

    provider = SentenceTransformerEmbeddings()
    vectors = provider.create_embeddings(["List all pets", "Create a pet"])
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sentence_transformers import SentenceTransformer

from ..config import config

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Embedding provider contract."""

    @abstractmethod
    def create_embeddings(self, texts: List[str]) -> Dict[str, List[float]]:
        """Embed texts.

        Args:
            texts: Texts to embed

        Returns:
            Mapping of each text to its vector
        """


class SentenceTransformerEmbeddings(EmbeddingProvider):
    """Local sentence-transformers model."""

    def __init__(self, model_name: Optional[str] = None):
        """Initialize provider.

        Args:
            model_name: Model to load (default: EMBEDDING_MODEL setting)
        """
        self.model_name = model_name or config.embedding_model
        self.model = None
        self.dimension: Optional[int] = None
        self.initialized = False

    def initialize(self) -> None:
        """Load the model."""
        if self.initialized:
            return

        try:
            logger.info(f"Loading model: {self.model_name}")
            self.model = SentenceTransformer(self.model_name)
            self.dimension = self.model.get_sentence_embedding_dimension()
            logger.info(f"Model loaded with embedding dimension: {self.dimension}")
            self.initialized = True
        except Exception as e:
            logger.error(f"Failed to load embedding model {self.model_name}: {e}")
            raise

    def cleanup(self) -> None:
        """Release the model."""
        if self.initialized:
            self.model = None
            self.dimension = None
            self.initialized = False
            logger.info("Embedding model released")

    def create_embeddings(self, texts: List[str]) -> Dict[str, List[float]]:
        if not self.initialized:
            self.initialize()
        if not texts:
            return {}

        embeddings = self.model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )

        # Handle 3D output (batch_size x 1 x dimension)
        if embeddings.ndim == 3:
            embeddings = embeddings.squeeze(1)

        return {text: vector.tolist() for text, vector in zip(texts, embeddings)}


__all__ = ["EmbeddingProvider", "SentenceTransformerEmbeddings"]
