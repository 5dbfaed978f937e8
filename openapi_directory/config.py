"""
Configuration Management for OpenAPI Directory

This module provides configuration management for the OpenAPI Directory. It implements a
singleton so every component reads the same settings, and loads values from environment
variables (and a `.env` file when present).

Example Usage:
    from openapi_directory.config import config

    batch_size = config.embedding_batch_size
    backend = config.vector_store

Environment Variables:
    ENVIRONMENT: Environment name (development/staging/production)
    LOG_LEVEL: Logging level
    CACHE_DIR: Directory for the embedding database and local vector indexes
    EMBEDDING_MODEL: sentence-transformers model name
    EMBEDDING_BATCH_SIZE: Maximum entries per embedding provider call
    TOKEN_ENCODING: tiktoken encoding used for token budgets
    ENTRY_TOKEN_LIMIT: Token budget for one indexed text
    CHUNK_TOKEN_LIMIT: Token budget for one schema chunk
    SHALLOW_KEYWORD_TOKEN_LIMIT: Token budget for a keyword kept by shallow schemas
    VECTOR_STORE: Vector backend (faiss/pinecone)
    PINECONE_API_KEY, PINECONE_INDEX_NAME, PINECONE_CLOUD, PINECONE_REGION, PINECONE_METRIC
    SEARCH_LIMIT: Nearest neighbours fetched per query
    SHORTLIST_SIZE: Candidates kept after ranking
    RETRY_DELAY: Base delay in seconds between batch retries
    OPENROUTER_API_KEY, OPENROUTER_MODEL, OPENROUTER_TEMPERATURE
    ENABLE_TELEMETRY: Start the Prometheus exporter
    METRICS_PORT: Prometheus exporter port
"""

import logging
import os
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Environment enumeration."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class VectorBackend(str, Enum):
    """Supported vector backends."""

    FAISS = "faiss"
    PINECONE = "pinecone"


class Config:
    """Configuration settings."""

    _instance = None

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize configuration."""
        if self._initialized:
            return
        self._initialized = True

        # Environment
        self.environment = Environment.DEVELOPMENT.value

        # Paths
        self.cache_dir = ".cache/openapi-directory"

        # Embeddings
        self.embedding_model = "sentence-transformers/all-MiniLM-L6-v2"
        self.embedding_batch_size = 1000
        self.token_encoding = "cl100k_base"
        self.entry_token_limit = 8000
        self.chunk_token_limit = 4000
        self.shallow_keyword_token_limit = 100

        # Vector store
        self.vector_store = VectorBackend.FAISS.value
        self.pinecone_api_key = None
        self.pinecone_index_name = "openapi-directory"
        self.pinecone_cloud = "aws"
        self.pinecone_region = "us-east-1"
        self.pinecone_metric = "cosine"

        # Search
        self.search_limit = 20
        self.shortlist_size = 7
        self.retry_delay = 0.5

        # LLM
        self.openrouter_api_key = None
        self.openrouter_model = "openai/gpt-4o-mini"
        self.openrouter_temperature = 0.0

        # Monitoring
        self.enable_telemetry = False
        self.metrics_port = 9464

        # Logging
        self.log_level = "INFO"

        self._load_from_env()

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        if os.path.exists(".env"):
            from dotenv import load_dotenv

            load_dotenv()

        self.environment = os.getenv("ENVIRONMENT", self.environment)
        self.cache_dir = os.getenv("CACHE_DIR", self.cache_dir)

        self.embedding_model = os.getenv("EMBEDDING_MODEL", self.embedding_model)
        self.embedding_batch_size = int(
            os.getenv("EMBEDDING_BATCH_SIZE", str(self.embedding_batch_size))
        )
        self.token_encoding = os.getenv("TOKEN_ENCODING", self.token_encoding)
        self.entry_token_limit = int(
            os.getenv("ENTRY_TOKEN_LIMIT", str(self.entry_token_limit))
        )
        self.chunk_token_limit = int(
            os.getenv("CHUNK_TOKEN_LIMIT", str(self.chunk_token_limit))
        )
        self.shallow_keyword_token_limit = int(
            os.getenv(
                "SHALLOW_KEYWORD_TOKEN_LIMIT", str(self.shallow_keyword_token_limit)
            )
        )

        self.vector_store = os.getenv("VECTOR_STORE", self.vector_store).lower()
        self.pinecone_api_key = os.getenv("PINECONE_API_KEY", self.pinecone_api_key)
        self.pinecone_index_name = os.getenv(
            "PINECONE_INDEX_NAME", self.pinecone_index_name
        )
        self.pinecone_cloud = os.getenv("PINECONE_CLOUD", self.pinecone_cloud)
        self.pinecone_region = os.getenv("PINECONE_REGION", self.pinecone_region)
        self.pinecone_metric = os.getenv("PINECONE_METRIC", self.pinecone_metric)

        self.search_limit = int(os.getenv("SEARCH_LIMIT", str(self.search_limit)))
        self.shortlist_size = int(os.getenv("SHORTLIST_SIZE", str(self.shortlist_size)))
        self.retry_delay = float(os.getenv("RETRY_DELAY", str(self.retry_delay)))

        self.openrouter_api_key = os.getenv("OPENROUTER_API_KEY", self.openrouter_api_key)
        self.openrouter_model = os.getenv("OPENROUTER_MODEL", self.openrouter_model)
        self.openrouter_temperature = float(
            os.getenv("OPENROUTER_TEMPERATURE", str(self.openrouter_temperature))
        )

        self.enable_telemetry = (
            os.getenv("ENABLE_TELEMETRY", str(self.enable_telemetry)).lower() == "true"
        )
        self.metrics_port = int(os.getenv("METRICS_PORT", str(self.metrics_port)))

        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()

        # Validate environment
        if self.environment not in [e.value for e in Environment]:
            self.environment = Environment.DEVELOPMENT.value

        # Validate vector backend
        if self.vector_store not in [b.value for b in VectorBackend]:
            logger.warning(
                f"Unknown vector store {self.vector_store!r}, using {VectorBackend.FAISS.value}"
            )
            self.vector_store = VectorBackend.FAISS.value

        # Validate log level
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            self.log_level = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary, hiding secrets."""
        return {
            "environment": self.environment,
            "cache_dir": self.cache_dir,
            "embedding_model": self.embedding_model,
            "embedding_batch_size": self.embedding_batch_size,
            "token_encoding": self.token_encoding,
            "entry_token_limit": self.entry_token_limit,
            "chunk_token_limit": self.chunk_token_limit,
            "shallow_keyword_token_limit": self.shallow_keyword_token_limit,
            "vector_store": self.vector_store,
            "pinecone_index_name": self.pinecone_index_name,
            "pinecone_cloud": self.pinecone_cloud,
            "pinecone_region": self.pinecone_region,
            "pinecone_metric": self.pinecone_metric,
            "search_limit": self.search_limit,
            "shortlist_size": self.shortlist_size,
            "retry_delay": self.retry_delay,
            "openrouter_model": self.openrouter_model,
            "openrouter_temperature": self.openrouter_temperature,
            "enable_telemetry": self.enable_telemetry,
            "metrics_port": self.metrics_port,
            "log_level": self.log_level,
        }


# Create global instance
config = Config()

__all__ = ["config", "Config", "Environment", "VectorBackend"]
