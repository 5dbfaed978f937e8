"""Shared test fixtures."""

import json

import pytest

from openapi_directory.embedding.store import EmbeddingStore
from openapi_directory.storage.faiss_client import FAISSClient
from openapi_directory.utils import tokens

from .fakes import SPECS_DIR, FakeEmbeddings, FakeEncoding


@pytest.fixture(autouse=True)
def fake_encoding(monkeypatch):
    """Avoid downloading tiktoken encodings in tests."""
    monkeypatch.setattr(tokens, "get_encoding", lambda *args: FakeEncoding())


@pytest.fixture
def petstore():
    with open(SPECS_DIR / "petstore_v3.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_path():
    return str(SPECS_DIR / "petstore_v3.json")


@pytest.fixture
def provider():
    return FakeEmbeddings()


@pytest.fixture
def vector_store():
    return FAISSClient(persist_dir=None)


@pytest.fixture
def embedding_store():
    store = EmbeddingStore(":memory:")
    yield store
    store.close()
