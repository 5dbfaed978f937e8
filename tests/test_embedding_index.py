"""Tests for the embedding index."""

import sqlite3

import pytest

from openapi_directory.embedding import EmbeddingIndex, EmbeddingStore
from openapi_directory.embedding.index import metadata_hash
from openapi_directory.embedding.store import StoredEmbedding
from openapi_directory.monitoring.metrics import MetricsManager
from openapi_directory.openapi import build_token_map
from openapi_directory.openapi.tokenizer import TokenEntry
from openapi_directory.storage.faiss_client import FAISSClient

from .fakes import FakeEmbeddings, vector_for


@pytest.fixture
def token_map(petstore):
    return build_token_map("petstore", petstore)


def make_index(provider, vector_store, embedding_store, **kwargs):
    kwargs.setdefault("retry_delay", 0)
    return EmbeddingIndex(provider, vector_store, embedding_store, **kwargs)


def test_upsert_embeds_every_entry(provider, vector_store, embedding_store, token_map):
    index = make_index(provider, vector_store, embedding_store)

    report = index.upsert(token_map)

    assert report.ok
    assert report.embedded == len(token_map)
    assert report.skipped == 0
    assert embedding_store.count() == len(token_map)


def test_unchanged_rerun_makes_no_provider_calls(provider, vector_store, embedding_store, token_map):
    index = make_index(provider, vector_store, embedding_store)
    index.upsert(token_map)
    calls = len(provider.calls)

    report = index.upsert(token_map)

    assert len(provider.calls) == calls
    assert report.embedded == 0
    assert report.skipped == len(token_map)


def test_changed_scopes_are_embedded_again(provider, vector_store, embedding_store, token_map):
    index = make_index(provider, vector_store, embedding_store)
    index.upsert(token_map)
    changed = next(iter(token_map.values()))
    changed.scopes.add("petstore|new:scope")

    report = index.upsert(token_map)

    assert report.embedded == 1
    assert provider.calls[-1] == [changed.text]
    stored = embedding_store.retrieve([changed.id])[changed.id]
    assert stored.metadata_hash == metadata_hash(changed)


def test_empty_text_is_skipped(provider, vector_store, embedding_store):
    entry = TokenEntry(id="petstore|empty", text="", spec_id="petstore", paths={"p"})
    index = make_index(provider, vector_store, embedding_store)

    report = index.upsert({entry.id: entry})

    assert report.skipped == 1
    assert provider.calls == []


def test_batches_are_bounded(provider, vector_store, embedding_store, token_map):
    index = make_index(provider, vector_store, embedding_store, batch_size=3)

    index.upsert(token_map)

    assert [len(call) for call in provider.calls] == [3, 3, 2]


def test_failed_batch_is_retried_once(vector_store, embedding_store, token_map):
    provider = FakeEmbeddings(fail_times=1)
    index = make_index(provider, vector_store, embedding_store)

    report = index.upsert(token_map)

    assert report.ok
    assert len(provider.calls) == 2


def test_failed_batch_is_reported_and_others_continue(vector_store, embedding_store, token_map):
    provider = FakeEmbeddings(fail_on="Pet name")
    metrics = MetricsManager()
    index = make_index(provider, vector_store, embedding_store, batch_size=4, metrics=metrics)

    report = index.upsert(token_map)

    assert len(report.failed_batches) == 1
    failed = report.failed_batches[0]
    assert len(failed.ids) == 4
    assert report.embedded == len(token_map) - 4
    assert embedding_store.count() == len(token_map) - 4
    assert not set(failed.ids) & set(embedding_store.retrieve(token_map))
    assert metrics.get_value("provider_batch_errors_total") == 1
    assert metrics.get_value("entries_embedded_total", {"spec_id": "petstore"}) == report.embedded


def test_failed_batch_is_embedded_on_next_run(vector_store, embedding_store, token_map):
    index = make_index(FakeEmbeddings(fail_on="Pet name"), vector_store, embedding_store)
    index.upsert(token_map)

    provider = FakeEmbeddings()
    report = make_index(provider, vector_store, embedding_store).upsert(token_map)

    assert report.ok
    assert report.embedded == len(token_map) - report.skipped
    assert embedding_store.count() == len(token_map)


def test_search_filters_by_scope(provider, vector_store, embedding_store, token_map):
    index = make_index(provider, vector_store, embedding_store)
    index.upsert(token_map)

    matches = index.search("Create a pet", limit=20, scope_filter=["petstore|create:pets"])

    assert matches
    assert all("petstore|create:pets" in match.metadata["scopes"] for match in matches)
    assert matches[0].metadata["text"] == "Create a pet"
    assert matches[0].distance == pytest.approx(0.0, abs=1e-5)


def test_search_without_filter(provider, vector_store, embedding_store, token_map):
    metrics = MetricsManager()
    index = make_index(provider, vector_store, embedding_store, metrics=metrics)
    index.upsert(token_map)

    matches = index.search("getPet", query_vector=vector_for("getPet"), limit=3)

    assert len(matches) == 3
    assert matches[0].paths == ["petstore|/pets/{petId}|get"]
    assert [m.distance for m in matches] == sorted(m.distance for m in matches)
    assert metrics.get_value("searches_performed_total") == 1


def test_embedding_store_round_trip(tmp_path):
    db_path = str(tmp_path / "cache" / "embeddings.sqlite")
    with EmbeddingStore(db_path) as store:
        store.store([StoredEmbedding("a", [0.1, 0.2], "hash")])

    with EmbeddingStore(db_path) as store:
        rows = store.retrieve(["a", "missing"])

    assert list(rows) == ["a"]
    assert rows["a"].vector == [0.1, 0.2]
    assert rows["a"].metadata_hash == "hash"


class FailingStore(EmbeddingStore):
    """Store whose writes always fail."""

    def store(self, embeddings):
        raise sqlite3.OperationalError("disk I/O error")


class FailingFAISSClient(FAISSClient):
    """Backend that rejects every upsert."""

    def upsert_items(self, collection, items):
        raise ConnectionError("backend unavailable")


def test_store_failure_keeps_vectors_out_of_backend(provider, vector_store, token_map):
    store = FailingStore(":memory:")
    index = make_index(provider, vector_store, store)

    report = index.upsert(token_map)

    assert sorted(report.failed_ids) == sorted(token_map)
    assert report.embedded == 0
    assert vector_store.indexes["openapi"].ntotal == 0
    store.close()


def test_backend_failure_rolls_back_stored_rows(provider, embedding_store, token_map):
    index = make_index(provider, FailingFAISSClient(persist_dir=None), embedding_store)

    report = index.upsert(token_map)

    assert sorted(report.failed_ids) == sorted(token_map)
    assert embedding_store.count() == 0

    rerun = make_index(provider, FAISSClient(persist_dir=None), embedding_store).upsert(token_map)
    assert rerun.embedded == len(token_map)
    assert embedding_store.count() == len(token_map)


def test_transaction_rolls_back_on_error(embedding_store):
    with pytest.raises(ValueError):
        with embedding_store.transaction():
            embedding_store.store([StoredEmbedding("a", [0.1], "hash")])
            raise ValueError("abort")

    assert embedding_store.count() == 0

    with embedding_store.transaction():
        embedding_store.store([StoredEmbedding("a", [0.1], "hash")])
    assert embedding_store.count() == 1
