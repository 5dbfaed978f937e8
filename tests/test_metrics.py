"""Tests for metrics collection."""

from openapi_directory.monitoring import MetricsManager


def test_managers_do_not_share_registries():
    first = MetricsManager()
    second = MetricsManager()

    first.track_batch_error()

    assert first.get_value("provider_batch_errors_total") == 1
    assert second.get_value("provider_batch_errors_total") == 0


def test_entry_counters():
    metrics = MetricsManager()

    metrics.track_entries_embedded("petstore", 5)
    metrics.track_entries_embedded("petstore", 2)
    metrics.track_entries_skipped("petstore", 0)

    assert metrics.get_value("entries_embedded_total", {"spec_id": "petstore"}) == 7
    assert metrics.get_value("entries_skipped_total", {"spec_id": "petstore"}) is None


def test_search_timer():
    metrics = MetricsManager()

    with metrics.search_timer():
        pass

    assert metrics.get_value("searches_performed_total") == 1
    assert metrics.get_value("search_latency_seconds_count") == 1


def test_export():
    metrics = MetricsManager()
    metrics.set_token_map_size("petstore", 8)

    assert b'token_map_size{spec_id="petstore"} 8.0' in metrics.export()
