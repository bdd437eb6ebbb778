"""
Tests for caching layer.
"""
import pytest
import time
from datetime import date
from autoinsight.core.cache import (
    SimpleCache,
    dataset_cache_key,
    generate_dataset_id,
    get_dataset_cache,
)


def test_simple_cache_set_get():
    """Test basic cache set and get operations."""
    cache = SimpleCache(default_ttl=1.0)

    cache.set("key1", "value1")
    assert cache.get("key1") == "value1"

    cache.set("key2", "value2", ttl=0.1)
    assert cache.get("key2") == "value2"

    time.sleep(0.2)
    assert cache.get("key2") is None


def test_simple_cache_cleanup():
    """Test cache cleanup of expired entries."""
    cache = SimpleCache(default_ttl=0.1)

    cache.set("key1", "value1")
    cache.set("key2", "value2", ttl=1.0)

    time.sleep(0.15)
    cache.cleanup_expired()

    assert cache.get("key1") is None
    assert cache.get("key2") == "value2"


def test_simple_cache_stats():
    """Test cache statistics."""
    cache = SimpleCache(default_ttl=60)
    cache.set("a", 1)
    cache.set("b", 2)

    stats = cache.get_stats()
    assert stats == {"size": 2, "default_ttl": 60}

    cache.clear()
    assert cache.get_stats()["size"] == 0


def test_dataset_id_is_content_based():
    rows = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
    reordered_keys = [{"b": "x", "a": 1}, {"b": "y", "a": 2}]

    assert generate_dataset_id(rows) == generate_dataset_id(reordered_keys)
    assert generate_dataset_id(rows) != generate_dataset_id(rows[:1])
    assert len(generate_dataset_id(rows)) == 64


def test_dataset_id_handles_dates():
    assert generate_dataset_id([{"d": date(2024, 1, 1)}]) == generate_dataset_id([{"d": "2024-01-01"}])


def test_dataset_cache_key():
    assert dataset_cache_key("abc") == "dataset:abc"


def test_dataset_cache_is_shared():
    assert get_dataset_cache() is get_dataset_cache()
