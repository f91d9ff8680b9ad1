import pytest

from zhaddons.lrucache import LRUCache


def test_insert_and_find():
    cache = LRUCache(4)
    assert cache.insert("ni", "你") == "你"
    assert cache.find("ni") == "你"
    assert "ni" in cache
    assert len(cache) == 1


def test_find_missing_returns_none():
    cache = LRUCache(4)
    assert cache.find("absent") is None
    assert "absent" not in cache


def test_duplicate_insert_keeps_old_value():
    cache = LRUCache(4)
    cache.insert("a", 1)
    assert cache.insert("a", 2) is None
    assert cache.find("a") == 1
    assert len(cache) == 1


def test_evicts_least_recently_inserted():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.insert("c", 3)
    assert "a" not in cache
    assert "b" in cache and "c" in cache
    assert len(cache) == 2


def test_find_refreshes_entry():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert cache.find("a") == 1
    cache.insert("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_insert_existing_does_not_refresh():
    cache = LRUCache(2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.insert("a", 10)
    cache.insert("c", 3)
    assert "a" not in cache
    assert cache.find("b") == 2


def test_erase_and_clear():
    cache = LRUCache(3)
    for key in "xyz":
        cache.insert(key, key.upper())
    cache.erase("y")
    cache.erase("missing")
    assert "y" not in cache
    assert len(cache) == 2
    cache.clear()
    assert len(cache) == 0
    assert cache.find("x") is None


@pytest.mark.parametrize("capacity", [1, 3, 10])
def test_size_never_exceeds_capacity(capacity):
    cache = LRUCache(capacity)
    for i in range(capacity * 3):
        cache.insert(i, i)
        assert len(cache) <= capacity
    assert len(cache) == capacity