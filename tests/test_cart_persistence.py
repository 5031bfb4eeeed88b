from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

import storefront.integrations.redis_cart as redis_cart_module
from storefront.integrations.cart_persistence import (
    JsonFileCartPersistence,
    MemoryCartPersistence,
    deserialize_lines,
    serialize_lines,
)
from storefront.integrations.redis_cart import RedisCartPersistence
from storefront.services.cart_store import CartStore

from .factories import FakeRedisClient, make_line, make_product


def test_serialized_payload_shape():
    payload = serialize_lines([make_line("a", quantity=2)])

    assert set(payload) == {"items", "updated_at"}
    assert payload["items"][0]["quantity"] == 2
    assert payload["items"][0]["product"]["id"] == "a"


def test_unreadable_entries_are_skipped():
    good = make_line("a").to_dict()
    payload = {"items": [good, {"product": {"title": "no id"}, "quantity": 1}, {"quantity": 0}]}

    lines = deserialize_lines(payload)

    assert [line.product_id for line in lines] == ["a"]


@pytest.mark.parametrize("payload", [None, [], "text", {"items": "nope"}])
def test_malformed_payload_loads_empty(payload):
    assert deserialize_lines(payload) == []


def test_unknown_product_fields_survive_round_trip():
    product = make_product("a")
    data = product.to_dict()
    data["category"] = "furniture"

    lines = deserialize_lines({"items": [{"product": data, "quantity": 1}]})

    assert lines[0].product.extra == {"category": "furniture"}
    assert lines[0].product.to_dict()["category"] == "furniture"


class TestMemoryPersistence:
    def test_load_returns_saved_lines(self):
        persistence = MemoryCartPersistence()
        persistence.save([make_line("a"), make_line("b", quantity=3)])

        assert [(line.product_id, line.quantity) for line in persistence.load()] == [("a", 1), ("b", 3)]


class TestJsonFilePersistence:
    def test_missing_file_loads_empty(self, tmp_path):
        assert JsonFileCartPersistence(tmp_path / "carts.json").load() == []

    def test_round_trip_keeps_order(self, tmp_path):
        path = tmp_path / "carts.json"
        JsonFileCartPersistence(path).save([make_line("b", quantity=2), make_line("a")])

        loaded = JsonFileCartPersistence(path).load()

        assert [(line.product_id, line.quantity) for line in loaded] == [("b", 2), ("a", 1)]

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "carts.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFileCartPersistence(path).load() == []

    def test_keys_share_a_file(self, tmp_path):
        path = tmp_path / "carts.json"
        first = JsonFileCartPersistence(path, key="cart-storage:one")
        second = JsonFileCartPersistence(path, key="cart-storage:two")

        first.save([make_line("a")])
        second.save([make_line("b")])

        assert [line.product_id for line in first.load()] == ["a"]
        assert [line.product_id for line in second.load()] == ["b"]

    def test_parallel_saves_keep_every_key(self, tmp_path):
        path = tmp_path / "carts.json"
        keys = [f"cart-storage:c{index}" for index in range(12)]

        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(lambda key: JsonFileCartPersistence(path, key=key).save([make_line("a")]), keys))

        assert sorted(json.loads(path.read_text(encoding="utf-8"))) == sorted(keys)

    def test_empty_cart_removes_key(self, tmp_path):
        path = tmp_path / "carts.json"
        persistence = JsonFileCartPersistence(path, key="cart-storage:one")
        persistence.save([make_line("a")])
        persistence.save([])

        assert json.loads(path.read_text(encoding="utf-8")) == {}

    def test_no_temp_files_left_behind(self, tmp_path):
        path = tmp_path / "carts.json"
        JsonFileCartPersistence(path).save([make_line("a")])

        assert [item.name for item in tmp_path.iterdir()] == ["carts.json"]

    def test_store_survives_restart(self, tmp_path):
        path = tmp_path / "carts.json"
        store = CartStore(JsonFileCartPersistence(path))
        store.add_item(make_product("a", quantity=3))
        store.add_item(make_product("a", quantity=3))

        restarted = CartStore(JsonFileCartPersistence(path))

        assert restarted.get_item_count() == 2
        assert restarted.add_item(make_product("a", quantity=3))
        assert not restarted.add_item(make_product("a", quantity=3))
        assert restarted.get_item_count() == 3


class TestRedisPersistence:
    @pytest.fixture()
    def redis_client(self, monkeypatch):
        client = FakeRedisClient()
        monkeypatch.setattr(redis_cart_module.redis, "from_url", lambda *args, **kwargs: client)
        return client

    def test_save_and_load(self, redis_client):
        persistence = RedisCartPersistence("redis://example", key="cart-storage:abc")
        persistence.save([make_line("a", quantity=2)])

        assert "cart-storage:abc" in redis_client.data
        assert [(line.product_id, line.quantity) for line in persistence.load()] == [("a", 2)]
        assert not persistence.uses_memory_fallback

    def test_empty_cart_deletes_key(self, redis_client):
        persistence = RedisCartPersistence("redis://example")
        persistence.save([make_line("a")])
        persistence.save([])

        assert redis_client.data == {}

    def test_corrupt_payload_loads_empty(self, redis_client):
        redis_client.data["cart-storage"] = "{broken"
        assert RedisCartPersistence("redis://example").load() == []

    def test_no_url_uses_memory(self):
        persistence = RedisCartPersistence(None)
        persistence.save([make_line("a")])

        assert persistence.uses_memory_fallback
        assert [line.product_id for line in persistence.load()] == ["a"]

    def test_failure_switches_to_memory(self):
        client = FakeRedisClient()
        persistence = RedisCartPersistence(key="k", client=client)
        client.fail = True

        persistence.save([make_line("a")])

        assert persistence.uses_memory_fallback
        assert [line.product_id for line in persistence.load()] == ["a"]

    def test_init_failure_uses_memory(self, monkeypatch):
        def broken_from_url(*args, **kwargs):
            raise ConnectionError("refused")

        monkeypatch.setattr(redis_cart_module.redis, "from_url", broken_from_url)

        assert RedisCartPersistence("redis://example").uses_memory_fallback
