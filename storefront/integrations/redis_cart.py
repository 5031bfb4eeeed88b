"""Redis-backed cart persistence with in-memory fallback."""
from __future__ import annotations

import json
import logging
from typing import Any

import redis

from storefront.core.constants import CART_STORAGE_KEY
from storefront.domain.cart import CartLine
from storefront.integrations.cart_persistence import deserialize_lines, serialize_lines

logger = logging.getLogger(__name__)


class RedisCartPersistence:
    """Cart lines stored as one JSON payload under a fixed Redis key.

    Carts do not expire. If Redis becomes unreachable the backend keeps
    working from an in-memory copy for the rest of the process lifetime.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        key: str = CART_STORAGE_KEY,
        client: Any = None,
    ) -> None:
        self._key = key
        self._redis_url = redis_url
        self._client = client if client is not None else self._init_client()
        self._memory_payload: dict[str, Any] | None = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def uses_memory_fallback(self) -> bool:
        return self._client is None

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; cart uses in-memory fallback")
            return None
        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis cart storage enabled")
            return client
        except Exception as exc:
            logger.warning("Redis cart init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis cart fallback to memory mode: %s", reason)
        self._client = None

    def load(self) -> list[CartLine]:
        if not self._client:
            return deserialize_lines(self._memory_payload)
        try:
            raw = self._client.get(self._key)
        except Exception as exc:
            self._switch_to_memory_fallback(exc)
            return deserialize_lines(self._memory_payload)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Corrupt cart payload under %s, starting empty: %s", self._key, exc)
            return []
        return deserialize_lines(payload)

    def save(self, lines: list[CartLine]) -> None:
        payload = serialize_lines(lines)
        if self._client:
            try:
                if lines:
                    self._client.set(self._key, json.dumps(payload, ensure_ascii=False))
                else:
                    self._client.delete(self._key)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_payload = payload if lines else None
