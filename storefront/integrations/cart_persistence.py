"""Durable storage for cart lines behind a load/save contract."""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Iterable, Protocol

from storefront.core.constants import CART_STORAGE_KEY
from storefront.domain.cart import CartLine

logger = logging.getLogger(__name__)


class CartPersistence(Protocol):
    """Storage backend consumed by the cart store."""

    def load(self) -> list[CartLine]:
        """Return persisted lines in cart order; an unreadable store yields []."""
        ...

    def save(self, lines: list[CartLine]) -> None:
        """Durably replace the persisted lines."""
        ...


def serialize_lines(lines: Iterable[CartLine]) -> dict[str, Any]:
    return {"items": [line.to_dict() for line in lines], "updated_at": int(time.time())}


def deserialize_lines(payload: Any) -> list[CartLine]:
    """Parse a stored payload, skipping entries that no longer parse."""
    if not isinstance(payload, dict):
        return []
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        return []
    lines: list[CartLine] = []
    for raw in raw_items:
        try:
            lines.append(CartLine.from_dict(raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping unreadable cart line %r: %s", raw, exc)
    return lines


class MemoryCartPersistence:
    """Process-local storage, used in tests and when nothing durable is configured."""

    def __init__(self, lines: Iterable[CartLine] | None = None) -> None:
        self._payload = serialize_lines(lines or [])
        self.save_count = 0

    def load(self) -> list[CartLine]:
        return deserialize_lines(self._payload)

    def save(self, lines: list[CartLine]) -> None:
        self._payload = serialize_lines(lines)
        self.save_count += 1


class MemoryCartPool:
    """One ``MemoryCartPersistence`` per client id, released with the session.

    Used as the persistence factory when nothing durable is configured.
    """

    def __init__(self) -> None:
        self._carts: dict[str, MemoryCartPersistence] = {}
        self._lock = threading.Lock()

    def __call__(self, client_id: str) -> MemoryCartPersistence:
        with self._lock:
            return self._carts.setdefault(client_id, MemoryCartPersistence())

    def release(self, client_id: str) -> None:
        with self._lock:
            self._carts.pop(client_id, None)

    def __len__(self) -> int:
        return len(self._carts)


_FILE_LOCKS: dict[Path, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _file_lock(path: Path) -> threading.Lock:
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(path.resolve(), threading.Lock())


class JsonFileCartPersistence:
    """Carts stored in one JSON document, each under its own storage key.

    Several keys (one per client) can share a file. Writes go to a temp file
    that is renamed over the original so a crash never leaves a torn document.
    """

    def __init__(self, path: str | os.PathLike[str], key: str = CART_STORAGE_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def _read_document(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Cart file %s is unreadable: %s", self._path, exc)
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Cart file %s is corrupt, starting empty: %s", self._path, exc)
            return {}
        return document if isinstance(document, dict) else {}

    def load(self) -> list[CartLine]:
        return deserialize_lines(self._read_document().get(self._key))

    def save(self, lines: list[CartLine]) -> None:
        # Read-modify-write of a shared document; other keys must not be lost
        with _file_lock(self._path):
            self._write(lines)

    def _write(self, lines: list[CartLine]) -> None:
        document = self._read_document()
        if lines:
            document[self._key] = serialize_lines(lines)
        else:
            document.pop(self._key, None)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".cart-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            logger.error("Failed to write cart file %s: %s", self._path, exc)
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
