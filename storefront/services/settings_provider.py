"""Read access to the store settings record."""
from __future__ import annotations

import logging
import time
from typing import Any, Protocol

from storefront.core.constants import SETTINGS_CACHE_TTL
from storefront.core.exceptions import BackendException, ValidationException
from storefront.domain.entities.settings import StoreSettings

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "settings"


class SettingsProvider(Protocol):
    def get_settings(self) -> StoreSettings: ...


class SettingsBackend(Protocol):
    """Subset of the backend client used to read settings."""

    def select_single(self, table: str, **kwargs: Any) -> dict[str, Any] | None: ...


class StaticSettingsProvider:
    """Fixed settings, e.g. from environment defaults or in tests."""

    def __init__(self, settings: StoreSettings | None = None) -> None:
        self._settings = settings or StoreSettings()

    def get_settings(self) -> StoreSettings:
        return self._settings


class BackendSettingsProvider:
    """Settings row from the backend, cached for ``ttl_seconds``.

    A backend outage or an invalid row never breaks the cart: the last good
    settings (or the configured fallback) are served until the next refresh.
    """

    def __init__(
        self,
        client: SettingsBackend,
        fallback: StoreSettings | None = None,
        ttl_seconds: int = SETTINGS_CACHE_TTL,
        clock=time.monotonic,
    ) -> None:
        self._client = client
        self._fallback = fallback or StoreSettings()
        self._ttl = ttl_seconds
        self._clock = clock
        self._cached: StoreSettings | None = None
        self._fetched_at: float | None = None

    def invalidate(self) -> None:
        self._fetched_at = None

    def _is_fresh(self) -> bool:
        return self._fetched_at is not None and self._clock() - self._fetched_at < self._ttl

    def get_settings(self) -> StoreSettings:
        if self._cached is not None and self._is_fresh():
            return self._cached

        try:
            row = self._client.select_single(SETTINGS_TABLE)
            if row is None:
                raise BackendException("settings row is missing")
            settings = StoreSettings.from_dict(row, defaults=self._fallback)
        except (BackendException, ValidationException) as exc:
            logger.warning("Using cached/default store settings: %s", exc.message)
            # Retry on the next TTL window rather than on every call
            self._fetched_at = self._clock()
            return self._cached or self._fallback

        self._cached = settings
        self._fetched_at = self._clock()
        return settings
