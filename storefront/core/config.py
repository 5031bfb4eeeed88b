"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from storefront.core.constants import CART_STORAGE_KEY, SETTINGS_CACHE_TTL
from storefront.core.exceptions import ConfigurationException, ValidationException
from storefront.domain.entities.settings import StoreSettings


def _str_to_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"true", "1", "yes", "y"}


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _get_int(key: str, default: int) -> int:
    raw = _get_env(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{key} must be an integer, got {raw!r}") from exc


@dataclass(slots=True)
class Settings:
    environment: str
    log_level: str
    port: int
    frontend_url: str | None
    cart_storage_key: str
    cart_storage_path: str | None
    redis_url: str | None
    supabase_url: str | None
    supabase_key: str | None
    settings_cache_ttl: int
    default_store: StoreSettings

    @property
    def is_dev(self) -> bool:
        return self.environment in ("development", "dev", "local", "test")

    @property
    def backend_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def load_store_defaults() -> StoreSettings:
    """Store settings used until (or when) the backend settings row is unreachable."""
    raw = {
        "currency": _get_env("STORE_CURRENCY"),
        "store_name": _get_env("STORE_NAME"),
        "whatsapp_number": _get_env("WHATSAPP_NUMBER"),
        "delivery_charge": _get_env("DELIVERY_CHARGE"),
        "free_delivery_threshold": _get_env("FREE_DELIVERY_THRESHOLD"),
        "discount_150_threshold": _get_env("DISCOUNT_150_THRESHOLD"),
        "discount_200_threshold": _get_env("DISCOUNT_200_THRESHOLD"),
    }
    try:
        return StoreSettings.from_dict(raw)
    except ValidationException as exc:
        raise ConfigurationException(f"Invalid store settings in environment: {exc.message}") from exc


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    supabase_url = _get_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
    supabase_key = _get_env(
        "SUPABASE_ANON_KEY", "SUPABASE_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"
    )
    if supabase_url and not supabase_key:
        raise ConfigurationException("SUPABASE_URL is set but SUPABASE_ANON_KEY is missing")

    return Settings(
        environment=(_get_env("ENVIRONMENT", default="production") or "production").lower(),
        log_level=_get_env("LOG_LEVEL", default="INFO") or "INFO",
        port=_get_int("PORT", 8080),
        frontend_url=_get_env("FRONTEND_URL", "SITE_URL"),
        cart_storage_key=_get_env("CART_STORAGE_KEY", default=CART_STORAGE_KEY) or CART_STORAGE_KEY,
        cart_storage_path=_get_env("CART_STORAGE_PATH"),
        redis_url=_get_env("REDIS_URL"),
        supabase_url=supabase_url.rstrip("/") if supabase_url else None,
        supabase_key=supabase_key,
        settings_cache_ttl=_get_int("SETTINGS_CACHE_TTL", SETTINGS_CACHE_TTL),
        default_store=load_store_defaults(),
    )
