"""Request throttling for the public storefront API."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

DEFAULT_RATE_LIMIT = "120/minute"


@dataclass(frozen=True)
class RateLimitConfig:
    enabled: bool = True
    default_limits: list[str] = field(default_factory=lambda: [DEFAULT_RATE_LIMIT])
    storage_uri: str | None = None

    @classmethod
    def from_env(cls) -> RateLimitConfig:
        disabled = os.getenv("RATE_LIMIT_DISABLED", "").strip().lower() in {"1", "true", "yes"}
        limits = [item.strip() for item in os.getenv("RATE_LIMIT_DEFAULT", DEFAULT_RATE_LIMIT).split(";")]
        return cls(
            enabled=not disabled,
            default_limits=[item for item in limits if item],
            storage_uri=os.getenv("RATE_LIMIT_REDIS_URL") or os.getenv("REDIS_URL") or None,
        )


def client_address(request: Request) -> str:
    """Limiter key: first X-Forwarded-For hop, then X-Real-IP, then the peer.

    Client-supplied headers such as X-Client-Id never take part in the key.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    for part in forwarded.split(","):
        if part.strip():
            return part.strip()

    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip

    return get_remote_address(request)


def create_limiter(config: RateLimitConfig | None = None) -> Limiter:
    config = config or RateLimitConfig.from_env()
    kwargs = {}
    if config.storage_uri:
        kwargs["storage_uri"] = config.storage_uri
    return Limiter(
        key_func=client_address,
        default_limits=config.default_limits if config.enabled else [],
        enabled=config.enabled,
        **kwargs,
    )


__all__ = ["RateLimitConfig", "client_address", "create_limiter"]
