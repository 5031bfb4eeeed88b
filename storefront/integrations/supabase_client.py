"""Minimal PostgREST client for the hosted Supabase backend."""
from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from storefront.core.constants import BACKEND_TIMEOUT_SECONDS
from storefront.core.exceptions import BackendException

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Thin wrapper over ``/rest/v1/{table}`` with the anon API key.

    Only what the storefront core needs: filtered selects and inserts.
    Row-level security on the backend decides what the anon key may touch.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = BACKEND_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = f"{url.rstrip('/')}/rest/v1"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        url = f"{self._base_url}/{table}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=dict(headers or {}),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise BackendException(f"{method} {table} failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Backend %s %s returned %s: %s", method, table, response.status_code, response.text
            )
            raise BackendException(
                f"{method} {table} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendException(f"{method} {table} returned invalid JSON") from exc

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        columns: str = "*",
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows; ``filters`` are equality filters (``col=eq.value``)."""
        params: dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[column] = f"eq.{value}"
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        data = self._request("GET", table, params=params)
        return data if isinstance(data, list) else []

    def select_single(
        self, table: str, *, filters: Mapping[str, Any] | None = None, columns: str = "*"
    ) -> dict[str, Any] | None:
        rows = self.select(table, filters=filters, columns=columns, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        data = self._request(
            "POST",
            table,
            json_body=dict(row),
            headers={"Prefer": "return=representation"},
        )
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        raise BackendException(f"POST {table} returned no row")

    def close(self) -> None:
        self._session.close()
