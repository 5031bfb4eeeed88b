from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from storefront.core.exceptions import BackendException
from storefront.integrations.supabase_client import SupabaseClient


@dataclass
class FakeResponse:
    status_code: int = 200
    payload: Any = None
    text: str = ""

    @property
    def content(self) -> bytes:
        return b"" if self.payload is None else json.dumps(self.payload).encode()

    def json(self) -> Any:
        if self.payload is None:
            raise ValueError("no body")
        return self.payload


@dataclass
class FakeSession:
    responses: list[Any] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    closed: bool = False

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def make_client(*responses: Any) -> tuple[SupabaseClient, FakeSession]:
    session = FakeSession(responses=list(responses))
    client = SupabaseClient("https://demo.supabase.co/", "anon-key", session=session)
    return client, session


def test_auth_headers_are_set():
    _, session = make_client()

    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"


def test_select_builds_postgrest_query():
    client, session = make_client(FakeResponse(payload=[{"id": 1}]))

    rows = client.select("products", filters={"status": "available", "featured": True}, limit=5)

    call = session.calls[0]
    assert rows == [{"id": 1}]
    assert call["method"] == "GET"
    assert call["url"] == "https://demo.supabase.co/rest/v1/products"
    assert call["params"] == {
        "select": "*",
        "status": "eq.available",
        "featured": "eq.true",
        "limit": "5",
    }


def test_select_single_returns_none_when_empty():
    client, _ = make_client(FakeResponse(payload=[]))
    assert client.select_single("settings") is None


def test_insert_returns_stored_row():
    client, session = make_client(FakeResponse(status_code=201, payload=[{"id": "x", "name": "Sara"}]))

    row = client.insert("offers", {"name": "Sara"})

    assert row == {"id": "x", "name": "Sara"}
    assert session.calls[0]["headers"] == {"Prefer": "return=representation"}
    assert session.calls[0]["json"] == {"name": "Sara"}


def test_http_error_becomes_backend_exception():
    client, _ = make_client(FakeResponse(status_code=401, payload={"message": "bad key"}))

    with pytest.raises(BackendException) as exc_info:
        client.select("settings")

    assert exc_info.value.status_code == 401


def test_network_error_becomes_backend_exception():
    client, _ = make_client(requests.ConnectionError("refused"))

    with pytest.raises(BackendException):
        client.select("settings")


def test_insert_without_row_fails():
    client, _ = make_client(FakeResponse(status_code=201, payload=None))

    with pytest.raises(BackendException):
        client.insert("offers", {"name": "Sara"})


def test_close_closes_session():
    client, session = make_client()
    client.close()
    assert session.closed
