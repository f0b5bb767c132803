"""Shared fixtures: a fake Sellsy API served through httpx.MockTransport."""
import asyncio
import json
from typing import Any, Optional, Union

import httpx
import pytest

from sellsy_backup.config import Config
from sellsy_backup.fetch.endpoints import COLLECTIONS

API_URL = "https://api.test"
LOGIN_URL = "https://login.test"
FILES_URL = "https://files.test"

# A file entry is the body, an HTTP status, or ("redirect", location)
FileEntry = Union[bytes, int, tuple[str, str]]


class FakeSellsy:
    """In-memory Sellsy API: token endpoint, collections and PDF host."""

    def __init__(
        self,
        collections: Optional[dict[str, list[dict[str, Any]]]] = None,
        files: Optional[dict[str, FileEntry]] = None,
        max_page_size: Optional[int] = None,
        token_status: int = 200,
        token: Optional[str] = "test-token",
    ):
        self.collections = {name: [] for name in COLLECTIONS}
        self.collections.update(collections or {})
        self.files = files or {}
        self.max_page_size = max_page_size
        self.token_status = token_status
        self.token = token
        self.declared_totals: dict[str, int] = {}
        self.collection_status: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Yield so concurrent tasks interleave as they would on a real socket
        await asyncio.sleep(0)

        host = f"{request.url.scheme}://{request.url.host}"
        if host == LOGIN_URL:
            return self._token(request)
        if host == API_URL:
            return self._page(request)
        if host == FILES_URL:
            return self._file(request)
        return httpx.Response(404)

    def _token(self, request: httpx.Request) -> httpx.Response:
        if request.method != "POST" or request.url.path != "/oauth2/access-tokens":
            return httpx.Response(404)
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_client"})
        payload = {"token_type": "Bearer", "expires_in": 86400}
        if self.token is not None:
            payload["access_token"] = self.token
        return httpx.Response(200, json=payload)

    def _page(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.removeprefix("/v2/")
        if name not in self.collections:
            return httpx.Response(404)
        if name in self.collection_status:
            return httpx.Response(self.collection_status[name])
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401)

        records = self.collections[name]
        offset = int(request.url.params["offset"])
        limit = int(request.url.params["limit"])
        if self.max_page_size:
            limit = min(limit, self.max_page_size)
        data = records[offset:offset + limit]
        total = self.declared_totals.get(name, len(records))
        body = {"data": data, "pagination": {"offset": offset, "count": len(data), "total": total}}
        return httpx.Response(200, content=json.dumps(body).encode())

    def _file(self, request: httpx.Request) -> httpx.Response:
        entry = self.files.get(request.url.path)
        if entry is None:
            return httpx.Response(404)
        if isinstance(entry, int):
            return httpx.Response(entry)
        if isinstance(entry, tuple):
            return httpx.Response(302, headers={"Location": entry[1]})
        return httpx.Response(200, content=entry, headers={"Content-Type": "application/pdf"})


def make_records(count: int, prefix: str = "rec") -> list[dict[str, Any]]:
    return [{"id": i, "name": f"{prefix}-{i}"} for i in range(count)]


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        API_URL=API_URL,
        LOGIN_URL=LOGIN_URL,
        CLIENT_ID="client-id",
        CLIENT_SECRET="client-secret",
        LOCAL_PATH=tmp_path,
        MAXIMUM_HOLD_IN_DAYS=30,
        DOWNLOAD_CONCURRENCY=3,
        TIMEOUT=5.0,
    )
