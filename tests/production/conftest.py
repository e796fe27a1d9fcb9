"""
Shared fixtures for the production API test suite.

``FakeProductionAPI`` answers both the production API and the presigned file
host behind a single ``httpx.MockTransport``, so the whole resolve/download
pipeline runs offline. It records every request and tracks how many downloads
are in flight at once.
"""

from __future__ import annotations

import os
import re
import threading
import time
from typing import Any, Optional

import httpx
import pytest

from Publit.Production.batch import FileBatch
from Publit.Production.client import APIClient
from Publit.Production.resources.file import File

BASE_URL = "https://api.publit.test"
FILE_HOST = "https://files.publit.test"

_FILE_SHOW = re.compile(r"^/production/v2\.0/files/(\d+)$")


class _CutOffStream(httpx.SyncByteStream):
    """Yields the first chunk of a body, then drops the connection."""

    def __init__(self, first: bytes, request: httpx.Request) -> None:
        self._first = first
        self._request = request

    def __iter__(self):
        yield self._first
        raise httpx.ReadError("connection reset mid-body", request=self._request)


class FakeProductionAPI:
    """In-memory stand-in for the production API and its file host."""

    def __init__(self) -> None:
        self.records: dict[int, dict[str, Any]] = {}
        self.blobs: dict[str, bytes] = {}
        self.show_failures: dict[int, int] = {}
        self.download_failures: dict[str, int] = {}
        self.broken_paths: set[str] = set()
        self.cut_off_paths: set[str] = set()
        self.omit_presigned: set[int] = set()
        self.download_delay = 0.0
        self.requests: list[httpx.Request] = []
        self.max_active_downloads = 0
        self._active_downloads = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_file(
        self, file_id: int, name: str, content: bytes, *, presigned: bool = False
    ) -> File:
        path = f"/{file_id}/{name}"
        url = f"{FILE_HOST}{path}?X-Amz-Signature=sig{file_id}"
        self.records[file_id] = {
            "id": str(file_id),
            "type": "Cover",
            "original_name": name,
            "size": str(len(content)),
            "mime_type": "application/pdf",
            "presigned_url": url,
        }
        self.blobs[path] = content
        if presigned:
            return File(id=file_id, original_name=name, presigned_url=url)
        return File(id=file_id)

    def path_of(self, file_id: int) -> str:
        return f"/{file_id}/{self.records[file_id]['original_name']}"

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def show_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if _FILE_SHOW.match(r.url.path)]

    @property
    def download_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == httpx.URL(FILE_HOST).host]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)

        if request.url.host == httpx.URL(FILE_HOST).host:
            return self._download(request)

        if request.url.path == "/v2.0/status_check":
            return httpx.Response(200, json={"status": "ok"})

        match = _FILE_SHOW.match(request.url.path)
        if match:
            return self._show_file(int(match.group(1)), request)

        return httpx.Response(404, text="not found")

    def _show_file(self, file_id: int, request: httpx.Request) -> httpx.Response:
        if file_id in self.show_failures:
            return httpx.Response(self.show_failures[file_id], text="boom")
        record = self.records.get(file_id)
        if record is None:
            return httpx.Response(404, json={"message": f"File {file_id} not found"})
        body = dict(record)
        if request.url.params.get("aux") != "presigned_url" or file_id in self.omit_presigned:
            body.pop("presigned_url")
        return httpx.Response(200, json=body)

    def _download(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path in self.broken_paths:
            raise httpx.ConnectError("connection refused", request=request)

        with self._lock:
            self._active_downloads += 1
            self.max_active_downloads = max(self.max_active_downloads, self._active_downloads)
        try:
            if self.download_delay:
                time.sleep(self.download_delay)
            if path in self.download_failures:
                return httpx.Response(self.download_failures[path], text="denied")
            blob = self.blobs.get(path)
            if blob is None:
                return httpx.Response(404, text="missing")
            if path in self.cut_off_paths:
                return httpx.Response(200, stream=_CutOffStream(blob[:2], request))
            return httpx.Response(200, content=blob)
        finally:
            with self._lock:
                self._active_downloads -= 1


def make_http_client(api: FakeProductionAPI) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(api.handler))


@pytest.fixture(autouse=True)
def _clean_publit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("PUBLIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_api() -> FakeProductionAPI:
    return FakeProductionAPI()


@pytest.fixture
def api_client(fake_api: FakeProductionAPI):
    http = make_http_client(fake_api)
    client = APIClient(BASE_URL, http_client=http)
    yield client
    http.close()


@pytest.fixture
def download_client(fake_api: FakeProductionAPI):
    client = make_http_client(fake_api)
    yield client
    client.close()


@pytest.fixture
def file_batch(api_client: APIClient, download_client: httpx.Client) -> FileBatch:
    return FileBatch(api_client, download_client=download_client)


class RecordingClient:
    """Captures resource calls and answers them with a canned body."""

    def __init__(self, body: Any = None) -> None:
        self.body = body if body is not None else {}
        self.calls: list[tuple[str, str, Optional[Any]]] = []

    def get(self, endpoint: Any, params: Any = None) -> Any:
        self.calls.append(("GET", endpoint.endpoint, dict(params) if params else None))
        return self.body

    def post(self, endpoint: Any, payload: Any) -> Any:
        self.calls.append(("POST", endpoint.endpoint, payload))
        return self.body

    def put(self, endpoint: Any, payload: Any) -> Any:
        self.calls.append(("PUT", endpoint.endpoint, payload))
        return self.body

    def delete(self, endpoint: Any) -> Any:
        self.calls.append(("DELETE", endpoint.endpoint, None))
        return self.body


@pytest.fixture
def recording_client() -> type[RecordingClient]:
    return RecordingClient


@pytest.fixture
def http_client_for():
    clients: list[httpx.Client] = []

    def factory(api: FakeProductionAPI) -> httpx.Client:
        client = make_http_client(api)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
