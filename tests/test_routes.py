"""HTTP route tests against the FastAPI app with a stubbed scraper."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.routes import _get_scraper, _get_sessions
from src.main import app
from src.scraper.errors import BrowserStartupError
from src.scraper.models import DownloadOption, ScrapeResult

VIDEO_URL = "https://video.example/v/1"


class _FakeSessions:
    def __init__(self, error: Exception | None = None) -> None:
        self.page = MagicMock(name="page")
        self.error = error
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        if self.error is not None:
            raise self.error
        self.acquired += 1
        yield self.page


@pytest.fixture
def scraper() -> MagicMock:
    scraper = MagicMock()
    scraper.scrape = AsyncMock(
        return_value=ScrapeResult(
            title="My Video",
            options=[
                DownloadOption(url="https://grabnwatch.com/w/abc123", label="720p"),
                DownloadOption(url="https://grabnwatch.com/r/xyz", label="Download"),
            ],
        )
    )
    return scraper


@pytest.fixture
def sessions() -> _FakeSessions:
    return _FakeSessions()


@pytest.fixture
def client(scraper, sessions):
    app.dependency_overrides[_get_scraper] = lambda: scraper
    app.dependency_overrides[_get_sessions] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestStatus:
    def test_root_status(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "online",
            "message": "GrabnWatch API is running",
            "usage": "Send POST request with JSON body containing 'url' field",
        }

    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_unknown_route(self, client: TestClient) -> None:
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.json() == {"status": "error", "message": "Not found"}

    @pytest.mark.parametrize(("method", "path"), [("GET", "/api/process"), ("PUT", "/"), ("DELETE", "/health")])
    def test_unserved_method_reads_as_not_found(self, client: TestClient, method: str, path: str) -> None:
        resp = client.request(method, path)
        assert resp.status_code == 404
        assert resp.json() == {"status": "error", "message": "Not found"}

    def test_plain_options_is_ok(self, client: TestClient) -> None:
        assert client.options("/").status_code == 200
        assert client.options("/api/process").status_code == 200


class TestProcess:
    @pytest.mark.parametrize("path", ["/", "/api/process"])
    def test_success(self, client: TestClient, scraper: MagicMock, sessions: _FakeSessions, path: str) -> None:
        resp = client.post(path, json={"url": VIDEO_URL})

        assert resp.status_code == 200
        assert resp.json() == {
            "status": "success",
            "original_url": VIDEO_URL,
            "title": "My Video",
            "download_options": [
                {"url": "https://grabnwatch.com/w/abc123", "label": "720p"},
                {"url": "https://grabnwatch.com/r/xyz", "label": "Download"},
            ],
        }
        scraper.scrape.assert_awaited_once_with(sessions.page, VIDEO_URL)

    def test_invalid_json(self, client: TestClient, scraper: MagicMock) -> None:
        resp = client.post("/", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"status": "error", "message": "Invalid JSON in request body"}
        scraper.scrape.assert_not_awaited()

    def test_empty_body(self, client: TestClient) -> None:
        resp = client.post("/", content=b"")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid JSON in request body"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"url": ""}, {"url": 42}, {"link": VIDEO_URL}, [VIDEO_URL]],
    )
    def test_missing_or_invalid_url(self, client: TestClient, scraper: MagicMock, payload) -> None:
        resp = client.post("/", json=payload)
        assert resp.status_code == 400
        assert resp.json() == {
            "status": "error",
            "message": "Missing or invalid 'url' field in request body",
        }
        scraper.scrape.assert_not_awaited()

    def test_json_null_body(self, client: TestClient) -> None:
        resp = client.post("/", content=b"null", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Missing or invalid 'url' field in request body"

    def test_no_links_found(self, client: TestClient, scraper: MagicMock) -> None:
        scraper.scrape.return_value = None
        resp = client.post("/", json={"url": VIDEO_URL})
        assert resp.status_code == 404
        assert resp.json() == {
            "status": "error",
            "message": "Failed to generate download links",
            "original_url": VIDEO_URL,
        }

    def test_browser_startup_failure(self, client: TestClient, sessions: _FakeSessions) -> None:
        sessions.error = BrowserStartupError("browser launch failed: no chromium")
        resp = client.post("/", json={"url": VIDEO_URL})
        assert resp.status_code == 500
        assert resp.json() == {
            "status": "error",
            "message": "Server error: browser launch failed: no chromium",
        }

    def test_unexpected_scraper_error(self, client: TestClient, scraper: MagicMock) -> None:
        scraper.scrape.side_effect = RuntimeError("page crashed")
        resp = client.post("/api/process", json={"url": VIDEO_URL})
        assert resp.status_code == 500
        assert resp.json()["message"] == "Server error: page crashed"


class TestCors:
    def test_preflight(self, client: TestClient) -> None:
        resp = client.options(
            "/",
            headers={
                "Origin": "https://app.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code == 200
        assert "POST" in resp.headers["access-control-allow-methods"]
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_simple_request_gets_origin_header(self, client: TestClient) -> None:
        resp = client.get("/", headers={"Origin": "https://app.example"})
        assert resp.headers["access-control-allow-origin"] in ("*", "https://app.example")
