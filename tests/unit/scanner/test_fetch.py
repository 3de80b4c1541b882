"""Unit tests for the HTTP fetch boundary."""

import httpx
import pytest
from structlog.testing import capture_logs

from readyscan.config import ScanConfig
from readyscan.protocols import Category
from readyscan.scanner import Scanner, fetch_document


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchDocument:
    """Responses and transport failures become documents."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Body, status and lower-cased headers are carried over."""

        def handler(request):
            return httpx.Response(
                200,
                html="<html><body><h1>Hello</h1></body></html>",
                headers={"Content-Security-Policy": "default-src 'self'"},
            )

        async with client_for(handler) as client:
            document = await fetch_document("https://example.com/", client=client)

        assert document.status == 200
        assert document.fetch_error is None
        assert "<h1>Hello</h1>" in document.html
        assert document.headers["content-security-policy"] == "default-src 'self'"

    @pytest.mark.asyncio
    async def test_error_status_is_not_raised(self):
        """A 404 still returns a document carrying the status."""
        async with client_for(lambda request: httpx.Response(404, text="Not found")) as client:
            document = await fetch_document("https://example.com/missing", client=client)

        assert document.status == 404
        assert document.fetch_error is None

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        """Connection errors are captured on the document."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            document = await fetch_document("https://unreachable.example/", client=client)

        assert document.status is None
        assert document.html == ""
        assert document.fetch_error.startswith("ConnectError")

    @pytest.mark.asyncio
    async def test_failure_logged_as_structured_event(self):
        """Transport failures are logged through structlog with key-value fields."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            with capture_logs() as logs:
                await fetch_document("https://unreachable.example/", client=client)

        (event,) = [entry for entry in logs if entry["event"] == "Fetch failed"]
        assert event["log_level"] == "warning"
        assert event["url"] == "https://unreachable.example/"
        assert event["error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_config_attached(self):
        """The fetched document carries the supplied configuration."""
        config = ScanConfig.verbose()
        async with client_for(lambda request: httpx.Response(200, text="<p>x</p>")) as client:
            document = await fetch_document("https://example.com/", config, client=client)

        assert document.config is config


class TestScanUrl:
    """Fetching and scanning in one call."""

    @pytest.mark.asyncio
    async def test_unreachable_page_still_scored(self):
        """A failed fetch produces a result led by MISC-001."""

        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        async with client_for(handler) as client:
            result = await Scanner().scan_url("https://unreachable.example/", client=client)

        assert result.issues[0].id == "MISC-001"
        assert result.issues[0].category is Category.MISC
        assert result.scoring is not None

    @pytest.mark.asyncio
    async def test_not_found_page(self):
        """A 404 response produces the HTTP error finding."""
        async with client_for(lambda request: httpx.Response(404, text="")) as client:
            result = await Scanner().scan_url("https://example.com/missing", client=client)

        assert [f.id for f in result.issues_in(Category.MISC)] == ["MISC-002"]
