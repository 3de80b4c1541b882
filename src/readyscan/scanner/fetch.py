"""
Thin HTTP boundary: turns a URL into a :class:`Document`.

Transport failures never raise out of :func:`fetch_document`; they come back
as a document with ``status=None`` and ``fetch_error`` set so the scanner can
still produce a scored result.
"""

from __future__ import annotations

import httpx
import structlog

from readyscan.config import ScanConfig
from readyscan.document import Document

logger = structlog.get_logger(__name__)


async def fetch_document(
    url: str,
    config: ScanConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> Document:
    """Fetch ``url`` and wrap the response, whatever its status, in a Document."""
    config = config or ScanConfig()
    fetch = config.fetch
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(fetch.timeout),
            follow_redirects=fetch.follow_redirects,
            headers={"User-Agent": fetch.user_agent},
        )

    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Fetch failed", url=url, error_type=type(e).__name__, error=str(e))
        return Document(url=url, html="", status=None, config=config, fetch_error=f"{type(e).__name__}: {e}")
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code >= 400:
        logger.info("Fetched error status", url=url, status=response.status_code)
    return Document(
        url=str(response.url),
        html=response.text,
        status=response.status_code,
        config=config,
        headers={key.lower(): value for key, value in response.headers.items()},
    )
