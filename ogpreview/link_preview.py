"""Fetch a page's markup and turn it into a link preview."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from .config import Settings, get_settings
from .resolver import DEFAULT_RULES, PreviewRule, resolve_link_preview
from .scanner import scan_page_description
from .schemas import LinkPreview, PageDescription

logger = logging.getLogger("ogpreview.link_preview")


async def fetch_markup(url: str, client: httpx.AsyncClient, settings: Settings | None = None) -> str | None:
    """Fetch the page and return its (truncated) markup, or None if it can't be fetched."""
    settings = settings or get_settings()
    try:
        response = await client.get(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=settings.request_timeout,
            follow_redirects=settings.follow_redirects,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("HTTP %s while fetching %s", e.response.status_code, url)
        return None
    except httpx.HTTPError as e:
        logger.warning("Failed to fetch %s: %s", url, e)
        return None

    # A multi-byte character split by the cut is dropped.
    body = response.content[: settings.max_markup_bytes]
    return body.decode(response.encoding or "utf-8", errors="ignore")


async def fetch_page_description(
    url: str, client: httpx.AsyncClient, settings: Settings | None = None
) -> PageDescription | None:
    markup = await fetch_markup(url, client, settings)
    if markup is None:
        return None
    return scan_page_description(markup, url)


async def fetch_link_preview(
    url: str,
    client: httpx.AsyncClient,
    *,
    offset: int = 0,
    rules: Sequence[PreviewRule] = DEFAULT_RULES,
    settings: Settings | None = None,
) -> LinkPreview | None:
    """Fetch ``url`` and resolve its OpenGraph data into a preview.

    ``url`` is kept as the preview's original URL; the permanent URL comes
    from the page's ``og:url``.
    """
    description = await fetch_page_description(url, client, settings)
    if description is None:
        return None
    return resolve_link_preview(description, url, offset, rules)
