"""Link metadata extraction used to prefill admin and clipper forms."""

from __future__ import annotations

import logging
from typing import Dict
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from config import settings
from services.errors import ValidationError

logger = logging.getLogger(__name__)


class MetadataFetchError(Exception):
    """The target page could not be fetched."""


def _soup(page: str) -> BeautifulSoup:
    return BeautifulSoup(page or "", "html.parser")


def _meta_content(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find("meta", attrs={"property": prop}) or soup.find("meta", attrs={"name": prop})
    if tag is None:
        return ""
    return str(tag.get("content") or "").strip()


def extract_title(page: str) -> str:
    soup = _soup(page)
    title = _meta_content(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string
    return title.strip()


def source_from_hostname(url: str) -> str:
    """``https://www.tech-policy.org/x`` -> ``Tech Policy``."""
    hostname = (urlparse(url).hostname or "").lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    label = hostname.split(".")[0] if hostname else ""
    return " ".join(word.capitalize() for word in label.split("-") if word)


def extract_source(page: str, url: str) -> str:
    return _meta_content(_soup(page), "og:site_name") or source_from_hostname(url)


def _validate_url(url: str) -> str:
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError("URL parameter required")
    return candidate


async def fetch_link_metadata(url: str) -> Dict[str, str]:
    target = _validate_url(url)
    try:
        async with httpx.AsyncClient(
            timeout=settings.METADATA_TIMEOUT_SECONDS,
            follow_redirects=True,
        ) as client:
            response = await client.get(target, headers={"User-Agent": settings.METADATA_USER_AGENT})
    except httpx.HTTPError as exc:
        raise MetadataFetchError(f"Failed to fetch URL: {exc}") from exc

    if response.status_code != 200:
        raise MetadataFetchError(f"Failed to fetch URL: {response.status_code}")

    page = response.text
    return {
        "title": extract_title(page),
        "source": extract_source(page, target),
        "url": target,
    }
