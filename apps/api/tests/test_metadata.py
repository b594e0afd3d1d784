from unittest.mock import AsyncMock, patch

import pytest

from services.errors import ValidationError
from services.metadata import (
    MetadataFetchError,
    extract_source,
    extract_title,
    fetch_link_metadata,
    source_from_hostname,
)


ARTICLE_PAGE = """
<html><head>
  <title>Fallback title</title>
  <meta content="FCC &amp; net neutrality" property="og:title">
  <meta property="og:site_name" content="The Verge">
</head></html>
"""


def test_extract_title_prefers_open_graph_and_unescapes():
    assert extract_title(ARTICLE_PAGE) == "FCC & net neutrality"
    assert extract_title("<html><TITLE> Plain page </TITLE></html>") == "Plain page"
    assert extract_title("<html></html>") == ""


def test_apostrophes_inside_attribute_values_are_kept():
    page = """
    <head>
      <meta property="og:title" content="Don't Regulate AI Yet">
      <meta property="og:site_name" content="O'Reilly Media">
    </head>
    """
    assert extract_title(page) == "Don't Regulate AI Yet"
    assert extract_source(page, "https://www.oreilly.com/radar/x") == "O'Reilly Media"
    assert extract_title("<title>Where's the FTC?</title>") == "Where's the FTC?"
    assert extract_title("<meta name='og:title' content='Say \"no\" to tracking'>") == 'Say "no" to tracking'


def test_extract_source_falls_back_to_hostname():
    assert extract_source(ARTICLE_PAGE, "https://www.theverge.com/x") == "The Verge"
    assert extract_source("<html></html>", "https://www.tech-policy.org/story") == "Tech Policy"
    assert source_from_hostname("https://lawfaremedia.org/article") == "Lawfaremedia"
    assert source_from_hostname("not a url") == ""


@pytest.mark.asyncio
async def test_fetch_rejects_non_http_urls_before_fetching():
    with pytest.raises(ValidationError):
        await fetch_link_metadata("ftp://files.example/doc")
    with pytest.raises(ValidationError):
        await fetch_link_metadata("")


@pytest.mark.asyncio
async def test_metadata_route_returns_extracted_fields(api_client):
    metadata = {"title": "FCC & net neutrality", "source": "The Verge", "url": "https://www.theverge.com/x"}
    with patch("routers.metadata.fetch_link_metadata", new=AsyncMock(return_value=metadata)) as fetch:
        response = await api_client.get("/api/metadata", params={"url": "https://www.theverge.com/x"})

    assert response.status_code == 200
    assert response.json() == metadata
    fetch.assert_awaited_once_with("https://www.theverge.com/x")


@pytest.mark.asyncio
async def test_metadata_route_maps_failures(api_client):
    missing = await api_client.get("/api/metadata")
    assert missing.status_code == 400
    assert missing.json() == {"error": "Validation failed", "message": "URL parameter required"}

    failing = AsyncMock(side_effect=MetadataFetchError("Failed to fetch URL: 503"))
    with patch("routers.metadata.fetch_link_metadata", new=failing):
        response = await api_client.get("/api/metadata", params={"url": "https://down.example"})

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to fetch metadata", "message": "Failed to fetch URL: 503"}
