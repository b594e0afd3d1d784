"""
RSS 2.0 feed building.

Items come from the content sections and, for the combined feed, from an
optional external RSS source. Everything is merged newest first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Iterable, List, Optional
from xml.etree import ElementTree as ET

import httpx

from config import settings
from models.base import SheetRecord
from models.sections import section_keys
from services.content import ContentRepository, resolve_section
from services.search import fan_out

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

ET.register_namespace("atom", ATOM_NS)


@dataclass
class FeedEntry:
    title: str
    link: str
    source: str
    published: Optional[datetime] = None
    source_url: str = ""
    category: str = ""


def _parse_published(value: str) -> Optional[datetime]:
    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def entries_from_records(section_label: str, records: Iterable[SheetRecord], feed_url: str) -> List[FeedEntry]:
    entries = []
    for record in records:
        entries.append(
            FeedEntry(
                title=record.title,
                link=record.url,
                source=record.source or section_label,
                published=_parse_published(record.sort_date),
                source_url=feed_url,
                category=section_label,
            )
        )
    return entries


def parse_rss(xml_text: str, feed_url: str) -> List[FeedEntry]:
    """Parse the <item> elements of an RSS 2.0 document."""
    root = ET.fromstring(xml_text)
    channel = root.find("channel")
    if channel is None:
        return []
    channel_title = (channel.findtext("title") or "").strip()
    entries = []
    for item in channel.findall("item"):
        title = (item.findtext("title") or "").strip()
        link = (item.findtext("link") or item.findtext("guid") or "").strip()
        if not title or not link:
            continue
        entries.append(
            FeedEntry(
                title=title,
                link=link,
                source=(item.findtext("source") or channel_title).strip(),
                published=_parse_published(item.findtext("pubDate") or ""),
                source_url=feed_url,
            )
        )
    return entries


async def fetch_external_entries(feed_url: str, timeout_s: int = 10) -> List[FeedEntry]:
    """Fetch and parse the external feed; any failure yields no entries."""
    if not feed_url:
        return []
    try:
        async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True) as client:
            response = await client.get(
                feed_url,
                headers={"Accept": "application/rss+xml, application/xml;q=0.9, */*;q=0.1"},
            )
        if response.status_code != 200:
            logger.warning("External RSS %s returned HTTP %s", feed_url, response.status_code)
            return []
        return parse_rss(response.text, feed_url)
    except (httpx.HTTPError, ET.ParseError) as exc:
        logger.warning("External RSS %s unavailable: %s", feed_url, exc)
        return []


def merge_entries(*groups: Iterable[FeedEntry], limit: Optional[int] = None) -> List[FeedEntry]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    merged = [entry for group in groups for entry in group]
    merged.sort(key=lambda entry: entry.published or oldest, reverse=True)
    if limit and limit > 0:
        return merged[:limit]
    return merged


def _text(parent: ET.Element, tag: str, value: str, **attrib) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib)
    element.text = value
    return element


def render_rss(
    entries: List[FeedEntry],
    *,
    title: str,
    description: str,
    site_url: str,
    self_url: str,
    build_date: Optional[datetime] = None,
) -> str:
    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _text(channel, "title", title)
    _text(channel, "link", site_url)
    _text(channel, "description", description)
    ET.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        {"href": self_url, "rel": "self", "type": "application/rss+xml"},
    )
    _text(channel, "lastBuildDate", format_datetime(build_date or datetime.now(timezone.utc), usegmt=True))

    for entry in entries:
        item = ET.SubElement(channel, "item")
        _text(item, "title", entry.title)
        _text(item, "link", entry.link)
        _text(item, "guid", entry.link, isPermaLink="true")
        if entry.published is not None:
            _text(item, "pubDate", format_datetime(entry.published.astimezone(timezone.utc), usegmt=True))
        if entry.category:
            _text(item, "category", entry.category)
        if entry.source:
            _text(item, "source", entry.source, url=entry.source_url or self_url)

    return XML_DECLARATION + ET.tostring(rss, encoding="unicode")


async def build_feed(repository: ContentRepository, section_key: Optional[str] = None) -> str:
    """Render the combined feed, or a single section's feed when ``section_key`` is given."""
    site_url = settings.SITE_URL.rstrip("/")
    limit = max(int(settings.RSS_ITEM_LIMIT), 1)

    if section_key:
        section = resolve_section(section_key)
        self_url = f"{site_url}/api/rss/{section.key}"
        page = await repository.list_items(section.key, limit=limit)
        entries = merge_entries(entries_from_records(section.label, page.items, self_url), limit=limit)
        title = f"{settings.SITE_TITLE} - {section.label}"
    else:
        self_url = f"{site_url}/api/rss"
        per_section = await fan_out(repository, section_keys(), limit=limit)
        groups = [
            entries_from_records(resolve_section(key).label, records, self_url)
            for key, records in per_section.items()
        ]
        groups.append(
            await fetch_external_entries(settings.EXTERNAL_RSS_URL, settings.EXTERNAL_RSS_TIMEOUT_SECONDS)
        )
        entries = merge_entries(*groups, limit=limit)
        title = settings.SITE_TITLE

    return render_rss(
        entries,
        title=title,
        description=settings.SITE_DESCRIPTION,
        site_url=site_url,
        self_url=self_url,
    )
