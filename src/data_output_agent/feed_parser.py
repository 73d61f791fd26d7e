"""Turn upstream RSS/Atom feeds into event payloads using feedparser."""

from calendar import timegm
from dataclasses import dataclass
from datetime import datetime, timezone
from time import struct_time
from urllib.parse import urlparse

import feedparser


MAX_ENTRIES_PER_FETCH = 50


@dataclass
class ParsedFeed:
    """Result of parsing an upstream feed."""

    title: str
    url: str
    entries: list[dict]
    warnings: list[str]


class FeedParseError(Exception):
    """Raised when a feed cannot be parsed."""


def fetch_and_parse(url: str) -> ParsedFeed:
    """Fetch an RSS or Atom feed and convert its entries to event payloads.

    Raises:
        FeedParseError: If the URL is invalid, unreachable, or not a valid feed.
    """
    _validate_url(url)

    parsed = feedparser.parse(url)

    status = parsed.get("status", 200)
    if status in (401, 403):
        raise FeedParseError(
            "Feed requires authentication. Ensure the URL is publicly accessible."
        )
    if status >= 400:
        raise FeedParseError(f"Could not reach URL: HTTP {status}")

    if not parsed.feed.get("title"):
        raise FeedParseError("URL does not point to a valid RSS or Atom feed")

    warnings: list[str] = []
    if parsed.bozo:
        warnings.append(f"Feed has formatting issues: {parsed.bozo_exception}")

    title = parsed.feed.get("title")
    entries = _entries_to_payloads(parsed.entries, title, url, warnings)

    return ParsedFeed(
        title=title,
        url=url,
        entries=entries[:MAX_ENTRIES_PER_FETCH],
        warnings=warnings,
    )


def _validate_url(url: str) -> None:
    """Validate that the URL has a valid format."""
    try:
        result = urlparse(url)
    except ValueError:
        raise FeedParseError("Invalid URL format")
    if not result.scheme or not result.netloc:
        raise FeedParseError("Invalid URL format")
    if result.scheme not in ("http", "https"):
        raise FeedParseError("Invalid URL format: only http and https are supported")


def _entries_to_payloads(
    entries: list, feed_title: str, feed_url: str, warnings: list[str]
) -> list[dict]:
    """Build one JSON-ready payload per entry, oldest first."""
    payloads = []
    for entry in entries:
        guid = entry.get("id") or entry.get("guid") or entry.get("link")
        if not guid:
            warnings.append(
                f"Skipping entry with no identifier: {entry.get('title', 'unknown')}"
            )
            continue

        published = _parse_date(entry)
        payloads.append({
            "guid": guid,
            "title": entry.get("title", "Untitled"),
            "url": entry.get("link"),
            "summary": entry.get("summary") or entry.get("description"),
            "published": published.isoformat() if published else None,
            "tags": [t.get("term") for t in entry.get("tags", []) if t.get("term")],
            "feed": {"title": feed_title, "url": feed_url},
        })

    # Record oldest first so the newest entry gets the highest event id
    payloads.sort(key=lambda p: p["published"] or "")
    return payloads


def _parse_date(entry: dict) -> datetime | None:
    """Parse publication date from a feedparser entry as an aware UTC datetime."""
    for field in ("published_parsed", "updated_parsed"):
        time_struct = entry.get(field)
        if isinstance(time_struct, struct_time):
            try:
                return datetime.fromtimestamp(timegm(time_struct), tz=timezone.utc)
            except (ValueError, OverflowError):
                continue
    return None
