"""Shared test fixtures for Data Output Agent tests."""

import copy
import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from data_output_agent.config import DEFAULT_OPTIONS, OutputOptions
from data_output_agent.database import EventStore
from data_output_agent.models import Event


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the first article</description>
      <category>news</category>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>article-2</guid>
      <description>Description of the second article</description>
      <pubDate>Fri, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

SAMPLE_NOT_A_FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<html>
  <body>This is not a feed</body>
</html>"""

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_db_path():
    """Provide a temporary SQLite database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    yield path
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(path + suffix)
        except OSError:
            pass


@pytest.fixture
def store(tmp_db_path):
    """A connected SQLite event store."""
    event_store = EventStore(tmp_db_path)
    event_store.connect()
    yield event_store
    event_store.close()


@pytest.fixture
def raw_options():
    """A fresh copy of the default agent options."""
    return copy.deepcopy(DEFAULT_OPTIONS)


@pytest.fixture
def options(raw_options):
    """Validated default options."""
    return OutputOptions.from_options("XKCD Output", raw_options)


@pytest.fixture
def make_events():
    """Build ``count`` events, most recent first, one hour apart."""

    def _make(count: int, payload_factory=None) -> list[Event]:
        payload_factory = payload_factory or (lambda n: {"title": f"Comic {n}", "url": f"https://xkcd.com/{n}/"})
        return [
            Event(id=n, created_at=BASE_TIME - timedelta(hours=count - n), payload=payload_factory(n))
            for n in range(count, 0, -1)
        ]

    return _make


@pytest.fixture
def fake_store(make_events):
    """A MagicMock event store serving three events."""
    mock = MagicMock()
    events = make_events(3)
    mock.fetch_recent.side_effect = lambda limit: events[:limit]
    mock.last_received_at.return_value = events[0].created_at
    return mock


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_not_a_feed_xml():
    """Sample XML that is not a feed."""
    return SAMPLE_NOT_A_FEED_XML
