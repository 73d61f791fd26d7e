"""Background polling loop that records upstream feed entries as events."""

import asyncio
import logging
import os

from data_output_agent.database import EventStore
from data_output_agent.feed_parser import FeedParseError, fetch_and_parse

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 900  # 15 minutes


def source_urls() -> list[str]:
    """Upstream feed URLs from DATA_OUTPUT_SOURCES (comma separated)."""
    raw = os.environ.get("DATA_OUTPUT_SOURCES", "")
    return [url.strip() for url in raw.split(",") if url.strip()]


async def poll_sources_once(store: EventStore, urls: list[str]) -> int:
    """Poll every source once. Returns count of new events recorded."""
    total_new = 0

    for url in urls:
        try:
            parsed = await asyncio.to_thread(fetch_and_parse, url)
        except FeedParseError as e:
            logger.warning("Source '%s' error: %s", url, e)
            continue
        except Exception as e:
            logger.warning("Source '%s' unexpected error: %s", url, e)
            continue

        for warning in parsed.warnings:
            logger.debug("Source '%s': %s", url, warning)

        new_events = 0
        for payload in parsed.entries:
            if store.add_event(payload, dedup_key=f"{url}#{payload['guid']}"):
                new_events += 1

        if new_events:
            total_new += new_events
            logger.info("Source '%s': %d new events", parsed.title, new_events)

    return total_new


async def start_polling(store: EventStore, urls: list[str]) -> None:
    """Run the polling loop indefinitely."""
    interval = int(os.environ.get("DATA_OUTPUT_POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
    logger.info("Poller started for %d sources (interval: %ds)", len(urls), interval)

    while True:
        try:
            new_count = await poll_sources_once(store, urls)
            if new_count > 0:
                logger.info("Poll cycle complete: %d new events", new_count)
        except Exception as e:
            logger.error("Poll cycle failed: %s", e)

        await asyncio.sleep(interval)
