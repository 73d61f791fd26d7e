"""The Data Output Agent: renders received events as an RSS or JSON feed."""

import logging
from datetime import datetime, timedelta, timezone

from data_output_agent.access import authorize, not_authorized
from data_output_agent.config import OutputOptions
from data_output_agent.feed_builder import assemble_feed
from data_output_agent.models import OutputFormat, WebResponse
from data_output_agent.renderers import json_response, xml_response

logger = logging.getLogger(__name__)


class FeedRenderError(Exception):
    """Raised when the events for a feed could not be fetched."""


class DataOutputAgent:
    """Serves a secret-gated feed of the most recent events.

    Args:
        options: Validated agent options.
        store: Event source. Must provide ``fetch_recent(limit)`` returning
            events most-recent-first; ``last_received_at()`` is used by
            ``is_working`` when available.
    """

    def __init__(self, options: OutputOptions, store):
        self.options = options
        self.store = store

    @property
    def name(self) -> str:
        return self.options.name

    def receive_web_request(
        self,
        secret: str | None,
        requested_format: str | None,
        now: datetime | None = None,
    ) -> WebResponse:
        """Handle a feed request.

        Raises:
            FeedRenderError: If the event store fails. No partial feed is produced.
        """
        output_format = OutputFormat.from_request(requested_format)

        if not authorize(secret, self.options.policy):
            logger.warning("Rejected %s feed request for '%s'", output_format.value, self.name)
            return not_authorized(output_format)

        try:
            events = self.store.fetch_recent(self.options.events_to_show)
        except Exception as e:
            logger.error("Could not fetch events for '%s': %s", self.name, e)
            raise FeedRenderError(f"Could not fetch events: {e}") from e

        feed = assemble_feed(events, self.options, now=now)
        logger.info(
            "Rendered %s feed for '%s' with %d items",
            output_format.value, self.name, len(feed.items),
        )

        if output_format is OutputFormat.JSON:
            return json_response(feed)
        return xml_response(feed)

    def is_working(self, now: datetime | None = None) -> bool:
        """True if an event arrived within the expected receive period."""
        last_received = self.store.last_received_at()
        if last_received is None:
            return False
        now = now or datetime.now(timezone.utc)
        if last_received.tzinfo is None:
            last_received = last_received.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        period = timedelta(days=self.options.expected_receive_period_in_days)
        return last_received > now - period
