"""Assemble interpolated events into a format-agnostic Feed."""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime

from data_output_agent.config import OutputOptions
from data_output_agent.interpolation import CompiledTemplate, stringify
from data_output_agent.models import Event, Feed

logger = logging.getLogger(__name__)


def rfc2822(dt: datetime) -> str:
    """Format a datetime the way RSS expects. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_datetime(dt)


def build_item(template: CompiledTemplate, event: Event) -> dict:
    """Interpolate the item template for one event and add guid/pubDate."""
    item = template.render(event.payload)
    item.pop("guid", None)
    item.pop("pubDate", None)
    item["guid"] = event.id
    item["pubDate"] = rfc2822(event.created_at)
    return item


def feed_title(options: OutputOptions) -> str:
    title = _render_meta(options.title_template)
    if title.strip():
        return title
    return f"{options.name} Event Feed"


def feed_description(options: OutputOptions) -> str:
    description = _render_meta(options.description_template)
    if description.strip():
        return description
    return f"A feed of Events received by the '{options.name}' agent"


def assemble_feed(
    events: list[Event],
    options: OutputOptions,
    now: datetime | None = None,
) -> Feed:
    """Build a Feed from events ordered most-recent-first.

    Only the first ``options.events_to_show`` events are used.
    """
    window = list(events)[: options.events_to_show]
    items = [build_item(options.item_template, event) for event in window]
    logger.debug("Assembled %d of %d events into feed '%s'", len(items), len(events), options.name)

    return Feed(
        title=feed_title(options),
        description=feed_description(options),
        ttl=options.ttl,
        generated_at=now or datetime.now(timezone.utc),
        items=items,
    )


def _render_meta(template: CompiledTemplate | None) -> str:
    """Feed-level fields are rendered without any event payload."""
    if template is None:
        return ""
    return stringify(template.render({}))
