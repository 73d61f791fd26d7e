"""Agent tool implementations for the Data Output Agent."""

import json

from langchain_core.tools import tool

from data_output_agent.output import DataOutputAgent, FeedRenderError

# Module-level output agent, set during startup
_output: DataOutputAgent | None = None


def set_output_agent(output: DataOutputAgent) -> None:
    """Set the output agent used by all tools."""
    global _output
    _output = output


def _get_output() -> DataOutputAgent:
    """Get the output agent, raising if not set."""
    if _output is None:
        raise RuntimeError("Output agent not initialized. Call set_output_agent() first.")
    return _output


@tool
def record_event(payload: str) -> str:
    """Record a new event that will show up in the feed.

    Args:
        payload: The event payload as a JSON object, e.g. {"title": "Hello", "url": "https://example.com"}.
    """
    output = _get_output()

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        return json.dumps({
            "status": "error",
            "message": f"Payload is not valid JSON: {e}",
        })

    event = output.store.add_event(data)
    return json.dumps({
        "status": "recorded",
        "event": {
            "id": event.id,
            "created_at": event.created_at.isoformat(),
        },
    })


@tool
def list_events(limit: int = 10) -> str:
    """List the most recently received events.

    Args:
        limit: Maximum number of events to return (default 10).
    """
    output = _get_output()
    events = output.store.fetch_recent(limit)

    return json.dumps({
        "events": [
            {
                "id": event.id,
                "created_at": event.created_at.isoformat(),
                "payload": event.payload,
            }
            for event in events
        ],
        "total": output.store.count_events(),
    })


@tool
def render_feed(secret: str, feed_format: str = "xml") -> str:
    """Render the feed exactly as a feed reader would receive it.

    Args:
        secret: One of the configured secrets.
        feed_format: "json" or "xml" (default xml).
    """
    output = _get_output()

    try:
        response = output.receive_web_request(secret, feed_format)
    except FeedRenderError as e:
        return json.dumps({
            "status": "error",
            "message": str(e),
        })

    return json.dumps({
        "status": response.status,
        "content_type": response.content_type,
        "body": response.body,
    })


@tool
def feed_status() -> str:
    """Show the feed's title, item limit, TTL and whether events are arriving as expected."""
    output = _get_output()
    options = output.options
    last_received = output.store.last_received_at()

    return json.dumps({
        "name": output.name,
        "events_to_show": options.events_to_show,
        "ttl": options.ttl,
        "expected_receive_period_in_days": options.expected_receive_period_in_days,
        "event_count": output.store.count_events(),
        "last_received_at": last_received.isoformat() if last_received else None,
        "working": output.is_working(),
    })
