"""Serialize a Feed as RSS 2.0 or as a JSON document."""

import re
from typing import Any
from xml.sax.saxutils import escape

from data_output_agent.feed_builder import rfc2822
from data_output_agent.models import Feed, WebResponse

XML_CONTENT_TYPE = "text/xml"
JSON_CONTENT_TYPE = "application/json"

_ENTITIES = {'"': "&quot;", "'": "&apos;"}
# Characters that are not allowed anywhere in an XML 1.0 document
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
_INVALID_TAG_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def render_json(feed: Feed) -> dict:
    """Feed as a JSON-serializable dict.

    The feed carries a single generation timestamp; items keep the guid and
    pubDate they were built with.
    """
    return {
        "title": feed.title,
        "description": feed.description,
        "pubDate": feed.generated_at.isoformat(),
        "items": feed.items,
    }


def render_xml(feed: Feed) -> str:
    """Feed as an RSS 2.0 document."""
    build_date = xml_text(rfc2822(feed.generated_at))
    lines = [
        '<?xml version="1.0" encoding="UTF-8" ?>',
        '<rss version="2.0">',
        "<channel>",
        f" <title>{xml_text(feed.title)}</title>",
        f" <description>{xml_text(feed.description)}</description>",
        f" <lastBuildDate>{build_date}</lastBuildDate>",
        f" <pubDate>{build_date}</pubDate>",
        f" <ttl>{int(feed.ttl)}</ttl>",
        "",
    ]
    for item in feed.items:
        _append_element(lines, "item", item, depth=1)
    lines.append("</channel>")
    lines.append("</rss>")
    return "\n".join(lines) + "\n"


def json_response(feed: Feed) -> WebResponse:
    return WebResponse(render_json(feed), 200, JSON_CONTENT_TYPE)


def xml_response(feed: Feed) -> WebResponse:
    return WebResponse(render_xml(feed), 200, XML_CONTENT_TYPE)


def xml_text(value: Any) -> str:
    """Escape a scalar for use as XML character data."""
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return escape(_INVALID_XML_CHARS.sub("", text), _ENTITIES)


def xml_tag(key: Any) -> str:
    """Turn an arbitrary mapping key into a usable element name."""
    tag = _INVALID_TAG_CHARS.sub("_", str(key))
    if not tag or not (tag[0].isalpha() or tag[0] == "_"):
        tag = "_" + tag
    return tag


def xml_child_tag(tag: str) -> str:
    """Element name for the entries of a list, e.g. tags -> tag, categories -> category."""
    if tag.endswith("ies") and len(tag) > 3:
        return tag[:-3] + "y"
    if tag.endswith("s") and not tag.endswith("ss") and len(tag) > 1:
        return tag[:-1]
    return tag


def _append_element(lines: list[str], key: Any, value: Any, depth: int) -> None:
    indent = " " * depth
    tag = xml_tag(key)

    if value is None or value == {} or value == []:
        lines.append(f"{indent}<{tag}/>")
    elif isinstance(value, dict):
        lines.append(f"{indent}<{tag}>")
        for child_key, child_value in value.items():
            _append_element(lines, child_key, child_value, depth + 1)
        lines.append(f"{indent}</{tag}>")
    elif isinstance(value, list):
        child_tag = xml_child_tag(tag)
        lines.append(f"{indent}<{tag}>")
        for entry in value:
            _append_element(lines, child_tag, entry, depth + 1)
        lines.append(f"{indent}</{tag}>")
    else:
        lines.append(f"{indent}<{tag}>{xml_text(value)}</{tag}>")
