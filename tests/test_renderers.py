"""Tests for the RSS and JSON renderers."""

import json
import xml.etree.ElementTree as ET

import feedparser

from data_output_agent.models import Feed
from data_output_agent.renderers import render_json, render_xml, xml_child_tag, xml_tag, xml_text

from conftest import BASE_TIME


def make_feed(items, title="Comics", description="Recent comics", ttl=60):
    return Feed(title=title, description=description, ttl=ttl, generated_at=BASE_TIME, items=items)


ITEMS = [
    {"title": "Comic 2", "link": "https://xkcd.com/2/", "guid": 2, "pubDate": "Mon, 19 Oct 2026 12:00:00 +0000"},
    {"title": "Comic 1", "link": "https://xkcd.com/1/", "guid": 1, "pubDate": "Mon, 19 Oct 2026 11:00:00 +0000"},
]


class TestRenderXml:
    def test_is_well_formed_rss(self):
        root = ET.fromstring(render_xml(make_feed(ITEMS)).encode("utf-8"))
        assert root.tag == "rss"
        assert root.get("version") == "2.0"
        channel = root.find("channel")
        assert channel.findtext("title") == "Comics"
        assert channel.findtext("description") == "Recent comics"
        assert channel.findtext("lastBuildDate") == "Mon, 19 Oct 2026 12:00:00 +0000"
        assert channel.findtext("pubDate") == "Mon, 19 Oct 2026 12:00:00 +0000"
        assert channel.findtext("ttl") == "60"

    def test_items_in_order_with_fields_in_template_order(self):
        channel = ET.fromstring(render_xml(make_feed(ITEMS)).encode("utf-8")).find("channel")
        items = channel.findall("item")
        assert [item.findtext("guid") for item in items] == ["2", "1"]
        assert [child.tag for child in items[0]] == ["title", "link", "guid", "pubDate"]

    def test_readable_by_feedparser(self):
        parsed = feedparser.parse(render_xml(make_feed(ITEMS)).encode("utf-8"))
        assert parsed.feed.title == "Comics"
        assert [entry.title for entry in parsed.entries] == ["Comic 2", "Comic 1"]
        assert parsed.entries[0].link == "https://xkcd.com/2/"

    def test_escapes_payload_content(self):
        body = render_xml(make_feed([{"title": "<b>&</b>"}]))
        assert "<title>&lt;b&gt;&amp;&lt;/b&gt;</title>" in body
        assert "<b>&</b>" not in body

    def test_escapes_quotes(self):
        body = render_xml(make_feed([{"title": 'Say "hi" it\'s'}]))
        assert "<title>Say &quot;hi&quot; it&apos;s</title>" in body

    def test_escapes_feed_metadata(self):
        body = render_xml(make_feed([], title="Tom & Jerry", description="<script>"))
        assert "<title>Tom &amp; Jerry</title>" in body
        assert "<description>&lt;script&gt;</description>" in body

    def test_plain_values_have_no_extra_escaping(self):
        body = render_xml(make_feed([{"title": "Hello"}]))
        assert "  <title>Hello</title>" in body

    def test_nested_values(self):
        item = {
            "enclosure": {"url": "https://x/1.png", "length": 10},
            "categories": ["science", "math"],
            "missing": None,
            "flag": True,
            "empty": [],
        }
        item_el = ET.fromstring(render_xml(make_feed([item])).encode("utf-8")).find("channel/item")
        assert item_el.find("enclosure").findtext("url") == "https://x/1.png"
        assert item_el.find("enclosure").findtext("length") == "10"
        assert len(item_el.findall("categories")) == 1
        assert [c.text for c in item_el.find("categories").findall("category")] == ["science", "math"]
        assert item_el.find("missing").text is None
        assert item_el.findtext("flag") == "true"
        assert item_el.find("empty") is not None
        assert len(item_el.find("empty")) == 0

    def test_control_characters_are_dropped(self):
        body = render_xml(make_feed([{"title": "bell\x07 tab\t"}]))
        assert "<title>bell tab\t</title>" in body
        ET.fromstring(body.encode("utf-8"))

    def test_lone_surrogates_are_dropped(self):
        title = json.loads('"bad \\ud800 char"')
        body = render_xml(make_feed([{"title": title}], title=title))
        encoded = body.encode("utf-8")
        assert "<title>bad  char</title>" in body
        ET.fromstring(encoded)

    def test_one_element_per_list_field(self):
        body = render_xml(make_feed([{"tags": []}, {"tags": ["x", "y"]}]))
        items = ET.fromstring(body.encode("utf-8")).findall("channel/item")
        assert [len(item.findall("tags")) for item in items] == [1, 1]
        assert "  <tags/>" in body
        assert [tag.text for tag in items[1].find("tags")] == ["x", "y"]
        assert [tag.tag for tag in items[1].find("tags")] == ["tag", "tag"]


class TestXmlHelpers:
    def test_xml_text(self):
        assert xml_text(None) == ""
        assert xml_text(False) == "false"
        assert xml_text(3) == "3"

    def test_xml_tag(self):
        assert xml_tag("title") == "title"
        assert xml_tag("media:content") == "media_content"
        assert xml_tag("has space") == "has_space"
        assert xml_tag("1st") == "_1st"
        assert xml_tag("") == "_"

    def test_xml_child_tag(self):
        assert xml_child_tag("tags") == "tag"
        assert xml_child_tag("categories") == "category"
        assert xml_child_tag("address") == "address"
        assert xml_child_tag("data") == "data"


class TestRenderJson:
    def test_shape(self):
        body = render_json(make_feed(ITEMS))
        assert list(body) == ["title", "description", "pubDate", "items"]
        assert body["title"] == "Comics"
        assert body["description"] == "Recent comics"
        assert body["pubDate"] == "2026-10-19T12:00:00+00:00"
        assert body["items"] == ITEMS

    def test_values_are_not_escaped_or_quoted(self):
        body = render_json(make_feed([{"title": "<b>&</b>", "n": 1}]))
        assert body["items"][0] == {"title": "<b>&</b>", "n": 1}

    def test_is_json_serializable(self):
        body = render_json(make_feed(ITEMS))
        assert json.loads(json.dumps(body)) == body
