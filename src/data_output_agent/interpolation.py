"""Template interpolation of event payloads.

A template is any nested structure of dicts, lists and scalars. String leaves
are classified once, when the template is compiled:

- ``"$.path"`` is replaced by the value the path resolves to, whatever its type.
- ``"Text <$.path> more text"`` always yields a string, with every ``<$...>``
  span replaced by the string form of the resolved value.
- Anything else is copied through unchanged.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from data_output_agent.jsonpath import JsonPath, parse_path

SPAN_RE = re.compile(r"<([^<>]+)>")


@dataclass(frozen=True)
class PathLeaf:
    path: JsonPath

    def render(self, payload: Any) -> Any:
        return self.path.resolve(payload)


@dataclass(frozen=True)
class InterpolatedLeaf:
    """Literal text mixed with paths, rendered to a single string."""

    parts: tuple

    def render(self, payload: Any) -> str:
        chunks = []
        for part in self.parts:
            if isinstance(part, JsonPath):
                chunks.append(stringify(part.resolve(payload)))
            else:
                chunks.append(part)
        return "".join(chunks)


class CompiledTemplate:
    """A template whose paths have been parsed and checked."""

    def __init__(self, template: Any):
        self.source = template
        self._root = _compile(template)

    def render(self, payload: Any) -> Any:
        """Interpolate the template against one payload."""
        return _render(self._root, payload)


def compile_template(template: Any) -> CompiledTemplate:
    """Compile a template.

    Raises:
        PathSyntaxError: If any path in the template is malformed.
    """
    return CompiledTemplate(template)


def interpolate(template: Any, payload: Any) -> Any:
    """Interpolate a raw or compiled template against a payload."""
    if not isinstance(template, CompiledTemplate):
        template = CompiledTemplate(template)
    return template.render(payload)


def stringify(value: Any) -> str:
    """String form of a resolved value as it appears inside interpolated text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _compile(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _compile(value) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [_compile(value) for value in node]
    if isinstance(node, str):
        return _compile_string(node)
    return node


def _compile_string(text: str) -> Any:
    if text.startswith("$"):
        return PathLeaf(parse_path(text))

    parts = []
    last = 0
    for match in SPAN_RE.finditer(text):
        expression = match.group(1).strip()
        if not expression.startswith("$"):
            continue
        if match.start() > last:
            parts.append(text[last:match.start()])
        parts.append(parse_path(expression))
        last = match.end()

    if not parts:
        return text
    if last < len(text):
        parts.append(text[last:])
    return InterpolatedLeaf(tuple(parts))


def _render(node: Any, payload: Any) -> Any:
    if isinstance(node, dict):
        return {key: _render(value, payload) for key, value in node.items()}
    if isinstance(node, list):
        return [_render(value, payload) for value in node]
    if isinstance(node, (PathLeaf, InterpolatedLeaf)):
        return node.render(payload)
    return node
