"""JSONPath expressions used to pull values out of event payloads.

Supported syntax, always rooted at ``$``:

    $.title              member access
    $['odd key']         bracket member access (single or double quotes)
    $.items[0]           array index, negative indexes count from the end
    $.items[*].url       wildcard over array elements or mapping values
    $..url               recursive descent
    $.items[0,2]         unions of indexes or quoted names

Resolving a path yields its first match, or None when nothing matches.
Use ``JsonPath.find`` to get every match of a wildcard, union or recursive
descent path.
"""

import re
from dataclasses import dataclass
from typing import Any

WILDCARD = None

_NAME_RE = re.compile(r"[^.\[\]\s'\"*]+")
_INDEX_RE = re.compile(r"-?\d+")


class PathSyntaxError(ValueError):
    """Raised when a path expression cannot be parsed."""

    def __init__(self, expression: str, reason: str):
        super().__init__(f"Invalid path '{expression}': {reason}")
        self.expression = expression
        self.reason = reason


@dataclass(frozen=True)
class Step:
    """One segment of a path: which keys to select, and how deep to look."""

    keys: tuple | None
    recursive: bool = False


@dataclass(frozen=True)
class JsonPath:
    expression: str
    steps: tuple[Step, ...]

    def find(self, payload: Any) -> list:
        """Return every value matched by this path, in document order."""
        nodes = [payload]
        for step in self.steps:
            if step.recursive:
                nodes = [d for node in nodes for d in _descendants(node)]
            nodes = [child for node in nodes for child in _select(node, step.keys)]
        return nodes

    def resolve(self, payload: Any) -> Any:
        """Return the first matched value, or None when the path matches nothing."""
        matches = self.find(payload)
        return matches[0] if matches else None


def parse_path(expression: str) -> JsonPath:
    """Parse a path expression.

    Raises:
        PathSyntaxError: If the expression is not a valid path.
    """
    text = expression.strip()
    if not text.startswith("$"):
        raise PathSyntaxError(expression, "paths must start with '$'")

    steps = []
    pos = 1
    while pos < len(text):
        if text.startswith("..", pos):
            pos += 2
            keys, pos = _parse_selector(expression, text, pos, after_dot=True)
            steps.append(Step(keys, recursive=True))
        elif text[pos] == ".":
            keys, pos = _parse_selector(expression, text, pos + 1, after_dot=True)
            steps.append(Step(keys))
        elif text[pos] == "[":
            keys, pos = _parse_selector(expression, text, pos, after_dot=False)
            steps.append(Step(keys))
        else:
            raise PathSyntaxError(expression, f"unexpected '{text[pos]}' at position {pos}")
    return JsonPath(expression=expression, steps=tuple(steps))


def resolve(payload: Any, expression: str) -> Any:
    """Parse and resolve a path against a payload in one go."""
    return parse_path(expression).resolve(payload)


def _parse_selector(expression: str, text: str, pos: int, after_dot: bool):
    """Parse a name, '*' or bracket selector starting at pos."""
    if pos >= len(text):
        raise PathSyntaxError(expression, "path ends after '.'")
    if text[pos] == "*":
        return WILDCARD, pos + 1
    if text[pos] == "[":
        return _parse_bracket(expression, text, pos + 1)
    if not after_dot:
        raise PathSyntaxError(expression, f"expected '[' at position {pos}")
    match = _NAME_RE.match(text, pos)
    if not match:
        raise PathSyntaxError(expression, f"expected a member name at position {pos}")
    return (match.group(),), match.end()


def _parse_bracket(expression: str, text: str, pos: int):
    """Parse the inside of [...] up to and including the closing bracket."""
    pos = _skip_spaces(text, pos)
    if text.startswith("*", pos):
        pos = _skip_spaces(text, pos + 1)
        if not text.startswith("]", pos):
            raise PathSyntaxError(expression, "unterminated '[*'")
        return WILDCARD, pos + 1

    keys = []
    while True:
        pos = _skip_spaces(text, pos)
        if pos >= len(text):
            raise PathSyntaxError(expression, "unterminated '['")
        if text[pos] in "'\"":
            key, pos = _parse_quoted(expression, text, pos)
            keys.append(key)
        else:
            match = _INDEX_RE.match(text, pos)
            if not match:
                raise PathSyntaxError(expression, f"expected an index or quoted name at position {pos}")
            keys.append(int(match.group()))
            pos = match.end()
        pos = _skip_spaces(text, pos)
        if text.startswith("]", pos):
            return tuple(keys), pos + 1
        if not text.startswith(",", pos):
            raise PathSyntaxError(expression, f"expected ',' or ']' at position {pos}")
        pos += 1


def _parse_quoted(expression: str, text: str, pos: int):
    quote = text[pos]
    chars = []
    pos += 1
    while pos < len(text):
        char = text[pos]
        if char == "\\" and pos + 1 < len(text):
            chars.append(text[pos + 1])
            pos += 2
            continue
        if char == quote:
            return "".join(chars), pos + 1
        chars.append(char)
        pos += 1
    raise PathSyntaxError(expression, "unterminated quoted name")


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


def _select(node: Any, keys: tuple | None) -> list:
    """Apply a child selector to a single node."""
    if keys is WILDCARD:
        if isinstance(node, dict):
            return list(node.values())
        if isinstance(node, list):
            return list(node)
        return []

    found = []
    for key in keys:
        if isinstance(node, dict):
            lookup = key if isinstance(key, str) else str(key)
            if lookup in node:
                found.append(node[lookup])
        elif isinstance(node, list):
            if isinstance(key, str):
                if not _INDEX_RE.fullmatch(key):
                    continue
                key = int(key)
            if -len(node) <= key < len(node):
                found.append(node[key])
    return found


def _descendants(node: Any) -> list:
    """The node itself followed by everything beneath it, depth first."""
    result = [node]
    if isinstance(node, dict):
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return result
    for child in children:
        result.extend(_descendants(child))
    return result
