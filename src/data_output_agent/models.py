"""Data models for the Data Output Agent."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple


@dataclass(frozen=True)
class Event:
    """A structured event received from another agent."""

    id: int
    created_at: datetime
    payload: Any = field(default_factory=dict)


@dataclass
class Feed:
    """Format-agnostic feed, ready to be handed to a renderer."""

    title: str
    description: str
    ttl: int
    generated_at: datetime
    items: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class AccessPolicy:
    """The set of secrets allowed to read a feed."""

    secrets: frozenset[str]

    def __post_init__(self):
        if not self.secrets:
            raise ValueError("An access policy needs at least one secret")


class OutputFormat(Enum):
    JSON = "json"
    XML = "xml"

    @classmethod
    def from_request(cls, requested: str | None) -> "OutputFormat":
        """Pick JSON when the requested format mentions it, XML otherwise."""
        if requested and "json" in requested.lower():
            return cls.JSON
        return cls.XML


class WebResponse(NamedTuple):
    """Body, HTTP status and content type of a feed request."""

    body: Any
    status: int
    content_type: str = "application/json"
