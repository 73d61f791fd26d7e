"""Option loading and validation for the Data Output Agent."""

import copy
import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from data_output_agent.interpolation import CompiledTemplate, compile_template
from data_output_agent.jsonpath import PathSyntaxError
from data_output_agent.models import AccessPolicy

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "Data Output Agent"
DEFAULT_EVENTS_TO_SHOW = 40
DEFAULT_TTL = 60

DEFAULT_OPTIONS = {
    "secrets": ["a-secret-key"],
    "expected_receive_period_in_days": 2,
    "template": {
        "title": "XKCD comics as a feed",
        "description": "This is a feed of recent XKCD comics, generated by the Data Output Agent",
        "item": {
            "title": "$.title",
            "description": "Secret hovertext: <$.hovertext>",
            "link": "$.url",
        },
    },
}


class ConfigurationError(Exception):
    """Raised when agent options are invalid. Carries every problem found."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class OutputOptions:
    """Validated, read-only options for one output agent."""

    name: str
    policy: AccessPolicy
    expected_receive_period_in_days: int
    item_template: CompiledTemplate
    title_template: CompiledTemplate | None = None
    description_template: CompiledTemplate | None = None
    events_to_show: int = DEFAULT_EVENTS_TO_SHOW
    ttl: int = DEFAULT_TTL

    @classmethod
    def from_options(cls, name: str, options: dict) -> "OutputOptions":
        """Validate raw options and build an OutputOptions.

        Raises:
            ConfigurationError: If any option is missing or invalid.
        """
        errors: list[str] = []

        secrets = options.get("secrets")
        if not isinstance(secrets, list) or not secrets:
            errors.append(
                "Please specify one or more secrets for 'authenticating' incoming feed requests"
            )
            secrets = []

        period = _int_option(options, "expected_receive_period_in_days", errors)
        if period is None or period <= 0:
            errors.append(
                "Please provide 'expected_receive_period_in_days' to indicate how many days "
                "can pass before this Agent is considered to be not working"
            )

        events_to_show = _int_option(options, "events_to_show", errors)
        if events_to_show is not None and events_to_show <= 0:
            errors.append("'events_to_show' must be a positive integer")

        ttl = _int_option(options, "ttl", errors)

        template = options.get("template")
        item = template.get("item") if isinstance(template, dict) else None
        item_template = title_template = description_template = None
        if not isinstance(item, dict) or not item:
            errors.append("Please provide template and template.item")
        else:
            item_template = _compile(item, errors)
            title_template = _compile_optional(template.get("title"), errors)
            description_template = _compile_optional(template.get("description"), errors)

        if errors:
            raise ConfigurationError(errors)

        return cls(
            name=name,
            policy=AccessPolicy(frozenset(str(secret) for secret in secrets)),
            expected_receive_period_in_days=period,
            item_template=item_template,
            title_template=title_template,
            description_template=description_template,
            events_to_show=events_to_show or DEFAULT_EVENTS_TO_SHOW,
            ttl=ttl if ttl and ttl > 0 else DEFAULT_TTL,
        )


def load_options(path: str) -> dict:
    """Read agent options from a JSON file."""
    with open(path, encoding="utf-8") as f:
        options = json.load(f)
    if not isinstance(options, dict):
        raise ConfigurationError([f"Options file {path} must contain a JSON object"])
    return options


def from_environment() -> OutputOptions:
    """Build options from DATA_OUTPUT_OPTIONS and DATA_OUTPUT_AGENT_NAME."""
    name = os.environ.get("DATA_OUTPUT_AGENT_NAME", DEFAULT_AGENT_NAME)
    path = os.environ.get("DATA_OUTPUT_OPTIONS")
    if path:
        logger.info("Loading options from %s", path)
        options = load_options(path)
    else:
        logger.info("DATA_OUTPUT_OPTIONS not set, using default options")
        options = copy.deepcopy(DEFAULT_OPTIONS)
    return OutputOptions.from_options(name, options)


def _int_option(options: dict, key: str, errors: list[str]) -> int | None:
    """Read an optional integer option; blank values count as missing."""
    value = options.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        errors.append(f"'{key}' must be an integer")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"'{key}' must be an integer")
        return None


def _compile(template: Any, errors: list[str]) -> CompiledTemplate | None:
    try:
        return compile_template(template)
    except PathSyntaxError as e:
        errors.append(str(e))
        return None


def _compile_optional(template: Any, errors: list[str]) -> CompiledTemplate | None:
    if template is None or template == "":
        return None
    return _compile(template, errors)
