"""Shared-secret access gate for feed requests."""

import logging

from data_output_agent.models import AccessPolicy, OutputFormat, WebResponse

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not Authorized"


def authorize(secret: str | None, policy: AccessPolicy) -> bool:
    """Return True if the secret is one of the policy's tokens."""
    return secret is not None and secret in policy.secrets


def not_authorized(output_format: OutputFormat) -> WebResponse:
    """The fixed 401 response, in the requested format."""
    if output_format is OutputFormat.JSON:
        return WebResponse({"error": NOT_AUTHORIZED}, 401, "application/json")
    return WebResponse(NOT_AUTHORIZED, 401, "text/plain")
