"""
Webhook Spec Builder

Turns caller webhook settings into the WebhookSpec passed through to
the gateway. The URL is only checked for non-emptiness; the webhook
itself is never called from here.
"""

import json
from typing import Any, Optional, Union

from pydantic import BaseModel

from transport.metis import MalformedInput, MissingRequiredField, WebhookSpec

WEBHOOK_METHODS = ("POST", "GET", "PUT", "PATCH")


class HeaderEntry(BaseModel):
    key: Optional[str] = None
    value: Any = None


class WebhookInput(BaseModel):
    """Webhook settings as the host collects them."""

    url: str = ""
    method: str = "POST"
    headers: Union[dict[str, Any], list[HeaderEntry], str, None] = None


def _headers_from_entries(entries: list[Any]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for entry in entries:
        if isinstance(entry, HeaderEntry):
            key, value = entry.key, entry.value
        elif isinstance(entry, dict):
            key, value = entry.get("key"), entry.get("value")
        else:
            raise MalformedInput(f"Invalid webhook header entry: {entry!r}")
        if key:
            headers[key] = "" if value is None else str(value)
    return headers


def parse_headers(raw: Union[dict[str, Any], list, str, None]) -> Optional[dict[str, str]]:
    """
    Normalize webhook headers.

    Accepts a mapping, a list of {key, value} entries, or a JSON string
    holding either. Returns None when there is nothing to send.

    Raises:
        MalformedInput: Invalid JSON or an unusable header shape
    """
    if raw is None or raw == "":
        return None

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedInput("Invalid JSON in webhook headers") from e

    if isinstance(raw, dict):
        headers = {str(k): "" if v is None else str(v) for k, v in raw.items() if k}
    elif isinstance(raw, list):
        headers = _headers_from_entries(raw)
    else:
        raise MalformedInput("Webhook headers must be an object or a list of {key, value}")

    return headers or None


def build_webhook(webhook: Optional[WebhookInput]) -> WebhookSpec:
    """
    Build the WebhookSpec for a webhook-strategy submission.

    Raises:
        MissingRequiredField: Empty URL
        MalformedInput: Unsupported method or malformed headers
    """
    webhook = webhook or WebhookInput()
    if not webhook.url:
        raise MissingRequiredField("Webhook URL is required when strategy=webhook")

    method = (webhook.method or "POST").upper()
    if method not in WEBHOOK_METHODS:
        raise MalformedInput(f"Unsupported webhook method: {webhook.method}")

    return WebhookSpec(
        url=webhook.url,
        method=method,
        headers=parse_headers(webhook.headers),
    )
