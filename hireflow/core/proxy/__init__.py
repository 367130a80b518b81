"""
Resume-screening forwarding proxy.
"""

from .endpoints import WebhookEndpointSet, resolve_webhook_endpoints
from .forwarder import FormEntry, ForwardResult, WebhookForwarder, read_form_entries

__all__ = [
    "FormEntry",
    "ForwardResult",
    "WebhookEndpointSet",
    "WebhookForwarder",
    "read_form_entries",
    "resolve_webhook_endpoints",
]
