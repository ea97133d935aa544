"""HazardFusion clients package.

HTTP clients only — no fusion logic in this layer.
"""

from hazardfusion.clients.webhook_client import WebhookClient

__all__ = [
    "WebhookClient",
]
