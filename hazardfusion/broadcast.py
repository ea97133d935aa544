"""Alert notification fan-out for HazardFusion.

Turns the alerts of a FusionResult into ``alert_created`` / ``alert_updated``
events and delivers each event to the webhook subscriptions whose region and
hazard filters match. Delivery failures are logged and recorded, never raised:
a dead subscriber must not affect fusion.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from hazardfusion.clients.webhook_client import WebhookClient
from hazardfusion.exceptions import BroadcastError
from hazardfusion.models.alerts import Alert
from hazardfusion.models.fusion import FusionResult
from hazardfusion.utils.date_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

ALERT_CREATED = "alert_created"
ALERT_UPDATED = "alert_updated"


@dataclass
class Subscription:
    """A webhook subscriber. Empty filter sets match everything."""

    id: str
    webhook_url: str
    regions: Set[str] = field(default_factory=set)
    hazards: Set[str] = field(default_factory=set)

    def wants(self, alert: Alert) -> bool:
        if self.regions and alert.region_name not in self.regions:
            return False
        if self.hazards and alert.hazard_type not in self.hazards:
            return False
        return True


@dataclass
class DeliveryRecord:
    """Outcome of delivering one event to one subscription."""

    subscription_id: str
    event: str
    alert_id: str
    delivered: bool
    status_code: Optional[int] = None
    error: str = ""


def _json_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return to_iso(obj)
    if isinstance(obj, set):
        return sorted(obj)
    return str(obj)


def alert_payload(alert: Alert) -> Dict[str, Any]:
    """JSON-safe dict view of an alert."""
    return json.loads(json.dumps(dataclasses.asdict(alert), default=_json_default))


def build_alert_events(result: FusionResult) -> List[Dict[str, Any]]:
    """One event message per new or updated alert, new alerts first."""
    sent_at = to_iso(utcnow())
    events = []
    for event, alerts in ((ALERT_CREATED, result.new_alerts), (ALERT_UPDATED, result.updated_alerts)):
        for alert in alerts:
            events.append(
                {
                    "event": event,
                    "data": alert_payload(alert),
                    "timestamp": sent_at,
                    "region": alert.region_name,
                }
            )
    return events


class AlertBroadcaster:
    """Delivers fusion results to webhook subscribers.

    Args:
        subscriptions: Initial subscriptions.
        client: Webhook client; a default WebhookClient is built when omitted.
    """

    def __init__(
        self,
        subscriptions: Iterable[Subscription] = (),
        client: Optional[WebhookClient] = None,
    ) -> None:
        self._subscriptions: Dict[str, Subscription] = {s.id: s for s in subscriptions}
        self._client = client or WebhookClient()

    def subscribe(self, subscription: Subscription) -> None:
        self._subscriptions[subscription.id] = subscription

    def unsubscribe(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions.values())

    def broadcast(self, result: FusionResult) -> List[DeliveryRecord]:
        """Deliver every alert event in ``result`` to matching subscribers.

        Returns:
            One DeliveryRecord per (event, subscription) pair attempted.
        """
        alerts = {a.id: a for a in result.new_alerts + result.updated_alerts}
        records: List[DeliveryRecord] = []

        for message in build_alert_events(result):
            alert = alerts[message["data"]["id"]]
            for sub in self._subscriptions.values():
                if not sub.wants(alert):
                    continue
                try:
                    status = self._client.post_json(sub.webhook_url, message)
                    records.append(
                        DeliveryRecord(sub.id, message["event"], alert.id, True, status)
                    )
                except BroadcastError as exc:
                    logger.error(
                        "Delivery of %s for alert %s to %s failed: %s",
                        message["event"], alert.id, sub.webhook_url, exc,
                    )
                    records.append(
                        DeliveryRecord(
                            sub.id, message["event"], alert.id, False, exc.status_code, str(exc)
                        )
                    )

        delivered = sum(1 for r in records if r.delivered)
        if records:
            logger.info("Broadcast %d/%d deliveries succeeded", delivered, len(records))
        return records

    def close(self) -> None:
        self._client.close()
