# lambdas/zone_change_relay/app.py
import json

# Imported from the shared lambda layer
from zone_alert.aws_clients import sns_client_factory
from zone_alert.channels import build_channels
from zone_alert.dispatcher import AlertDispatcher
from zone_alert.relay import ChangeEventRelay
from zone_alert.rules import zone_change_rule
from zone_alert.settings import get_settings

# Built on first use and reused by warm invocations.
_relay = None


def build_relay(settings=None) -> ChangeEventRelay:
    """Wires the relay from environment settings."""
    settings = settings or get_settings()
    channels = build_channels(
        settings.require_general_topic(),
        settings.critical_topic_arn,
        settings.notification_region,
    )
    dispatcher = AlertDispatcher(sns_client_factory, channels)
    return ChangeEventRelay(
        dispatcher=dispatcher,
        rule=zone_change_rule(settings.watched_event_source),
        origin_label=settings.origin_label,
    )


def _get_relay() -> ChangeEventRelay:
    global _relay
    if _relay is None:
        _relay = build_relay()
    return _relay


def handler(event, context):
    """
    Triggered by the EventBridge zone change rule. Publishes one alert per
    event and raises on publish failure so EventBridge retries the delivery.
    """
    print(f"Received zone change event: {json.dumps(event, indent=2, default=str)}")
    relay = _get_relay()
    print(f"Relaying for {relay.origin_label} account")

    message_id = relay.relay(event)
    if message_id is None:
        return {"statusCode": 200, "body": "Event skipped."}
    return {"statusCode": 200, "body": "Success", "messageId": message_id}
