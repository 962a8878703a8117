# lambdas/cross_account_poller/app.py
import json
from datetime import timedelta

# Imported from the shared lambda layer
from zone_alert.aws_clients import CloudTrailAuditTrail, StsCredentialProvider, sns_client_factory
from zone_alert.channels import build_channels
from zone_alert.dispatcher import AlertDispatcher
from zone_alert.poller import CrossAccountPoller
from zone_alert.rules import zone_change_rule
from zone_alert.settings import get_settings

_poller = None


def build_poller(settings=None) -> CrossAccountPoller:
    """
    Wires the poller from environment settings.

    Raises:
        ConfigurationError: If the topic, role ARN or external id is missing.
    """
    settings = settings or get_settings()
    role_arn, external_id = settings.require_poll_config()
    channels = build_channels(
        settings.require_general_topic(),
        settings.critical_topic_arn,
        settings.notification_region,
    )
    audit_region = settings.audit_region

    return CrossAccountPoller(
        credential_provider=StsCredentialProvider(),
        audit_trail_factory=lambda credentials: CloudTrailAuditTrail.from_credentials(credentials, audit_region),
        dispatcher=AlertDispatcher(sns_client_factory, channels),
        rule=zone_change_rule(settings.watched_event_source),
        origin_label=settings.origin_label,
        role_arn=role_arn,
        external_id=external_id,
        session_name=settings.role_session_name,
        lookback=timedelta(minutes=settings.lookback_minutes),
        max_records=settings.max_audit_records,
        function_label=settings.function_label,
    )


def _get_poller() -> CrossAccountPoller:
    global _poller
    if _poller is None:
        _poller = build_poller()
    return _poller


def handler(event, context):
    """
    Triggered by the EventBridge schedule. A failed run is reported through
    the critical channel and still returns normally; the next tick's window
    covers the same period again.
    """
    print("--- Cross-Account Poller Triggered ---")
    report = _get_poller().poll()
    summary = report.as_dict()
    print(f"Poll summary: {json.dumps(summary)}")
    return {"statusCode": 200, "body": json.dumps(summary)}
