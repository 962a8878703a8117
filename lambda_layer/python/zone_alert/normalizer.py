# lambda_layer/python/zone_alert/normalizer.py
from datetime import datetime
from typing import Any, Optional

from .models import UNKNOWN, Alert
from .rules import load_blob


def _or_unknown(value: Any) -> Any:
    # Only absent values are defaulted; a present {} or "" is reported as-is.
    return UNKNOWN if value is None else value


def _as_time_string(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    value = _or_unknown(value)
    return value if isinstance(value, str) else str(value)


def _as_str(value: Any) -> str:
    value = _or_unknown(value)
    return value if isinstance(value, str) else str(value)


def _normalize_push(raw_event: dict, origin_label: str, account_id: Optional[str]) -> Alert:
    detail = raw_event.get("detail")
    if not isinstance(detail, dict):
        detail = {}
    return Alert(
        eventTime=_as_time_string(raw_event.get("time")),
        eventName=_as_str(detail.get("eventName")),
        eventSource=_as_str(detail.get("eventSource")),
        sourceIPAddress=_as_str(detail.get("sourceIPAddress")),
        userIdentity=_or_unknown(detail.get("userIdentity")),
        requestParameters=_or_unknown(detail.get("requestParameters")),
        responseElements=_or_unknown(detail.get("responseElements")),
        accountId=_as_str(raw_event.get("account") or account_id),
        originLabel=origin_label,
    )


def _normalize_pulled(raw_event: dict, origin_label: str, account_id: Optional[str]) -> Alert:
    blob = load_blob(raw_event)

    def pick(*keys):
        for key in keys:
            value = raw_event.get(key)
            if value not in (None, ""):
                return value
        return None

    return Alert(
        eventTime=_as_time_string(pick("EventTime", "eventTime") or blob.get("eventTime")),
        eventName=_as_str(pick("EventName", "eventName") or blob.get("eventName")),
        eventSource=_as_str(pick("EventSource", "eventSource") or blob.get("eventSource")),
        sourceIPAddress=_as_str(pick("sourceIPAddress") or blob.get("sourceIPAddress")),
        userIdentity=_or_unknown(blob.get("userIdentity")),
        requestParameters=_or_unknown(blob.get("requestParameters")),
        responseElements=_or_unknown(blob.get("responseElements")),
        # The monitored account is implicit for pulled records.
        accountId=_as_str(account_id or blob.get("recipientAccountId")),
        originLabel=origin_label,
    )


def normalize(raw_event: Any, origin_label: str, account_id: Optional[str] = None) -> Alert:
    """
    Builds the canonical Alert from either a push envelope or a pulled
    CloudTrail record. Never raises: anything missing becomes "Unknown".

    Args:
        raw_event: The event dict as delivered or pulled.
        origin_label: Human label for the account/environment that produced it.
        account_id: Account to report when the event itself does not carry one.
    """
    origin_label = _as_str(origin_label)
    if not isinstance(raw_event, dict):
        return Alert(accountId=_as_str(account_id), originLabel=origin_label)
    if "detail" in raw_event:
        return _normalize_push(raw_event, origin_label, account_id)
    return _normalize_pulled(raw_event, origin_label, account_id)
