# lambda_layer/python/zone_alert/rules.py
"""
Decides which raw events count as a DNS zone change.

Both delivery shapes are understood: the EventBridge envelope
(``detail.eventSource`` / ``detail.eventName``) and a CloudTrail
``LookupEvents`` record (``EventSource`` / ``EventName`` at the top level,
falling back to the serialized ``CloudTrailEvent`` blob).
"""
import json
from dataclasses import dataclass
from typing import Any, Optional

ZONE_CHANGE_SERVICE = "route53.amazonaws.com"

ZONE_CHANGE_EVENT_NAMES = frozenset({
    "ChangeResourceRecordSets",
    "CreateHostedZone",
    "DeleteHostedZone",
    "UpdateHostedZoneComment",
})


@dataclass(frozen=True)
class MatchRule:
    event_sources: frozenset
    event_names: frozenset


def zone_change_rule(event_source: str = ZONE_CHANGE_SERVICE) -> MatchRule:
    """Builds the fixed zone-change rule for the given event source string."""
    return MatchRule(event_sources=frozenset({event_source}), event_names=ZONE_CHANGE_EVENT_NAMES)


def load_blob(raw_event: dict) -> dict:
    """Returns the decoded ``CloudTrailEvent`` blob of a pulled record, or {}."""
    blob = raw_event.get("CloudTrailEvent")
    if isinstance(blob, dict):
        return blob
    if isinstance(blob, (str, bytes)):
        try:
            decoded = json.loads(blob)
        except (ValueError, TypeError):
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _first_str(*candidates: Any) -> Optional[str]:
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return None


def extract_source_and_name(raw_event: Any) -> tuple[Optional[str], Optional[str]]:
    """Pulls (eventSource, eventName) out of either envelope shape."""
    if not isinstance(raw_event, dict):
        return None, None

    detail = raw_event.get("detail")
    if isinstance(detail, dict):
        return _first_str(detail.get("eventSource")), _first_str(detail.get("eventName"))

    blob = load_blob(raw_event)
    source = _first_str(raw_event.get("EventSource"), raw_event.get("eventSource"), blob.get("eventSource"))
    name = _first_str(raw_event.get("EventName"), raw_event.get("eventName"), blob.get("eventName"))
    return source, name


def matches(raw_event: Any, rule: MatchRule) -> bool:
    """True iff both the event source and the event name are accepted by the rule."""
    source, name = extract_source_and_name(raw_event)
    if source is None or name is None:
        return False
    return source in rule.event_sources and name in rule.event_names
