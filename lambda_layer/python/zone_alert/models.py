# lambda_layer/python/zone_alert/models.py
"""
Plain-dataclass models shared by the relay and the poller.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Alert:
    """
    The canonical change alert published to SNS.
    Field names follow the CloudTrail spelling so the JSON body reads the
    same as the original event.
    """
    eventTime: str = UNKNOWN
    eventName: str = UNKNOWN
    eventSource: str = UNKNOWN
    sourceIPAddress: str = UNKNOWN
    userIdentity: Any = UNKNOWN
    requestParameters: Any = UNKNOWN
    responseElements: Any = UNKNOWN
    accountId: str = UNKNOWN
    originLabel: str = UNKNOWN

    def to_dict(self) -> dict:
        return asdict(self)


class Severity(str, Enum):
    GENERAL = "general"
    CRITICAL = "critical"


@dataclass(frozen=True)
class NotificationChannel:
    """
    An SNS topic plus its severity. ``region`` is informational only;
    the region used for publishing is always parsed from ``topic_arn``.
    """
    topic_arn: str
    severity: Severity = Severity.GENERAL
    region: Optional[str] = None


@dataclass
class PollWindow:
    """The time span one poll run queries. Rebuilt from "now" on every run."""
    start: datetime
    end: datetime
    last_seen_event_time: Optional[datetime] = None
