"""
Pytest configuration and shared fixtures for the zone change alert tests.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError

from zone_alert.channels import build_channels
from zone_alert.dispatcher import AlertDispatcher
from zone_alert.rules import zone_change_rule

GENERAL_TOPIC = "arn:aws:sns:us-east-1:123456789012:MONITORING-SYSTEST-events-general"
CRITICAL_TOPIC = "arn:aws:sns:eu-west-1:123456789012:MONITORING-SYSTEST-events-critical"
ROLE_ARN = "arn:aws:iam::111122223333:role/r53-change-audit-reader"


def make_client_error(operation: str, code: str = "AccessDenied", message: str = "denied") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeSnsClient:
    """Records publish calls. Calls whose 1-based index is in `fail_on` raise."""

    def __init__(self, region: str, fail_on=()):
        self.region = region
        self.fail_on = set(fail_on)
        self.calls = []

    def publish(self, **kwargs):
        self.calls.append(kwargs)
        if len(self.calls) in self.fail_on:
            raise make_client_error("Publish", "InternalError", "SNS unavailable")
        return {"MessageId": f"msg-{len(self.calls)}"}


class FakeSnsFactory:
    """Hands out one FakeSnsClient per region and remembers them."""

    def __init__(self, fail_on=()):
        self.fail_on = fail_on
        self.clients = {}

    def __call__(self, region: str):
        self.clients[region] = FakeSnsClient(region, self.fail_on)
        return self.clients[region]

    @property
    def all_calls(self):
        return [call for client in self.clients.values() for call in client.calls]


class FakeCredentialProvider:
    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    def assume_role(self, role_arn, session_name, external_id):
        self.calls.append((role_arn, session_name, external_id))
        if self.error:
            raise self.error
        return {"AccessKeyId": "AKIA", "SecretAccessKey": "secret", "SessionToken": "token"}


class FakeAuditTrail:
    """
    An in-memory CloudTrail. When `respect_window` is set, only records whose
    EventTime falls inside the requested window are returned.
    """

    def __init__(self, records=(), error: Exception = None, respect_window: bool = False):
        self.records = list(records)
        self.error = error
        self.respect_window = respect_window
        self.calls = []

    def lookup_events(self, event_source, start_time, end_time, max_items):
        self.calls.append((event_source, start_time, end_time, max_items))
        if self.error:
            raise self.error
        records = self.records
        if self.respect_window:
            records = [r for r in records if start_time <= r["EventTime"] <= end_time]
        return records[:max_items]


def pulled_record(event_name: str, event_time: datetime, event_source: str = "zone-change-service",
                  user: str = "alice", ip: str = "198.51.100.7") -> dict:
    """Builds a record shaped like a CloudTrail LookupEvents result."""
    return {
        "EventId": f"{event_name}-{event_time.isoformat()}",
        "EventName": event_name,
        "EventTime": event_time,
        "EventSource": event_source,
        "CloudTrailEvent": json.dumps({
            "eventName": event_name,
            "eventSource": event_source,
            "sourceIPAddress": ip,
            "userIdentity": {"type": "IAMUser", "userName": user},
            "requestParameters": {"hostedZoneId": "Z123EXAMPLE"},
            "responseElements": {"changeInfo": {"status": "PENDING"}},
            "recipientAccountId": "111122223333",
        }),
    }


@pytest.fixture
def rule():
    return zone_change_rule("zone-change-service")


@pytest.fixture
def sns_factory():
    return FakeSnsFactory()


@pytest.fixture
def channels():
    return build_channels(GENERAL_TOPIC, CRITICAL_TOPIC)


@pytest.fixture
def dispatcher(sns_factory, channels):
    return AlertDispatcher(sns_factory, channels)


@pytest.fixture
def now():
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def push_event():
    return {
        "version": "0",
        "detail-type": "AWS API Call via CloudTrail",
        "source": "aws.route53",
        "account": "111122223333",
        "time": "2024-01-01T00:00:00Z",
        "detail": {
            "eventSource": "zone-change-service",
            "eventName": "ChangeResourceRecordSets",
            "sourceIPAddress": "203.0.113.10",
            "userIdentity": {"type": "IAMUser", "userName": "bob"},
            "requestParameters": {"hostedZoneId": "Z123EXAMPLE"},
            "responseElements": {"changeInfo": {"status": "PENDING"}},
        },
    }


@pytest.fixture
def minutes():
    return lambda n: timedelta(minutes=n)
