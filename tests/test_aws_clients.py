# tests/test_aws_clients.py
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import EndpointConnectionError

from zone_alert.aws_clients import (
    SINGLE_ATTEMPT,
    AssumedCredentials,
    CloudTrailAuditTrail,
    StsCredentialProvider,
    account_from_arn,
    sns_client_factory,
)
from zone_alert.errors import AuditQueryError, CredentialAssumptionError

from conftest import ROLE_ARN, make_client_error

CREDENTIALS = AssumedCredentials("AKIAEXAMPLE", "secret", "session-token")


def test_assume_role_returns_credentials():
    sts = MagicMock()
    sts.assume_role.return_value = {"Credentials": {
        "AccessKeyId": "AKIAEXAMPLE", "SecretAccessKey": "secret", "SessionToken": "session-token",
    }}

    creds = StsCredentialProvider(sts).assume_role(ROLE_ARN, "zone-change-poller", "ext-id")

    assert creds == CREDENTIALS
    sts.assume_role.assert_called_once_with(RoleArn=ROLE_ARN, RoleSessionName="zone-change-poller", ExternalId="ext-id")


def test_assume_role_denied_is_wrapped():
    sts = MagicMock()
    sts.assume_role.side_effect = make_client_error("AssumeRole", "AccessDenied", "not authorized to perform sts:AssumeRole")

    with pytest.raises(CredentialAssumptionError, match="not authorized"):
        StsCredentialProvider(sts).assume_role(ROLE_ARN, "s", "e")


def test_assume_role_network_error_is_wrapped():
    sts = MagicMock()
    sts.assume_role.side_effect = EndpointConnectionError(endpoint_url="https://sts.amazonaws.com")
    with pytest.raises(CredentialAssumptionError):
        StsCredentialProvider(sts).assume_role(ROLE_ARN, "s", "e")


def test_assume_role_malformed_response_is_wrapped():
    sts = MagicMock()
    sts.assume_role.return_value = {}
    with pytest.raises(CredentialAssumptionError):
        StsCredentialProvider(sts).assume_role(ROLE_ARN, "s", "e")


def test_lookup_events_filters_by_source_and_window():
    cloudtrail = MagicMock()
    cloudtrail.lookup_events.return_value = {"Events": [{"EventName": str(i)} for i in range(12)]}
    end = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    start = end - timedelta(minutes=5)

    events = CloudTrailAuditTrail(cloudtrail).lookup_events("route53.amazonaws.com", start, end, 10)

    assert len(events) == 10
    cloudtrail.lookup_events.assert_called_once_with(
        LookupAttributes=[{"AttributeKey": "EventSource", "AttributeValue": "route53.amazonaws.com"}],
        StartTime=start,
        EndTime=end,
        MaxResults=10,
    )


def test_lookup_events_failure_is_wrapped():
    cloudtrail = MagicMock()
    cloudtrail.lookup_events.side_effect = make_client_error("LookupEvents", "ThrottlingException", "Rate exceeded")
    with pytest.raises(AuditQueryError, match="Rate exceeded"):
        CloudTrailAuditTrail(cloudtrail).lookup_events("route53.amazonaws.com", None, None, 10)


@patch("zone_alert.aws_clients.boto3.client")
def test_audit_client_uses_assumed_credentials(mock_boto_client):
    trail = CloudTrailAuditTrail.from_credentials(CREDENTIALS, "us-east-1")

    assert trail.cloudtrail is mock_boto_client.return_value
    mock_boto_client.assert_called_once_with(
        "cloudtrail",
        region_name="us-east-1",
        aws_access_key_id="AKIAEXAMPLE",
        aws_secret_access_key="secret",
        aws_session_token="session-token",
        config=SINGLE_ATTEMPT,
    )


@patch("zone_alert.aws_clients.boto3.client")
def test_sns_client_is_pinned_to_region(mock_boto_client):
    sns_client_factory("eu-west-1")
    mock_boto_client.assert_called_once_with("sns", region_name="eu-west-1", config=SINGLE_ATTEMPT)


@pytest.mark.parametrize("arn, account", [
    ("arn:aws:iam::111122223333:role/r53-change-audit-reader", "111122223333"),
    ("arn:aws:sns:us-east-1:123456789012:topic", "123456789012"),
    ("arn:aws:iam:::role/x", None),
    ("not-an-arn", None),
    (None, None),
])
def test_account_from_arn(arn, account):
    assert account_from_arn(arn) == account
