# lambda_layer/python/zone_alert/aws_clients.py
"""
boto3-backed capability objects: credential assumption, audit lookup and
SNS clients. Components receive these at construction so tests can pass
fakes instead.

Retries are disabled at the botocore level: a failed call ends the run and
the next scheduled tick covers the same window again.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import AuditQueryError, CredentialAssumptionError

SINGLE_ATTEMPT = Config(
    retries={"max_attempts": 1, "mode": "standard"},
    connect_timeout=5,
    read_timeout=15,
)


@dataclass(frozen=True)
class AssumedCredentials:
    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: Optional[datetime] = None


def account_from_arn(arn) -> Optional[str]:
    """Returns the account id field of an ARN, or None if there is none."""
    if not isinstance(arn, str):
        return None
    parts = arn.split(":")
    if len(parts) < 6 or parts[0] != "arn":
        return None
    account = parts[4]
    return account if account.isdigit() and len(account) == 12 else None


def sns_client_factory(region: str):
    """Creates an SNS client pinned to the topic's region."""
    return boto3.client("sns", region_name=region, config=SINGLE_ATTEMPT)


class StsCredentialProvider:
    """Requests temporary credentials for a role in the monitored account."""

    def __init__(self, sts_client=None):
        self.sts = sts_client or boto3.client("sts", config=SINGLE_ATTEMPT)

    def assume_role(self, role_arn: str, session_name: str, external_id: str) -> AssumedCredentials:
        """
        Raises:
            CredentialAssumptionError: If STS denies the request or cannot be reached.
        """
        try:
            response = self.sts.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                ExternalId=external_id,
            )
            creds = response["Credentials"]
            return AssumedCredentials(
                access_key_id=creds["AccessKeyId"],
                secret_access_key=creds["SecretAccessKey"],
                session_token=creds["SessionToken"],
                expiration=creds.get("Expiration"),
            )
        except ClientError as e:
            raise CredentialAssumptionError(
                f"AssumeRole on {role_arn} failed: {e.response['Error'].get('Message', e)}"
            ) from e
        except (BotoCoreError, KeyError, TypeError) as e:
            raise CredentialAssumptionError(f"AssumeRole on {role_arn} failed: {e}") from e


class CloudTrailAuditTrail:
    """Looks up recent management events in the monitored account's CloudTrail."""

    def __init__(self, cloudtrail_client):
        self.cloudtrail = cloudtrail_client

    @classmethod
    def from_credentials(cls, credentials: AssumedCredentials, region: str) -> "CloudTrailAuditTrail":
        client = boto3.client(
            "cloudtrail",
            region_name=region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            config=SINGLE_ATTEMPT,
        )
        return cls(client)

    def lookup_events(self, event_source: str, start_time: datetime, end_time: datetime,
                      max_items: int) -> list[dict]:
        """
        Returns at most ``max_items`` records, newest first, as CloudTrail orders them.

        Raises:
            AuditQueryError: If the lookup fails.
        """
        try:
            response = self.cloudtrail.lookup_events(
                LookupAttributes=[{"AttributeKey": "EventSource", "AttributeValue": event_source}],
                StartTime=start_time,
                EndTime=end_time,
                MaxResults=max_items,
            )
        except ClientError as e:
            raise AuditQueryError(f"LookupEvents failed: {e.response['Error'].get('Message', e)}") from e
        except BotoCoreError as e:
            raise AuditQueryError(f"LookupEvents failed: {e}") from e

        events = response.get("Events", [])
        return list(events[:max_items])
