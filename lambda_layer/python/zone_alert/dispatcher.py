# lambda_layer/python/zone_alert/dispatcher.py
import json
from typing import Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .channels import resolve_channel
from .errors import DispatchError, PublishFailedError, UnresolvableChannelError
from .models import Alert, NotificationChannel, Severity

SNS_SUBJECT_LIMIT = 100


class DispatchResult:
    """A simple data class to hold the outcome of a single publish."""
    def __init__(self, message_id: Optional[str] = None, error: Optional[DispatchError] = None):
        self.message_id = message_id
        self.error = error

    def __bool__(self) -> bool:
        """Allows the object to be used in boolean contexts, like `if result:`."""
        return self.error is None

    def __repr__(self) -> str:
        if self.error is None:
            return f"DispatchResult(message_id='{self.message_id}')"
        return f"DispatchResult(error={self.error!r})"


def build_subject(alert: Alert) -> str:
    subject = f"{alert.originLabel} Change Alert: {alert.eventName}"
    return subject[:SNS_SUBJECT_LIMIT]


def build_body(alert: Alert) -> str:
    return json.dumps(alert.to_dict(), indent=2, default=str)


class AlertDispatcher:
    """
    Publishes alerts and self-monitoring notifications to SNS.

    The dispatcher never retries: each call makes at most one publish attempt
    and leaves escalation to the caller.
    """

    def __init__(self, sns_client_factory: Callable[[str], object],
                 channels: dict[Severity, NotificationChannel]):
        """
        Args:
            sns_client_factory: Returns an SNS client for a region name.
            channels: The channel to use for each severity.
        """
        self._sns_client_factory = sns_client_factory
        self._clients = {}
        self.channels = channels

    def _client_for(self, region: str):
        if region not in self._clients:
            self._clients[region] = self._sns_client_factory(region)
        return self._clients[region]

    def publish(self, channel: NotificationChannel, subject: str, message: str) -> DispatchResult:
        """Resolves the channel then makes exactly one publish attempt."""
        try:
            region = resolve_channel(channel)
        except UnresolvableChannelError as e:
            print(f"❌ {e}. Nothing was published.")
            return DispatchResult(error=e)

        try:
            response = self._client_for(region).publish(
                TopicArn=channel.topic_arn,
                Subject=subject[:SNS_SUBJECT_LIMIT],
                Message=message,
            )
        except (ClientError, BotoCoreError) as e:
            print(f"❌ SNS:Publish to {channel.topic_arn} failed: {e}")
            return DispatchResult(error=PublishFailedError(channel.topic_arn, e))

        message_id = response.get("MessageId")
        print(f"✅ Successfully published to SNS: {message_id}")
        return DispatchResult(message_id=message_id)

    def dispatch(self, alert: Alert, channel: Optional[NotificationChannel] = None) -> DispatchResult:
        """Publishes one change alert, by default to the general channel."""
        channel = channel or self.channels[Severity.GENERAL]
        print(f"Dispatching {alert.eventName} alert from '{alert.originLabel}' to {channel.topic_arn}")
        return self.publish(channel, build_subject(alert), build_body(alert))

    def notify(self, severity: Severity, function_label: str, text: str) -> None:
        """
        Sends an operational self-monitoring message. Failures are printed
        and swallowed so they cannot mask the error being reported.
        """
        try:
            severity = Severity(severity)
            channel = self.channels[severity]
            print(f"Sending SNS {severity.value} message: {text} TO {channel.topic_arn}")
            message = f"Lambda function '{function_label}' {severity.value} notification:\n{text}"
            subject = f"{function_label} {severity.value.upper()} NOTIFICATION"
            result = self.publish(channel, subject, message)
            if not result:
                print(f"⚠️ Self-notification was not delivered: {result.error}")
        except Exception as e:
            print(f"❌ Self-notification failed unexpectedly: {e}")
