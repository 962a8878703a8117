# lambda_layer/python/zone_alert/channels.py
import re
from typing import Optional

from .errors import UnresolvableChannelError
from .models import NotificationChannel, Severity

_REGION_PATTERN = re.compile(r"^[a-z]{2}(-[a-z]+)+-\d+$")


def resolve_region(topic_arn) -> Optional[str]:
    """
    Parses the region out of a topic identifier. Returns None instead of raising.

    Accepts a full ARN (``arn:partition:service:region:account:name``) and the
    short ``scheme:service:region:account:name`` form.
    """
    if not isinstance(topic_arn, str):
        return None
    parts = topic_arn.strip().split(":")
    if parts[0] == "arn" and len(parts) >= 6:
        region = parts[3]
    elif len(parts) == 5:
        region = parts[2]
    else:
        return None
    if not all(parts[:3]) or not parts[-1]:
        return None
    return region if _REGION_PATTERN.match(region) else None


def resolve_channel(channel: NotificationChannel) -> str:
    """
    Returns the region to publish to. The ARN always wins over an explicitly
    configured region.

    Raises:
        UnresolvableChannelError: If no region can be parsed from the ARN.
    """
    region = resolve_region(channel.topic_arn)
    if region is None:
        raise UnresolvableChannelError(channel.topic_arn)
    if channel.region and channel.region != region:
        print(f"⚠️ Configured region '{channel.region}' does not match topic {channel.topic_arn}; using '{region}'.")
    return region


def build_channels(general_topic_arn: str, critical_topic_arn: Optional[str] = None,
                   region: Optional[str] = None) -> dict[Severity, NotificationChannel]:
    """Maps each severity to its channel. Critical falls back to the general topic."""
    general = NotificationChannel(topic_arn=general_topic_arn, severity=Severity.GENERAL, region=region)
    critical = NotificationChannel(
        topic_arn=critical_topic_arn or general_topic_arn, severity=Severity.CRITICAL, region=region
    )
    return {Severity.GENERAL: general, Severity.CRITICAL: critical}
