# lambda_layer/python/zone_alert/__init__.py
"""
Shared layer for the zone change alert lambdas: match rule, normalizer,
SNS dispatcher and the cross-account poller.
"""
from .channels import build_channels, resolve_channel, resolve_region
from .dispatcher import AlertDispatcher, DispatchResult
from .errors import (
    AuditQueryError,
    ChangeAlertError,
    ConfigurationError,
    CredentialAssumptionError,
    DispatchError,
    PollError,
    PublishFailedError,
    UnresolvableChannelError,
)
from .models import Alert, NotificationChannel, PollWindow, Severity
from .normalizer import normalize
from .poller import CrossAccountPoller, PollReport, PollState
from .relay import ChangeEventRelay
from .rules import MatchRule, ZONE_CHANGE_EVENT_NAMES, matches, zone_change_rule

__version__ = "1.0.0"
