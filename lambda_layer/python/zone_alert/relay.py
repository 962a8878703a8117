# lambda_layer/python/zone_alert/relay.py
from typing import Optional

from .dispatcher import AlertDispatcher
from .models import Alert
from .normalizer import normalize
from .rules import MatchRule, matches


class ChangeEventRelay:
    """
    Republishes one EventBridge-delivered change event as an alert.

    The upstream rule already filters on source and detail type; the match
    rule is applied again so a misconfigured rule cannot produce false alerts.
    """

    def __init__(self, dispatcher: AlertDispatcher, rule: MatchRule, origin_label: str):
        self.dispatcher = dispatcher
        self.rule = rule
        self.origin_label = origin_label

    def relay(self, raw_event: dict) -> Optional[str]:
        """
        Returns the SNS message id, or None when the event is not a zone change.

        Raises:
            DispatchError: If the alert could not be published. The delivery
                layer owns retries, so the failure is passed up unchanged.
        """
        if not matches(raw_event, self.rule):
            print("ℹ️ Event is not a watched zone change. Skipping.")
            return None

        alert: Alert = normalize(raw_event, self.origin_label)
        result = self.dispatcher.dispatch(alert)
        if not result:
            raise result.error
        return result.message_id
