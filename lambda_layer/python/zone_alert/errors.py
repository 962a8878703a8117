# lambda_layer/python/zone_alert/errors.py
# Non-matching events and defaulted fields are routine outcomes, not errors,
# so they have no exception types here.


class ChangeAlertError(Exception):
    """Base class for every failure raised by this package."""
    pass


class ConfigurationError(ChangeAlertError, ValueError):
    """Custom exception for missing or invalid settings."""
    pass


class DispatchError(ChangeAlertError):
    """An alert could not be delivered to its notification channel."""
    pass


class UnresolvableChannelError(DispatchError):
    """The channel's region cannot be derived from its topic ARN. Nothing was published."""

    def __init__(self, topic_arn):
        self.topic_arn = topic_arn
        super().__init__(f"Cannot resolve a region from topic identifier {topic_arn!r}")


class PublishFailedError(DispatchError):
    """The notification transport rejected or failed the single publish attempt."""

    def __init__(self, topic_arn, cause: Exception):
        self.topic_arn = topic_arn
        self.cause = cause
        super().__init__(f"Publish to {topic_arn} failed: {cause}")


class PollError(ChangeAlertError):
    """Aborts the current poll run. The next tick starts fresh."""
    pass


class CredentialAssumptionError(PollError):
    pass


class AuditQueryError(PollError):
    pass
