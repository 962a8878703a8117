# lambda_layer/python/zone_alert/settings.py
"""
Environment-driven settings shared by the relay and poller lambdas.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class AppSettings(BaseSettings):
    """
    Manages env vars using Pydantic BaseSettings.
    A .env file is picked up automatically for local runs.
    """
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore', populate_by_name=True
    )

    origin_label: str = Field("Unknown", alias='ORIGIN_LABEL')
    general_topic_arn: Optional[str] = Field(None, alias='GENERAL_NOTIFICATION_TOPIC')
    critical_topic_arn: Optional[str] = Field(None, alias='CRITICAL_NOTIFICATION_TOPIC')
    notification_region: Optional[str] = Field(None, alias='NOTIFICATION_REGION')
    function_label: str = Field("zone-change-alert", alias='AWS_LAMBDA_FUNCTION_NAME')

    watched_event_source: str = Field("route53.amazonaws.com", alias='WATCHED_EVENT_SOURCE')

    # Poll mode only
    role_arn: Optional[str] = Field(None, alias='CROSS_ACCOUNT_ROLE_ARN')
    external_id: Optional[str] = Field(None, alias='CROSS_ACCOUNT_EXTERNAL_ID')
    role_session_name: str = Field("zone-change-poller", alias='ROLE_SESSION_NAME')
    audit_region: str = Field("us-east-1", alias='AUDIT_REGION')
    lookback_minutes: int = Field(5, ge=1, alias='LOOKBACK_MINUTES')
    poll_interval_minutes: int = Field(5, ge=1, alias='POLL_INTERVAL_MINUTES')
    # CloudTrail LookupEvents accepts 1..50
    max_audit_records: int = Field(10, ge=1, le=50, alias='MAX_AUDIT_RECORDS')

    @model_validator(mode='after')
    def _lookback_covers_interval(self):
        # A window shorter than the tick interval leaves gaps nobody polls.
        if self.lookback_minutes < self.poll_interval_minutes:
            raise ValueError(
                f"LOOKBACK_MINUTES ({self.lookback_minutes}) must be >= "
                f"POLL_INTERVAL_MINUTES ({self.poll_interval_minutes})"
            )
        return self

    def require_general_topic(self) -> str:
        if not self.general_topic_arn:
            raise ConfigurationError("Missing required environment variable: GENERAL_NOTIFICATION_TOPIC")
        return self.general_topic_arn

    def require_poll_config(self) -> tuple[str, str]:
        """Returns (role_arn, external_id) or raises if poll mode is not configured."""
        missing = [
            name for name, value in (
                ('CROSS_ACCOUNT_ROLE_ARN', self.role_arn),
                ('CROSS_ACCOUNT_EXTERNAL_ID', self.external_id),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required environment variable(s): {', '.join(missing)}")
        return self.role_arn, self.external_id


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """
    Loads settings once per container; they stay fixed for warm invocations.

    Raises:
        ConfigurationError: If an environment value fails validation.
    """
    try:
        return AppSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
