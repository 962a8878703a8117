# lambda_layer/python/zone_alert/poller.py
"""
Cross-account pull monitor.

Each scheduled tick assumes a role in the monitored account, looks up that
account's recent CloudTrail records for the watched event source, and
publishes an alert for every record the match rule accepts.

The query window is always ``(now - lookback, now)``; nothing is carried over
between ticks. When ticks run more often than the lookback, consecutive
windows overlap and the same record is alerted on more than once. That is
accepted behaviour, not something this module tries to suppress.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .aws_clients import account_from_arn
from .dispatcher import AlertDispatcher, DispatchResult
from .errors import AuditQueryError, PollError
from .models import PollWindow, Severity
from .normalizer import normalize
from .rules import MatchRule, matches


class PollState(str, Enum):
    IDLE = "Idle"
    ASSUMING_ROLE = "AssumingRole"
    QUERYING = "Querying"
    FILTERING = "Filtering"
    PUBLISHING = "Publishing"
    FAILED = "Failed"


@dataclass
class PollReport:
    window: PollWindow
    states: list = field(default_factory=lambda: [PollState.IDLE])
    records_returned: int = 0
    matched: int = 0
    results: list = field(default_factory=list)
    failure: Optional[PollError] = None

    @property
    def state(self) -> PollState:
        return self.states[-1]

    @property
    def published(self) -> int:
        return sum(1 for r in self.results if r)

    @property
    def failed_publishes(self) -> list[DispatchResult]:
        return [r for r in self.results if not r]

    def as_dict(self) -> dict:
        return {
            "window_start": self.window.start.isoformat(),
            "window_end": self.window.end.isoformat(),
            "records_returned": self.records_returned,
            "matched": self.matched,
            "published": self.published,
            "publish_failures": len(self.failed_publishes),
            "state": self.state.value,
            "failure": str(self.failure) if self.failure else None,
        }


def _event_time(record: dict) -> Optional[datetime]:
    value = record.get("EventTime") or record.get("eventTime")
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    return None


class CrossAccountPoller:
    """
    Runs one poll tick: Idle -> AssumingRole -> Querying -> Filtering ->
    Publishing -> Idle, or Failed when the role or the audit lookup fails.
    """

    def __init__(self,
                 credential_provider,
                 audit_trail_factory: Callable,
                 dispatcher: AlertDispatcher,
                 rule: MatchRule,
                 origin_label: str,
                 role_arn: str,
                 external_id: str,
                 session_name: str = "zone-change-poller",
                 lookback: timedelta = timedelta(minutes=5),
                 max_records: int = 10,
                 function_label: str = "zone-change-poller",
                 event_source: Optional[str] = None,
                 clock: Callable[[], datetime] = None):
        """
        Args:
            credential_provider: Has ``assume_role(role_arn, session_name, external_id)``.
            audit_trail_factory: Turns assumed credentials into an object with
                ``lookup_events(event_source, start, end, max_items)``.
            dispatcher: Publishes alerts and self-notifications.
            rule: Decides which records are zone changes.
            origin_label: Label put on every alert from this poller.
        """
        self.credential_provider = credential_provider
        self.audit_trail_factory = audit_trail_factory
        self.dispatcher = dispatcher
        self.rule = rule
        self.origin_label = origin_label
        self.role_arn = role_arn
        self.external_id = external_id
        self.session_name = session_name
        self.lookback = lookback
        self.max_records = max_records
        self.function_label = function_label
        # LookupEvents filters on a single attribute value.
        self.event_source = event_source or sorted(rule.event_sources)[0]
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.monitored_account = account_from_arn(role_arn)

    def build_window(self, now: datetime) -> PollWindow:
        return PollWindow(start=now - self.lookback, end=now)

    def _fail(self, report: PollReport, error: PollError) -> PollReport:
        print(f"❌ Poll run aborted in state {report.state.value}: {error}")
        report.failure = error
        report.states.append(PollState.FAILED)
        self.dispatcher.notify(Severity.CRITICAL, self.function_label, str(error))
        return report

    def _query(self, credentials, window: PollWindow) -> list[dict]:
        try:
            audit_trail = self.audit_trail_factory(credentials)
        except (ClientError, BotoCoreError) as e:
            raise AuditQueryError(f"Could not create the audit client: {e}") from e
        return audit_trail.lookup_events(
            self.event_source,
            window.start,
            window.end,
            self.max_records,
        )

    def poll(self, now: Optional[datetime] = None) -> PollReport:
        """
        Runs one tick. Never raises for role, query or publish failures;
        those are reported on the returned PollReport.
        """
        window = self.build_window(now or self.clock())
        report = PollReport(window=window)
        print(f"--- Polling {self.role_arn} from {window.start.isoformat()} to {window.end.isoformat()} ---")

        # Step 1: Temporary credentials in the monitored account
        report.states.append(PollState.ASSUMING_ROLE)
        try:
            credentials = self.credential_provider.assume_role(self.role_arn, self.session_name, self.external_id)
        except PollError as e:
            return self._fail(report, e)

        # Step 2: Windowed audit lookup
        report.states.append(PollState.QUERYING)
        try:
            records = self._query(credentials, window)
        except PollError as e:
            return self._fail(report, e)
        report.records_returned = len(records)
        print(f" -> Audit lookup returned {len(records)} record(s).")

        # Step 3: Keep only zone changes, in the order CloudTrail returned them
        report.states.append(PollState.FILTERING)
        candidates = [record for record in records if matches(record, self.rule)]
        report.matched = len(candidates)
        seen_times = [t for t in (_event_time(r) for r in records) if t is not None]
        if seen_times:
            window.last_seen_event_time = max(seen_times)

        # Step 4: One alert per matching record; a failed publish does not stop the rest
        report.states.append(PollState.PUBLISHING)
        for record in candidates:
            alert = normalize(record, self.origin_label, account_id=self.monitored_account)
            result = self.dispatcher.dispatch(alert)
            report.results.append(result)
            if not result:
                print(f" -> ⚠️ Alert for {alert.eventName} at {alert.eventTime} was not published: {result.error}")

        failures = report.failed_publishes
        if failures:
            self.dispatcher.notify(
                Severity.GENERAL,
                self.function_label,
                f"{len(failures)} of {len(candidates)} change alert(s) could not be published:\n"
                + "\n".join(str(r.error) for r in failures),
            )

        report.states.append(PollState.IDLE)
        print(f"✅ Poll run complete: {report.published}/{report.matched} alert(s) published.")
        return report
