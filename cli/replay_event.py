# cli/replay_event.py
"""
Runs a lambda handler locally against live AWS, using settings from a .env file.

    python -m cli.replay_event push --event-name CreateHostedZone
    python -m cli.replay_event poll
"""
import argparse
import json
import uuid
from datetime import datetime, timezone

from dotenv import load_dotenv

# Load environment variables from a .env file for local testing
load_dotenv()


def create_sample_event(event_name: str, account: str = "111122223333",
                        event_source: str = "route53.amazonaws.com", details: dict = None) -> dict:
    """
    Builds an EventBridge "AWS API Call via CloudTrail" envelope like the one
    the zone change rule delivers.
    """
    details = details or {}
    return {
        "version": "0",
        "id": str(uuid.uuid4()),
        "detail-type": "AWS API Call via CloudTrail",
        "source": "aws.route53",
        "account": account,
        "time": datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ'),
        "region": "us-east-1",
        "detail": {
            "eventSource": event_source,
            "eventName": event_name,
            "sourceIPAddress": details.get("sourceIPAddress", "203.0.113.10"),
            "userIdentity": details.get("userIdentity", {"type": "IAMUser", "userName": "replay-cli"}),
            "requestParameters": details.get("requestParameters", {"hostedZoneId": "Z0000000REPLAY"}),
            "responseElements": details.get("responseElements"),
        },
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Replay a zone change event or a poll tick against live AWS.")
    sub = parser.add_subparsers(dest="mode", required=True)
    push = sub.add_parser("push", help="Send one sample event through the relay handler.")
    push.add_argument("--event-name", default="ChangeResourceRecordSets")
    push.add_argument("--account", default="111122223333")
    push.add_argument("--event-source", default="route53.amazonaws.com")
    sub.add_parser("poll", help="Run one cross-account poll tick.")
    args = parser.parse_args(argv)

    if args.mode == "push":
        from lambdas.zone_change_relay.app import handler
        event = create_sample_event(args.event_name, args.account, args.event_source)
    else:
        from lambdas.cross_account_poller.app import handler
        event = {"detail-type": "Scheduled Event", "source": "aws.events", "detail": {}}

    print(f"--- Invoking {args.mode} handler ---")
    result = handler(event, None)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
