#!/usr/bin/env python3
# infra_cdk/app.py
import os

import aws_cdk as cdk
import yaml

from zone_alert_stack import ZoneAlertStack


def load_vars(environment: str, vars_dir: str = "vars") -> dict:
    """Reads the per-environment variables file, e.g. vars/systest.yml."""
    with open(os.path.join(vars_dir, f"{environment}.yml"), 'r') as f:
        return yaml.safe_load(f) or {}


def main():
    app = cdk.App()
    project = app.node.try_get_context("project")
    environment = app.node.try_get_context("environment")
    service = app.node.try_get_context("service")
    version = app.node.try_get_context("version")
    variables = load_vars(environment)

    ZoneAlertStack(app, f"{project}-{environment}-r53changealert".upper(),
        env=cdk.Environment(account=str(variables["account"]), region=variables["region"]),
        project=project,
        environment=environment,
        service=service,
        version=version,
        origin_label=variables.get("origin_label", environment.upper()),
        general_topic_arn=variables["general_notification_topic"],
        critical_topic_arn=variables.get("critical_notification_topic"),
        cross_account_role_arn=variables.get("cross_account_role_arn"),
        cross_account_external_id=variables.get("cross_account_external_id"),
        poll_interval_minutes=int(variables.get("poll_interval_minutes", 5)),
        lookback_minutes=int(variables.get("lookback_minutes", 5)),
    )
    app.synth()


if __name__ == "__main__":
    main()
