# infra_cdk/zone_alert_stack.py
from typing import Optional

from aws_cdk import (
    BundlingOptions,
    Stack,
    Duration,
    Tags,
    aws_events as events,
    aws_events_targets as targets,
    aws_iam as iam,
    aws_lambda as _lambda,
)
from constructs import Construct

ZONE_CHANGE_EVENT_NAMES = [
    "ChangeResourceRecordSets",
    "CreateHostedZone",
    "DeleteHostedZone",
    "UpdateHostedZoneComment",
]


def layer_bundling() -> BundlingOptions:
    """
    Installs the layer's third-party requirements next to the zone_alert
    package. The lambda runtime ships boto3 but not pydantic.
    """
    return BundlingOptions(
        image=_lambda.Runtime.PYTHON_3_12.bundling_image,
        command=[
            "bash", "-c",
            "pip install -r requirements.txt -t /asset-output/python && cp -au python/. /asset-output/python",
        ],
    )


class ZoneAlertStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, *,
                 project: str,
                 environment: str,
                 service: str,
                 version: str,
                 origin_label: str,
                 general_topic_arn: str,
                 critical_topic_arn: Optional[str] = None,
                 cross_account_role_arn: Optional[str] = None,
                 cross_account_external_id: Optional[str] = None,
                 poll_interval_minutes: int = 5,
                 lookback_minutes: int = 5,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        project = project.lower()
        environment = environment.lower()
        topic_arns = [general_topic_arn] + ([critical_topic_arn] if critical_topic_arn else [])

        common_env = {
            "ORIGIN_LABEL": origin_label,
            "GENERAL_NOTIFICATION_TOPIC": general_topic_arn,
        }
        if critical_topic_arn:
            common_env["CRITICAL_NOTIFICATION_TOPIC"] = critical_topic_arn

        # === Shared Lambda Layer ===
        common_layer = _lambda.LayerVersion(self, "ZoneAlertLayer",
            code=_lambda.Code.from_asset("lambda_layer", bundling=layer_bundling()),
            compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
            description="Match rule, normalizer and SNS dispatcher shared by the zone change lambdas"
        )

        # === PUSH: same-account relay ===
        relay_function = _lambda.Function(self, "Route53EventForwarder",
            function_name=f"{project}-{environment}-r53-event-forwarder",
            runtime=_lambda.Runtime.PYTHON_3_12,
            code=_lambda.Code.from_asset("lambdas/zone_change_relay"),
            handler="app.handler",
            timeout=Duration.seconds(60),
            environment=common_env,
            layers=[common_layer]
        )
        relay_function.add_to_role_policy(iam.PolicyStatement(actions=["sns:Publish"], resources=topic_arns))

        change_rule = events.Rule(self, "Route53ChangeRule",
            rule_name=f"{project}-{environment}-r53-changes",
            description=f"Detect Route 53 changes in {environment.upper()} account",
            event_pattern=events.EventPattern(
                source=["aws.route53"],
                detail_type=["AWS API Call via CloudTrail"],
                detail={
                    "eventSource": ["route53.amazonaws.com"],
                    "eventName": ZONE_CHANGE_EVENT_NAMES,
                },
            ),
        )
        change_rule.add_target(targets.LambdaFunction(relay_function))

        # === PULL: cross-account poller (only when a monitored role is configured) ===
        if cross_account_role_arn:
            poller_function = _lambda.Function(self, "Route53CrossAccountPoller",
                function_name=f"{project}-{environment}-r53-cross-account-poller",
                runtime=_lambda.Runtime.PYTHON_3_12,
                code=_lambda.Code.from_asset("lambdas/cross_account_poller"),
                handler="app.handler",
                timeout=Duration.seconds(60),
                environment={
                    **common_env,
                    "CROSS_ACCOUNT_ROLE_ARN": cross_account_role_arn,
                    "CROSS_ACCOUNT_EXTERNAL_ID": cross_account_external_id or "",
                    "LOOKBACK_MINUTES": str(lookback_minutes),
                    "POLL_INTERVAL_MINUTES": str(poll_interval_minutes),
                },
                layers=[common_layer]
            )
            poller_function.add_to_role_policy(iam.PolicyStatement(actions=["sns:Publish"], resources=topic_arns))
            poller_function.add_to_role_policy(iam.PolicyStatement(actions=["sts:AssumeRole"], resources=[cross_account_role_arn]))

            schedule_rule = events.Rule(self, "Route53PollSchedule",
                rule_name=f"{project}-{environment}-r53-poll-schedule",
                schedule=events.Schedule.rate(Duration.minutes(poll_interval_minutes)),
            )
            schedule_rule.add_target(targets.LambdaFunction(poller_function))

        Tags.of(self).add("project", project)
        Tags.of(self).add("environment", environment)
        Tags.of(self).add("service", service)
        Tags.of(self).add("version", version)
