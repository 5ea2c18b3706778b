"""Construct that gates a CloudFormation deployment on an ECS rollout.

The custom resource runs the ECS deploy waiter on create and update. A rollout
that does not complete fails the resource (and with it the stack operation)
unless `fail_on_deployment_failure` is disabled, in which case callers can read
`status` / `failure_message` and decide for themselves.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from aws_cdk import (
    CustomResource,
    Duration,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_logs as logs,
    custom_resources as cr,
)
from aws_cdk.aws_lambda_python_alpha import BundlingOptions, PythonFunction, PythonLayerVersion
from constructs import Construct

RESOURCE_TYPE = "Custom::WaitForEcsDeployment"
DEFAULT_TIMEOUT_MS = 180_000
# Lambda hard limit is 900s; keep room for the handler around the wait itself
LAMBDA_TIMEOUT_MARGIN_SECONDS = 60
MAX_WAITER_TIMEOUT_MS = (900 - LAMBDA_TIMEOUT_MARGIN_SECONDS) * 1000


def create_common_layer(scope: Construct, construct_id: str, env_name: str) -> lambda_.ILayerVersion:
    """Create the Common Layer holding the `shared` package.

    Uses standard Python layer layout: python/shared/... at the root of asset.
    """
    return PythonLayerVersion(
        scope,
        construct_id,
        entry="src/lambda/layers/common",
        layer_version_name=f"{env_name}-ecs-waiter-common-layer",
        description="ECS deploy waiter models, poller and classifier",
        compatible_runtimes=[lambda_.Runtime.PYTHON_3_12],
        bundling=BundlingOptions(
            command=[
                "bash",
                "-c",
                "set -euxo pipefail; "
                "mkdir -p /asset-output/python; "
                "cp -R /asset-input/python/. /asset-output/python/; "
                "if [ -f requirements.txt ]; then pip install -q -r requirements.txt -t /asset-output/python; fi",
            ],
            asset_excludes=["tests", "__pycache__", "*.pyc"],
        ),
    )


class WaitForEcsDeployment(Construct):
    """Custom resource that waits for an ECS service rollout to finish."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        cluster_name: str,
        service_name: str,
        desired_task_def: str,
        timeout_ms: Optional[int] = None,
        aws_region: Optional[str] = None,
        assume_role: Optional[str] = None,
        fail_on_deployment_failure: bool = True,
        environment: str = "dev",
        config: Optional[dict] = None,
        common_layer: Optional[lambda_.ILayerVersion] = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self.env_name = environment
        self.config = config or {}
        self.timeout_ms = self._resolve_timeout_ms(timeout_ms)

        self.common_layer = common_layer or create_common_layer(self, "CommonLayer", self.env_name)
        self.handler = self._create_handler()
        self._grant_permissions(assume_role)

        self.provider = cr.Provider(self, "Provider", on_event_handler=self.handler)

        properties: Dict[str, str] = {
            "clusterName": cluster_name,
            "serviceName": service_name,
            "desiredTaskDef": desired_task_def,
            "timeoutMs": str(self.timeout_ms),
            "failOnDeploymentFailure": "true" if fail_on_deployment_failure else "false",
        }
        if aws_region:
            properties["awsRegion"] = aws_region
        if assume_role:
            properties["assumeRole"] = assume_role

        self.resource = CustomResource(
            self,
            "Resource",
            service_token=self.provider.service_token,
            resource_type=RESOURCE_TYPE,
            properties=properties,
        )

        self.status = self.resource.get_att_string("Status")
        self.failure_message = self.resource.get_att_string("FailureMessage")
        self.failure_reason = self.resource.get_att_string("FailureReason")

    def _resolve_timeout_ms(self, timeout_ms: Optional[int]) -> int:
        if timeout_ms is None:
            timeout_ms = self.config.get("ecs_waiter_timeout_ms", DEFAULT_TIMEOUT_MS)
        resolved = int(timeout_ms)
        if resolved <= 0:
            raise ValueError("timeout_ms must be > 0")
        if resolved > MAX_WAITER_TIMEOUT_MS:
            raise ValueError(f"timeout_ms must be <= {MAX_WAITER_TIMEOUT_MS} to fit in a single Lambda invocation")
        return resolved

    def _lambda_timeout(self) -> Duration:
        seconds = math.ceil(self.timeout_ms / 1000) + LAMBDA_TIMEOUT_MARGIN_SECONDS
        return Duration.seconds(min(900, seconds))

    def _log_retention(self) -> logs.RetentionDays:
        """Map integer days from config to CloudWatch Logs retention enum."""
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            90: logs.RetentionDays.THREE_MONTHS,
        }
        return retention_map.get(self.config.get("log_retention_days", 14), logs.RetentionDays.TWO_WEEKS)

    def _create_handler(self) -> lambda_.IFunction:
        return PythonFunction(
            self,
            "Handler",
            runtime=lambda_.Runtime.PYTHON_3_12,
            entry="src/lambda/functions/ecs_deploy_waiter",
            index="handler.py",
            handler="main",
            memory_size=int(self.config.get("lambda_memory", 256)),
            timeout=self._lambda_timeout(),
            log_retention=self._log_retention(),
            layers=[self.common_layer],
            tracing=lambda_.Tracing.ACTIVE if self.config.get("enable_xray_tracing") else lambda_.Tracing.DISABLED,
            environment={
                "ENVIRONMENT": self.env_name,
                "ECS_WAITER_DEFAULT_TIMEOUT_MS": str(self.timeout_ms),
                "ECS_WAITER_POLL_INTERVAL_SECONDS": str(self.config.get("ecs_waiter_poll_interval_seconds", 6)),
                "LOG_LEVEL": str(self.config.get("log_level", "INFO")),
            },
        )

    def _grant_permissions(self, assume_role: Optional[str]) -> None:
        self.handler.add_to_role_policy(
            iam.PolicyStatement(
                actions=["ecs:DescribeServices"],
                resources=["*"],
            )
        )
        if assume_role:
            self.handler.add_to_role_policy(
                iam.PolicyStatement(
                    actions=["sts:AssumeRole"],
                    resources=[assume_role],
                )
            )
