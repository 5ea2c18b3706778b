"""Stack that verifies ECS rollouts as part of a CDK deployment."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from aws_cdk import CfnOutput, Stack
from constructs import Construct

from infrastructure.config.types import EcsDeployWaitConfig
from infrastructure.constructs.ecs_deploy_waiter_construct import WaitForEcsDeployment, create_common_layer

_REQUIRED_WAIT_KEYS = ("name", "cluster_name", "service_name", "desired_task_def")


def resolve_deploy_waits(config: dict, context_value: Any = None) -> List[EcsDeployWaitConfig]:
    """Return the waits to provision.

    `context_value` (from `-c ecs_deploy_waits=...`) replaces the configured list
    and may be a list or its JSON encoding.
    """
    raw: Any = config.get("ecs_deploy_waits") or []
    if context_value:
        raw = json.loads(context_value) if isinstance(context_value, str) else context_value
    if not isinstance(raw, list):
        raise ValueError("ecs_deploy_waits must be a list")

    waits: List[EcsDeployWaitConfig] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError("Each ecs_deploy_waits entry must be an object")
        missing = [key for key in _REQUIRED_WAIT_KEYS if not str(item.get(key) or "").strip()]
        if missing:
            raise ValueError(f"ecs_deploy_waits entry is missing: {', '.join(missing)}")
        waits.append(item)  # type: ignore[arg-type]
    return waits


class DeploymentVerificationStack(Stack):
    """One WaitForEcsDeployment per configured service, sharing a Common Layer."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: dict,
        deploy_waits: Optional[List[EcsDeployWaitConfig]] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config
        self.waiters: Dict[str, WaitForEcsDeployment] = {}

        waits = deploy_waits if deploy_waits is not None else resolve_deploy_waits(config)
        if not waits:
            return

        self.common_layer = create_common_layer(self, "CommonLayer", self.env_name)
        for wait in waits:
            self.add_service_wait(wait)

    def add_service_wait(self, wait: EcsDeployWaitConfig) -> WaitForEcsDeployment:
        identifier = "".join(ch for ch in str(wait["name"]).title() if ch.isalnum()) or "Service"
        if identifier in self.waiters:
            raise ValueError(f"Duplicate ecs_deploy_waits name: {wait['name']}")

        waiter = WaitForEcsDeployment(
            self,
            f"{identifier}DeployWaiter",
            cluster_name=wait["cluster_name"],
            service_name=wait["service_name"],
            desired_task_def=wait["desired_task_def"],
            timeout_ms=wait.get("timeout_ms"),
            aws_region=wait.get("aws_region"),
            assume_role=wait.get("assume_role"),
            fail_on_deployment_failure=wait.get("fail_on_deployment_failure", True),
            environment=self.env_name,
            config=self.config,
            common_layer=self.common_layer,
        )
        self.waiters[identifier] = waiter

        CfnOutput(
            self,
            f"{identifier}DeploymentStatus",
            value=waiter.status,
            description=f"Rollout status of ECS service {wait['service_name']}",
        )
        return waiter
