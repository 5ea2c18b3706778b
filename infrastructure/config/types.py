"""Typed configuration contracts for environment-specific settings."""

from __future__ import annotations

from typing import Dict, List, NotRequired, Required, TypedDict


class EcsDeployWaitConfig(TypedDict, total=False):
    """One ECS service whose rollout should gate the stack deployment."""

    name: Required[str]
    cluster_name: Required[str]
    service_name: Required[str]
    desired_task_def: Required[str]
    timeout_ms: NotRequired[int]
    aws_region: NotRequired[str]
    assume_role: NotRequired[str]
    fail_on_deployment_failure: NotRequired[bool]


class EnvironmentConfig(TypedDict, total=False):
    """Strongly-typed environment configuration contract."""

    region: Required[str]
    account_id: NotRequired[str | None]

    lambda_memory: NotRequired[int]
    log_retention_days: NotRequired[int]
    enable_xray_tracing: NotRequired[bool]
    log_level: NotRequired[str]

    ecs_waiter_timeout_ms: NotRequired[int]
    ecs_waiter_poll_interval_seconds: NotRequired[float]
    ecs_deploy_waits: NotRequired[List[EcsDeployWaitConfig]]

    tags: NotRequired[Dict[str, str]]
