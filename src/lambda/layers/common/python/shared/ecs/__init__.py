"""ECS deployment waiter exposed via Common Layer."""

from .classifier import classify_services, has_failed
from .clients import build_ecs_client, describe_services
from .errors import (
    CredentialsError,
    DeploymentFailedError,
    EcsApiError,
    EcsWaiterError,
    NoServicesFoundError,
    PollTimeoutError,
)
from .models import (
    DEFAULT_TIMEOUT_MS,
    DeploymentOutcome,
    DeploymentStatus,
    EcsDeployment,
    EcsService,
    FailureReason,
    WaitRequest,
)
from .poller import max_attempts_for, wait_until_stable
from .waiter import wait_for_service, wait_for_service_sync, wait_for_services

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "CredentialsError",
    "DeploymentFailedError",
    "DeploymentOutcome",
    "DeploymentStatus",
    "EcsApiError",
    "EcsDeployment",
    "EcsService",
    "EcsWaiterError",
    "FailureReason",
    "NoServicesFoundError",
    "PollTimeoutError",
    "WaitRequest",
    "build_ecs_client",
    "classify_services",
    "describe_services",
    "has_failed",
    "max_attempts_for",
    "wait_for_service",
    "wait_for_service_sync",
    "wait_for_services",
    "wait_until_stable",
]
