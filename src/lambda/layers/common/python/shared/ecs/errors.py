"""Error taxonomy for the ECS deployment waiter.

Only configuration problems (`NoServicesFoundError`, `CredentialsError`) are
meant to reach callers as exceptions. Poll timeouts and API failures are
caught by the deadline race and folded into a FAILED outcome.
"""

from __future__ import annotations

from typing import Optional


class EcsWaiterError(Exception):
    """Base class for all waiter errors."""


class PollTimeoutError(EcsWaiterError):
    """The stability poll used every attempt without the service settling."""

    def __init__(self, service_id: str, attempts: int) -> None:
        super().__init__(f"Service {service_id} did not stabilize after {attempts} attempt(s)")
        self.service_id = service_id
        self.attempts = attempts


class EcsApiError(EcsWaiterError):
    """Transport, permission or terminal-state failure reported by the ECS API."""

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class NoServicesFoundError(EcsWaiterError):
    """DescribeServices returned no service records for the request."""

    def __init__(self, cluster_id: str, service_id: str) -> None:
        super().__init__(f"No services found for {service_id} in cluster {cluster_id}")
        self.cluster_id = cluster_id
        self.service_id = service_id


class CredentialsError(EcsWaiterError):
    """Delegated credentials could not be obtained for the ECS client."""


class DeploymentFailedError(RuntimeError):
    """Raised by the custom-resource handler when a rollout did not complete."""
