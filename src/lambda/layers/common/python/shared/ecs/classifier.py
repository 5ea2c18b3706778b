"""Rollout failure classification for ECS services.

Pure functions over a single DescribeServices snapshot. Rules are evaluated in
order and any match marks the service as failed:

1. The PRIMARY deployment completed on a revision other than the desired one
   (an automatic rollback already finished).
2. Any deployment reports rolloutState FAILED.
3. Any deployment is IN_PROGRESS with a reason that mentions a rollback or the
   deployment circuit breaker.

Rule 3 matches free-text `rolloutStateReason` values and will need revisiting
if ECS ever exposes a structured reason code.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .errors import NoServicesFoundError
from .models import DeploymentStatus, EcsService

PRIMARY = "PRIMARY"
ROLLOUT_COMPLETED = "COMPLETED"
ROLLOUT_FAILED = "FAILED"
ROLLOUT_IN_PROGRESS = "IN_PROGRESS"

ROLLBACK_REASON_MARKERS: Tuple[str, ...] = ("rolling back", "rolled back", "circuit breaker")

FAILURE_MESSAGE_PREFIX = "One or more services failed to deploy: "


def _settled_on_other_revision(service: EcsService, desired_revision: str) -> bool:
    return any(
        d.status == PRIMARY and d.rollout_state == ROLLOUT_COMPLETED and d.revision_id != desired_revision
        for d in service.deployments
    )


def _rollout_failed(service: EcsService) -> bool:
    return any(d.rollout_state == ROLLOUT_FAILED for d in service.deployments)


def _rollback_in_progress(service: EcsService) -> bool:
    for d in service.deployments:
        if d.rollout_state != ROLLOUT_IN_PROGRESS:
            continue
        reason = d.rollout_state_reason or ""
        if any(marker in reason for marker in ROLLBACK_REASON_MARKERS):
            return True
    return False


def has_failed(service: EcsService, desired_revision: str) -> bool:
    """Return True when any failure rule matches the service's deployments."""
    return (
        _settled_on_other_revision(service, desired_revision)
        or _rollout_failed(service)
        or _rollback_in_progress(service)
    )


def failed_service_names(services: Sequence[EcsService], desired_revision: str) -> List[str]:
    return [s.service_name for s in services if has_failed(s, desired_revision)]


def classify_services(
    services: Sequence[EcsService],
    desired_revision: str,
    *,
    cluster_id: str = "",
    service_id: str = "",
) -> Tuple[DeploymentStatus, str]:
    """Return `(status, failure_message)` for one describe snapshot.

    Raises NoServicesFoundError when the snapshot is empty; that is a
    configuration problem, not a rollout verdict.
    """
    if not services:
        raise NoServicesFoundError(cluster_id, service_id)

    failed = failed_service_names(services, desired_revision)
    if failed:
        return DeploymentStatus.FAILED, FAILURE_MESSAGE_PREFIX + ",".join(failed)
    return DeploymentStatus.COMPLETED, ""
