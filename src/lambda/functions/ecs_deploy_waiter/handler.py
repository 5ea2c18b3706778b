"""Custom-resource Lambda that waits for an ECS service deployment to finish.

Lifecycle
- Create / Update: wait for the service to stabilize, classify the rollout and
  expose the verdict as resource attributes. A FAILED verdict fails the
  resource operation unless `failOnDeploymentFailure` is "false".
- Delete: nothing to clean up; the waiter owns no cloud resources.

Input event (CDK provider framework -> onEvent)
{
  "RequestType": "Create",
  "RequestId": "6f0f5c2e-...",
  "ResourceProperties": {
    "clusterName": "web-cluster",
    "serviceName": "web",
    "desiredTaskDef": "arn:aws:ecs:ap-northeast-2:123456789012:task-definition/web:42",
    "timeoutMs": "180000",
    "awsRegion": "ap-northeast-2",
    "assumeRole": "arn:aws:iam::123456789012:role/deployer",
    "failOnDeploymentFailure": "true"
  }
}

Output
{
  "PhysicalResourceId": "wait-for-ecs-<hex>",
  "Data": {"Status": "COMPLETED", "FailureMessage": "", "FailureReason": "NONE", ...}
}
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping

from pydantic import ValidationError

from shared.ecs import DeploymentFailedError, DeploymentStatus, WaitRequest, wait_for_service_sync
from shared.models import CustomResourceEvent, RequestType, WaiterSettings
from shared.utils.logger import extract_correlation_id, get_logger

logger = get_logger(__name__)

PHYSICAL_ID_PREFIX = "wait-for-ecs-"


def _build_request(properties: Mapping[str, Any], settings: WaiterSettings) -> WaitRequest:
    props = dict(properties)
    if not str(props.get("timeoutMs") or "").strip():
        props["timeoutMs"] = settings.default_timeout_ms
    try:
        return WaitRequest.model_validate(props)
    except ValidationError as exc:
        raise ValueError(f"Invalid waiter properties: {exc}") from exc


def _physical_id(event: CustomResourceEvent) -> str:
    if event.request_type is RequestType.UPDATE and event.physical_resource_id:
        return event.physical_resource_id
    return f"{PHYSICAL_ID_PREFIX}{uuid.uuid4().hex}"


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    corr_id = extract_correlation_id(event)
    if corr_id:
        globals()["logger"] = get_logger(__name__, correlation_id=corr_id)

    try:
        parsed = CustomResourceEvent.model_validate(event)
    except ValidationError as exc:
        raise ValueError(f"Invalid custom resource event: {exc}") from exc

    if parsed.request_type is RequestType.DELETE:
        logger.info("Delete request, nothing to clean up", extra={"physical_id": parsed.physical_resource_id})
        return {"PhysicalResourceId": parsed.physical_resource_id}

    settings = WaiterSettings.load()
    request = _build_request(parsed.resource_properties, settings)
    physical_id = _physical_id(parsed)

    outcome = wait_for_service_sync(request, settings=settings, log=logger)

    if outcome.status is not DeploymentStatus.COMPLETED and parsed.fail_on_deployment_failure:
        logger.error(
            "ECS deployment failed",
            extra={"service": request.service_id, "failure_message": outcome.failure_message},
        )
        raise DeploymentFailedError(f"ECS deployment failed: {outcome.failure_message}")

    return {"PhysicalResourceId": physical_id, "Data": outcome.to_resource_data()}
