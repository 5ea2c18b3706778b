"""Typed request/outcome models for the ECS deployment waiter using Pydantic v2.

Field aliases accept the camelCase property names used by the custom resource
(`clusterName`, `desiredTaskDef`, ...) alongside the snake_case field names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.models.settings import DEFAULT_TIMEOUT_MS


class DeploymentStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class FailureReason(str, Enum):
    NONE = "NONE"
    ROLLOUT_FAILED = "ROLLOUT_FAILED"
    TIMED_OUT = "TIMED_OUT"
    API_ERROR = "API_ERROR"


def format_seconds(timeout_ms: int) -> str:
    """Render a millisecond budget as seconds without a trailing `.0`."""
    return f"{timeout_ms / 1000:g}"


class WaitRequest(BaseModel):
    """Input for a single wait invocation. Built fresh per call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    cluster_id: str = Field(alias="clusterName")
    service_id: str = Field(alias="serviceName")
    desired_revision: str = Field(alias="desiredTaskDef")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, alias="timeoutMs")
    region: Optional[str] = Field(default=None, alias="awsRegion")
    assume_role_arn: Optional[str] = Field(default=None, alias="assumeRole")

    @field_validator("cluster_id", "service_id")
    @classmethod
    def _require_identifier(cls, v: str) -> str:  # type: ignore[override]
        value = (v or "").strip()
        if not value:
            raise ValueError("identifier must be a non-empty string")
        return value

    @field_validator("desired_revision")
    @classmethod
    def _strip_revision(cls, v: str) -> str:  # type: ignore[override]
        return (v or "").strip()

    @field_validator("timeout_ms")
    @classmethod
    def _positive_timeout(cls, v: int) -> int:  # type: ignore[override]
        if v <= 0:
            raise ValueError("timeout_ms must be > 0")
        return v

    @field_validator("region", "assume_role_arn", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:  # type: ignore[override]
        if v is None:
            return None
        text = str(v).strip()
        return text or None


class DeploymentOutcome(BaseModel):
    """Terminal verdict of one wait invocation."""

    model_config = ConfigDict(frozen=True)

    cluster_id: str
    service_id: str
    desired_revision: str
    status: DeploymentStatus
    failure_message: str = ""
    timeout_ms: int
    failure_reason: FailureReason = FailureReason.NONE

    @model_validator(mode="after")
    def _check_terminal_state(self) -> "DeploymentOutcome":
        if self.status is DeploymentStatus.COMPLETED:
            if self.failure_message or self.failure_reason is not FailureReason.NONE:
                raise ValueError("COMPLETED outcome must not carry a failure")
        elif not self.failure_message or self.failure_reason is FailureReason.NONE:
            raise ValueError("FAILED outcome requires a failure message and reason")
        return self

    @classmethod
    def completed(cls, request: WaitRequest) -> "DeploymentOutcome":
        return cls(
            cluster_id=request.cluster_id,
            service_id=request.service_id,
            desired_revision=request.desired_revision,
            status=DeploymentStatus.COMPLETED,
            timeout_ms=request.timeout_ms,
        )

    @classmethod
    def failed(cls, request: WaitRequest, message: str, reason: FailureReason) -> "DeploymentOutcome":
        return cls(
            cluster_id=request.cluster_id,
            service_id=request.service_id,
            desired_revision=request.desired_revision,
            status=DeploymentStatus.FAILED,
            failure_message=message,
            timeout_ms=request.timeout_ms,
            failure_reason=reason,
        )

    @classmethod
    def timed_out(cls, request: WaitRequest) -> "DeploymentOutcome":
        return cls.failed(
            request,
            f"Timed out after {format_seconds(request.timeout_ms)} seconds",
            FailureReason.TIMED_OUT,
        )

    def to_resource_data(self) -> Dict[str, Any]:
        """Attributes exposed by the custom resource (`Fn::GetAtt` names)."""
        return {
            "ClusterName": self.cluster_id,
            "ServiceName": self.service_id,
            "DesiredTaskDef": self.desired_revision,
            "Status": self.status.value,
            "FailureMessage": self.failure_message,
            "TimeoutMs": self.timeout_ms,
            "FailureReason": self.failure_reason.value,
        }


class EcsDeployment(BaseModel):
    """Read-only view of one entry in `services[].deployments[]`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    status: str = ""
    revision_id: str = Field(default="", alias="taskDefinition")
    rollout_state: Optional[str] = Field(default=None, alias="rolloutState")
    rollout_state_reason: Optional[str] = Field(default=None, alias="rolloutStateReason")


class EcsService(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    service_name: str = Field(default="", alias="serviceName")
    cluster_arn: Optional[str] = Field(default=None, alias="clusterArn")
    deployments: List[EcsDeployment] = Field(default_factory=list)

    @field_validator("deployments", mode="before")
    @classmethod
    def _coerce_deployments(cls, v: Any) -> List[Any]:  # type: ignore[override]
        return list(v or [])

    @classmethod
    def from_describe_response(cls, response: Mapping[str, Any]) -> List["EcsService"]:
        """Parse the `services` array of a DescribeServices response."""
        return [cls.model_validate(item) for item in response.get("services") or []]
