"""Typed event models for Lambda handlers using Pydantic v2.

Covers the CloudFormation custom-resource request delivered by the CDK
provider framework to `onEvent` handlers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


class RequestType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class CustomResourceEvent(BaseModel):
    """Custom-resource lifecycle request.

    CloudFormation stringifies every property, so boolean and numeric values
    in `resource_properties` arrive as strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_type: RequestType = Field(alias="RequestType")
    request_id: Optional[str] = Field(default=None, alias="RequestId")
    stack_id: Optional[str] = Field(default=None, alias="StackId")
    logical_resource_id: Optional[str] = Field(default=None, alias="LogicalResourceId")
    physical_resource_id: Optional[str] = Field(default=None, alias="PhysicalResourceId")
    resource_type: Optional[str] = Field(default=None, alias="ResourceType")
    resource_properties: Dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    old_resource_properties: Optional[Dict[str, Any]] = Field(default=None, alias="OldResourceProperties")

    @field_validator("resource_properties", mode="before")
    @classmethod
    def _coerce_properties(cls, v: Any) -> Dict[str, Any]:  # type: ignore[override]
        return dict(v or {})

    @property
    def fail_on_deployment_failure(self) -> bool:
        raw = self.resource_properties.get("failOnDeploymentFailure")
        if raw is None:
            return True
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() not in _FALSE_STRINGS
