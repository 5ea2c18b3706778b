"""Models subpackage exposed via Common Layer."""

from .events import CustomResourceEvent, RequestType
from .settings import WaiterSettings

__all__ = [
    "CustomResourceEvent",
    "RequestType",
    "WaiterSettings",
]
