"""Lightweight JSON logger utility for Lambdas.

Emits one JSON object per record with level, logger name, message, the
deployment environment and a correlation id when available. Fields passed via
`extra=` are merged into the payload.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": record.created,
        }
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key in payload or value is None:
                continue
            payload[key] = value
        env = payload.get("environment") or os.environ.get("ENVIRONMENT")
        if env:
            payload["environment"] = env
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _Adapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Dict[str, Any]):  # type: ignore[override]
        extra = self.extra.copy() if isinstance(self.extra, dict) else {}
        if "extra" in kwargs and isinstance(kwargs["extra"], dict):
            extra.update(kwargs["extra"])  # merge per-call extras
        kwargs["extra"] = extra
        return msg, kwargs


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    level: Optional[str] = None,
) -> logging.LoggerAdapter:
    """Return a JSON-formatted logger adapter with optional correlation_id."""
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        base.addHandler(handler)
    base.setLevel(_resolve_level(level))
    extras: Dict[str, Any] = {"environment": os.environ.get("ENVIRONMENT")}
    if correlation_id:
        extras["correlation_id"] = correlation_id
    return _Adapter(base, extras)


def extract_correlation_id(event: Optional[Dict[str, Any]]) -> Optional[str]:
    """Try to extract a correlation id from common event shapes.

    CloudFormation custom-resource events carry `RequestId`; API-style events
    carry it in a field or header.
    """
    if not isinstance(event, dict):
        return None
    for key in ("correlation_id", "CorrelationId", "RequestId", "request_id"):
        val = event.get(key)
        if isinstance(val, str) and val:
            return val
    hdr_obj = event.get("headers")
    headers: Dict[str, Any] = hdr_obj if isinstance(hdr_obj, dict) else {}
    for h in ("x-correlation-id", "x-request-id", "x-amzn-trace-id"):
        hv = headers.get(h)
        if isinstance(hv, str) and hv:
            return hv
    return None
