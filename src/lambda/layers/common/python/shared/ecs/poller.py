"""Stability polling around the botocore `services_stable` waiter.

The waiter is driven one attempt at a time on an executor thread, with an
`asyncio.sleep` between attempts. Cancelling the polling task therefore stops
it at the next await instead of leaving a blocking waiter running for the
whole attempt budget. An attempt already in flight runs to completion on its
thread; callers that must not wait for it pass their own executor.
"""

from __future__ import annotations

import asyncio
import math
from concurrent.futures import Executor
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, WaiterError

from shared.models.settings import DEFAULT_POLL_INTERVAL_SECONDS
from shared.utils.logger import get_logger

from .clients import run_blocking
from .errors import EcsApiError, PollTimeoutError

logger = get_logger(__name__)


_RETRY_REASON = "Max attempts exceeded"


def max_attempts_for(timeout_ms: int, poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS) -> int:
    """Number of polls that fit in `timeout_ms`, never fewer than one."""
    if poll_interval_seconds <= 0:
        raise ValueError("poll_interval_seconds must be > 0")
    return max(1, math.floor(timeout_ms / (poll_interval_seconds * 1000)))


def _waiter_error_code(error: WaiterError) -> Optional[str]:
    last_response = error.last_response or {}
    code = (last_response.get("Error") or {}).get("Code")
    return str(code) if code else None


async def _poll_once(
    waiter: Any,
    cluster_id: str,
    service_id: str,
    poll_interval_seconds: float,
    executor: Optional[Executor] = None,
) -> bool:
    """Run a single waiter attempt. True when stable, False when still settling."""
    try:
        await run_blocking(
            executor,
            waiter.wait,
            cluster=cluster_id,
            services=[service_id],
            WaiterConfig={"Delay": poll_interval_seconds, "MaxAttempts": 1},
        )
    except WaiterError as error:
        if str(error.kwargs.get("reason", "")).startswith(_RETRY_REASON):
            return False
        raise EcsApiError(
            f"Stability check for {service_id} failed: {error.kwargs.get('reason')}",
            code=_waiter_error_code(error),
        ) from error
    except BotoCoreError as error:
        raise EcsApiError(f"Stability check for {service_id} failed: {error}") from error
    return True


async def wait_until_stable(
    client: Any,
    cluster_id: str,
    service_id: str,
    timeout_ms: int,
    *,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    log: Optional[Any] = None,
    executor: Optional[Executor] = None,
) -> None:
    """Poll until the service has no deployments left in a transitional state.

    Raises:
        PollTimeoutError: every attempt ran without the service settling.
        EcsApiError: the API returned an error or a terminal waiter state
            (service missing, draining or inactive).
    """
    log = log or logger
    attempts = max_attempts_for(timeout_ms, poll_interval_seconds)
    waiter = client.get_waiter("services_stable")

    for attempt in range(1, attempts + 1):
        stable = await _poll_once(waiter, cluster_id, service_id, poll_interval_seconds, executor)
        log.debug(
            "Stability poll",
            extra={"cluster": cluster_id, "service": service_id, "attempt": attempt, "stable": stable},
        )
        if stable:
            return
        if attempt < attempts:
            await asyncio.sleep(poll_interval_seconds)

    raise PollTimeoutError(service_id, attempts)
