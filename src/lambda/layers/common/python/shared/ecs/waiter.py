"""Deadline race for ECS deployment completion.

One invocation runs two tasks: the pipeline (stability poll, a single
DescribeServices snapshot, classification) and a timer sleeping for the
request's timeout. Whichever completes first decides the outcome; the
pipeline wins ties. A pipeline that loses the race is cancelled.

Blocking botocore calls run on an executor owned by the invocation and shut
down without joining, so a call that hangs past the deadline delays neither
the verdict nor `asyncio.run` teardown in the synchronous entry point.

Poll timeouts and ECS API errors become FAILED outcomes. Empty describe
responses and credential failures are configuration problems and propagate.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence, Union

from shared.models.settings import WaiterSettings
from shared.utils.logger import get_logger

from .classifier import classify_services
from .clients import build_ecs_client, describe_services
from .errors import EcsApiError, EcsWaiterError, PollTimeoutError
from .models import DeploymentOutcome, DeploymentStatus, FailureReason, WaitRequest
from .poller import wait_until_stable

logger = get_logger(__name__)

ClientFactory = Callable[..., Any]

# How long an abandoned pipeline gets to unwind after cancellation
_ABANDON_GRACE_SECONDS = 1.0
_THREAD_NAME_PREFIX = "ecs-waiter"


async def _run_pipeline(
    client: Any,
    request: WaitRequest,
    poll_interval_seconds: float,
    log: Any,
    executor: Optional[Executor] = None,
) -> DeploymentOutcome:
    await wait_until_stable(
        client,
        request.cluster_id,
        request.service_id,
        request.timeout_ms,
        poll_interval_seconds=poll_interval_seconds,
        log=log,
        executor=executor,
    )
    log.debug("Service is stable", extra={"cluster": request.cluster_id, "service": request.service_id})

    services = await describe_services(client, request.cluster_id, request.service_id, executor=executor)
    status, message = classify_services(
        services,
        request.desired_revision,
        cluster_id=request.cluster_id,
        service_id=request.service_id,
    )
    if status is DeploymentStatus.COMPLETED:
        return DeploymentOutcome.completed(request)
    return DeploymentOutcome.failed(request, message, FailureReason.ROLLOUT_FAILED)


def _settle(pipeline: "asyncio.Task[DeploymentOutcome]", request: WaitRequest, log: Any) -> DeploymentOutcome:
    try:
        return pipeline.result()
    except PollTimeoutError as error:
        log.warning(str(error), extra={"cluster": request.cluster_id, "attempts": error.attempts})
        return DeploymentOutcome.timed_out(request)
    except EcsApiError as error:
        log.error(
            "ECS API error while waiting for deployment",
            extra={"cluster": request.cluster_id, "service": request.service_id, "code": error.code},
        )
        return DeploymentOutcome.failed(
            request,
            f"ECS API error while waiting for {request.service_id}: {error}",
            FailureReason.API_ERROR,
        )


async def _race(
    client: Any,
    request: WaitRequest,
    poll_interval_seconds: float,
    log: Any,
    executor: Executor,
) -> DeploymentOutcome:
    pipeline = asyncio.create_task(_run_pipeline(client, request, poll_interval_seconds, log, executor))
    timer = asyncio.create_task(asyncio.sleep(request.timeout_ms / 1000))
    try:
        done, _ = await asyncio.wait({pipeline, timer}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        timer.cancel()
        if not pipeline.done():
            pipeline.cancel()

    if pipeline in done:
        return _settle(pipeline, request, log)

    await asyncio.wait({pipeline}, timeout=_ABANDON_GRACE_SECONDS)
    if pipeline.done() and not pipeline.cancelled():
        late_error = pipeline.exception()
        if late_error is not None:
            log.debug(
                "Abandoned pipeline failed after the deadline",
                extra={"service": request.service_id, "error": repr(late_error)},
            )
    return DeploymentOutcome.timed_out(request)


async def wait_for_service(
    request: WaitRequest,
    *,
    settings: Optional[WaiterSettings] = None,
    client_factory: ClientFactory = build_ecs_client,
    log: Optional[Any] = None,
) -> DeploymentOutcome:
    """Wait for `request.service_id` to settle and classify its rollout.

    Always returns within roughly `request.timeout_ms`. Raises only for
    configuration errors (NoServicesFoundError, CredentialsError).
    """
    settings = settings or WaiterSettings.load()
    log = log or logger
    log.info(
        "Waiting for ECS deployment",
        extra={
            "cluster": request.cluster_id,
            "service": request.service_id,
            "desired_revision": request.desired_revision,
            "timeout_ms": request.timeout_ms,
        },
    )

    client = client_factory(region=request.region, assume_role_arn=request.assume_role_arn)

    # Not joined on exit; a call stuck past the deadline keeps its thread until it returns
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=_THREAD_NAME_PREFIX)
    try:
        outcome = await _race(client, request, settings.poll_interval_seconds, log, executor)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    log.info(
        "ECS deployment verdict",
        extra={
            "cluster": request.cluster_id,
            "service": request.service_id,
            "status": outcome.status.value,
            "failure_reason": outcome.failure_reason.value,
        },
    )
    return outcome


async def wait_for_services(
    requests: Sequence[WaitRequest], **kwargs: Any
) -> List[Union[DeploymentOutcome, EcsWaiterError]]:
    """Run independent waits concurrently; results keep the input order.

    Every wait runs to its own verdict. A request that fails with a
    configuration error gets that error in its slot instead of cancelling or
    hiding its siblings. Any other exception is re-raised once all waits end.
    """
    results = await asyncio.gather(*(wait_for_service(r, **kwargs) for r in requests), return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, EcsWaiterError):
            raise result
    return list(results)


def wait_for_service_sync(request: WaitRequest, **kwargs: Any) -> DeploymentOutcome:
    """Blocking entry point for synchronous callers such as Lambda handlers."""
    return asyncio.run(wait_for_service(request, **kwargs))
