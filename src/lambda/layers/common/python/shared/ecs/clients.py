"""ECS client construction and the authoritative DescribeServices call."""

from __future__ import annotations

import asyncio
import functools
import uuid
from concurrent.futures import Executor
from typing import Any, Callable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.utils.logger import get_logger

from .errors import CredentialsError, EcsApiError
from .models import EcsService

logger = get_logger(__name__)

SESSION_NAME_PREFIX = "wait-for-ecs.ecs."


async def run_blocking(executor: Optional[Executor], func: Callable[..., Any], **kwargs: Any) -> Any:
    """Run a blocking botocore call on `executor` (the loop default when None)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, functools.partial(func, **kwargs))


def _session_name() -> str:
    # RoleSessionName allows at most 64 characters
    return f"{SESSION_NAME_PREFIX}{uuid.uuid4().hex}"


def build_ecs_client(region: Optional[str] = None, assume_role_arn: Optional[str] = None) -> Any:
    """Return a fresh ECS client, optionally using credentials from `assume_role_arn`.

    Without a role the client uses the ambient credential chain. With a role,
    STS temporary credentials are obtained first and scoped to this client only.
    """
    if not assume_role_arn:
        return boto3.client("ecs", region_name=region)

    sts = boto3.client("sts", region_name=region)
    try:
        response = sts.assume_role(RoleArn=assume_role_arn, RoleSessionName=_session_name())
    except (ClientError, BotoCoreError) as error:
        raise CredentialsError(f"Unable to assume role {assume_role_arn}: {error}") from error

    credentials = response["Credentials"]
    logger.info(
        "Assumed role for ECS client",
        extra={"role_arn": assume_role_arn, "expiration": str(credentials.get("Expiration"))},
    )
    return boto3.client(
        "ecs",
        region_name=region,
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
    )


async def describe_services(
    client: Any,
    cluster_id: str,
    service_id: str,
    *,
    executor: Optional[Executor] = None,
) -> List[EcsService]:
    """Fetch one DescribeServices snapshot for a single service."""
    try:
        response = await run_blocking(executor, client.describe_services, cluster=cluster_id, services=[service_id])
    except ClientError as error:
        code = error.response.get("Error", {}).get("Code")
        raise EcsApiError(f"DescribeServices failed: {error}", code=code) from error
    except BotoCoreError as error:
        raise EcsApiError(f"DescribeServices failed: {error}") from error

    for failure in response.get("failures") or []:
        logger.warning(
            "DescribeServices reported a failure",
            extra={"arn": failure.get("arn"), "reason": failure.get("reason")},
        )
    return EcsService.from_describe_response(response)
