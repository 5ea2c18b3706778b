"""Drive the real `services_stable` waiter model through botocore's Stubber.

These tests exercise the waiter acceptors shipped with botocore, so a change in
the ECS waiter definition shows up here rather than in production.
"""

import boto3
import pytest
from botocore.stub import Stubber

from shared.ecs import DeploymentStatus, FailureReason, wait_for_service
from tests.fixtures.ecs_fixtures import CLUSTER_NAME, deployment, describe_response, service, rolled_back

EXPECTED_PARAMS = {"cluster": CLUSTER_NAME, "services": ["web"]}


def _settling() -> dict:
    """Two deployments still present: the waiter keeps retrying."""
    return describe_response(
        service(
            "web",
            [
                deployment(rollout_state="IN_PROGRESS", reason="ECS deployment ecs-svc/2 in progress."),
                deployment(status="ACTIVE", deployment_id="ecs-svc/0000000000000000000"),
            ],
        )
    )


def _settled() -> dict:
    return describe_response(service("web"))


@pytest.fixture
def ecs_client():
    client = boto3.client("ecs", region_name="us-east-1")
    with Stubber(client) as stubber:
        yield client, stubber


@pytest.mark.asyncio
async def test_real_waiter_model_completes(ecs_client, make_wait_request, fast_settings) -> None:
    """
    Given: 한 번은 배포가 두 개, 다음엔 하나로 안정화되는 DescribeServices 응답
    When: botocore waiter 모델로 대기하면
    Then: 두 번 폴링 후 최종 조회로 COMPLETED 판정해야 함
    """
    client, stubber = ecs_client
    stubber.add_response("describe_services", _settling(), EXPECTED_PARAMS)
    stubber.add_response("describe_services", _settled(), EXPECTED_PARAMS)
    stubber.add_response("describe_services", _settled(), EXPECTED_PARAMS)

    outcome = await wait_for_service(make_wait_request(), settings=fast_settings, client_factory=lambda **_: client)

    assert outcome.status is DeploymentStatus.COMPLETED
    stubber.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_real_waiter_model_detects_rollback(ecs_client, make_wait_request, fast_settings) -> None:
    """
    Given: 이전 리비전으로 안정화된 서비스
    When: botocore waiter 모델로 대기하면
    Then: ROLLOUT_FAILED로 판정해야 함
    """
    client, stubber = ecs_client
    stubber.add_response("describe_services", rolled_back(), EXPECTED_PARAMS)
    stubber.add_response("describe_services", rolled_back(), EXPECTED_PARAMS)

    outcome = await wait_for_service(make_wait_request(), settings=fast_settings, client_factory=lambda **_: client)

    assert outcome.failure_reason is FailureReason.ROLLOUT_FAILED


@pytest.mark.asyncio
async def test_real_waiter_model_access_denied(ecs_client, make_wait_request, fast_settings) -> None:
    """
    Given: AccessDeniedException을 반환하는 DescribeServices
    When: botocore waiter 모델로 대기하면
    Then: API_ERROR로 판정해야 함
    """
    client, stubber = ecs_client
    stubber.add_client_error(
        "describe_services",
        service_error_code="AccessDeniedException",
        service_message="User is not authorized to perform ecs:DescribeServices",
        http_status_code=400,
        expected_params=EXPECTED_PARAMS,
    )

    outcome = await wait_for_service(make_wait_request(), settings=fast_settings, client_factory=lambda **_: client)

    assert outcome.failure_reason is FailureReason.API_ERROR
    assert "AccessDeniedException" in outcome.failure_message


@pytest.mark.asyncio
async def test_real_waiter_model_missing_service(ecs_client, make_wait_request, fast_settings) -> None:
    """
    Given: 서비스가 MISSING으로 보고되는 DescribeServices
    When: botocore waiter 모델로 대기하면
    Then: 종료 상태로 인식해 API_ERROR로 판정해야 함
    """
    client, stubber = ecs_client
    stubber.add_response(
        "describe_services",
        {"services": [], "failures": [{"arn": "arn:aws:ecs:us-east-1:123456789012:service/web", "reason": "MISSING"}]},
        EXPECTED_PARAMS,
    )

    outcome = await wait_for_service(make_wait_request(), settings=fast_settings, client_factory=lambda **_: client)

    assert outcome.failure_reason is FailureReason.API_ERROR
    assert "MISSING" in outcome.failure_message
