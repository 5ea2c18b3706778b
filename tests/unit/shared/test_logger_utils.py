import json
import logging

from shared.utils.logger import _JsonFormatter, extract_correlation_id, get_logger


def test_extract_correlation_id_from_headers() -> None:
    """
    Given: x-correlation-id 헤더가 포함된 이벤트
    When: 상관관계 ID 추출
    Then: 헤더 값 반환
    """
    event = {"headers": {"x-correlation-id": "cid-123"}}
    assert extract_correlation_id(event) == "cid-123"


def test_extract_correlation_id_from_fields() -> None:
    """
    Given: 서로 다른 필드명에 상관관계 ID가 존재
    When: 상관관계 ID 추출
    Then: 각 필드 값 반환
    """
    assert extract_correlation_id({"correlation_id": "cid-1"}) == "cid-1"
    assert extract_correlation_id({"CorrelationId": "cid-2"}) == "cid-2"
    assert extract_correlation_id({"request_id": "cid-3"}) == "cid-3"


def test_extract_correlation_id_from_custom_resource_event() -> None:
    """
    Given: CloudFormation 커스텀 리소스 이벤트
    When: 상관관계 ID 추출
    Then: RequestId 값 반환, 그 외 입력은 None
    """
    assert extract_correlation_id({"RequestType": "Create", "RequestId": "req-9"}) == "req-9"
    assert extract_correlation_id(None) is None
    assert extract_correlation_id({"RequestType": "Create"}) is None


def test_get_logger_adapter_has_extras() -> None:
    """
    Given: 상관관계 ID가 설정된 로거
    When: extra 포함 로그 기록
    Then: 예외 없이 처리
    """
    log = get_logger(__name__, correlation_id="abc")
    # Ensure the adapter processes extra without raising
    log.info("hello", extra={"foo": "bar"})


def test_get_logger_level_from_environment(monkeypatch) -> None:
    """
    Given: LOG_LEVEL=DEBUG 환경 변수
    When: 로거를 생성하면
    Then: DEBUG 레벨이 적용되고 명시 인자가 우선해야 함
    """
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    assert get_logger("ecs.test.level").logger.level == logging.DEBUG
    assert get_logger("ecs.test.level", level="WARNING").logger.level == logging.WARNING


def test_json_formatter_merges_extras(monkeypatch) -> None:
    """
    Given: extra 필드와 예외 정보가 담긴 로그 레코드
    When: JSON으로 포맷하면
    Then: 기본 필드와 extra, 환경, 예외가 한 객체에 포함되어야 함
    """
    monkeypatch.setenv("ENVIRONMENT", "dev")
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys

        record = logging.LogRecord("ecs", logging.ERROR, __file__, 1, "verdict %s", ("FAILED",), sys.exc_info())
    record.service = "web"

    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["message"] == "verdict FAILED"
    assert payload["service"] == "web"
    assert payload["environment"] == "dev"
    assert "RuntimeError: boom" in payload["exception"]
