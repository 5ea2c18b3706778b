import os
import sys
from pathlib import Path
from typing import Any, Callable, Iterator
import pytest


pytest_plugins = [
    "tests.fixtures.ecs_fixtures",
]

# Ensure 'shared' layer is importable at collection time (module import stage)
_repo_root = Path(__file__).resolve().parents[1]
# Ensure project root and 'src' are on sys.path for flexible imports
_repo_root_str = str(_repo_root)
_src_path_str = str(_repo_root / "src")
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)
if _src_path_str not in sys.path:
    sys.path.insert(0, _src_path_str)
_shared_path = _repo_root / "src" / "lambda" / "layers" / "common" / "python"
_shared_str = str(_shared_path)
if _shared_str not in sys.path:
    sys.path.insert(0, _shared_str)


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure default AWS region is set for moto/boto3 clients and clear cross-test env leaks.

    Also removes waiter tuning envs so each test starts from the defaults.
    """
    monkeypatch.setenv("AWS_REGION", os.environ.get("AWS_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_DEFAULT_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1"))
    # Provide dummy credentials so botocore signing doesn't fail under moto
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", os.environ.get("AWS_ACCESS_KEY_ID", "testing"))
    monkeypatch.setenv(
        "AWS_SECRET_ACCESS_KEY",
        os.environ.get("AWS_SECRET_ACCESS_KEY", "testing"),
    )
    monkeypatch.setenv("AWS_SESSION_TOKEN", os.environ.get("AWS_SESSION_TOKEN", "testing"))

    monkeypatch.delenv("ECS_WAITER_POLL_INTERVAL_SECONDS", raising=False)
    monkeypatch.delenv("ECS_WAITER_DEFAULT_TIMEOUT_MS", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    yield


@pytest.fixture
def waiter_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Apply waiter runtime environment variables."""

    def _apply(
        *,
        environment: str = "test",
        poll_interval_seconds: float = 0.01,
        default_timeout_ms: int | None = None,
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", environment)
        monkeypatch.setenv("ECS_WAITER_POLL_INTERVAL_SECONDS", str(poll_interval_seconds))
        if default_timeout_ms is not None:
            monkeypatch.setenv("ECS_WAITER_DEFAULT_TIMEOUT_MS", str(default_timeout_ms))

    return _apply


@pytest.fixture
def fake_python_function(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[Any], None]:
    from aws_cdk import Duration

    def _apply(target_module: Any) -> None:
        from aws_cdk import aws_lambda as lambda_

        def _fake(scope, id, **kwargs):
            return lambda_.Function(
                scope,
                id,
                runtime=lambda_.Runtime.PYTHON_3_12,
                handler="index.handler",
                code=lambda_.Code.from_inline("def handler(event, context): return {}"),
                memory_size=kwargs.get("memory_size", 128),
                timeout=kwargs.get("timeout", Duration.seconds(10)),
                log_retention=kwargs.get("log_retention"),
                role=kwargs.get("role"),
                layers=kwargs.get("layers", []),
                environment=kwargs.get("environment", {}),
            )

        monkeypatch.setattr(target_module, "PythonFunction", _fake, raising=False)

    return _apply


@pytest.fixture
def fake_python_layer(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[Any], None]:
    """Replace PythonLayerVersion with a plain asset layer to skip Docker bundling."""

    def _apply(target_module: Any) -> None:
        from aws_cdk import aws_lambda as lambda_

        def _fake(scope, id, **kwargs):
            return lambda_.LayerVersion(
                scope,
                id,
                code=lambda_.Code.from_asset(kwargs.get("entry", "src/lambda/layers/common")),
                compatible_runtimes=kwargs.get("compatible_runtimes"),
                layer_version_name=kwargs.get("layer_version_name"),
                description=kwargs.get("description"),
            )

        monkeypatch.setattr(target_module, "PythonLayerVersion", _fake, raising=False)

    return _apply


@pytest.fixture
def load_module() -> Callable[[str], dict[str, Any]]:
    import runpy

    def _apply(path: str) -> dict[str, Any]:
        return runpy.run_path(path)

    return _apply


def pytest_configure(config):
    """Configure pytest with essential markers."""
    # Essential markers only
    config.addinivalue_line("markers", "unit: unit test")
    config.addinivalue_line("markers", "integration: integration test")
    config.addinivalue_line("markers", "slow: slow running test")
    config.addinivalue_line("markers", "infrastructure: CDK synthesis test")
    config.addinivalue_line("markers", "lambda_test: Lambda handler test")


def pytest_addoption(parser):
    """Add essential command line options."""
    parser.addoption("--runslow", action="store_true", default=False, help="run slow tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file location."""
    rootdir = Path(config.rootdir)

    for item in items:
        rel_path = Path(item.fspath).relative_to(rootdir)

        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        if "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
        if "lambda" in rel_path.parts:
            item.add_marker(pytest.mark.lambda_test)
        if "infrastructure" in rel_path.parts:
            item.add_marker(pytest.mark.infrastructure)


def pytest_runtest_setup(item):
    """Setup individual test runs with filtering."""
    # Skip slow tests unless --runslow is given
    if "slow" in item.keywords and not item.config.getoption("--runslow"):
        pytest.skip("need --runslow option to run")
