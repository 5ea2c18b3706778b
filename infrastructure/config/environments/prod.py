"""Production environment configuration."""

import os

prod_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 512,
    "log_retention_days": 90,
    "enable_xray_tracing": True,
    "log_level": "INFO",
    # Rollouts with circuit breaker rollback can take a while in prod
    "ecs_waiter_timeout_ms": 600000,
    "ecs_waiter_poll_interval_seconds": 10,
    "ecs_deploy_waits": [],
    "tags": {
        "Environment": "prod",
        "Project": "EcsDeployWaiter",
        "Owner": "PlatformTeam",
        "CostCenter": "Engineering",
    },
}
