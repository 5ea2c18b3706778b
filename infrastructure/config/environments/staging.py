"""Staging environment configuration."""

import os

staging_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 256,
    "log_retention_days": 30,
    "enable_xray_tracing": True,
    "log_level": "INFO",
    "ecs_waiter_timeout_ms": 300000,
    "ecs_waiter_poll_interval_seconds": 6,
    "ecs_deploy_waits": [],
    "tags": {
        "Environment": "staging",
        "Project": "EcsDeployWaiter",
        "Owner": "PlatformTeam",
        "CostCenter": "Engineering",
    },
}
