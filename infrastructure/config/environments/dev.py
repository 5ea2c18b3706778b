"""Development environment configuration."""

import os

dev_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "lambda_memory": 256,
    "log_retention_days": 14,
    "enable_xray_tracing": True,
    "log_level": "DEBUG",
    # Waiter defaults (a single wait must fit in the 15 minute Lambda limit)
    "ecs_waiter_timeout_ms": 180000,
    "ecs_waiter_poll_interval_seconds": 6,
    # Services to gate on; desired_task_def usually comes from the app stack via context
    "ecs_deploy_waits": [],
    "tags": {
        "Environment": "dev",
        "Project": "EcsDeployWaiter",
        "Owner": "PlatformTeam",
        "CostCenter": "Engineering",
    },
}
