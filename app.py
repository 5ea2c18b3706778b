#!/usr/bin/env python3
"""
ECS Deploy Waiter CDK App
Gates stack deployments on ECS service rollouts completing successfully.
"""

import aws_cdk as cdk

from infrastructure.stacks.deployment_verification_stack import (
    DeploymentVerificationStack,
    resolve_deploy_waits,
)

# Configuration
from infrastructure.config.environments import get_environment_config

app = cdk.App()

# Get environment configuration
environment = app.node.try_get_context("environment") or "dev"
config = get_environment_config(environment)

# CDK environment (account/region)
cdk_env = cdk.Environment(account=config.get("account_id"), region=config.get("region", "ap-northeast-2"))

stack_prefix = f"EcsDeployWaiter-{environment}"

# Services to verify: configured per environment, overridable with -c ecs_deploy_waits='[...]'
deploy_waits = resolve_deploy_waits(config, app.node.try_get_context("ecs_deploy_waits"))

verification_stack = DeploymentVerificationStack(
    app,
    f"{stack_prefix}-DeploymentVerification",
    environment=environment,
    config=config,
    deploy_waits=deploy_waits,
    env=cdk_env,
)

# ========================================
# TAGGING STRATEGY
# ========================================

cdk.Tags.of(app).add("Environment", environment)
cdk.Tags.of(app).add("ManagedBy", "CDK")
for key, value in (config.get("tags") or {}).items():
    cdk.Tags.of(verification_stack).add(key, value)

app.synth()
