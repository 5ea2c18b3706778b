import copy

from infrastructure.config.types import EnvironmentConfig

from .dev import dev_config
from .staging import staging_config
from .prod import prod_config

_CONFIGS = {
    "dev": dev_config,
    "staging": staging_config,
    "prod": prod_config,
}


def get_environment_config(environment: str) -> EnvironmentConfig:
    """Get a copy of the configuration for the specified environment."""
    if environment not in _CONFIGS:
        raise ValueError(f"Unknown environment: {environment}")

    return copy.deepcopy(_CONFIGS[environment])  # type: ignore[return-value]
