"""Post-processor configuration loading and validation."""

from trace_post.configs.loader import (
    ConfigError,
    FilesConfig,
    LoggingConfig,
    NumberingConfig,
    PostConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "FilesConfig",
    "LoggingConfig",
    "NumberingConfig",
    "PostConfig",
    "load_config",
]
