"""Configuration loader for the trace post-processor.

Loads and validates ``post.yaml`` into typed, frozen dataclasses.  Every
section is optional; omitted sections and keys fall back to the
dataclass defaults, which match the shipped ``post.yaml``.

Usage::

    from trace_post.configs.loader import load_config
    cfg = load_config()                    # default path
    cfg = load_config("/custom/post.yaml") # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trace_post.utils.fs import load_yaml

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberingConfig:
    """N-word line numbering.

    Parameters
    ----------
    enabled : bool
        Prefix every flushed line with ``N<number>``.
    start : int
        Number of the first line of each file.
    increment : int
        Step between consecutive line numbers.
    """

    enabled: bool = True
    start: int = 10
    increment: int = 10


@dataclass(frozen=True)
class FilesConfig:
    """Output file naming and subprogram framing."""

    main_name: str = "main"
    subprogram_end_word: str = "M17"
    main_extension: str = ".MPF"
    subprogram_extension: str = ".SPF"


@dataclass(frozen=True)
class LoggingConfig:
    """Defaults for command-line logging setup."""

    level: str = "INFO"
    json: bool = False


@dataclass(frozen=True)
class PostConfig:
    """Complete post-processor configuration loaded from ``post.yaml``."""

    numbering: NumberingConfig = field(default_factory=NumberingConfig)
    files: FilesConfig = field(default_factory=FilesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def extension_for(self, file_name: str) -> str:
        """Output extension for a generated file name."""
        if file_name == self.files.main_name:
            return self.files.main_extension
        return self.files.subprogram_extension


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    raw = data.get(name)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Section '{name}' must be a mapping, got {type(raw).__name__}"
        )
    return raw


def _parse_numbering(data: dict[str, Any]) -> NumberingConfig:
    default = NumberingConfig()
    return NumberingConfig(
        enabled=bool(data.get("enabled", default.enabled)),
        start=int(data.get("start", default.start)),
        increment=int(data.get("increment", default.increment)),
    )


def _parse_files(data: dict[str, Any]) -> FilesConfig:
    default = FilesConfig()
    end_word = data.get("subprogram_end_word", default.subprogram_end_word)
    return FilesConfig(
        main_name=str(data.get("main_name", default.main_name)),
        subprogram_end_word="" if end_word is None else str(end_word),
        main_extension=str(data.get("main_extension", default.main_extension)),
        subprogram_extension=str(
            data.get("subprogram_extension", default.subprogram_extension)
        ),
    )


def _parse_logging(data: dict[str, Any]) -> LoggingConfig:
    default = LoggingConfig()
    return LoggingConfig(
        level=str(data.get("level", default.level)).upper(),
        json=bool(data.get("json", default.json)),
    )


def _validate_config(cfg: PostConfig) -> None:
    """Check cross-field invariants.

    Raises
    ------
    ConfigError
        On the first violated constraint.
    """
    n = cfg.numbering
    if n.start < 0:
        raise ConfigError(f"numbering.start must be >= 0, got {n.start}")
    if n.increment <= 0:
        raise ConfigError(
            f"numbering.increment must be > 0, got {n.increment}"
        )

    if not cfg.files.main_name.strip():
        raise ConfigError("files.main_name must not be empty")

    if cfg.logging.level not in LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {LOG_LEVELS}, "
            f"got {cfg.logging.level!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_dict(data: dict[str, Any]) -> PostConfig:
    """Build and validate a :class:`PostConfig` from a parsed mapping.

    Raises
    ------
    ConfigError
        If a value has the wrong type or fails validation.
    """
    try:
        config = PostConfig(
            numbering=_parse_numbering(_section(data, "numbering")),
            files=_parse_files(_section(data, "files")),
            logging=_parse_logging(_section(data, "logging")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc

    _validate_config(config)
    return config


def load_config(path: str | Path | None = None) -> PostConfig:
    """Load and validate post-processor configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``post.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    PostConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "post.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration root must be a mapping: {path}"
        )

    config = config_from_dict(data)
    logger.info("Configuration loaded successfully")
    return config
