"""
Narrative Context - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Every variable is prefixed with NARRATIVE_CONTEXT_. Engine tunables are only
overridden when their variable is set; otherwise the EngineConfig defaults apply.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import NarrativeContextConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "NARRATIVE_CONTEXT_"

_config_instance: NarrativeContextConfig | None = None


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _set_if(target: dict[str, Any], key: str, name: str, cast: Any) -> None:
    value = _env(name)
    if value is not None and value.strip() != "":
        target[key] = cast(value)


def _engine_overrides() -> dict[str, Any]:
    segmenter: dict[str, Any] = {}
    _set_if(segmenter, "max_tags", "MAX_TAGS", int)

    scorer: dict[str, Any] = {}
    _set_if(scorer, "max_workers", "SCORER_WORKERS", int)

    redundancy: dict[str, Any] = {}
    _set_if(redundancy, "similarity_threshold", "SIMILARITY_THRESHOLD", float)
    _set_if(redundancy, "resistance_ceiling", "RESISTANCE_CEILING", float)

    attention: dict[str, Any] = {}
    _set_if(attention, "temporal_decay", "TEMPORAL_DECAY", float)
    _set_if(attention, "importance_boost", "IMPORTANCE_BOOST", float)
    _set_if(attention, "importance_boost_threshold", "IMPORTANCE_BOOST_THRESHOLD", float)

    compaction: dict[str, Any] = {}
    _set_if(compaction, "high_importance_threshold", "HIGH_IMPORTANCE_THRESHOLD", float)
    if _env("ALLOW_OVERRUN") is not None:
        compaction["allow_overrun_on_infeasible"] = _env_bool("ALLOW_OVERRUN", True)

    sections = {
        "segmenter": segmenter,
        "scorer": scorer,
        "redundancy": redundancy,
        "attention": attention,
        "compaction": compaction,
    }
    return {name: values for name, values in sections.items() if values}


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> NarrativeContextConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated NarrativeContextConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    try:
        config_dict: dict[str, Any] = {
            "environment": _env("ENVIRONMENT", "development"),
            "log_level": (_env("LOG_LEVEL", "INFO") or "INFO").upper(),
            "estimator": (_env("ESTIMATOR", "heuristic") or "heuristic").lower(),
            "tiktoken_encoding": _env("TIKTOKEN_ENCODING", "cl100k_base"),
            "cache": {
                "enabled": _env_bool("CACHE_ENABLED", False),
                "ttl_seconds": int(_env("CACHE_TTL_SECONDS", "0") or "0"),
                "max_size": int(_env("CACHE_MAX_SIZE", "100") or "100"),
                "namespace": _env("CACHE_NAMESPACE", "narrative"),
            },
            "observability": {
                "json_logs": _env_bool("JSON_LOGS", True),
            },
            "engine": _engine_overrides(),
        }
    except ValueError as e:
        logger.error(f"Invalid numeric configuration value: {e}", extra={"error": str(e)})
        raise ConfigurationError(
            f"Invalid numeric configuration value: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = NarrativeContextConfig(**config_dict)
        logger.info(
            f"Configuration loaded successfully (environment: {_config_instance.environment})",
            extra={"environment": _config_instance.environment, "estimator": _config_instance.estimator},
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors(include_url=False)},
        ) from e


def get_config() -> NarrativeContextConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current NarrativeContextConfig instance
    """
    if _config_instance is None:
        return load_config()
    return _config_instance


def reload_config(env_file: str | None = None) -> NarrativeContextConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded NarrativeContextConfig instance
    """
    return load_config(env_file=env_file, reload=True)
