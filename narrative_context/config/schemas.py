"""
Narrative Context - Configuration Schemas

Typed configuration models for the runtime around the engine: environment, logging,
size estimation and the optional result memo. The engine's own tunables live in
compaction.config.EngineConfig and are nested here under ``engine``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..cache import ContextMemo
from ..compaction.config import EngineConfig
from ..sizing import SizeEstimator, get_estimator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EstimatorKind(str, Enum):
    """Built-in size estimators."""

    HEURISTIC = "heuristic"
    TIKTOKEN = "tiktoken"
    WORDS = "words"


class CacheConfig(BaseModel):
    """Result memo configuration."""

    enabled: bool = Field(default=False, description="Memoize results by content hash")
    ttl_seconds: int = Field(default=0, ge=0, description="Default TTL in seconds (0 = no expiry)")
    max_size: int = Field(default=100, ge=1, description="Max memo entries (LRU eviction)")
    namespace: str = Field(default="narrative", description="Memo key namespace/prefix")


class ObservabilityConfig(BaseModel):
    """Logging output configuration."""

    json_logs: bool = Field(default=True, description="Emit logs as JSON lines")


class NarrativeContextConfig(BaseModel):
    """Root configuration for Narrative Context."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    estimator: EstimatorKind = Field(default=EstimatorKind.HEURISTIC, description="Size estimator")
    tiktoken_encoding: str = Field(default="cl100k_base", description="Encoding for the tiktoken estimator")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    def build_estimator(self) -> SizeEstimator:
        kwargs: dict[str, Any] = {}
        if self.estimator == EstimatorKind.TIKTOKEN.value:
            kwargs["encoding_name"] = self.tiktoken_encoding
        return get_estimator(str(self.estimator), **kwargs)

    def build_cache(self) -> ContextMemo | None:
        if not self.cache.enabled:
            return None
        return ContextMemo(
            max_size=self.cache.max_size,
            default_ttl=self.cache.ttl_seconds,
            namespace=self.cache.namespace,
        )
