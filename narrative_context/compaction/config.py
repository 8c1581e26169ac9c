"""
Context Compaction Configuration

Every tunable of the pipeline, passed explicitly into each stage. Nothing here is
process-wide state: build an EngineConfig (or load one through
narrative_context.config) and hand it to ContextEngine.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import CompressionTier
from .tiers import default_tiers

DEFAULT_QUOTE_PAIRS: list[tuple[str, str]] = [
    ('"', '"'),
    ("“", "”"),
    ("「", "」"),
    ("『", "』"),
]

DEFAULT_INTERIORITY_MARKERS: list[str] = [
    "thought",
    "thinks",
    "wondered",
    "wonders",
    "wondering",
    "realized",
    "remembered",
    "recalled",
    "wished",
    "hoped",
    "felt",
    "knew",
    "imagined",
    "to herself",
    "to himself",
    "to themselves",
    "想到",
    "心中",
    "心想",
]

DEFAULT_ACTION_MARKERS: list[str] = [
    "ran",
    "runs",
    "rushed",
    "grabbed",
    "seized",
    "jumped",
    "leapt",
    "lunged",
    "struck",
    "hit",
    "kicked",
    "pushed",
    "pulled",
    "drew",
    "swung",
    "threw",
    "charged",
    "fled",
    "dashed",
    "slammed",
    "walked toward",
    "picked up",
    "走向",
    "拿起",
]


class SegmenterConfig(BaseModel):
    """Paragraph splitting and kind classification."""

    paragraph_delimiter: str = Field(default=r"\r?\n[ \t]*\r?\n", description="Regex separating segments")
    joiner: str = Field(default="\n\n", description="Separator used when reassembling segments")
    quote_pairs: list[tuple[str, str]] = Field(
        default_factory=lambda: list(DEFAULT_QUOTE_PAIRS), description="Dialogue quotation pairs"
    )
    interiority_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INTERIORITY_MARKERS), description="Internal thought markers"
    )
    action_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACTION_MARKERS), description="Strong motion/verb markers"
    )
    max_tags: int = Field(default=8, ge=1, le=64, description="Semantic tags extracted per segment")

    model_config = ConfigDict(frozen=False)


class ScoringWeights(BaseModel):
    """Weights of the importance sub-scores. Defaults sum to 1.0."""

    character_mention: float = Field(default=0.25, ge=0.0)
    dialogue: float = Field(default=0.15, ge=0.0)
    plot_advancement: float = Field(default=0.2, ge=0.0)
    foreshadowing: float = Field(default=0.15, ge=0.0)
    character_development: float = Field(default=0.15, ge=0.0)
    emotional_beat: float = Field(default=0.1, ge=0.0)

    model_config = ConfigDict(frozen=False)

    def total(self) -> float:
        return sum(self.as_dict().values())

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()


class ScorerConfig(BaseModel):
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    max_workers: int = Field(default=1, ge=1, le=64, description="Threads used to score segments")

    model_config = ConfigDict(frozen=False)


class RedundancyConfig(BaseModel):
    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0, description="Tag-set similarity tau")
    resistance_ceiling: float = Field(
        default=0.8, ge=0.0, le=1.0, description="Segments above this resistance are never elided"
    )

    model_config = ConfigDict(frozen=False)


class AttentionConfig(BaseModel):
    temporal_decay: float = Field(default=0.1, ge=0.0, description="Decay rate per position of distance")
    importance_boost: float = Field(default=1.5, ge=1.0, description="Multiplier for critical segments")
    importance_boost_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=False)


class CompactionConfig(BaseModel):
    tiers: list[CompressionTier] = Field(default_factory=default_tiers, description="Ordered tier ladder")
    high_importance_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Fraction of the top importance counted as high for coverage"
    )
    allow_overrun_on_infeasible: bool = Field(
        default=True, description="Emit the top segment even when nothing fits an infeasible budget"
    )

    model_config = ConfigDict(frozen=False)

    @field_validator("tiers")
    @classmethod
    def validate_tiers(cls, v: list[CompressionTier]) -> list[CompressionTier]:
        """Tiers must form a ladder: unique levels, level 0 present, monotone ratios and losses."""
        if not v:
            raise ValueError("at least one compression tier is required")
        ordered = sorted(v, key=lambda t: t.level)
        levels = [t.level for t in ordered]
        if len(set(levels)) != len(levels):
            raise ValueError(f"tier levels must be unique, got {levels}")
        if levels[0] != 0:
            raise ValueError("a level 0 tier is required")
        for prev, cur in zip(ordered, ordered[1:], strict=False):
            if cur.target_ratio > prev.target_ratio:
                raise ValueError(f"tier {cur.level} target_ratio must not exceed tier {prev.level}")
            if cur.quality_loss < prev.quality_loss:
                raise ValueError(f"tier {cur.level} quality_loss must not be below tier {prev.level}")
        return ordered


class EngineConfig(BaseModel):
    """Root configuration of the context budgeting engine."""

    segmenter: SegmenterConfig = Field(default_factory=SegmenterConfig)
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)
    redundancy: RedundancyConfig = Field(default_factory=RedundancyConfig)
    attention: AttentionConfig = Field(default_factory=AttentionConfig)
    compaction: CompactionConfig = Field(default_factory=CompactionConfig)

    model_config = ConfigDict(frozen=False)
