"""
Narrative Context - Tool Input Validation Schemas

Pydantic models for validating all MCP tool inputs.

- Strict type validation
- Field constraints (lengths, value ranges)
- Budget sign is left to the engine so a non-positive budget surfaces as
  INVALID_BUDGET rather than a generic validation failure
"""

from pydantic import BaseModel, Field, field_validator


class OptimizeContextInput(BaseModel):
    """Input validation for optimize_context tool."""

    content: str = Field(
        ...,
        max_length=5_000_000,
        description="Assembled narrative text to compact (may be empty)",
    )
    budget: int = Field(
        ...,
        description="Maximum size of the result in size units (must be positive)",
    )
    focus_characters: list[str] = Field(
        default_factory=list,
        max_length=100,
        description="Character names whose passages should be favored",
    )
    cursor_position: int | None = Field(
        default=None,
        ge=0,
        description="Active writing position; None means the end of the text",
    )
    cursor_unit: str = Field(
        default="segment",
        pattern="^(segment|char)$",
        description="Unit of cursor_position: segment ordinal or character offset",
    )
    force_tier: int | None = Field(
        default=None,
        ge=0,
        description="Pin a compression tier level instead of selecting one",
    )
    estimator: str | None = Field(
        default=None,
        description="Size estimator override ('heuristic', 'tiktoken', 'words')",
    )

    @field_validator("focus_characters")
    @classmethod
    def strip_focus_characters(cls, v: list[str]) -> list[str]:
        """Drop blank names and surrounding whitespace."""
        return [name.strip() for name in v if name and name.strip()]


class EstimateSizeInput(BaseModel):
    """Input validation for estimate_size tool."""

    content: str = Field(
        ...,
        max_length=5_000_000,
        description="Text to measure",
    )
    estimator: str | None = Field(
        default=None,
        description="Size estimator override ('heuristic', 'tiktoken', 'words')",
    )


class GetOptimizationSettingsInput(BaseModel):
    """Input validation for get_optimization_settings tool (no parameters)."""

    pass
