"""
Drawing Animator Configuration Settings

Every tunable of the timing engine lives here: margins, per-group and
per-element budgets, the stroke/fill split, the narration pause and the
speed-factor clamp used when re-timing against voiceover.

Values are validated on construction so that a bad override fails before
any allocation happens.
"""

import json
import logging
import os
from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


logger = logging.getLogger(__name__)


class GroupBudgetStrategy(str, Enum):
    """How a group's time budget is split across its members"""
    EVEN = "even"              # Equal share per member (default)
    COMPLEXITY = "complexity"  # Weighted by geometric complexity


class AnimationConfig(BaseModel):
    """Global configuration of the timing engine"""

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    # Allocation
    group_duration_ms: int = Field(default=5000, ge=0, description="Total budget of one animation group")
    individual_duration_ms: int = Field(default=500, ge=0, description="Slot of an ungrouped element")
    leading_margin_ms: int = Field(default=1000, ge=0, description="Idle time before the first element")
    trailing_margin_ms: int = Field(default=1000, ge=0, description="Idle time after the last element")
    min_total_duration_ms: int = Field(default=3000, ge=0, description="Duration of an empty drawing")
    group_budget_strategy: GroupBudgetStrategy = Field(default=GroupBudgetStrategy.EVEN, strict=False)

    # Descriptors
    stroke_fill_ratio: float = Field(default=0.75, gt=0.0, le=1.0, description="Stroke share of a polygon slot")

    # Narration
    narration_pause_ms: int = Field(default=500, ge=0, description="Pause between narration segments")
    speed_factor_bounds: Tuple[float, float] = Field(default=(0.5, 2.0))
    frame_rate: int = Field(default=30, gt=0, description="Frames per second for segment frame indices")

    # Narration script
    words_per_minute: int = Field(default=150, gt=0)
    max_run_length: int = Field(default=3, gt=0, description="Max members of an implicit narrative run")
    default_voice: str = Field(default="af_heart")
    emphasis_voice: str = Field(default="am_adam")
    creative_voice: str = Field(default="af_dream")

    @model_validator(mode="after")
    def _check_speed_bounds(self) -> "AnimationConfig":
        low, high = self.speed_factor_bounds
        if low <= 0:
            raise ValueError(f"speed_factor_bounds lower bound must be positive, got {low}")
        if low > high:
            raise ValueError(f"speed_factor_bounds must be ordered (low <= high), got ({low}, {high})")
        return self

    @classmethod
    def from_env(cls) -> "AnimationConfig":
        """Load configuration overrides from ANIMATOR_* environment variables"""
        overrides: Dict[str, Any] = {}
        int_fields = {
            "ANIMATOR_GROUP_DURATION_MS": "group_duration_ms",
            "ANIMATOR_INDIVIDUAL_DURATION_MS": "individual_duration_ms",
            "ANIMATOR_LEADING_MARGIN_MS": "leading_margin_ms",
            "ANIMATOR_TRAILING_MARGIN_MS": "trailing_margin_ms",
            "ANIMATOR_MIN_TOTAL_DURATION_MS": "min_total_duration_ms",
            "ANIMATOR_NARRATION_PAUSE_MS": "narration_pause_ms",
            "ANIMATOR_FRAME_RATE": "frame_rate",
        }
        for env_name, field_name in int_fields.items():
            raw = os.getenv(env_name)
            if raw is not None:
                overrides[field_name] = _parse_number(env_name, raw, int)

        raw_ratio = os.getenv("ANIMATOR_STROKE_FILL_RATIO")
        if raw_ratio is not None:
            overrides["stroke_fill_ratio"] = _parse_number("ANIMATOR_STROKE_FILL_RATIO", raw_ratio, float)

        raw_bounds = os.getenv("ANIMATOR_SPEED_FACTOR_BOUNDS")
        if raw_bounds is not None:
            parts = [p.strip() for p in raw_bounds.split(",")]
            if len(parts) != 2:
                raise ValueError(f"ANIMATOR_SPEED_FACTOR_BOUNDS must be 'low,high', got {raw_bounds!r}")
            overrides["speed_factor_bounds"] = tuple(
                _parse_number("ANIMATOR_SPEED_FACTOR_BOUNDS", p, float) for p in parts
            )

        raw_strategy = os.getenv("ANIMATOR_GROUP_BUDGET_STRATEGY")
        if raw_strategy is not None:
            overrides["group_budget_strategy"] = GroupBudgetStrategy(raw_strategy)

        return cls(**overrides)

    @classmethod
    def from_json(cls, path: str) -> "AnimationConfig":
        """Load configuration from a JSON file"""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if "speed_factor_bounds" in data:
            data["speed_factor_bounds"] = tuple(data["speed_factor_bounds"])
        if "group_budget_strategy" in data:
            data["group_budget_strategy"] = GroupBudgetStrategy(data["group_budget_strategy"])
        return cls(**data)


def _parse_number(name: str, raw: str, cast):
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be numeric, got {raw!r}") from None


class ConfigPresets:
    """Preset configurations for common drawing styles"""

    @staticmethod
    def default() -> AnimationConfig:
        return AnimationConfig()

    @staticmethod
    def fast_sketch() -> AnimationConfig:
        """Quick reveal for dense diagrams"""
        return AnimationConfig(
            group_duration_ms=3000,
            individual_duration_ms=300,
            leading_margin_ms=500,
            trailing_margin_ms=500,
            narration_pause_ms=300,
        )

    @staticmethod
    def slow_lecture() -> AnimationConfig:
        """Unhurried pacing for narrated walkthroughs"""
        return AnimationConfig(
            group_duration_ms=8000,
            individual_duration_ms=900,
            leading_margin_ms=1500,
            trailing_margin_ms=2000,
            narration_pause_ms=800,
            words_per_minute=130,
        )


PRESETS = {
    "default": ConfigPresets.default,
    "fast_sketch": ConfigPresets.fast_sketch,
    "slow_lecture": ConfigPresets.slow_lecture,
}


def get_preset(name: str) -> AnimationConfig:
    """Return a preset configuration (default when unknown)"""
    factory = PRESETS.get(name)
    if factory is None:
        logger.warning(f"Unknown preset '{name}', using default (available: {', '.join(PRESETS)})")
        factory = ConfigPresets.default
    return factory()
