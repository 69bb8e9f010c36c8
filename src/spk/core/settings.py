"""Practice playback settings.

Every knob is clamped on construction, on assignment and on decode, so a
value read back from disk or set from the CLI is always inside its range.
Undecodable fields fall back to their default instead of failing the record.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

REPEATS_RANGE = (1, 5)
SILENCE_MULTIPLIER_RANGE = (0.2, 15.0)
FONT_SCALE_RANGE = (1.0, 2.2)
OUTER_LOOPS_RANGE = (1, 50)


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return min(max(value, low), high)


def _clamped(low, high):
    return AfterValidator(lambda v: clamp(v, low, high))


Repeats = Annotated[int, _clamped(*REPEATS_RANGE)]
SilenceMultiplier = Annotated[float, _clamped(*SILENCE_MULTIPLIER_RANGE)]
FontScale = Annotated[float, _clamped(*FONT_SCALE_RANGE)]
OuterLoops = Annotated[int, _clamped(*OUTER_LOOPS_RANGE)]


class LenientModel(BaseModel):
    """Base model whose fields revert to their default when they fail to validate."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_error(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class PlaybackSettings(LenientModel):
    repeat_practice_enabled: bool = False
    practice_repeats: Repeats = 2
    practice_silence_multiplier: SilenceMultiplier = 1.0
    sentences_pause_only: bool = False  # whole sentences, ignore pause markers
    playback_font_scale: FontScale = 1.0
    flagged_only: bool = False
    word_shadowing_enabled: bool = False
    word_practice_repeats: Repeats = 2
    word_practice_silence_multiplier: SilenceMultiplier = 1.5
    word_outer_loops: OuterLoops = 1
