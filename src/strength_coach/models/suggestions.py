"""Exercise suggestion and cycle recommendation models."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .analysis import ProgressStatus
from .sessions import to_camel


class Confidence(str, Enum):
    """Confidence attached to a suggestion or recommendation."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SuggestionSource(str, Enum):
    """Where a suggestion came from."""
    GENERATED = "generated"
    LOCAL = "local"


class RepRangeChange(BaseModel):
    """A rep-range switch proposed to break a plateau."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_range: str = Field(..., alias="from", description="Current rep range, e.g. 8-12")
    to_range: str = Field(..., alias="to", description="Proposed rep range, e.g. 5-8")
    reason: str = Field(default="")


class ExerciseSuggestion(BaseModel):
    """Weight/rep suggestion for one exercise of an upcoming session."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "exerciseId": "bench-press",
                "suggestedWeight": 185,
                "suggestedReps": 8,
                "reasoning": "Hit all reps last session, add 5 lbs.",
                "confidence": "high",
                "progressStatus": "improving",
                "source": "generated",
            }
        },
    )

    exercise_id: str = Field(..., description="Exercise catalog ID")
    suggested_weight: float = Field(..., description="Suggested working weight")
    suggested_reps: int = Field(..., description="Suggested reps per set")
    reasoning: str = Field(default="", description="One-sentence explanation")
    confidence: Confidence = Field(default=Confidence.MEDIUM)
    progress_status: ProgressStatus = Field(default=ProgressStatus.INSUFFICIENT_DATA)
    technique_tip: Optional[str] = Field(default=None, description="Plateau-breaking tip")
    rep_range_change: Optional[RepRangeChange] = Field(default=None)
    source: SuggestionSource = Field(default=SuggestionSource.GENERATED)

    @field_validator("progress_status", mode="before")
    @classmethod
    def _read_new_as_insufficient(cls, value: Any) -> Any:
        # Generated payloads use "new" for exercises without enough history
        if isinstance(value, str) and value.lower() == "new":
            return ProgressStatus.INSUFFICIENT_DATA
        return value

    @field_validator("suggested_reps", mode="before")
    @classmethod
    def _coerce_reps(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        return value


class SuggestionsPayload(BaseModel):
    """Shape of the generator's suggestion response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    suggestions: List[ExerciseSuggestion] = Field(default_factory=list)


class CycleRecommendation(BaseModel):
    """Recommended training cycle with an optional alternative."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    recommended_cycle_id: str = Field(..., description="ID of a predefined cycle")
    reasoning: str = Field(default="This cycle matches your experience level and goals.")
    alternative_id: Optional[str] = Field(default=None)
    alternative_reason: Optional[str] = Field(default=None)
    confidence: Confidence = Field(default=Confidence.MEDIUM)
    source: SuggestionSource = Field(default=SuggestionSource.GENERATED)
