"""Pre-workout suggestion API routes."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_suggestion_cache, get_suggestion_service
from ...db.suggestion_cache import SuggestionCacheRepository
from ...models.requests import SuggestionsRequest
from ...models.sessions import to_camel
from ...models.suggestions import ExerciseSuggestion
from ...recommendations.suggestions import SuggestionService

router = APIRouter()


class SuggestionsResponse(BaseModel):
    """Suggestions in template order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    template_id: str
    suggestions: List[ExerciseSuggestion] = Field(default_factory=list)


@router.post("", response_model=SuggestionsResponse)
async def get_suggestions(
    request: SuggestionsRequest,
    service: SuggestionService = Depends(get_suggestion_service),
):
    """
    Suggest weight and reps for every strength exercise of a template.

    Exercises the generator cannot answer for get a locally computed
    suggestion instead; the endpoint does not fail on generator errors.
    """
    suggestions = await service.get_pre_workout_suggestions(
        request.template,
        request.sessions,
        request.profile,
    )
    return SuggestionsResponse(template_id=request.template.id, suggestions=suggestions)


@router.delete("/cache/{template_id}")
async def invalidate_cache(
    template_id: str,
    repository: SuggestionCacheRepository = Depends(get_suggestion_cache),
):
    """Drop cached suggestions for a template, for every profile."""
    removed = repository.delete_template(template_id)
    return {"templateId": template_id, "removed": removed}
