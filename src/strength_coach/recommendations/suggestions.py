"""
Pre-workout suggestion service.

For each strength exercise of a template, one orchestrated generator
request runs concurrently with the others. A request that never yields a
valid suggestion falls back to the deterministic local suggestion, so the
service always answers. Results keep template order.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..analysis.performance import PerformanceAnalyzer
from ..config import get_settings
from ..db.suggestion_cache import SuggestionCacheRepository
from ..llm.context_builder import (
    ExerciseSuggestionRequest,
    build_suggestion_requests,
    render_suggestion_prompt,
)
from ..llm.orchestrator import GenerationOutcome, generate_with_fallback
from ..llm.parsing import ParseResult, parse_json_payload
from ..llm.providers import LLMClient, ModelType, get_llm_client
from ..models.analysis import ProgressStatus
from ..models.profile import UserProfile
from ..models.sessions import WorkoutSession, WorkoutTemplate
from ..models.suggestions import ExerciseSuggestion, SuggestionSource
from .local import (
    LocalSuggestionContext,
    calculate_local_suggestion,
    collect_recent_session_sets,
)

logger = logging.getLogger(__name__)

SUGGESTION_MAX_TOKENS = 600


def parse_suggestion(raw: str, exercise_id: str) -> ParseResult[Optional[ExerciseSuggestion]]:
    """
    Pull the suggestion for ``exercise_id`` out of generator text.

    Accepts ``{"suggestions": [...]}`` or a single suggestion object.
    """
    payload = parse_json_payload(raw, None)
    if not payload.ok:
        return ParseResult.fallback(None, payload.error)

    data = payload.value
    items = data.get("suggestions")
    if not isinstance(items, list):
        items = [data]

    for item in items:
        if not isinstance(item, dict):
            continue
        if item.get("exerciseId", item.get("exercise_id")) != exercise_id:
            continue
        try:
            suggestion = ExerciseSuggestion.model_validate(item)
        except PydanticValidationError as e:
            return ParseResult.fallback(None, f"invalid suggestion for {exercise_id}: {e.error_count()} errors")
        return ParseResult.success(suggestion.model_copy(update={"source": SuggestionSource.GENERATED}))

    return ParseResult.fallback(None, f"no suggestion for {exercise_id} in payload")


def is_valid_suggestion(
    candidate: Optional[ExerciseSuggestion],
    request: ExerciseSuggestionRequest,
) -> bool:
    """Acceptance rules for a generated suggestion."""
    if candidate is None:
        return False
    if candidate.exercise_id != request.exercise_id:
        return False
    if candidate.suggested_weight < 0 or candidate.suggested_reps < 1:
        return False
    if request.requires_plateau_guidance:
        return bool(candidate.technique_tip) and candidate.rep_range_change is not None
    return True


class SuggestionService:
    """
    Produces pre-workout suggestions with generation, fallback and caching.

    The LLM client is resolved lazily; a missing API key costs each request
    its attempts and ends in local fallbacks.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        cache_repository: Optional[SuggestionCacheRepository] = None,
        analyzer: Optional[PerformanceAnalyzer] = None,
        max_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        self._llm_client = llm_client
        self.cache_repository = cache_repository
        # None means a fresh analyzer per call
        self.analyzer = analyzer
        self.max_attempts = max_attempts if max_attempts is not None else settings.llm_max_attempts

    def _get_client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    async def _generate(self, request: ExerciseSuggestionRequest) -> str:
        system, user = render_suggestion_prompt(request)
        return await self._get_client().completion(
            system=system,
            user=user,
            model=ModelType.FAST,
            max_tokens=SUGGESTION_MAX_TOKENS,
        )

    def _local_fallback(
        self,
        request: ExerciseSuggestionRequest,
        sessions: List[WorkoutSession],
    ) -> ExerciseSuggestion:
        context = LocalSuggestionContext(
            experience_level=request.experience_level,
            workout_goal=request.workout_goal,
            weight_unit=request.weight_unit,
            current_phase=request.current_phase,
        )
        return calculate_local_suggestion(
            request.exercise_id,
            request.analysis,
            context,
            request.target_reps,
            collect_recent_session_sets(request.exercise_id, sessions),
            exercise_name=request.exercise_name,
        )

    async def suggest_exercise(
        self,
        request: ExerciseSuggestionRequest,
        sessions: List[WorkoutSession],
    ) -> GenerationOutcome[ExerciseSuggestion]:
        """Run one orchestrated request with the local suggestion as fallback."""
        return await generate_with_fallback(
            request,
            generate=self._generate,
            parse=lambda raw: parse_suggestion(raw, request.exercise_id),
            validate=lambda candidate: is_valid_suggestion(candidate, request),
            fallback=self._local_fallback(request, sessions),
            max_attempts=self.max_attempts,
        )

    async def get_pre_workout_suggestions(
        self,
        template: WorkoutTemplate,
        sessions: List[WorkoutSession],
        profile: UserProfile,
        now: Optional[datetime] = None,
    ) -> List[ExerciseSuggestion]:
        """
        Suggestions for every strength exercise of a template.

        Args:
            template: Workout template
            sessions: Session history
            profile: User profile
            now: Reference time

        Returns:
            One suggestion per strength exercise, in template order
        """
        if self.cache_repository is not None:
            cached = self.cache_repository.get_suggestions(template.id, sessions, now, profile=profile)
            if cached is not None:
                logger.info(f"Suggestion cache hit for template {template.id}")
                return cached

        analyzer = self.analyzer or PerformanceAnalyzer()
        requests = build_suggestion_requests(template, sessions, profile, analyzer, now)
        if not requests:
            return []

        outcomes = await asyncio.gather(
            *(self.suggest_exercise(request, sessions) for request in requests)
        )

        for request, outcome in zip(requests, outcomes):
            self._log_outcome(request, outcome)

        suggestions = [outcome.value for outcome in outcomes]
        used_fallback = any(outcome.used_fallback for outcome in outcomes)

        if self.cache_repository is not None and not used_fallback:
            self.cache_repository.save_suggestions(template.id, sessions, suggestions, now, profile=profile)

        return suggestions

    @staticmethod
    def _log_outcome(
        request: ExerciseSuggestionRequest,
        outcome: GenerationOutcome[ExerciseSuggestion],
    ) -> None:
        if outcome.used_fallback:
            logger.warning(
                f"Suggestion for {request.exercise_id} fell back to local after "
                f"{outcome.attempts} attempts: {outcome.describe_failures()}"
            )
        elif outcome.failures:
            logger.info(
                f"Suggestion for {request.exercise_id} succeeded on attempt "
                f"{outcome.attempts}: {outcome.describe_failures()}"
            )
        else:
            logger.debug(f"Suggestion for {request.exercise_id} generated on first attempt")

        if request.progress_status == ProgressStatus.PLATEAU:
            logger.info(f"Plateau guidance requested for {request.exercise_id}")
