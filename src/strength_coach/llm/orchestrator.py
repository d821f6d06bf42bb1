"""
Generate-validate-retry-fallback orchestration.

Wraps any call to the generation service. Attempts run one after another
with no backoff; the first candidate that passes validation wins, and once
attempts run out the caller's fallback is returned. Nothing is raised and
nothing is logged here: the returned outcome carries the per-attempt trail.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, List, TypeVar

from .parsing import ParseResult

Req = TypeVar("Req")
T = TypeVar("T")

FAILURE_ERROR = "error"
FAILURE_INVALID = "invalid"


@dataclass(frozen=True)
class AttemptFailure:
    """Why one attempt did not produce a usable value."""

    attempt: int
    kind: str       # 'error' or 'invalid'
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"attempt": self.attempt, "kind": self.kind, "reason": self.reason}


@dataclass
class GenerationOutcome(Generic[T]):
    """Result of an orchestrated generation."""

    value: T
    attempts: int
    failures: List[AttemptFailure] = field(default_factory=list)
    used_fallback: bool = False

    def describe_failures(self) -> str:
        return "; ".join(f"#{f.attempt} {f.kind}: {f.reason}" for f in self.failures)


async def generate_with_fallback(
    request: Req,
    generate: Callable[[Req], Awaitable[str]],
    parse: Callable[[str], ParseResult[T]],
    validate: Callable[[T], bool],
    fallback: T,
    max_attempts: int = 3,
) -> GenerationOutcome[T]:
    """
    Call the generator until a candidate validates.

    Args:
        request: Opaque request handed to ``generate``
        generate: Async generator call; any exception costs one attempt
        parse: Turns raw text into a tagged ParseResult
        validate: Accepts or rejects a parsed candidate
        fallback: Value returned when every attempt fails
        max_attempts: Attempt budget, values below 1 mean 1

    Returns:
        GenerationOutcome with the value and the failure trail
    """
    max_attempts = max(1, max_attempts)
    failures: List[AttemptFailure] = []

    for attempt in range(1, max_attempts + 1):
        try:
            raw = await generate(request)
        except Exception as e:
            failures.append(AttemptFailure(attempt, FAILURE_ERROR, f"{type(e).__name__}: {e}"))
            continue

        try:
            parsed = parse(raw)
            accepted = validate(parsed.value)
        except Exception as e:
            failures.append(AttemptFailure(attempt, FAILURE_INVALID, f"{type(e).__name__}: {e}"))
            continue

        if accepted:
            return GenerationOutcome(value=parsed.value, attempts=attempt, failures=failures)

        reason = parsed.error if not parsed.ok and parsed.error else "candidate rejected by validator"
        failures.append(AttemptFailure(attempt, FAILURE_INVALID, reason))

    return GenerationOutcome(
        value=fallback,
        attempts=max_attempts,
        failures=failures,
        used_fallback=True,
    )
