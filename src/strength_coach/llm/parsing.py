"""
Tolerant parsing of generator output.

Two stages: a strict JSON decode of the whole text, then extraction of the
outermost ``{...}`` span from surrounding prose or markdown fences. Both
stages yield a tagged ``ParseResult``; malformed text never raises.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

_EMBEDDED_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of a parse: the decoded value, or the caller's fallback."""

    value: T
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value, ok=True)

    @classmethod
    def fallback(cls, value: T, error: Optional[str] = None) -> "ParseResult[T]":
        return cls(value=value, ok=False, error=error)


def _decode_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        decoded = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return decoded if isinstance(decoded, dict) else None


def parse_json_payload(raw: Optional[str], fallback_shape: T) -> ParseResult[Any]:
    """
    Parse a JSON object out of generator text.

    Args:
        raw: Raw generator output
        fallback_shape: Value carried by the result when nothing decodes

    Returns:
        ParseResult holding a dict, or the fallback shape
    """
    if not raw:
        return ParseResult.fallback(fallback_shape, "empty response")

    decoded = _decode_object(raw.strip())
    if decoded is not None:
        return ParseResult.success(decoded)

    match = _EMBEDDED_OBJECT.search(raw)
    if match:
        decoded = _decode_object(match.group())
        if decoded is not None:
            return ParseResult.success(decoded)

    return ParseResult.fallback(fallback_shape, f"no JSON object in response: {raw[:200]!r}")


def parse_model(raw: Optional[str], model_cls: Type[M], fallback: T) -> ParseResult[Any]:
    """Parse generator text into a pydantic model, or carry ``fallback``."""
    payload = parse_json_payload(raw, None)
    if not payload.ok:
        return ParseResult.fallback(fallback, payload.error)

    try:
        return ParseResult.success(model_cls.model_validate(payload.value))
    except PydanticValidationError as e:
        return ParseResult.fallback(fallback, f"payload does not match {model_cls.__name__}: {e}")
