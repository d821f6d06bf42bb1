"""Generation service access: client, tolerant parsing and orchestration."""

from .orchestrator import AttemptFailure, GenerationOutcome, generate_with_fallback
from .parsing import ParseResult, parse_json_payload, parse_model
from .providers import LLMClient, ModelType, get_llm_client

__all__ = [
    "AttemptFailure",
    "GenerationOutcome",
    "LLMClient",
    "ModelType",
    "ParseResult",
    "generate_with_fallback",
    "get_llm_client",
    "parse_json_payload",
    "parse_model",
]
