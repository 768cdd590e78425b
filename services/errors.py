"""
Workout generation pipeline errors.

These are domain errors, raised by services and translated into HTTP
responses by the handlers registered in main.py.
"""
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from services.llm_providers import ProviderAttempt


class PipelineError(Exception):
    """Base class for errors that abort a generation request."""

    status_code = 500
    error_code = "PIPELINE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GenerationUnavailable(PipelineError):
    """Every configured LLM provider failed."""

    status_code = 503
    error_code = "GENERATION_UNAVAILABLE"

    def __init__(self, message: str, attempts: Optional[List["ProviderAttempt"]] = None):
        super().__init__(message)
        self.attempts = attempts or []


class MalformedGenerationResponse(PipelineError):
    """A provider replied, but no JSON object could be extracted and parsed."""

    status_code = 502
    error_code = "MALFORMED_GENERATION_RESPONSE"

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
