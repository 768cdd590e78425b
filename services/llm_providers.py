"""
LLM Generation Client

Obtains raw plan text from an ordered chain of LLM providers:
primary first, then exactly one fallback. Each provider is tried once and
every try produces a ProviderAttempt, so callers (and logs) can see which
provider answered and why the others did not.

No retries, no backoff, no caching. Timeouts are the SDK defaults.

Providers:
- anthropic: Claude via the Messages API (default primary)
- openai:    GPT via chat completions in JSON mode (default fallback)
- gemini:    Gemini via google-genai (selectable through GENERATION_PROVIDERS)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from anthropic import Anthropic
from openai import OpenAI
from google import genai
from google.genai import types as genai_types

from services.errors import GenerationUnavailable
from services.prompt_composer import ComposedPrompt

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """A provider could not produce usable text."""


@dataclass
class ProviderAttempt:
    """Outcome of a single provider call."""
    provider: str
    ok: bool
    text: Optional[str] = None
    error: Optional[str] = None


@dataclass
class GenerationResult:
    text: str
    provider: str
    attempts: List[ProviderAttempt] = field(default_factory=list)


class LLMProvider:
    """Base provider: turn a composed prompt into raw reply text."""

    name = "base"

    def complete(self, prompt: ComposedPrompt) -> str:
        raise NotImplementedError


class AnthropicProvider(LLMProvider):
    name = "anthropic"

    def __init__(self, client: Anthropic, model: str, max_tokens: int, temperature: float):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, prompt: ComposedPrompt) -> str:
        response = self.client.messages.create(
            model=self.model,
            system=prompt.system,
            messages=[{"role": "user", "content": prompt.user}],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise ProviderError("Anthropic returned no text content")
        return text


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, client: OpenAI, model: str, max_tokens: int, temperature: float):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, prompt: ComposedPrompt) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            raise ProviderError("OpenAI returned no choices")
        text = response.choices[0].message.content or ""
        if not text.strip():
            raise ProviderError("OpenAI returned an empty message")
        return text


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, client: genai.Client, model: str, max_tokens: int, temperature: float):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, prompt: ComposedPrompt) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt.user,
            config=genai_types.GenerateContentConfig(
                system_instruction=prompt.system,
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
                response_mime_type="application/json",
            ),
        )
        text = response.text or ""
        if not text.strip():
            raise ProviderError("Gemini returned no text")
        return text


class UnconfiguredProvider(LLMProvider):
    """Placeholder for a provider listed in the chain without an API key."""

    def __init__(self, name: str, missing_setting: str):
        self.name = name
        self.missing_setting = missing_setting

    def complete(self, prompt: ComposedPrompt) -> str:
        raise ProviderError(f"{self.missing_setting} is not set")


class GenerationClient:
    """Tries providers in order, each once, and returns the first usable reply."""

    MAX_PROVIDERS = 2  # primary + one fallback

    def __init__(self, providers: Sequence[LLMProvider]):
        if not providers:
            raise ValueError("At least one LLM provider is required")
        if len(providers) > self.MAX_PROVIDERS:
            raise ValueError(
                f"At most {self.MAX_PROVIDERS} providers are supported (primary + fallback), "
                f"got {len(providers)}"
            )
        self.providers = list(providers)

    @property
    def provider_names(self) -> List[str]:
        return [p.name for p in self.providers]

    def _attempt(self, provider: LLMProvider, prompt: ComposedPrompt) -> ProviderAttempt:
        try:
            text = provider.complete(prompt)
        except Exception as e:
            # Any provider-level failure (auth, rate limit, timeout, non-2xx, empty reply)
            # counts as one failed attempt.
            return ProviderAttempt(provider=provider.name, ok=False, error=f"{type(e).__name__}: {e}")
        return ProviderAttempt(provider=provider.name, ok=True, text=text)

    def generate(self, prompt: ComposedPrompt) -> GenerationResult:
        attempts: List[ProviderAttempt] = []

        for provider in self.providers:
            attempt = self._attempt(provider, prompt)
            attempts.append(attempt)

            if attempt.ok:
                if len(attempts) > 1:
                    logger.info(
                        f"Plan generated by fallback provider {provider.name}",
                        extra={"extra_fields": {"provider": provider.name, "attempts": len(attempts)}},
                    )
                return GenerationResult(text=attempt.text, provider=provider.name, attempts=attempts)

            logger.warning(
                f"LLM provider {provider.name} failed: {attempt.error}",
                extra={"extra_fields": {"provider": provider.name}},
            )

        summary = "; ".join(f"{a.provider}: {a.error}" for a in attempts)
        logger.error(f"All LLM providers failed ({summary})")
        raise GenerationUnavailable(
            "Workout plan generation is temporarily unavailable. Please try again later.",
            attempts=attempts,
        )


def build_provider(name: str, settings) -> LLMProvider:
    """Construct one provider from settings. Unknown names are a configuration error."""
    max_tokens = settings.GENERATION_MAX_TOKENS
    temperature = settings.GENERATION_TEMPERATURE

    if name == "anthropic":
        if not settings.ANTHROPIC_API_KEY:
            return UnconfiguredProvider(name, "ANTHROPIC_API_KEY")
        return AnthropicProvider(
            Anthropic(api_key=settings.ANTHROPIC_API_KEY),
            settings.ANTHROPIC_MODEL, max_tokens, temperature,
        )
    if name == "openai":
        if not settings.OPENAI_API_KEY:
            return UnconfiguredProvider(name, "OPENAI_API_KEY")
        return OpenAIProvider(
            OpenAI(api_key=settings.OPENAI_API_KEY),
            settings.OPENAI_MODEL, max_tokens, temperature,
        )
    if name == "gemini":
        if not settings.GOOGLE_AI_API_KEY:
            return UnconfiguredProvider(name, "GOOGLE_AI_API_KEY")
        return GeminiProvider(
            genai.Client(api_key=settings.GOOGLE_AI_API_KEY),
            settings.GEMINI_MODEL, max_tokens, temperature,
        )
    raise ValueError(f"Unknown LLM provider in GENERATION_PROVIDERS: {name!r}")


def build_generation_client(settings) -> GenerationClient:
    """Build the provider chain named by GENERATION_PROVIDERS."""
    providers = [build_provider(name, settings) for name in settings.generation_provider_names]
    client = GenerationClient(providers)
    configured = [p.name for p in providers if not isinstance(p, UnconfiguredProvider)]
    logger.info(f"LLM provider chain: {client.provider_names} (configured: {configured})")
    return client
