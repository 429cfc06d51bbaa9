"""
LLM provider gateway.

Each provider wraps one remote text-generation backend behind the same
``invoke(prompt, options) -> dict`` call:

- OpenAIProvider: JSON mode, large output budget, repairs truncated JSON and
  falls back to an empty skeleton rather than failing.
- AnthropicProvider: free-form text, smaller budget, pulls the JSON object
  out of the reply and fails hard if it cannot.

Providers never retry. Falling back to a different provider is the
orchestrator's job.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

# Handle both package imports and standalone imports
try:
    from ...config import Settings
    from ...models import REPORT_CATEGORIES, ExtractionOptions, Provider
except ImportError:
    from config import Settings
    from models import REPORT_CATEGORIES, ExtractionOptions, Provider

from .exceptions import ProviderError
from .prompts import EXTRACTION_SYSTEM_PROMPT
from .repair import extract_json_region, parse_json_with_repair

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_MAX_TOKENS = 8000
ANTHROPIC_DEFAULT_MAX_TOKENS = 3000


def describe_provider_error(exc: BaseException) -> str:
    """
    Dig the human-readable message out of an SDK exception.

    Both SDKs attach the decoded response body to API errors; the message
    may sit at ``body["error"]["message"]`` or ``body["message"]``.
    """
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])

    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) or type(exc).__name__


def _log_category_counts(provider: Provider, data: dict[str, Any]) -> None:
    for category in REPORT_CATEGORIES:
        items = data.get(category)
        if isinstance(items, list):
            logger.info("%s extracted %d %s", provider.value, len(items), category)


class LLMProvider(ABC):
    """A remote model that turns an extraction prompt into a JSON object."""

    name: Provider
    label: str

    def __init__(self, model: str):
        self.model = model

    @property
    def processing_method(self) -> str:
        """Label recorded in report metadata, e.g. 'OpenAI gpt-4.1'."""
        return f"{self.label} {self.model}"

    @abstractmethod
    async def _call(self, prompt: str, options: ExtractionOptions) -> dict[str, Any]:
        """Send the prompt and return the parsed JSON object."""

    async def invoke(self, prompt: str, options: ExtractionOptions) -> dict[str, Any]:
        """
        Run one extraction call.

        Raises:
            ProviderError: On transport, auth or quota failures and on
                output this provider cannot turn into a JSON object.
        """
        try:
            return await self._call(prompt, options)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.name, describe_provider_error(e)) from e


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions in JSON mode."""

    name = Provider.OPENAI
    label = "OpenAI"

    def __init__(self, api_key: str, model: str, client: Any | None = None):
        super().__init__(model)
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    async def _call(self, prompt: str, options: ExtractionOptions) -> dict[str, Any]:
        logger.info("Calling OpenAI model %s", self.model)

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=options.temperature,
            max_tokens=options.max_tokens or OPENAI_DEFAULT_MAX_TOKENS,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError(self.name, "No response from OpenAI")

        logger.info("OpenAI response length: %d characters", len(content))
        logger.debug("OpenAI response head: %s", content[:500])

        data = parse_json_with_repair(content)
        _log_category_counts(self.name, data)
        return data


class AnthropicProvider(LLMProvider):
    """Anthropic messages API with JSON pulled out of the text reply."""

    name = Provider.ANTHROPIC
    label = "Anthropic"

    def __init__(self, api_key: str, model: str, client: Any | None = None):
        super().__init__(model)
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load the Anthropic client."""
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def _call(self, prompt: str, options: ExtractionOptions) -> dict[str, Any]:
        logger.info("Calling Anthropic model %s", self.model)

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=options.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
            temperature=options.temperature,
            messages=[{"role": "user", "content": prompt}],
        )

        piece = response.content[0] if response.content else None
        if piece is None or getattr(piece, "type", None) != "text":
            raise ProviderError(self.name, "Invalid response type from Anthropic")

        data = extract_json_region(piece.text)
        if data is None:
            raise ProviderError(self.name, "No valid JSON found in Anthropic response")

        _log_category_counts(self.name, data)
        return data


def build_providers(settings: Settings) -> list[LLMProvider]:
    """Create a provider for every backend that has credentials configured."""
    providers: list[LLMProvider] = []
    configured = settings.configured_providers
    if Provider.OPENAI.value in configured:
        providers.append(OpenAIProvider(settings.openai_api_key, settings.openai_model))
    if Provider.ANTHROPIC.value in configured:
        providers.append(
            AnthropicProvider(settings.anthropic_api_key, settings.anthropic_model)
        )
    return providers
