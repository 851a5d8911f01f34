"""LLM client wrappers for structured outputs.

Two providers share one coroutine, ``extract(prompt, response_model)``:
- LLMClient: Anthropic structured outputs (messages.parse)
- OpenAILLMClient: OpenAI chat completions in JSON mode

Callers depend only on ``extract``; provider request/response shapes
never leave this module.
"""

import json
from typing import TypeVar

from anthropic import APIError, AsyncAnthropic
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from src.config import Settings, settings

T = TypeVar("T", bound=BaseModel)


class LLMClientError(Exception):
    """Raised when an LLM request fails or returns unusable output."""

    pass


class LLMClient:
    """Anthropic client wrapper with structured output support.

    Uses client.beta.messages.parse with Pydantic models for
    guaranteed schema-valid extraction output.
    """

    def __init__(
        self,
        client: AsyncAnthropic | None = None,
        model: str | None = None,
        temperature: float = 0.3,
    ):
        """Initialize LLM client.

        Args:
            client: Optional Anthropic client for dependency injection.
                   If not provided, creates one from settings.
            model: Model name override (default: settings.anthropic_model)
            temperature: Sampling temperature for every request
        """
        if client is not None:
            self._client = client
        elif settings.anthropic_api_key:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        else:
            # Allow initialization without API key for testing
            self._client = None
        self._model = model or settings.anthropic_model
        self._temperature = temperature

    async def extract(
        self,
        prompt: str,
        response_model: type[T],
        system: str | None = None,
    ) -> T:
        """Extract structured data from text using LLM.

        Args:
            prompt: The user prompt
            response_model: Pydantic model defining the output schema
            system: Optional system prompt

        Returns:
            Parsed response matching the response_model type

        Raises:
            LLMClientError: If extraction fails
        """
        if self._client is None:
            raise LLMClientError(
                "Anthropic client not initialized. "
                "Set ANTHROPIC_API_KEY environment variable."
            )

        kwargs = {}
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.beta.messages.parse(
                model=self._model,
                max_tokens=2048,
                temperature=self._temperature,
                betas=["structured-outputs-2025-11-13"],
                messages=[{"role": "user", "content": prompt}],
                output_format=response_model,
                **kwargs,
            )
        except APIError as e:
            raise LLMClientError(f"Anthropic API error: {e}") from e
        except Exception as e:
            raise LLMClientError(f"Extraction failed: {e}") from e

        if response.parsed_output is None:
            raise LLMClientError("No response from AI")
        return response.parsed_output


class OpenAILLMClient:
    """OpenAI client wrapper returning validated Pydantic models.

    Requests JSON-object output and validates it against the
    response model, so malformed payloads surface as LLMClientError.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        temperature: float = 0.3,
    ):
        """Initialize OpenAI client.

        Args:
            client: Optional AsyncOpenAI client for dependency injection.
                   If not provided, creates one from settings.
            model: Model name override (default: settings.openai_model)
            temperature: Sampling temperature for every request
        """
        if client is not None:
            self._client = client
        elif settings.openai_api_key:
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
            )
        else:
            self._client = None
        self._model = model or settings.openai_model
        self._temperature = temperature

    async def extract(
        self,
        prompt: str,
        response_model: type[T],
        system: str | None = None,
    ) -> T:
        """Extract structured data from text using LLM.

        Args:
            prompt: The user prompt
            response_model: Pydantic model defining the output schema
            system: Optional system prompt

        Returns:
            Parsed response matching the response_model type

        Raises:
            LLMClientError: If the request fails or the payload is invalid
        """
        if self._client is None:
            raise LLMClientError(
                "OpenAI client not initialized. "
                "Set OPENAI_API_KEY environment variable."
            )

        schema_hint = json.dumps(response_model.model_json_schema())
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append(
            {
                "role": "user",
                "content": f"{prompt}\n\nRespond with JSON matching this schema:\n{schema_hint}",
            }
        )

        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise LLMClientError(f"OpenAI API error: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise LLMClientError("No response from AI")

        try:
            return response_model.model_validate_json(content)
        except ValidationError as e:
            raise LLMClientError(f"Malformed response: {e}") from e


def create_llm_client(
    config: Settings | None = None,
) -> LLMClient | OpenAILLMClient:
    """Create the LLM client for the configured provider.

    Args:
        config: Settings to read the provider from (default: global settings)

    Returns:
        Client exposing ``extract``
    """
    config = config or settings
    if config.llm_provider == "openai":
        openai_client = None
        if config.openai_api_key:
            openai_client = AsyncOpenAI(
                api_key=config.openai_api_key, base_url=config.openai_base_url
            )
        return OpenAILLMClient(client=openai_client, model=config.openai_model)

    anthropic_client = None
    if config.anthropic_api_key:
        anthropic_client = AsyncAnthropic(api_key=config.anthropic_api_key)
    return LLMClient(client=anthropic_client, model=config.anthropic_model)
