"""OpenAI-compatible chat completion client."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from askcatalog.exceptions import GenerationError
from askcatalog.llm.provider import LanguageModelClient, SamplingConfig

if TYPE_CHECKING:
    from openai import AsyncOpenAI


class OpenAIClient(LanguageModelClient):
    """Chat completions through the ``openai`` SDK.

    Any OpenAI-compatible endpoint works by passing ``base_url``, e.g. Google
    Gemini at ``https://generativelanguage.googleapis.com/v1beta/openai/``.

    Example:
        >>> client = OpenAIClient()  # Uses OPENAI_API_KEY env var
        >>> sql = await client.generate(instruction, "Which products are out of stock?",
        ...                             SamplingConfig())
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            model: Chat model name. Defaults to gpt-4o-mini.
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: Alternative OpenAI-compatible endpoint.
            timeout: Per-request network timeout in seconds.
            client: Preconfigured AsyncOpenAI instance (skips key lookup).
        """
        self._model = model
        if client is not None:
            self._client = client
            return

        from openai import AsyncOpenAI

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def generate(
        self,
        system_instruction: str,
        user_content: str,
        sampling: SamplingConfig,
    ) -> str:
        """Request one completion and return its text.

        Raises:
            GenerationError: On provider, network or timeout errors, or empty output
        """
        import openai

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_content},
                ],
                temperature=sampling.temperature,
                max_tokens=sampling.max_output_tokens,
            )
        except openai.APITimeoutError as e:
            raise GenerationError(
                "Language model request timed out.", {"model": self._model}
            ) from e
        except openai.OpenAIError as e:
            raise GenerationError(
                f"Language model request failed: {e}", {"model": self._model}
            ) from e

        text = response.choices[0].message.content if response.choices else None
        if text is None or not text.strip():
            raise GenerationError(
                "Language model returned an empty response.", {"model": self._model}
            )
        return text

    @property
    def model_name(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._client.close()
