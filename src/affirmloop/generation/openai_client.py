"""OpenAI chat completion text generator."""

import asyncio
import logging

from openai import OpenAI, OpenAIError

from ..errors import GenerationError
from .base import TextGenerator

logger = logging.getLogger(__name__)


class OpenAITextGenerator(TextGenerator):
    """Generates affirmations with an OpenAI chat model.

    The client is created on first use, so a missing OPENAI_API_KEY
    surfaces as a GenerationError at generation time rather than at
    startup.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.8,
        max_tokens: int = 300,
        api_key: str | None = None,
    ) -> None:
        if not model or not model.strip():
            raise ValueError("model is required and cannot be empty")

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    async def generate(self, prompt: str, count: int) -> list[str]:
        """Request affirmations for the prompt.

        Raises:
            GenerationError: On any API failure or an empty/short response
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        try:
            # Run synchronous OpenAI client in thread to avoid blocking event loop
            def _sync_complete() -> str:
                response = self._get_client().chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
                if not response.choices:
                    return ""
                return response.choices[0].message.content or ""

            content = await asyncio.to_thread(_sync_complete)

        except OpenAIError as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise GenerationError(f"OpenAI generation failed: {e}", e) from e

        lines = [line for line in content.splitlines() if line.strip()]
        if len(lines) < count:
            raise GenerationError(
                f"Expected at least {count} lines from {self.model}, got {len(lines)}"
            )
        return lines
