import logging
import os
from datetime import datetime
from typing import Optional

from openai import (
    AsyncOpenAI,
    OpenAIError,
    APITimeoutError,
    RateLimitError,
)

from wiki_wander.exceptions import HintFailureError, HintRateLimitError, HintTimeoutError
from .hint_model import HintModel, HintModelConfig, HintRequest, HintResponse

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenAIHintModel(HintModel):
    def __init__(self, model_config: HintModelConfig, client: Optional[AsyncOpenAI] = None):
        super().__init__(model_config)
        self.client = client or self._create_client()

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI()  # Assumes OPENAI_API_KEY is set in environment

    async def generate_hint(self, request: HintRequest) -> HintResponse:
        prompt = self._build_prompt(request)

        try:
            logger.debug(f"Requesting hint with prompt: {prompt}")
            start_time = datetime.now()
            response = await self.client.chat.completions.create(
                model=self.model_config.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
            )
            duration_ms = (datetime.now() - start_time).total_seconds() * 1000
        except RateLimitError as e:
            logger.error(f"OpenAI API rate limit exceeded: {e}", exc_info=True)
            raise HintRateLimitError("Hint provider rate limit exceeded") from e
        except APITimeoutError as e:
            logger.error(f"OpenAI API call timed out: {e}", exc_info=True)
            raise HintTimeoutError("Hint provider timed out") from e
        except OpenAIError as e:
            logger.error(f"Error generating hint from OpenAI: {e}", exc_info=True)
            raise HintFailureError(f"Hint provider call failed: {e}") from e

        if not response.choices:
            raise HintFailureError("Hint provider returned no choices")
        return self._to_response(response.choices[0].message.content, duration_ms)


class OpenRouterHintModel(OpenAIHintModel):
    """OpenAI-compatible hint model served through the OpenRouter API."""

    def _create_client(self) -> AsyncOpenAI:
        api_key = os.getenv("OPENROUTER_API_KEY")
        if not api_key:
            raise ValueError("OPENROUTER_API_KEY environment variable not set.")
        return AsyncOpenAI(base_url=OPENROUTER_BASE_URL, api_key=api_key)
