import logging
from datetime import datetime
from typing import Optional

from anthropic import (
    AsyncAnthropic,
    AnthropicError,
    RateLimitError,
    APITimeoutError,
)

from wiki_wander.exceptions import HintFailureError, HintRateLimitError, HintTimeoutError
from .hint_model import HintModel, HintModelConfig, HintRequest, HintResponse


logger = logging.getLogger(__name__)


class AnthropicHintModel(HintModel):
    """
    HintModel implementation for Anthropic's Claude models.
    """

    def __init__(self, model_config: HintModelConfig, client: Optional[AsyncAnthropic] = None):
        super().__init__(model_config)
        self.client = client or AsyncAnthropic()  # API key is inferred from ANTHROPIC_API_KEY env var

    async def generate_hint(self, request: HintRequest) -> HintResponse:
        prompt = self._build_prompt(request)
        logger.debug(f"Requesting hint from Anthropic for '{request.current_title}' -> '{request.target_title}'")

        try:
            start_time = datetime.now()
            response = await self.client.messages.create(
                model=self.model_config.model_name,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            duration_ms = (datetime.now() - start_time).total_seconds() * 1000
        except RateLimitError as e:
            logger.error(f"Anthropic API rate limit exceeded: {e}", exc_info=True)
            raise HintRateLimitError("Hint provider rate limit exceeded") from e
        except APITimeoutError as e:
            logger.error(f"Anthropic API call timed out: {e}", exc_info=True)
            raise HintTimeoutError("Hint provider timed out") from e
        except AnthropicError as e:
            logger.error(f"Anthropic API call failed: {e}", exc_info=True)
            raise HintFailureError(f"Hint provider call failed: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return self._to_response(text, duration_ms)
