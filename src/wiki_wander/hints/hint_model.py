import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from pydantic import BaseModel, Field

from wiki_wander.exceptions import HintFailureError


logger = logging.getLogger(__name__)


DEFAULT_HINT_PROMPT_TEMPLATE = (
    "You are helping a player of the Wikipedia game. The player moves between Wikipedia "
    "articles by clicking links inside the article they are reading.\n"
    "Current article: '{current_title}'\n"
    "Target article: '{target_title}'\n\n"
    "Give ONE short hint (at most two sentences) about which kind of linked topic on the "
    "current article is likely to lead closer to the target. Do not spell out a full path "
    "and do not simply name the target article."
)


class HintRequest(BaseModel):
    """The two display titles a hint is generated for."""
    current_title: str = Field(..., min_length=1, description="Display title of the article the player is on.")
    target_title: str = Field(..., min_length=1, description="Display title of the target article.")


class HintResponse(BaseModel):
    hint: str = Field(..., description="Free-text hint for the player.")
    response_time_ms: float = Field(0.0, description="Provider response time in milliseconds")


class HintModelConfig(BaseModel):
    """Configuration for a specific hint model."""
    provider: str = Field(..., description="Model provider: anthropic, openai, openrouter, static")
    model_name: str = Field(..., description="Specific model name for the provider")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Provider-specific settings")
    prompt_template: str = Field(DEFAULT_HINT_PROMPT_TEMPLATE, description="Prompt used to ask for a hint.")


class HintModel(ABC):
    """
    Abstract base class for all hint models.
    """
    DEFAULT_MAX_TOKENS = 256

    def __init__(self, model_config: HintModelConfig):
        self.model_config = model_config
        self.max_tokens = model_config.settings.get("max_tokens", self.DEFAULT_MAX_TOKENS)

    def _build_prompt(self, request: HintRequest) -> str:
        return self.model_config.prompt_template.format(
            current_title=request.current_title,
            target_title=request.target_title,
        )

    def _to_response(self, text: str, duration_ms: float) -> HintResponse:
        hint = (text or "").strip()
        if not hint:
            raise HintFailureError(f"{self.model_config.provider} returned an empty hint")
        logger.info(f"Hint generated by {self.model_config.model_name} in {duration_ms:.1f}ms")
        return HintResponse(hint=hint, response_time_ms=duration_ms)

    @abstractmethod
    async def generate_hint(self, request: HintRequest) -> HintResponse:
        """
        Ask the provider for a hint that moves the player from the current
        article towards the target article.

        Raises:
            HintFailureError: If the provider call fails or yields no text.
        """
        pass
