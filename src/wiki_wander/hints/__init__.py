# Simplified hint model creation
from typing import Dict, Type

from wiki_wander.config import WanderConfig
from wiki_wander.exceptions import HintFailureError, HintRateLimitError, HintTimeoutError
from .hint_model import (
    DEFAULT_HINT_PROMPT_TEMPLATE,
    HintModel,
    HintModelConfig,
    HintRequest,
    HintResponse,
)
from .static_model import StaticHintModel
from .anthropic_model import AnthropicHintModel
from .openai_model import OpenAIHintModel, OpenRouterHintModel

# Simple provider mapping
PROVIDERS: Dict[str, Type[HintModel]] = {
    "anthropic": AnthropicHintModel,
    "openai": OpenAIHintModel,
    "openrouter": OpenRouterHintModel,
    "static": StaticHintModel,
}


def create_hint_model(provider: str, model_name: str, **settings) -> HintModel:
    """
    Create a hint model instance.

    Example:
        model = create_hint_model("anthropic", "claude-3-5-haiku-latest")
        model = create_hint_model("openai", "gpt-4o-mini", max_tokens=128)
    """
    if provider not in PROVIDERS:
        available_providers = list(PROVIDERS.keys())
        raise ValueError(f"Unknown provider '{provider}'. Available: {available_providers}")

    model_config = HintModelConfig(provider=provider, model_name=model_name, settings=settings)
    return PROVIDERS[provider](model_config)


def create_hint_model_from_config(config: WanderConfig) -> HintModel:
    """Create the hint model named by a WanderConfig."""
    return create_hint_model(config.hint_provider, config.hint_model, max_tokens=config.hint_max_tokens)


__all__ = [
    "DEFAULT_HINT_PROMPT_TEMPLATE",
    "HintModel",
    "HintModelConfig",
    "HintRequest",
    "HintResponse",
    "HintFailureError",
    "HintRateLimitError",
    "HintTimeoutError",
    "AnthropicHintModel",
    "OpenAIHintModel",
    "OpenRouterHintModel",
    "StaticHintModel",
    "create_hint_model",
    "create_hint_model_from_config",
    "PROVIDERS",
]
