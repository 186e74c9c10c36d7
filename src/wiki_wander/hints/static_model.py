import asyncio
import time

from .hint_model import HintModel, HintModelConfig, HintRequest, HintResponse

DEFAULT_STATIC_HINT = (
    "Look for a broad topic on '{current_title}' that '{target_title}' is likely to be part of, "
    "then narrow down from there."
)


class StaticHintModel(HintModel):
    """
    Offline hint model that fills a fixed template. Useful without API keys.
    """

    def __init__(self, model_config: HintModelConfig):
        super().__init__(model_config)
        self.template = model_config.settings.get("template", DEFAULT_STATIC_HINT)
        self.delay = model_config.settings.get("delay", 0.0)

    async def generate_hint(self, request: HintRequest) -> HintResponse:
        start_time = time.time()
        if self.delay:
            await asyncio.sleep(self.delay)
        text = self.template.format(current_title=request.current_title, target_title=request.target_title)
        return self._to_response(text, (time.time() - start_time) * 1000)
