import asyncio
import logging
import math
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def format_time(total_seconds: int) -> str:
    """Render seconds as MM:SS. Minutes are not wrapped at 60."""
    minutes, seconds = divmod(max(0, int(total_seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


class GameTimer:
    """
    Restartable elapsed-time counter driven by wall-clock sampling.

    While running, the clock is sampled once per `interval` and the elapsed
    seconds are pushed to every listener. Stopping keeps the accumulated time,
    so a later `start()` resumes from it.
    """

    def __init__(
        self,
        interval: float = 1.0,
        clock: Callable[[], float] = time.time,
    ):
        self.interval = interval
        self._clock = clock
        self._listeners: List[Callable[[int], None]] = []
        self._elapsed = 0
        self._baseline: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: Callable[[int], None]) -> None:
        """Register a callable that receives the elapsed seconds on every tick."""
        self._listeners.append(listener)

    def start(self) -> None:
        """Begin (or resume) sampling. Must be called from a running event loop."""
        self._cancel()
        self._baseline = self._clock() - self._elapsed
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Timer started at {self._elapsed}s")

    def stop(self) -> None:
        """Halt sampling; the accumulated time is kept."""
        if self.is_running:
            logger.debug(f"Timer stopped at {self._elapsed}s")
        self._cancel()

    def reset(self) -> None:
        """Stop and zero the accumulator."""
        self._cancel()
        self._elapsed = 0
        self._baseline = None

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._sample()

    def _sample(self) -> None:
        if self._baseline is None:
            return
        self._elapsed = max(0, math.floor(self._clock() - self._baseline))
        for listener in self._listeners:
            try:
                listener(self._elapsed)
            except Exception as e:
                logger.error(f"Timer listener failed: {e}", exc_info=True)
