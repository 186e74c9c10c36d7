"""
Logging setup for Wiki Wander sessions.

Library modules only call `logging.getLogger(__name__)`; the embedding
application picks one of the setup functions below once at startup.
"""

import logging
import os
import sys
from typing import Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that report every request at INFO
NOISY_LOGGERS: Dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "anthropic": logging.WARNING,
    "openai": logging.WARNING,
}

PLAIN_FORMAT = "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s"


def _rich_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(file=sys.stderr),
        level=level,
        show_path=True,
        rich_tracebacks=True,
        markup=False,  # article titles may contain [brackets]
        log_time_format="[%H:%M:%S]",
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def _plain_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    use_rich: bool = True,
    library_levels: Optional[Dict[str, int]] = None,
) -> None:
    """
    Replace the root logger's handlers with a single console handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        use_rich: Colored Rich output for development; plain lines otherwise
        library_levels: Overrides for the levels in NOISY_LOGGERS
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(_rich_handler(numeric_level) if use_rich else _plain_handler(numeric_level))

    for name, library_level in {**NOISY_LOGGERS, **(library_levels or {})}.items():
        logging.getLogger(name).setLevel(library_level)

    logging.getLogger(__name__).debug(f"Logging configured: level={level}, rich={use_rich}")


def setup_logging_from_env() -> None:
    """Configure logging from WANDER_LOG_LEVEL and WANDER_LOG_RICH."""
    use_rich = os.getenv("WANDER_LOG_RICH", "true").strip().lower() not in ("0", "false", "no")
    setup_logging(level=os.getenv("WANDER_LOG_LEVEL", "INFO"), use_rich=use_rich)


def setup_dev_logging(level: str = "DEBUG") -> None:
    setup_logging(level=level, use_rich=True)


def setup_prod_logging(level: str = "INFO") -> None:
    setup_logging(level=level, use_rich=False)
