from typing import Optional


class WanderError(Exception):
    """Base exception for all recoverable Wiki Wander errors."""
    pass


class NotFoundError(WanderError):
    """Raised when a title lookup does not resolve to an article."""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f'Article "{title}" not found.')


class SetupIncompleteError(WanderError):
    """Raised when a game is started without both articles selected."""

    def __init__(self, message: str = "Please select both start and target articles."):
        super().__init__(message)


class DuplicateArticlesError(WanderError):
    """Raised when the start and target articles are the same article."""

    def __init__(self, title: str):
        self.title = title
        super().__init__("Start and target articles cannot be the same.")


class FetchFailureError(WanderError):
    """Raised when article content cannot be loaded."""

    def __init__(self, title: str, reason: Optional[str] = None):
        self.title = title
        self.reason = reason
        message = f"Failed to load {title}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class HintFailureError(WanderError):
    """Base exception for all hint provider errors."""
    pass


class HintRateLimitError(HintFailureError):
    """Raised when a hint provider rate limit is exceeded."""
    pass


class HintTimeoutError(HintFailureError):
    """Raised when a hint provider call times out."""
    pass
