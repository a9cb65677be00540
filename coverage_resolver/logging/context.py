"""Context propagation for structured logging.

Fields pushed here are injected into every log record emitted inside the scope,
so a single resolution call can be traced through city detection, each cascade
strategy and the final decision. Context uses contextvars and is therefore safe
across threads and asyncio tasks.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional


LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Get a copy of the current logging context."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge new fields into the logging context.

    Use pop_log_context() with the returned token to restore the previous state.

    Args:
        **kwargs: Key-value pairs to add to the logging context

    Returns:
        Token that can be used to restore previous context state

    Example:
        >>> token = push_log_context(address_key="3f1c0a9be2d4c771")
        >>> # ... resolve, every record carries address_key ...
        >>> pop_log_context(token)
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context to the state captured by ``token``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Clear all logging context fields.

    This is primarily useful for testing.
    """
    LogContextVar.set({})


class log_context:
    """Context manager for scoped logging context.

    Pushes context on entry and pops on exit, even if an exception occurs.

    Example:
        >>> with log_context(address_key="3f1c0a9be2d4c771", candidate_count=412):
        ...     logger.info("Detecting city")
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False  # Don't suppress exceptions
