"""Job handler registry."""

from collections.abc import Callable
from typing import Optional


class JobRegistry:
    """Registry mapping job names to async handlers."""

    def __init__(self):
        self._handlers: dict[str, Callable] = {}

    def handler(self, name: str):
        """
        Decorator to register a job handler.

        Usage:
            @registry.handler("send-release-reminder")
            async def send_release_reminder(ctx, payload):
                ...
        """

        def decorator(func: Callable):
            self._handlers[name] = func
            return func

        return decorator

    def register(self, name: str, func: Callable) -> None:
        """Register a handler without the decorator, e.g. a bound method."""
        self._handlers[name] = func

    def get_handler(self, name: str) -> Optional[Callable]:
        """Get a handler by name."""
        return self._handlers.get(name)

    def all_handlers(self) -> dict[str, Callable]:
        """Get all registered handlers."""
        return self._handlers.copy()
