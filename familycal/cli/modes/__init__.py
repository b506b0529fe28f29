"""familycal CLI commands.

Maps each command name to its handler coroutine.
"""

from typing import Any, Awaitable, Callable

from .extend import run_extend_mode
from .init_db import run_init_db_mode

MODE_REGISTRY: dict[str, Callable[[Any], Awaitable[int]]] = {
    "extend": run_extend_mode,
    "init-db": run_init_db_mode,
}


def get_mode_handler(name: str) -> Callable[[Any], Awaitable[int]]:
    """Get the handler for a command.

    Raises:
        KeyError: If no handler is registered under ``name``
    """
    return MODE_REGISTRY[name]


__all__ = ["MODE_REGISTRY", "get_mode_handler", "run_extend_mode", "run_init_db_mode"]
