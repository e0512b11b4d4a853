"""Key-token dispatch table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

R = TypeVar("R")


@dataclass(frozen=True)
class KeyBinding(Generic[R]):
    """Mapping from one or more key tokens to a single action callback."""

    keys: tuple[str, ...]
    handler: Callable[[], R]


class KeyRegistry(Generic[R]):
    """Exact-match key dispatch; unbound keys dispatch to ``None``."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], R]] = {}

    def register(self, *bindings: KeyBinding[R]) -> KeyRegistry[R]:
        """Register bindings, later ones overwriting earlier keys."""
        for binding in bindings:
            for key in binding.keys:
                self._handlers[key] = binding.handler
        return self

    def dispatch(self, key: str) -> R | None:
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()
