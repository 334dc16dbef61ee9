from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RegisteredComponent:
    kind: str
    name: str
    factory: Callable[[], Any]


class Registry:
    """
    Named factories grouped by kind, e.g. ("backend", "tensorflow").
    Factories run on every create() so heavy imports stay deferred until use.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], RegisteredComponent] = {}

    def register(self, kind: str, name: str, factory: Callable[[], Any]) -> None:
        """Register or replace the factory for (kind, name)."""
        self._items[(kind, name)] = RegisteredComponent(kind, name, factory)

    def unregister(self, kind: str, name: str) -> None:
        self._items.pop((kind, name), None)

    def get(self, kind: str, name: str) -> RegisteredComponent | None:
        return self._items.get((kind, name))

    def names(self, kind: str) -> list[str]:
        return sorted(name for item_kind, name in self._items if item_kind == kind)

    def create(self, kind: str, name: str) -> Any:
        item = self.get(kind, name)
        if item is None:
            available = ", ".join(self.names(kind)) or "none"
            raise KeyError(f"No {kind} named '{name}' (available: {available})")
        return item.factory()


global_registry = Registry()
