from __future__ import annotations

from collections.abc import Callable, Mapping

import numpy as np
import pytest

from tfmodel.config import SessionOptions
from tfmodel.constants import DEFAULT_BACKEND
from tfmodel.errors import LoadError, RunError
from tfmodel.ir import Graph, SignatureDef
from tfmodel.plugins import global_registry

Handler = Callable[[Mapping[str, np.ndarray]], np.ndarray]


class FakeSession:
    """In-memory session: each fetchable node name maps to a function of the feeds."""

    def __init__(self, handlers: Mapping[str, Handler], options: SessionOptions) -> None:
        self.handlers = dict(handlers)
        self.options = options
        self.calls: list[tuple[list[str], dict[str, np.ndarray]]] = []
        self.closed = False

    def run(self, fetches: list[str], feeds: Mapping[str, np.ndarray]) -> list[np.ndarray]:
        if self.closed:
            raise RunError("Session is closed")
        self.calls.append((list(fetches), dict(feeds)))
        results = []
        for name in fetches:
            if name not in self.handlers:
                raise RunError(f"Failed to run model: unknown node '{name}'")
            results.append(self.handlers[name](feeds))
        return results

    def close(self) -> None:
        self.closed = True


class FakeBackend:
    def __init__(self) -> None:
        self.graphs: dict[str, Graph] = {}
        self.saved_models: dict[str, dict[str, SignatureDef]] = {}
        self.handlers: dict[str, dict[str, Handler]] = {}
        self.sessions: list[FakeSession] = []

    def add_frozen_graph(self, path: str, graph: Graph, handlers: Mapping[str, Handler] | None = None) -> None:
        self.graphs[path] = graph
        self.handlers[path] = dict(handlers or {})

    def add_saved_model(
        self,
        path: str,
        signatures: Mapping[str, SignatureDef],
        handlers: Mapping[str, Handler] | None = None,
    ) -> None:
        self.saved_models[path] = dict(signatures)
        self.handlers[path] = dict(handlers or {})

    def load_frozen_graph(self, path: str) -> Graph:
        if path not in self.graphs:
            raise LoadError(f"Failed to load frozen graph: {path} not found")
        graph = self.graphs[path]
        graph.metadata["path"] = path
        return graph

    def create_session(self, graph: Graph, options: SessionOptions) -> FakeSession:
        session = FakeSession(self.handlers[graph.metadata["path"]], options)
        self.sessions.append(session)
        return session

    def load_saved_model(
        self, path: str, tag: str, options: SessionOptions
    ) -> tuple[dict[str, SignatureDef], FakeSession]:
        if path not in self.saved_models:
            raise LoadError(f"Failed to load SavedModel: {path} not found")
        if tag != "serve":
            raise LoadError(f"Failed to load SavedModel: tag '{tag}' not found")
        session = FakeSession(self.handlers[path], options)
        self.sessions.append(session)
        return dict(self.saved_models[path]), session


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def registered_fake_backend(fake_backend: FakeBackend):
    """Install the fake as the default backend for code that resolves it from the registry."""
    original = global_registry.get("backend", DEFAULT_BACKEND)
    global_registry.register("backend", DEFAULT_BACKEND, lambda: fake_backend)
    yield fake_backend
    if original is not None:
        global_registry.register("backend", DEFAULT_BACKEND, original.factory)
