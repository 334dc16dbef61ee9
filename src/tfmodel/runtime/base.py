from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import numpy as np

from tfmodel.config import SessionOptions
from tfmodel.ir import Graph, SignatureDef


class Session(Protocol):
    """Execution context a model is loaded into."""

    def run(self, fetches: list[str], feeds: Mapping[str, np.ndarray]) -> list[np.ndarray]:
        """Evaluate `fetches` given `feeds`, one result per fetch in order. Raises RunError."""
        ...

    def close(self) -> None: ...


class Backend(Protocol):
    """Deserialization and session construction for both model formats."""

    def load_frozen_graph(self, path: str) -> Graph: ...

    def create_session(self, graph: Graph, options: SessionOptions) -> Session: ...

    def load_saved_model(
        self, path: str, tag: str, options: SessionOptions
    ) -> tuple[dict[str, SignatureDef], Session]: ...
