"""Execution backends. TensorFlow is imported only when its backend is created."""

from __future__ import annotations

from tfmodel.constants import DEFAULT_BACKEND
from tfmodel.plugins import global_registry

from .base import Backend, Session


def _tensorflow_backend() -> Backend:
    from .tf_backend import TensorFlowBackend

    return TensorFlowBackend()


global_registry.register("backend", DEFAULT_BACKEND, _tensorflow_backend)


def get_backend(name: str = DEFAULT_BACKEND) -> Backend:
    return global_registry.create("backend", name)


__all__ = ["Backend", "Session", "get_backend"]
