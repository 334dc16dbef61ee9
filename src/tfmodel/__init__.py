"""Load and run TensorFlow frozen graphs and SavedModels through one interface."""

from .config import LoadOptions, SessionOptions
from .constants import DEFAULT_SIGNATURE, DEFAULT_TAG
from .errors import LoadError, PreconditionError, RunError, TFModelError, UnsupportedDTypeError
from .model import Model, is_frozen_graph_path

__all__ = [
    "Model",
    "is_frozen_graph_path",
    "LoadOptions",
    "SessionOptions",
    "DEFAULT_TAG",
    "DEFAULT_SIGNATURE",
    "TFModelError",
    "LoadError",
    "PreconditionError",
    "RunError",
    "UnsupportedDTypeError",
]

__version__ = "0.1.0"
