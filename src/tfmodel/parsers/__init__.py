"""Readers for the frozen graph and SavedModel formats."""

from .frozen_graph import FrozenGraphReader
from .saved_model import SavedModelReader

__all__ = ["FrozenGraphReader", "SavedModelReader"]
