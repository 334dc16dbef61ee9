"""Graph and signature data structures and analysis utilities."""

from .dtypes import dtype_enum, dtype_name, zeros
from .graph import Graph, GraphValidator, Node, SignatureDef, TensorInfo, ValidationError
from .utils import build_consumer_map, format_shape, node_name_from_ref

__all__ = [
    "Graph",
    "Node",
    "TensorInfo",
    "SignatureDef",
    "GraphValidator",
    "ValidationError",
    "build_consumer_map",
    "node_name_from_ref",
    "format_shape",
    "dtype_name",
    "dtype_enum",
    "zeros",
]
