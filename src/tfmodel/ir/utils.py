from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tfmodel.ir.graph import Graph


def node_name_from_ref(ref: str) -> str:
    """
    Strip the control-dependency prefix and output index from an input reference.
    "^init" -> "init", "split:1" -> "split", "x" -> "x".
    """
    name = ref[1:] if ref.startswith("^") else ref
    base, sep, index = name.rpartition(":")
    if sep and index.isdigit():
        return base
    return name


def build_consumer_map(graph: Graph) -> dict[str, list[int]]:
    """
    Map node name -> list of consuming node indices.
    Data and control-dependency references both count as consumption.
    """
    consumers: dict[str, list[int]] = {}
    for idx, node in enumerate(graph.nodes):
        for ref in node.inputs:
            consumers.setdefault(node_name_from_ref(ref), []).append(idx)
    return consumers


def format_shape(shape: list[int]) -> str:
    return "[" + ", ".join(str(d) for d in shape) + "]"
