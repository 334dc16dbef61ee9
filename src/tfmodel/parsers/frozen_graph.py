from __future__ import annotations

from tfmodel.constants import PLACEHOLDER_OP, UNLIKELY_OUTPUT_OPS
from tfmodel.ir import Graph, GraphValidator, build_consumer_map, format_shape


class FrozenGraphReader:
    """
    Structural input/output discovery on a frozen graph.

    Frozen graphs carry no signature, so inputs are the Placeholder nodes and
    outputs are the graph sinks that are not bookkeeping ops. The output rule is
    a heuristic aimed at single-output graphs; graphs with several disconnected
    sinks may yield extra outputs.
    """

    def __init__(self, graph: Graph, *, validate: bool = True) -> None:
        if validate:
            GraphValidator(graph).validate()
        self.graph = graph

    def input_names(self) -> list[str]:
        return [node.name for node in self.graph.nodes if node.op_type == PLACEHOLDER_OP]

    def output_names(self) -> list[str]:
        consumers = build_consumer_map(self.graph)
        return [
            node.name
            for node in self.graph.nodes
            if node.name not in consumers and node.op_type not in UNLIKELY_OUTPUT_OPS
        ]

    def node_shape(self, name: str) -> list[int]:
        """Declared shape of a node, [] when the node or its shape attribute is missing."""
        node = self.graph.get_node(name)
        if node is None or node.attributes.get("shape") is None:
            return []
        return list(node.attributes["shape"])

    def node_type(self, name: str) -> str | None:
        node = self.graph.get_node(name)
        if node is None:
            return None
        return node.attributes.get("dtype")

    def info_string(self) -> str:
        inputs = self.input_names()
        outputs = self.output_names()
        lines = ["FrozenGraph Info:", f"Inputs: {len(inputs)}"]
        for name in inputs:
            lines.extend(self._node_lines(name))
        lines.append(f"Outputs: {len(outputs)}")
        for name in outputs:
            lines.extend(self._node_lines(name))
        return "\n".join(lines) + "\n"

    def _node_lines(self, name: str) -> list[str]:
        return [
            f"  {name}",
            f"    Shape: {format_shape(self.node_shape(name))}",
            f"    DataType: {self.node_type(name) or 'invalid'}",
        ]
