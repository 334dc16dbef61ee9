from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tfmodel.ir.utils import node_name_from_ref


@dataclass
class TensorInfo:
    """Declared tensor of a signature: runtime node name, dtype and shape."""

    name: str
    dtype: str | None
    shape: list[int] = field(default_factory=list)


@dataclass
class SignatureDef:
    inputs: dict[str, TensorInfo] = field(default_factory=dict)
    outputs: dict[str, TensorInfo] = field(default_factory=dict)

    def tensors(self) -> list[tuple[str, TensorInfo]]:
        """Inputs followed by outputs as (layer name, tensor info) pairs."""
        return list(self.inputs.items()) + list(self.outputs.items())


@dataclass
class Node:
    name: str
    op_type: str
    inputs: list[str] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Graph:
    nodes: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_node(self, node: Node) -> None:
        self.nodes.append(node)

    def get_node(self, name: str) -> Node | None:
        for node in self.nodes:
            if node.name == name:
                return node
        return None


class ValidationError(Exception):
    """Graph validation error with optional code and context."""

    def __init__(
        self, message: str, code: str = "EVALID", node_index: int | None = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.node_index = node_index


class GraphValidator:
    """Validates the structural invariants of a frozen graph definition."""

    def __init__(self, graph: Graph) -> None:
        self.graph = graph

    def validate(self) -> None:
        self._validate_names()
        self._validate_unique_names()
        self._validate_references_exist()

    def _validate_names(self) -> None:
        for idx, node in enumerate(self.graph.nodes):
            if not node.name or not isinstance(node.name, str):
                raise ValidationError(
                    f"Node {idx} has no name", code="ENODE_NAME", node_index=idx
                )
            if not node.op_type:
                raise ValidationError(
                    f"Node '{node.name}' has no op type",
                    code="ENODE_OP",
                    node_index=idx,
                )

    def _validate_unique_names(self) -> None:
        seen: dict[str, int] = {}
        for idx, node in enumerate(self.graph.nodes):
            if node.name in seen:
                raise ValidationError(
                    f"Duplicate node name '{node.name}' at node {idx} and {seen[node.name]}",
                    code="EDUP_NODE",
                    node_index=idx,
                )
            seen[node.name] = idx

    def _validate_references_exist(self) -> None:
        names = {node.name for node in self.graph.nodes}
        for idx, node in enumerate(self.graph.nodes):
            for ref in node.inputs:
                if node_name_from_ref(ref) not in names:
                    raise ValidationError(
                        f"Node '{node.name}' input '{ref}' not found in graph",
                        code="EINPUT_MISSING",
                        node_index=idx,
                    )
