from __future__ import annotations

import pytest

from tfmodel.ir import Graph, GraphValidator, Node, ValidationError


def test_valid_graph_passes_validation() -> None:
    g = Graph()
    g.add_node(Node("x", "Placeholder", attributes={"shape": [-1, 4], "dtype": "float32"}))
    g.add_node(Node("w", "Const"))
    g.add_node(Node("y", "MatMul", ["x", "w"]))
    g.add_node(Node("init", "NoOp", ["^w"]))

    GraphValidator(g).validate()  # should not raise


def test_duplicate_node_name_raises() -> None:
    g = Graph()
    g.add_node(Node("x", "Placeholder"))
    g.add_node(Node("x", "Const"))
    with pytest.raises(ValidationError) as exc:
        GraphValidator(g).validate()
    assert exc.value.code == "EDUP_NODE"
    assert exc.value.node_index == 1


def test_missing_input_reference_raises() -> None:
    g = Graph()
    g.add_node(Node("x", "Placeholder"))
    g.add_node(Node("y", "AddV2", ["x", "z:0"]))  # z missing
    with pytest.raises(ValidationError) as exc:
        GraphValidator(g).validate()
    assert exc.value.code == "EINPUT_MISSING"


def test_missing_control_dependency_raises() -> None:
    g = Graph()
    g.add_node(Node("y", "Identity", ["^ghost"]))
    with pytest.raises(ValidationError) as exc:
        GraphValidator(g).validate()
    assert exc.value.code == "EINPUT_MISSING"


def test_unnamed_node_raises() -> None:
    g = Graph()
    g.add_node(Node("", "Const"))
    with pytest.raises(ValidationError) as exc:
        GraphValidator(g).validate()
    assert exc.value.code == "ENODE_NAME"


def test_get_node() -> None:
    g = Graph()
    g.add_node(Node("x", "Placeholder"))
    assert g.get_node("x") is g.nodes[0]
    assert g.get_node("missing") is None
