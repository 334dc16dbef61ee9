"""TensorFlow implementation of the Backend/Session protocols (graph mode, tf.compat.v1)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np
import tensorflow as tf
from google.protobuf.message import DecodeError

from tfmodel.config import SessionOptions
from tfmodel.errors import LoadError, RunError
from tfmodel.ir import Graph, Node, SignatureDef, TensorInfo, dtype_name
from tfmodel.utils import get_logger

logger = get_logger(__name__)


def _tensor_name(name: str) -> str:
    # Op names cannot contain ':', so a bare name refers to output 0
    return name if ":" in name else f"{name}:0"


def _shape_dims(shape_proto: Any) -> list[int]:
    if shape_proto.unknown_rank:
        return []
    return [int(d.size) for d in shape_proto.dim]


def graph_from_proto(graph_def: tf.compat.v1.GraphDef) -> Graph:
    """Convert a GraphDef into the package Graph. The proto is kept in metadata["graph_def"]."""
    graph = Graph(metadata={"graph_def": graph_def})
    for node_def in graph_def.node:
        attrs: dict[str, Any] = {}
        if "shape" in node_def.attr and node_def.attr["shape"].WhichOneof("value") == "shape":
            attrs["shape"] = _shape_dims(node_def.attr["shape"].shape)
        if "dtype" in node_def.attr and node_def.attr["dtype"].WhichOneof("value") == "type":
            attrs["dtype"] = dtype_name(node_def.attr["dtype"].type)
        graph.add_node(
            Node(
                name=node_def.name,
                op_type=node_def.op,
                inputs=list(node_def.input),
                attributes=attrs,
                metadata={"device": node_def.device},
            )
        )
    return graph


def _tensor_info(info: Any) -> TensorInfo:
    return TensorInfo(
        name=info.name,
        dtype=dtype_name(info.dtype),
        shape=_shape_dims(info.tensor_shape),
    )


def signature_from_proto(signature_def: Any) -> SignatureDef:
    return SignatureDef(
        inputs={key: _tensor_info(info) for key, info in signature_def.inputs.items()},
        outputs={key: _tensor_info(info) for key, info in signature_def.outputs.items()},
    )


class SessionFactory:
    """Builds graph-mode sessions configured from SessionOptions."""

    def __init__(self, options: SessionOptions) -> None:
        self.options = options

    def config(self) -> tf.compat.v1.ConfigProto:
        config = tf.compat.v1.ConfigProto()
        gpu_options = config.gpu_options
        gpu_options.allow_growth = self.options.allow_growth
        gpu_options.per_process_gpu_memory_fraction = (
            self.options.per_process_gpu_memory_fraction
        )
        gpu_options.visible_device_list = self.options.visible_device_list
        return config

    def new_session(self, graph: tf.Graph) -> tf.compat.v1.Session:
        try:
            return tf.compat.v1.Session(graph=graph, config=self.config())
        except (tf.errors.OpError, ValueError) as e:
            raise LoadError(f"Failed to create new session: {e}") from e


class TFSession:
    def __init__(self, session: tf.compat.v1.Session) -> None:
        self._session = session

    @property
    def raw(self) -> tf.compat.v1.Session:
        return self._session

    @property
    def graph(self) -> tf.Graph:
        return self._session.graph

    def run(self, fetches: list[str], feeds: Mapping[str, np.ndarray]) -> list[np.ndarray]:
        feed_dict = {_tensor_name(name): value for name, value in feeds.items()}
        try:
            results = self._session.run(
                [_tensor_name(name) for name in fetches], feed_dict=feed_dict
            )
        except (tf.errors.OpError, ValueError, TypeError, KeyError) as e:
            raise RunError(f"Failed to run model: {e}") from e
        return [np.asarray(r) for r in results]

    def close(self) -> None:
        self._session.close()


class TensorFlowBackend:
    def load_frozen_graph(self, path: str) -> Graph:
        graph_def = tf.compat.v1.GraphDef()
        try:
            with tf.io.gfile.GFile(path, "rb") as f:
                graph_def.ParseFromString(f.read())
        except (tf.errors.OpError, OSError, DecodeError) as e:
            raise LoadError(f"Failed to load frozen graph: {e}") from e
        logger.debug("Parsed frozen graph %s with %d nodes", path, len(graph_def.node))
        return graph_from_proto(graph_def)

    def create_session(self, graph: Graph, options: SessionOptions) -> TFSession:
        graph_def = graph.metadata.get("graph_def")
        if graph_def is None:
            raise LoadError("Graph carries no GraphDef; load it with TensorFlowBackend")
        tf_graph = tf.Graph()
        try:
            with tf_graph.as_default():
                tf.compat.v1.import_graph_def(graph_def, name="")
        except (ValueError, tf.errors.OpError) as e:
            raise LoadError(f"Failed to load graph into session: {e}") from e
        return TFSession(SessionFactory(options).new_session(tf_graph))

    def load_saved_model(
        self, path: str, tag: str, options: SessionOptions
    ) -> tuple[dict[str, SignatureDef], TFSession]:
        session = SessionFactory(options).new_session(tf.Graph())
        try:
            meta_graph = tf.compat.v1.saved_model.load(session, [tag], path)
        except (OSError, RuntimeError, ValueError, tf.errors.OpError) as e:
            session.close()
            raise LoadError(f"Failed to load SavedModel: {e}") from e
        signatures = {
            name: signature_from_proto(sig)
            for name, sig in meta_graph.signature_def.items()
        }
        logger.debug("Loaded SavedModel %s with signatures %s", path, sorted(signatures))
        return signatures, TFSession(session)
