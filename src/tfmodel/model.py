"""Model facade over frozen graphs and SavedModels.

A `Model` owns one loaded format state and the session it was loaded into.
Callers address inputs and outputs by layer name for SavedModels and by node
name for frozen graphs; the facade translates to runtime node names before
running the session and back afterwards.

The facade adds no locking. A handle is meant for one logical caller at a
time; sharing it across threads relies on the session's own guarantees for
concurrent `run` calls.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from os import PathLike
from typing import Union

import numpy as np

from tfmodel.config import LoadOptions, SessionOptions
from tfmodel.constants import DEFAULT_SIGNATURE, DEFAULT_TAG, FROZEN_GRAPH_SUFFIX
from tfmodel.errors import LoadError, PreconditionError, RunError
from tfmodel.ir import Graph, SignatureDef, ValidationError, zeros
from tfmodel.parsers import FrozenGraphReader, SavedModelReader
from tfmodel.runtime import Backend, Session, get_backend
from tfmodel.utils import get_logger

logger = get_logger(__name__)


def is_frozen_graph_path(path: str | PathLike[str]) -> bool:
    """Path-only format detection: a trailing ".pb" means frozen graph, anything else SavedModel."""
    return str(path)[-3:] == FROZEN_GRAPH_SUFFIX


@dataclass(frozen=True)
class FrozenGraphState:
    reader: FrozenGraphReader
    session: Session
    input_names: list[str]
    output_names: list[str]


@dataclass(frozen=True)
class SavedModelState:
    reader: SavedModelReader
    session: Session
    # layer names, ordered by node name
    input_names: list[str]
    output_names: list[str]
    node2layer: dict[str, str]
    layer2node: dict[str, str]


ModelState = Union[FrozenGraphState, SavedModelState]


class Model:
    def __init__(
        self,
        model_path: str | PathLike[str] | None = None,
        warmup: bool = False,
        allow_growth: bool = True,
        per_process_gpu_memory_fraction: float = 0.0,
        visible_device_list: str = "",
        *,
        tag: str = DEFAULT_TAG,
        signature: str = DEFAULT_SIGNATURE,
        backend: Backend | None = None,
    ) -> None:
        self._backend = backend
        self._state: ModelState | None = None
        if model_path is not None:
            self.load_model(
                model_path,
                warmup,
                allow_growth,
                per_process_gpu_memory_fraction,
                visible_device_list,
                tag=tag,
                signature=signature,
            )

    @classmethod
    def from_options(
        cls,
        model_path: str | PathLike[str],
        options: LoadOptions,
        *,
        backend: Backend | None = None,
    ) -> Model:
        session = options.session
        return cls(
            model_path,
            options.warmup,
            session.allow_growth,
            session.per_process_gpu_memory_fraction,
            session.visible_device_list,
            tag=options.tag,
            signature=options.signature,
            backend=backend,
        )

    def load_model(
        self,
        model_path: str | PathLike[str],
        warmup: bool = False,
        allow_growth: bool = True,
        per_process_gpu_memory_fraction: float = 0.0,
        visible_device_list: str = "",
        *,
        tag: str = DEFAULT_TAG,
        signature: str = DEFAULT_SIGNATURE,
    ) -> None:
        """
        Load a frozen graph (*.pb) or SavedModel directory.

        On reload the previous session is closed once the new model is ready.
        If loading or warm-up fails, the previous state (if any) stays in place
        and nothing created by the failed load is left open.
        """
        path = str(model_path)
        options = SessionOptions(
            allow_growth=allow_growth,
            per_process_gpu_memory_fraction=per_process_gpu_memory_fraction,
            visible_device_list=visible_device_list,
        )
        backend = self._get_backend()
        if is_frozen_graph_path(path):
            logger.info("Loading frozen graph from %s", path)
            state: ModelState = self._load_frozen_graph(backend, path, options)
        else:
            logger.info("Loading SavedModel from %s (tag=%s, signature=%s)", path, tag, signature)
            state = self._load_saved_model(backend, path, options, tag, signature)

        previous, self._state = self._state, state
        if warmup:
            try:
                self._warmup()
            except Exception:
                self._state = previous
                state.session.close()
                raise
        if previous is not None:
            logger.debug("Closing session of previously loaded model")
            previous.session.close()
        logger.info(
            "Model ready: %d inputs %s, %d outputs %s",
            self.n_inputs,
            self.input_names,
            self.n_outputs,
            self.output_names,
        )

    def _get_backend(self) -> Backend:
        if self._backend is None:
            self._backend = get_backend()
        return self._backend

    @staticmethod
    def _load_frozen_graph(
        backend: Backend, path: str, options: SessionOptions
    ) -> FrozenGraphState:
        graph = backend.load_frozen_graph(path)
        try:
            reader = FrozenGraphReader(graph)
        except ValidationError as e:
            raise LoadError(f"Malformed frozen graph {path}: {e}") from e
        session = backend.create_session(graph, options)
        return FrozenGraphState(
            reader=reader,
            session=session,
            input_names=reader.input_names(),
            output_names=reader.output_names(),
        )

    @staticmethod
    def _load_saved_model(
        backend: Backend, path: str, options: SessionOptions, tag: str, signature: str
    ) -> SavedModelState:
        signatures, session = backend.load_saved_model(path, tag, options)
        try:
            reader = SavedModelReader(signatures, signature)
        except LoadError:
            session.close()
            raise
        node2layer, layer2node = reader.name_tables()
        return SavedModelState(
            reader=reader,
            session=session,
            input_names=reader.input_names(layer_names=True),
            output_names=reader.output_names(layer_names=True),
            node2layer=node2layer,
            layer2node=layer2node,
        )

    def _warmup(self) -> None:
        dummies = [
            zeros(dtype, shape)
            for shape, dtype in zip(self.get_input_shapes(), self.get_input_types())
        ]
        logger.info("Warm-up inference with input shapes %s", [d.shape for d in dummies])
        self.run_positional(dummies)

    def close(self) -> None:
        if self._state is not None:
            self._state.session.close()
            self._state = None

    def __enter__(self) -> Model:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Calls

    def __call__(self, inputs, output_names: Sequence[str] | None = None):
        """
        Dispatch on the input form:
        mapping -> run(), list/tuple -> run_positional(), single tensor -> run_single().
        """
        if isinstance(inputs, Mapping):
            return self.run(inputs, output_names)
        if output_names is not None:
            raise TypeError("output_names can only be given with a mapping of inputs")
        if isinstance(inputs, (list, tuple)):
            return self.run_positional(inputs)
        return self.run_single(inputs)

    def run(
        self,
        inputs: Mapping[str, np.ndarray],
        output_names: Sequence[str] | None = None,
    ) -> dict[str, np.ndarray]:
        """
        Run the model once. Names are layer names (SavedModel) or node names
        (frozen graph). Returns one entry per requested output name; all
        outputs are requested when output_names is None.
        """
        state = self._loaded_state()
        names = list(state.output_names if output_names is None else output_names)
        feeds = {self._node_name(state, name, "input"): tensor for name, tensor in inputs.items()}
        fetches = [self._node_name(state, name, "output") for name in names]
        results = state.session.run(fetches, feeds)
        if len(results) != len(fetches):
            raise RunError(
                f"Session returned {len(results)} tensors for {len(fetches)} requested outputs"
            )
        return dict(zip(names, results))

    def run_single(self, input_tensor: np.ndarray) -> np.ndarray:
        if self.n_inputs != 1 or self.n_outputs != 1:
            raise PreconditionError(
                "Model.run_single() is only available for single-input/single-output "
                f"models. Found {self.n_inputs} inputs and {self.n_outputs} outputs."
            )
        input_name, output_name = self.input_names[0], self.output_names[0]
        return self.run({input_name: input_tensor}, [output_name])[output_name]

    def run_positional(self, input_tensors: Sequence[np.ndarray]) -> list[np.ndarray]:
        """Feed tensors in input_names order; return outputs in output_names order."""
        tensors = list(input_tensors)
        if len(tensors) != self.n_inputs:
            raise PreconditionError(
                f"Model has {self.n_inputs} inputs, but {len(tensors)} input tensors were given"
            )
        output_names = self.output_names
        outputs = self.run(dict(zip(self.input_names, tensors)), output_names)
        return [outputs[name] for name in output_names]

    def _loaded_state(self) -> ModelState:
        if self._state is None:
            raise RunError("Model is not loaded")
        return self._state

    @staticmethod
    def _node_name(state: ModelState, name: str, kind: str) -> str:
        if isinstance(state, FrozenGraphState):
            return name
        node = state.layer2node.get(name)
        if node is None:
            raise RunError(
                f"Unknown {kind} layer '{name}'; known layers: {sorted(state.layer2node)}"
            )
        return node

    # Name resolution

    def layer_to_node(self, layer_name: str) -> str:
        """Runtime node name for a layer name; "" if unknown. Identity for frozen graphs."""
        state = self._state
        if isinstance(state, SavedModelState):
            return state.layer2node.get(layer_name, "")
        if isinstance(state, FrozenGraphState):
            return layer_name
        return ""

    def node_to_layer(self, node_name: str) -> str:
        state = self._state
        if isinstance(state, SavedModelState):
            return state.node2layer.get(node_name, "")
        if isinstance(state, FrozenGraphState):
            return node_name
        return ""

    # Shapes and types

    def get_node_shape(self, name: str) -> list[int]:
        """Declared shape of an input/output by caller-facing name; [] when unknown."""
        state = self._state
        if isinstance(state, SavedModelState):
            return state.reader.node_shape(state.layer2node.get(name, ""))
        if isinstance(state, FrozenGraphState):
            return state.reader.node_shape(name)
        return []

    def get_node_type(self, name: str) -> str | None:
        state = self._state
        if isinstance(state, SavedModelState):
            return state.reader.node_type(state.layer2node.get(name, ""))
        if isinstance(state, FrozenGraphState):
            return state.reader.node_type(name)
        return None

    def get_input_shape(self) -> list[int]:
        self._require_single("get_input_shape", "input", self.n_inputs)
        return self.get_node_shape(self.input_names[0])

    def get_output_shape(self) -> list[int]:
        self._require_single("get_output_shape", "output", self.n_outputs)
        return self.get_node_shape(self.output_names[0])

    def get_input_shapes(self) -> list[list[int]]:
        return [self.get_node_shape(name) for name in self.input_names]

    def get_output_shapes(self) -> list[list[int]]:
        return [self.get_node_shape(name) for name in self.output_names]

    def get_input_type(self) -> str | None:
        self._require_single("get_input_type", "input", self.n_inputs)
        return self.get_node_type(self.input_names[0])

    def get_output_type(self) -> str | None:
        self._require_single("get_output_type", "output", self.n_outputs)
        return self.get_node_type(self.output_names[0])

    def get_input_types(self) -> list[str | None]:
        return [self.get_node_type(name) for name in self.input_names]

    def get_output_types(self) -> list[str | None]:
        return [self.get_node_type(name) for name in self.output_names]

    @staticmethod
    def _require_single(method: str, kind: str, count: int) -> None:
        if count != 1:
            raise PreconditionError(
                f"Model.{method}() is only available for single-{kind} models. "
                f"Found {count} {kind}s."
            )

    def get_info_string(self) -> str:
        state = self._state
        if state is None:
            return ""
        return state.reader.info_string()

    # Accessors

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def is_frozen_graph(self) -> bool:
        return isinstance(self._state, FrozenGraphState)

    @property
    def is_saved_model(self) -> bool:
        return isinstance(self._state, SavedModelState)

    @property
    def session(self) -> Session | None:
        return self._state.session if self._state is not None else None

    @property
    def frozen_graph(self) -> Graph | None:
        if isinstance(self._state, FrozenGraphState):
            return self._state.reader.graph
        return None

    @property
    def saved_model(self) -> dict[str, SignatureDef] | None:
        """All signatures of the loaded SavedModel."""
        if isinstance(self._state, SavedModelState):
            return dict(self._state.reader.signatures)
        return None

    @property
    def signature(self) -> str | None:
        if isinstance(self._state, SavedModelState):
            return self._state.reader.signature
        return None

    @property
    def n_inputs(self) -> int:
        return len(self._state.input_names) if self._state is not None else 0

    @property
    def n_outputs(self) -> int:
        return len(self._state.output_names) if self._state is not None else 0

    @property
    def input_names(self) -> list[str]:
        return list(self._state.input_names) if self._state is not None else []

    @property
    def output_names(self) -> list[str]:
        return list(self._state.output_names) if self._state is not None else []
