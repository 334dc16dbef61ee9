from __future__ import annotations

import numpy as np
import pytest

from tfmodel import LoadError, Model, RunError
from tfmodel.ir import SignatureDef, TensorInfo

DIGITS = "models/digits"


def _softmax_like(feeds):
    batch = feeds["x:0"].shape[0]
    return np.full((batch, 10), 0.1, dtype=np.float32)


@pytest.fixture
def digits_backend(fake_backend):
    fake_backend.add_saved_model(
        DIGITS,
        {
            "serving_default": SignatureDef(
                inputs={"image": TensorInfo("x:0", "float32", [-1, 28, 28])},
                outputs={"probabilities": TensorInfo("y:0", "float32", [-1, 10])},
            )
        },
        {"y:0": _softmax_like},
    )
    return fake_backend


def test_digit_classifier_scenario(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    assert model.is_loaded and model.is_saved_model and not model.is_frozen_graph
    assert model.n_inputs == 1 and model.n_outputs == 1
    assert model.input_names == ["image"]
    assert model.output_names == ["probabilities"]
    assert model.get_input_shape() == [-1, 28, 28]
    assert model.get_output_shape() == [-1, 10]
    assert model.get_input_type() == "float32"
    assert model.get_output_type() == "float32"

    out = model(np.zeros((1, 28, 28), dtype=np.float32))
    assert out.shape == (1, 10)


def test_run_translates_layer_names_to_nodes(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    tensor = np.zeros((2, 28, 28), dtype=np.float32)
    outputs = model({"image": tensor}, ["probabilities"])

    assert set(outputs) == {"probabilities"}
    assert outputs["probabilities"].shape == (2, 10)
    fetches, feeds = digits_backend.sessions[0].calls[-1]
    assert fetches == ["y:0"]
    assert list(feeds) == ["x:0"]


def test_run_defaults_to_all_outputs(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    outputs = model.run({"image": np.zeros((1, 28, 28), dtype=np.float32)})
    assert list(outputs) == ["probabilities"]


def test_unknown_layer_is_run_error_without_engine_call(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    with pytest.raises(RunError, match="Unknown input layer 'x:0'"):
        model.run({"x:0": np.zeros((1, 28, 28), dtype=np.float32)})
    with pytest.raises(RunError, match="Unknown output layer"):
        model.run({"image": np.zeros((1, 28, 28), dtype=np.float32)}, ["logits"])
    assert digits_backend.sessions[0].calls == []


def test_layer_node_round_trip(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    for layer in model.input_names + model.output_names:
        assert model.node_to_layer(model.layer_to_node(layer)) == layer
    for node in ("x:0", "y:0"):
        assert model.layer_to_node(model.node_to_layer(node)) == node
    assert model.layer_to_node("nope") == ""
    assert model.node_to_layer("nope:0") == ""


def test_positional_call_on_saved_model(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    (probabilities,) = model([np.zeros((3, 28, 28), dtype=np.float32)])
    assert probabilities.shape == (3, 10)


def test_session_options_passed_through(digits_backend) -> None:
    Model(DIGITS, False, False, 0.5, "0,1", backend=digits_backend)
    options = digits_backend.sessions[0].options
    assert options.allow_growth is False
    assert options.per_process_gpu_memory_fraction == 0.5
    assert options.visible_device_list == "0,1"


def test_warmup_feeds_batch_of_one(digits_backend) -> None:
    model = Model(DIGITS, warmup=True, backend=digits_backend)
    (fetches, feeds), = digits_backend.sessions[0].calls
    assert fetches == ["y:0"]
    assert feeds["x:0"].shape == (1, 28, 28)
    assert feeds["x:0"].dtype == np.float32
    assert not feeds["x:0"].any()
    assert model.is_loaded


def test_missing_bundle_is_load_error(fake_backend) -> None:
    with pytest.raises(LoadError):
        Model("models/missing", backend=fake_backend)


def test_unknown_tag_is_load_error(digits_backend) -> None:
    with pytest.raises(LoadError, match="tag"):
        Model(DIGITS, tag="train", backend=digits_backend)


def test_missing_signature_closes_session(digits_backend) -> None:
    with pytest.raises(LoadError, match="predict"):
        Model(DIGITS, signature="predict", backend=digits_backend)
    assert digits_backend.sessions[0].closed


def test_info_string(digits_backend) -> None:
    model = Model(DIGITS, backend=digits_backend)
    info = model.get_info_string()
    assert info.startswith("SavedModel Info:\n")
    assert "      image: x:0\n" in info
    assert "      probabilities: y:0\n" in info
    assert info == model.get_info_string()
    assert model.signature == "serving_default"
    assert set(model.saved_model) == {"serving_default"}
    assert model.frozen_graph is None
