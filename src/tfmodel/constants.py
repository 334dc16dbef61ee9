"""Format conventions shared by the readers and the model facade."""

FROZEN_GRAPH_SUFFIX = ".pb"

# SavedModel
DEFAULT_TAG = "serve"
DEFAULT_SIGNATURE = "serving_default"

# Frozen graph
PLACEHOLDER_OP = "Placeholder"
UNLIKELY_OUTPUT_OPS = frozenset({"Const", "Assign", "NoOp", "Placeholder", "Assert"})

DEFAULT_BACKEND = "tensorflow"
