"""Element type tables shared by the readers and the warm-up call.

Dtypes are carried around as numpy-style names ("float32", "int64", ...).
TensorFlow-only types without a numpy counterpart keep their TensorFlow name.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np

from tfmodel.errors import UnsupportedDTypeError

# tensorflow.DataType enum values (types.proto)
_DTYPE_MAP: dict[int, str] = {
    1: "float32",
    2: "float64",
    3: "int32",
    4: "uint8",
    5: "int16",
    6: "int8",
    7: "string",
    8: "complex64",
    9: "int64",
    10: "bool",
    11: "qint8",
    12: "quint8",
    13: "qint32",
    14: "bfloat16",
    15: "qint16",
    16: "quint16",
    17: "uint16",
    18: "complex128",
    19: "float16",
    22: "uint32",
    23: "uint64",
}

DT_INVALID = 0


def dtype_name(enum_value: int) -> str | None:
    """Name for a DataType enum value; None for DT_INVALID or unknown values."""
    return _DTYPE_MAP.get(int(enum_value))


def dtype_enum(name: str) -> int:
    for value, candidate in _DTYPE_MAP.items():
        if candidate == name:
            return value
    return DT_INVALID


ZeroFactory = Callable[[tuple[int, ...]], np.ndarray]


def _numeric(dtype: str) -> ZeroFactory:
    return lambda shape: np.zeros(shape, dtype=dtype)


def _string(shape: tuple[int, ...]) -> np.ndarray:
    return np.full(shape, b"", dtype=object)


# Quantized types are fed through their storage type.
_ZERO_FACTORIES: dict[str, ZeroFactory] = {
    "float16": _numeric("float16"),
    "float32": _numeric("float32"),
    "float64": _numeric("float64"),
    "int8": _numeric("int8"),
    "int16": _numeric("int16"),
    "int32": _numeric("int32"),
    "int64": _numeric("int64"),
    "uint8": _numeric("uint8"),
    "uint16": _numeric("uint16"),
    "uint32": _numeric("uint32"),
    "uint64": _numeric("uint64"),
    "bool": _numeric("bool"),
    "complex64": _numeric("complex64"),
    "complex128": _numeric("complex128"),
    "qint8": _numeric("int8"),
    "quint8": _numeric("uint8"),
    "qint16": _numeric("int16"),
    "quint16": _numeric("uint16"),
    "qint32": _numeric("int32"),
    "string": _string,
}


def supported_zero_dtypes() -> list[str]:
    return sorted(_ZERO_FACTORIES)


def zeros(dtype: str | None, shape: Sequence[int]) -> np.ndarray:
    """
    Zero-valued tensor of the given dtype and shape.
    Unknown dimensions (-1) become 1. Raises UnsupportedDTypeError when no
    zero value is defined for the dtype, including a missing (None) dtype.
    """
    factory = _ZERO_FACTORIES.get(dtype) if dtype is not None else None
    if factory is None:
        raise UnsupportedDTypeError(
            f"Cannot synthesize a zero tensor for dtype '{dtype}'; "
            f"supported: {', '.join(supported_zero_dtypes())}"
        )
    concrete = tuple(1 if d == -1 else int(d) for d in shape)
    return factory(concrete)
