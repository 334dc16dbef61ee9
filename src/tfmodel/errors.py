from __future__ import annotations


class TFModelError(Exception):
    """Base error with a short machine-readable code."""

    default_code = "ETFMODEL"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class LoadError(TFModelError):
    """Model file/bundle could not be read or loaded into a session."""

    default_code = "ELOAD"


class PreconditionError(TFModelError):
    """Convenience accessor used on a model with the wrong input/output count."""

    default_code = "EPRECONDITION"


class RunError(TFModelError):
    """Execution of the model failed; no outputs are returned."""

    default_code = "ERUN"


class UnsupportedDTypeError(TFModelError):
    default_code = "EDTYPE"
