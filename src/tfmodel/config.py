from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tfmodel.constants import DEFAULT_SIGNATURE, DEFAULT_TAG

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SessionOptions:
    """
    GPU options for the execution context, passed through unchanged.

    per_process_gpu_memory_fraction: 0 leaves the memory fraction unconstrained.
    visible_device_list: comma-separated device indices, "" for all devices.
    """

    allow_growth: bool = True
    per_process_gpu_memory_fraction: float = 0.0
    visible_device_list: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "allow_growth": self.allow_growth,
            "per_process_gpu_memory_fraction": self.per_process_gpu_memory_fraction,
            "visible_device_list": self.visible_device_list,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionOptions:
        return cls(
            allow_growth=bool(data.get("allow_growth", True)),
            per_process_gpu_memory_fraction=float(
                data.get("per_process_gpu_memory_fraction", 0.0)
            ),
            visible_device_list=str(data.get("visible_device_list", "")),
        )


@dataclass(frozen=True)
class LoadOptions:
    warmup: bool = False
    tag: str = DEFAULT_TAG
    signature: str = DEFAULT_SIGNATURE
    session: SessionOptions = field(default_factory=SessionOptions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "warmup": self.warmup,
            "tag": self.tag,
            "signature": self.signature,
            "session": self.session.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LoadOptions:
        return cls(
            warmup=bool(data.get("warmup", False)),
            tag=str(data.get("tag", DEFAULT_TAG)),
            signature=str(data.get("signature", DEFAULT_SIGNATURE)),
            session=SessionOptions.from_dict(data.get("session", {})),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoadOptions:
        """Read TFMODEL_* variables; unset variables keep their defaults."""
        env = os.environ if environ is None else environ
        session = SessionOptions(
            allow_growth=env.get("TFMODEL_ALLOW_GROWTH", "true").lower() in _TRUE,
            per_process_gpu_memory_fraction=float(
                env.get("TFMODEL_GPU_MEMORY_FRACTION", "0")
            ),
            visible_device_list=env.get("TFMODEL_VISIBLE_DEVICES", ""),
        )
        return cls(
            warmup=env.get("TFMODEL_WARMUP", "false").lower() in _TRUE,
            tag=env.get("TFMODEL_TAG", DEFAULT_TAG),
            signature=env.get("TFMODEL_SIGNATURE", DEFAULT_SIGNATURE),
            session=session,
        )
