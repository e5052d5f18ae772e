"""Typed configuration schema for oracle comparison runs.

Usage
-----
>>> from refnorm.config.schema import LayernormConf
>>> cfg = LayernormConf(m=64, n=768, x_dtype="float16", post_op="FastGelu")

The resulting ``cfg`` can be passed straight to ``refnorm.harness.compare``.
Dtypes are kept as strings so dot-list overrides (``x_dtype=bfloat16``)
work without special casing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import torch

_DTYPES: dict[str, torch.dtype] = {
    "float64": torch.float64,
    "float32": torch.float32,
    "float16": torch.float16,
    "bfloat16": torch.bfloat16,
    # short aliases
    "fp64": torch.float64,
    "fp32": torch.float32,
    "fp16": torch.float16,
    "bf16": torch.bfloat16,
}


def resolve_dtype(name: str | torch.dtype) -> torch.dtype:
    if isinstance(name, torch.dtype):
        return name
    if name not in _DTYPES:
        raise ValueError(f"Unknown dtype '{name}', expected one of {sorted(_DTYPES)}")
    return _DTYPES[name]


# -----------------------------------------------------------------------------
#  LayerNorm comparison run
# -----------------------------------------------------------------------------

@dataclass
class LayernormConf:
    """One reference-vs-candidate LayerNorm comparison."""

    # Geometry
    m: int = 16                         # rows
    n: int = 64                         # features (reduced axis)
    epsilon: float = 1e-5

    # Precisions
    x_dtype: str = "float32"
    gamma_dtype: str = "float32"
    beta_dtype: str = "float32"
    y_dtype: str = "float32"
    save_dtype: str = "float32"
    compute_dtype: str = "float32"

    # Epilogue & data
    post_op: str = "PassThrough"
    init: str = "normal"                # zeros | ones | normal | uniform | arange
    seed: int = 0

    # Raw metadata handed to the operator; None → (m, n).  Lets a config
    # describe shapes the operator must reject.
    lengths: Optional[Sequence[int]] = None
    reduce_dims: Sequence[int] = field(default_factory=lambda: [1])

    # Tolerances; None → per-dtype defaults from utils.compare
    rtol: Optional[float] = None
    atol: Optional[float] = None

    def __post_init__(self):
        assert self.epsilon >= 0, "epsilon must be >= 0"
        for name in ("x_dtype", "gamma_dtype", "beta_dtype", "y_dtype", "save_dtype", "compute_dtype"):
            resolve_dtype(getattr(self, name))

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m, self.n)

    def dtype(self, which: str) -> torch.dtype:
        """``cfg.dtype("x")`` → ``torch.float32`` etc."""
        return resolve_dtype(getattr(self, f"{which}_dtype"))
