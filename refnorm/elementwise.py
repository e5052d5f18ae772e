# refnorm/elementwise.py
"""Elementwise epilogues applied to each normalized output value.

Anything ``__call__(y) -> y`` on a compute-precision scalar tensor
qualifies; the classes here just cover the common fusions.
"""
from typing import Protocol

import torch
import torch.nn.functional as F


class ElementwiseOp(Protocol):
    def __call__(self, y: torch.Tensor) -> torch.Tensor: ...


class PassThrough:
    def __call__(self, y):
        return y


class Relu:
    def __call__(self, y):
        return torch.clamp_min(y, 0)


class Gelu:
    """Exact (erf) GELU."""

    def __call__(self, y):
        return F.gelu(y)


class FastGelu:
    """tanh-approximated GELU, as most fused kernels use."""

    def __call__(self, y):
        return F.gelu(y, approximate="tanh")


class Sigmoid:
    def __call__(self, y):
        return torch.sigmoid(y)


class Swish:
    def __init__(self, beta: float = 1.0):
        self.beta = beta

    def __call__(self, y):
        return y * torch.sigmoid(y * self.beta)


class Scale:
    def __init__(self, scale: float = 1.0):
        self.scale = scale

    def __call__(self, y):
        return y * self.scale


class Negate:
    def __call__(self, y):
        return -y


__all__ = [
    "ElementwiseOp", "PassThrough", "Relu", "Gelu", "FastGelu",
    "Sigmoid", "Swish", "Scale", "Negate",
]
