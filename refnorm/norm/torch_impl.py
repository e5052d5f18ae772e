# refnorm/norm/torch_impl.py
"""Vectorized LayerNorm with the same reduction as the host reference.

Stands in for an accelerated kernel: the harness drives it next to
:class:`~refnorm.norm.layernorm.ReferenceLayernorm` and compares outputs.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import torch


def layernorm_torch(
    x: torch.Tensor,            # (M, N)
    gamma: torch.Tensor,        # (N,)
    beta: torch.Tensor,         # (N,)
    epsilon: float = 1e-5,
    post_op: Optional[Callable[[torch.Tensor], torch.Tensor]] = None,
    compute_dtype: torch.dtype = torch.float32,
    y_dtype: Optional[torch.dtype] = None,
    save_dtype: Optional[torch.dtype] = None,
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Returns ``(y, mean, inv_std)``; statistics have shape ``(M,)``."""
    assert x.dim() == 2, "layernorm_torch expects a 2-D (M, N) input"
    N = x.size(-1)

    x_c = x.to(compute_dtype)
    mean = x_c.sum(-1) / N
    var = (x_c * x_c).sum(-1) / N - mean * mean
    inv_std = 1.0 / torch.sqrt(var + epsilon)

    y = (x_c - mean[:, None]) * inv_std[:, None]
    # affine params go through the x storage type, as the host reference reads them
    y = y * gamma.to(x.dtype).to(compute_dtype) + beta.to(x.dtype).to(compute_dtype)
    if post_op is not None:
        y = post_op(y)

    y_dtype = y_dtype or x.dtype
    save_dtype = save_dtype or x.dtype
    return y.to(y_dtype), mean.to(save_dtype), inv_std.to(save_dtype)


__all__ = ["layernorm_torch"]
