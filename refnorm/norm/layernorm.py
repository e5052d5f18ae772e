# refnorm/norm/layernorm.py
"""Host reference LayerNorm over a 2-D ``(M, N)`` input, reducing over N.

This is the oracle accelerated kernels are checked against, so it is
written for parity rather than speed: one scalar at a time, every read
converted to ``compute_dtype``, every store converted back to the storage
dtype, and variance taken as ``E[x^2] - E[x]^2``.  Do not swap in
Welford or ``torch.var`` here; kernels using the same reduction would
stop matching in the low bits.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import torch

from refnorm.elementwise import ElementwiseOp, PassThrough
from refnorm.errors import MalformedDescriptor, UnsupportedConfiguration
from refnorm.ops.base import BaseArgument, BaseInvoker, BaseOperator, StreamConfig

logger = logging.getLogger(__name__)


class ReferenceLayernorm(BaseOperator):
    """Two-pass row-wise LayerNorm with an elementwise epilogue."""

    # ------------------------------------------------------------------
    # Argument
    # ------------------------------------------------------------------
    @dataclass(frozen=True, eq=False)
    class Argument(BaseArgument):
        x_m_n: torch.Tensor
        gamma_n: torch.Tensor
        beta_n: torch.Tensor
        y_m_n: torch.Tensor                 # written in place
        save_mean_m: torch.Tensor           # written in place
        save_inv_std_m: torch.Tensor        # written in place
        y_elementwise_op: ElementwiseOp
        lengths: Sequence[int]
        reduce_dims: Sequence[int]
        epsilon: float

    # ------------------------------------------------------------------
    # Invoker
    # ------------------------------------------------------------------
    class Invoker(BaseInvoker):
        def __init__(self, op: "ReferenceLayernorm"):
            self.x_dtype = op.x_dtype
            self.compute_dtype = op.compute_dtype
            self.y_dtype = op.y_dtype
            self.save_dtype = op.save_dtype

        def run(self, arg: "ReferenceLayernorm.Argument", stream_config: StreamConfig | None = None) -> float:
            M, N = arg.lengths[0], arg.lengths[1]
            cdt = self.compute_dtype
            logger.debug("ReferenceLayernorm run: M=%d N=%d compute=%s", M, N, cdt)

            eps = torch.as_tensor(arg.epsilon, dtype=cdt)
            mean = torch.zeros(M, dtype=cdt)
            var = torch.zeros(M, dtype=cdt)

            # pass 1: per-row statistics
            for m in range(M):
                acc = torch.zeros((), dtype=cdt)
                acc_sq = torch.zeros((), dtype=cdt)
                for n in range(N):
                    x_val = arg.x_m_n[m, n].to(cdt)
                    acc = acc + x_val
                    acc_sq = acc_sq + x_val * x_val

                mean_m = acc / N
                mean[m] = mean_m
                var[m] = (acc_sq / N) - (mean_m * mean_m)

            # pass 2: normalize, affine, epilogue, store
            one = torch.ones((), dtype=cdt)
            for m in range(M):
                mean_m = mean[m]
                divisor = one / torch.sqrt(var[m] + eps)

                for n in range(N):
                    x_val = arg.x_m_n[m, n].to(cdt)
                    # gamma/beta are held in the x storage type before widening
                    gamma_val = arg.gamma_n[n].to(self.x_dtype).to(cdt)
                    beta_val = arg.beta_n[n].to(self.x_dtype).to(cdt)
                    y_val = (x_val - mean_m) * divisor
                    y_val = (y_val * gamma_val) + beta_val
                    y_val = arg.y_elementwise_op(y_val)
                    arg.y_m_n[m, n] = y_val.to(self.y_dtype)

                arg.save_mean_m[m] = mean_m.to(self.save_dtype)
                arg.save_inv_std_m[m] = divisor.to(self.save_dtype)

            return 0.0

    # ------------------------------------------------------------------
    def __init__(
        self,
        x_dtype: torch.dtype = torch.float32,
        y_dtype: torch.dtype | None = None,
        save_dtype: torch.dtype | None = None,
        compute_dtype: torch.dtype = torch.float32,
        rank: int = 2,
        num_reduce_dim: int = 1,
    ):
        assert rank == 2 and num_reduce_dim == 1, "Only support 2D version so far"
        self.x_dtype = x_dtype
        self.y_dtype = y_dtype or x_dtype
        self.save_dtype = save_dtype or x_dtype
        self.compute_dtype = compute_dtype

    @staticmethod
    def is_valid_compilation_parameter() -> bool:
        return True

    def is_supported_argument(self, arg: BaseArgument) -> bool:
        if not isinstance(arg, ReferenceLayernorm.Argument):
            return False
        if len(arg.lengths) != 2:
            return False
        if len(arg.reduce_dims) != 1:
            return False
        if arg.reduce_dims[0] != 1:
            return False
        return True

    @staticmethod
    def check_argument(arg: "ReferenceLayernorm.Argument") -> None:
        """Raise :class:`MalformedDescriptor` if tensor sizes disagree with ``lengths``.

        Call after :meth:`is_supported_argument`; assumes ``lengths`` is ``(M, N)``.
        """
        M, N = arg.lengths[0], arg.lengths[1]
        if M <= 0 or N <= 0:
            raise MalformedDescriptor(f"lengths must be positive, got {tuple(arg.lengths)}")
        if arg.epsilon < 0:
            raise MalformedDescriptor(f"epsilon must be >= 0, got {arg.epsilon}")
        for name, t, shape in (
            ("x", arg.x_m_n, (M, N)),
            ("y", arg.y_m_n, (M, N)),
            ("gamma", arg.gamma_n, (N,)),
            ("beta", arg.beta_n, (N,)),
            ("save_mean", arg.save_mean_m, (M,)),
            ("save_inv_std", arg.save_inv_std_m, (M,)),
        ):
            if tuple(t.shape) != shape:
                raise MalformedDescriptor(f"{name} has shape {tuple(t.shape)}, expected {shape}")

    @staticmethod
    def make_argument(
        x_m_n: torch.Tensor,
        gamma_n: torch.Tensor,
        beta_n: torch.Tensor,
        y_m_n: torch.Tensor,
        save_mean_m: torch.Tensor,
        save_inv_std_m: torch.Tensor,
        y_elementwise_op: ElementwiseOp,
        lengths: Sequence[int],
        reduce_dims: Sequence[int],
        epsilon: float,
    ) -> "ReferenceLayernorm.Argument":
        return ReferenceLayernorm.Argument(
            x_m_n,
            gamma_n,
            beta_n,
            y_m_n,
            save_mean_m,
            save_inv_std_m,
            y_elementwise_op,
            lengths,
            reduce_dims,
            epsilon,
        )

    def make_invoker(self) -> "ReferenceLayernorm.Invoker":
        return ReferenceLayernorm.Invoker(self)

    def make_invoker_pointer(self) -> BaseInvoker:
        return self.make_invoker()

    def get_type_string(self) -> str:
        return "ReferenceLayernorm\n"


# ---------------------------------------------------------------------------
#  Functional surface
# ---------------------------------------------------------------------------

def validate(lengths: Sequence[int], reduce_dims: Sequence[int]) -> bool:
    """True iff ``lengths`` is rank 2 and ``reduce_dims`` is exactly ``[1]``."""
    return len(lengths) == 2 and len(reduce_dims) == 1 and reduce_dims[0] == 1


def layernorm_ref(
    x: torch.Tensor,
    gamma: torch.Tensor,
    beta: torch.Tensor,
    y: torch.Tensor,
    save_mean: torch.Tensor,
    save_inv_std: torch.Tensor,
    post_op: ElementwiseOp | None = None,
    lengths: Sequence[int] | None = None,
    reduce_dims: Sequence[int] = (1,),
    epsilon: float = 1e-5,
    compute_dtype: torch.dtype = torch.float32,
) -> float:
    """Validate, then fill ``y``, ``save_mean`` and ``save_inv_std`` in place.

    Raises :class:`UnsupportedConfiguration` for a non-2-D shape or a
    reduction other than the trailing axis, and :class:`MalformedDescriptor`
    when a tensor's size disagrees with ``lengths``.
    """
    lengths = tuple(x.shape) if lengths is None else lengths
    if not validate(lengths, reduce_dims):
        raise UnsupportedConfiguration(
            f"ReferenceLayernorm supports lengths=(M, N), reduce_dims=[1]; "
            f"got lengths={tuple(lengths)}, reduce_dims={tuple(reduce_dims)}"
        )

    op = ReferenceLayernorm(x.dtype, y.dtype, save_mean.dtype, compute_dtype)
    arg = op.make_argument(
        x, gamma, beta, y, save_mean, save_inv_std,
        post_op or PassThrough(), lengths, reduce_dims, epsilon,
    )
    op.check_argument(arg)
    return op.make_invoker().run(arg)


__all__ = ["ReferenceLayernorm", "validate", "layernorm_ref"]
