# refnorm/harness.py
"""Drive the host oracle next to a candidate LayerNorm and compare.

A *candidate* is any callable
``(x, gamma, beta, epsilon, post_op) -> (y, mean, inv_std)``; the default
is the vectorized :func:`~refnorm.norm.layernorm_torch`.  The oracle
itself goes through the operator protocol: argument → support check →
invoker, so unsupported shapes are skipped rather than run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import torch

from refnorm.config.schema import LayernormConf
from refnorm.errors import MalformedDescriptor
from refnorm.norm import ReferenceLayernorm, layernorm_torch
from refnorm.registry import build_post_op
from refnorm.utils.compare import CheckResult, check_err
from refnorm.utils.generators import fill, make_generator

logger = logging.getLogger(__name__)

Candidate = Callable[..., tuple[torch.Tensor, torch.Tensor, torch.Tensor]]


@dataclass
class CompareReport:
    cfg: LayernormConf
    op_type: str
    skipped: bool = False
    error: Optional[str] = None         # malformed argument; nothing was run
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        return self.skipped or all(c.ok for c in self.checks)

    def summary(self) -> str:
        head = f"{self.op_type} M={self.cfg.m} N={self.cfg.n} x={self.cfg.x_dtype} post={self.cfg.post_op}"
        if self.skipped:
            return f"{head}  SKIPPED (unsupported)"
        if self.error is not None:
            return f"{head}  ERROR {self.error}"
        return "  ".join([head, *(str(c) for c in self.checks)])


def _torch_candidate(cfg: LayernormConf) -> Candidate:
    def run(x, gamma, beta, epsilon, post_op):
        return layernorm_torch(
            x, gamma, beta, epsilon, post_op,
            compute_dtype=cfg.dtype("compute"),
            y_dtype=cfg.dtype("y"),
            save_dtype=cfg.dtype("save"),
        )
    return run


def _lengths(cfg: LayernormConf) -> list[int]:
    if cfg.lengths is None:
        return [cfg.m, cfg.n]
    if isinstance(cfg.lengths, int):
        return [cfg.lengths]
    return list(cfg.lengths)


def compare(cfg: LayernormConf, candidate: Optional[Candidate] = None) -> CompareReport:
    M, N = cfg.shape
    gen = make_generator(cfg.seed)
    x = fill((M, N), cfg.init, cfg.dtype("x"), gen)
    gamma = fill((N,), cfg.init, cfg.dtype("gamma"), gen)
    beta = fill((N,), cfg.init, cfg.dtype("beta"), gen)

    y = torch.empty((M, N), dtype=cfg.dtype("y"))
    save_mean = torch.empty((M,), dtype=cfg.dtype("save"))
    save_inv_std = torch.empty((M,), dtype=cfg.dtype("save"))
    post_op = build_post_op(cfg.post_op)

    op = ReferenceLayernorm(
        cfg.dtype("x"), cfg.dtype("y"), cfg.dtype("save"), cfg.dtype("compute"),
    )
    arg = op.make_argument(
        x, gamma, beta, y, save_mean, save_inv_std, post_op,
        _lengths(cfg), list(cfg.reduce_dims), cfg.epsilon,
    )
    report = CompareReport(cfg=cfg, op_type=op.get_type_string().strip())

    if not op.is_supported_argument(arg):
        logger.warning("%s does not support lengths=%s reduce_dims=%s, skipping",
                       report.op_type, arg.lengths, arg.reduce_dims)
        report.skipped = True
        return report
    try:
        op.check_argument(arg)
    except MalformedDescriptor as e:
        logger.error("%s malformed argument: %s", report.op_type, e)
        report.error = str(e)
        return report

    op.make_invoker_pointer().run(arg)

    candidate = candidate or _torch_candidate(cfg)
    y_c, mean_c, inv_std_c = candidate(x, gamma, beta, cfg.epsilon, post_op)

    tol = dict(rtol=cfg.rtol, atol=cfg.atol)
    report.checks = [
        check_err(y_c, y, name="y", **tol),
        check_err(mean_c, save_mean, name="mean", **tol),
        check_err(inv_std_c, save_inv_std, name="inv_std", **tol),
    ]
    logger.info("%s", report.summary())
    return report


def run_many(cfgs: Iterable[LayernormConf], candidate: Optional[Candidate] = None) -> list[CompareReport]:
    return [compare(cfg, candidate) for cfg in cfgs]


__all__ = ["CompareReport", "compare", "run_many"]
