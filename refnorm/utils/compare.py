# refnorm/utils/compare.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import torch

logger = logging.getLogger(__name__)

# (rtol, atol) by storage dtype of the tensor being checked
_TOLERANCES: dict[torch.dtype, tuple[float, float]] = {
    torch.float64: (1e-7, 1e-7),
    torch.float32: (1e-5, 1e-5),
    torch.float16: (1e-3, 1e-3),
    torch.bfloat16: (1e-2, 1e-2),
}


def default_tolerances(dtype: torch.dtype) -> tuple[float, float]:
    return _TOLERANCES.get(dtype, (1e-5, 1e-5))


@dataclass
class CheckResult:
    name: str
    ok: bool
    max_abs_err: float
    max_rel_err: float
    n_bad: int

    def __str__(self) -> str:
        status = "OK" if self.ok else "MISMATCH"
        return (f"{self.name}: {status}  max|Δ|={self.max_abs_err:.3e}  "
                f"max rel={self.max_rel_err:.3e}  bad={self.n_bad}")


def check_err(out: torch.Tensor, ref: torch.Tensor, *, rtol: float | None = None,
              atol: float | None = None, name: str = "out") -> CheckResult:
    """Elementwise ``|out - ref| <= atol + rtol * |ref|``.

    NaN/inf count as equal when both sides carry them in the same position.
    """
    if out.shape != ref.shape:
        raise ValueError(f"{name}: shape mismatch {tuple(out.shape)} vs {tuple(ref.shape)}")
    d_rtol, d_atol = default_tolerances(out.dtype)
    rtol = d_rtol if rtol is None else rtol
    atol = d_atol if atol is None else atol

    a, b = out.double(), ref.double()
    close = torch.isclose(a, b, rtol=rtol, atol=atol, equal_nan=True)
    finite = torch.isfinite(a) & torch.isfinite(b)
    diff = torch.where(finite, (a - b).abs(), torch.zeros_like(a))
    rel = torch.where(finite, diff / b.abs().clamp_min(torch.finfo(torch.float64).tiny), torch.zeros_like(a))

    n_bad = int((~close).sum())
    res = CheckResult(
        name=name,
        ok=n_bad == 0,
        max_abs_err=float(diff.max()) if diff.numel() else 0.0,
        max_rel_err=float(rel.max()) if rel.numel() else 0.0,
        n_bad=n_bad,
    )
    if not res.ok:
        logger.warning("%s", res)
    return res
