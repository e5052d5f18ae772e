from .config.schema import LayernormConf
from .errors import MalformedDescriptor, RefnormError, UnsupportedConfiguration
from .norm import ReferenceLayernorm, layernorm_ref, layernorm_torch, validate
from .harness import CompareReport, compare, run_many
from .registry import OPS, POST_OPS, build_post_op
from . import elementwise as elementwise

__all__ = [
    "LayernormConf",
    "RefnormError", "UnsupportedConfiguration", "MalformedDescriptor",
    "ReferenceLayernorm", "layernorm_ref", "layernorm_torch", "validate",
    "CompareReport", "compare", "run_many",
    "OPS", "POST_OPS", "build_post_op",
]

# ---------------------------------------------------------------------
# One-liner convenience: config(s) → oracle vs candidate → reports
# ---------------------------------------------------------------------
def run(cfg, *, candidate=None):
    """
    rn.run(cfg)  compares the host oracle against a candidate for one
    config or a list of configs.

    Parameters
    ----------
    cfg        : LayernormConf | list[LayernormConf]
    candidate  : Callable | None   – (x, gamma, beta, eps, post_op) -> (y, mean, inv_std);
                                     None = vectorized torch LayerNorm

    Returns
    -------
    reports    : list[CompareReport]
    """
    cfgs = cfg if isinstance(cfg, (list, tuple)) else [cfg]
    return run_many(cfgs, candidate)

__all__ += ["run", "elementwise"]
