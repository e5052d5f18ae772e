# refnorm/registry.py
"""Global phone-books mapping *string keys* → classes.

``OPS`` is keyed by the operator's type string so harness logs and configs
speak the same names; ``POST_OPS`` lets configs pick an epilogue by name.
"""
from __future__ import annotations

from refnorm.elementwise import (
    FastGelu,
    Gelu,
    Negate,
    PassThrough,
    Relu,
    Scale,
    Sigmoid,
    Swish,
)
from refnorm.norm import ReferenceLayernorm

# -----------------------------------------------------------------------------
#  Public registries
# -----------------------------------------------------------------------------

OPS: dict[str, type] = {
    "ReferenceLayernorm": ReferenceLayernorm,
}

POST_OPS: dict[str, type] = {
    "PassThrough": PassThrough,
    "Relu": Relu,
    "Gelu": Gelu,
    "FastGelu": FastGelu,
    "Scale": Scale,
    "Sigmoid": Sigmoid,
    "Swish": Swish,
    "Negate": Negate,
}


def build_post_op(name: str, **kw):
    if name not in POST_OPS:
        raise KeyError(f"Unknown post_op '{name}', expected one of {sorted(POST_OPS)}")
    return POST_OPS[name](**kw)


__all__ = ["OPS", "POST_OPS", "build_post_op"]
