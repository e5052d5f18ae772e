# refnorm/norm/__init__.py
from .layernorm import ReferenceLayernorm, validate, layernorm_ref
from .torch_impl import layernorm_torch

__all__ = ["ReferenceLayernorm", "validate", "layernorm_ref", "layernorm_torch"]
