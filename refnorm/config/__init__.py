"""Public re-export surface for typed configs."""
from .schema import LayernormConf, resolve_dtype

__all__ = ["LayernormConf", "resolve_dtype"]
