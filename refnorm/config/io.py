"""Load comparison configs from Python modules and patch them from the CLI.

A config module exposes a top-level ``cfg``: one
:class:`~refnorm.config.schema.LayernormConf` or a list of them (a sweep).
``KEY=VAL`` overrides are cast to the type of the field they replace, and
are applied to every entry of a sweep.
"""
from __future__ import annotations

from importlib import import_module, util as im_util
from pathlib import Path
from types import ModuleType
from typing import Any

__all__ = [
    "load_py_cfg",
    "apply_dotlist_overrides",
]

# ---------------------------------------------------------------------------
#  Config modules
# ---------------------------------------------------------------------------

def _import_from_file(py_file: Path) -> ModuleType:
    spec = im_util.spec_from_file_location(py_file.stem, py_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load config module {py_file}")
    mod = im_util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # type: ignore[attr-defined]
    return mod


def load_py_cfg(path_or_dotted: str):
    """Return ``cfg`` from a ``.py`` path or a dotted module name (``configs.small``)."""
    if path_or_dotted.endswith(".py") or Path(path_or_dotted).exists():
        mod = _import_from_file(Path(path_or_dotted))
    else:
        mod = import_module(path_or_dotted)
    if not hasattr(mod, "cfg"):
        raise AttributeError(
            f"{path_or_dotted} defines no top-level 'cfg'"
        )
    return getattr(mod, "cfg")

# ---------------------------------------------------------------------------
#  KEY=VAL overrides
# ---------------------------------------------------------------------------

def _parse_scalar(s: str):
    for cast in (int, float):
        try:
            return cast(s)
        except ValueError:
            pass
    return s


def _cast_value(old: Any, new_str: str):
    if isinstance(old, bool):
        return new_str.lower() in {"1", "true", "yes"}
    if isinstance(old, int):
        return int(new_str)
    if isinstance(old, float):
        return float(new_str)
    if isinstance(old, (list, tuple)) or (old is None and "," in new_str):
        # "2,3,4" → [2, 3, 4];  "" → []
        return [_parse_scalar(p) for p in new_str.split(",") if p]
    if old is None:
        return None if new_str.lower() == "none" else _parse_scalar(new_str)
    return new_str  # str or unknown - leave as is


def _resolve(cfg, key: str):
    """Walk ``a.b.c`` down to ``(owner_of_c, "c")``."""
    *path, name = key.split(".")
    owner = cfg
    for p in path:
        if not hasattr(owner, p):
            raise AttributeError(f"{type(cfg).__name__} has no field '{p}' (from '{key}')")
        owner = getattr(owner, p)
    if not hasattr(owner, name):
        raise AttributeError(f"{type(cfg).__name__} has no field '{name}' (from '{key}')")
    return owner, name


def apply_dotlist_overrides(cfg, kv_list: list[str]):
    """Apply ``KEY=VAL`` overrides to *cfg* in place and return it.

    A list of configs (a sweep) gets every override applied to each entry.
    """
    if isinstance(cfg, (list, tuple)):
        for c in cfg:
            apply_dotlist_overrides(c, kv_list)
        return cfg

    for expr in kv_list:
        key, sep, val_str = expr.partition("=")
        if not sep:
            raise ValueError(f"Override must be KEY=VAL, got '{expr}'")
        owner, name = _resolve(cfg, key)
        setattr(owner, name, _cast_value(getattr(owner, name), val_str))
    return cfg
