# refnorm/ops/base.py
"""Operator / argument / invoker split shared by host and device operators.

An operator validates an argument (``is_supported_argument``) and hands out
an invoker whose ``run`` executes it.  The two phases are deliberately
separate calls: a comparison harness filters unsupported shapes first and
only then runs.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StreamConfig:
    """Execution knobs for device invokers; host invokers ignore them."""

    time_kernel: bool = False
    log_level: int = 0


class BaseArgument:
    """Marker base for a fully specified single invocation."""


class BaseInvoker(ABC):
    @abstractmethod
    def run(self, arg: BaseArgument, stream_config: StreamConfig | None = None) -> float:
        """Execute *arg*; returns elapsed time in ms (0.0 when not timed)."""


class BaseOperator(ABC):
    @abstractmethod
    def is_supported_argument(self, arg: BaseArgument) -> bool: ...

    @abstractmethod
    def make_invoker_pointer(self) -> BaseInvoker: ...

    def get_type_string(self) -> str:
        return type(self).__name__


__all__ = ["StreamConfig", "BaseArgument", "BaseInvoker", "BaseOperator"]
