# refnorm/ops/__init__.py
from .base import BaseArgument, BaseInvoker, BaseOperator, StreamConfig

__all__ = ["BaseArgument", "BaseInvoker", "BaseOperator", "StreamConfig"]
