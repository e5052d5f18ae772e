# refnorm/errors.py
"""Exception types raised around reference operators."""


class RefnormError(Exception):
    """Base class for everything refnorm raises on purpose."""


class UnsupportedConfiguration(RefnormError, ValueError):
    """Shape rank or reduction axes the operator cannot handle.

    Non-fatal: the caller decides whether to skip, fall back or abort.
    """


class MalformedDescriptor(RefnormError, ValueError):
    """Tensor lengths in an argument disagree with its ``lengths`` metadata."""


__all__ = ["RefnormError", "UnsupportedConfiguration", "MalformedDescriptor"]
