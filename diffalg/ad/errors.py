# ad/errors.py
"""
Exceptions raised by the differentiation core.

Errors coming out of the user's own function (wrong arity, wrong argument
types) are not wrapped; they propagate to the caller of ``D(f)(...)`` as-is.
"""


class DifferentiationError(Exception):
    """Base class for errors raised by the AD core itself."""


class NoDifferentiationRule(DifferentiationError, NotImplementedError):
    """A Differential reached a primitive that has no derivative rule."""

    def __init__(self, op_name: str):
        self.op_name = op_name
        super().__init__(f"no differentiation rule for operation '{op_name}'")


class InvalidSelector(DifferentiationError, ValueError):
    """A partial-derivative selector does not address a leaf of the arguments."""
