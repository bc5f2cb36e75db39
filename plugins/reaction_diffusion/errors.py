"""
Errors raised by the reaction-diffusion engine and session.

Numeric paths never raise: clamping absorbs any parameter choice. Only
two conditions are signalled, both from outside the stencil itself.
"""


class ReactionDiffusionError(Exception):
    """Base class for all package errors."""


class InvalidDimensions(ReactionDiffusionError, ValueError):
    """Grid width/height is not a positive integer."""

    def __init__(self, width, height):
        super().__init__(
            f"Grid dimensions must be positive integers, got {width!r}x{height!r}"
        )
        self.width = width
        self.height = height


class NotInitialized(ReactionDiffusionError, RuntimeError):
    """A render or export was requested before any field exists."""
