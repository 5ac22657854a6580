"""
Exception hierarchy. Nothing raised from the per-frame path is fatal:
the pipeline catches these and treats the frame as issuing no command.

Each error also derives from the built-in it refines, so callers that
catch ValueError / RuntimeError keep working.
"""


class BodyNavError(Exception):
    """Base class for all bodynav errors."""


class IncompleteBodyError(BodyNavError, ValueError):
    """A body is missing one or more skeleton landmarks."""


class FrameFormatError(BodyNavError, ValueError):
    """A recorded frame could not be decoded."""


class KeySenderUnavailable(BodyNavError, RuntimeError):
    """The requested key delivery backend cannot run on this host."""
