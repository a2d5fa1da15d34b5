"""Failure kinds raised by the matting pipeline."""


class MattingError(Exception):
    """Base class for every failure surfaced by the pipeline."""


class InvalidParameter(MattingError, ValueError):
    """A request input is missing, malformed, or outside its domain."""


class EmptyInput(MattingError):
    """Border sampling produced no color samples."""


class DimensionMismatch(MattingError):
    """An alpha buffer and an image buffer disagree on width x height."""
