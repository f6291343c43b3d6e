"""Exceptions raised by the resolution engine for unrecoverable conditions."""


class BoardBoundsError(AssertionError):
    """Raised when a coordinate outside the board is read or written."""


class BoardBuildError(RuntimeError):
    """Raised when a match-free board cannot be built within the retry cap."""
