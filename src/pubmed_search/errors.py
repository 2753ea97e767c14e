"""Exception types raised while acquiring PubMed search results."""

from __future__ import annotations


class PubMedSearchError(RuntimeError):
    """Base class for failures surfaced by a paginated search."""

    def __init__(self, message: str, *, stage: str = "") -> None:
        super().__init__(f"{stage}: {message}" if stage else message)
        self.stage = stage


class TransportError(PubMedSearchError):
    """Raised when the fetch capability fails for a given stage."""


class DecodeError(PubMedSearchError):
    """Raised when a response payload does not have the expected shape."""


class SearchStateError(PubMedSearchError):
    """Raised when an operation is attempted before its preconditions hold."""


class MalformedResponse(ValueError):
    """Raised by the decoder when a payload cannot be interpreted."""
