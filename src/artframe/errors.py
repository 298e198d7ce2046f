"""Exception taxonomy for the artframe store.

Every failure propagates synchronously to the caller; nothing is retried.
The builtin bases let callers that only know the standard exceptions still
catch the right thing.
"""

from __future__ import annotations


class ArtframeError(Exception):
    """Base class for all artframe store errors."""


class UnrecognizedAddress(ArtframeError, ValueError):
    """The resource address matches no known pattern."""

    def __init__(self, address: object) -> None:
        super().__init__(f"Unknown address {address!r}")
        self.address = address


class MissingRequiredField(ArtframeError, ValueError):
    """A create was attempted without the resource's required field."""

    def __init__(self, field: str, values: object = None) -> None:
        super().__init__(f"Initial values must contain {field!r}: {values!r}")
        self.field = field


class UnknownField(ArtframeError, ValueError):
    """A column name outside the resource's vocabulary was referenced."""

    def __init__(self, field: str, allowed: tuple[str, ...] | frozenset[str] = ()) -> None:
        hint = f" (known: {', '.join(sorted(allowed))})" if allowed else ""
        super().__init__(f"Unknown field {field!r}{hint}")
        self.field = field


class WriteFailure(ArtframeError):
    """The store reported no effect where a write expected one."""


class UnsupportedOperation(ArtframeError, NotImplementedError):
    """The operation is not allowed on this resource kind."""


class NotFound(ArtframeError, FileNotFoundError):
    """No current artwork payload is available."""


class UnsupportedMode(ArtframeError, ValueError):
    """The payload was requested with a mode other than read-only."""
