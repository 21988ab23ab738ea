"""liveurl exception hierarchy.

Shared across Params, Path, Url, Operation and Session so every module
raises and catches the same types. Construction errors subclass the
matching builtin (``TypeError``/``ValueError``) so callers can catch
either.
"""


class LiveUrlError(Exception):
    """Base for all liveurl-specific errors."""


class ConfigurationError(LiveUrlError):
    """Raised when ``LiveUrlConfig`` values are invalid."""


class InvalidParamsError(LiveUrlError, TypeError):
    """Raised when query params are built from an unsupported structure.

    Non-string keys, non-string leaves, and sequences nested directly in
    sequences are rejected at construction, never coerced.
    """


class InvalidPathError(LiveUrlError, ValueError):
    """Raised when a path string or segment list is malformed."""


class InvalidUrlError(LiveUrlError, ValueError):
    """Raised when a url (or one of its fields) is not absolute http(s)."""


class OperationError(LiveUrlError, ValueError):
    """Raised when a navigation operation is built or applied incorrectly.

    Covers missing or wrongly shaped targets and calling a synchronous
    apply from outside the owning session.
    """


class InvariantViolation(LiveUrlError):  # noqa: N818 — signals a bug, not a user error
    """An operation reached ``apply`` with a mode/stack pair no constructor makes."""
