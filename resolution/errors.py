"""
Error taxonomy for configuration resolution.

Adapter-level errors (``SourceError`` subclasses) describe what went wrong
with a single backend call. ``ConfigResolver.load_all`` only ever raises the
resolver-level errors (``MandatorySourceFailedError``,
``ResolutionTimeoutError``) so callers never need to inspect adapter detail.
"""

from __future__ import annotations

from typing import Optional


class ConfigResolutionError(Exception):
    """Base class for every error raised by the resolution layer."""
    pass


class InvalidNamespaceError(ConfigResolutionError, ValueError):
    """Raised when a namespace is built from an empty project or environment."""
    pass


class SourceError(ConfigResolutionError):
    """A backing store call failed."""

    def __init__(self, message: str, *, source: str = "", key: str = ""):
        super().__init__(message)
        self.source = source
        self.key = key


class NotFoundError(SourceError):
    """The backend has no entry under the requested name."""
    pass


class AccessDeniedError(SourceError):
    """The backend rejected the call for authorization reasons."""
    pass


class BackendUnavailableError(SourceError):
    """Transport-level failure: connection, throttling, service error."""
    pass


class MalformedSecretError(SourceError):
    """A secret payload exists but is not a JSON object."""
    pass


class ResolutionTimeoutError(ConfigResolutionError, TimeoutError):
    """The mandatory source did not answer before the load deadline."""

    def __init__(self, message: str, *, timeout: Optional[float] = None):
        super().__init__(message)
        self.timeout = timeout


class MandatorySourceFailedError(ConfigResolutionError):
    """
    A mandatory source failed, so no aggregate could be produced.

    The adapter error is available as ``__cause__``.
    """

    def __init__(self, message: str, *, source: str = ""):
        super().__init__(message)
        self.source = source
