"""Exception hierarchy for listenerlib."""

from __future__ import annotations


class ListenerError(Exception):
    """Base class for every error raised by listenerlib."""


class DuplicateNameError(ListenerError):
    """Raised when a listener is created with a name that is already active."""


class StreamStateError(ListenerError):
    """Raised on start-while-streaming or stop-while-not-streaming."""


class QueueTimeoutError(ListenerError, TimeoutError):
    """Raised when no frame arrives within the listener's timeout.

    Recoverable: callers catch it and either retry or end their read loop.
    """


class FrameNotFoundError(ListenerError, LookupError):
    """Raised when a CompositeFrame does not hold the requested frame type."""


class FormatError(ListenerError, ValueError):
    """Raised for unsupported or malformed persisted data.

    Also raised when loading a format needs a sensor capability
    (e.g. point-cloud conditioning) that the given sensor lacks.
    """
