"""
=============================================================================
HTTP MESSAGE ERRORS
=============================================================================

Every failure raised by this package derives from HTTPMessageError, so a
caller can catch the whole family with one clause:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ERROR TAXONOMY                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPMessageError                                                  │
    │   ├── ValidationError  (also a ValueError)                          │
    │   │     Bad argument: method, status code, cookie name, header      │
    │   │     value list, stream mode, empty move target ...              │
    │   │                                                                  │
    │   ├── StreamIOError    (also an OSError)                            │
    │   │     The byte resource failed: open, seek, read, write, tell,    │
    │   │     relocate.                                                    │
    │   │                                                                  │
    │   └── StateError       (also a RuntimeError)                        │
    │         Object is in a terminal state: moved/errored upload,        │
    │         detached stream.                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation happens before any state changes, so a ValidationError never
leaves a half-applied mutation behind. Nothing is retried here.

=============================================================================
"""


class HTTPMessageError(Exception):
    """Base class for all httpmessage errors."""


class ValidationError(HTTPMessageError, ValueError):
    """
    Raised when a caller passes a structurally invalid argument.

    Subclasses ValueError so code that already guards against ValueError
    keeps working.
    """


class StreamIOError(HTTPMessageError, OSError):
    """
    Raised when the underlying byte resource fails an operation it was
    expected to support.

    The original OSError (if any) is chained as __cause__.
    """


class StateError(HTTPMessageError, RuntimeError):
    """Raised when an operation targets an object in a terminal state."""
