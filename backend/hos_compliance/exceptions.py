"""
HOS Compliance exceptions.

Errors raised by the compliance engine. Anything not listed here
(no segments, empty plans, zero violations) is a normal outcome.
"""


class HOSEngineError(Exception):
    """Base exception for the HOS compliance engine."""

    pass


class MalformedSegment(HOSEngineError):
    """
    Raised when duty history cannot be trusted.

    Covers inverted or zero-length intervals, overlapping intervals,
    naive timestamps and segments from more than one driver. Fails the
    affected driver's evaluation only.
    """

    pass


class InvalidPolicy(HOSEngineError):
    """Raised when the HOS policy configuration is unsupported."""

    pass
