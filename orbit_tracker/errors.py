"""
Error taxonomy for the orbit tracker.

Engine functions raise these; nothing is retried and no default position is
ever substituted for a failed computation.
"""


class OrbitTrackerError(Exception):
    """Base class for all orbit tracker errors."""


class MalformedRecord(OrbitTrackerError, ValueError):
    """TLE text is unusable: bad layout, checksum or numeric field."""


class PropagationDivergence(OrbitTrackerError, RuntimeError):
    """Propagation failed for this (elements, time) pair; do not retry."""


class InvalidState(OrbitTrackerError, ValueError):
    """A state vector or intermediate value is not finite."""


class InvalidParameters(OrbitTrackerError, ValueError):
    """Caller supplied an unusable sampling window, step or threshold."""
