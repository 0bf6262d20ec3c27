"""
Error Types
-----------
Fail-fast exceptions raised before any per-bar work begins.
Both concrete errors subclass ValueError so callers can catch them generically.
"""


class PsarError(Exception):
    """Base class for all psar_engine errors."""


class InvalidConfig(PsarError, ValueError):
    """Acceleration settings out of bounds, or unknown configuration keys."""


class InvalidInput(PsarError, ValueError):
    """Caller contract violation on the high/low series."""
