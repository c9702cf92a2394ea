"""Exception types raised by the sabertooth driver.

Every failure is a hard failure of the one in-flight transaction;
nothing here is retried.
"""


class SabertoothError(Exception):
    """Base class for all driver errors."""


class TransportError(SabertoothError, OSError):
    """The serial channel could not be opened, written or read."""


class ProtocolError(SabertoothError, ValueError):
    """Bytes on the wire do not match the expected frame shape."""


class RangeError(SabertoothError, ValueError):
    """A caller-supplied value is outside its allowed domain."""
