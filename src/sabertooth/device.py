"""Synchronous session with one Sabertooth controller.

Each query is one transaction: write a GET frame, read exactly one
9-byte reply.  Commands are a single SET frame with no reply.  The
protocol carries no request id, so a session must not be shared
between threads without external locking.

Example:
    >>> from sabertooth.device import Sabertooth
    >>> with Sabertooth(128, "/dev/ttyACM0") as st:
    ...     st.motor(1, 0.5)
    ...     st.battery()
    12.5
"""

import logging

from sabertooth.bus import SerialBus
from sabertooth.config import BAUDRATE, DEFAULT_ADDRESS, TIMEOUT_MS
from sabertooth.errors import ProtocolError, RangeError
from sabertooth.protocol import (
    CMD_GET_BATTERY,
    CMD_GET_CURRENT,
    CMD_GET_TEMP,
    CMD_GET_VALUE,
    CMD_SET_KEEPALIVE,
    CMD_SET_SHUTDOWN,
    CMD_SET_TIMEOUT,
    CMD_SET_VALUE,
    FULL_SCALE,
    MAX_MAGNITUDE,
    REPLY_LEN,
    decode_reply,
    encode_get,
    encode_set,
)

log = logging.getLogger(__name__)

MOTOR = ord("M")


def _target(t) -> int:
    """Accept a target type as a byte value or a one-character string."""
    if isinstance(t, str):
        if len(t) != 1:
            raise RangeError("target type must be one character, got {!r}".format(t))
        t = ord(t)
    if not (0 <= t <= 127):
        raise RangeError("target type out of range: {}".format(t))
    return t


def _number(n: int) -> int:
    if not (0 <= n <= 127):
        raise RangeError("target number out of range: {}".format(n))
    return n


class Sabertooth:
    """One controller at one packet serial address.

    The channel is opened lazily by the first operation, or explicitly
    with :meth:`open`.  Use as a context manager to close it again.

    Args:
        address: Packet serial address (default 128).
        port: Serial device path.  Ignored when *bus* is given.
        baudrate: Baud rate for a SerialBus built from *port*.
        timeout_ms: Channel timeout for a SerialBus built from *port*.
        bus: Pre-built channel with ``open()``, ``close()``,
            ``is_open``, ``write(data)`` and ``read(size)``.
        verify_checksum: Also check reply checksums, not just the
            length and the reply marker.
    """

    def __init__(
        self,
        address: int = DEFAULT_ADDRESS,
        port: str | None = None,
        baudrate: int = BAUDRATE,
        timeout_ms: int = TIMEOUT_MS,
        bus=None,
        verify_checksum: bool = False,
    ):
        if not (0 <= address <= 255):
            raise RangeError("address must be in range 0-255, got {}".format(address))
        if bus is None:
            if port is None:
                raise ValueError("either port or bus is required")
            bus = SerialBus(port, baudrate, timeout_ms)
        self._address = address
        self._bus = bus
        self._verify = verify_checksum

    @property
    def address(self) -> int:
        return self._address

    def open(self) -> None:
        """Make sure the channel is open.  Idempotent."""
        if not self._bus.is_open:
            self._bus.open()

    def close(self) -> None:
        self._bus.close()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -- Queries -------------------------------------------------------------

    def read(self, get_type: int, target_type, target_number: int) -> int:
        """Run one GET transaction and return the raw signed value.

        Raises:
            TransportError: If the channel fails.
            ProtocolError: If the reply is not exactly 9 bytes or is
                not a reply frame.
        """
        frame = encode_get(self._address, get_type, _target(target_type), _number(target_number))
        self.open()
        self._bus.write(frame)
        data = self._bus.read(REPLY_LEN)
        if len(data) != REPLY_LEN:
            log.debug(
                "short reply from %d: %d of %d bytes",
                self._address, len(data), REPLY_LEN,
            )
            raise ProtocolError("unexpected data length")
        packet = decode_reply(data, verify=self._verify)
        return packet.value

    def input(self, port, n: int) -> float:
        """Return input *n* of *port* ('S', 'A', 'M' or 'P') as -1..1."""
        return self.read(CMD_GET_VALUE, port, n) / FULL_SCALE

    def battery(self) -> float:
        """Return the battery voltage in volts."""
        return self.read(CMD_GET_BATTERY, MOTOR, 1) / 10

    def current(self, motor: int) -> float:
        """Return the current drawn by *motor* in amperes."""
        return self.read(CMD_GET_CURRENT, MOTOR, motor) / 10

    def temp(self, motor: int) -> int:
        """Return the driver temperature of *motor* in degrees C."""
        return self.read(CMD_GET_TEMP, MOTOR, motor)

    # -- Commands ------------------------------------------------------------

    def set(self, set_type: int, target_type, target_number: int, value: int) -> None:
        """Send one SET frame carrying the signed raw *value*.

        Raises:
            RangeError: If ``abs(value)`` does not fit in 14 bits.
            TransportError: If the channel fails.
            ProtocolError: If fewer bytes were written than the frame holds.
        """
        frame = encode_set(
            self._address, set_type,
            _target(target_type), _number(target_number), value,
        )
        self.open()
        n = self._bus.write(frame)
        if n != len(frame):
            raise ProtocolError(
                "wrote unexpected number of bytes: {} of {}".format(n, len(frame))
            )

    def motor(self, motor: int, speed: float) -> None:
        """Drive *motor* (1 or 2) at *speed*, -1 to 1 inclusive."""
        if not (-1 <= speed <= 1):
            raise RangeError("speed out of range: {}".format(speed))
        self.set(CMD_SET_VALUE, MOTOR, motor, int(speed * FULL_SCALE))

    def stop(self) -> None:
        """Set both motors to zero."""
        self.motor(1, 0)
        self.motor(2, 0)

    def set_timeout(self, milliseconds: int) -> None:
        """Set the serial timeout; motors stop if no command arrives in time.

        Zero disables the timeout.
        """
        if not (0 <= milliseconds <= MAX_MAGNITUDE):
            raise RangeError("timeout out of range: {}".format(milliseconds))
        self.set(CMD_SET_TIMEOUT, MOTOR, 0, milliseconds)

    def keepalive(self) -> None:
        """Reset the serial timeout without changing any output."""
        self.set(CMD_SET_KEEPALIVE, MOTOR, 0, 0)

    def shutdown(self, motor: int, enabled: bool = True) -> None:
        """Shut *motor* down, or release it again with ``enabled=False``."""
        self.set(CMD_SET_SHUTDOWN, MOTOR, motor, 1 if enabled else 0)
