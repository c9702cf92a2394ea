"""Serial channel for talking to a Sabertooth controller.

Wraps pyserial so the session sees a plain duplex byte channel:
``write(data)`` returns the byte count written, ``read(size)``
returns whatever arrived before the timeout.  pyserial failures
surface as TransportError.

Example:
    >>> from sabertooth.bus import SerialBus
    >>> bus = SerialBus("/dev/ttyACM0")
    >>> bus.open()
    >>> bus.write(frame_bytes)
    7
    >>> reply = bus.read(9)
"""

import logging

import serial

from sabertooth.config import BAUDRATE, TIMEOUT_MS
from sabertooth.errors import TransportError

log = logging.getLogger(__name__)


class SerialBus:
    """Half-duplex serial channel, opened on demand.

    Duck-typed -- tests can substitute any object with matching
    ``open()``, ``close()``, ``is_open``, ``write(data)`` and
    ``read(size)``.

    Args:
        port: Serial port device path (e.g. ``"/dev/ttyACM0"``).
        baudrate: Baud rate for the connection.
        timeout_ms: Read and write timeout in milliseconds.
    """

    def __init__(self, port: str, baudrate: int = BAUDRATE, timeout_ms: int = TIMEOUT_MS):
        self.port = port
        self.baudrate = baudrate
        self.timeout_ms = timeout_ms
        self._ser = None

    @property
    def is_open(self) -> bool:
        return self._ser is not None and self._ser.is_open

    def open(self) -> None:
        """Open the serial port.  No-op if already open.

        Raises:
            TransportError: If pyserial cannot open the port.
        """
        if self.is_open:
            return
        timeout = self.timeout_ms / 1000.0
        try:
            self._ser = serial.Serial(
                self.port, self.baudrate,
                timeout=timeout, write_timeout=timeout,
            )
        except (serial.SerialException, ValueError) as exc:
            raise TransportError(
                "cannot open {}: {}".format(self.port, exc)
            ) from exc
        log.info("opened %s at %d baud", self.port, self.baudrate)

    def write(self, data: bytes) -> int:
        """Write *data* and return the number of bytes written.

        Flushes stale input first so the next read sees only the
        reply to this frame.
        """
        self._require_open()
        log.debug("tx %s", data.hex(" "))
        try:
            self._ser.reset_input_buffer()
            n = self._ser.write(data)
            self._ser.flush()
        except serial.SerialException as exc:
            raise TransportError("write failed: {}".format(exc)) from exc
        return n

    def read(self, size: int) -> bytes:
        """Read up to *size* bytes.

        Returns fewer bytes (possibly ``b""``) if the timeout expires
        first; partial frames are not reassembled.
        """
        self._require_open()
        try:
            data = self._ser.read(size)
        except serial.SerialException as exc:
            raise TransportError("read failed: {}".format(exc)) from exc
        log.debug("rx %s", data.hex(" "))
        return data

    def close(self) -> None:
        """Close the serial port.  Safe to call more than once."""
        if self._ser is None:
            return
        self._ser.close()
        self._ser = None
        log.info("closed %s", self.port)

    def _require_open(self) -> None:
        if not self.is_open:
            raise TransportError("port {} is not open".format(self.port))
