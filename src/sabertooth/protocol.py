"""Frame encoding and decoding for the Sabertooth packet serial protocol.

Outbound command frames::

    ADDR, CMD, VALUE, CHK, [PAYLOAD..., PAYLOAD_CHK]

CMD is SET (40) or GET (41).  VALUE is the sub-command; for SET it is
bumped by one when the magnitude is negative.  CHK is the 7-bit sum of
the first three bytes and PAYLOAD_CHK the 7-bit sum of the payload.

Inbound replies are always 9 bytes::

    ADDR, REPLY(73), TARGET, CHK, VAL_LO, VAL_HI, TYPE, NUMBER, CHK

The value magnitude is spread over two 7-bit groups, and bit 0 of
TARGET carries its sign.

Example:
    >>> from sabertooth.protocol import encode_get, decode_reply, CMD_GET_BATTERY
    >>> encode_get(128, CMD_GET_BATTERY, ord("M"), 1).hex(' ')
    '80 29 10 39 4d 01 4e'
    >>> decode_reply(bytes.fromhex('80 49 10 59 7d 00 4d 01 4b')).value
    125
"""

from dataclasses import dataclass

from sabertooth.errors import ProtocolError, RangeError

# -- Protocol constants ------------------------------------------------------

CMD_SET = 40
CMD_SET_VALUE = 0
CMD_SET_KEEPALIVE = 16
CMD_SET_SHUTDOWN = 32
CMD_SET_TIMEOUT = 64

CMD_GET = 41
CMD_GET_VALUE = 0
CMD_GET_BATTERY = 16
CMD_GET_CURRENT = 32
CMD_GET_TEMP = 64

CMD_REPLY = 73

# Replies are fixed length.
REPLY_LEN = 9

# Values travel as two 7-bit groups.
MAX_MAGNITUDE = 0x3FFF

# Protocol units for a normalized value of 1.0.
FULL_SCALE = 2047


@dataclass
class Packet:
    """Decoded reply frame.

    ``target`` has its sign bit already stripped and ``value`` is signed.
    """

    address: int
    target: int
    type: int
    number: int
    value: int


# -- Checksums ---------------------------------------------------------------


def header_checksum(address: int, command: int, value: int) -> int:
    """Return the 7-bit additive checksum over the three header bytes.

    Example:
        >>> header_checksum(128, 41, 16)
        57
    """
    return (address + command + value) & 0x7F


def payload_checksum(data: bytes) -> int:
    """Return the 7-bit additive checksum over *data*.

    Example:
        >>> payload_checksum(bytes([0x4D, 0x01]))
        78
    """
    return sum(data) & 0x7F


def crc7(data: bytes) -> int:
    """Compute the Sabertooth CRC-7 over *data*.

    The controllers also accept a CRC-protected framing, but this
    driver speaks the additive checksum variant only.  The routine is
    provided for callers that need to build or check CRC frames
    themselves; nothing in the driver puts it on the wire.
    """
    crc = 0x7F
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ 0x76
            else:
                crc >>= 1
    return crc ^ 0x7F


# -- Encoding ----------------------------------------------------------------


def make_frame(address: int, command: int, value: int, payload: bytes = b"") -> bytes:
    """Build a complete command frame.

    The frame is 4 bytes with an empty payload, otherwise
    ``4 + len(payload) + 1`` bytes.

    Example:
        >>> make_frame(128, 40, 0).hex(' ')
        '80 28 00 28'
    """
    frame = bytes([address, command, value, header_checksum(address, command, value)])
    if payload:
        frame += bytes(payload) + bytes([payload_checksum(payload)])
    return frame


def _split_magnitude(magnitude: int) -> bytes:
    return bytes([magnitude & 0x7F, (magnitude >> 7) & 0x7F])


def encode_set(
    address: int, set_type: int, target_type: int, target_number: int, value: int
) -> bytes:
    """Build a SET frame carrying a signed *value*.

    A negative value is sent as its magnitude with *set_type* bumped by
    one; the payload is ``VAL_LO, VAL_HI, TARGET_TYPE, TARGET_NUMBER``.

    Raises:
        RangeError: If ``abs(value)`` does not fit in 14 bits.

    Example:
        >>> encode_set(128, CMD_SET_VALUE, ord("M"), 1, -2047).hex(' ')
        '80 28 01 29 7f 0f 4d 01 5c'
    """
    if value < 0:
        value = -value
        set_type += 1
    if value > MAX_MAGNITUDE:
        raise RangeError(
            "magnitude {} does not fit in 14 bits".format(value)
        )
    payload = _split_magnitude(value) + bytes([target_type, target_number])
    return make_frame(address, CMD_SET, set_type, payload)


def encode_get(address: int, get_type: int, source_type: int, source_number: int) -> bytes:
    """Build a 7-byte GET frame asking for one value."""
    return make_frame(address, CMD_GET, get_type, bytes([source_type, source_number]))


def encode_reply(
    address: int, target: int, type_: int, number: int, value: int
) -> bytes:
    """Build a 9-byte reply frame as the controller would send it.

    Used by the simulator and the tests.  *target* must be even; a
    negative *value* sets its low bit.
    """
    if value < 0:
        value = -value
        target += 1
    if value > MAX_MAGNITUDE:
        raise RangeError(
            "magnitude {} does not fit in 14 bits".format(value)
        )
    return make_frame(
        address, CMD_REPLY, target,
        _split_magnitude(value) + bytes([type_, number]),
    )


# -- Decoding ----------------------------------------------------------------


def decode_reply(data: bytes, verify: bool = False) -> Packet:
    """Parse a 9-byte reply frame into a Packet.

    By default only the length and the reply marker are checked; the
    controller is trusted beyond that.  With *verify* set, both
    checksums are checked as well.

    Raises:
        ProtocolError: On wrong length, wrong marker, or (with
            *verify*) a checksum mismatch.

    Example:
        >>> p = decode_reply(bytes.fromhex('80 49 01 4a 00 08 4d 01 56'))
        >>> p.target, p.value
        (0, -1024)
    """
    if len(data) != REPLY_LEN:
        raise ProtocolError("unexpected data length")
    if data[1] != CMD_REPLY:
        raise ProtocolError("unexpected command type")
    if verify:
        if data[3] != header_checksum(data[0], data[1], data[2]):
            raise ProtocolError(
                "checksum mismatch: header 0x{:02X}".format(data[3])
            )
        if data[8] != payload_checksum(data[4:8]):
            raise ProtocolError(
                "checksum mismatch: payload 0x{:02X}".format(data[8])
            )

    target = data[2]
    value = data[4] + (data[5] << 7)
    if target & 1:
        value = -value
        target -= 1

    return Packet(
        address=data[0],
        target=target,
        type=data[6],
        number=data[7],
        value=value,
    )
