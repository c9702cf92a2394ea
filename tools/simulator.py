#!/usr/bin/env python3
"""Virtual Sabertooth for exercising the driver without hardware.

Listens on a serial port (typically one end of a socat PTY pair),
remembers the motor speeds it is given, and answers GET frames with
synthetic battery, current and temperature readings.

Usage:
    python simulator.py <port> <addr>

Args:
    port: Serial port path (e.g. /tmp/sabertooth-sim).
    addr: Packet serial address to respond as (int, 0-255).

Example:
    socat pty,raw,echo=0,link=/tmp/st-host pty,raw,echo=0,link=/tmp/st-sim &
    python simulator.py /tmp/st-sim 128
    sabertooth -p /tmp/st-host status
"""

import random
import sys

# Add parent src to path so we can import sabertooth
sys.path.insert(0, str(__import__("pathlib").Path(__file__).resolve().parents[1] / "src"))

from sabertooth.bus import SerialBus
from sabertooth.protocol import (
    CMD_GET,
    CMD_GET_BATTERY,
    CMD_GET_CURRENT,
    CMD_GET_TEMP,
    CMD_GET_VALUE,
    CMD_SET,
    CMD_SET_VALUE,
    encode_reply,
    header_checksum,
)


class Controller:
    """State of the simulated controller: two motor outputs."""

    def __init__(self, addr):
        self.addr = addr
        self.speeds = {1: 0, 2: 0}

    def apply_set(self, set_type, payload):
        """Record a SET frame; only motor values are tracked."""
        value = payload[0] + (payload[1] << 7)
        if set_type & 1:
            value = -value
            set_type -= 1
        if set_type == CMD_SET_VALUE and payload[2] == ord("M"):
            self.speeds[payload[3]] = value

    def answer_get(self, get_type, source, number):
        """Return the reply frame for a GET, or None if unsupported."""
        if get_type == CMD_GET_BATTERY:
            value = 240 + random.randint(-3, 3)
        elif get_type == CMD_GET_CURRENT:
            value = abs(self.speeds.get(number, 0)) // 100
        elif get_type == CMD_GET_TEMP:
            value = 30 + random.randint(0, 2)
        elif get_type == CMD_GET_VALUE:
            value = self.speeds.get(number, 0) if source == ord("M") else 0
        else:
            return None
        return encode_reply(self.addr, get_type, source, number, value)


def run(port, addr):
    """Run the simulator loop until interrupted."""
    bus = SerialBus(port, timeout_ms=100)
    bus.open()
    ctl = Controller(addr)

    print("simulator: addr={} listening on {}".format(addr, port),
          flush=True)

    try:
        while True:
            header = bus.read(4)
            if len(header) < 4:
                continue
            if header[3] != header_checksum(header[0], header[1], header[2]):
                continue

            if header[1] == CMD_GET:
                body = bus.read(3)
            elif header[1] == CMD_SET:
                body = bus.read(5)
            else:
                continue
            if header[0] != addr or len(body) < 3:
                continue

            if header[1] == CMD_SET and len(body) == 5:
                ctl.apply_set(header[2], body)
            elif header[1] == CMD_GET:
                reply = ctl.answer_get(header[2], body[0], body[1])
                if reply is not None:
                    bus.write(reply)
    except KeyboardInterrupt:
        pass
    finally:
        bus.close()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("usage: simulator.py <port> <addr>", file=sys.stderr)
        sys.exit(1)
    run(sys.argv[1], int(sys.argv[2]))
