"""Find the serial port a Sabertooth is attached to.

Example:
    >>> from sabertooth.discovery import find_port
    >>> find_port()
    '/dev/ttyACM0'
"""

import logging

from serial.tools import list_ports

from sabertooth.config import USB_PID, USB_VID
from sabertooth.errors import TransportError

log = logging.getLogger(__name__)


def find_port(vid: int = USB_VID, pid: int = USB_PID) -> str:
    """Return the device name of the first USB port matching *vid*/*pid*.

    Raises:
        TransportError: If there are no serial ports, or none match.
    """
    ports = list_ports.comports()
    if not ports:
        raise TransportError("no serial ports found")

    for info in ports:
        log.debug(
            "found port %s vid=%s pid=%s", info.device,
            "%04X" % info.vid if info.vid is not None else "-",
            "%04X" % info.pid if info.pid is not None else "-",
        )
        if info.vid == vid and info.pid == pid:
            log.info("sabertooth on %s", info.device)
            return info.device

    raise TransportError("sabertooth not found")
