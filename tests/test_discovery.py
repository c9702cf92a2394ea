"""Tests for sabertooth.discovery."""

from unittest.mock import patch

import pytest
from serial.tools.list_ports_common import ListPortInfo

from sabertooth.discovery import find_port
from sabertooth.errors import TransportError


def _port(device, vid=None, pid=None):
    info = ListPortInfo(device, skip_link_detection=True)
    info.vid = vid
    info.pid = pid
    return info


@patch("sabertooth.discovery.list_ports.comports")
def test_finds_matching_port(mock_comports):
    mock_comports.return_value = [
        _port("/dev/ttyS0"),
        _port("/dev/ttyUSB0", 0x0403, 0x6001),
        _port("/dev/ttyACM0", 0x268B, 0x0201),
    ]
    assert find_port() == "/dev/ttyACM0"


@patch("sabertooth.discovery.list_ports.comports")
def test_custom_signature(mock_comports):
    mock_comports.return_value = [_port("/dev/ttyUSB0", 0x0403, 0x6001)]
    assert find_port(0x0403, 0x6001) == "/dev/ttyUSB0"


@patch("sabertooth.discovery.list_ports.comports")
def test_no_ports(mock_comports):
    mock_comports.return_value = []
    with pytest.raises(TransportError, match="no serial ports found"):
        find_port()


@patch("sabertooth.discovery.list_ports.comports")
def test_not_found(mock_comports):
    mock_comports.return_value = [_port("/dev/ttyUSB0", 0x0403, 0x6001)]
    with pytest.raises(TransportError, match="sabertooth not found"):
        find_port()
