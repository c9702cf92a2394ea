"""Tests for sabertooth.cli."""

import os
from unittest.mock import patch

import pytest

from conftest import FakeChannel, make_reply
from sabertooth import cli
from sabertooth.device import Sabertooth
from sabertooth.errors import TransportError
from sabertooth.protocol import (
    CMD_GET_BATTERY,
    CMD_GET_CURRENT,
    CMD_GET_TEMP,
    CMD_SET_VALUE,
    encode_set,
)


def _fake_session(bus):
    """Patch target for Sabertooth that swaps in *bus*."""
    def factory(address, port, **kwargs):
        factory.calls.append((address, port, kwargs))
        return Sabertooth(address, bus=bus)
    factory.calls = []
    return factory


class TestParser:
    """Tests for argument parsing."""

    def test_motor_args(self):
        args = cli.build_parser().parse_args(["motor", "2", "-0.25"])
        assert args.command == "motor"
        assert args.motor == 2
        assert args.speed == -0.25

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestMain:
    """Tests for the CLI entry point."""

    def test_find(self, capsys):
        with patch("sabertooth.cli.find_port", return_value="/dev/ttyACM3"):
            cli.main(["find"])
        assert capsys.readouterr().out.strip() == "/dev/ttyACM3"

    def test_find_not_found_exits_1(self):
        with patch("sabertooth.cli.find_port",
                   side_effect=TransportError("sabertooth not found")):
            with pytest.raises(SystemExit) as excinfo:
                cli.main(["find"])
        assert excinfo.value.code == 1

    def test_motor(self):
        bus = FakeChannel()
        factory = _fake_session(bus)
        with patch("sabertooth.cli.Sabertooth", factory):
            cli.main(["-p", "/dev/ttyACM0", "-a", "129", "motor", "1", "-1"])
        assert factory.calls[0][:2] == (129, "/dev/ttyACM0")
        assert bus.written == [encode_set(129, CMD_SET_VALUE, ord("M"), 1, -2047)]
        assert not bus.is_open

    def test_motor_out_of_range_exits_1(self):
        bus = FakeChannel()
        with patch("sabertooth.cli.Sabertooth", _fake_session(bus)):
            with pytest.raises(SystemExit):
                cli.main(["-p", "/dev/ttyACM0", "motor", "1", "1.5"])
        assert bus.written == []

    def test_status(self, capsys):
        bus = FakeChannel([
            make_reply(125, CMD_GET_BATTERY),
            make_reply(12, CMD_GET_CURRENT, number=1),
            make_reply(31, CMD_GET_TEMP, number=1),
            make_reply(0, CMD_GET_CURRENT, number=2),
            make_reply(29, CMD_GET_TEMP, number=2),
        ])
        with patch("sabertooth.cli.Sabertooth", _fake_session(bus)):
            cli.main(["-p", "/dev/ttyACM0", "status"])
        out = capsys.readouterr().out
        assert "battery: 12.5 V" in out
        assert "motor 1: 1.2 A, 31 C" in out
        assert "motor 2: 0.0 A, 29 C" in out

    def test_config_file(self, tmp_path):
        path = os.path.join(tmp_path, "cfg.toml")
        with open(path, "w") as f:
            f.write('port = "/dev/ttyUSB1"\naddress = 131\ntimeout_ms = 50\n')
        bus = FakeChannel()
        factory = _fake_session(bus)
        with patch("sabertooth.cli.Sabertooth", factory):
            cli.main(["-c", path, "stop"])
        address, port, kwargs = factory.calls[0]
        assert (address, port) == (131, "/dev/ttyUSB1")
        assert kwargs["timeout_ms"] == 50
        assert len(bus.written) == 2
