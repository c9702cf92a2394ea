"""Command-line access to a Sabertooth controller.

Example:
    Run from the command line::

        sabertooth status
        sabertooth -p /dev/ttyACM0 motor 1 0.25 -v
        sabertooth -c sabertooth.toml stop
"""

import argparse
import logging
import sys

from sabertooth.config import BAUDRATE, DEFAULT_ADDRESS, TIMEOUT_MS, load_config
from sabertooth.device import Sabertooth
from sabertooth.discovery import find_port
from sabertooth.errors import SabertoothError

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sabertooth motor controller")
    parser.add_argument("-c", "--config", help="path to TOML config file")
    parser.add_argument("-p", "--port", help="serial port (default: discover)")
    parser.add_argument("-a", "--address", type=int, help="packet serial address")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("find", help="print the port the controller is on")
    sub.add_parser("status", help="print battery, current and temperature")

    p = sub.add_parser("input", help="print a normalized input value")
    p.add_argument("source", choices=["S", "A", "M", "P"])
    p.add_argument("n", type=int, choices=[1, 2])

    p = sub.add_parser("motor", help="set a motor speed")
    p.add_argument("motor", type=int, choices=[1, 2])
    p.add_argument("speed", type=float, help="-1.0 to 1.0")

    sub.add_parser("stop", help="stop both motors")
    return parser


def _settings(args) -> dict:
    """Merge config file values with command-line overrides."""
    if args.config:
        cfg = load_config(args.config)
    else:
        cfg = {
            "port": None,
            "address": DEFAULT_ADDRESS,
            "baudrate": BAUDRATE,
            "timeout_ms": TIMEOUT_MS,
            "verify_checksum": False,
        }
    if args.port:
        cfg["port"] = args.port
    if args.address is not None:
        cfg["address"] = args.address
    return cfg


def run(args) -> None:
    cfg = _settings(args)
    port = cfg["port"] or find_port()

    if args.command == "find":
        print(port)
        return

    st = Sabertooth(
        cfg["address"], port,
        baudrate=cfg["baudrate"],
        timeout_ms=cfg["timeout_ms"],
        verify_checksum=cfg["verify_checksum"],
    )
    with st:
        if args.command == "status":
            print("battery: %.1f V" % st.battery())
            for motor in (1, 2):
                print("motor %d: %.1f A, %d C" % (
                    motor, st.current(motor), st.temp(motor),
                ))
        elif args.command == "input":
            print("%.4f" % st.input(args.source, args.n))
        elif args.command == "motor":
            st.motor(args.motor, args.speed)
        elif args.command == "stop":
            st.stop()


def main(argv=None) -> None:
    """CLI entry point -- parse args, talk to the controller, exit."""
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=level,
    )

    try:
        run(args)
    except (SabertoothError, ValueError) as exc:
        log.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
