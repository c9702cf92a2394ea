"""Project-wide configuration constants and config-file loading.

Central place for tuneable parameters shared across modules.
Import individual names where needed.

Example:
    >>> from sabertooth.config import load_config, BAUDRATE
    >>> cfg = load_config("sabertooth.toml")
    >>> cfg["address"]
    128
"""

import tomllib

# Packet serial runs at a fixed rate over USB.
BAUDRATE = 115200

# Read/write timeout in milliseconds for the serial channel.
TIMEOUT_MS = 200

# Factory default packet serial address.
DEFAULT_ADDRESS = 128

# USB signature of the controller.
USB_VID = 0x268B
USB_PID = 0x0201


def load_config(path: str) -> dict:
    """Read a TOML config file and fill in defaults.

    Keys (all optional): ``port`` (str, serial device; absent means
    discover over USB), ``address`` (int, 0-255), ``baudrate`` (int),
    ``timeout_ms`` (int), ``verify_checksum`` (bool).

    Raises:
        ValueError: If a key has the wrong type or is out of range.

    Example:
        >>> cfg = load_config("sabertooth.toml")
        >>> cfg["baudrate"]
        115200
    """
    with open(path, "rb") as f:
        raw = tomllib.load(f)

    result = {
        "port": None,
        "address": DEFAULT_ADDRESS,
        "baudrate": BAUDRATE,
        "timeout_ms": TIMEOUT_MS,
        "verify_checksum": False,
    }

    if "port" in raw:
        _require_str(raw, "port")
        result["port"] = raw["port"]

    if "address" in raw:
        _require_int(raw, "address")
        if not (0 <= raw["address"] <= 255):
            raise ValueError("address must be in range 0-255, got %d" % raw["address"])
        result["address"] = raw["address"]

    if "baudrate" in raw:
        _require_int(raw, "baudrate")
        if raw["baudrate"] <= 0:
            raise ValueError("baudrate must be positive, got %d" % raw["baudrate"])
        result["baudrate"] = raw["baudrate"]

    if "timeout_ms" in raw:
        _require_int(raw, "timeout_ms")
        if raw["timeout_ms"] < 0:
            raise ValueError("timeout_ms must not be negative, got %d" % raw["timeout_ms"])
        result["timeout_ms"] = raw["timeout_ms"]

    if "verify_checksum" in raw:
        if not isinstance(raw["verify_checksum"], bool):
            raise ValueError(
                "verify_checksum must be bool, got %s"
                % type(raw["verify_checksum"]).__name__
            )
        result["verify_checksum"] = raw["verify_checksum"]

    return result


def _require_str(raw: dict[str, object], key: str) -> None:
    """Validate that *key* in *raw* is a str."""
    if not isinstance(raw[key], str):
        raise ValueError("%s must be str, got %s" % (key, type(raw[key]).__name__))


def _require_int(raw: dict[str, object], key: str) -> None:
    """Validate that *key* in *raw* is an int (bool excluded)."""
    if not isinstance(raw[key], int) or isinstance(raw[key], bool):
        raise ValueError("%s must be int, got %s" % (key, type(raw[key]).__name__))
