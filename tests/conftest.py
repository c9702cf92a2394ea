"""Shared pytest fixtures for sabertooth tests."""

from sabertooth.protocol import encode_reply


def make_reply(value: int, get_type: int = 0, address: int = 128,
               source: int = ord("M"), number: int = 1) -> bytes:
    """Build a valid 9-byte reply frame for testing."""
    return encode_reply(address, get_type, source, number, value)


class FakeChannel:
    """Test double for SerialBus: canned replies, records written data."""

    def __init__(self, responses: list[bytes] | None = None):
        """Initialize with canned responses."""
        self._responses = list(responses or [])
        self.written = []
        self.is_open = False
        self.open_count = 0
        self.short_write = False

    def open(self) -> None:
        self.is_open = True
        self.open_count += 1

    def close(self) -> None:
        self.is_open = False

    def write(self, data: bytes) -> int:
        """Record *data*; report one byte short if ``short_write`` is set."""
        self.written.append(data)
        return len(data) - 1 if self.short_write else len(data)

    def read(self, size: int) -> bytes:
        """Return the next canned response, or empty bytes if exhausted."""
        if self._responses:
            return self._responses.pop(0)
        return b""
