"""
Bounds-checked reader over a byte buffer.
"""
import struct

from ..core.errors import ExifFormatError


BIG_ENDIAN = ">"
LITTLE_ENDIAN = "<"


class ByteCursor:
    """Sequential typed reads with explicit bounds checks."""

    def __init__(self, data: bytes, byte_order: str = BIG_ENDIAN, position: int = 0):
        if byte_order not in (BIG_ENDIAN, LITTLE_ENDIAN):
            raise ValueError(f"Invalid byte order: {byte_order!r}")
        self.data = data
        self.byte_order = byte_order
        self.position = 0
        self.seek(position)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def seek(self, position: int) -> "ByteCursor":
        if position < 0 or position > len(self.data):
            raise ExifFormatError(f"Offset {position} outside buffer of {len(self.data)} bytes")
        self.position = position
        return self

    def read(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise ExifFormatError(
                f"Read of {count} bytes at offset {self.position} overruns buffer of {len(self.data)} bytes"
            )
        chunk = self.data[self.position:self.position + count]
        self.position += count
        return bytes(chunk)

    def unpack(self, fmt: str) -> tuple:
        fmt = self.byte_order + fmt
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))

    def u8(self) -> int:
        return self.unpack("B")[0]

    def u16(self) -> int:
        return self.unpack("H")[0]

    def u32(self) -> int:
        return self.unpack("I")[0]

    def slice_at(self, offset: int, count: int) -> bytes:
        """Read ``count`` bytes at an absolute offset without moving the cursor."""
        if offset < 0 or count < 0 or offset + count > len(self.data):
            raise ExifFormatError(
                f"Range {offset}+{count} outside buffer of {len(self.data)} bytes"
            )
        return bytes(self.data[offset:offset + count])
