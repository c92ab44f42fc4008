"""
JPEG marker segment handling.

Splits a JPEG stream into its header segments and the entropy-coded tail,
locates the EXIF APP1 segment and splices a replacement into place.
"""
from dataclasses import dataclass, field, replace
from typing import List, Optional
import struct

from ..core.errors import ExifFormatError
from ..core.interfaces import ImageDimensions
from .cursor import ByteCursor, BIG_ENDIAN

SOI = 0xD8
EOI = 0xD9
SOS = 0xDA
APP0 = 0xE0
APP1 = 0xE1

EXIF_HEADER = b"Exif\x00\x00"
MAX_SEGMENT_PAYLOAD = 0xFFFF - 2

# Markers without a length field
_STANDALONE = {0x01} | set(range(0xD0, 0xD8))
# SOF0..SOF15 minus DHT, JPG and DAC
_FRAME_MARKERS = set(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}


@dataclass(frozen=True)
class Segment:
    """One marker segment (payload excludes marker and length bytes)."""
    marker: int
    payload: bytes = b""

    @property
    def is_exif(self) -> bool:
        return self.marker == APP1 and self.payload.startswith(EXIF_HEADER)

    def to_bytes(self) -> bytes:
        if self.marker in _STANDALONE:
            return bytes((0xFF, self.marker))
        return bytes((0xFF, self.marker)) + struct.pack(">H", len(self.payload) + 2) + self.payload


@dataclass
class JpegFile:
    """Parsed JPEG header segments plus the untouched scan data."""
    segments: List[Segment] = field(default_factory=list)
    tail: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> "JpegFile":
        cursor = ByteCursor(data, BIG_ENDIAN)
        if len(data) < 4 or cursor.read(2) != b"\xff\xd8":
            raise ExifFormatError("Not a JPEG stream (missing SOI marker)")

        segments = []
        while True:
            start = cursor.position
            if cursor.u8() != 0xFF:
                raise ExifFormatError(f"Expected marker at offset {start}")
            marker = cursor.u8()
            while marker == 0xFF:
                marker = cursor.u8()

            if marker in (SOS, EOI):
                return cls(segments=segments, tail=bytes(data[start:]))
            if marker == SOI:
                raise ExifFormatError(f"Unexpected SOI marker at offset {start}")
            if marker in _STANDALONE:
                segments.append(Segment(marker))
                continue

            length = cursor.u16()
            if length < 2:
                raise ExifFormatError(f"Invalid length {length} for marker 0x{marker:02X}")
            segments.append(Segment(marker, cursor.read(length - 2)))

    def to_bytes(self) -> bytes:
        return b"\xff\xd8" + b"".join(s.to_bytes() for s in self.segments) + self.tail

    def exif_index(self) -> Optional[int]:
        for index, segment in enumerate(self.segments):
            if segment.is_exif:
                return index
        return None

    @property
    def exif_payload(self) -> Optional[bytes]:
        """TIFF block of the EXIF segment, without the ``Exif\\0\\0`` header."""
        index = self.exif_index()
        if index is None:
            return None
        return self.segments[index].payload[len(EXIF_HEADER):]

    @property
    def dimensions(self) -> ImageDimensions:
        for segment in self.segments:
            if segment.marker in _FRAME_MARKERS:
                cursor = ByteCursor(segment.payload, BIG_ENDIAN)
                _precision, height, width = cursor.unpack("BHH")
                return ImageDimensions(width=width, height=height)
        raise ExifFormatError("No frame header found")

    def with_exif(self, tiff: bytes) -> "JpegFile":
        """
        Return a copy carrying ``tiff`` as its EXIF block.

        An existing EXIF segment is replaced where it stands; otherwise the
        new segment goes right after a leading JFIF APP0, or first.
        """
        payload = EXIF_HEADER + tiff
        if len(payload) > MAX_SEGMENT_PAYLOAD:
            raise ExifFormatError(f"EXIF block of {len(payload)} bytes does not fit in one segment")

        segments = list(self.segments)
        exif = Segment(APP1, payload)
        index = self.exif_index()
        if index is not None:
            segments[index] = exif
        elif segments and segments[0].marker == APP0:
            segments.insert(1, exif)
        else:
            segments.insert(0, exif)
        return replace(self, segments=segments)


def splice_exif(data: bytes, tiff: bytes) -> bytes:
    """Put ``tiff`` into the JPEG ``data`` as its EXIF segment."""
    return JpegFile.parse(data).with_exif(tiff).to_bytes()
