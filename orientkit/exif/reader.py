"""
EXIF reading.

Walks the TIFF structure inside a JPEG's APP1 segment far enough to
expose every IFD entry, with the orientation tag of the primary IFD as
the one value the pipeline acts on.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import logging
import struct

from ..core.errors import (
    ExifFormatError,
    ReadExifError,
    NoOrientationError,
    UnknownOrientationError,
)
from ..core.interfaces import VALID_ORIENTATIONS
from .cursor import ByteCursor, BIG_ENDIAN, LITTLE_ENDIAN
from .segments import JpegFile

logger = logging.getLogger(__name__)

TIFF_MAGIC = 42

TAG_ORIENTATION = 0x0112
TAG_EXIF_IFD = 0x8769
TAG_GPS_IFD = 0x8825
TAG_INTEROP_IFD = 0xA005
TAG_PIXEL_X_DIMENSION = 0xA002
TAG_PIXEL_Y_DIMENSION = 0xA003
TAG_THUMBNAIL_OFFSET = 0x0201
TAG_THUMBNAIL_LENGTH = 0x0202

# Field type -> size in bytes of one component
TYPE_SIZES = {
    1: 1,   # BYTE
    2: 1,   # ASCII
    3: 2,   # SHORT
    4: 4,   # LONG
    5: 8,   # RATIONAL
    6: 1,   # SBYTE
    7: 1,   # UNDEFINED
    8: 2,   # SSHORT
    9: 4,   # SLONG
    10: 8,  # SRATIONAL
    11: 4,  # FLOAT
    12: 8,  # DOUBLE
}
STRUCT_CODES = {1: "B", 3: "H", 4: "I", 6: "b", 8: "h", 9: "i", 11: "f", 12: "d"}
INTEGER_TYPES = {1, 3, 4, 6, 8, 9}

# Sub-IFD pointers: (name, pointer tag, IFD holding the pointer)
_SUB_IFDS = (
    ("Exif", TAG_EXIF_IFD, "0th"),
    ("GPS", TAG_GPS_IFD, "0th"),
    ("Interop", TAG_INTEROP_IFD, "Exif"),
)


@dataclass
class IfdEntry:
    """
    One directory entry.

    ``value_position`` is the absolute offset of the value bytes inside the
    TIFF block, whether they sit inline in the entry or elsewhere.
    """
    tag: int
    type: int
    count: int
    byte_order: str
    value_position: int
    raw: Optional[bytes]

    @property
    def value(self) -> Any:
        if self.raw is None or self.type not in TYPE_SIZES:
            return self.raw
        if self.type == 2:
            return self.raw.rstrip(b"\x00").decode("latin-1")
        if self.type == 7:
            return self.raw
        if self.type in (5, 10):
            code = "I" if self.type == 5 else "i"
            numbers = struct.unpack(f"{self.byte_order}{2 * self.count}{code}", self.raw)
            return tuple(zip(numbers[::2], numbers[1::2]))
        return struct.unpack(f"{self.byte_order}{self.count}{STRUCT_CODES[self.type]}", self.raw)

    @property
    def scalar(self) -> Any:
        """First component for single-valued numeric entries, else the whole value."""
        value = self.value
        if isinstance(value, tuple) and len(value) == 1:
            return value[0]
        return value


@dataclass
class Ifd:
    """An image file directory, entries kept in file order."""
    name: str
    offset: int
    entries: List[IfdEntry] = field(default_factory=list)
    next_offset: int = 0

    def get(self, tag: int) -> Optional[IfdEntry]:
        for entry in self.entries:
            if entry.tag == tag:
                return entry
        return None


@dataclass
class ExifDocument:
    """Parsed view over an unmodified TIFF block."""
    byte_order: str
    tiff: bytes
    ifds: Dict[str, Ifd] = field(default_factory=dict)
    thumbnail: Optional[bytes] = None

    def get(self, ifd: str, tag: int) -> Any:
        directory = self.ifds.get(ifd)
        entry = directory.get(tag) if directory else None
        return entry.scalar if entry else None

    @property
    def orientation(self) -> Optional[int]:
        return self.get("0th", TAG_ORIENTATION)


def _read_ifd(cursor: ByteCursor, name: str, offset: int, visited: Set[int]) -> Ifd:
    if offset in visited:
        raise ExifFormatError(f"IFD loop detected at offset {offset}")
    visited.add(offset)

    cursor.seek(offset)
    ifd = Ifd(name=name, offset=offset)
    for _ in range(cursor.u16()):
        entry_position = cursor.position
        tag, type_, count = cursor.unpack("HHI")
        field_bytes = cursor.read(4)

        size = TYPE_SIZES.get(type_, 0) * count
        if type_ not in TYPE_SIZES:
            logger.debug(f"Unknown field type {type_} for tag 0x{tag:04X} in {name} IFD")
            ifd.entries.append(IfdEntry(tag, type_, count, cursor.byte_order, entry_position + 8, field_bytes))
            continue

        if size <= 4:
            position = entry_position + 8
            raw = field_bytes[:size]
        else:
            position = struct.unpack(cursor.byte_order + "I", field_bytes)[0]
            try:
                raw = cursor.slice_at(position, size)
            except ExifFormatError as e:
                logger.warning(f"Tag 0x{tag:04X} in {name} IFD points outside the EXIF block: {e}")
                raw = None
        ifd.entries.append(IfdEntry(tag, type_, count, cursor.byte_order, position, raw))

    ifd.next_offset = cursor.u32()
    return ifd


def _read_optional_ifd(cursor: ByteCursor, name: str, offset: Any, visited: Set[int]) -> Optional[Ifd]:
    if not isinstance(offset, int) or offset == 0:
        return None
    try:
        return _read_ifd(cursor, name, offset, visited)
    except ExifFormatError as e:
        logger.warning(f"Skipping unreadable {name} IFD: {e}")
        return None


def parse_tiff(tiff: bytes) -> ExifDocument:
    """Parse a TIFF block (the EXIF payload after ``Exif\\0\\0``)."""
    header = tiff[:2]
    if header == b"II":
        byte_order = LITTLE_ENDIAN
    elif header == b"MM":
        byte_order = BIG_ENDIAN
    else:
        raise ExifFormatError(f"Invalid TIFF byte order marker: {header!r}")

    cursor = ByteCursor(tiff, byte_order, 2)
    magic = cursor.u16()
    if magic != TIFF_MAGIC:
        raise ExifFormatError(f"Invalid TIFF magic number: {magic}")
    first_offset = cursor.u32()

    visited: Set[int] = set()
    document = ExifDocument(byte_order=byte_order, tiff=bytes(tiff))
    zeroth = _read_ifd(cursor, "0th", first_offset, visited)
    document.ifds["0th"] = zeroth

    for name, pointer_tag, parent in _SUB_IFDS:
        if parent not in document.ifds:
            continue
        ifd = _read_optional_ifd(cursor, name, document.get(parent, pointer_tag), visited)
        if ifd is not None:
            document.ifds[name] = ifd

    first = _read_optional_ifd(cursor, "1st", zeroth.next_offset, visited)
    if first is not None:
        document.ifds["1st"] = first
        document.thumbnail = _read_thumbnail(cursor, first)

    return document


def _read_thumbnail(cursor: ByteCursor, ifd: Ifd) -> Optional[bytes]:
    offset = ifd.get(TAG_THUMBNAIL_OFFSET)
    length = ifd.get(TAG_THUMBNAIL_LENGTH)
    if offset is None or length is None:
        return None
    try:
        return cursor.slice_at(offset.scalar, length.scalar)
    except (ExifFormatError, TypeError) as e:
        logger.warning(f"Ignoring unreadable thumbnail: {e}")
        return None


class ExifReader:
    """Reads the EXIF document and orientation from JPEG bytes."""

    @classmethod
    def load(cls, data: bytes) -> ExifDocument:
        """
        Parse the EXIF document of a JPEG stream.

        Raises:
            ReadExifError: Not a JPEG, no EXIF segment, or malformed TIFF data
        """
        try:
            tiff = JpegFile.parse(data).exif_payload
            if tiff is None:
                raise ExifFormatError("No EXIF segment found")
            return parse_tiff(tiff)
        except ExifFormatError as e:
            raise ReadExifError(f"Could not read EXIF data: {e}") from e

    @classmethod
    def orientation(cls, document: ExifDocument) -> int:
        """
        Validated orientation of the primary image.

        Raises:
            NoOrientationError: Tag absent from the 0th IFD
            UnknownOrientationError: Tag present but not in 1-8
        """
        entry = document.ifds["0th"].get(TAG_ORIENTATION)
        if entry is None:
            raise NoOrientationError("No orientation tag found in EXIF")
        value = entry.scalar if entry.type in INTEGER_TYPES else None
        if not isinstance(value, int) or value not in VALID_ORIENTATIONS:
            raise UnknownOrientationError(f"Unknown orientation value ({entry.scalar!r})", value)
        return value

    @classmethod
    def read(cls, data: bytes) -> Tuple[int, ExifDocument]:
        document = cls.load(data)
        return cls.orientation(document), document
