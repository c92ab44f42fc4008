"""
EXIF writing.

Values are patched in place inside a copy of the original TIFF block, so
tag order, IFD offsets, maker notes and the thumbnail stay byte-identical.
"""
from typing import Optional
import logging
import struct

from ..core.errors import ExifFormatError, RotateFileError
from ..core.interfaces import ImageDimensions, ORIENTATION_NORMAL
from .cursor import LITTLE_ENDIAN
from .reader import (
    ExifDocument,
    IfdEntry,
    INTEGER_TYPES,
    TAG_ORIENTATION,
    TAG_PIXEL_X_DIMENSION,
    TAG_PIXEL_Y_DIMENSION,
    TIFF_MAGIC,
    STRUCT_CODES,
)

logger = logging.getLogger(__name__)

TYPE_SHORT = 3


class ExifWriter:
    """Produces the updated TIFF block for a transformed image."""

    @classmethod
    def write(
        cls,
        document: ExifDocument,
        orientation: int = ORIENTATION_NORMAL,
        dimensions: Optional[ImageDimensions] = None,
        keep_exif: bool = True
    ) -> bytes:
        """
        Build the TIFF block to embed in the transformed JPEG.

        Args:
            document: EXIF parsed from the original image
            orientation: New orientation value
            dimensions: Post-transform size for the PixelX/YDimension tags
            keep_exif: False writes a block holding only the orientation

        Returns:
            TIFF bytes (without the ``Exif\\0\\0`` header)

        Raises:
            RotateFileError: The original structure cannot hold the new values
        """
        if not keep_exif:
            return cls.minimal(document.byte_order, orientation)

        try:
            tiff = bytearray(document.tiff)
            entry = document.ifds["0th"].get(TAG_ORIENTATION)
            if entry is None:
                raise ExifFormatError("No orientation entry to update")
            cls._patch(tiff, entry, orientation)

            exif_ifd = document.ifds.get("Exif")
            if dimensions is not None and exif_ifd is not None:
                for tag, value in (
                    (TAG_PIXEL_X_DIMENSION, dimensions.width),
                    (TAG_PIXEL_Y_DIMENSION, dimensions.height),
                ):
                    dimension_entry = exif_ifd.get(tag)
                    if dimension_entry is not None:
                        cls._patch(tiff, dimension_entry, value)
        except ExifFormatError as e:
            raise RotateFileError(f"Could not write EXIF data: {e}") from e

        return bytes(tiff)

    @staticmethod
    def _patch(tiff: bytearray, entry: IfdEntry, value: int) -> None:
        if entry.type not in INTEGER_TYPES or entry.count < 1:
            raise ExifFormatError(f"Tag 0x{entry.tag:04X} cannot hold an integer (type {entry.type})")
        try:
            packed = struct.pack(entry.byte_order + STRUCT_CODES[entry.type], value)
        except struct.error as e:
            raise ExifFormatError(f"Value {value} does not fit tag 0x{entry.tag:04X}: {e}") from e

        end = entry.value_position + len(packed)
        if entry.value_position < 0 or end > len(tiff):
            raise ExifFormatError(f"Tag 0x{entry.tag:04X} value lies outside the EXIF block")
        tiff[entry.value_position:end] = packed
        logger.debug(f"Set tag 0x{entry.tag:04X} to {value}")

    @staticmethod
    def minimal(byte_order: str, orientation: int = ORIENTATION_NORMAL) -> bytes:
        """A TIFF block with one IFD holding only the orientation tag."""
        marker = b"II" if byte_order == LITTLE_ENDIAN else b"MM"
        header = marker + struct.pack(byte_order + "HI", TIFF_MAGIC, 8)
        ifd = struct.pack(byte_order + "H", 1)
        ifd += struct.pack(byte_order + "HHIH2x", TAG_ORIENTATION, TYPE_SHORT, 1, orientation)
        ifd += struct.pack(byte_order + "I", 0)
        return header + ifd
