"""
EXIF container module for orientkit.
"""
from .cursor import ByteCursor
from .segments import JpegFile, Segment, splice_exif
from .reader import ExifReader, ExifDocument, Ifd, IfdEntry, parse_tiff
from .writer import ExifWriter

__all__ = [
    'ByteCursor',
    'JpegFile',
    'Segment',
    'splice_exif',
    'ExifReader',
    'ExifDocument',
    'Ifd',
    'IfdEntry',
    'parse_tiff',
    'ExifWriter',
]
