"""
OrientKit - EXIF orientation normalization for JPEG images.

Cameras and phones often store pixels as captured and record the intended
rotation in the EXIF Orientation tag. OrientKit physically applies that
rotation/flip to the pixel data and rewrites the tag to 1 (normal), so the
image displays correctly in viewers that ignore EXIF:
- Bounds-checked EXIF container parsing
- Orientation to transform resolution for all eight orientation values
- In-place EXIF rewriting that keeps every other tag byte-identical
- Lossless jpegtran transforms, with Pillow re-encoding as a fallback

Example usage:
    from pathlib import Path

    from orientkit import errors, rotate, rotate_async

    error, buffer, orientation, dimensions = rotate("photo.jpg")
    if error is None:
        Path("photo.jpg").write_bytes(buffer)
        print(f"Orientation was {orientation}, now {dimensions.width}x{dimensions.height}")
    elif error.code == errors.correct_orientation:
        print("Nothing to do")

    # Async with a timeout
    result = await rotate_async(Path("photo.jpg").read_bytes(), {"quality": 90}, timeout=20)
"""

from .rotator import Rotator, RotatorConfig, rotate, rotate_async, load_source
from .core.interfaces import (
    ImageDimensions,
    TransformDescriptor,
    TransformedImage,
    RotateOptions,
    RotationResult,
    ITransformEngine,
)
from .core.errors import (
    ErrorCode,
    errors,
    RotationError,
    ReadFileError,
    ReadExifError,
    NoOrientationError,
    UnknownOrientationError,
    CorrectOrientationError,
    RotateFileError,
)
from .exif import ExifReader, ExifWriter, ExifDocument, JpegFile
from .image import OrientationResolver, PillowEngine, JpegtranEngine, select_engine

__version__ = "1.0.0"

__all__ = [
    # Main facade
    "Rotator",
    "RotatorConfig",
    "rotate",
    "rotate_async",
    "load_source",

    # Core types
    "ImageDimensions",
    "TransformDescriptor",
    "TransformedImage",
    "RotateOptions",
    "RotationResult",
    "ITransformEngine",

    # Errors
    "ErrorCode",
    "errors",
    "RotationError",
    "ReadFileError",
    "ReadExifError",
    "NoOrientationError",
    "UnknownOrientationError",
    "CorrectOrientationError",
    "RotateFileError",

    # EXIF
    "ExifReader",
    "ExifWriter",
    "ExifDocument",
    "JpegFile",

    # Transforms
    "OrientationResolver",
    "PillowEngine",
    "JpegtranEngine",
    "select_engine",
]
