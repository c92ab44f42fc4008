"""
Core module - Interfaces, data types and errors for orientkit.
"""
from .interfaces import (
    # Constants
    ORIENTATION_NORMAL,
    VALID_ORIENTATIONS,
    ENGINE_CHOICES,

    # Data classes
    ImageDimensions,
    TransformDescriptor,
    TransformedImage,
    RotateOptions,
    RotationResult,

    # Abstract interfaces
    ITransformEngine,
)
from .errors import (
    ErrorCode,
    errors,
    ExifFormatError,
    RotationError,
    ReadFileError,
    ReadExifError,
    NoOrientationError,
    UnknownOrientationError,
    CorrectOrientationError,
    RotateFileError,
)

__all__ = [
    # Constants
    "ORIENTATION_NORMAL",
    "VALID_ORIENTATIONS",
    "ENGINE_CHOICES",

    # Data classes
    "ImageDimensions",
    "TransformDescriptor",
    "TransformedImage",
    "RotateOptions",
    "RotationResult",

    # Abstract interfaces
    "ITransformEngine",

    # Errors
    "ErrorCode",
    "errors",
    "ExifFormatError",
    "RotationError",
    "ReadFileError",
    "ReadExifError",
    "NoOrientationError",
    "UnknownOrientationError",
    "CorrectOrientationError",
    "RotateFileError",
]
