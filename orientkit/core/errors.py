"""
Error taxonomy for the rotation pipeline.

Every failure carries a stable machine-readable ``code`` and a
human-readable message.
"""
from enum import Enum
from types import SimpleNamespace


class ErrorCode(str, Enum):
    """Stable error codes."""
    READ_FILE = "read_file"
    READ_EXIF = "read_exif"
    NO_ORIENTATION = "no_orientation"
    UNKNOWN_ORIENTATION = "unknown_orientation"
    CORRECT_ORIENTATION = "correct_orientation"
    ROTATE_FILE = "rotate_file"


errors = SimpleNamespace(**{code.value: code for code in ErrorCode})


class ExifFormatError(ValueError):
    """Low-level structural problem in JPEG or TIFF data."""


class RotationError(Exception):
    """Base class for every error surfaced by the pipeline."""

    code: ErrorCode = ErrorCode.ROTATE_FILE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class ReadFileError(RotationError):
    code = ErrorCode.READ_FILE


class ReadExifError(RotationError):
    code = ErrorCode.READ_EXIF


class NoOrientationError(RotationError):
    code = ErrorCode.NO_ORIENTATION


class UnknownOrientationError(RotationError):
    code = ErrorCode.UNKNOWN_ORIENTATION

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class CorrectOrientationError(RotationError):
    code = ErrorCode.CORRECT_ORIENTATION


class RotateFileError(RotationError):
    code = ErrorCode.ROTATE_FILE
