"""
Pixel-transform engines.

Both take compressed JPEG bytes plus a TransformDescriptor and return the
transformed JPEG bytes with their new dimensions. Engines never touch EXIF;
the caller splices the updated block in afterwards.
"""
from io import BytesIO
from typing import Dict, List, Tuple
import logging
import shutil
import subprocess

from PIL import Image

from ..core.errors import ExifFormatError, RotateFileError
from ..core.interfaces import (
    ITransformEngine,
    ImageDimensions,
    RotateOptions,
    TransformDescriptor,
    TransformedImage,
)
from ..exif.segments import JpegFile

logger = logging.getLogger(__name__)

# Pillow's ROTATE_* constants turn counter-clockwise
_PIL_ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}

# jpegtran accepts a single transform per run
_JPEGTRAN_ARGS: Dict[Tuple[int, bool, bool], List[str]] = {
    (0, False, False): [],
    (0, True, False): ["-flip", "horizontal"],
    (0, False, True): ["-flip", "vertical"],
    (90, False, False): ["-rotate", "90"],
    (180, False, False): ["-rotate", "180"],
    (270, False, False): ["-rotate", "270"],
    (270, True, False): ["-transpose"],
    (90, True, False): ["-transverse"],
}

JPEGTRAN_EXIT_WARNING = 2

# MPO is Pillow's name for multi-picture JPEG; the primary frame is what gets rotated
JPEG_FORMATS = ("JPEG", "MPO")


def apply_descriptor(img: Image.Image, descriptor: TransformDescriptor) -> Image.Image:
    """Apply flips, then the clockwise rotation, to a PIL image."""
    if descriptor.flip_horizontal:
        img = img.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if descriptor.flip_vertical:
        img = img.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    rotation = _PIL_ROTATIONS.get(descriptor.rotation)
    if rotation is not None:
        img = img.transpose(rotation)
    return img


class PillowEngine(ITransformEngine):
    """Decodes, transposes and re-encodes with Pillow at the requested quality."""

    name = "pillow"

    def transform(
        self,
        data: bytes,
        descriptor: TransformDescriptor,
        options: RotateOptions
    ) -> TransformedImage:
        try:
            with Image.open(BytesIO(data)) as img:
                if img.format not in JPEG_FORMATS:
                    raise RotateFileError(f"Expected JPEG data, got {img.format}")
                icc_profile = img.info.get("icc_profile")
                transformed = apply_descriptor(img, descriptor)
                if transformed is img:
                    transformed = img.copy()

            output = BytesIO()
            save_kwargs = {"format": "JPEG", "quality": options.quality}
            if icc_profile:
                save_kwargs["icc_profile"] = icc_profile
            transformed.save(output, **save_kwargs)
        except RotateFileError:
            raise
        except Exception as e:
            logger.error(f"Pillow transform failed: {e}")
            raise RotateFileError(f"Could not transform image: {e}") from e

        width, height = transformed.size
        return TransformedImage(data=output.getvalue(), dimensions=ImageDimensions(width, height))


class JpegtranEngine(ITransformEngine):
    """
    Lossless transforms through the ``jpegtran`` binary.

    Runs with ``-copy all`` so every marker segment survives, and with
    ``-perfect`` so images whose size is not a multiple of the MCU fail
    instead of keeping untransformed edge blocks.
    """

    name = "jpegtran"

    def __init__(self, binary: str = "jpegtran", perfect: bool = True):
        self.binary = binary
        self.perfect = perfect

    @staticmethod
    def is_available(binary: str = "jpegtran") -> bool:
        return shutil.which(binary) is not None

    def build_command(self, descriptor: TransformDescriptor) -> List[str]:
        key = (descriptor.rotation, descriptor.flip_horizontal, descriptor.flip_vertical)
        if key not in _JPEGTRAN_ARGS:
            raise RotateFileError(f"Unsupported transform for jpegtran: {descriptor}")
        cmd = [self.binary, "-copy", "all"]
        if self.perfect:
            cmd.append("-perfect")
        cmd.extend(_JPEGTRAN_ARGS[key])
        return cmd

    def transform(
        self,
        data: bytes,
        descriptor: TransformDescriptor,
        options: RotateOptions
    ) -> TransformedImage:
        cmd = self.build_command(descriptor)
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, input=data, capture_output=True, timeout=options.timeout)
        except FileNotFoundError as e:
            raise RotateFileError(f"{self.binary} not found. Install libjpeg-turbo and add to PATH") from e
        except subprocess.TimeoutExpired as e:
            raise RotateFileError(f"{self.binary} timed out after {options.timeout}s") from e

        stderr = result.stderr.decode(errors="replace").strip()
        if result.returncode == JPEGTRAN_EXIT_WARNING and result.stdout:
            logger.warning(f"{self.binary} reported: {stderr}")
        elif result.returncode != 0 or not result.stdout:
            logger.error(f"{self.binary} failed with code: {result.returncode}")
            raise RotateFileError(f"{self.binary} failed with code {result.returncode}: {stderr}")

        try:
            dimensions = JpegFile.parse(result.stdout).dimensions
        except ExifFormatError as e:
            raise RotateFileError(f"{self.binary} produced unreadable output: {e}") from e
        return TransformedImage(data=result.stdout, dimensions=dimensions)


def select_engine(options: RotateOptions) -> ITransformEngine:
    """Engine for the requested name; ``auto`` prefers lossless jpegtran when installed."""
    if options.engine == "pillow":
        return PillowEngine()
    if options.engine == "jpegtran" or JpegtranEngine.is_available():
        return JpegtranEngine()
    logger.debug("jpegtran not available, falling back to Pillow re-encoding")
    return PillowEngine()
