"""
Rotator - Main facade for normalizing JPEG orientation.
Reads the EXIF orientation, runs the matching pixel transform and splices
the updated EXIF block back into the transformed image.
Follows Facade Pattern for simplified API.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union
import asyncio
import logging
import os

from .core.errors import (
    CorrectOrientationError,
    ExifFormatError,
    ReadFileError,
    RotateFileError,
    RotationError,
)
from .core.interfaces import (
    ITransformEngine,
    ImageDimensions,
    RotateOptions,
    RotationResult,
    TransformDescriptor,
    TransformedImage,
    ORIENTATION_NORMAL,
)
from .exif.reader import ExifDocument, ExifReader
from .exif.segments import splice_exif
from .exif.writer import ExifWriter
from .image.engine import JpegtranEngine, PillowEngine, select_engine
from .image.orientation import OrientationResolver

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, bytes, bytearray, memoryview]


def load_source(source: Any) -> bytes:
    """
    Resolve a path or an in-memory buffer to bytes.

    Raises:
        ReadFileError: Unreadable path or unsupported input type
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        try:
            return Path(source).read_bytes()
        except (OSError, ValueError) as e:
            raise ReadFileError(f"Could not read file {source}: {e}") from e
    raise ReadFileError(f"Expected a file path or bytes, got {type(source).__name__}")


@dataclass
class RotatorConfig:
    """Defaults for a Rotator instance."""
    options: Optional[RotateOptions] = None
    engine: Optional[ITransformEngine] = None
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.options is None:
            self.options = RotateOptions()


class Rotator:
    """
    Normalizes the orientation of JPEG images.

    Public methods never raise; failures come back in
    ``RotationResult.error``. Each call owns all of its data, so one
    instance can serve concurrent calls.

    Example:
        rotator = Rotator()

        error, buffer, orientation, dimensions = rotator.rotate("photo.jpg")
        if error is None:
            Path("photo.jpg").write_bytes(buffer)
    """

    def __init__(self, config: Optional[RotatorConfig] = None):
        self.config = config or RotatorConfig()

    def _options(self, options: Any) -> RotateOptions:
        if options is None:
            return self.config.options
        return RotateOptions.coerce(options)

    def rotate(self, source: Source, options: Any = None) -> RotationResult:
        """
        Rotate a JPEG so its pixels match EXIF orientation 1.

        Args:
            source: File path or JPEG bytes
            options: RotateOptions, a mapping of option names, or anything
                else (treated as defaults)

        Returns:
            RotationResult. For no_orientation, unknown_orientation and
            correct_orientation errors the original bytes are returned as
            the buffer; read_file, read_exif and rotate_file carry none.
        """
        options = self._options(options)

        try:
            data = load_source(source)
            document = ExifReader.load(data)
        except RotationError as e:
            logger.debug(f"Cannot read {self._describe(source)}: {e}")
            return RotationResult(error=e)

        try:
            orientation = ExifReader.orientation(document)
            if orientation == ORIENTATION_NORMAL:
                raise CorrectOrientationError("Orientation already correct")
        except RotationError as e:
            logger.debug(f"Leaving {self._describe(source)} untouched: {e}")
            return RotationResult(error=e, buffer=data)

        try:
            buffer, dimensions = self._transform(data, document, orientation, options)
        except RotationError as e:
            return RotationResult(error=e)

        return RotationResult(buffer=buffer, orientation=orientation, dimensions=dimensions)

    def rotate_or_raise(self, source: Source, options: Any = None) -> RotationResult:
        """Same as rotate(), but raises the RotationError instead of returning it."""
        result = self.rotate(source, options)
        if result.error is not None:
            raise result.error
        return result

    async def rotate_async(
        self,
        source: Source,
        options: Any = None,
        timeout: Optional[float] = None
    ) -> RotationResult:
        """
        Rotate in a worker thread.

        A call exceeding ``timeout`` (default ``options.timeout``) returns a
        rotate_file error; the worker's result is discarded.
        """
        options = self._options(options)
        timeout = options.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(asyncio.to_thread(self.rotate, source, options), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Rotation of {self._describe(source)} timed out after {timeout}s")
            return RotationResult(error=RotateFileError(f"Rotation timed out after {timeout}s"))

    def rotate_files(
        self,
        sources: Sequence[Source],
        options: Any = None,
        max_workers: Optional[int] = None
    ) -> List[RotationResult]:
        """Rotate independent inputs in parallel; results follow input order."""
        options = self._options(options)
        max_workers = max_workers or self.config.max_workers
        results: List[Optional[RotationResult]] = [None] * len(sources)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.rotate, source, options): index
                for index, source in enumerate(sources)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        return results

    def _transform(
        self,
        data: bytes,
        document: ExifDocument,
        orientation: int,
        options: RotateOptions
    ) -> Tuple[bytes, ImageDimensions]:
        descriptor = OrientationResolver.resolve(orientation)
        engine = self.config.engine or select_engine(options)

        try:
            transformed = self._run_engine(engine, data, descriptor, options)
        except RotateFileError as e:
            # auto mode only: retry jpegtran failures (e.g. -perfect on odd sizes) with Pillow
            strict = self.config.engine is not None or options.engine != "auto"
            if strict or not isinstance(engine, JpegtranEngine):
                raise
            logger.warning(f"Lossless rotation failed, falling back to Pillow: {e.message}")
            engine = PillowEngine()
            transformed = self._run_engine(engine, data, descriptor, options)

        tiff = ExifWriter.write(
            document,
            orientation=OrientationResolver.target(orientation),
            dimensions=transformed.dimensions,
            keep_exif=options.keep_exif,
        )
        try:
            buffer = splice_exif(transformed.data, tiff)
        except ExifFormatError as e:
            raise RotateFileError(f"Could not insert EXIF data: {e}") from e

        dims = transformed.dimensions
        logger.info(f"Rotated image (orientation {orientation}) with {engine.name}: {dims.width}x{dims.height}")
        return buffer, dims

    @staticmethod
    def _run_engine(
        engine: ITransformEngine,
        data: bytes,
        descriptor: TransformDescriptor,
        options: RotateOptions
    ) -> TransformedImage:
        try:
            return engine.transform(data, descriptor, options)
        except RotateFileError:
            raise
        except Exception as e:
            logger.error(f"Engine {engine.name} failed: {e}")
            raise RotateFileError(f"Could not transform image: {e}") from e

    @staticmethod
    def _describe(source: Any) -> str:
        if isinstance(source, (bytes, bytearray, memoryview)):
            return f"<{len(source)} byte buffer>"
        return str(source)


def rotate(source: Source, options: Any = None) -> RotationResult:
    """Rotate with a default Rotator. See Rotator.rotate()."""
    return Rotator().rotate(source, options)


async def rotate_async(
    source: Source,
    options: Any = None,
    timeout: Optional[float] = None
) -> RotationResult:
    """Rotate with a default Rotator in a worker thread. See Rotator.rotate_async()."""
    return await Rotator().rotate_async(source, options, timeout)
