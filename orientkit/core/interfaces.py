"""
Abstract interfaces and data types shared by all orientkit components.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Mapping, NamedTuple, Optional
import logging

logger = logging.getLogger(__name__)


ORIENTATION_NORMAL = 1
VALID_ORIENTATIONS = range(1, 9)

ENGINE_CHOICES = ("auto", "jpegtran", "pillow")


@dataclass
class ImageDimensions:
    """Width and height in pixels."""
    width: int
    height: int

    def swapped(self) -> "ImageDimensions":
        return ImageDimensions(width=self.height, height=self.width)


@dataclass(frozen=True)
class TransformDescriptor:
    """
    Physical pixel operation for one orientation value.

    The flips are applied first, then the clockwise rotation.
    """
    rotation: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @property
    def swaps_dimensions(self) -> bool:
        return self.rotation in (90, 270)


@dataclass
class TransformedImage:
    """Output of a pixel-transform engine."""
    data: bytes
    dimensions: ImageDimensions


@dataclass
class RotateOptions:
    """Per-call configuration for the rotation pipeline."""
    quality: int = 100
    keep_exif: bool = True
    engine: str = "auto"
    timeout: float = 30.0

    @classmethod
    def coerce(cls, value: Any) -> "RotateOptions":
        """
        Build options from whatever the caller passed.

        Instances are returned as-is, mappings contribute their recognized
        keys, anything else yields the defaults. Invalid values are dropped.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            if value is not None:
                logger.debug(f"Ignoring non-mapping options of type {type(value).__name__}")
            return cls()

        known = {f.name for f in fields(cls)}
        accepted = {}
        for key, raw in value.items():
            if key not in known:
                logger.debug(f"Ignoring unknown option: {key!r}")
                continue
            checked = cls._validate(key, raw)
            if checked is None:
                logger.warning(f"Ignoring invalid value for option {key!r}: {raw!r}")
                continue
            accepted[key] = checked
        return cls(**accepted)

    @staticmethod
    def _validate(key: str, raw: Any) -> Optional[Any]:
        if key == "quality":
            if isinstance(raw, bool) or not isinstance(raw, int):
                return None
            return raw if 1 <= raw <= 100 else None
        if key == "keep_exif":
            return raw if isinstance(raw, bool) else None
        if key == "engine":
            return raw if raw in ENGINE_CHOICES else None
        if key == "timeout":
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                return None
            return float(raw) if raw > 0 else None
        return None


class RotationResult(NamedTuple):
    """Outcome of one rotation call, unpackable as a 4-tuple."""
    error: Optional[Exception] = None
    buffer: Optional[bytes] = None
    orientation: Optional[int] = None
    dimensions: Optional[ImageDimensions] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ITransformEngine(ABC):
    """Interface for lossless (or near-lossless) JPEG pixel transforms."""

    name = "engine"

    @abstractmethod
    def transform(
        self,
        data: bytes,
        descriptor: TransformDescriptor,
        options: RotateOptions
    ) -> TransformedImage:
        """Apply the descriptor to compressed JPEG bytes."""
        pass
