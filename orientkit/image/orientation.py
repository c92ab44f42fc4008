"""
Orientation value to pixel transform mapping.
Follows Single Responsibility Principle - only decides what to do, never does it.
"""
from typing import Dict

from ..core.interfaces import (
    ImageDimensions,
    TransformDescriptor,
    ORIENTATION_NORMAL,
)


class OrientationResolver:
    """Maps EXIF orientation values to the transform that normalizes them."""

    TARGET_ORIENTATION = ORIENTATION_NORMAL

    _TRANSFORMS: Dict[int, TransformDescriptor] = {
        1: TransformDescriptor(),
        2: TransformDescriptor(flip_horizontal=True),
        3: TransformDescriptor(rotation=180),
        4: TransformDescriptor(flip_vertical=True),
        5: TransformDescriptor(rotation=270, flip_horizontal=True),
        6: TransformDescriptor(rotation=90),
        7: TransformDescriptor(rotation=90, flip_horizontal=True),
        8: TransformDescriptor(rotation=270),
    }

    @classmethod
    def resolve(cls, orientation: int) -> TransformDescriptor:
        """Transform to apply to stored pixels for a valid orientation (1-8)."""
        return cls._TRANSFORMS[orientation]

    @classmethod
    def target(cls, orientation: int) -> int:
        """Orientation value to write once the transform has been applied."""
        return cls.TARGET_ORIENTATION

    @classmethod
    def output_dimensions(cls, orientation: int, dimensions: ImageDimensions) -> ImageDimensions:
        if cls.resolve(orientation).swaps_dimensions:
            return dimensions.swapped()
        return ImageDimensions(dimensions.width, dimensions.height)
