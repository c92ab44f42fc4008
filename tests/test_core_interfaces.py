"""
Tests for core interfaces, data types and errors.
"""
import pytest

from orientkit.core.interfaces import (
    ImageDimensions,
    TransformDescriptor,
    RotateOptions,
    RotationResult,
)
from orientkit.core.errors import (
    ErrorCode,
    errors,
    RotationError,
    ReadFileError,
    UnknownOrientationError,
    CorrectOrientationError,
)


class TestImageDimensions:
    """Tests for ImageDimensions dataclass."""

    def test_swapped(self):
        dims = ImageDimensions(width=1920, height=1080)
        assert dims.swapped() == ImageDimensions(width=1080, height=1920)

    def test_swapped_returns_new_instance(self):
        dims = ImageDimensions(width=640, height=480)
        dims.swapped()
        assert dims.width == 640


class TestTransformDescriptor:
    """Tests for TransformDescriptor dataclass."""

    def test_defaults_do_not_swap(self):
        descriptor = TransformDescriptor()
        assert descriptor.swaps_dimensions is False

    @pytest.mark.parametrize("rotation,swaps", [(0, False), (90, True), (180, False), (270, True)])
    def test_swaps_dimensions(self, rotation, swaps):
        assert TransformDescriptor(rotation=rotation).swaps_dimensions is swaps

    def test_is_immutable(self):
        descriptor = TransformDescriptor(rotation=90)
        with pytest.raises(AttributeError):
            descriptor.rotation = 180


class TestRotateOptions:
    """Tests for RotateOptions coercion."""

    def test_defaults(self):
        options = RotateOptions()
        assert options.quality == 100
        assert options.keep_exif is True
        assert options.engine == "auto"
        assert options.timeout == 30.0

    def test_coerce_instance_passthrough(self):
        options = RotateOptions(quality=80)
        assert RotateOptions.coerce(options) is options

    @pytest.mark.parametrize("value", [None, "options", 42, ["quality"], object()])
    def test_coerce_non_mapping_gives_defaults(self, value):
        assert RotateOptions.coerce(value) == RotateOptions()

    def test_coerce_mapping(self):
        options = RotateOptions.coerce({"quality": 85, "keep_exif": False, "engine": "pillow", "timeout": 5})
        assert options == RotateOptions(quality=85, keep_exif=False, engine="pillow", timeout=5.0)

    def test_coerce_ignores_unknown_keys(self):
        assert RotateOptions.coerce({"jpegjsMaxResolutionInMP": 100}) == RotateOptions()

    @pytest.mark.parametrize("key,value", [
        ("quality", 0),
        ("quality", 101),
        ("quality", "high"),
        ("quality", True),
        ("keep_exif", "yes"),
        ("engine", "imagemagick"),
        ("timeout", -1),
        ("timeout", "soon"),
    ])
    def test_coerce_drops_invalid_values(self, key, value):
        assert RotateOptions.coerce({key: value}) == RotateOptions()


class TestRotationResult:
    """Tests for RotationResult tuple."""

    def test_unpacks_like_a_tuple(self):
        dims = ImageDimensions(10, 20)
        error, buffer, orientation, dimensions = RotationResult(None, b"data", 6, dims)
        assert error is None
        assert buffer == b"data"
        assert orientation == 6
        assert dimensions is dims

    def test_defaults_are_empty(self):
        result = RotationResult()
        assert result == (None, None, None, None)
        assert result.ok is True

    def test_not_ok_with_error(self):
        assert RotationResult(error=ReadFileError("missing")).ok is False


class TestErrors:
    """Tests for the error taxonomy."""

    def test_codes_are_stable_strings(self):
        assert [code.value for code in ErrorCode] == [
            "read_file",
            "read_exif",
            "no_orientation",
            "unknown_orientation",
            "correct_orientation",
            "rotate_file",
        ]

    def test_errors_namespace(self):
        assert errors.read_file == ErrorCode.READ_FILE
        assert errors.correct_orientation == "correct_orientation"

    def test_error_carries_code_and_message(self):
        error = CorrectOrientationError("Orientation already correct")
        assert isinstance(error, RotationError)
        assert error.code == errors.correct_orientation
        assert error.message == "Orientation already correct"
        assert str(error) == "Orientation already correct"

    def test_unknown_orientation_keeps_value(self):
        error = UnknownOrientationError("Unknown orientation value (9)", 9)
        assert error.value == 9
        assert "unknown_orientation" in repr(error)
