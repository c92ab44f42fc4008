"""
Tests for pixel-transform engines.

The jpegtran round trip requires the jpegtran binary and is skipped without it.
"""
import io
import subprocess
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from orientkit.core.errors import RotateFileError
from orientkit.core.interfaces import ImageDimensions, RotateOptions, TransformDescriptor
from orientkit.exif import JpegFile
from orientkit.image import JpegtranEngine, PillowEngine, OrientationResolver, select_engine

from .samples import make_jpeg, make_mpo, IMAGE_SIZE

requires_jpegtran = pytest.mark.skipif(
    not JpegtranEngine.is_available(), reason="jpegtran not installed"
)


class TestPillowEngine:
    """Tests for PillowEngine class."""

    @pytest.mark.parametrize("orientation", range(2, 9))
    def test_dimensions(self, orientation):
        descriptor = OrientationResolver.resolve(orientation)
        result = PillowEngine().transform(make_jpeg(orientation), descriptor, RotateOptions())

        expected = ImageDimensions(*IMAGE_SIZE)
        if descriptor.swaps_dimensions:
            expected = expected.swapped()
        assert result.dimensions == expected
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.format == "JPEG"
            assert img.size == (expected.width, expected.height)

    def test_output_has_no_exif(self):
        result = PillowEngine().transform(make_jpeg(6), TransformDescriptor(rotation=90), RotateOptions())
        assert JpegFile.parse(result.data).exif_index() is None

    def test_quality_is_passed_through(self):
        data = make_jpeg(6)
        descriptor = TransformDescriptor(rotation=90)
        low = PillowEngine().transform(data, descriptor, RotateOptions(quality=10))
        high = PillowEngine().transform(data, descriptor, RotateOptions(quality=100))
        assert len(low.data) < len(high.data)

    def test_identity_transform(self):
        result = PillowEngine().transform(make_jpeg(1), TransformDescriptor(), RotateOptions())
        assert result.dimensions == ImageDimensions(*IMAGE_SIZE)

    def test_accepts_multi_picture_jpeg(self):
        data = make_mpo(6)
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "MPO"

        result = PillowEngine().transform(data, TransformDescriptor(rotation=90), RotateOptions())

        assert result.dimensions == ImageDimensions(*IMAGE_SIZE).swapped()
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.format == "JPEG"

    def test_rejects_non_jpeg(self):
        output = io.BytesIO()
        Image.new("RGB", (8, 8)).save(output, "PNG")
        with pytest.raises(RotateFileError, match="Expected JPEG"):
            PillowEngine().transform(output.getvalue(), TransformDescriptor(rotation=90), RotateOptions())

    def test_corrupt_data(self):
        data = make_jpeg(6)
        with pytest.raises(RotateFileError):
            PillowEngine().transform(data[:200], TransformDescriptor(rotation=90), RotateOptions())


class TestJpegtranEngine:
    """Tests for JpegtranEngine class."""

    @pytest.mark.parametrize("orientation,args", [
        (2, ["-flip", "horizontal"]),
        (3, ["-rotate", "180"]),
        (4, ["-flip", "vertical"]),
        (5, ["-transpose"]),
        (6, ["-rotate", "90"]),
        (7, ["-transverse"]),
        (8, ["-rotate", "270"]),
    ])
    def test_build_command(self, orientation, args):
        engine = JpegtranEngine()
        cmd = engine.build_command(OrientationResolver.resolve(orientation))
        assert cmd == ["jpegtran", "-copy", "all", "-perfect"] + args

    def test_build_command_without_perfect(self):
        cmd = JpegtranEngine(perfect=False).build_command(TransformDescriptor(rotation=90))
        assert "-perfect" not in cmd

    def test_unsupported_combination(self):
        with pytest.raises(RotateFileError, match="Unsupported"):
            JpegtranEngine().build_command(TransformDescriptor(rotation=180, flip_horizontal=True))

    def test_missing_binary(self):
        engine = JpegtranEngine(binary="definitely-not-jpegtran")
        with pytest.raises(RotateFileError, match="not found"):
            engine.transform(make_jpeg(6), TransformDescriptor(rotation=90), RotateOptions())

    def test_failure_exit_code(self):
        failed = Mock(returncode=1, stdout=b"", stderr=b"transformation is not perfect")
        with patch("orientkit.image.engine.subprocess.run", return_value=failed):
            with pytest.raises(RotateFileError, match="not perfect"):
                JpegtranEngine().transform(make_jpeg(6), TransformDescriptor(rotation=90), RotateOptions())

    def test_timeout(self):
        with patch(
            "orientkit.image.engine.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="jpegtran", timeout=1),
        ):
            with pytest.raises(RotateFileError, match="timed out"):
                JpegtranEngine().transform(make_jpeg(6), TransformDescriptor(rotation=90), RotateOptions(timeout=1))

    def test_passes_data_and_timeout(self):
        output = make_jpeg(1, size=(32, 64))
        completed = Mock(returncode=0, stdout=output, stderr=b"")
        data = make_jpeg(6)
        with patch("orientkit.image.engine.subprocess.run", return_value=completed) as run:
            result = JpegtranEngine().transform(data, TransformDescriptor(rotation=90), RotateOptions(timeout=12))

        assert run.call_args.kwargs["input"] == data
        assert run.call_args.kwargs["timeout"] == 12
        assert result.data == output
        assert result.dimensions == ImageDimensions(32, 64)

    def test_warning_exit_code_is_accepted(self):
        output = make_jpeg(1)
        completed = Mock(returncode=2, stdout=output, stderr=b"Corrupt JPEG data")
        with patch("orientkit.image.engine.subprocess.run", return_value=completed):
            result = JpegtranEngine().transform(make_jpeg(3), TransformDescriptor(rotation=180), RotateOptions())
        assert result.data == output

    def test_unreadable_output(self):
        completed = Mock(returncode=0, stdout=b"garbage", stderr=b"")
        with patch("orientkit.image.engine.subprocess.run", return_value=completed):
            with pytest.raises(RotateFileError, match="unreadable"):
                JpegtranEngine().transform(make_jpeg(6), TransformDescriptor(rotation=90), RotateOptions())

    @requires_jpegtran
    @pytest.mark.parametrize("orientation", range(2, 9))
    def test_real_transform(self, orientation):
        descriptor = OrientationResolver.resolve(orientation)
        result = JpegtranEngine().transform(make_jpeg(orientation), descriptor, RotateOptions())

        expected = ImageDimensions(*IMAGE_SIZE)
        if descriptor.swaps_dimensions:
            expected = expected.swapped()
        assert result.dimensions == expected
        # -copy all keeps the original EXIF segment for the caller to replace
        assert JpegFile.parse(result.data).exif_index() is not None


class TestSelectEngine:
    """Tests for engine selection."""

    def test_pillow_requested(self):
        assert isinstance(select_engine(RotateOptions(engine="pillow")), PillowEngine)

    def test_jpegtran_requested(self):
        assert isinstance(select_engine(RotateOptions(engine="jpegtran")), JpegtranEngine)

    def test_auto_prefers_jpegtran(self):
        with patch.object(JpegtranEngine, "is_available", return_value=True):
            assert isinstance(select_engine(RotateOptions()), JpegtranEngine)

    def test_auto_falls_back_to_pillow(self):
        with patch.object(JpegtranEngine, "is_available", return_value=False):
            assert isinstance(select_engine(RotateOptions()), PillowEngine)
