"""
Pytest configuration and fixtures for OrientKit tests.
"""
import pytest
import tempfile
import shutil
from pathlib import Path

from orientkit import PillowEngine, Rotator, RotatorConfig

from .samples import make_jpeg


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="orientkit_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def samples(temp_dir) -> dict:
    """Sample files keyed by name, mirroring a camera test set."""
    files = {}
    for orientation in range(1, 9):
        path = temp_dir / f"image_{orientation}.jpg"
        path.write_bytes(make_jpeg(orientation))
        files[orientation] = path

    files["no_orientation"] = temp_dir / "image_no_orientation.jpg"
    files["no_orientation"].write_bytes(make_jpeg(None))

    files["unknown_orientation"] = temp_dir / "image_unknown_orientation.jpg"
    files["unknown_orientation"].write_bytes(make_jpeg(9))

    files["no_exif"] = temp_dir / "image_no_exif.jpg"
    files["no_exif"].write_bytes(make_jpeg(exif=False))

    files["textfile"] = temp_dir / "textfile.md"
    files["textfile"].write_text("# Not an image\n")
    return files


@pytest.fixture
def rotator() -> Rotator:
    """Rotator pinned to the Pillow engine so results do not depend on jpegtran."""
    return Rotator(RotatorConfig(engine=PillowEngine()))
