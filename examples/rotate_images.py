"""
Example: Normalizing JPEG orientation with OrientKit

This example demonstrates how to:
- Rotate a single file and write the result back
- Tell "already correct" apart from real failures
- Process a folder in parallel
- Use the async entry point with a timeout
"""
import asyncio
from pathlib import Path

from orientkit import (
    Rotator,
    RotatorConfig,
    RotateOptions,
    errors,
    rotate_async,
)


def rotate_single(path: Path):
    """Rotate one file in place."""
    rotator = Rotator()

    error, buffer, orientation, dimensions = rotator.rotate(path)
    if error is None:
        path.write_bytes(buffer)
        print(f"{path.name}: orientation was {orientation}, now {dimensions.width}x{dimensions.height}")
    elif error.code == errors.correct_orientation:
        print(f"{path.name}: already upright")
    else:
        print(f"{path.name}: {error.code.value} - {error.message}")


def rotate_folder(folder: Path):
    """Rotate every JPEG in a folder using four worker threads."""
    config = RotatorConfig(
        options=RotateOptions(quality=95, keep_exif=True),
        max_workers=4,
    )
    rotator = Rotator(config)

    paths = sorted(folder.glob("*.jp*g"))
    for path, result in zip(paths, rotator.rotate_files(paths)):
        if result.ok:
            path.write_bytes(result.buffer)
        print(f"{path.name}: {'rotated' if result.ok else result.error.message}")


async def rotate_with_timeout(path: Path):
    """Rotate in a worker thread, giving up after 20 seconds."""
    result = await rotate_async(path.read_bytes(), {"engine": "auto"}, timeout=20)
    print(f"{path.name}: {result.error.message if result.error else 'rotated'}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python rotate_images.py <file_or_folder>")
        sys.exit(1)

    target = Path(sys.argv[1])
    if not target.exists():
        print(f"Not found: {target}")
        sys.exit(1)

    if target.is_dir():
        rotate_folder(target)
    else:
        rotate_single(target)
