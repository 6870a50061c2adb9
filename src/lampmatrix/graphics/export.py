"""Render compiled frames to image files for previewing without a lamp."""

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from lampmatrix.graphics.matrix import SIZE, Frame, Matrix

logger = logging.getLogger(__name__)


def frame_to_rgb(frame: Frame | Matrix) -> NDArray[np.uint8]:
    """(5, 5, 3) uint8 RGB array."""
    cells = frame.cells
    return np.stack(
        [(cells >> 16) & 0xFF, (cells >> 8) & 0xFF, cells & 0xFF],
        axis=-1,
    ).astype(np.uint8)


def frame_to_image(frame: Frame | Matrix, scale: int = 16, gap: int = 0) -> Image.Image:
    """Scale one frame up with nearest neighbour, optionally leaving a dark gap between cells."""
    image = Image.fromarray(frame_to_rgb(frame))
    image = image.resize((SIZE * scale, SIZE * scale), Image.Resampling.NEAREST)

    if gap > 0:
        pixels = np.array(image)
        for i in range(1, SIZE):
            edge = i * scale
            pixels[edge - gap:edge, :, :] = 0
            pixels[:, edge - gap:edge, :] = 0
        image = Image.fromarray(pixels)

    return image


def export_frames(
    frames: Sequence[Frame],
    path: str | Path,
    scale: int = 16,
    duration_ms: int = 500,
    gap: int = 1,
) -> Path:
    """Write frames to `path`.

    `.gif` produces a looping animation with `duration_ms` per frame; any
    other extension produces a horizontal strip of all frames.

    Returns:
        The path written
    """
    if not frames:
        raise ValueError("no frames to export")

    path = Path(path)
    images = [frame_to_image(f, scale=scale, gap=gap) for f in frames]

    if path.suffix.lower() == ".gif":
        images[0].save(
            path,
            save_all=True,
            append_images=images[1:],
            duration=max(duration_ms, 20),
            loop=0,
        )
    else:
        width = SIZE * scale
        strip = Image.new("RGB", (width * len(images), width))
        for i, image in enumerate(images):
            strip.paste(image, (i * width, 0))
        strip.save(path)

    logger.info(f"Exported {len(frames)} frame(s) to {path}")
    return path
