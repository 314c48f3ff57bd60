"""Resize operator: uniform scale with a fixed Lanczos filter."""

import math
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from ..errors import CodecError

RESAMPLE_FILTER = Image.Resampling.LANCZOS
MIN_DIMENSION = 1

# Pillow's decompression-bomb threshold, used when MAX_IMAGE_PIXELS is disabled
DEFAULT_PIXEL_LIMIT = 89_478_485


def pixel_limit() -> int:
    return Image.MAX_IMAGE_PIXELS or DEFAULT_PIXEL_LIMIT


def max_scale(size: Tuple[int, int], limit: Optional[int] = None) -> float:
    """Largest scale whose output stays within the pixel limit; never below 1.0."""
    limit = limit or pixel_limit()
    width, height = size
    return max(1.0, math.sqrt(limit / (width * height)))


def scaled_dimensions(size: Tuple[int, int], scale: float) -> Tuple[int, int]:
    """Floor each axis independently, clamped to a 1x1 minimum."""
    if not math.isfinite(scale) or scale < 0:
        raise ValueError(f"Scale must be a finite non-negative number, got {scale}")
    width, height = size
    return (max(MIN_DIMENSION, int(math.floor(width * scale))),
            max(MIN_DIMENSION, int(math.floor(height * scale))))


def resize_frame(frame: Image.Image, scale: float) -> Image.Image:
    """Return a new frame scaled by ``scale``; the source frame is never modified."""
    return resize_frames([frame], scale)[0]


def resize_frames(frames: Sequence[Image.Image], scale: float) -> List[Image.Image]:
    """Resize every frame to the same target size computed from the first frame."""
    if not frames:
        return []
    new_size = scaled_dimensions(frames[0].size, scale)
    try:
        return [frame.resize(new_size, RESAMPLE_FILTER) for frame in frames]
    except MemoryError as e:
        raise CodecError(f"Out of memory resizing {len(frames)} frame(s) to "
                         f"{new_size[0]}x{new_size[1]}") from e
