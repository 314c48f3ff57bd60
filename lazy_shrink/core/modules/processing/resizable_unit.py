"""
Resizable units for the scale search.

A unit is what the search resizes and encodes as a whole:
- SingleImage: one still frame
- FrameSequence: an ordered set of equal-size frames sharing one delay and
  loop policy, resized with one scale and encoded jointly

Units are immutable from the search's point of view: ``resize`` always
returns a new unit and leaves the source frames untouched.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image

from ..analysis.media_utils import (
    DEFAULT_DELAY_MS, INFINITE_LOOP, DecodedMedia, decode_media,
    encode_frames, load_media, raw_pixel_length,
)
from .resizer import resize_frames


class ResizableUnit:
    """Base class: frames plus shared timing metadata."""

    kind = "unit"

    def __init__(self, frames: Sequence[Image.Image],
                 delay_ms: int = DEFAULT_DELAY_MS, loop: int = INFINITE_LOOP):
        if not frames:
            raise ValueError("A resizable unit needs at least one frame")
        sizes = {frame.size for frame in frames}
        if len(sizes) != 1:
            raise ValueError(f"All frames must share one size, got {sorted(sizes)}")
        self.frames: List[Image.Image] = list(frames)
        self.delay_ms = delay_ms
        self.loop = loop

    @property
    def size(self) -> Tuple[int, int]:
        return self.frames[0].size

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def _with_frames(self, frames: List[Image.Image]) -> "ResizableUnit":
        return type(self)(frames, delay_ms=self.delay_ms, loop=self.loop)

    def resize(self, scale: float) -> "ResizableUnit":
        """Resize every member by ``scale`` into a new unit."""
        return self._with_frames(resize_frames(self.frames, scale))

    def encode(self, fmt: str) -> bytes:
        """Encode every member jointly into ``fmt``."""
        return encode_frames(self.frames, fmt, delay_ms=self.delay_ms, loop=self.loop)

    def raw_byte_length(self) -> int:
        return raw_pixel_length(self.frames)

    def __repr__(self) -> str:
        width, height = self.size
        return f"{type(self).__name__}({width}x{height}, frames={self.frame_count})"


class SingleImage(ResizableUnit):
    kind = "image"

    def __init__(self, frames: Sequence[Image.Image],
                 delay_ms: int = DEFAULT_DELAY_MS, loop: int = INFINITE_LOOP):
        if len(frames) != 1:
            raise ValueError(f"SingleImage holds exactly one frame, got {len(frames)}")
        super().__init__(frames, delay_ms, loop)

    @classmethod
    def from_image(cls, image: Image.Image) -> "SingleImage":
        return cls([image.convert("RGBA")])


class FrameSequence(ResizableUnit):
    kind = "sequence"


def unit_from_media(media: DecodedMedia) -> ResizableUnit:
    """Pick the unit variant matching the decoded frame count."""
    if media.is_animated:
        return FrameSequence(media.frames, delay_ms=media.delay_ms, loop=media.loop)
    return SingleImage(media.frames, delay_ms=media.delay_ms, loop=media.loop)


def unit_from_bytes(data: bytes, fmt: Optional[str] = None) -> ResizableUnit:
    return unit_from_media(decode_media(data, fmt))


def load_unit(path: Union[str, Path]) -> ResizableUnit:
    """Decode an image file into the matching unit."""
    return unit_from_media(load_media(path))
