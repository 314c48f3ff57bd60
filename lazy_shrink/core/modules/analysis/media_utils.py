"""
Media utilities for lazy_shrink.

Codec adapter around Pillow:
- Format resolution from file extensions
- Decoding encoded blobs into RGBA frames with shared timing metadata
- Encoding single frames or frame sequences back into a container
- Probe file writing and size measurement
"""

import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from PIL import Image, ImageSequence, UnidentifiedImageError

from ..errors import CodecError, ProbeError
from ....utils.logging import get_logger

logger = get_logger("media_utils")

DEFAULT_DELAY_MS = 100
INFINITE_LOOP = 0

FORMAT_BY_EXTENSION = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "apng": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
    "bmp": "BMP",
    "tif": "TIFF",
    "tiff": "TIFF",
}

# Containers Pillow can write with save_all=True
SEQUENCE_FORMATS = {"GIF", "WEBP", "PNG"}

# Containers without an alpha channel
OPAQUE_FORMATS = {"JPEG", "BMP"}

# GIF has binary transparency: one palette slot is reserved for it
GIF_TRANSPARENT_INDEX = 255
ALPHA_THRESHOLD = 128


@dataclass
class DecodedMedia:
    """Frames decoded from one encoded artifact."""
    frames: List[Image.Image]
    delay_ms: int = DEFAULT_DELAY_MS
    loop: int = INFINITE_LOOP
    format: Optional[str] = None

    @property
    def is_animated(self) -> bool:
        return len(self.frames) > 1


def resolve_format(fmt: str) -> str:
    """Map an extension (``jpg``, ``.gif``) or a Pillow format name to a Pillow format name."""
    key = fmt.strip().lstrip(".").lower()
    if key in FORMAT_BY_EXTENSION:
        return FORMAT_BY_EXTENSION[key]
    if key.upper() in FORMAT_BY_EXTENSION.values():
        return key.upper()
    raise CodecError(f"Unsupported image format: {fmt!r}")


def decode_media(data: bytes, fmt: Optional[str] = None) -> DecodedMedia:
    """Decode an encoded blob into RGBA frames plus delay and loop metadata."""
    formats = [resolve_format(fmt)] if fmt else None
    try:
        with Image.open(io.BytesIO(data), formats=formats) as img:
            delay_ms = int(img.info.get("duration") or DEFAULT_DELAY_MS)
            loop = int(img.info.get("loop", INFINITE_LOOP))
            detected = img.format
            frames = [frame.convert("RGBA") for frame in ImageSequence.Iterator(img)]
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError,
            ValueError, EOFError, MemoryError) as e:
        raise CodecError(f"Could not decode image data: {e}") from e

    if not frames:
        raise CodecError("Decoded image contains no frames")

    logger.codec(f"Decoded {len(frames)} frame(s) {frames[0].size[0]}x{frames[0].size[1]} "
                 f"({detected}, delay {delay_ms}ms, loop {loop})")
    return DecodedMedia(frames=frames, delay_ms=delay_ms, loop=loop, format=detected)


def load_media(path: Union[str, Path]) -> DecodedMedia:
    """Read and decode an image file from disk."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ProbeError(f"Could not read {path}: {e}") from e
    fmt = path.suffix if path.suffix.lstrip(".").lower() in FORMAT_BY_EXTENSION else None
    return decode_media(data, fmt)


def _flatten(frame: Image.Image) -> Image.Image:
    """Remove alpha by compositing onto white so opaque formats save cleanly."""
    if frame.mode in ("RGBA", "LA"):
        background = Image.new("RGB", frame.size, (255, 255, 255))
        background.paste(frame, mask=frame.split()[-1])
        return background
    return frame.convert("RGB")


def _has_transparency(frames: Sequence[Image.Image]) -> bool:
    for frame in frames:
        if "A" in frame.getbands() and frame.getchannel("A").getextrema()[0] < ALPHA_THRESHOLD:
            return True
    return False


def _to_gif_palette(frame: Image.Image, transparent: bool) -> Image.Image:
    """Quantize to an adaptive palette, mapping mostly-transparent pixels to the reserved slot."""
    rgba = frame.convert("RGBA")
    if not transparent:
        return rgba.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE)
    paletted = rgba.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE,
                                           colors=GIF_TRANSPARENT_INDEX)
    mask = rgba.getchannel("A").point(lambda a: 255 if a < ALPHA_THRESHOLD else 0)
    paletted.paste(GIF_TRANSPARENT_INDEX, mask=mask)
    return paletted


def _prepare_frame(frame: Image.Image, fmt: str, transparent: bool = False) -> Image.Image:
    if fmt in OPAQUE_FORMATS:
        return _flatten(frame)
    if fmt == "GIF":
        return _to_gif_palette(frame, transparent)
    return frame


def _save_options(fmt: str, transparent: bool, multi_frame: bool) -> dict:
    if fmt != "GIF":
        return {}
    # Palette optimisation would renumber the reserved transparent slot
    options = {"optimize": False}
    if transparent:
        options["transparency"] = GIF_TRANSPARENT_INDEX
        if multi_frame:
            options["disposal"] = 2
    return options


def encode_frames(frames: Sequence[Image.Image], fmt: str,
                  delay_ms: int = DEFAULT_DELAY_MS, loop: int = INFINITE_LOOP) -> bytes:
    """Encode one frame, or a whole sequence jointly, into ``fmt``."""
    fmt = resolve_format(fmt)
    if not frames:
        raise CodecError("Cannot encode an empty frame list")
    if len(frames) > 1 and fmt not in SEQUENCE_FORMATS:
        raise CodecError(f"{fmt} cannot hold {len(frames)} frames")

    transparent = fmt == "GIF" and _has_transparency(frames)
    prepared = [_prepare_frame(frame, fmt, transparent) for frame in frames]
    options = _save_options(fmt, transparent, len(prepared) > 1)
    buffer = io.BytesIO()
    try:
        if len(prepared) == 1:
            prepared[0].save(buffer, format=fmt, **options)
        else:
            prepared[0].save(
                buffer,
                format=fmt,
                save_all=True,
                append_images=prepared[1:],
                duration=delay_ms,
                loop=loop,
                **options,
            )
    except (OSError, ValueError, KeyError, MemoryError) as e:
        raise CodecError(f"Could not encode {len(prepared)} frame(s) as {fmt}: {e}") from e
    return buffer.getvalue()


def raw_pixel_length(frames: Sequence[Image.Image]) -> int:
    """Total RGBA byte length of all frames."""
    total = 0
    for frame in frames:
        width, height = frame.size
        total += width * height * 4
    return total


def write_probe(path: Union[str, Path], data: bytes) -> int:
    """Overwrite the probe file with ``data`` and return its size on disk."""
    path = Path(path)
    try:
        with open(path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        raise ProbeError(f"Could not write probe file {path}: {e}") from e
    size = probe_size(path)
    logger.probe(f"{path.name}: {size} bytes")
    return size


def read_probe(path: Union[str, Path]) -> bytes:
    """Read the probe file back."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ProbeError(f"Could not read probe file {path}: {e}") from e


def probe_size(target: Union[bytes, bytearray, str, Path]) -> int:
    """Byte length of an encoded artifact, given as bytes or as a path."""
    if isinstance(target, (bytes, bytearray)):
        return len(target)
    try:
        return os.stat(target).st_size
    except OSError as e:
        raise ProbeError(f"Could not measure {target}: {e}") from e
