"""
Compression ratio estimate for the scale search.

Encodes the unit once at full size, round-trips it through the probe file and
the decoder, and relates the encoded size to the raw RGBA size of what came
back. The ratio is a rough heuristic that only biases the search; it is never
used to compute output sizes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .media_utils import decode_media, raw_pixel_length, read_probe, resolve_format, write_probe
from ....utils.logging import get_logger

logger = get_logger("compression_estimator")


@dataclass
class CompressionEstimate:
    """Encoded bytes per raw RGBA byte for one unit in one format."""
    ratio: float
    encoded_size: int
    raw_size: int


def find_compression_ratio(unit, fmt: str, probe_path: Union[str, Path]) -> CompressionEstimate:
    """Estimate the compression ratio of ``unit`` when encoded as ``fmt``.

    Codec and probe failures propagate; there is no fallback estimate.
    """
    fmt = resolve_format(fmt)
    encoded_size = write_probe(probe_path, unit.encode(fmt))
    decoded = decode_media(read_probe(probe_path), fmt)
    raw_size = raw_pixel_length(decoded.frames)

    ratio = encoded_size / raw_size
    logger.debug(f"Compression ratio for {fmt}: {encoded_size}/{raw_size} = {ratio:.5f}")
    return CompressionEstimate(ratio=ratio, encoded_size=encoded_size, raw_size=raw_size)
