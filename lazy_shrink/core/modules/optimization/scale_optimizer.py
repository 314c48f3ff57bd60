"""
Target-size scale search for lazy_shrink.

Finds the largest rendering of an image or frame sequence whose encoded size
does not exceed a byte budget. Each iteration resizes the original unit,
encodes it, writes it to a probe file and measures it; the measurement moves
one side of a search bracket and the next scale is drawn at random from
inside the bracket. The step applied to the bracket shrinks as 1/(i+2).

States: Init -> Probing -> Converged | Exhausted. Exhausting the iteration
ceiling is not an error; the best candidate under budget is still returned.
"""

import math
import random
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image

from ..analysis.compression_estimator import CompressionEstimate, find_compression_ratio
from ..analysis.media_utils import DEFAULT_DELAY_MS, INFINITE_LOOP, resolve_format, write_probe
from ..errors import InputValidationError
from ..processing.resizable_unit import FrameSequence, ResizableUnit, SingleImage
from ..processing.resizer import max_scale
from ..system.system_utils import format_size, temporary_file
from ....config import ITERATION_RANGE, TARGET_BYTES_RANGE, TOLERANCE_RANGE
from ....utils.logging import create_progress_bar, get_logger

logger = get_logger("scale_optimizer")

COLLAPSE_THRESHOLD = 0.05
UPSCALE_HEADROOM = 1.05

STOP_CEILING = "iteration ceiling reached"
STOP_COLLAPSED = "bracket collapsed"
STOP_TOLERANCE = "within byte tolerance"


@dataclass
class CandidateResult:
    """One measured candidate; kept only for reporting."""
    iteration: int
    scale: float
    size: int
    diff: int
    diff_ratio: float
    bracket: Tuple[float, float]


@dataclass
class BestKnown:
    """Largest candidate seen so far that does not exceed the target."""
    scale: float = 1.0
    size: int = 0
    diff: float = -math.inf

    @property
    def found(self) -> bool:
        return math.isfinite(self.diff)


@dataclass
class SearchState:
    """Everything one search call owns, threaded through each iteration."""
    target: int
    ratio: float
    original_size: int
    reference_size: int
    low: float = 0.0
    high: float = 1.0
    scale: float = 1.0
    size: int = 0
    iteration: int = 0
    cycles: int = 0
    best: BestKnown = field(default_factory=BestKnown)
    history: List[CandidateResult] = field(default_factory=list)

    @property
    def bracket(self) -> Tuple[float, float]:
        return (self.low, self.high)

    @property
    def bounds(self) -> Tuple[float, float]:
        return (min(self.low, self.high), max(self.low, self.high))

    def is_collapsed(self) -> bool:
        lo, hi = self.bounds
        if hi <= 0:
            return True
        return abs(1.0 - lo / hi) < COLLAPSE_THRESHOLD


@dataclass
class SearchResult:
    """Final artifact at the best-known scale."""
    data: bytes
    size: int
    scale: float
    dimensions: Tuple[int, int]
    frame_count: int
    target: int
    iterations: int
    stop_reason: str
    state: SearchState

    @property
    def converged(self) -> bool:
        return self.stop_reason != STOP_CEILING

    @property
    def within_target(self) -> bool:
        return self.size <= self.target


def validate_search_parameters(target_bytes: int, byte_tolerance: int, iteration_ceiling: int):
    """Reject parameters outside the configured half-open ranges."""
    checks = (
        ("target_bytes", target_bytes, TARGET_BYTES_RANGE),
        ("byte_tolerance", byte_tolerance, TOLERANCE_RANGE),
        ("iteration_ceiling", iteration_ceiling, ITERATION_RANGE),
    )
    for name, value, (start, end) in checks:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InputValidationError(f"{name} must be an integer, got {value!r}")
        if not start <= value < end:
            raise InputValidationError(f"{name}={value} outside [{start}:{end - 1}]")


class ScaleSearch:
    """Bounded stochastic search for the largest scale that fits the byte budget.

    ``rng`` is any object with ``uniform(a, b)``; it defaults to
    ``random.Random(seed)``. ``probe_path`` is the file rewritten every
    iteration; a tracked temp file is used when it is omitted. The upper end of
    the bracket never exceeds the scale at which a frame would pass Pillow's
    pixel limit.
    """

    def __init__(self, unit: ResizableUnit, target_bytes: int, byte_tolerance: int,
                 iteration_ceiling: int, fmt: str, probe_path: Optional[Union[str, Path]] = None,
                 rng=None, seed: Optional[int] = None, progress: bool = True,
                 temp_dir: Optional[Union[str, Path]] = None):
        validate_search_parameters(target_bytes, byte_tolerance, iteration_ceiling)
        self.unit = unit
        self.target = target_bytes
        self.tolerance = byte_tolerance
        self.ceiling = iteration_ceiling
        self.fmt = resolve_format(fmt)
        self.probe_path = Path(probe_path) if probe_path else None
        self.rng = rng if rng is not None else random.Random(seed)
        self.progress = progress
        self.temp_dir = temp_dir
        self.scale_cap = max_scale(unit.size)

    def run(self) -> SearchResult:
        with ExitStack() as stack:
            probe_path = self.probe_path
            if probe_path is None:
                probe_path = stack.enter_context(
                    temporary_file(suffix=f".{self.fmt.lower()}", prefix="lazy_shrink_probe_",
                                   directory=self.temp_dir))
            return self._search(probe_path)

    def _measure(self, state: SearchState, probe_path: Path) -> int:
        candidate = self.unit.resize(state.scale)
        state.cycles += 1
        return write_probe(probe_path, candidate.encode(self.fmt))

    def _init_state(self, probe_path: Path) -> SearchState:
        estimate: CompressionEstimate = find_compression_ratio(self.unit, self.fmt, probe_path)

        state = SearchState(target=self.target, ratio=estimate.ratio,
                            original_size=0, reference_size=0)
        osize = self._measure(state, probe_path)
        state.size = osize
        state.original_size = osize
        state.reference_size = max(osize, self.target)
        state.best = BestKnown(scale=1.0, size=state.reference_size)

        if self.target > osize:
            state.low = 1.0
            state.high = min((self.target / osize) * UPSCALE_HEADROOM, self.scale_cap)
            logger.search(f"Target exceeds original size ({format_size(osize)}); "
                          f"searching above 1.0 up to {state.high:.2f}")
        return state

    def _record(self, state: SearchState) -> CandidateResult:
        diff = state.size - self.target
        candidate = CandidateResult(
            iteration=state.iteration,
            scale=state.scale,
            size=state.size,
            diff=diff,
            diff_ratio=(state.size * state.ratio) / self.target,
            bracket=state.bracket,
        )
        state.history.append(candidate)

        if diff <= 0 and abs(diff) < abs(state.best.diff):
            state.best = BestKnown(scale=state.scale, size=state.size, diff=diff)
            logger.search_best(f"iter {state.iteration}: diff {diff}, scale {state.scale:.4f}, "
                               f"range ({state.low:.2f}:{state.high:.2f})")
        return candidate

    def _stop_reason(self, state: SearchState, candidate: CandidateResult) -> Optional[str]:
        if state.iteration >= self.ceiling:
            return STOP_CEILING
        # Never stop on the first candidate or while the current one is over budget
        if state.iteration == 0 or candidate.size > self.target:
            return None
        if state.is_collapsed():
            return STOP_COLLAPSED
        if abs(candidate.diff) < self.tolerance:
            return STOP_TOLERANCE
        return None

    def _narrow(self, state: SearchState):
        step = 1.0 / (state.iteration + 2)
        if state.size < self.target:
            state.low = state.scale - step
        else:
            state.high = min(state.scale + step, self.scale_cap)

    def _draw(self, state: SearchState):
        lo, hi = state.bounds
        previous = state.scale
        scale = self.rng.uniform(lo, hi)
        if scale < 0:
            logger.debug(f"Negative draw {scale:.4f}; keeping scale {previous:.4f}")
            scale = previous
        state.scale = scale

    def _search(self, probe_path: Path) -> SearchResult:
        width, height = self.unit.size
        logger.search(f"{self.unit.kind} {width}x{height} ({self.unit.frame_count} frame(s)) -> "
                      f"{self.fmt}, target {format_size(self.target)} ±{self.tolerance}B, "
                      f"ceiling {self.ceiling}")

        state = self._init_state(probe_path)

        with create_progress_bar(total=self.ceiling, desc="Scale search", unit="iter",
                                 leave=False, disable=not self.progress) as pbar:
            while True:
                candidate = self._record(state)
                reason = self._stop_reason(state, candidate)
                if reason:
                    break

                self._narrow(state)
                self._draw(state)
                state.size = self._measure(state, probe_path)
                state.iteration += 1

                pbar.update(1)
                pbar.set_postfix({
                    "best": state.best.diff if state.best.found else "-",
                    "scale": f"{state.scale:.3f}",
                    "range": f"{state.low:.2f}:{state.high:.2f}",
                })

        logger.search_stop(f"Stopped at iteration {state.iteration}/{self.ceiling}: {reason}")
        if not state.best.found:
            logger.warn(f"No candidate fit within {format_size(self.target)}; "
                        f"returning the unscaled rendering")
        elif reason == STOP_CEILING:
            logger.warn(f"Iteration ceiling reached; best is {state.best.diff} bytes from target")

        final_unit = self.unit.resize(state.best.scale)
        data = final_unit.encode(self.fmt)
        if state.best.found and len(data) != state.best.size:
            logger.warn(f"Final encode is {len(data)} bytes, probe measured {state.best.size}")

        return SearchResult(
            data=data,
            size=len(data),
            scale=state.best.scale,
            dimensions=final_unit.size,
            frame_count=final_unit.frame_count,
            target=self.target,
            iterations=state.iteration,
            stop_reason=reason,
            state=state,
        )


def search_image(unit: Union[ResizableUnit, Image.Image], target_bytes: int, byte_tolerance: int,
                 iteration_ceiling: int, fmt: str, **kwargs) -> SearchResult:
    """Search a still image (or any unit) for the largest scale within ``target_bytes``."""
    if isinstance(unit, Image.Image):
        unit = SingleImage.from_image(unit)
    return ScaleSearch(unit, target_bytes, byte_tolerance, iteration_ceiling, fmt, **kwargs).run()


def search_sequence(frames: Union[FrameSequence, Sequence[Image.Image]], target_bytes: int,
                    byte_tolerance: int, iteration_ceiling: int, fmt: str,
                    delay_ms: int = DEFAULT_DELAY_MS, loop: int = INFINITE_LOOP,
                    **kwargs) -> SearchResult:
    """Search a frame sequence; all frames share one scale per iteration."""
    if isinstance(frames, FrameSequence):
        unit = frames
    else:
        unit = FrameSequence([frame.convert("RGBA") for frame in frames], delay_ms=delay_ms, loop=loop)
    return ScaleSearch(unit, target_bytes, byte_tolerance, iteration_ceiling, fmt, **kwargs).run()
