"""
Main orchestration module for lazy_shrink.

Coordinates one interactive shrink:
- Input selection (argument or numbered listing of the input directory)
- Target size, tolerance and iteration prompts
- The scale search itself
- Writing the output named after its achieved size
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import (
    ITERATION_RANGE, TARGET_BYTES_RANGE, TOLERANCE_RANGE, get_config,
)
from ..utils.logging import get_logger, print_section_header, set_debug_mode, set_quiet_mode
from .modules.errors import SearchError
from .modules.interface.user_interface import (
    display_search_summary, input_prompt, prompt_number, prompt_user_confirmation,
)
from .modules.optimization.scale_optimizer import SearchResult, search_image
from .modules.processing.file_manager import FileManager, FindType
from .modules.processing.resizable_unit import load_unit
from .modules.system.system_utils import format_size

logger = get_logger("shrink_main")

TARGET_MESSAGE = "\nEnter desired filesize in bytes\nChoose a value"
TOLERANCE_MESSAGE = ("\nEnter the byte threshold (stop when the diff is equal or less than this)\n"
                     "(It may not be possible to exactly reach the filesize)\nChoose a value")
ITERATIONS_MESSAGE = "\nEnter number of iterations to run (more = closer filesize to target)\nChoose a value"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lazy Shrink - Find the largest rendering of an image that fits a byte budget")

    parser.add_argument("input", nargs="?", help="Input image (default: pick from the input directory)")
    parser.add_argument("--input-dir", help="Directory to list when no input is given (default: ./input)")
    parser.add_argument("-o", "--output-dir", help="Directory for the output file (default: .)")

    parser.add_argument("-t", "--target", type=int, help="Target size in bytes")
    parser.add_argument("--tolerance", type=int, help="Stop when within this many bytes of target")
    parser.add_argument("-n", "--iterations", type=int, help="Iteration ceiling")
    parser.add_argument("--format", help="Output format extension (default: same as input)")

    parser.add_argument("--seed", type=int, help="Seed for the scale sampling (reproducible runs)")
    parser.add_argument("--temp-dir", help="Directory for the probe file (default: system temp)")
    parser.add_argument("--no-prompt", action="store_true",
                        help="Use configured defaults instead of prompting for missing values")
    parser.add_argument("-y", "--yes", action="store_true", help="Overwrite existing output without asking")
    parser.add_argument("--no-progress", action="store_true", help="Hide the iteration progress bar")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--quiet", action="store_true", help="Only print warnings, errors and results")
    return parser


def _resolve_number(value: Optional[int], bounds, message: str, default: int, no_prompt: bool) -> int:
    if value is not None:
        return value
    if no_prompt:
        return default
    return prompt_number(bounds, message, default)


def _resolve_input(args, config, file_manager: FileManager) -> Path:
    if args.input:
        return Path(args.input)
    if args.no_prompt:
        raise ValueError("No input given and prompting is disabled")
    input_dir = Path(args.input_dir or config['input_dir'])
    return input_prompt(input_dir, FindType.FILE, "Please select an image: ", file_manager)


def shrink_file(input_path: Path, target: int, tolerance: int, iterations: int,
                file_manager: FileManager, fmt: Optional[str] = None, seed: Optional[int] = None,
                temp_dir: Optional[str] = None, progress: bool = True,
                auto_yes: bool = True) -> Tuple[SearchResult, Optional[Path]]:
    """Run the search on one file and write the result next to its siblings."""
    extension = (fmt or input_path.suffix).lstrip('.')
    unit = load_unit(input_path)

    result = search_image(unit, target, tolerance, iterations, extension,
                          seed=seed, progress=progress, temp_dir=temp_dir)

    output_path = file_manager.output_path_for(input_path, result.size, extension)
    if output_path.exists() and not prompt_user_confirmation(f"Overwrite {output_path}?", auto_yes):
        logger.warn(f"Kept existing {output_path}; result discarded")
        return result, None

    file_manager.write_output(input_path, result.data, extension)
    logger.result(f"{input_path.name}: {format_size(result.size)} at scale {result.scale:.4f} "
                  f"({result.dimensions[0]}x{result.dimensions[1]})")
    if not result.within_target:
        logger.warn(f"Output is {format_size(result.size)}, above the {format_size(target)} target")
    return result, output_path


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the shrink application."""
    args = build_parser().parse_args(argv)
    config = get_config()

    if args.debug or config['debug']:
        set_debug_mode(True)
    if args.quiet:
        set_quiet_mode(True)

    file_manager = FileManager(output_dir=args.output_dir or config['output_dir'], debug=args.debug)

    try:
        input_path = _resolve_input(args, config, file_manager)
        target = _resolve_number(args.target, TARGET_BYTES_RANGE, TARGET_MESSAGE,
                                 config['target_bytes'], args.no_prompt)
        tolerance = _resolve_number(args.tolerance, TOLERANCE_RANGE, TOLERANCE_MESSAGE,
                                    config['byte_tolerance'], args.no_prompt)
        iterations = _resolve_number(args.iterations, ITERATION_RANGE, ITERATIONS_MESSAGE,
                                     config['iterations'], args.no_prompt)
    except ValueError as e:
        logger.error(str(e))
        return 1

    seed = args.seed if args.seed is not None else config['seed']
    if not args.quiet:
        print_section_header(f"Shrinking {input_path.name} to {format_size(target)}")

    start = time.perf_counter()
    try:
        result, output_path = shrink_file(
            input_path, target, tolerance, iterations, file_manager,
            fmt=args.format, seed=seed, temp_dir=args.temp_dir or config['temp_dir'],
            progress=not args.no_progress, auto_yes=args.yes,
        )
    except SearchError as e:
        logger.error(str(e))
        return 1

    display_search_summary(result, output_path, time.perf_counter() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
