"""
User interface module for lazy_shrink.

This module handles user interaction including:
- Bounded numeric prompts with defaults
- Picking an input file from a numbered listing
- Confirmation prompts
- Result summary display
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from ..processing.file_manager import FileManager, FindType
from ..system.system_utils import format_duration, format_size


def prompt_number(bounds: Tuple[int, int], message: str = "", default: Optional[int] = None) -> int:
    """Prompt until the user enters an integer inside the half-open ``bounds``.

    Unparsable or empty input returns ``default`` when one is given; a number
    outside the bounds always re-prompts. Closed stdin also falls back to
    ``default``, or raises ValueError when there is none.
    """
    start, end = bounds
    if message:
        if default is not None:
            print(f"{message} in the range [{start}:{end - 1}] (default: {default})")
        else:
            print(f"{message} in the range [{start}:{end - 1}]")

    while True:
        try:
            response = input().strip()
        except EOFError:
            if default is not None:
                return default
            raise ValueError("No input available for prompt") from None
        try:
            value = int(response)
        except ValueError:
            if default is not None:
                print(default)
                return default
            continue
        if start <= value < end:
            return value


def input_prompt(directory: Union[str, Path], find_type: FindType = FindType.FILE,
                 message: str = "", file_manager: Optional[FileManager] = None) -> Path:
    """List ``directory`` with indices and return the entry the user picks."""
    file_manager = file_manager or FileManager()
    entries = file_manager.list_dir(directory, find_type)
    if not entries:
        raise ValueError(f"Nothing to choose from in {directory}")

    if message:
        print(message)
    for i, entry in enumerate(entries):
        print(f"{i}: {entry}")

    return entries[prompt_number((0, len(entries)))]


def prompt_user_confirmation(message: str, auto_yes: bool = False) -> bool:
    """Prompt user for confirmation."""
    if auto_yes:
        print(f"{message} [auto-yes]")
        return True

    while True:
        try:
            response = input(f"{message} [y/N]: ").strip().lower()
        except EOFError:
            return False
        if response in ['y', 'yes']:
            return True
        elif response in ['n', 'no', '']:
            return False
        else:
            print("Please enter 'y' or 'n'")


def display_search_summary(result, output_path: Optional[Path], elapsed_seconds: float):
    """Display requested vs achieved size for a finished search."""
    width, height = result.dimensions
    status = "within" if result.within_target else "OVER"
    print(f"\nStopped at iteration {result.iterations} ({result.stop_reason})")
    print(f"  Requested: {format_size(result.target)} ({result.target} bytes)")
    print(f"  Achieved:  {format_size(result.size)} ({result.size} bytes, {status} target)")
    print(f"  Scale:     {result.scale:.4f} -> {width}x{height}, {result.frame_count} frame(s)")
    if output_path is not None:
        print(f"  Output:    {output_path}")
    print(f"\nFinished in: {elapsed_seconds * 1000:.0f}ms! ({format_duration(elapsed_seconds)})")
