"""
File Processing Workflows Module

Centralizes the file handling around a search:
- Input discovery (files or directories in a folder)
- Output naming with the achieved size embedded in the name
- Writing the final artifact
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ProbeError
from ..system.system_utils import size_label
from ....utils.logging import get_logger

logger = get_logger("file_manager")


class FindType(Enum):
    FILE = "file"
    DIR = "dir"


@dataclass
class OutputName:
    """Parts of an output file name."""
    stem: str
    size_value: int
    size_unit: str
    extension: str

    @property
    def filename(self) -> str:
        return f"{self.stem}_{self.size_value}{self.size_unit}.{self.extension}"


class FileManager:
    """Input listing and output writing for the shrink workflow."""

    def __init__(self, output_dir: Union[str, Path] = ".", debug: bool = False):
        self.output_dir = Path(output_dir)
        self.debug = debug

    def list_dir(self, directory: Union[str, Path], find_type: FindType = FindType.FILE) -> List[Path]:
        """List files or directories directly inside ``directory``, sorted by name."""
        directory = Path(directory)
        if not directory.is_dir():
            raise ValueError(f"Path not found: {directory}")

        entries = []
        for item in sorted(directory.iterdir()):
            if item.name.startswith('.'):
                continue
            if find_type is FindType.FILE and item.is_file():
                entries.append(item)
            elif find_type is FindType.DIR and item.is_dir():
                entries.append(item)

        if self.debug:
            logger.debug(f"Found {len(entries)} {find_type.value}(s) in {directory}")
        return entries

    def build_output_name(self, input_path: Union[str, Path], size: int,
                          extension: Optional[str] = None) -> OutputName:
        input_path = Path(input_path)
        value, unit = size_label(size)
        ext = (extension or input_path.suffix).lstrip('.')
        stem = input_path.name.split('.')[0] or input_path.stem
        return OutputName(stem=stem, size_value=value, size_unit=unit, extension=ext)

    def output_path_for(self, input_path: Union[str, Path], size: int,
                        extension: Optional[str] = None) -> Path:
        """``<stem>_<size><unit>.<ext>`` inside the output directory."""
        return self.output_dir / self.build_output_name(input_path, size, extension).filename

    def write_output(self, input_path: Union[str, Path], data: bytes,
                     extension: Optional[str] = None) -> Path:
        """Write the final artifact, naming it after its own size."""
        output_path = self.output_path_for(input_path, len(data), extension)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            raise ProbeError(f"Could not write output {output_path}: {e}") from e
        logger.output(f"Saved {output_path}")
        return output_path
