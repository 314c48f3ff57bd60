"""Configuration management for lazy-shrink."""

import os
from pathlib import Path
from typing import Optional, Dict, Any

from .utils.logging import get_logger

logger = get_logger("config")

# Half-open [start, end) bounds accepted by the search and the prompts
TARGET_BYTES_RANGE = (128, 2**32)
TOLERANCE_RANGE = (0, 2**32)
ITERATION_RANGE = (8, 16384)

DEFAULT_TARGET_BYTES = 1000
DEFAULT_BYTE_TOLERANCE = 128
DEFAULT_ITERATIONS = 256


def load_env_file(env_path: Optional[Path] = None) -> Dict[str, str]:
    """Load environment variables from .env file."""
    if env_path is None:
        # Look for .env in current directory, then in package directory
        candidates = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for candidate in candidates:
            if candidate.exists():
                env_path = candidate
                break

    env_vars = {}

    if env_path and env_path.exists():
        with open(env_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    if '=' in line:
                        key, value = line.split('=', 1)
                        env_vars[key.strip()] = value.strip()

    return env_vars


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


def get_config() -> Dict[str, Any]:
    """Get configuration from environment variables and .env file."""
    env_vars = load_env_file()

    config = {
        'input_dir': env_vars.get('input_dir', os.getenv('INPUT_DIR', 'input')),
        'output_dir': env_vars.get('output_dir', os.getenv('OUTPUT_DIR', '.')),
        'temp_dir': env_vars.get('temp_dir', os.getenv('TEMP_DIR')),
        'target_bytes': int(env_vars.get('target_bytes', os.getenv('TARGET_BYTES', str(DEFAULT_TARGET_BYTES)))),
        'byte_tolerance': int(env_vars.get('byte_tolerance', os.getenv('BYTE_TOLERANCE', str(DEFAULT_BYTE_TOLERANCE)))),
        'iterations': int(env_vars.get('iterations', os.getenv('ITERATIONS', str(DEFAULT_ITERATIONS)))),
        'seed': _optional_int(env_vars.get('seed', os.getenv('SEED'))),
        'debug': env_vars.get('debug', os.getenv('DEBUG', 'false')).lower() in ('true', '1', 'yes'),
    }

    return config


def get_input_root() -> Optional[Path]:
    """Get the input directory from configuration."""
    config = get_config()
    input_dir = config.get('input_dir')

    if input_dir:
        path = Path(input_dir)
        if path.exists() and path.is_dir():
            return path
        else:
            logger.warn(f"input_dir path does not exist: {input_dir}")

    return None
