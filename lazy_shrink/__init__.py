"""
Lazy Shrink - Find the largest rendering of an image or GIF that fits a byte budget.
"""

__version__ = "1.0.0"
__author__ = "Rallade"
__email__ = "rallade@hotmail.com"

# Import configuration utilities
from .config import get_config, get_input_root, load_env_file

# Core functionality will be imported on-demand to keep `import lazy_shrink` light
def get_search_functions():
    """Get scale search functions (imported on-demand)."""
    from .core.modules.optimization.scale_optimizer import (
        ScaleSearch,
        search_image,
        search_sequence,
        validate_search_parameters,
    )
    return {
        'ScaleSearch': ScaleSearch,
        'search_image': search_image,
        'search_sequence': search_sequence,
        'validate_search_parameters': validate_search_parameters,
    }

__all__ = [
    "get_config",
    "get_input_root",
    "load_env_file",
    "get_search_functions",
]
