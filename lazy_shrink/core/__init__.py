"""Core shrink orchestration and search modules."""

from .main import main
from .modules.optimization.scale_optimizer import search_image, search_sequence

__all__ = ["main", "search_image", "search_sequence"]
