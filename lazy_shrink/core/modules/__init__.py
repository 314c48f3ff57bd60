# Core modules for lazy_shrink
from .errors import CodecError, InputValidationError, ProbeError, SearchError

__all__ = ["SearchError", "CodecError", "ProbeError", "InputValidationError"]
