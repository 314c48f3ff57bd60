"""Exception hierarchy for the scale search.

Every failure the search can raise derives from ``SearchError`` so callers
can handle the whole family with one ``except``. Running out of iterations
is not an error; it is reported on the result instead.
"""


class SearchError(Exception):
    """Base exception for scale search failures."""


class CodecError(SearchError):
    """Raised when an image cannot be decoded or encoded."""


class ProbeError(SearchError):
    """Raised when the probe file cannot be written, read or measured."""


class InputValidationError(SearchError, ValueError):
    """Raised when search parameters fall outside the accepted bounds."""
