"""CLI entry points for lazy-shrink package."""

import sys


def main_shrink():
    """Entry point for lazy-shrink command."""
    from lazy_shrink.core.main import main
    sys.exit(main())


if __name__ == "__main__":
    main_shrink()
