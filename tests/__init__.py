"""
Test package for lazy_shrink.

Unit tests drive the scale search with scripted random sources and fake
units so bracket narrowing can be checked exactly; integration tests run the
real Pillow codec end to end.
"""

# Test configuration
TEST_CONFIG = {
    'seed': 1234,  # Seed used wherever a real random source is needed
    'temp_cleanup': True,  # Whether to clean up temp files
}

__version__ = "1.0.0"
