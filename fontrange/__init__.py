"""Build-time web font subsetting driven by CSS unicode-range."""

__version__ = "0.1.0"
