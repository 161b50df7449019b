"""
Filesystem path constants.

Centralizes path definitions to avoid magic strings in individual modules.
"""

from pathlib import Path

DEFAULT_CACHE_DIR = Path(".cache") / "fontrange"
PYPROJECT_FILE = Path("pyproject.toml")

# Subset file names are "<prefix><identity>"
SUBSET_PREFIX = "subset-"

NODE_MODULES = "node_modules"
