"""
Shared logging configuration for the font subsetting pipeline.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[logging.StreamHandler()],
)

# fontTools reports every dropped table and glyph at INFO/WARNING
logging.getLogger("fontTools.subset").setLevel(logging.ERROR)

logger = logging.getLogger("fontrange")


def set_verbose(verbose: bool) -> None:
    """Switch the shared logger between INFO and DEBUG."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
