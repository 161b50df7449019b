"""
Font file extensions and subsetting target formats.

Reference: https://developer.mozilla.org/en-US/docs/Web/CSS/@font-face/src
"""

import re

# Stylesheets analyzed by default
DEFAULT_INCLUDE = re.compile(r"\.(css|scss|sass|less|styl|stylus)$")

# src URLs treated as subsettable fonts by default
DEFAULT_FONT_EXTENSIONS = re.compile(r"\.(woff2?|ttf|eot|otf)$", re.IGNORECASE)

# File extension -> target format passed to the subsetter
TARGET_FORMATS = {
    ".woff": "woff",
    ".woff2": "woff2",
    ".ttf": "truetype",
    ".otf": "opentype",
    ".sfnt": "sfnt",
    ".eot": "eot",
}
DEFAULT_TARGET_FORMAT = "woff2"

# Target format -> fontTools flavor (None writes a plain sfnt)
FONTTOOLS_FLAVORS = {
    "woff": "woff",
    "woff2": "woff2",
    "truetype": None,
    "opentype": None,
    "sfnt": None,
}

# Highest Unicode scalar value
MAX_CODE_POINT = 0x10FFFF
