"""Custom exceptions for fontrange."""


class FontRangeError(Exception):
    """Base exception for all fontrange errors."""


class StylesheetParseError(FontRangeError):
    """Stylesheet could not be decoded or parsed."""


class FontLoadError(FontRangeError):
    """Font bytes could not be loaded."""


class SubsettingError(FontRangeError):
    """Font could not be subset to the requested code points."""
