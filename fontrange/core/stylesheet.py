"""
Stylesheet parsing and @font-face extraction.

tinycss2 output is narrowed to the few node shapes the pipeline consumes:
top-level at-rules, their declarations, and the declarations' value tokens.
"""

from dataclasses import dataclass
from enum import Enum

import tinycss2

from fontrange.core.unicode_range import CodePointRange, parse_unicode_range
from fontrange.exceptions import StylesheetParseError
from fontrange.utils.logging import logger

# tinycss2 token types glued together into a single word (e.g. "U" "+0030" "-0039")
WORD_TOKEN_TYPES = {"ident", "number", "percentage", "dimension", "literal", "hash"}


class TokenKind(Enum):
    """Kinds of value tokens."""

    URL = "url"
    STRING = "string"
    FUNCTION = "function"
    COMMA = "comma"
    WORD = "word"


@dataclass(frozen=True)
class ValueToken:
    """One component of a declaration value."""

    kind: TokenKind
    text: str  # URL without url(), string without quotes, raw text otherwise


@dataclass(frozen=True)
class Declaration:
    """A property declaration inside an at-rule block."""

    name: str
    value: tuple[ValueToken, ...]

    @property
    def text(self) -> str:
        """Value reconstructed by joining its tokens with single spaces."""
        return " ".join(token.text for token in self.value)

    def comma_pieces(self) -> list[tuple[ValueToken, ...]]:
        """Split the value tokens on top-level commas, dropping empty pieces."""
        pieces: list[list[ValueToken]] = [[]]
        for token in self.value:
            if token.kind is TokenKind.COMMA:
                pieces.append([])
            else:
                pieces[-1].append(token)
        return [tuple(piece) for piece in pieces if piece]

    def comma_separated(self) -> list[str]:
        """Split the value on top-level commas, each piece joined and trimmed."""
        return [
            " ".join(token.text for token in piece).strip() for piece in self.comma_pieces()
        ]


@dataclass(frozen=True)
class AtRule:
    """A top-level at-rule and the declarations in its block."""

    name: str
    declarations: tuple[Declaration, ...]

    def get(self, name: str) -> Declaration | None:
        """First declaration with the given property name."""
        return next((d for d in self.declarations if d.name == name), None)


@dataclass(frozen=True)
class FontFaceDeclaration:
    """A @font-face rule with family, src and unicode-range all present."""

    font_family: str
    src_urls: tuple[str, ...]
    ranges: tuple[CodePointRange, ...]
    # URL of each src entry, in src_urls order
    urls: tuple[str, ...] = ()


def source_url(piece: tuple[ValueToken, ...]) -> str:
    """
    URL of one src entry such as 'url("My Font.woff2") format("woff2")'.

    The url() or string token is taken whole, so URLs with spaces survive.
    Entries without one (e.g. local()) yield their first token's text.
    """
    for token in piece:
        if token.kind in (TokenKind.URL, TokenKind.STRING):
            return token.text
    return piece[0].text if piece else ""


def _token_text(token) -> str:
    # tinycss2's serializer escapes some units (e.g. "+0E"), so keep the raw pieces
    if token.type == "dimension":
        return token.representation + token.unit
    if token.type == "number":
        return token.representation
    if token.type in ("ident", "literal"):
        return token.value
    return token.serialize()


def to_value_tokens(component_values: list) -> tuple[ValueToken, ...]:
    """
    Convert tinycss2 component values into value tokens.

    Adjacent word-like tokens without whitespace between them form a single
    word, so unicode-range values come out as "U+0030-0039".
    """
    tokens: list[ValueToken] = []
    word: list[str] = []

    def flush():
        if word:
            tokens.append(ValueToken(TokenKind.WORD, "".join(word)))
            word.clear()

    for node in component_values:
        if node.type == "literal" and node.value == ",":
            flush()
            tokens.append(ValueToken(TokenKind.COMMA, ","))
        elif node.type in WORD_TOKEN_TYPES:
            word.append(_token_text(node))
        else:
            flush()
            if node.type in ("whitespace", "comment"):
                continue
            if node.type == "url":
                tokens.append(ValueToken(TokenKind.URL, node.value))
            elif node.type == "string":
                tokens.append(ValueToken(TokenKind.STRING, node.value))
            elif node.type == "function" and node.lower_name == "url":
                # url("...") is a function holding a string token
                args = [a for a in node.arguments if a.type == "string"]
                url = args[0].value if args else tinycss2.serialize(node.arguments).strip()
                tokens.append(ValueToken(TokenKind.URL, url))
            elif node.type == "function":
                tokens.append(ValueToken(TokenKind.FUNCTION, node.serialize()))
            else:
                tokens.append(ValueToken(TokenKind.WORD, node.serialize()))
    flush()
    return tuple(tokens)


def parse_stylesheet(code: str) -> list[AtRule]:
    """
    Parse stylesheet text into its top-level at-rules.

    Qualified (selector) rules are not consumed and are left out. Top-level
    parse errors are logged and skipped, so well-formed at-rules around them
    are still returned.
    """
    rules = []
    for node in tinycss2.parse_stylesheet(code, skip_comments=True, skip_whitespace=True):
        if node.type == "error":
            logger.warning(
                f"Skipping invalid CSS at line {node.source_line}:{node.source_column}: "
                f"{node.message}"
            )
            continue
        if node.type != "at-rule":
            continue

        declarations = []
        if node.content is not None:
            for item in tinycss2.parse_blocks_contents(
                node.content, skip_comments=True, skip_whitespace=True
            ):
                if item.type == "declaration":
                    declarations.append(
                        Declaration(item.lower_name, to_value_tokens(item.value))
                    )
        rules.append(AtRule(node.lower_at_keyword, tuple(declarations)))
    return rules


def decode_stylesheet(data: bytes) -> str:
    """Decode stylesheet bytes as UTF-8 (BOM tolerated)."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise StylesheetParseError(f"not valid UTF-8: {e}") from e


def extract_font_faces(rules: list[AtRule]) -> list[FontFaceDeclaration]:
    """
    Extract @font-face declarations that can drive subsetting.

    Rules missing font-family, src or unicode-range, and rules whose
    unicode-range has no valid token, are skipped.

    Args:
        rules: Top-level at-rules from parse_stylesheet

    Returns:
        Declarations in stylesheet order
    """
    faces = []
    for rule in rules:
        if rule.name != "font-face":
            continue

        family = rule.get("font-family")
        src = rule.get("src")
        unicode_range = rule.get("unicode-range")
        if family is None or src is None or unicode_range is None:
            continue
        if not (family.text and src.text and unicode_range.text):
            continue

        ranges = parse_unicode_range(unicode_range.text)
        if not ranges:
            logger.debug(f"No valid unicode-range in @font-face {family.text!r}")
            continue

        faces.append(
            FontFaceDeclaration(
                font_family=family.text,
                src_urls=tuple(src.comma_separated()),
                urls=tuple(source_url(piece) for piece in src.comma_pieces()),
                ranges=tuple(ranges),
            )
        )
    return faces
