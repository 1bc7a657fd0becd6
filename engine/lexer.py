from __future__ import annotations

from typing import List

PIPE = "|"


class ParseError(ValueError):
    """Raised when turning a command line into a command fails."""


class LexError(ParseError):
    """Raised when a line cannot be split into tokens."""


class UnterminatedQuote(LexError):
    def __init__(self, quote: str) -> None:
        super().__init__(f"unterminated {quote} quote")
        self.quote = quote


class TrailingEscape(LexError):
    def __init__(self) -> None:
        super().__init__("trailing backslash with nothing to escape")


def tokenize(line: str) -> List[str]:
    """
    Split ``line`` into tokens, honoring single/double quotes and backslash escapes.

    Quoted and unquoted pieces with no whitespace between them join into one
    token, and an empty quoted pair on its own yields nothing.
    """
    tokens: List[str] = []
    current: List[str] = []
    in_single = False
    in_double = False
    escaped = False

    for ch in line:
        if escaped:
            current.append(ch)
            escaped = False
            continue

        if ch == "\\" and not in_single:
            escaped = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            continue

        if ch.isspace() and not (in_single or in_double):
            if current:
                tokens.append("".join(current))
                current = []
            continue

        current.append(ch)

    if escaped:
        raise TrailingEscape()
    if in_single:
        raise UnterminatedQuote("single")
    if in_double:
        raise UnterminatedQuote("double")

    if current:
        tokens.append("".join(current))

    return tokens


def split_pipeline(line: str) -> List[str]:
    """Split a raw line on pipe characters that are neither quoted nor escaped."""
    segments: List[str] = []
    current: List[str] = []
    in_single = False
    in_double = False
    escaped = False

    for ch in line:
        if escaped:
            escaped = False
        elif ch == "\\" and not in_single:
            escaped = True
        elif ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == PIPE and not (in_single or in_double):
            segments.append("".join(current))
            current = []
            continue
        current.append(ch)

    segments.append("".join(current))
    return segments
