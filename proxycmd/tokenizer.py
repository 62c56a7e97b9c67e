"""Command-string tokenizer.

Turns a raw chat string into an ordered list of argument tokens in a
single left-to-right scan. Supports single and double quotes, backslash
escapes, and inline markup spans (``<font>two words</font>``) that are
copied verbatim into the current token without interpreting the quotes,
spaces or backslashes inside them.

Key functions:
    tokenize: Result-returning scan (never raises on bad input).
    parse_args: Same scan, raising CommandSyntaxError.
    strip_outer_html: Remove rich-text framing from a chat message.
    join_args: Rebuild a command string from simple tokens.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .exceptions import CommandSyntaxError

QUOTES = ("'", '"')

# Everything after the "<" up to the first ">" following the first "</"
_MARKUP_SPAN = re.compile(r".*?</.*?>")

# Leading open tag, trailing close tag, or a close/open pair in between
_OUTER_HTML = re.compile(r"^<[^>]+>|</[^>]+><[^/][^>]*>|</[^>]+>$")


@dataclass
class Tokenized:
    """Outcome of a tokenizer run.

    Attributes:
        tokens: Parsed tokens (empty on failure or for blank input).
        error: Human-readable syntax error, or None on success.
    """

    tokens: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def tokenize(raw: str) -> Tokenized:
    """Split ``raw`` into tokens.

    Blank input is not an error and yields an empty token list.
    """
    tokens: List[str] = []
    arg = ""
    quote = ""
    i = 0
    length = len(raw)

    while i < length:
        c = raw[i]

        if c == "<":
            match = _MARKUP_SPAN.match(raw, i + 1)
            if match is None:
                return Tokenized(error="HTML parsing failure")
            arg += raw[i:match.end()]
            i = match.end()
            continue

        if c == "\\":
            i += 1
            if i >= length:
                return Tokenized(error="Unexpected end of line")
            arg += raw[i]
        elif c in QUOTES:
            if arg == "" and quote == "":
                quote = c
            elif quote == c:
                quote = ""
            else:
                arg += c
        elif c == " " and quote == "":
            if arg:
                tokens.append(arg)
                arg = ""
        else:
            arg += c
        i += 1

    if quote:
        return Tokenized(error=f"Expected {quote}")
    if arg:
        tokens.append(arg)
    return Tokenized(tokens=tokens)


def parse_args(raw: str) -> List[str]:
    """Tokenize ``raw``, raising CommandSyntaxError on malformed input."""
    result = tokenize(raw)
    if not result.ok:
        raise CommandSyntaxError(result.error)
    return result.tokens


def strip_outer_html(text: str) -> str:
    """Remove the rich-text wrapper the chat client puts around messages.

    ``<FONT>!heal me</FONT>`` becomes ``!heal me``. Markup that does not
    sit at the edges (or between a close tag and the next open tag) is
    left alone.
    """
    return _OUTER_HTML.sub("", text)


def join_args(tokens: Iterable[str]) -> str:
    """Join tokens into a command string, double-quoting tokens with spaces.

    Only round-trips through tokenize() for tokens without quotes,
    backslashes or markup.
    """
    return " ".join(f'"{t}"' if " " in t else t for t in tokens)
