"""
Tokenizer and parser for smart store command lines.

A command line is a verb (one or two words), the target id, and then
keyword/value pairs:

    define product P1 name Apple description "Green apple" unit_price 0.5 ...

Tokens are separated by whitespace; a double-quoted segment is one token
with its inner whitespace kept. Keywords listed as free-text (event,
message) swallow the rest of the line.
"""

import shlex
from dataclasses import dataclass, field
from typing import Optional

from domain.exceptions import CommandParseError

# Verbs that take a sub-verb ("define store", "show basket_items", ...)
COMPOUND_VERBS = {"define", "show", "update", "assign", "create", "delete"}

FREE_TEXT_KEYWORDS = {"event", "message"}


@dataclass
class ParsedCommand:
    """
    One tokenized command line.

    Attributes:
        name: Normalized verb, e.g. "define store" or "clear_basket"
        target: The positional id following the verb
        args: Keyword arguments, keys lower-cased, values as written
        line: The original line, for error messages
    """
    name: str
    target: Optional[str]
    args: dict[str, str] = field(default_factory=dict)
    line: str = ""


def tokenize(line: str) -> list[str]:
    """Split a line into tokens, honoring double quotes."""
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.quotes = '"'
    lexer.escape = ""
    lexer.commenters = ""
    try:
        return list(lexer)
    except ValueError as e:
        raise CommandParseError(str(e), line) from e


def parse_keywords(tokens: list[str], line: str) -> dict[str, str]:
    """Turn "key value key value ..." into a dict."""
    args: dict[str, str] = {}
    index = 0
    while index < len(tokens):
        keyword = tokens[index].lower()
        if keyword in FREE_TEXT_KEYWORDS:
            args[keyword] = " ".join(tokens[index + 1:])
            break
        if index + 1 >= len(tokens):
            raise CommandParseError(f"Missing value for '{keyword}'", line)
        args[keyword] = tokens[index + 1]
        index += 2
    return args


def parse_command(line: str) -> ParsedCommand:
    """Tokenize a line into its verb, target id and keyword arguments."""
    tokens = tokenize(line)
    if not tokens:
        raise CommandParseError("Empty command", line)

    verb = tokens[0].lower()
    if verb in COMPOUND_VERBS:
        if len(tokens) < 2:
            raise CommandParseError(f"Missing object for '{verb}'", line)
        name = f"{verb} {tokens[1].lower()}"
        rest = tokens[2:]
    else:
        name = verb
        rest = tokens[1:]

    target = rest[0] if rest else None
    args = parse_keywords(rest[1:], line)
    return ParsedCommand(name=name, target=target, args=args, line=line)


def split_location(value: str, parts: int, line: str) -> tuple[str, ...]:
    """
    Split a compound id such as "S1:A1" or "S1:A1:SH1".

    Raises CommandParseError unless the value has exactly the expected
    number of non-empty parts.
    """
    pieces = tuple(value.split(":"))
    if len(pieces) != parts or not all(pieces):
        expected = ":".join(["store", "aisle", "shelf"][:parts])
        raise CommandParseError(f"Expected location {expected}, got '{value}'", line)
    return pieces
