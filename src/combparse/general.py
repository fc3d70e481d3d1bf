"""
Primitive parsers that inspect the input directly.

Everything else is built from these with the combinators in `combparse.main`.
"""

from __future__ import annotations
from typing import Callable

import re

import combparse.const as const
from combparse.main import (
    Parser,
    ParseOutcome,
    Success,
    Failure,
    alternate,
    snippet,
)


def failure_message(text: str) -> str:
    """Describes why a single character parser failed on `text`."""
    if not text:
        return const.EXHAUSTED_INPUT
    return f"Failed at char '{text[0]}' in \"{snippet(text)}\""

def satisfy(predicate: Callable[[str], bool]) -> Parser[str]:
    """Matches a single character for which `predicate` holds."""
    def parse(text: str) -> ParseOutcome[str]:
        if text and predicate(text[0]):
            return Success(text[0], text[1:])
        return Failure(failure_message(text), text)
    return Parser(parse)

def char(value: str) -> Parser[str]:
    """Matches the given character. Case sensitive."""
    if len(value) != 1:
        raise ValueError(f"Expected a single character, got {value!r}.")
    return satisfy(lambda c: c == value)

def one_of(chars: str) -> Parser[str]:
    """Matches any one of the given characters."""
    if not chars:
        raise ValueError("At least one character required.")
    allowed = frozenset(chars)
    return satisfy(lambda c: c in allowed)

def none_of(chars: str) -> Parser[str]:
    """Matches any character except the given ones."""
    excluded = frozenset(chars)
    return satisfy(lambda c: c not in excluded)

def letter() -> Parser[str]:
    return satisfy(str.isalpha)

def digit() -> Parser[str]:
    """An ASCII decimal digit."""
    return satisfy(lambda c: c in const.DECIMAL)

def space() -> Parser[str]:
    return satisfy(str.isspace)

def string(value: str) -> Parser[str]:
    """
    Matches the given string. Case sensitive.

    Consumes nothing on failure.
    """
    if not value:
        raise ValueError("Expected a non-empty string.")
    def parse(text: str) -> ParseOutcome[str]:
        if text.startswith(value):
            return Success(value, text[len(value):])
        return Failure(f"Expected \"{value}\" at \"{snippet(text)}\"", text)
    return Parser(parse)

def regex(pattern: str | re.Pattern[str], flags: int | re.RegexFlag = 0) -> Parser[str]:
    """
    Matches the regex at the start of the input. The value is the matched text.

    Empty matches count as success, so don't put a pattern that can match nothing inside `many()`.
    """
    compiled = re.compile(pattern, flags)
    def parse(text: str) -> ParseOutcome[str]:
        m = compiled.match(text)
        if m is None:
            return Failure(f"Expected /{compiled.pattern}/ at \"{snippet(text)}\"", text)
        return Success(m.group(), text[m.end():])
    return Parser(parse)

def letters() -> Parser[str]:
    """One or more letters."""
    return letter().some().as_string()

def spaces() -> Parser[None]:
    """Zero or more whitespaces."""
    return space().many().void()

def natural(max_value: int | None = const.MAX_NATURAL) -> Parser[int]:
    """
    One or more decimal digits, as a non-negative integer.

    Numbers above `max_value` fail instead of wrapping around. Pass `None` for no limit.
    """
    def convert(digits: str, rest: str) -> ParseOutcome[int]:
        try:
            number = int(digits)
        except ValueError:
            # more digits than int() is allowed to convert
            return Failure(f"Natural number too long: \"{snippet(digits)}\"", rest)
        if max_value is not None and number > max_value:
            return Failure(f"Natural number \"{snippet(digits)}\" is larger than {max_value}", rest)
        return Success(number, rest)
    digits = digit().some().as_string()
    return Parser(lambda text: digits.parse_func(text).flat_map_success(convert))

def string_literal() -> Parser[str]:
    """
    A double quoted string. Returns the content without the quotes.

    `\\"` is the only escape sequence, and stands for a quote. A backslash followed by anything else is kept as is.
    """
    escaped_quote = string(const.ESCAPE + const.QUOTE).map(lambda _: const.QUOTE)
    content = alternate(escaped_quote, none_of(const.QUOTE)).many().as_string()
    return content.surrounded_by(char(const.QUOTE))
