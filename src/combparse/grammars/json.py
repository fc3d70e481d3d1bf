"""
A small JSON dialect.

Supports natural numbers, strings (with only the `\\"` escape), `true`, `false`, `null`, arrays and objects. Commas between items are optional and a trailing comma is allowed: `[1,2,]`, `{"walk": 500,}`.

Values come out as plain Python objects. Objects become dicts, a later duplicate key wins.
"""

from __future__ import annotations
from typing import Any

from combparse import (
    Parser,
    char,
    string,
    natural,
    string_literal,
    alternate,
    choice,
    delayed,
)
from combparse.grammars.html import pairs_to_dict


def json_parser() -> Parser[Any]:
    """
    Builds a parser for a single JSON value, followed by optional whitespace.

    Every call builds a new parser. Build it once and keep it around if you parse many documents.
    """
    value: Parser[Any] | None = None

    def get_value() -> Parser[Any]:
        assert value is not None
        return value

    comma = char(",").token()
    number = natural()
    text = string_literal()
    boolean = alternate(
        string("true").map(lambda _: True),
        string("false").map(lambda _: False),
    )
    null = string("null").map(lambda _: None)

    array = delayed(get_value).skip_optional(comma).many().between(
        char("[").token(), char("]"),
    ).name("array")

    pair = string_literal().token().flat_map(
        lambda key: char(":").token().then(delayed(get_value)).skip_optional(comma).map(lambda item: (key, item))
    )
    obj = pair.many().between(char("{").token(), char("}")).map(pairs_to_dict).name("object")

    value = choice([
        number.token(),
        text.token(),
        boolean.token(),
        null.token(),
        array.token(),
        obj.token(),
    ])
    return value
