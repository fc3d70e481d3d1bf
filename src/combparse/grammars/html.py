"""
Empty HTML tags with attributes, such as `<input type="text" value="hello"/>`.
"""

from __future__ import annotations
from typing import TypeVar

from collections.abc import Iterable

from combparse import (
    Parser,
    char,
    string,
    letters,
    string_literal,
)

_K = TypeVar("_K")
_V = TypeVar("_V")

EmptyHtmlTag = tuple[str, dict[str, str]]
"""(tag name, attributes)"""


def pairs_to_dict(pairs: Iterable[tuple[_K, _V]]) -> dict[_K, _V]:
    """Builds a dict in the order of `pairs`. A later duplicate key overwrites an earlier one."""
    result: dict[_K, _V] = {}
    for key, value in pairs:
        result[key] = value
    return result

def tag_attribute() -> Parser[tuple[str, str]]:
    """`key="value"`"""
    key = letters().token()
    equals = char("=")
    return key.flat_map(
        lambda key_str: equals.then(string_literal().map(lambda value_str: (key_str, value_str)))
    ).name("tag attribute")

def empty_html_tag() -> Parser[EmptyHtmlTag]:
    open_bracket = char("<").token().name("open bracket")
    close_bracket = string("/>").token().name("close bracket")
    tag_name = letters().token().name("tag name")
    attributes = tag_attribute().token().many().map(pairs_to_dict)

    tag_content = tag_name.flat_map(
        lambda name: attributes.map(lambda attrs: (name, attrs))
    ).token()

    return tag_content.between(open_bracket, close_bracket).name("empty html tag")
