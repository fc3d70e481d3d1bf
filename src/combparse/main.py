"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import Any, Self, Literal, TypeVar, Generic, Final, Callable

from collections.abc import Iterable, Sequence
import logging

import combparse.const as const


logger = logging.getLogger(__name__)

_T = TypeVar("_T")
_U = TypeVar("_U")
_V = TypeVar("_V")
_ValueCovT = TypeVar("_ValueCovT", covariant=True)


def snippet(text: str) -> str:
    """The start of `text`, cut to `const.SNIPPET_LENGTH` characters."""
    return text[:const.SNIPPET_LENGTH]


class GrammarError(Exception):
    """
    Raised for mistakes in the way a grammar was put together.

    Unlike a `Failure`, this is never something the input can cause on a correctly built grammar.
    """

class InfiniteLoopError(GrammarError):
    """A repeated parser succeeded without consuming any input, so the repetition could never stop."""



class PosNote:
    """
    Positioned note.

    For `ParseError`s and `Failure`s.

    Parsers only ever see the remaining suffix of the input, so the position is stored as the amount of input that was `left`. `ParseError` turns it into an absolute position.
    """
    def __init__(self, left: int, msg: str | None = None) -> None:
        self.left: Final[int] = left
        self.msg: Final[str | None] = msg

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PosNote) and self.left == other.left and self.msg == other.msg

    def __repr__(self) -> str:
        return f"PosNote({self.left!r}, {self.msg!r})"

class ParseError(Exception):
    """
    The exception that's raised when a `Failure` is turned into an error.

    Parsers never raise it themselves. Use `Parser.run()` or `Failure.error()` to get one.
    """

    def __init__(self, src: str, pos: int, msg: str | None = None, notes: Sequence[PosNote] = ()) -> None:
        """
        `src`: The string that was being parsed.
        `pos`: The position of the failure.
        `msg`: The reason for the failure.
        `notes`: Positioned notes to add to the error. Should be in reverse order. That is, the note that's last in the list will be shown above the other notes.
        """
        if msg is None:
            super().__init__()
        else:
            super().__init__(msg)
        self.src: str = src
        self.pos: int = pos
        self.msg: str | None = msg
        self.append_pos_note(pos)
        for note in reversed(notes):
            self.append_existing_note(note)

    def append_pos_note(self, pos: int, msg: str | None = None) -> Self:
        note: list[str] = [] if msg is None else [msg]

        pos = max(0, min(pos, len(self.src)))
        # should still work with CRLF
        line = self.src.count("\n", 0, pos) + 1
        column = pos - self.src.rfind("\n", 0, pos) # works even when it returns -1
        note.append(f"At position {pos} (line {line}, column {column})")

        lines = self.src.splitlines()
        if len(lines) > line-1:
            line_str = lines[line-1]
            if len(line_str) >= column:
                if column <= 20:
                    note.append(f"{line_str[:40]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-20):(column+20)]}\n{' '*20}^")
        self.add_note("\n".join(note))
        return self

    def append_existing_note(self, note: PosNote) -> Self:
        return self.append_pos_note(len(self.src) - note.left, note.msg)



class ParseOutcome(Generic[_ValueCovT]):
    """
    What a `Parser` returns. Either a `Success` or a `Failure`.

    ```
    outcome = parser.parse("blablabla")
    if outcome:
        ... # `outcome` is a `Success`
    else:
        ... # `outcome` is a `Failure`
    ```

    The `map_*` and `flat_map_*` methods only touch the side they are named after. The other side passes through unchanged.
    """
    __slots__ = ()

    def map_value(self, func: Callable[[Any], _U]) -> ParseOutcome[_U]:
        raise NotImplementedError

    def map_failure(self, func: Callable[[str], str]) -> ParseOutcome[_ValueCovT]:
        raise NotImplementedError

    def flat_map_success(self, func: Callable[[Any, str], ParseOutcome[_U]]) -> ParseOutcome[_U]:
        raise NotImplementedError

    def flat_map_failure(self, func: Callable[[str], ParseOutcome[_U]]) -> ParseOutcome[_ValueCovT | _U]:
        raise NotImplementedError

    def flat_map_either(
        self,
        on_success: Callable[[Any, str], ParseOutcome[_U]],
        on_failure: Callable[[str], ParseOutcome[_V]],
    ) -> ParseOutcome[_U | _V]:
        raise NotImplementedError

class Success(ParseOutcome[_ValueCovT]):
    """
    The parser matched.

    `value`: What the parser produced.
    `remaining`: The part of the input that was not consumed. Always a suffix of the input.
    """
    __slots__ = ("value", "remaining")

    def __init__(self, value: _ValueCovT, remaining: str) -> None:
        self.value: Final[_ValueCovT] = value
        self.remaining: Final[str] = remaining

    def map_value(self, func: Callable[[_ValueCovT], _U]) -> Success[_U]:
        return Success(func(self.value), self.remaining)

    def map_failure(self, func: Callable[[str], str]) -> Success[_ValueCovT]:
        return self

    def flat_map_success(self, func: Callable[[_ValueCovT, str], ParseOutcome[_U]]) -> ParseOutcome[_U]:
        return func(self.value, self.remaining)

    def flat_map_failure(self, func: Callable[[str], ParseOutcome[_U]]) -> Success[_ValueCovT]:
        return self

    def flat_map_either(
        self,
        on_success: Callable[[_ValueCovT, str], ParseOutcome[_U]],
        on_failure: Callable[[str], ParseOutcome[_V]],
    ) -> ParseOutcome[_U]:
        return on_success(self.value, self.remaining)

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Success) and self.value == other.value and self.remaining == other.remaining

    def __repr__(self) -> str:
        return f"Success({self.value!r}, {self.remaining!r})"

class Failure(ParseOutcome[Any]):
    """
    The parser did not match.

    `message`: The reason for the failure. The only part that takes part in equality.
    `remaining`: The input that was left where the failure happened. Used to pick the deepest failure and to position errors.
    `notes`: Positioned notes added by `Parser.name()`, innermost first.
    """
    __slots__ = ("message", "remaining", "notes")

    def __init__(self, message: str, remaining: str = "", notes: Sequence[PosNote] = ()) -> None:
        self.message: Final[str] = message
        self.remaining: Final[str] = remaining
        self.notes: Final[tuple[PosNote, ...]] = tuple(notes)

    def map_value(self, func: Callable[[Any], _U]) -> Failure:
        return self

    def map_failure(self, func: Callable[[str], str]) -> Failure:
        return Failure(func(self.message), self.remaining, self.notes)

    def flat_map_success(self, func: Callable[[Any, str], ParseOutcome[_U]]) -> Failure:
        return self

    def flat_map_failure(self, func: Callable[[str], ParseOutcome[_U]]) -> ParseOutcome[_U]:
        return func(self.message)

    def flat_map_either(
        self,
        on_success: Callable[[Any, str], ParseOutcome[_U]],
        on_failure: Callable[[str], ParseOutcome[_V]],
    ) -> ParseOutcome[_V]:
        return on_failure(self.message)

    def annotate(self, label: str, left: int) -> Failure:
        """Prefixes the message with `label` and records where the labelled parser started."""
        return Failure(f"{label}: {self.message}", self.remaining, self.notes + (PosNote(left, label),))

    def deeper(self, other: Failure) -> Failure:
        """Whichever failure got further into the input. Ties go to `self`."""
        return self if len(self.remaining) <= len(other.remaining) else other

    def error(self, src: str) -> ParseError:
        """Converts this to a `ParseError`. `src` must be the full input that was given to the parser."""
        return ParseError(src, len(src) - len(self.remaining), self.message, self.notes)

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Failure) and self.message == other.message

    def __repr__(self) -> str:
        return f"Failure({self.message!r})"



class Parser(Generic[_T]):
    """
    A function from the remaining input to a `ParseOutcome`.

    Parsers are immutable. Every combinator returns a new parser and leaves its operands alone, so a parser can be built once and shared.

    ```
    tag = char("<").then(letters()).precedes(char(">"))
    tag.parse("<input>")    # Success('input', '')
    tag.run("<input>")      # 'input', or raises ParseError
    ```
    """
    __slots__ = ("parse_func",)

    def __init__(self, parse_func: Callable[[str], ParseOutcome[_T]]) -> None:
        self.parse_func: Final[Callable[[str], ParseOutcome[_T]]] = parse_func

    def parse(self, text: str) -> ParseOutcome[_T]:
        return self.parse_func(text)

    def __call__(self, text: str) -> ParseOutcome[_T]:
        """Same as `Parser.parse()`."""
        return self.parse_func(text)

    def run(self, text: str) -> _T:
        """
        Parses `text` and returns the value.

        Raises a `ParseError` if the parser fails. Unconsumed input is not an error, use `end()` for that.
        """
        outcome = self.parse_func(text)
        if isinstance(outcome, Failure):
            raise outcome.error(text)
        assert isinstance(outcome, Success)
        return outcome.value

    def map(self, func: Callable[[_T], _U]) -> Parser[_U]:
        return Parser(lambda text: self.parse_func(text).map_value(func))

    def flat_map(self, func: Callable[[_T], Parser[_U]]) -> Parser[_U]:
        """
        Runs this parser, builds the next parser from its value and runs that on the rest of the input.

        Most of the other combinators could be written with this one.
        """
        return Parser(lambda text: self.parse_func(text).flat_map_success(
            lambda value, rest: func(value).parse_func(rest)
        ))

    def then(self, other: Parser[_U]) -> Parser[_U]:
        """Matches this and then `other`. Keeps the value of `other`."""
        return Parser(lambda text: self.parse_func(text).flat_map_success(
            lambda _, rest: other.parse_func(rest)
        ))

    def precedes(self, other: Parser[Any]) -> Parser[_T]:
        """Matches this and then `other`. Keeps the value of this parser."""
        return Parser(lambda text: self.parse_func(text).flat_map_success(
            lambda value, rest: other.parse_func(rest).map_value(lambda _: value)
        ))

    def between(self, left: Parser[Any], right: Parser[Any]) -> Parser[_T]:
        return left.then(self).precedes(right)

    def surrounded_by(self, bound: Parser[Any]) -> Parser[_T]:
        return self.between(bound, bound)

    def token(self) -> Parser[_T]:
        """Skips whitespace after this parser. Never fails because of missing whitespace."""
        return self.precedes(_skip_whitespace)

    def skip_optional(self, other: Parser[Any]) -> Parser[_T]:
        """
        Matches this and then tries `other`.

        If `other` fails, still succeeds with the input `other` would have started from.
        """
        def parse(text: str) -> ParseOutcome[_T]:
            return self.parse_func(text).flat_map_success(
                lambda value, rest: other.parse_func(rest).flat_map_either(
                    lambda _, after: Success(value, after),
                    lambda _: Success(value, rest),
                )
            )
        return Parser(parse)

    def many(self) -> Parser[list[_T]]:
        """
        Matches this parser zero or more times. Never fails.

        Greedy and doesn't backtrack: input consumed by successful repetitions is never given back, even if a later parser would have needed it.

        Raises `InfiniteLoopError` when a repetition succeeds without consuming anything.
        """
        def parse(text: str) -> ParseOutcome[list[_T]]:
            values: list[_T] = []
            while True:
                outcome = self.parse_func(text)
                if not isinstance(outcome, Success):
                    return Success(values, text)
                # `remaining` is a suffix, so an equal length means nothing was consumed.
                if len(outcome.remaining) == len(text):
                    raise InfiniteLoopError(f"Repeated parser matched without consuming input at \"{snippet(text)}\"")
                values.append(outcome.value)
                text = outcome.remaining
        return Parser(parse)

    def some(self) -> Parser[list[_T]]:
        """Matches this parser one or more times. Fails exactly when `many()` would have matched nothing."""
        rest = self.many()
        return self.flat_map(lambda first: rest.map(lambda others: [first, *others]))

    def sep_by(self, separator: Parser[Any]) -> Parser[list[_T]]:
        """
        Matches zero or more of this parser, separated by `separator`.

        A trailing separator is left unconsumed.
        """
        rest = separator.then(self).many()
        return self.flat_map(lambda first: rest.map(lambda others: [first, *others])).optional(()).map(list)

    def optional(self, default: _U = None) -> Parser[_T | _U]:
        """Matches this parser, or succeeds with `default` without consuming anything."""
        return alternate(self, pure(default))

    def void(self) -> Parser[None]:
        return self.map(lambda _: None)

    def as_string(self: Parser[list[str]]) -> Parser[str]:
        """Joins a list of characters into a string."""
        return self.map("".join)

    def end(self) -> Parser[_T]:
        """Matches this parser and then requires the end of the input."""
        return self.precedes(eof())

    def name(self, label: str) -> Parser[_T]:
        """
        Prefixes failure messages with `label`.

        Nested names read outermost first: `"empty html tag: tag name: Exhausted input"`. Success is unaffected.
        """
        def parse(text: str) -> ParseOutcome[_T]:
            outcome = self.parse_func(text)
            if isinstance(outcome, Failure):
                return outcome.annotate(label, len(text))
            return outcome
        return Parser(parse)

    def trace(self, label: str) -> Parser[_T]:
        """Logs every run of this parser on the `combparse.main` logger at DEBUG level."""
        def parse(text: str) -> ParseOutcome[_T]:
            outcome = self.parse_func(text)
            if isinstance(outcome, Success):
                logger.debug("%s: matched %r, %d characters left", label, outcome.value, len(outcome.remaining))
            else:
                assert isinstance(outcome, Failure)
                logger.debug("%s: failed at \"%s\": %s", label, snippet(text), outcome.message)
            return outcome
        return Parser(parse)



_skip_whitespace: Final[Parser[None]] = Parser(lambda text: Success(None, text.lstrip()))


def pure(value: _T) -> Parser[_T]:
    """Always succeeds with `value` without consuming anything."""
    return Parser(lambda text: Success(value, text))

def fail(message: str = "No alternative matched") -> Parser[Any]:
    """Always fails with `message`. `choice([])` is this parser."""
    return Parser(lambda text: Failure(message, text))

def eof() -> Parser[None]:
    """Matches the end of the input."""
    return Parser(lambda text: Success(None, text) if not text else Failure(f"Expected end of input at \"{snippet(text)}\"", text))

def alternate(first: Parser[_T], second: Parser[_U]) -> Parser[_T | _U]:
    """
    Ordered choice.

    Runs `first`. If it fails, runs `second` from the same position. If both fail, the failure that got further into the input is reported, `first`'s on a tie.
    """
    def parse(text: str) -> ParseOutcome[_T | _U]:
        outcome = first.parse_func(text)
        if not isinstance(outcome, Failure):
            return outcome
        other = second.parse_func(text)
        if not isinstance(other, Failure):
            return other
        return outcome.deeper(other)
    return Parser(parse)

def choice(parsers: Iterable[Parser[Any]]) -> Parser[Any]:
    """
    `alternate` over any amount of parsers, first match wins.

    Folded from the right and terminated by `fail()`, so an empty list gives a parser that always fails.
    """
    result: Parser[Any] = fail()
    for parser in reversed(list(parsers)):
        result = alternate(parser, result)
    return result

def delayed(thunk: Callable[[], Parser[_T]]) -> Parser[_T]:
    """
    Defers getting a parser until the first time it runs.

    For recursive grammars, where a parser has to refer to one that isn't built yet:
    ```
    value = None
    array = delayed(lambda: value).sep_by(char(",")).between(char("["), char("]"))
    value = alternate(natural(), array)
    ```

    The result of `thunk` is kept by the returned parser and reused afterwards.
    """
    resolved: Parser[_T] | None = None

    def parse(text: str) -> ParseOutcome[_T]:
        nonlocal resolved
        if resolved is None:
            resolved = thunk()
            logger.debug("Resolved delayed parser from %r", thunk)
        return resolved.parse_func(text)
    return Parser(parse)

def lookahead(parser: Parser[_T]) -> Parser[_T]:
    """Matches `parser` without consuming anything."""
    return Parser(lambda text: parser.parse_func(text).flat_map_success(
        lambda value, _: Success(value, text)
    ))

def not_followed_by(parser: Parser[Any]) -> Parser[None]:
    """Succeeds without consuming anything if `parser` fails here. Fails if it matches."""
    return Parser(lambda text: parser.parse_func(text).flat_map_either(
        lambda _, __: Failure(f"Unexpected match at \"{snippet(text)}\"", text),
        lambda _: Success(None, text),
    ))
