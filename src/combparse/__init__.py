"""
A small parser combinator library.

Parsers are immutable functions from the remaining input to a `ParseOutcome`. Build small ones with the primitives, and combine them with the combinators.

See the `combparse.grammars` package for complete grammars you can use as examples.

Defining parsers:
```
tag = char("<").then(letters()).precedes(char(">"))
numbers = natural().token().sep_by(char(",").token())
value = choice([numbers, string_literal().map(lambda s: [s])])
```

Using parsers:
```
outcome = tag.parse("<input>")
if outcome:
    ... # `outcome` is a `Success`: `outcome.value`, `outcome.remaining`
else:
    ... # `outcome` is a `Failure`: `outcome.message`

tag.run("<input>")  # returns the value, or raises `ParseError`
```
"""

import combparse.const as const
import combparse.main
from combparse.main import (
    GrammarError,
    InfiniteLoopError,
    PosNote,
    ParseError,
    ParseOutcome,
    Success,
    Failure,
    Parser,
    pure,
    fail,
    eof,
    alternate,
    choice,
    delayed,
    lookahead,
    not_followed_by,
)
from combparse.general import (
    satisfy,
    char,
    one_of,
    none_of,
    letter,
    digit,
    space,
    string,
    regex,
    letters,
    spaces,
    natural,
    string_literal,
)
import combparse.general as general
