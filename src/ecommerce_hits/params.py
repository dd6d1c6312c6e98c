"""
Safe parsing of user supplied gtag / dataLayer parameters.

Test pages let people paste the object they would hand to ``gtag()`` or
``dataLayer.push()``. That text is JavaScript, not JSON: keys are often
unquoted, strings use single quotes and trailing commas are common.

This module reads the object literal subset of JavaScript into Python
values without executing anything:

- objects ``{a: 1, 'b': 2, "c": 3, 4: 'x'}`` -> dict
- arrays ``[1, 2, 3,]`` -> list
- single or double quoted strings with backslash escapes -> str
- numbers -> int or float
- ``true`` / ``false`` -> bool, ``null`` / ``undefined`` -> None
- ``NaN`` / ``Infinity`` -> float
- ``//`` and ``/* */`` comments are skipped

Anything else (variables, function calls, expressions) is rejected.
"""

import re
from dataclasses import dataclass
from typing import Any

# Longest parameter text accepted (security/sanity limit)
MAX_PARAMS_LENGTH = 20_000

# Deepest object/array nesting accepted
MAX_NESTING_DEPTH = 32


class ParamsSyntaxError(ValueError):
    """Raised when parameter text is not a supported object literal."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.message = message
        self.position = position


@dataclass(frozen=True)
class _Token:
    kind: str  # punct, string, number, name
    text: str
    position: int


_TOKEN_REGEX = re.compile(
    r"""
      (?P<skip>\s+|//[^\n]*|/\*.*?\*/)
    | (?P<punct>[{}\[\]:,])
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    | (?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
    | (?P<name>[A-Za-z_$][\w$]*)
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_REGEX = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "\n": "",  # line continuation
}

_KEYWORDS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "NaN": float("nan"),
    "Infinity": float("inf"),
}


def _unescape(body: str) -> str:
    def replace(match: re.Match) -> str:
        sequence = match.group(1)
        if len(sequence) > 1:
            return chr(int(sequence[1:], 16))
        return _SIMPLE_ESCAPES.get(sequence, sequence)

    return _ESCAPE_REGEX.sub(replace, body)


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_REGEX.match(text, position)
        if match is None:
            char = text[position]
            if char in "'\"":
                raise ParamsSyntaxError("Unterminated string", position)
            if text.startswith("/*", position):
                raise ParamsSyntaxError("Unterminated comment", position)
            raise ParamsSyntaxError(f"Unexpected character {char!r}", position)

        kind = match.lastgroup
        if kind != "skip":
            tokens.append(_Token(kind, match.group(), position))
        position = match.end()
    return tokens


class _LiteralParser:
    """Recursive descent over the token list."""

    def __init__(self, tokens: list[_Token], length: int):
        self.tokens = tokens
        self.length = length
        self.index = 0

    def _peek(self) -> _Token | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _next(self, expected: str) -> _Token:
        token = self._peek()
        if token is None:
            raise ParamsSyntaxError(f"Unexpected end of input, expected {expected}", self.length)
        self.index += 1
        return token

    def _at_punct(self, char: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "punct" and token.text == char

    def _expect_punct(self, char: str) -> None:
        token = self._next(repr(char))
        if token.kind != "punct" or token.text != char:
            raise ParamsSyntaxError(f"Expected {char!r} but found {token.text!r}", token.position)

    def parse(self) -> Any:
        value = self._value(depth=0)
        token = self._peek()
        if token is not None:
            raise ParamsSyntaxError(f"Unexpected {token.text!r} after value", token.position)
        return value

    def _value(self, depth: int) -> Any:
        token = self._next("a value")

        if token.kind == "punct":
            if token.text in "{[" and depth >= MAX_NESTING_DEPTH:
                raise ParamsSyntaxError("Nesting too deep", token.position)
            if token.text == "{":
                return self._object(depth + 1)
            if token.text == "[":
                return self._array(depth + 1)
            raise ParamsSyntaxError(f"Unexpected {token.text!r}", token.position)

        if token.kind == "string":
            return _unescape(token.text[1:-1])

        if token.kind == "number":
            if any(c in token.text for c in ".eE"):
                return float(token.text)
            return int(token.text)

        if token.text in _KEYWORDS:
            return _KEYWORDS[token.text]
        raise ParamsSyntaxError(f"Unsupported identifier {token.text!r}", token.position)

    def _key(self) -> str:
        token = self._next("a property name")
        if token.kind == "string":
            return _unescape(token.text[1:-1])
        if token.kind == "name":
            return token.text
        if token.kind == "number":
            # Numeric keys become strings, as in JavaScript
            number = float(token.text)
            return str(int(number)) if number.is_integer() else str(number)
        raise ParamsSyntaxError(f"Expected a property name but found {token.text!r}", token.position)

    def _object(self, depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while not self._at_punct("}"):
            key = self._key()
            self._expect_punct(":")
            result[key] = self._value(depth)
            if not self._at_punct("}"):
                self._expect_punct(",")
        self._expect_punct("}")
        return result

    def _array(self, depth: int) -> list[Any]:
        result: list[Any] = []
        while not self._at_punct("]"):
            result.append(self._value(depth))
            if not self._at_punct("]"):
                self._expect_punct(",")
        self._expect_punct("]")
        return result


def parse_params(text: str | None, max_length: int = MAX_PARAMS_LENGTH) -> Any:
    """
    Parse a JavaScript object literal into Python values.

    Args:
        text: Parameter text as typed by the user
        max_length: Longest text accepted

    Returns:
        The parsed value; ``{}`` for empty or whitespace-only text.

    Raises:
        ParamsSyntaxError: If the text is too long or not a supported literal

    Examples:
        >>> parse_params("{items: [{item_id: 'a', price: 9.5,},]}")
        {'items': [{'item_id': 'a', 'price': 9.5}]}
    """
    if not text or not text.strip():
        return {}

    if len(text) > max_length:
        raise ParamsSyntaxError(f"Parameters longer than {max_length} characters", max_length)

    tokens = _tokenize(text)
    return _LiteralParser(tokens, len(text)).parse()
