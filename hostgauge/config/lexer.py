"""
Tokenizer for the nginx-like configuration syntax.

Recognizes:
- Identifiers (block types and directive names)
- Quoted strings with backslash escapes
- Integers and floats, optionally with a duration unit (500ms, 1s, 2m)
- on/off/true/false booleans
- Braces and semicolons
- '#' comments running to end of line
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Token types produced by the lexer."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    DURATION = auto()  # value normalized to seconds
    BOOLEAN = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()
    EOF = auto()


@dataclass
class Token:
    """A single token with its source position."""

    type: TokenType
    value: str | int | float | bool
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class LexerError(Exception):
    """Raised when the source contains something that is not a token."""

    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, column {column}: {message}")


BOOLEAN_WORDS = {"on": True, "off": False, "true": True, "false": False}

DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}

PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}


class Lexer:
    """
    Single-pass tokenizer.

    Example:
        exporter {
            port 8000;
        }
        scheduler { interval 1s; }
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def _advance(self) -> str:
        char = self._peek()
        if not char:
            return ""
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _skip_ignored(self) -> None:
        while True:
            char = self._peek()
            if char and char in " \t\r\n":
                self._advance()
            elif char == "#":
                while self._peek() and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _read_string(self, line: int, column: int) -> Token:
        quote = self._advance()
        chars: list[str] = []

        while True:
            char = self._advance()
            if not char or char == "\n":
                raise LexerError("Unterminated string literal", line, column)
            if char == quote:
                break
            if char == "\\":
                escaped = self._advance()
                if not escaped:
                    raise LexerError("Unterminated string literal", line, column)
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)

        return Token(TokenType.STRING, "".join(chars), line, column)

    def _read_number(self, line: int, column: int) -> Token:
        start = self.pos
        while self._peek().isdigit() or (self._peek() == "." and "." not in self.source[start:self.pos]):
            self._advance()
        digits = self.source[start:self.pos]

        unit_start = self.pos
        while self._peek().isalpha():
            self._advance()
        unit = self.source[unit_start:self.pos].lower()

        try:
            number: int | float = float(digits) if "." in digits else int(digits)
        except ValueError:
            raise LexerError(f"Invalid number: {digits}", line, column) from None

        if not unit:
            return Token(TokenType.NUMBER, number, line, column)

        if unit not in DURATION_UNITS:
            raise LexerError(f"Unknown duration unit: {unit}", line, column)
        return Token(TokenType.DURATION, number * DURATION_UNITS[unit], line, column)

    def _read_word(self, line: int, column: int) -> Token:
        start = self.pos
        while self._peek() and (self._peek().isalnum() or self._peek() in "_-"):
            self._advance()
        word = self.source[start:self.pos]

        if word.lower() in BOOLEAN_WORDS:
            return Token(TokenType.BOOLEAN, BOOLEAN_WORDS[word.lower()], line, column)
        return Token(TokenType.IDENTIFIER, word, line, column)

    def next_token(self) -> Token:
        """Return the next token, or an EOF token at the end of input."""
        self._skip_ignored()
        line, column = self.line, self.column
        char = self._peek()

        if not char:
            return Token(TokenType.EOF, "", line, column)
        if char in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[char], char, line, column)
        if char in "\"'":
            return self._read_string(line, column)
        if char.isdigit():
            return self._read_number(line, column)
        if char.isalpha() or char == "_":
            return self._read_word(line, column)

        raise LexerError(f"Unexpected character: {char!r}", line, column)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return


def tokenize(source: str) -> list[Token]:
    """Tokenize a whole source string."""
    return list(Lexer(source))
