"""
Recursive descent parser for the nginx-like configuration syntax.

Grammar:
    document   := (block | directive)*
    block      := IDENTIFIER [STRING] '{' (block | directive)* '}'
    directive  := IDENTIFIER value* ';'
    value      := STRING | NUMBER | DURATION | BOOLEAN | IDENTIFIER
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .lexer import Lexer, Token, TokenType


class ParseError(Exception):
    """Raised when the token stream does not match the grammar."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"Line {token.line}, column {token.column}: {message}")
        else:
            super().__init__(message)


VALUE_TOKENS = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.DURATION,
    TokenType.BOOLEAN,
    TokenType.IDENTIFIER,
)


@dataclass
class Directive:
    """
    A named directive with zero or more values.

    Examples:
        port 8000;           -> Directive("port", [8000])
        interval 1s;         -> Directive("interval", [1])
        required on;         -> Directive("required", [True])
    """

    name: str
    values: list[Any] = field(default_factory=list)
    line: int = 0

    @property
    def value(self) -> Any:
        """First value, or None for a bare directive."""
        return self.values[0] if self.values else None


@dataclass
class Block:
    """A typed block, optionally named, holding directives and nested blocks."""

    type: str
    name: str | None = None
    directives: list[Directive] = field(default_factory=list)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0

    def get_directive(self, name: str) -> Directive | None:
        """Get the last directive with the given name (later ones win)."""
        found = None
        for directive in self.directives:
            if directive.name == name:
                found = directive
        return found

    def get_value(self, name: str, default: Any = None) -> Any:
        """Get the single value of a directive, or default when absent."""
        directive = self.get_directive(name)
        if directive is None or directive.value is None:
            return default
        return directive.value

    def get_block(self, type_name: str) -> "Block | None":
        """Get the first nested block of the given type."""
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None


@dataclass
class ConfigDocument:
    """Root of a parsed file: top-level blocks and directives."""

    blocks: list[Block] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    filename: str = "<string>"

    def get_block(self, type_name: str) -> Block | None:
        """Get the first top-level block of the given type."""
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None


class ConfigParser:
    """Parser over a one-token lookahead stream."""

    def __init__(self, source: str, filename: str = "<string>"):
        self.lexer = Lexer(source)
        self.filename = filename
        self.current: Token = self.lexer.next_token()

    def _advance(self) -> Token:
        previous = self.current
        self.current = self.lexer.next_token()
        return previous

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self.current.type != token_type:
            raise ParseError(message, self.current)
        return self._advance()

    def parse(self) -> ConfigDocument:
        """Parse the whole document."""
        document = ConfigDocument(filename=self.filename)

        while self.current.type != TokenType.EOF:
            node = self._parse_statement("top level")
            if isinstance(node, Block):
                document.blocks.append(node)
            else:
                document.directives.append(node)

        return document

    def _parse_statement(self, context: str) -> Block | Directive:
        name_token = self._expect(
            TokenType.IDENTIFIER,
            f"Expected block or directive at {context}, got {self.current.type.name}",
        )
        name = str(name_token.value)

        values: list[Any] = []
        while self.current.type in VALUE_TOKENS:
            values.append(self._advance().value)

        if self.current.type == TokenType.SEMICOLON:
            self._advance()
            return Directive(name=name, values=values, line=name_token.line)

        if self.current.type == TokenType.LBRACE:
            if len(values) > 1 or (values and not isinstance(values[0], str)):
                raise ParseError(f"Block '{name}' takes at most one string name", name_token)
            return self._parse_block_body(name, values[0] if values else None, name_token.line)

        raise ParseError(f"Expected '{{' or ';' after '{name}'", self.current)

    def _parse_block_body(self, type_name: str, name: str | None, line: int) -> Block:
        self._advance()  # consume {
        block = Block(type=type_name, name=name, line=line)

        while self.current.type not in (TokenType.RBRACE, TokenType.EOF):
            node = self._parse_statement(f"'{type_name}' block")
            if isinstance(node, Block):
                block.blocks.append(node)
            else:
                block.directives.append(node)

        self._expect(TokenType.RBRACE, f"Expected '}}' to close '{type_name}' block")
        return block


def parse_config(source: str, filename: str = "<string>") -> ConfigDocument:
    """Parse configuration source text."""
    return ConfigParser(source, filename).parse()


def parse_config_file(path: str | Path) -> ConfigDocument:
    """Parse a configuration file."""
    path = Path(path)
    return parse_config(path.read_text(), str(path))
