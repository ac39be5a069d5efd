"""
Assembly Language Lexer
=======================

This module implements the lexer (tokenizer) for the assembly language.
It converts source text into the complete list of tokens that the
instruction parser consumes.

Token Types
-----------
- OPCODE: A mnemonic registered in the format table (J, LW, ...)
- NUMBER: C-style integer literal: decimal, hex (0x1F), octal (017)
- REGISTER: '$' followed by a decimal register number 0-31
- COMMA: Operand separator
- WHITESPACE: A run of spaces and/or tabs
- NEWLINE: End of line
- EOF: End of input

Unlike most assemblers, whitespace is significant: exactly one whitespace
token must separate a mnemonic from its first operand, and at most one may
follow each comma. The lexer therefore emits whitespace runs as tokens and
leaves the layout rules to the parser.

The lexer stops at the first character it cannot classify; there is no
error recovery.

Example
-------
>>> from hexasm.assembler.lexer import Lexer
>>> for token in Lexer("LW $1, $2, 100").tokenize():
...     print(token)
Token(OPCODE, 'LW', 1:1)
Token(WHITESPACE, 1:3)
Token(REGISTER, 1, 1:4)
Token(COMMA, 1:6)
Token(WHITESPACE, 1:7)
Token(REGISTER, 2, 1:8)
Token(COMMA, 1:10)
Token(WHITESPACE, 1:11)
Token(NUMBER, 100, 1:12)
Token(EOF, 1:15)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Optional
import logging
import string

from hexasm.errors import LexError, SourceLocation
from hexasm.assembler.formats import (
    FORMAT_TABLE,
    FormatDescriptor,
    MAX_MNEMONIC_LENGTH,
    MAX_REGISTER,
    MNEMONIC_CHARS,
    MNEMONIC_START,
    get_format,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the assembly language."""

    # Structural tokens
    NEWLINE = auto()     # End of line (terminates an instruction)
    EOF = auto()         # End of input (sentinel, always last)

    # Values
    OPCODE = auto()      # Registered mnemonic
    NUMBER = auto()      # Numeric literal (all formats)
    REGISTER = auto()    # $0 - $31

    # Delimiters
    COMMA = auto()       # ,
    WHITESPACE = auto()  # run of spaces/tabs


# Python type carried in Token.value for each kind
_VALUE_TYPES = {
    TokenType.OPCODE: str,
    TokenType.NUMBER: int,
    TokenType.REGISTER: int,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    The value is determined by the token type: the mnemonic text for
    OPCODE, an int for NUMBER and REGISTER, and None for everything else.
    The pairing is checked on construction.

    Attributes:
        type: The TokenType classification
        value: The token value
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str = "<input>"

    def __post_init__(self) -> None:
        expected = _VALUE_TYPES.get(self.type)
        if expected is None:
            if self.value is not None:
                raise ValueError(f"{self.type.name} token cannot carry a value")
        elif not isinstance(self.value, expected) or isinstance(self.value, bool):
            raise ValueError(f"{self.type.name} token requires a {expected.__name__} value")

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Numeric Literal Parsing
# =============================================================================

def parse_c_integer(text: str) -> Optional[int]:
    """
    Parse a C-style unsigned integer literal.

    "0x"/"0X" selects hexadecimal, a leading "0" selects octal, anything
    else is decimal. Every character after the prefix must be a valid
    digit for the base.

    Args:
        text: Literal text, e.g. "0x1F", "017", "42"

    Returns:
        The integer value, or None if the literal is malformed

    Raises:
        ValueError: If the value has too many digits to convert
    """
    if text[:2] in ("0x", "0X"):
        digits, base, valid = text[2:], 16, string.hexdigits
    elif len(text) > 1 and text[0] == "0":
        digits, base, valid = text[1:], 8, string.octdigits
    else:
        digits, base, valid = text, 10, string.digits

    if not digits or any(c not in valid for c in digits):
        return None
    return int(digits, base)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = lexer.tokenize()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
        formats: Mnemonic table used to recognize OPCODE tokens
    """

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        formats: Optional[Mapping[str, FormatDescriptor]] = None,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
            formats: Mnemonic table (defaults to the built-in FORMAT_TABLE)
        """
        self.source = source
        self.filename = filename
        self.formats = FORMAT_TABLE if formats is None else formats

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> list[Token]:
        """
        Tokenize the whole source.

        Returns:
            List of tokens, always terminated by a single EOF token

        Raises:
            LexError: On the first character sequence that is not a valid token
        """
        tokens: list[Token] = []
        while True:
            token = self._scan_token()
            tokens.append(token)
            if token.type is TokenType.EOF:
                break

        logger.debug(f"Tokenized {self.filename}: {len(tokens)} tokens, {self._line} lines")
        return tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check for end of source. A NUL character also ends the text."""
        return self._pos >= len(self.source) or self.source[self._pos] == "\0"

    def _peek(self) -> str:
        """Look at the current character without advancing ('' at end)."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _consume_run(self, chars: str) -> str:
        """Consume a maximal run of characters drawn from `chars`."""
        start = self._pos
        # '' in chars is True, so the empty peek at end must be excluded
        while self._peek() and self._peek() in chars:
            self._advance()
        return self.source[start:self._pos]

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        start_line: int,
        start_column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    def _error(self, message: str, column: int, hint: Optional[str] = None) -> LexError:
        """
        Create a lex error located on the current line.

        Args:
            message: Error description
            column: Column the offending token started at
            hint: Optional suggestion for fixing the error
        """
        location = SourceLocation(self.filename, self._line, column)

        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        source_line = self.source[self._line_start_pos:line_end]

        return LexError(message, location, hint=hint, source_line=source_line)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        start_line = self._line
        start_column = self._column

        if self._at_end():
            return self._make_token(TokenType.EOF, None, start_line, start_column)

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in " \t":
            self._consume_run(" \t")
            return self._make_token(TokenType.WHITESPACE, None, start_line, start_column)

        if char == ",":
            self._advance()
            return self._make_token(TokenType.COMMA, None, start_line, start_column)

        if char == "$":
            return self._scan_register(start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in MNEMONIC_START:
            return self._scan_mnemonic(start_line, start_column)

        raise self._error(f"unexpected character {char!r}", start_column)

    def _scan_register(self, start_line: int, start_column: int) -> Token:
        """Scan a register reference: '$' immediately followed by digits."""
        self._advance()  # consume $

        digits = self._consume_run(string.digits)
        if not digits:
            raise self._error(
                "expected register number after '$'",
                start_column,
                hint=f"registers are written $0 to ${MAX_REGISTER}",
            )

        try:
            value = int(digits)
        except ValueError:
            value = None
        if value is None or value > MAX_REGISTER:
            shown = digits if len(digits) <= 8 else digits[:8] + "..."
            raise self._error(
                f"register ${shown} out of range",
                start_column,
                hint=f"registers are $0 to ${MAX_REGISTER}",
            )

        return self._make_token(TokenType.REGISTER, value, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """Scan a numeric literal (decimal, 0x hex, or 0 octal)."""
        text = self._consume_run(MNEMONIC_CHARS)

        try:
            value = parse_c_integer(text)
        except ValueError:
            raise self._error(
                "numeric literal out of range",
                start_column,
                hint="literal has too many digits to fit any instruction field",
            ) from None
        if value is None:
            raise self._error(f"malformed numeric literal '{text}'", start_column)

        return self._make_token(TokenType.NUMBER, value, start_line, start_column)

    def _scan_mnemonic(self, start_line: int, start_column: int) -> Token:
        """Scan a mnemonic and check it against the format table."""
        name = self._consume_run(MNEMONIC_CHARS)

        if len(name) > MAX_MNEMONIC_LENGTH or get_format(name, self.formats) is None:
            hint = None
            if name.upper() in self.formats:
                hint = f"mnemonics are case-sensitive; did you mean '{name.upper()}'?"
            raise self._error(f"unknown mnemonic '{name}'", start_column, hint=hint)

        return self._make_token(TokenType.OPCODE, name, start_line, start_column)
