"""
Instruction Parser
==================

This module turns the lexer's token list into validated instruction
fields, one instruction at a time. The driver owns the loop over
instructions; this module supplies the pieces it uses:

- **TokenCursor**: forward-only cursor over the token list with the two
  traversal primitives, count() and read_fields().
- **parse_instruction()**: reads one mnemonic, the mandatory whitespace
  after it, and the operands for its encoding shape.

Operand Layout
--------------
| Shape  | Operands                             | Limits                   |
|--------|--------------------------------------|--------------------------|
| I-type | $rs, $rt, imm                        | imm <= 0xFFFF            |
| J-type | target                               | target <= 0x3FFFFFF      |
| R-type | $rs, $rt, $rd, shift, function       | shift <= 0x1F, fn <= 0x3F|

Spacing Rules
-------------
Exactly one whitespace token must follow the mnemonic. Operands are
separated by a comma, optionally followed by one whitespace token:

    LW $1,$2,100        ; ok
    LW $1, $2, 100      ; ok
    LW$1,$2,100         ; error: no whitespace after mnemonic
    LW $1 ,$2,100       ; error: whitespace before comma
"""

from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Union

from hexasm.errors import FieldRangeError, ParseError, SourceLocation
from hexasm.assembler.lexer import Token, TokenType
from hexasm.assembler.formats import (
    FORMAT_TABLE,
    FUNCTION_BITS,
    IMMEDIATE_BITS,
    SHIFT_BITS,
    TARGET_BITS,
    FormatDescriptor,
    Shape,
    get_format,
)


# =============================================================================
# Parsed Field Records
# =============================================================================

@dataclass(frozen=True)
class ITypeFields:
    """Operands of an immediate-type instruction."""
    rs: int
    rt: int
    imm: int


@dataclass(frozen=True)
class JTypeFields:
    """Operand of a jump-type instruction."""
    target: int


@dataclass(frozen=True)
class RTypeFields:
    """Operands of a register-type instruction."""
    rs: int
    rt: int
    rd: int
    shift: int
    function: int


InstructionFields = Union[ITypeFields, JTypeFields, RTypeFields]


@dataclass(frozen=True)
class ParsedInstruction:
    """
    One successfully parsed instruction.

    Attributes:
        descriptor: Format table entry for the mnemonic
        fields: Validated operand fields for the descriptor's shape
        location: Where the mnemonic appeared in the source
    """
    descriptor: FormatDescriptor
    fields: InstructionFields
    location: SourceLocation


# Human-readable token kinds for error messages
_KIND_NAMES = {
    TokenType.OPCODE: "mnemonic",
    TokenType.NUMBER: "number",
    TokenType.REGISTER: "register",
    TokenType.COMMA: "','",
    TokenType.WHITESPACE: "whitespace",
    TokenType.NEWLINE: "end of line",
    TokenType.EOF: "end of input",
}


def describe_kind(kind: TokenType) -> str:
    """Return the name used for a token kind in diagnostics."""
    return _KIND_NAMES[kind]


# =============================================================================
# Token Cursor
# =============================================================================

class TokenCursor:
    """
    Forward-only cursor over a token list.

    The cursor always rests on a token and never moves past the EOF
    sentinel, so `current` is always valid.

    Usage:
        cursor = TokenCursor(Lexer(source).tokenize(), source)
        count = cursor.count(TokenType.OPCODE)
    """

    def __init__(self, tokens: Sequence[Token], source: Optional[str] = None):
        """
        Args:
            tokens: Token list ending with an EOF token
            source: Original source text, used to quote lines in errors
        """
        if not tokens or tokens[-1].type is not TokenType.EOF:
            raise ValueError("token list must end with an EOF token")
        self._tokens = tokens
        self._pos = 0
        self._source_lines = source.split("\n") if source is not None else None

    @property
    def current(self) -> Token:
        """The token under the cursor."""
        return self._tokens[self._pos]

    @property
    def position(self) -> int:
        """Index of the current token."""
        return self._pos

    def advance(self) -> Token:
        """Move to the next token (stopping at EOF) and return it."""
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return self.current

    def count(self, kind: TokenType) -> int:
        """
        Count the tokens of a kind, from the start up to the EOF sentinel.

        Args:
            kind: Token kind to count

        Returns:
            Number of matching tokens (EOF itself is never counted)
        """
        return sum(1 for token in self._tokens[:-1] if token.type is kind)

    def read_fields(self, kinds: Sequence[TokenType]) -> list[Token]:
        """
        Read an ordered list of operand tokens after the current token.

        A comma, optionally followed by one whitespace token, must separate
        successive fields. Nothing is consumed after the last field; on
        return the cursor rests on the token that follows it.

        Args:
            kinds: Expected token kind of each field, in order

        Returns:
            The field tokens, one per entry in `kinds`

        Raises:
            ParseError: On a kind mismatch or a missing comma
        """
        fields: list[Token] = []
        self.advance()

        for index, kind in enumerate(kinds):
            token = self.current
            if token.type is not kind:
                raise self.error(
                    f"expected {describe_kind(kind)}, found {describe_kind(token.type)}",
                    token,
                )
            fields.append(token)
            self.advance()

            if index < len(kinds) - 1:
                if self.current.type is not TokenType.COMMA:
                    raise self.error(
                        "expected comma after non-final operand",
                        self.current,
                        hint="separate operands with ',' (one space after it is allowed)",
                    )
                self.advance()
                if self.current.type is TokenType.WHITESPACE:
                    self.advance()

        return fields

    def error(self, message: str, token: Token, hint: Optional[str] = None) -> ParseError:
        """Create a ParseError located at `token`."""
        return ParseError(message, token.location, hint=hint, source_line=self.line_text(token))

    def line_text(self, token: Token) -> Optional[str]:
        if self._source_lines is None or token.line > len(self._source_lines):
            return None
        return self._source_lines[token.line - 1]


# =============================================================================
# Shape Parsers
# =============================================================================

I_OPERANDS = (TokenType.REGISTER, TokenType.REGISTER, TokenType.NUMBER)
J_OPERANDS = (TokenType.NUMBER,)
R_OPERANDS = (
    TokenType.REGISTER, TokenType.REGISTER, TokenType.REGISTER,
    TokenType.NUMBER, TokenType.NUMBER,
)


def _check_width(cursor: TokenCursor, name: str, token: Token, bits: int) -> int:
    """Return the token's value, or raise if it does not fit in `bits` bits."""
    value = token.value
    if value > (1 << bits) - 1:
        raise FieldRangeError(
            name, value, bits,
            location=token.location,
            source_line=cursor.line_text(token),
        )
    return value


def parse_i_type(cursor: TokenCursor) -> ITypeFields:
    """Parse `$rs, $rt, imm` with a 16-bit immediate."""
    rs, rt, imm = cursor.read_fields(I_OPERANDS)
    return ITypeFields(
        rs=rs.value,
        rt=rt.value,
        imm=_check_width(cursor, "immediate", imm, IMMEDIATE_BITS),
    )


def parse_j_type(cursor: TokenCursor) -> JTypeFields:
    """Parse `target` with a 26-bit jump target."""
    (target,) = cursor.read_fields(J_OPERANDS)
    return JTypeFields(target=_check_width(cursor, "target", target, TARGET_BITS))


def parse_r_type(cursor: TokenCursor) -> RTypeFields:
    """Parse `$rs, $rt, $rd, shift, function`."""
    rs, rt, rd, shift, function = cursor.read_fields(R_OPERANDS)
    return RTypeFields(
        rs=rs.value,
        rt=rt.value,
        rd=rd.value,
        shift=_check_width(cursor, "shift", shift, SHIFT_BITS),
        function=_check_width(cursor, "function", function, FUNCTION_BITS),
    )


SHAPE_PARSERS: dict[Shape, Callable[[TokenCursor], InstructionFields]] = {
    Shape.I: parse_i_type,
    Shape.J: parse_j_type,
    Shape.R: parse_r_type,
}


# =============================================================================
# Instruction Parser
# =============================================================================

def parse_instruction(
    cursor: TokenCursor,
    formats: Optional[Mapping[str, FormatDescriptor]] = None,
) -> ParsedInstruction:
    """
    Parse one instruction starting at the cursor.

    The cursor must rest on the mnemonic. On return it rests on the token
    after the last operand, which the caller checks for NEWLINE or EOF.

    Args:
        cursor: Token cursor positioned on an OPCODE token
        formats: Mnemonic table (defaults to FORMAT_TABLE)

    Returns:
        The parsed instruction

    Raises:
        ParseError: If the tokens do not form a valid instruction
    """
    if formats is None:
        formats = FORMAT_TABLE

    token = cursor.current
    if token.type is not TokenType.OPCODE:
        raise cursor.error(f"expected mnemonic, found {describe_kind(token.type)}", token)

    descriptor = get_format(token.value, formats)
    if descriptor is None:
        raise cursor.error(f"unknown mnemonic '{token.value}'", token)

    spacing = cursor.advance()
    if spacing.type is not TokenType.WHITESPACE:
        raise cursor.error(
            f"expected whitespace after '{descriptor.mnemonic}', found {describe_kind(spacing.type)}",
            spacing,
            hint="separate the mnemonic from its operands with a space or tab",
        )

    fields = SHAPE_PARSERS[descriptor.shape](cursor)
    return ParsedInstruction(descriptor, fields, token.location)
