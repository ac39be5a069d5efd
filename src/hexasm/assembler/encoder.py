"""
Instruction Word Encoder
========================

This module packs validated instruction fields into 32-bit words, and
serializes word lists to the hexadecimal output format.

Word Layout
-----------
```
 31      26 25   21 20   16 15   11 10    6 5       0
+----------+-------+-------+-------+-------+---------+
|  opcode  |  rs   |  rt   |          imm            |  I-type
+----------+-------+-------+-------------------------+
|  opcode  |              target                     |  J-type
+----------+-------+-------+-------+-------+---------+
|  opcode  |  rs   |  rt   |  rd   | shift | function|  R-type
+----------+-------+-------+-------+-------+---------+
```

The encoder performs no range checks: every field has already been
validated by the parser. decode() is the inverse of encode() and is used
to inspect assembled output.

Output Format
-------------
One word per line, 8 uppercase hex digits, each line terminated by '\\n':

    0800000A
    8C220064
"""

from typing import Iterable

from hexasm.assembler.formats import FormatDescriptor, Shape, WORD_MASK
from hexasm.assembler.parser import (
    InstructionFields,
    ITypeFields,
    JTypeFields,
    RTypeFields,
)


# =============================================================================
# Encoding
# =============================================================================

def encode_i_type(opcode: int, fields: ITypeFields) -> int:
    return (opcode << 26) | (fields.rs << 21) | (fields.rt << 16) | fields.imm


def encode_j_type(opcode: int, fields: JTypeFields) -> int:
    return (opcode << 26) | fields.target


def encode_r_type(opcode: int, fields: RTypeFields) -> int:
    return (
        (opcode << 26)
        | (fields.rs << 21)
        | (fields.rt << 16)
        | (fields.rd << 11)
        | (fields.shift << 6)
        | fields.function
    )


_ENCODERS = {
    Shape.I: encode_i_type,
    Shape.J: encode_j_type,
    Shape.R: encode_r_type,
}


def encode(descriptor: FormatDescriptor, fields: InstructionFields) -> int:
    """
    Encode one instruction into a 32-bit word.

    Args:
        descriptor: Format table entry supplying shape and opcode
        fields: Validated fields matching the descriptor's shape

    Returns:
        The encoded word
    """
    return _ENCODERS[descriptor.shape](descriptor.opcode, fields)


# =============================================================================
# Decoding
# =============================================================================

def decode_opcode(word: int) -> int:
    """Return the 6-bit opcode field of a word."""
    return (word >> 26) & 0x3F


def decode(word: int, shape: Shape) -> InstructionFields:
    """
    Split a word into its operand fields for a given shape.

    Args:
        word: Encoded 32-bit word
        shape: Encoding shape to decode with

    Returns:
        The field record for `shape` (the opcode is not included)
    """
    if shape is Shape.I:
        return ITypeFields(
            rs=(word >> 21) & 0x1F,
            rt=(word >> 16) & 0x1F,
            imm=word & 0xFFFF,
        )
    if shape is Shape.J:
        return JTypeFields(target=word & 0x3FFFFFF)
    return RTypeFields(
        rs=(word >> 21) & 0x1F,
        rt=(word >> 16) & 0x1F,
        rd=(word >> 11) & 0x1F,
        shift=(word >> 6) & 0x1F,
        function=word & 0x3F,
    )


# =============================================================================
# Hex Text Output
# =============================================================================

def format_word(word: int) -> str:
    """Format a word as 8 uppercase hex digits."""
    return f"{word & WORD_MASK:08X}"


def format_hex(words: Iterable[int]) -> str:
    """
    Serialize words to the hex text output format.

    Returns:
        One line per word, each terminated by a newline
    """
    return "".join(f"{format_word(word)}\n" for word in words)


def parse_hex(text: str) -> list[int]:
    """
    Read words back from hex text output.

    Args:
        text: Hex text, one word per line (blank lines are ignored)

    Returns:
        The words, in order

    Raises:
        ValueError: If a line is not exactly 8 hex digits
    """
    words = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if len(line) != 8:
            raise ValueError(f"line {number}: expected 8 hex digits, got {line!r}")
        words.append(int(line, 16))
    return words
