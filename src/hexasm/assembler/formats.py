"""
Instruction Format Table
========================

This module defines the instruction encoding shapes, field widths, and
the mnemonic table that maps each mnemonic to its shape and opcode bits.

Every encoded instruction is a 32-bit word whose high 6 bits hold the
opcode field. The remaining 26 bits are laid out by encoding shape:

    I-type:  | opcode:6 | rs:5 | rt:5 | imm:16                      |
    J-type:  | opcode:6 | target:26                                 |
    R-type:  | opcode:6 | rs:5 | rt:5 | rd:5 | shift:5 | function:6 |

Adding a Mnemonic
-----------------
The lexer and parser are driven entirely by the table below. Supporting a
new instruction means adding one FormatDescriptor row to BUILTIN_FORMATS:

    FormatDescriptor("ADD", Shape.R, 0b000000),
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import string


# =============================================================================
# Field Widths and Limits
# =============================================================================

OPCODE_BITS = 6
REGISTER_BITS = 5
IMMEDIATE_BITS = 16
TARGET_BITS = 26
SHIFT_BITS = 5
FUNCTION_BITS = 6

WORD_MASK = 0xFFFFFFFF
MAX_OPCODE = (1 << OPCODE_BITS) - 1
MAX_REGISTER = (1 << REGISTER_BITS) - 1  # $31

# Longest run of name characters the lexer will accept as a mnemonic
MAX_MNEMONIC_LENGTH = 8


# =============================================================================
# Encoding Shape Enumeration
# =============================================================================

class Shape(Enum):
    """The three fixed-width instruction encoding shapes."""
    I = "I"   # Immediate operand (rs, rt, imm)
    J = "J"   # Jump target (target)
    R = "R"   # Register only (rs, rt, rd, shift, function)

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return f"{self.value}-type"


# =============================================================================
# Format Descriptor
# =============================================================================

@dataclass(frozen=True)
class FormatDescriptor:
    """
    Encoding information for one mnemonic.

    This dataclass is immutable (frozen) to prevent accidental modification
    of the format table at runtime.

    Attributes:
        mnemonic: Canonical mnemonic text (matched case-sensitively)
        shape: Encoding shape selecting the operand layout
        opcode: Value of the 6-bit opcode field
    """
    mnemonic: str
    shape: Shape
    opcode: int

    def __repr__(self) -> str:
        return f"FormatDescriptor({self.mnemonic!r}, {self.shape}, opcode={self.opcode:06b})"


# =============================================================================
# Table Construction
# =============================================================================

MNEMONIC_START = string.ascii_letters
MNEMONIC_CHARS = string.ascii_letters + string.digits


def build_format_table(
    descriptors: Iterable[FormatDescriptor],
) -> Mapping[str, FormatDescriptor]:
    """
    Build a read-only mnemonic table from a list of descriptors.

    Args:
        descriptors: Rows of the table

    Returns:
        Immutable mapping from mnemonic text to descriptor

    Raises:
        ValueError: If a row is malformed or a mnemonic is repeated
    """
    table: dict[str, FormatDescriptor] = {}

    for desc in descriptors:
        name = desc.mnemonic
        if (
            not name
            or len(name) > MAX_MNEMONIC_LENGTH
            or name[0] not in MNEMONIC_START
            or any(c not in MNEMONIC_CHARS for c in name)
        ):
            raise ValueError(f"invalid mnemonic {name!r}")
        if not 0 <= desc.opcode <= MAX_OPCODE:
            raise ValueError(f"opcode {desc.opcode:#x} for {name} exceeds {OPCODE_BITS} bits")
        if name in table:
            raise ValueError(f"duplicate mnemonic {name!r}")
        table[name] = desc

    return MappingProxyType(table)


# =============================================================================
# Built-in Format Table
# =============================================================================

BUILTIN_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor("J", Shape.J, 0b000010),    # Jump
    FormatDescriptor("LW", Shape.I, 0b100011),   # Load word
)

FORMAT_TABLE: Mapping[str, FormatDescriptor] = build_format_table(BUILTIN_FORMATS)


def get_format(
    mnemonic: str,
    table: Optional[Mapping[str, FormatDescriptor]] = None,
) -> Optional[FormatDescriptor]:
    """
    Look up the descriptor for a mnemonic.

    Args:
        mnemonic: Mnemonic text (case-sensitive)
        table: Table to search (defaults to FORMAT_TABLE)

    Returns:
        The FormatDescriptor, or None if the mnemonic is unknown
    """
    if table is None:
        table = FORMAT_TABLE
    return table.get(mnemonic)
