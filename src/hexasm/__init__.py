"""
hexasm - Assembler for 32-bit Fixed-Width Instruction Words
===========================================================

This package translates a small textual assembly language into 32-bit
machine words, written as hexadecimal text with one word per line.

Main Components
---------------
- **assembler**: Lexer, instruction parser, format table and encoder
- **cli**: The `hexasm` command-line tool

Quick Start
-----------
Assemble a program:
    >>> from hexasm import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("prog.s")
    >>> asm.write_hex("prog.hex")

Or use the command-line tool:
    $ hexasm prog.s prog.hex

Source Format
-------------
One instruction per line, the mnemonic separated from its operands by a
single space or tab:

    J 10
    LW $1, $2, 100

Version History
---------------
1.0.0 - Initial release with J and LW instructions
"""

__version__ = "1.0.0"
__author__ = "hexasm contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from hexasm.assembler import Assembler, assemble, assemble_file
from hexasm.errors import (
    HexAsmError,
    FileUnavailableError,
    AllocationError,
    AssemblerError,
    LexError,
    ParseError,
    FieldRangeError,
    EmptyProgramError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "HexAsmError",
    "FileUnavailableError",
    "AllocationError",
    "AssemblerError",
    "LexError",
    "ParseError",
    "FieldRangeError",
    "EmptyProgramError",
]
