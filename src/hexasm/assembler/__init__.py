"""
Assembler Pipeline
==================

This package converts assembly source text into 32-bit machine words.

Main Components
---------------
- **Assembler**: Drives one assembly run and writes the hex output
- **Lexer**: Tokenizes source text into tokens
- **TokenCursor / parse_instruction**: Parse tokens into validated fields
- **encode / decode**: Pack fields into words and back
- **FORMAT_TABLE**: Mnemonic to encoding shape and opcode bits

Pipeline
--------
    text -> Lexer -> tokens -> Assembler (using FORMAT_TABLE)
         -> parse_instruction -> fields -> encode -> words -> hex text

Example Usage
-------------
>>> from hexasm.assembler import assemble
>>> [f"{w:08X}" for w in assemble("J 10\\nLW $1, $2, 100\\n")]
['0800000A', '8C220064']
"""

from hexasm.assembler.assembler import (
    Assembler,
    AssemblyState,
    assemble,
    assemble_file,
)
from hexasm.assembler.lexer import Lexer, Token, TokenType, parse_c_integer
from hexasm.assembler.parser import (
    InstructionFields,
    ITypeFields,
    JTypeFields,
    RTypeFields,
    ParsedInstruction,
    TokenCursor,
    parse_instruction,
)
from hexasm.assembler.encoder import (
    encode,
    decode,
    decode_opcode,
    format_word,
    format_hex,
    parse_hex,
)
from hexasm.assembler.formats import (
    Shape,
    FormatDescriptor,
    BUILTIN_FORMATS,
    FORMAT_TABLE,
    build_format_table,
    get_format,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyState",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "parse_c_integer",
    # Parser
    "InstructionFields",
    "ITypeFields",
    "JTypeFields",
    "RTypeFields",
    "ParsedInstruction",
    "TokenCursor",
    "parse_instruction",
    # Encoder
    "encode",
    "decode",
    "decode_opcode",
    "format_word",
    "format_hex",
    "parse_hex",
    # Formats
    "Shape",
    "FormatDescriptor",
    "BUILTIN_FORMATS",
    "FORMAT_TABLE",
    "build_format_table",
    "get_format",
]
