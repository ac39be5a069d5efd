"""
hexasm Error Hierarchy
======================

This module defines the exception hierarchy for the whole assembler.
All exceptions inherit from HexAsmError, allowing callers to catch every
assembler-related failure with a single except clause.

Exception Hierarchy
-------------------
HexAsmError (base)
├── FileUnavailableError - source unreadable or destination unwritable
├── AllocationError - output buffer could not be allocated
└── AssemblerError (source-related, carries a location)
    ├── LexError - invalid character, unknown mnemonic, bad register/literal
    ├── ParseError - wrong operand kind, missing separator
    │   └── FieldRangeError - field exceeds its declared bit width
    └── EmptyProgramError - source contains no instructions

Every error terminates the assembly run at its point of origin; there is
no recovery or error collection.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HexAsmError(Exception):
    """
    Base exception for all hexasm errors.

        try:
            assembler.assemble_file("program.s")
        except HexAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# I/O and Resource Exceptions
# =============================================================================

class FileUnavailableError(HexAsmError):
    """
    A source file could not be read or a destination could not be written.

    Attributes:
        path: The offending path
        reason: Short description of the underlying failure
    """

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"'{path}': {reason}")


class AllocationError(HexAsmError):
    """Raised when the output word buffer cannot be allocated."""
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(HexAsmError):
    """
    Base exception for errors tied to the assembly source.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """The 1-based source line of the error, when known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.s:2:4: error: register $40 out of range
                LW $40, $2, 100
                   ^
            hint: registers are $0 to $31
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexError(AssemblerError):
    """
    Source text that cannot be tokenized.

    Examples:
        - Invalid character in source
        - Mnemonic not present in the format table
        - Register outside $0-$31
        - Malformed numeric literal
    """
    pass


class ParseError(AssemblerError):
    """
    Tokens that do not form a valid instruction.

    Examples:
        - Register where a number is expected (or vice versa)
        - Missing comma between operands
        - Missing whitespace after the mnemonic
        - Trailing tokens where a newline is expected
    """
    pass


class FieldRangeError(ParseError):
    """
    An operand value does not fit in its instruction field.

    Example:
        LW $1, $2, 0x10000  ; Error: imm is a 16-bit field
    """

    def __init__(
        self,
        field_name: str,
        value: int,
        bits: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.field_name = field_name
        self.value = value
        self.bits = bits
        self.limit = (1 << bits) - 1

        super().__init__(
            f"{field_name} must only contain {bits}-bit values (got {value:#x})",
            location=location,
            hint=f"{field_name} range is 0 to {self.limit:#x}",
            source_line=source_line,
        )


class EmptyProgramError(AssemblerError):
    """Raised when the source contains no instructions at all."""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        super().__init__(
            "file must have at least one instruction",
            location=SourceLocation(filename, 1, 0),
        )
