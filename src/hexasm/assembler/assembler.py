"""
Assembler - Main Interface
==========================

This module provides the Assembler class, which drives one assembly run
from source text to a list of encoded 32-bit words.

Assembly Run
------------
A run moves through a fixed sequence of states:

    INIT -> LEXING -> COUNTING -> GENERATING -> DONE
                |          |            |
                v          |            v
           LEX_FAILED      |       GEN_FAILED
                |          |            |
                +----------+------------+--> ABORTED

1. LEXING: the whole source is tokenized; the first bad token aborts.
2. COUNTING: OPCODE tokens are counted. This is an upper bound on the
   number of instructions and sizes the output buffer. A source with no
   mnemonics at all is rejected here.
3. GENERATING: one instruction per counted mnemonic is parsed and encoded.
   Each instruction must be followed by a single newline or by the end of
   the input. Any failure aborts the run and discards the words produced
   so far.

Example Usage
-------------
>>> from hexasm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string("J 10\\nLW $1, $2, 100\\n")
[134217738, 2351038564]
>>> print(asm.get_hex(), end="")
0800000A
8C220064
"""

from dataclasses import asdict
from enum import Enum, auto
from pathlib import Path
from typing import Mapping, Optional
import logging

from hexasm.assembler.encoder import encode, format_hex, format_word
from hexasm.assembler.formats import FORMAT_TABLE, FormatDescriptor
from hexasm.assembler.lexer import Lexer, TokenType
from hexasm.assembler.parser import (
    ParsedInstruction,
    TokenCursor,
    describe_kind,
    parse_instruction,
)
from hexasm.errors import (
    AllocationError,
    EmptyProgramError,
    FileUnavailableError,
    HexAsmError,
    LexError,
    ParseError,
)

logger = logging.getLogger(__name__)


class AssemblyState(Enum):
    """States of a single assembly run."""
    INIT = auto()
    LEXING = auto()
    LEX_FAILED = auto()
    COUNTING = auto()
    GENERATING = auto()
    GEN_FAILED = auto()
    DONE = auto()
    ABORTED = auto()


class Assembler:
    """
    Main assembler class.

    Each call to assemble_string() or assemble_file() is an independent
    run. After a successful run the words are available through
    get_words(), get_hex() and write_hex(). After a failed run the
    assembler holds no words at all.

    Attributes:
        verbose: If True, report progress through the module logger
        formats: Mnemonic table used by the lexer and parser
    """

    def __init__(
        self,
        verbose: bool = False,
        formats: Optional[Mapping[str, FormatDescriptor]] = None,
    ):
        """
        Initialize the assembler.

        Args:
            verbose: Report progress at INFO level
            formats: Mnemonic table (defaults to the built-in FORMAT_TABLE)
        """
        self.verbose = verbose
        self.formats = FORMAT_TABLE if formats is None else formats
        self._state = AssemblyState.INIT
        self._words: list[int] = []

    @property
    def state(self) -> AssemblyState:
        """State reached by the most recent run."""
        return self._state

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The encoded words, one per instruction

        Raises:
            LexError: If the source cannot be tokenized
            EmptyProgramError: If the source contains no instructions
            ParseError: If an instruction is malformed or out of range
            AllocationError: If the output buffer cannot be allocated
        """
        self._words = []
        self._state = AssemblyState.INIT

        self._transition(AssemblyState.LEXING)
        try:
            tokens = Lexer(source, filename, self.formats).tokenize()
        except LexError:
            self._fail(AssemblyState.LEX_FAILED)
            raise

        self._transition(AssemblyState.COUNTING)
        cursor = TokenCursor(tokens, source)
        count = cursor.count(TokenType.OPCODE)
        logger.debug(f"{filename}: {count} mnemonic(s) in {len(tokens)} tokens")
        if count == 0:
            self._fail()
            raise EmptyProgramError(filename)

        try:
            words = [0] * count
        except MemoryError as e:
            self._fail()
            raise AllocationError(
                f"cannot allocate output buffer for {count} instructions"
            ) from e

        self._transition(AssemblyState.GENERATING)
        try:
            produced = self._generate(cursor, words)
        except ParseError:
            self._fail(AssemblyState.GEN_FAILED)
            raise

        del words[produced:]
        self._words = words
        self._transition(AssemblyState.DONE)

        if self.verbose:
            logger.info(f"Assembled {len(words)} instruction(s) from {filename}")

        return list(words)

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            The encoded words, one per instruction

        Raises:
            FileUnavailableError: If the source cannot be read
            AssemblerError: If assembly fails
        """
        filepath = Path(filepath)

        if self.verbose:
            logger.info(f"Assembling {filepath}...")

        try:
            source = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._words = []
            self._state = AssemblyState.ABORTED
            reason = getattr(e, "strerror", None) or str(e)
            raise FileUnavailableError(filepath, f"cannot read source: {reason}") from e

        return self.assemble_string(source, str(filepath))

    def _generate(self, cursor: TokenCursor, words: list[int]) -> int:
        """
        Parse and encode instructions into `words`.

        Returns:
            Number of words actually produced
        """
        produced = 0

        for index in range(len(words)):
            instruction = parse_instruction(cursor, self.formats)
            words[index] = encode(instruction.descriptor, instruction.fields)
            produced = index + 1
            self._trace(instruction, words[index])

            end = cursor.current
            if end.type is TokenType.EOF:
                break
            if end.type is not TokenType.NEWLINE:
                raise cursor.error(
                    f"expected end of line after instruction, found {describe_kind(end.type)}",
                    end,
                )
            cursor.advance()

        return produced

    def _trace(self, instruction: ParsedInstruction, word: int) -> None:
        fields = " ".join(f"{name}={value}" for name, value in asdict(instruction.fields).items())
        logger.debug(
            f"line {instruction.location.line}: {instruction.descriptor.mnemonic} "
            f"opcode={instruction.descriptor.opcode} {fields} -> {format_word(word)}"
        )

    def _transition(self, state: AssemblyState) -> None:
        logger.debug(f"{self._state.name} -> {state.name}")
        self._state = state

    def _fail(self, state: Optional[AssemblyState] = None) -> None:
        """Record a failure and abort the run, discarding all output."""
        if state is not None:
            self._transition(state)
        self._words = []
        self._transition(AssemblyState.ABORTED)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_words(self) -> list[int]:
        """
        Get the words from the last successful run.

        Returns:
            Copy of the encoded words (empty if the last run failed)
        """
        return list(self._words)

    def get_hex(self) -> str:
        """
        Get the hex text output for the last successful run.

        Returns:
            One 8-digit uppercase hex line per word
        """
        return format_hex(self._words)

    def write_hex(self, filepath: str | Path) -> None:
        """
        Write the hex text output to a file.

        Args:
            filepath: Output file path

        Raises:
            HexAsmError: If there is no successful run to write
            FileUnavailableError: If the destination cannot be written
        """
        if self._state is not AssemblyState.DONE:
            raise HexAsmError("nothing to write: no successful assembly")

        filepath = Path(filepath)
        try:
            filepath.write_text(self.get_hex(), encoding="utf-8")
        except OSError as e:
            raise FileUnavailableError(
                filepath, f"cannot write destination: {e.strerror or e}"
            ) from e

        if self.verbose:
            logger.info(f"Wrote {len(self._words)} word(s) to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[int]:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors

    Returns:
        The encoded words

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> list[int]:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file

    Returns:
        The encoded words

    Raises:
        HexAsmError: If reading or assembly fails
    """
    return Assembler().assemble_file(filepath)
