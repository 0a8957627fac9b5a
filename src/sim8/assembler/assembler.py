"""
sim8 Assembler - Main Interface
===============================

This module provides the Assembler class, the primary interface for
assembling source code. It runs the lexer, parser, label resolver and
code generator in order and packages their output.

Example Usage
-------------
>>> from sim8.assembler import Assembler
>>> asm = Assembler()
>>> result = asm.assemble('''
... start:
...     mov al, 01
...     jmp start
... end
... ''')
>>> machine_code, statements = result
>>> [f"{machine_code[a]:02X}" for a in sorted(machine_code)]
['D0', '00', '01', 'C0', 'FD']
>>> result.statement_at(3).mnemonic
'JMP'

Two ways to handle errors are offered. assemble() raises the first
AssemblerError found. try_assemble() returns an AssemblyOutcome holding
either the result or that error, for callers that route diagnostics
to an editor. Neither catches exceptions outside the assembly domain.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union
import logging

from sim8.assembler.codegen import (
    AddressToMachineCodeMap,
    AddressToStatementMap,
    CodeGenerator,
)
from sim8.assembler.labels import LabelToAddressMap, resolve_labels
from sim8.assembler.lexer import Lexer
from sim8.assembler.parser import Parser, Statement
from sim8.config import AssemblerConfig
from sim8.errors import AssemblerError, Sim8Error
from sim8.isa import DEFAULT_INSTRUCTION_SET, InstructionSet
from sim8.utils import dec_to_hex

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x100


# =============================================================================
# Results
# =============================================================================

@dataclass
class AssemblyResult:
    """
    Output of one successful assembly.

    Unpacks as the pair (machine_code, statements):

        machine_code, statements = assemble(source)

    Attributes:
        machine_code: Address -> byte, sparse
        statements: Address -> statement starting at that address
        labels: Label identifier -> address
        source: The assembled source text
        instruction_set: Instruction set the source was assembled with
    """
    machine_code: AddressToMachineCodeMap
    statements: AddressToStatementMap
    labels: LabelToAddressMap = field(default_factory=dict)
    source: str = ""
    instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET

    def __iter__(self) -> Iterator[Union[AddressToMachineCodeMap, AddressToStatementMap]]:
        yield self.machine_code
        yield self.statements

    def statement_at(self, address: int) -> Optional[Statement]:
        """Statement whose code starts at `address`, e.g. the current PC."""
        return self.statements.get(address)

    def first_statement(self) -> Optional[Statement]:
        return self.statement_at(0)

    def memory_image(self, fill: int = 0x00) -> bytes:
        """The full 256-byte memory contents, unwritten cells set to `fill`."""
        image = bytearray([fill]) * MEMORY_SIZE
        for address, byte in self.machine_code.items():
            if address < MEMORY_SIZE:
                image[address] = byte
        return bytes(image)

    def hex_dump(self, fill: int = 0x00) -> str:
        """Memory image as 16 rows of 16 hex bytes, prefixed by row address."""
        image = self.memory_image(fill)
        rows = []
        for row in range(0, MEMORY_SIZE, 16):
            cells = " ".join(dec_to_hex(byte) for byte in image[row:row + 16])
            rows.append(f"{dec_to_hex(row)}: {cells}")
        return "\n".join(rows)

    def listing(self) -> str:
        """
        Assembly listing: address, bytes, line number and source text
        of every statement, followed by the label table.
        """
        lines = [
            "sim8 Assembler Listing",
            "=" * 60,
            "",
            "Addr  Code          Line  Source",
            "-" * 60,
        ]
        for address in sorted(self.statements):
            statement = self.statements[address]
            code = ""
            if statement.mnemonic != self.instruction_set.origin:
                code = " ".join(dec_to_hex(byte) for byte in statement.machine_code)
            text = self.source[statement.range.start:statement.range.end]
            if statement.label is not None:
                text = f"{statement.label.identifier}: {text}"
            line = statement.range.start_location.line
            lines.append(f"{dec_to_hex(address)}    {code:12s}  {line:4d}  {text}")
        lines.append("")
        lines.append("Label Table")
        lines.append("-" * 30)
        for identifier, address in sorted(self.labels.items()):
            lines.append(f"{identifier:20s} = {dec_to_hex(address)}")
        return "\n".join(lines)


@dataclass
class AssemblyOutcome:
    """
    Either an AssemblyResult or the AssemblerError that stopped assembly.
    """
    result: Optional[AssemblyResult] = None
    error: Optional[AssemblerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> AssemblyResult:
        """Return the result, or raise the error."""
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise Sim8Error("outcome holds neither a result nor an error")
        return self.result


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Main assembler class.

    Each call to assemble() is independent; the most recent successful
    result is kept for the get_*/write_* helpers used by the CLI.

    Attributes:
        instruction_set: Instruction-set tables used by every stage
        config: Output and source-reading settings
    """

    def __init__(
        self,
        instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET,
        config: Optional[AssemblerConfig] = None,
    ):
        self.instruction_set = instruction_set
        self.config = config if config is not None else AssemblerConfig()
        self._result: Optional[AssemblyResult] = None

    def assemble(self, source: str) -> AssemblyResult:
        """
        Assemble source text.

        Args:
            source: Assembly source code

        Returns:
            The AssemblyResult

        Raises:
            AssemblerError: The first error found, with its source line
                attached for display
        """
        isa = self.instruction_set
        try:
            tokens = Lexer(source, isa).tokenize()
            statements = Parser(tokens, isa).parse()
            labels = resolve_labels(statements, isa)
            machine_code, statement_map = CodeGenerator(labels, isa).generate(statements)
        except AssemblerError as e:
            e.attach_source(source)
            logger.debug(f"Assembly failed: {e.name} at {e.range}")
            raise

        self._result = AssemblyResult(
            machine_code=machine_code,
            statements=statement_map,
            labels=labels,
            source=source,
            instruction_set=isa,
        )
        logger.debug(
            f"Assembled {len(statements)} statements into {len(machine_code)} bytes"
        )
        return self._result

    def try_assemble(self, source: str) -> AssemblyOutcome:
        """Assemble, returning the error as a value instead of raising it."""
        try:
            return AssemblyOutcome(result=self.assemble(source))
        except AssemblerError as e:
            return AssemblyOutcome(error=e)

    def assemble_file(self, filepath: Union[str, Path]) -> AssemblyResult:
        """Read and assemble a source file."""
        path = Path(filepath)
        logger.debug(f"Assembling {path}")
        source = path.read_text(encoding=self.config.encoding)
        return self.assemble(source)

    # =========================================================================
    # Output
    # =========================================================================

    def get_result(self) -> AssemblyResult:
        if self._result is None:
            raise Sim8Error("nothing has been assembled yet")
        return self._result

    def get_symbols(self) -> dict[str, int]:
        return dict(self.get_result().labels)

    def get_listing(self) -> str:
        return self.get_result().listing()

    def write_output(self, filepath: Union[str, Path]) -> None:
        """Write the memory image in the configured output format."""
        if self.config.output_format == "hex":
            self.write_hex(filepath)
        else:
            self.write_binary(filepath)

    def write_binary(self, filepath: Union[str, Path]) -> None:
        """Write the 256-byte memory image."""
        image = self.get_result().memory_image(self.config.fill_byte)
        Path(filepath).write_bytes(image)

    def write_hex(self, filepath: Union[str, Path]) -> None:
        dump = self.get_result().hex_dump(self.config.fill_byte)
        Path(filepath).write_text(dump + "\n")

    def write_listing(self, filepath: Union[str, Path]) -> None:
        Path(filepath).write_text(self.get_listing() + "\n")

    def write_symbols(self, filepath: Union[str, Path]) -> None:
        """
        Write the label table.

        Format: name address (one per line)
        """
        lines = ["# Label table", "# Generated by sim8asm"]
        for identifier, address in sorted(self.get_symbols().items()):
            lines.append(f"{identifier} {dec_to_hex(address)}")
        Path(filepath).write_text("\n".join(lines) + "\n")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET) -> AssemblyResult:
    """
    Assemble source text.

    Returns:
        AssemblyResult, which unpacks as (machine_code, statements)
    """
    return Assembler(instruction_set).assemble(source)


def try_assemble(source: str, instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET) -> AssemblyOutcome:
    return Assembler(instruction_set).try_assemble(source)


def assemble_file(filepath: Union[str, Path]) -> AssemblyResult:
    return Assembler().assemble_file(filepath)
