"""Drives scanning, parsing, code generation and execution of an L25 program."""

from __future__ import annotations

from typing import Iterable, TextIO

from .expressions import TooManyErrors
from .machine import Machine, MachineError
from .output import Listing
from .parser import Parser
from .scanner import Scanner
from .table import SymbolTable, TableOverflowError

CODE_HEADER = "\n=== Generated P-Code Instructions ===\n"
TABLE_HEADER = "\n=== Symbol Table ===\n"
SUCCESS_MESSAGE = "\n===Parsing success!===\n"
EXECUTING_HEADER = "\n=== Executing Program ===\n"
COMPLETED_FOOTER = "\n=== Execution Completed ===\n"
CANNOT_EXECUTE = "Cannot execute: compilation errors exist!\n"

_COMPILE_FAILURES = (MachineError, TooManyErrors, TableOverflowError, IndexError)


class Compiler:
    """Compiles one L25 source text and runs the resulting code.

    All output is gathered in ``listing``: the general channel receives
    everything, ``code`` the instruction listing, ``table`` the symbol table
    and ``result`` what the program prints while it runs.
    """

    def __init__(
        self,
        source: str | Iterable[str],
        list_code: bool = False,
        list_table: bool = False,
        echo: bool = False,
    ) -> None:
        self.list_code = list_code
        self.list_table = list_table
        self.listing = Listing(echo)
        self.machine = Machine(self.listing)
        self.scanner = Scanner(source, self.listing)
        self.table = SymbolTable()
        self.parser = Parser(self.scanner, self.table, self.machine, self.listing)
        self.compiled = False

    @property
    def error_count(self) -> int:
        """Number of syntax errors found so far."""
        return self.parser.error_count

    def compile(self) -> bool:
        """Parse the program and generate code; return True if there were no errors."""
        emit = self.listing.emit
        try:
            self.parser.parse()
            if self.list_code:
                emit(CODE_HEADER, "general", "code")
                self.machine.list_code(0)
            if self.list_table:
                emit(TABLE_HEADER, "general", "table")
                emit(self.table.render(0), "general", "table")
            count = self.parser.error_count
            if count == 0:
                message = SUCCESS_MESSAGE
            else:
                message = f"\n{count} errors in L25 program!\n"
            emit(message, "general", "code", "table")
            self.compiled = count == 0
            return self.compiled
        except _COMPILE_FAILURES as exc:
            self.compiled = False
            emit(f"Compilation error: {exc}\n", "general", "code", "table")
            return False

    def execute(self, input_stream: str | TextIO | Iterable[str] | None = None) -> bool:
        """Run the compiled program; return True if it ran to the end."""
        emit = self.listing.emit
        if not self.compiled or self.parser.error_count != 0:
            emit(CANNOT_EXECUTE, "general", "result")
            return False
        try:
            emit(EXECUTING_HEADER, "general", "result")
            self.machine.run(input_stream)
            emit(COMPLETED_FOOTER, "general", "result")
            return True
        except MachineError as exc:
            emit(f"Execution error: {exc}\n", "general", "result")
            return False