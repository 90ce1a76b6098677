"""Expression-level recursive-descent parsing and code generation for L25."""

from __future__ import annotations

from typing import AbstractSet

from .machine import Fct, Machine
from .output import Listing
from .scanner import Scanner
from .symbols import Symbol
from .table import Kind, SymbolTable

MAX_ERRORS = 30

_RELATIONS: dict[Symbol, int] = {
    Symbol.EQL: 8,
    Symbol.NEQ: 9,
    Symbol.LSS: 10,
    Symbol.GEQ: 11,
    Symbol.GTR: 12,
    Symbol.LEQ: 13,
}

_STORABLE = frozenset(
    {Kind.VARIABLE, Kind.STRING, Kind.INT_POINTER, Kind.STRING_POINTER}
)


class TooManyErrors(Exception):
    """Raised when more syntax errors are found than the compiler accepts."""


class ExpressionParser:
    """Parses expressions, conditions and calls, emitting code into a machine.

    Syntax errors are counted and marked in the listing's general channel with
    a caret under the offending position followed by the error number.
    """

    declbegsys = frozenset({Symbol.STRSYM, Symbol.FUNCSYM, Symbol.LETSYM})
    statbegsys = frozenset(
        {
            Symbol.IDENT,
            Symbol.IFSYM,
            Symbol.WHILESYM,
            Symbol.INPUTSYM,
            Symbol.OUTPUTSYM,
            Symbol.ATSYM,
        }
    )
    facbegsys = frozenset(
        {Symbol.IDENT, Symbol.NUMBER, Symbol.LPAREN, Symbol.MINUS}
    )

    def __init__(
        self,
        scanner: Scanner,
        table: SymbolTable,
        machine: Machine,
        listing: Listing | None = None,
    ) -> None:
        self.scanner = scanner
        self.table = table
        self.machine = machine
        self.listing = listing if listing is not None else scanner.listing
        self.sym = Symbol.NUL
        self.error_count = 0
        self.dx = 0
        self.args_to_clean = 0

    # -- basics ----------------------------------------------------------

    def next_symbol(self) -> Symbol:
        """Advance to the next symbol and return it."""
        self.sym = self.scanner.next_symbol()
        return self.sym

    def error(self, code: int) -> None:
        """Record syntax error ``code`` at the scanner's current position."""
        self.error_count += 1
        spaces = " " * max(self.scanner.char_position - 1, 0)
        self.listing.emit(f"**{spaces}^{code}\n", "general")
        if self.error_count > MAX_ERRORS:
            raise TooManyErrors("Too many errors, aborting compilation.")

    def test(self, s1: AbstractSet[Symbol], s2: AbstractSet[Symbol], code: int) -> None:
        """Report ``code`` unless the symbol is in ``s1``, then skip to ``s1`` or ``s2``.

        Skipping also stops once the input is exhausted.
        """
        if self.sym in s1:
            return
        self.error(code)
        while self.sym not in s1 and self.sym not in s2:
            before = (self.scanner.line_number, self.scanner.char_position)
            self.next_symbol()
            after = (self.scanner.line_number, self.scanner.char_position)
            if self.sym is Symbol.NUL and after == before:
                break

    def _lookup_item(self, name: str):
        index = self.table.position(name)
        return None if index is None else self.table.get(index)

    # -- expressions -----------------------------------------------------

    def parse_expression(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """expr ::= str_expr | arith_expr"""
        if self.sym is Symbol.STRING_LITERAL or (
            self.sym is Symbol.IDENT
            and self.table.lookup(self.scanner.ident) is Kind.STRING
        ):
            self.parse_string_expression(fsys, lev)
        else:
            self.parse_arith_expression(fsys, lev)

    def parse_string_expression(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """str_expr ::= str ( '*' arith | '+' ( str | arith ) )*"""
        machine = self.machine
        if self.sym is Symbol.STRING_LITERAL:
            machine.gen_string(self.scanner.str_value)
            self.next_symbol()
        elif self.sym is Symbol.IDENT:
            item = self._lookup_item(self.scanner.ident)
            if item is None:
                self.error(11)
                return
            if item.kind is not Kind.STRING:
                self.error(26)
                return
            machine.gen(Fct.LOD, lev - item.level, item.address)
            self.next_symbol()

        while self.sym in (Symbol.TIMES, Symbol.PLUS):
            op = self.sym
            self.next_symbol()
            if op is Symbol.TIMES:
                if self.sym is Symbol.NUMBER:
                    machine.gen(Fct.LIT, 0, self.scanner.number)
                    self.next_symbol()
                else:
                    self.parse_arith_expression(fsys, lev)
                machine.gen(Fct.OPR, 0, 17)
                continue

            kind = (
                self.table.lookup(self.scanner.ident)
                if self.sym is Symbol.IDENT
                else None
            )
            if self.sym is Symbol.STRING_LITERAL:
                machine.gen_string(self.scanner.str_value)
                self.next_symbol()
                machine.gen(Fct.OPR, 0, 18)
            elif kind is Kind.STRING:
                item = self._lookup_item(self.scanner.ident)
                machine.gen(Fct.LOD, lev - item.level, item.address)
                self.next_symbol()
                machine.gen(Fct.OPR, 0, 18)
            elif self.sym is Symbol.NUMBER:
                machine.gen(Fct.LIT, 0, self.scanner.number)
                self.next_symbol()
                machine.gen(Fct.OPR, 0, 19)
            elif kind is Kind.VARIABLE:
                item = self._lookup_item(self.scanner.ident)
                machine.gen(Fct.LOD, lev - item.level, item.address)
                self.next_symbol()
                machine.gen(Fct.OPR, 0, 19)
            else:
                self.parse_arith_expression(fsys, lev)
                machine.gen(Fct.OPR, 0, 19)

    def parse_arith_expression(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """arith ::= ['+'|'-'] term (('+'|'-') term)*"""
        if self.sym in (Symbol.PLUS, Symbol.MINUS):
            sign = self.sym
            self.next_symbol()
            self.parse_term(fsys, lev)
            if sign is Symbol.MINUS:
                self.machine.gen(Fct.OPR, 0, 1)
        else:
            self.parse_term(fsys, lev)

        while self.sym in (Symbol.PLUS, Symbol.MINUS):
            addop = self.sym
            self.next_symbol()
            self.parse_term(fsys, lev)
            self.machine.gen(Fct.OPR, 0, 2 if addop is Symbol.PLUS else 3)

    def parse_term(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """term ::= factor (('*'|'/') factor)*"""
        self.parse_factor(fsys, lev)
        while self.sym in (Symbol.TIMES, Symbol.DIVIDE):
            mulop = self.sym
            self.next_symbol()
            self.parse_factor(fsys, lev)
            self.machine.gen(Fct.OPR, 0, 4 if mulop is Symbol.TIMES else 5)

    def parse_factor(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """factor ::= '@' factor | '&' ident | ident | call | number | string | '(' expr ')'"""
        machine = self.machine
        sym = self.sym
        if sym is Symbol.ATSYM:
            self.next_symbol()
            self.parse_factor(fsys, lev)
            machine.gen(Fct.LDI, 0, 0)
        elif sym is Symbol.ADDRESSSYM:
            self.next_symbol()
            if self.sym is not Symbol.IDENT:
                self.error(4)
                return
            item = self._lookup_item(self.scanner.ident)
            if item is None:
                self.error(11)
                return
            machine.gen(Fct.LDA, lev - item.level, item.address)
            self.next_symbol()
        elif sym is Symbol.IDENT:
            item = self._lookup_item(self.scanner.ident)
            self.next_symbol()
            if self.sym is Symbol.LPAREN:
                if item is None:
                    self.error(11)
                elif item.kind is not Kind.FUNCTION:
                    self.error(25)
                else:
                    self.next_symbol()
                    count = 0
                    if self.sym is not Symbol.RPAREN:
                        count = self._parse_arguments(
                            fsys | {Symbol.COMMA, Symbol.RPAREN}, lev
                        )
                    if self.sym is Symbol.RPAREN:
                        self.next_symbol()
                    else:
                        self.error(22)
                    machine.gen(Fct.CAL, lev - item.level, item.address)
                    self.args_to_clean += count
            elif item is None:
                self.error(11)
            elif item.kind is Kind.CONSTANT:
                machine.gen(Fct.LIT, 0, item.value)
            elif item.kind in _STORABLE:
                machine.gen(Fct.LOD, lev - item.level, item.address)
            else:
                self.error(21)
        elif sym is Symbol.NUMBER:
            machine.gen(Fct.LIT, 0, self.scanner.number)
            self.next_symbol()
        elif sym is Symbol.STRING_LITERAL:
            machine.gen_string(self.scanner.str_value)
            self.next_symbol()
        elif sym is Symbol.LPAREN:
            self.next_symbol()
            self.parse_expression(fsys | {Symbol.RPAREN}, lev)
            if self.sym is Symbol.RPAREN:
                self.next_symbol()
            else:
                self.error(22)
        else:
            self.error(24)
            self.next_symbol()

    def _parse_arguments(self, fsys: AbstractSet[Symbol], lev: int) -> int:
        self.parse_expression(fsys, lev)
        count = 1
        while self.sym is Symbol.COMMA:
            self.next_symbol()
            self.parse_expression(fsys, lev)
            count += 1
        return count

    def parse_condition(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """condition ::= expr relop expr"""
        self.parse_expression(fsys | _RELATIONS.keys(), lev)
        relop = self.sym
        if relop in _RELATIONS:
            self.next_symbol()
            self.parse_expression(fsys, lev)
            self.machine.gen(Fct.OPR, 0, _RELATIONS[relop])
        else:
            self.error(16)
            self.test(self.facbegsys, fsys, 16)

    def parse_function_call(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """call ::= ident '(' [expr (',' expr)*] ')' used as a statement."""
        item = self._lookup_item(self.scanner.ident)
        if item is None:
            self.error(11)
            return
        if item.kind is not Kind.FUNCTION:
            self.error(25)
            return
        self.next_symbol()
        if self.sym is not Symbol.LPAREN:
            self.error(21)
            return
        self.next_symbol()
        count = 0
        if self.sym is not Symbol.RPAREN:
            count = self._parse_arguments(frozenset({Symbol.COMMA, Symbol.RPAREN}), lev)
        if self.sym is Symbol.RPAREN:
            self.next_symbol()
            self.machine.gen(Fct.CAL, lev - item.level, item.address)
            self.args_to_clean += count
        else:
            self.error(22)