"""Program- and statement-level parsing and code generation for L25."""

from __future__ import annotations

from typing import AbstractSet

from .expressions import ExpressionParser
from .machine import Fct
from .symbols import Symbol
from .table import Kind

MAX_LEVEL = 3
FRAME_HEADER = 3

_ASSIGNABLE = frozenset(
    {Kind.VARIABLE, Kind.STRING, Kind.INT_POINTER, Kind.STRING_POINTER}
)
_POINTERS = frozenset({Kind.INT_POINTER, Kind.STRING_POINTER})


class Parser(ExpressionParser):
    """Parses a complete L25 program and generates its code.

    ``program name { func ... main { ... } }``: functions come first, then
    the main block, which is entered through a jump generated at address 0.
    """

    # -- program structure -----------------------------------------------

    def parse(self) -> None:
        """Parse the whole program from the first symbol on."""
        fsys: frozenset[Symbol] = frozenset()
        self.next_symbol()
        if self.sym is not Symbol.PROGRAMSYM:
            self.error(18)
            self.test({Symbol.PROGRAMSYM, Symbol.IDENT}, fsys, 18)
            return
        self.next_symbol()
        if self.sym is not Symbol.IDENT:
            self.error(4)
            self.test({Symbol.LBRACE}, fsys, 4)
            return
        self.next_symbol()
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test(self.declbegsys, fsys, 17)
            return
        self.next_symbol()
        self.parse_program(0, fsys)
        if self.sym is Symbol.RBRACE:
            self.listing.emit("Program parsed successfully!\n")
        else:
            self.error(13)

    def parse_program(self, lev: int, fsys: AbstractSet[Symbol]) -> None:
        """Parse the function definitions and the main block."""
        machine = self.machine
        self.dx = FRAME_HEADER
        jump_to_main = machine.gen(Fct.JMP, 0, 0)
        if lev > MAX_LEVEL:
            self.error(1)

        while self.sym is Symbol.FUNCSYM:
            self.next_symbol()
            self.parse_function_def(fsys)

        if self.sym is not Symbol.MAINSYM:
            self.error(19)
            self.test({Symbol.MAINSYM, Symbol.LBRACE}, fsys, 19)
            return
        self.next_symbol()
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test(self.statbegsys, fsys, 17)
            return
        self.next_symbol()
        machine.set_code(jump_to_main, Fct.JMP, 0, machine.cx)
        alloc = machine.gen(Fct.INT, 0, 0)
        self.dx = FRAME_HEADER
        self.parse_statement_list(fsys, 1)
        machine.set_code(alloc, Fct.INT, 0, self.dx)
        if self.sym is Symbol.RBRACE:
            self.next_symbol()
            machine.gen(Fct.HLT, 0, 0)
        else:
            self.error(13)

    def parse_function_def(self, fsys: AbstractSet[Symbol]) -> None:
        """func ident '(' [params] ')' '{' stmt_list 'return' expr ';' '}'"""
        machine = self.machine
        if self.sym is not Symbol.IDENT:
            self.error(4)
            self.test(self.facbegsys, fsys, 4)
            return
        func_index = self.table.enter(Kind.FUNCTION, 0, 0, self.scanner.ident)
        self.next_symbol()

        if self.sym is not Symbol.LPAREN:
            self.error(21)
            self.test({Symbol.IDENT, Symbol.RPAREN}, fsys, 21)
            return
        self.next_symbol()
        saved_dx = self.dx
        self.dx = FRAME_HEADER
        if self.sym is not Symbol.RPAREN:
            self.parse_parameter_list(fsys)
        if self.sym is not Symbol.RPAREN:
            self.error(22)
            return
        self.next_symbol()
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test(self.statbegsys, fsys, 17)
            return
        self.next_symbol()

        alloc = machine.gen(Fct.INT, 0, 0)
        self.table.get(func_index).address = alloc
        self.parse_statement_list(fsys, 1)
        if self.sym is not Symbol.RETURNSYM:
            self.error(20)
        else:
            self.next_symbol()
            self.parse_expression(fsys | {Symbol.SEMICOLON}, 1)
            machine.gen(Fct.OPR, 0, 0)
            if self.sym is Symbol.SEMICOLON:
                self.next_symbol()
            else:
                self.error(5)
        machine.set_code(alloc, Fct.INT, 0, self.dx)
        self.dx = saved_dx

        if self.sym is Symbol.RBRACE:
            self.next_symbol()
        else:
            self.error(13)

    def parse_parameter_list(self, fsys: AbstractSet[Symbol]) -> None:
        """params ::= ident (',' ident)*; the last one sits just below the frame."""
        names: list[str] = []
        while True:
            if self.sym is Symbol.IDENT:
                names.append(self.scanner.ident)
                self.next_symbol()
            else:
                self.error(4)
            if self.sym is not Symbol.COMMA:
                break
            self.next_symbol()
        count = len(names)
        for offset, name in enumerate(names):
            self.table.enter(Kind.VARIABLE, 1, -(count - offset + 1), name)

    # -- statements ------------------------------------------------------

    def parse_statement_list(self, fsys: AbstractSet[Symbol], lev: int = 0) -> None:
        """stmt_list ::= ( stmt ';' )+"""
        has_statement = False
        recovery = self.statbegsys | {Symbol.RBRACE}
        while self.sym in self.statbegsys or (
            self.sym in self.declbegsys and self.sym is not Symbol.FUNCSYM
        ):
            has_statement = True
            self.args_to_clean = 0
            self.parse_statement(fsys, lev)
            if self.sym is Symbol.SEMICOLON:
                self.next_symbol()
            else:
                self.error(5)
                self.test(recovery, fsys, 5)
        if not has_statement:
            self.error(23)

    def parse_statement(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """Dispatch on the first symbol of a statement."""
        sym = self.sym
        if sym in (Symbol.ATSYM, Symbol.IDENT):
            if (
                sym is Symbol.IDENT
                and self.table.lookup(self.scanner.ident) is Kind.FUNCTION
            ):
                self.parse_function_call(fsys, lev)
            else:
                self.parse_assignment(fsys, lev)
        elif sym is Symbol.LETSYM:
            self.parse_var_declaration(lev)
        elif sym is Symbol.IFSYM:
            self.parse_if_statement(fsys, lev)
        elif sym is Symbol.WHILESYM:
            self.parse_while_statement(fsys, lev)
        elif sym is Symbol.INPUTSYM:
            self.parse_input_statement(fsys, lev)
        elif sym is Symbol.OUTPUTSYM:
            self.parse_output_statement(fsys, lev)
        elif sym is Symbol.STRSYM:
            self.parse_str_declaration(lev)
        else:
            self.error(23)
            self.next_symbol()

    def _parse_declaration(self, lev: int, plain: Kind, pointer: Kind) -> None:
        self.next_symbol()
        is_pointer = False
        if self.sym is Symbol.ATSYM:
            is_pointer = True
            self.next_symbol()
        if self.sym is not Symbol.IDENT:
            self.error(4)
            return
        kind = pointer if is_pointer else plain
        self.table.enter(
            kind, lev, self.dx, self.scanner.ident, self.scanner.str_value
        )
        address = self.dx
        self.dx += 1
        self.next_symbol()
        if self.sym is not Symbol.BECOMES:
            return
        self.next_symbol()
        if self.sym is Symbol.ADDRESSSYM:
            if not is_pointer:
                self.error(28)
            self.next_symbol()
            if self.sym is Symbol.IDENT:
                index = self.table.position(self.scanner.ident)
                if index is not None:
                    item = self.table.get(index)
                    self.machine.gen(Fct.LDA, lev - item.level, item.address)
                    self.next_symbol()
                else:
                    self.error(11)
            else:
                self.error(4)
        else:
            self.parse_expression(frozenset({Symbol.SEMICOLON}), lev)
        self.machine.gen(Fct.STO, 0, address)

    def parse_var_declaration(self, lev: int) -> None:
        """let ['@'] ident ['=' ( '&' ident | expr )]"""
        self._parse_declaration(lev, Kind.VARIABLE, Kind.INT_POINTER)

    def parse_str_declaration(self, lev: int) -> None:
        """str ['@'] ident ['=' ( '&' ident | expr )]"""
        self._parse_declaration(lev, Kind.STRING, Kind.STRING_POINTER)

    def _open_paren(self, fsys: AbstractSet[Symbol]) -> None:
        self.next_symbol()
        if self.sym is not Symbol.LPAREN:
            self.error(21)
            self.test(self.facbegsys, fsys, 21)
        self.next_symbol()

    def _close(self, closing: Symbol, code: int) -> None:
        if self.sym is closing:
            self.next_symbol()
        else:
            self.error(code)

    def parse_while_statement(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """while '(' condition ')' '{' stmt_list '}'"""
        machine = self.machine
        self._open_paren(fsys)
        loop_start = machine.cx
        self.parse_condition(fsys | {Symbol.RPAREN}, lev)
        self._close(Symbol.RPAREN, 22)
        exit_jump = machine.gen(Fct.JPC, 0, 0)
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test(self.statbegsys, fsys, 17)
        else:
            self.next_symbol()
        self.parse_statement_list(fsys, lev)
        self._close(Symbol.RBRACE, 13)
        machine.gen(Fct.JMP, 0, loop_start)
        machine.set_code(exit_jump, Fct.JPC, 0, machine.cx)

    def parse_if_statement(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """if '(' condition ')' '{' stmt_list '}' [else '{' stmt_list '}']"""
        machine = self.machine
        self._open_paren(fsys)
        self.parse_condition(fsys | {Symbol.RPAREN}, lev)
        self._close(Symbol.RPAREN, 22)
        false_jump = machine.gen(Fct.JPC, 0, 0)
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test({Symbol.LBRACE}, fsys, 22)
        self.next_symbol()
        self.parse_statement_list(fsys, lev)
        self._close(Symbol.RBRACE, 13)

        if self.sym is not Symbol.ELSESYM:
            machine.set_code(false_jump, Fct.JPC, 0, machine.cx)
            return
        end_jump = machine.gen(Fct.JMP, 0, 0)
        machine.set_code(false_jump, Fct.JPC, 0, machine.cx)
        self.next_symbol()
        if self.sym is not Symbol.LBRACE:
            self.error(17)
            self.test(self.statbegsys, fsys, 17)
        else:
            self.next_symbol()
        self.parse_statement_list(fsys, lev)
        self._close(Symbol.RBRACE, 13)
        machine.set_code(end_jump, Fct.JMP, 0, machine.cx)

    def parse_output_statement(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """output '(' expr (',' expr)* ')'"""
        self._open_paren(fsys)
        arg_fsys = fsys | {Symbol.COMMA, Symbol.RPAREN}
        while True:
            self.parse_expression(arg_fsys, lev)
            self.machine.gen(Fct.WRT, 0, 0)
            if self.sym is not Symbol.COMMA:
                break
            self.next_symbol()
        self._close(Symbol.RPAREN, 22)

    def parse_input_statement(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """input '(' ident (',' ident)* ')'"""
        self._open_paren(fsys)
        while True:
            if self.sym is Symbol.IDENT:
                index = self.table.position(self.scanner.ident)
                if index is None:
                    self.error(11)
                else:
                    item = self.table.get(index)
                    if item.kind is Kind.VARIABLE:
                        self.machine.gen(Fct.RED, 0, 0)
                        self.machine.gen(Fct.STO, lev - item.level, item.address)
                    else:
                        self.error(12)
                self.next_symbol()
            else:
                self.error(4)
            if self.sym is not Symbol.COMMA:
                break
            self.next_symbol()
        self._close(Symbol.RPAREN, 22)

    def parse_assignment(self, fsys: AbstractSet[Symbol], lev: int) -> None:
        """ident '=' expr  |  '@' ident '=' expr"""
        machine = self.machine
        if self.sym is Symbol.ATSYM:
            self.next_symbol()
            if self.sym is not Symbol.IDENT:
                self.error(4)
                return
            index = self.table.position(self.scanner.ident)
            if index is None:
                self.error(11)
                return
            item = self.table.get(index)
            if item.kind not in _POINTERS:
                self.error(29)
            machine.gen(Fct.LOD, lev - item.level, item.address)
            self.next_symbol()
            if self.sym is Symbol.BECOMES:
                self.next_symbol()
                self.parse_expression(fsys, lev)
                machine.gen(Fct.STI, 0, 0)
            else:
                self.error(27)
                self.test(self.facbegsys, fsys, 27)
        elif self.sym is Symbol.IDENT:
            index = self.table.position(self.scanner.ident)
            if index is None:
                self.error(11)
                return
            item = self.table.get(index)
            if item.kind not in _ASSIGNABLE:
                self.error(12)
                return
            self.next_symbol()
            if self.sym is Symbol.BECOMES:
                self.next_symbol()
                self.parse_expression(fsys, lev)
                machine.gen(Fct.STO, lev - item.level, item.address)
            else:
                self.error(27)