"""Lexical analyser for L25 source text."""

from __future__ import annotations

import io
import string
import sys
from typing import Iterable

from .output import Listing
from .symbols import SINGLE_CHAR_SYMBOLS, Symbol, keyword_symbol

MAX_DIGITS = 14

_WHITESPACE = frozenset(" \t\n\v\f\r")
_LETTERS = frozenset(string.ascii_letters)
_DIGITS = frozenset(string.digits)
_IDENT_CHARS = _LETTERS | _DIGITS | {"_"}
_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class Scanner:
    """Turns L25 source into a stream of symbols.

    Each source line is echoed to the listing's general channel, prefixed
    with its line number, as it is read. The scanner never delivers the end
    of a non-empty line as a character, so tokens on adjacent lines touch.
    """

    def __init__(self, source: str | Iterable[str], listing: Listing | None = None) -> None:
        if isinstance(source, str):
            source = io.StringIO(source)
        self._lines = iter(source)
        self.listing = listing if listing is not None else Listing()
        self.warnings: list[str] = []
        self.symbol = Symbol.NUL
        self.ident = ""
        self.number = 0
        self.str_value = ""
        self.line_number = 0
        self.char_position = 0
        self._line = ""
        self._ch: str | None = " "
        self._advance()

    def next_symbol(self) -> Symbol:
        """Read the next symbol, store it in ``symbol`` and return it."""
        while self._ch is not None and self._ch in _WHITESPACE:
            self._advance()
        if self._ch is None:
            self.symbol = Symbol.NUL
        elif self._ch in _LETTERS or self._ch == "_":
            self._scan_word()
        elif self._ch in _DIGITS:
            self._scan_number()
        elif self._ch == '"':
            self._scan_string()
        else:
            self._scan_operator()
        return self.symbol

    def _advance(self) -> None:
        if self.char_position >= len(self._line):
            raw = next(self._lines, None)
            if raw is None:
                self._ch = None
                return
            self._line = raw[:-1] if raw.endswith("\n") else raw
            self.char_position = 0
            self.line_number += 1
            self.listing.emit(f"{self.line_number} {self._line}\n", "general")
        if self.char_position < len(self._line):
            self._ch = self._line[self.char_position]
        else:
            self._ch = "\n"
        self.char_position += 1

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        if self.listing.echo:
            print(message, file=sys.stderr)

    def _scan_word(self) -> None:
        chars = []
        while self._ch is not None and self._ch in _IDENT_CHARS:
            chars.append(self._ch)
            self._advance()
        word = "".join(chars)
        keyword = keyword_symbol(word)
        if keyword is not None:
            self.ident = word.lower()
            self.symbol = keyword
        else:
            self.ident = word
            self.symbol = Symbol.IDENT

    def _scan_number(self) -> None:
        digits = 0
        value = 0
        while self._ch is not None and self._ch in _DIGITS:
            value = value * 10 + int(self._ch)
            digits += 1
            self._advance()
        if digits > MAX_DIGITS:
            self._warn("Error: Number too long")
        self.number = value
        self.symbol = Symbol.NUMBER

    def _scan_string(self) -> None:
        chars = []
        self._advance()
        while self._ch is not None and self._ch != '"':
            if self._ch == "\\":
                self._advance()
                if self._ch is None:
                    chars.append("\\")
                else:
                    chars.append(_ESCAPES.get(self._ch, "\\" + self._ch))
            else:
                chars.append(self._ch)
            self._advance()
        self.str_value = "".join(chars)
        if self._ch == '"':
            self._advance()
            self.symbol = Symbol.STRING_LITERAL
        else:
            self._warn("Error: Unterminated string literal")
            self.symbol = Symbol.NUL

    def _scan_operator(self) -> None:
        ch = self._ch
        if ch == "=":
            self._advance()
            self.symbol = self._followed_by_equals(Symbol.EQL, Symbol.BECOMES)
        elif ch == "!":
            self._advance()
            if self._ch == "=":
                self.symbol = Symbol.NEQ
                self._advance()
            else:
                self._warn("Error: Expected '=' after '!'")
                self.symbol = Symbol.NUL
        elif ch == "<":
            self._advance()
            self.symbol = self._followed_by_equals(Symbol.LEQ, Symbol.LSS)
        elif ch == ">":
            self._advance()
            self.symbol = self._followed_by_equals(Symbol.GEQ, Symbol.GTR)
        elif ch in SINGLE_CHAR_SYMBOLS:
            self.symbol = SINGLE_CHAR_SYMBOLS[ch]
            self._advance()
        else:
            self._warn(f"Error: Unknown symbol '{ch}'")
            self._advance()
            self.symbol = Symbol.NUL

    def _followed_by_equals(self, with_equals: Symbol, without: Symbol) -> Symbol:
        if self._ch == "=":
            self._advance()
            return with_equals
        return without