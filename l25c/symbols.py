"""Lexical symbols of the L25 language and the keyword and operator tables."""

from __future__ import annotations

from enum import Enum, auto


class Symbol(Enum):
    """Every kind of token the scanner can produce."""

    NUL = auto()
    IDENT = auto()
    NUMBER = auto()
    STRING_LITERAL = auto()
    PLUS = auto()
    MINUS = auto()
    TIMES = auto()
    DIVIDE = auto()
    BACKSLASH = auto()
    EQL = auto()
    NEQ = auto()
    LSS = auto()
    LEQ = auto()
    GTR = auto()
    GEQ = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    SEMICOLON = auto()
    QUOTE = auto()
    BECOMES = auto()
    PROGRAMSYM = auto()
    MAINSYM = auto()
    LETSYM = auto()
    STRSYM = auto()
    IFSYM = auto()
    ELSESYM = auto()
    WHILESYM = auto()
    FUNCSYM = auto()
    RETURNSYM = auto()
    INPUTSYM = auto()
    OUTPUTSYM = auto()
    ODDSYM = auto()
    ATSYM = auto()
    ADDRESSSYM = auto()


KEYWORDS: dict[str, Symbol] = {
    "program": Symbol.PROGRAMSYM,
    "main": Symbol.MAINSYM,
    "str": Symbol.STRSYM,
    "let": Symbol.LETSYM,
    "if": Symbol.IFSYM,
    "else": Symbol.ELSESYM,
    "while": Symbol.WHILESYM,
    "func": Symbol.FUNCSYM,
    "return": Symbol.RETURNSYM,
    "input": Symbol.INPUTSYM,
    "output": Symbol.OUTPUTSYM,
}

SINGLE_CHAR_SYMBOLS: dict[str, Symbol] = {
    "+": Symbol.PLUS,
    "-": Symbol.MINUS,
    "*": Symbol.TIMES,
    "/": Symbol.DIVIDE,
    "(": Symbol.LPAREN,
    ")": Symbol.RPAREN,
    "{": Symbol.LBRACE,
    "}": Symbol.RBRACE,
    ",": Symbol.COMMA,
    ";": Symbol.SEMICOLON,
    "@": Symbol.ATSYM,
    "&": Symbol.ADDRESSSYM,
}


def keyword_symbol(word: str) -> Symbol | None:
    """Return the reserved-word symbol for ``word`` (case-insensitive), or None."""
    return KEYWORDS.get(word.lower())