"""Symbol table holding the names declared in an L25 program."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TABLE_CAPACITY = 100
STRING_VALUE_MAX = 100


class Kind(Enum):
    """What a table entry names."""

    CONSTANT = "constant"
    STRING = "string"
    VARIABLE = "variable"
    FUNCTION = "function"
    INT_POINTER = "int_pointer"
    STRING_POINTER = "string_pointer"


@dataclass
class Item:
    """One entry of the symbol table."""

    name: str = ""
    kind: Kind = Kind.CONSTANT
    str_value: str = ""
    value: int = 0
    level: int = 0
    address: int = 0
    size: int = 0


class TableOverflowError(Exception):
    """Raised when the symbol table has no room for another entry."""


class SymbolTable:
    """Fixed-capacity table of declared names; slot 0 is never used."""

    def __init__(self, capacity: int = TABLE_CAPACITY) -> None:
        self.capacity = capacity
        self._items = [Item() for _ in range(capacity)]
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def enter(
        self, kind: Kind, level: int, address: int, name: str, str_value: str = ""
    ) -> int:
        """Add a name and return its index."""
        if self._count + 1 >= self.capacity:
            raise TableOverflowError("Symbol table overflow")
        self._count += 1
        item = Item(name=name, kind=kind)
        if kind is not Kind.CONSTANT:
            item.level = level
            item.address = address
        if kind is Kind.STRING and len(str_value) <= STRING_VALUE_MAX:
            item.str_value = str_value
        self._items[self._count] = item
        return self._count

    def get(self, index: int) -> Item:
        """Return the entry at ``index``; it may be modified in place."""
        if not 0 <= index < self.capacity:
            raise IndexError("Table index out of range")
        return self._items[index]

    def position(self, name: str) -> int | None:
        """Return the index of the most recent entry called ``name``, or None."""
        for index in range(self._count, 0, -1):
            if self._items[index].name == name:
                return index
        return None

    def lookup(self, name: str) -> Kind | None:
        """Return the kind of the most recent entry called ``name``, or None."""
        index = self.position(name)
        return None if index is None else self._items[index].kind

    def render(self, start: int) -> str:
        """Format the entries from ``start`` up to, not including, the newest one."""
        lines = ["TABLE:\n"]
        if start >= self._count:
            lines.append("Empty table\n")
            return "".join(lines)
        for index in range(start, self._count):
            item = self._items[index]
            head = f"{index} {item.name} {item.kind.value} level:{item.level}"
            if item.kind is Kind.STRING:
                lines.append(f'{head} addr:{item.address} value:"{item.str_value}"\n')
            elif item.kind in (Kind.VARIABLE, Kind.INT_POINTER, Kind.STRING_POINTER):
                lines.append(f"{head} addr:{item.address}\n")
            elif item.kind is Kind.FUNCTION:
                lines.append(f"{head} size:{item.size}\n")
        lines.append("\n")
        return "".join(lines)