"""Stack machine that holds and runs the P-code generated for L25 programs."""

from __future__ import annotations

import io
import re
import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, TextIO

from .output import Listing

CODE_CAPACITY = 300
MEMORY_SIZE = 5000
STACK_MAX = 999
STRING_CONSTANT_BASE = 1000
STRING_RUNTIME_BASE = 2000
STRING_HEAP_MAX = 4999

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class Fct(Enum):
    """Operation codes of the machine."""

    LIT = auto()
    OPR = auto()
    LOD = auto()
    STO = auto()
    CAL = auto()
    INT = auto()
    JMP = auto()
    JPC = auto()
    WRT = auto()
    RED = auto()
    HLT = auto()
    LDA = auto()
    LDI = auto()
    STI = auto()


@dataclass(frozen=True)
class Instruction:
    """One machine instruction: operation, level difference and argument."""

    f: Fct = Fct.LIT
    level: int = 0
    address: int = 0

    def __str__(self) -> str:
        return f"{self.f.name} {self.level} {self.address}"


class MachineError(Exception):
    """Raised for code overflow and for faults while a program runs."""


def _wrap(value: int) -> int:
    """Reduce ``value`` to a signed 32-bit integer."""
    return (value - _INT_MIN) % 2**32 + _INT_MIN


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _as_char(code: int) -> str:
    if 0 < code < 0x110000:
        return chr(code)
    return chr(code & 0xFF)


class _IntReader:
    """Reads whitespace-separated integers the way a formatted stream does."""

    def __init__(self, source: str | TextIO | Iterable[str]) -> None:
        if isinstance(source, str):
            source = io.StringIO(source)
        self._lines: Iterator[str] = iter(source)
        self._buffer = ""
        self._failed = False

    def read(self) -> int:
        if self._failed:
            return 0
        while True:
            self._buffer = self._buffer.lstrip()
            if self._buffer:
                break
            line = next(self._lines, None)
            if line is None:
                self._failed = True
                return 0
            self._buffer = line
        match = _INTEGER_PATTERN.match(self._buffer)
        if match is None:
            self._failed = True
            return 0
        self._buffer = self._buffer[match.end():]
        return max(_INT_MIN, min(_INT_MAX, int(match.group())))


class Machine:
    """Holds generated code and string constants, and executes them."""

    def __init__(self, listing: Listing | None = None) -> None:
        self.listing = listing if listing is not None else Listing()
        self.code: list[Instruction] = []
        self.memory = [0] * MEMORY_SIZE
        self.sptr_const = STRING_CONSTANT_BASE
        self.sptr_runtime = STRING_RUNTIME_BASE

    @property
    def cx(self) -> int:
        """Index of the next instruction to be generated."""
        return len(self.code)

    def gen(self, f: Fct, level: int, address: int) -> int:
        """Append an instruction and return its index."""
        if len(self.code) >= CODE_CAPACITY:
            raise MachineError("Code array overflow")
        self.code.append(Instruction(f, level, address))
        return len(self.code) - 1

    def set_code(self, addr: int, f: Fct, level: int, address: int) -> None:
        """Replace an already generated instruction; other indexes are ignored."""
        if 0 <= addr < len(self.code):
            self.code[addr] = Instruction(f, level, address)

    def gen_string(self, text: str) -> int:
        """Store a string constant and generate a LIT loading its address."""
        addr = self.sptr_const
        if self.sptr_const + len(text) + 1 > STRING_RUNTIME_BASE:
            raise MachineError("Constant string heap overflow")
        for ch in text:
            self.memory[self.sptr_const] = ord(ch)
            self.sptr_const += 1
        self.memory[self.sptr_const] = 0
        self.sptr_const += 1
        self.gen(Fct.LIT, 0, addr)
        return addr

    def list_code(self, start: int = 0) -> str:
        """Write the instructions from ``start`` on to the listing and return them."""
        if start < 0 or start >= len(self.code):
            return ""
        lines = "".join(
            f"{index}: {inst}\n" for index, inst in enumerate(self.code[start:], start)
        )
        self.listing.emit(lines, "general", "code")
        return lines

    # -- execution -------------------------------------------------------

    def _load(self, addr: int) -> int:
        if not 0 <= addr < MEMORY_SIZE:
            raise MachineError(f"Memory access out of range: {addr}")
        return self.memory[addr]

    def _store(self, addr: int, value: int) -> None:
        if not 0 <= addr < MEMORY_SIZE:
            raise MachineError(f"Memory access out of range: {addr}")
        self.memory[addr] = value

    def _base(self, level: int, b: int) -> int:
        base = b
        for _ in range(level):
            base = self._load(base)
        return base

    def _read_string(self, addr: int) -> str:
        chars = []
        while (code := self._load(addr)) != 0:
            chars.append(_as_char(code))
            addr += 1
        return "".join(chars)

    def _format_value(self, value: int) -> str:
        if STRING_CONSTANT_BASE <= value <= STRING_HEAP_MAX:
            return self._read_string(value)
        return str(value)

    def _append_runtime(self, codes: Iterable[int]) -> None:
        for code in codes:
            if self.sptr_runtime >= STRING_HEAP_MAX:
                raise MachineError("Runtime string heap overflow")
            self.memory[self.sptr_runtime] = code
            self.sptr_runtime += 1

    def _string_codes(self, addr: int) -> Iterator[int]:
        while (code := self._load(addr)) != 0:
            yield code
            addr += 1

    @staticmethod
    def _check_string_address(*addrs: int) -> None:
        for addr in addrs:
            if not STRING_CONSTANT_BASE <= addr <= STRING_HEAP_MAX:
                raise MachineError("Invalid string operation: not a string address")

    def _finish_runtime_string(self) -> None:
        self._store(self.sptr_runtime, 0)
        self.sptr_runtime += 1

    def run(self, input_stream: str | TextIO | Iterable[str] | None = None) -> None:
        """Execute the generated code, reading integers from ``input_stream``."""
        reader = _IntReader(sys.stdin if input_stream is None else input_stream)
        emit = self.listing.emit
        emit("Start L25\n", "result", "general")
        s = self.memory
        p, b, t = 0, 1, 3
        s[0:4] = [0, 0, 0, 0]

        while p < len(self.code):
            inst = self.code[p]
            p += 1
            f, a = inst.f, inst.address
            if f is Fct.LIT:
                if t + 1 > STACK_MAX:
                    raise MachineError("Stack overflow")
                t += 1
                self._store(t, a)
            elif f is Fct.OPR:
                p, b, t = self._operate(a, p, b, t, reader)
            elif f is Fct.LOD:
                t += 1
                self._store(t, self._load(self._base(inst.level, b) + a))
            elif f is Fct.STO:
                self._store(self._base(inst.level, b) + a, self._load(t))
                t -= 1
            elif f is Fct.CAL:
                self._store(t + 1, t)
                self._store(t + 2, self._base(inst.level, b))
                self._store(t + 3, b)
                self._store(t + 4, p)
                b = t + 2
                p = a
                t += 4
            elif f is Fct.INT:
                if a > 0 and t + a > STACK_MAX:
                    raise MachineError("Stack overflow")
                t += a
            elif f is Fct.JMP:
                p = a
            elif f is Fct.JPC:
                if self._load(t) == 0:
                    p = a
                t -= 1
            elif f is Fct.WRT:
                value = self._load(t)
                t -= 1
                emit(self._format_value(value), "result", "general")
            elif f is Fct.RED:
                t += 1
                emit("\n", "result")
                self._store(t, reader.read())
                emit(f"{self._load(t)}\n", "result")
            elif f is Fct.LDA:
                if t + 1 > STACK_MAX:
                    raise MachineError("Stack overflow")
                t += 1
                self._store(t, self._base(inst.level, b) + a)
            elif f is Fct.LDI:
                self._store(t, self._load(self._load(t)))
            elif f is Fct.STI:
                self._store(self._load(t - 1), self._load(t))
                t -= 2
            elif f is Fct.HLT:
                return

    def _operate(
        self, op: int, p: int, b: int, t: int, reader: _IntReader
    ) -> tuple[int, int, int]:
        load, store, emit = self._load, self._store, self.listing.emit
        if op == 0:
            return_value = load(t)
            caller_t = load(b - 1)
            p = load(b + 2)
            b = load(b + 1)
            t = caller_t
            store(t, return_value)
        elif op == 1:
            store(t - 1, _wrap(-load(t - 1)))
        elif op in (2, 3, 4, 5):
            t -= 1
            left, right = load(t), load(t + 1)
            if op == 2:
                result = left + right
            elif op == 3:
                result = left - right
            elif op == 4:
                result = left * right
            else:
                if right == 0:
                    raise MachineError("Division by zero")
                result = _truncating_div(left, right)
            store(t, _wrap(result))
        elif op == 6:
            value = load(t)
            store(t, value - _truncating_div(value, 2) * 2)
        elif op in (8, 9, 10, 11, 12, 13):
            t -= 1
            left, right = load(t), load(t + 1)
            outcome = {
                8: left == right,
                9: left != right,
                10: left < right,
                11: left >= right,
                12: left > right,
                13: left <= right,
            }[op]
            store(t, 1 if outcome else 0)
        elif op == 14:
            value = load(t)
            t -= 1
            emit(self._format_value(value) + "\n", "result", "general")
        elif op == 15:
            emit("\n", "result", "general")
        elif op == 16:
            if t + 1 > STACK_MAX:
                raise MachineError("Stack overflow")
            t += 1
            store(t, reader.read())
            emit(f"{load(t)}\n", "general", "result")
        elif op == 17:
            count, src = load(t), load(t - 1)
            t -= 1
            self._check_string_address(src)
            new_addr = self.sptr_runtime
            codes = list(self._string_codes(src))
            for _ in range(count):
                self._append_runtime(codes)
            self._finish_runtime_string()
            store(t, new_addr)
        elif op == 18:
            second, first = load(t), load(t - 1)
            t -= 1
            self._check_string_address(first, second)
            new_addr = self.sptr_runtime
            self._append_runtime(self._string_codes(first))
            self._append_runtime(self._string_codes(second))
            self._finish_runtime_string()
            store(t, new_addr)
        elif op == 19:
            number, src = load(t), load(t - 1)
            t -= 1
            self._check_string_address(src)
            new_addr = self.sptr_runtime
            self._append_runtime(self._string_codes(src))
            self._append_runtime(ord(ch) for ch in str(number))
            self._finish_runtime_string()
            store(t, new_addr)
        else:
            raise MachineError("Unknown operation")
        return p, b, t