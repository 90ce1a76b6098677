# l25c

`l25c` compiles programs written in L25, a small teaching language, into
P-code for a simple stack machine, and then runs that code.

An L25 program has a name, any number of function definitions, and a
`main` block:

```
program Demo {
    func add(a, b) {
        let sum = a + b;
        return sum;
    }
    main {
        str greeting = "result: ";
        let x;
        input(x);
        let y = add(x, 10);
        if (y > 50) {
            output(greeting + y);
        } else {
            output(0);
        };
    }
}
```

The language supports:

- integer variables (`let`) and string variables (`str`);
- arithmetic with `+ - * /` and comparisons with `== != < <= > >=`;
- string concatenation (`"a" + "b"`, `"n=" + 5`) and repetition (`"ab" * 3`);
- string escapes `\n`, `\t`, `\"` and `\\`;
- `if` / `else` and `while`, always with parentheses and braces;
- `input(...)` and `output(...)`;
- functions with parameters and a `return` expression;
- pointers: `let @p = &x;`, dereference `@p`, and store through `@p = ...`.

Every statement ends with `;`, including `if` and `while`. Keywords are not
case sensitive; identifiers are. `output` writes each value without a
trailing newline; `input` reads whitespace-separated integers and yields `0`
once the input is exhausted or not a number.

## Installation

```
pip install .
```

## Command line

```
l25c [path] [--list-code | --no-list-code] [--list-table | --no-list-table]
     [--execute | --no-execute] [--output-dir DIR]
```

Without arguments the command asks for the path of an L25 source file,
whether to list the generated P-code and the symbol table, and, once
compilation succeeds, whether to run the program; the options answer those
questions in advance. Values for `input(...)` are read from standard input.

The source listing, error markers, P-code, symbol table and program results
are printed and, at the end, also written to `foutput.txt`, `fcode.txt`,
`ftable.txt` and `fresult.txt` in the output directory (the current directory
by default). The exit status is 1 when the source file cannot be read, is
empty, or the output files cannot be written, and 0 otherwise.

### Error markers

Syntax errors are shown under the offending source line as `**   ^N`, where
the caret points at the column where the error was found and `N` is:

| N  | meaning                                   |
|----|-------------------------------------------|
| 1  | nesting too deep                          |
| 4  | identifier expected                       |
| 5  | `;` expected                              |
| 11 | undeclared identifier                     |
| 12 | identifier cannot be assigned to          |
| 13 | `}` expected                              |
| 16 | relational operator expected              |
| 17 | `{` expected                              |
| 18 | `program` expected                        |
| 19 | `main` expected                           |
| 20 | `return` expected                         |
| 21 | `(` expected, or identifier not usable here |
| 22 | `)` expected                              |
| 23 | statement expected                        |
| 24 | illegal factor                            |
| 25 | not a function                            |
| 26 | string expected                           |
| 27 | `=` expected                              |
| 28 | address assigned to a non-pointer         |
| 29 | dereference of a non-pointer              |

Compilation stops after more than 30 errors.

## Using it from Python

```python
import io
from l25c.compiler import Compiler

source = """
program Hello {
    main {
        let x = 6 * 7;
        output("x = " + x);
    }
}
"""

compiler = Compiler(source, list_code=True, list_table=True, echo=False)
if compiler.compile():
    compiler.execute(io.StringIO(""))
print(compiler.listing.text("result"))
print(compiler.listing.text("code"))
```

- `Compiler(source, list_code, list_table, echo)` takes the source as a
  string or an iterable of lines. With `echo=True` everything is also printed
  to standard output.
- `compile()` returns `True` when the program had no errors;
  `error_count` holds the number of errors found.
- `execute(input_stream)` runs the compiled code, reading the values for
  `input(...)` from a string, text stream or iterable of lines (standard
  input when `None`), and returns `True` if the program ran to the end.
  Faults such as division by zero or stack overflow are reported as
  `Execution error: ...` and make it return `False`.
- `compiler.listing` is an `l25c.output.Listing` with the channels
  `general`, `code`, `table` and `result`; `text(channel)` returns what was
  written to a channel and `clear()` empties them all.

The parts can also be used on their own: `l25c.scanner.Scanner`,
`l25c.table.SymbolTable`, `l25c.parser.Parser` and `l25c.machine.Machine`,
whose `gen`, `set_code`, `gen_string`, `list_code` and `run` methods build
and execute P-code directly.

### Limits

The machine holds at most 300 instructions, a stack of 999 cells, 1000
cells of string constants and a runtime string area up to address 4999. The
symbol table holds 99 names. Arithmetic wraps at 32 bits.

## What it does not do

`l25c` has no graphical editor or IDE; it is used through the `l25c` command
or from Python. The language has no comments, and there is no separate
output of compiled code that could be loaded and run later.

## Running the tests

```
pip install ".[test]"
pytest
```