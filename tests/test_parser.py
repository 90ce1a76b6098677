import pytest

from l25c.expressions import MAX_ERRORS, TooManyErrors
from l25c.machine import Fct, Machine
from l25c.output import Listing
from l25c.parser import Parser
from l25c.scanner import Scanner
from l25c.table import Kind, SymbolTable


def build(source, echo=False):
    listing = Listing(echo=echo)
    scanner = Scanner(source, listing)
    table = SymbolTable()
    machine = Machine(listing)
    parser = Parser(scanner, table, machine)
    parser.parse()
    return parser, table, machine, listing


def run(body, functions="", input_text=""):
    source = "program demo {\n" + functions + "main {\n" + body + "\n}\n}\n"
    parser, _, machine, listing = build(source)
    assert parser.error_count == 0, listing.text("general")
    machine.run(input_text)
    return listing.text("result")


def test_arithmetic_output():
    assert run("let x = 3;\noutput(x + 4);") == "Start L25\n7"


def test_function_call_returns_value():
    functions = "func add(a, b) {\nlet s = a + b;\nreturn s;\n}\n"
    assert run("let y = add(2, 5);\noutput(y);", functions) == "Start L25\n7"


@pytest.mark.parametrize("value, expected", [("5", "1"), ("2", "0")])
def test_if_else(value, expected):
    body = (
        f"let x = {value};\n"
        "if (x > 3) {\noutput(1);\n} else {\noutput(0);\n};"
    )
    assert run(body) == "Start L25\n" + expected


def test_while_loop():
    body = "let i = 0;\nwhile (i < 3) {\noutput(i);\ni = i + 1;\n};"
    assert run(body) == "Start L25\n012"


def test_input_statement():
    result = run("let x;\ninput(x);\noutput(x * 2);", input_text="21")
    assert result.endswith("21\n42")


def test_string_repetition_and_concatenation():
    assert run('str s = "ab";\noutput(s * 3);') == "Start L25\nababab"
    assert run('output("n=" + 5);') == "Start L25\nn=5"


def test_pointer_store_through_address():
    body = "let x = 1;\nlet @p = &x;\n@p = 9;\noutput(x);"
    assert run(body) == "Start L25\n9"


def test_pointer_dereference_in_expression():
    body = "let x = 6;\nlet @p = &x;\noutput(@p + 1);"
    assert run(body) == "Start L25\n7"


def test_entry_jump_targets_main_allocation():
    parser, _, machine, _ = build(
        "program p {\nmain {\nlet x = 1;\nlet y = 2;\n}\n}\n"
    )
    assert parser.error_count == 0
    main_start = machine.code[0].address
    assert machine.code[0].f is Fct.JMP
    assert machine.code[main_start].f is Fct.INT
    assert machine.code[main_start].address == 3 + 2
    assert machine.code[-1].f is Fct.HLT


def test_parameters_and_function_entry():
    source = (
        "program p {\nfunc f(a, b, c) {\nlet r = a;\nreturn r;\n}\n"
        "main {\nlet z = f(1, 2, 3);\n}\n}\n"
    )
    parser, table, machine, _ = build(source)
    assert parser.error_count == 0
    names = ["a", "b", "c"]
    params = [table.get(table.position(name)) for name in names]
    assert [item.address for item in params] == [-4, -3, -2]
    assert all(item.kind is Kind.VARIABLE and item.level == 1 for item in params)
    func = table.get(table.position("f"))
    assert func.kind is Kind.FUNCTION
    assert machine.code[func.address].f is Fct.INT


def test_success_message_is_echoed(capsys):
    build("program p {\nmain {\nlet x = 1;\n}\n}\n", echo=True)
    assert "Program parsed successfully!" in capsys.readouterr().out


def test_missing_program_keyword():
    parser, _, _, listing = build("main {\nlet x = 1;\n}\n")
    assert parser.error_count >= 1
    assert "^18" in listing.text("general")


def test_missing_main():
    parser, _, _, listing = build("program p {\n}\n")
    assert parser.error_count >= 1
    assert "^19" in listing.text("general")


def test_missing_semicolon_recovers():
    parser, _, _, listing = build(
        "program p {\nmain {\nlet x = 1 output(x);\n}\n}\n"
    )
    assert parser.error_count == 1
    assert "^5" in listing.text("general")


def test_missing_return():
    source = (
        "program p {\nfunc f() {\nlet a = 1;\n}\n"
        "main {\nlet b = 2;\n}\n}\n"
    )
    parser, _, _, listing = build(source)
    assert "^20" in listing.text("general")


def test_empty_statement_list():
    parser, _, _, listing = build("program p {\nmain {\n}\n}\n")
    assert "^23" in listing.text("general")


def test_address_into_plain_variable():
    parser, _, _, listing = build(
        "program p {\nmain {\nlet x = 1;\nlet y = &x;\n}\n}\n"
    )
    assert "^28" in listing.text("general")


def test_dereferencing_non_pointer():
    parser, _, _, listing = build(
        "program p {\nmain {\nlet x = 1;\n@x = 2;\n}\n}\n"
    )
    assert "^29" in listing.text("general")


def test_input_into_string_variable():
    parser, _, _, listing = build(
        'program p {\nmain {\nstr s = "a";\ninput(s);\n}\n}\n'
    )
    assert "^12" in listing.text("general")


def test_undeclared_assignment_aborts():
    listing = Listing()
    scanner = Scanner("program p {\nmain {\nx = 1;\n}\n}\n", listing)
    parser = Parser(scanner, SymbolTable(), Machine(listing))
    with pytest.raises(TooManyErrors):
        parser.parse()
    assert parser.error_count == MAX_ERRORS + 1
    assert "^11" in listing.text("general")