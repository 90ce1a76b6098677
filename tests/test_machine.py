import pytest

from l25c.machine import (
    CODE_CAPACITY,
    STRING_CONSTANT_BASE,
    STRING_RUNTIME_BASE,
    Fct,
    Instruction,
    Machine,
    MachineError,
)
from l25c.output import Listing

START = "Start L25\n"


def program(*instructions):
    machine = Machine(Listing())
    for f, level, address in instructions:
        machine.gen(f, level, address)
    return machine


def output(machine, input_stream=""):
    machine.run(input_stream)
    text = machine.listing.text("result")
    assert text.startswith(START)
    return text[len(START):]


def test_gen_returns_index_and_grows_code():
    machine = Machine()
    assert machine.gen(Fct.LIT, 0, 5) == 0
    assert machine.gen(Fct.HLT, 0, 0) == 1
    assert machine.cx == 2
    assert machine.code[0] == Instruction(Fct.LIT, 0, 5)


def test_code_overflow():
    machine = Machine()
    for _ in range(CODE_CAPACITY):
        machine.gen(Fct.HLT, 0, 0)
    with pytest.raises(MachineError, match="Code array overflow"):
        machine.gen(Fct.HLT, 0, 0)


def test_set_code_replaces_and_ignores_out_of_range():
    machine = program((Fct.JMP, 0, 0))
    machine.set_code(0, Fct.JMP, 0, 7)
    machine.set_code(5, Fct.LIT, 0, 1)
    assert machine.code == [Instruction(Fct.JMP, 0, 7)]


def test_gen_string_layout():
    machine = Machine()
    first = machine.gen_string("ab")
    second = machine.gen_string("cd")
    assert first == STRING_CONSTANT_BASE
    assert second == STRING_CONSTANT_BASE + 3
    assert machine.memory[first:first + 3] == [ord("a"), ord("b"), 0]
    assert machine.code == [
        Instruction(Fct.LIT, 0, first),
        Instruction(Fct.LIT, 0, second),
    ]


def test_constant_heap_overflow():
    machine = Machine()
    machine.gen_string("a" * 999)
    assert machine.sptr_const == STRING_RUNTIME_BASE
    with pytest.raises(MachineError, match="Constant string heap overflow"):
        Machine().gen_string("a" * 1000)


def test_list_code_format():
    machine = program((Fct.LIT, 0, 5), (Fct.HLT, 0, 0))
    text = machine.list_code(0)
    assert text == "0: LIT 0 5\n1: HLT 0 0\n"
    assert machine.listing.text("code") == text
    assert machine.listing.text("general") == text


def test_list_code_out_of_range_start():
    machine = program((Fct.HLT, 0, 0))
    assert machine.list_code(1) == ""
    assert machine.list_code(-1) == ""
    assert machine.listing.text("code") == ""


def test_write_number():
    machine = program((Fct.LIT, 0, 7), (Fct.WRT, 0, 0), (Fct.HLT, 0, 0))
    assert output(machine) == "7"


def test_write_line_and_newline():
    machine = program(
        (Fct.LIT, 0, 7), (Fct.OPR, 0, 14), (Fct.OPR, 0, 15), (Fct.HLT, 0, 0)
    )
    assert output(machine) == "7\n\n"


def test_string_concatenation():
    machine = Machine()
    machine.gen_string("ab")
    machine.gen_string("cd")
    machine.gen(Fct.OPR, 0, 18)
    machine.gen(Fct.WRT, 0, 0)
    assert output(machine) == "abcd"


def test_string_repeat():
    machine = Machine()
    machine.gen_string("ab")
    machine.gen(Fct.LIT, 0, 3)
    machine.gen(Fct.OPR, 0, 17)
    machine.gen(Fct.WRT, 0, 0)
    assert output(machine) == "ab" * 3


def test_string_plus_number():
    machine = Machine()
    machine.gen_string("x")
    machine.gen(Fct.LIT, 0, 42)
    machine.gen(Fct.OPR, 0, 19)
    machine.gen(Fct.WRT, 0, 0)
    assert output(machine) == "x42"


def test_invalid_string_operation():
    machine = program((Fct.LIT, 0, 5), (Fct.LIT, 0, 2), (Fct.OPR, 0, 17))
    with pytest.raises(MachineError, match="not a string address"):
        machine.run("")


def test_division_by_zero():
    machine = program((Fct.LIT, 0, 1), (Fct.LIT, 0, 0), (Fct.OPR, 0, 5))
    with pytest.raises(MachineError, match="Division by zero"):
        machine.run("")


def test_division_truncates_toward_zero():
    machine = program(
        (Fct.LIT, 0, -7), (Fct.LIT, 0, 2), (Fct.OPR, 0, 5), (Fct.WRT, 0, 0)
    )
    assert output(machine) == "-3"


def test_negation_applies_below_top():
    machine = program(
        (Fct.LIT, 0, 4),
        (Fct.LIT, 0, 6),
        (Fct.OPR, 0, 1),
        (Fct.WRT, 0, 0),
        (Fct.WRT, 0, 0),
    )
    assert output(machine) == "6-4"


@pytest.mark.parametrize(
    "op,left,right,expected",
    [(8, 3, 3, "1"), (9, 3, 3, "0"), (10, 3, 5, "1"), (12, 3, 5, "0")],
)
def test_comparisons(op, left, right, expected):
    machine = program(
        (Fct.LIT, 0, left), (Fct.LIT, 0, right), (Fct.OPR, 0, op), (Fct.WRT, 0, 0)
    )
    assert output(machine) == expected


def test_unknown_operation():
    machine = program((Fct.OPR, 0, 7))
    with pytest.raises(MachineError, match="Unknown operation"):
        machine.run("")


def test_stack_overflow_on_int():
    machine = program((Fct.INT, 0, 997))
    with pytest.raises(MachineError, match="Stack overflow"):
        machine.run("")


def test_stack_overflow_on_lit():
    machine = program((Fct.INT, 0, 996), (Fct.LIT, 0, 1))
    with pytest.raises(MachineError, match="Stack overflow"):
        machine.run("")


def test_conditional_jump_skips_write():
    machine = program(
        (Fct.LIT, 0, 0),
        (Fct.JPC, 0, 4),
        (Fct.LIT, 0, 1),
        (Fct.WRT, 0, 0),
        (Fct.LIT, 0, 2),
        (Fct.WRT, 0, 0),
        (Fct.HLT, 0, 0),
    )
    assert output(machine) == "2"


def test_read_via_opr16_echoes_value():
    machine = program((Fct.OPR, 0, 16), (Fct.WRT, 0, 0))
    assert output(machine, "12") == "12\n12"


def test_red_store_load():
    machine = program(
        (Fct.INT, 0, 1),
        (Fct.RED, 0, 0),
        (Fct.STO, 0, 3),
        (Fct.LOD, 0, 3),
        (Fct.WRT, 0, 0),
    )
    assert output(machine, "  5\n") == "\n5\n5"


def test_missing_input_reads_zero():
    machine = program((Fct.OPR, 0, 16), (Fct.WRT, 0, 0))
    assert output(machine, "abc") == "0\n0"


def test_call_and_return():
    machine = program(
        (Fct.JMP, 0, 4),
        (Fct.INT, 0, 3),
        (Fct.LIT, 0, 9),
        (Fct.OPR, 0, 0),
        (Fct.INT, 0, 3),
        (Fct.LIT, 0, 1),
        (Fct.CAL, 0, 1),
        (Fct.WRT, 0, 0),
        (Fct.HLT, 0, 0),
    )
    assert output(machine) == "9"


def test_address_load_and_indirect_store():
    machine = program(
        (Fct.INT, 0, 2),
        (Fct.LIT, 0, 11),
        (Fct.STO, 0, 3),
        (Fct.LDA, 0, 3),
        (Fct.LDI, 0, 0),
        (Fct.WRT, 0, 0),
        (Fct.LDA, 0, 3),
        (Fct.LIT, 0, 22),
        (Fct.STI, 0, 0),
        (Fct.LOD, 0, 3),
        (Fct.WRT, 0, 0),
    )
    assert output(machine) == "1122"


def test_halt_stops_execution():
    machine = program((Fct.HLT, 0, 0), (Fct.LIT, 0, 3), (Fct.WRT, 0, 0))
    assert output(machine) == ""


def test_general_channel_receives_output():
    machine = program((Fct.LIT, 0, 8), (Fct.WRT, 0, 0))
    machine.run("")
    assert machine.listing.text("general") == START + "8"