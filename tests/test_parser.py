import math

import numpy as np
import pytest

from qbloch.circuit import CircuitModel
from qbloch.errors import ProgramSyntaxError
from qbloch.parser import parse_angle, parse_program, program_from_circuit
from qbloch.simulator import run_circuit

PROGRAM = """
# bell pair plus a rotation
H 0
CNOT 0 1
RZ 1 pi/2      # quarter turn
Pₓ^1/2 2
"""


def test_parse_program_places_gates_in_order():
    c = parse_program(PROGRAM, 3)
    placed = [(p.symbol, p.qubit, p.step, p.control) for p in c]
    assert placed == [
        ("H", 0, 0, None),
        ("CNOT", 1, 1, 0),
        ("RZ", 1, 2, None),
        ("Pₓ^1/2", 2, 0, None),
    ]
    assert math.isclose(c.at(1, 2).angle, math.pi / 2)


@pytest.mark.parametrize("text,value", [
    ("0.5", 0.5),
    ("pi", math.pi),
    ("-pi/4", -math.pi / 4),
    ("3*pi/4", 3 * math.pi / 4),
    ("2pi", 2 * math.pi),
])
def test_parse_angle(text, value):
    assert math.isclose(parse_angle(text), value)


def test_program_round_trip():
    c = parse_program(PROGRAM, 3)
    c.place(0, "RX")  # no angle: kept, skipped at run time
    again = parse_program(program_from_circuit(c), 3)
    assert set(again.placements()) == set(c.placements())
    assert np.allclose(run_circuit(again, 3).state.vector(), run_circuit(c, 3).state.vector())


def test_parse_into_existing_circuit():
    c = CircuitModel(2)
    c.place(0, "X")
    parse_program("H 0", 2, circuit=c)
    assert c.at(0, 1).symbol == "H"
    with pytest.raises(ValueError):
        parse_program("H 0", 3, circuit=c)


@pytest.mark.parametrize("text,line_no", [
    ("H 0\nCNOT 0", 2),
    ("RX 0 pi/0", 1),
    ("X 0 0.5", 1),
    ("H 0\nFOO 1 2", 2),
    ("H zero", 1),
    ("\n\nX 7", 3),
    ("CNOT 1 1", 1),
    ("H 0 1 2", 1),
])
def test_syntax_errors_carry_line_number(text, line_no):
    with pytest.raises(ProgramSyntaxError) as exc:
        parse_program(text, 2)
    assert exc.value.line_no == line_no


def test_rotation_without_angle_is_placed_and_skipped():
    c = parse_program("RY 0\nX 0", 1)
    assert c.at(0, 0).angle is None
    res = run_circuit(c, 1)
    assert [o.placement.symbol for o in res.skipped] == ["RY"]
    assert np.allclose(res.bloch_vectors[0].as_array(), [0, 0, -1])


def test_angle_on_fixed_gate_is_not_written():
    c = CircuitModel(1)
    c.place(0, "X", 0.5)
    assert program_from_circuit(c).splitlines()[1] == "X 0"
