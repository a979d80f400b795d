import pytest

from zeightycore.alu import AluOp, RotOp, alu, daa, rotate
from zeightycore.registers import Flag


def flag(f, bit):
    return 1 if f & bit else 0


def rotate_times(op, value, times):
    f = 0
    for _ in range(times):
        value, f = rotate(op, value, f)
    return value


def test_add():
    a, f = alu(AluOp.ADD, 0x10, 0x20, 0)
    assert a == 0x30
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.C) == 0


def test_add_carry_out():
    a, f = alu(AluOp.ADD, 0xF0, 0x20, 0)
    assert a == 0x10
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.C) == 1


def test_add_to_zero():
    a, f = alu(AluOp.ADD, 0xF0, 0x10, 0)
    assert a == 0
    assert flag(f, Flag.Z) == 1 and flag(f, Flag.C) == 1


def test_adc_without_carry():
    a, f = alu(AluOp.ADC, 0x10, 0x20, 0)
    assert a == 0x30
    assert flag(f, Flag.C) == 0


def test_adc_with_carry():
    a, f = alu(AluOp.ADC, 0x10, 0x20, Flag.C)
    assert a == 0x31
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.C) == 0


def test_sub():
    a, f = alu(AluOp.SUB, 0x20, 0x10, 0)
    assert a == 0x10
    assert flag(f, Flag.C) == 0 and flag(f, Flag.N) == 1


def test_sub_borrow():
    a, f = alu(AluOp.SUB, 0x10, 0x20, 0)
    assert a == 0xF0
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.C) == 1


def test_sbc_without_carry():
    a, f = alu(AluOp.SBC, 0x20, 0x10, 0)
    assert a == 0x10
    assert flag(f, Flag.C) == 0


def test_sbc_with_carry():
    a, f = alu(AluOp.SBC, 0x10, 0x20, Flag.C)
    assert a == 0xEF
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.C) == 1


def test_and():
    a, f = alu(AluOp.AND, 0xFF, 0x0F, 0)
    assert a == 0x0F
    assert flag(f, Flag.Z) == 0 and flag(f, Flag.H) == 1


def test_xor():
    a, f = alu(AluOp.XOR, 0xFF, 0x0F, 0)
    assert a == 0xF0
    assert flag(f, Flag.Z) == 0


def test_or():
    a, f = alu(AluOp.OR, 0x00, 0x0F, 0)
    assert a == 0x0F
    assert flag(f, Flag.Z) == 0


def test_cp():
    a, f = alu(AluOp.CP, 0x00, 0x10, 0)
    assert a == 0
    assert flag(f, Flag.S) == 1
    assert flag(f, Flag.C) == 1
    assert flag(f, Flag.PV) == 0
    assert flag(f, Flag.N) == 1
    assert flag(f, Flag.Z) == 0


@pytest.mark.parametrize("a", [0x00, 0x10, 0x7F, 0x80, 0xFF])
@pytest.mark.parametrize("value", [0x00, 0x01, 0x20, 0xFF])
def test_cp_leaves_accumulator_and_matches_sub_flags(a, value):
    cp_a, cp_f = alu(AluOp.CP, a, value, 0)
    sub_a, sub_f = alu(AluOp.SUB, a, value, 0)
    assert cp_a == a
    mask = Flag.S | Flag.Z | Flag.H | Flag.PV | Flag.N | Flag.C
    assert cp_f & mask == sub_f & mask


@pytest.mark.parametrize("op", [AluOp.ADD, AluOp.SUB, AluOp.AND, AluOp.XOR, AluOp.OR])
@pytest.mark.parametrize("a, value", [(0, 0), (0x10, 0x10), (0xF0, 0x10), (0x55, 0xAA)])
def test_zero_and_sign_follow_result(op, a, value):
    result, f = alu(op, a, value, 0)
    assert 0 <= result <= 0xFF
    assert flag(f, Flag.Z) == (result == 0)
    assert flag(f, Flag.S) == (result >> 7)


def test_add_then_sub_round_trip():
    total, _ = alu(AluOp.ADD, 0x15, 0x27, 0)
    back, _ = alu(AluOp.SUB, total, 0x27, 0)
    assert back == 0x15


def test_daa_after_add():
    a, f = alu(AluOp.ADD, 0x15, 0x27, 0)
    a, f = daa(a, f)
    assert a == 0x42
    assert flag(f, Flag.C) == 0


def test_daa_keeps_valid_bcd_after_add():
    a, f = alu(AluOp.ADD, 0x10, 0x20, 0)
    adjusted, _ = daa(a, f)
    assert adjusted == a


@pytest.mark.parametrize("op, value, carry, expected, carry_out", [
    (RotOp.RLC, 0x80, 0, 0x01, 1),
    (RotOp.RRC, 0x01, 0, 0x80, 1),
    (RotOp.RL, 0x80, 1, 0x01, 1),
    (RotOp.RR, 0x01, 0, 0x00, 1),
    (RotOp.SLA, 0x80, 0, 0x00, 1),
    (RotOp.SRA, 0x01, 0, 0x00, 1),
    (RotOp.SLL, 0x01, 0, 0x03, 0),
    (RotOp.SRL, 0x01, 0, 0x00, 1),
])
def test_rotate_cases(op, value, carry, expected, carry_out):
    result, f = rotate(op, value, Flag.C if carry else 0)
    assert result == expected
    assert flag(f, Flag.C) == carry_out
    assert flag(f, Flag.Z) == (result == 0)


@pytest.mark.parametrize("op", [RotOp.RLC, RotOp.RRC])
@pytest.mark.parametrize("value", [0x00, 0x01, 0x5A, 0x80, 0xFF])
def test_circular_rotate_eight_times_is_identity(op, value):
    assert rotate_times(op, value, 8) == value


def test_circular_rotate_partial_turn():
    assert rotate_times(RotOp.RLC, 0x01, 4) == 0x10
    assert rotate_times(RotOp.RRC, 0x10, 4) == 0x01


@pytest.mark.parametrize("value", [0x00, 0x01, 0x5A, 0x80, 0xFF])
def test_rl_then_rr_round_trip(value):
    left, f = rotate(RotOp.RL, value, 0)
    back, _ = rotate(RotOp.RR, left, f)
    assert back == value


def test_invalid_op_raises():
    with pytest.raises(ValueError):
        alu(8, 0, 0, 0)
    with pytest.raises(ValueError):
        rotate(9, 0, 0)