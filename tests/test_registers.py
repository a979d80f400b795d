import pytest

from zeightycore.registers import Flag, Registers, parity


def test_new_registers_are_zero():
    regs = Registers()
    assert (regs.AF, regs.BC, regs.DE, regs.HL, regs.PC, regs.SP, regs.IX, regs.IY) == (0,) * 8


def test_pair_splits_into_halves():
    regs = Registers()
    regs.BC = 0x1234
    assert regs.B == 0x12
    assert regs.C == 0x34


def test_halves_compose_pair():
    regs = Registers()
    regs.IXH = 0x12
    regs.IXL = 0x34
    assert regs.IX == 0x1234


@pytest.mark.parametrize("pair, high, low", [
    ("AF", "A", "F"), ("BC", "B", "C"), ("DE", "D", "E"),
    ("HL", "H", "L"), ("IX", "IXH", "IXL"), ("IY", "IYH", "IYL"),
])
def test_pair_round_trip(pair, high, low):
    regs = Registers()
    setattr(regs, pair, 0xBEEF)
    assert getattr(regs, pair) == 0xBEEF
    assert (getattr(regs, high) << 8) | getattr(regs, low) == 0xBEEF


def test_byte_register_wraps():
    regs = Registers()
    regs.A = 0xFF
    regs.A = regs.A + 1
    assert regs.A == 0


def test_word_register_wraps():
    regs = Registers()
    regs.SP = 0
    regs.SP = regs.SP - 2
    assert regs.SP == 0xFFFE


def test_flag_view_reads_f():
    regs = Registers()
    regs.F = Flag.Z | Flag.C
    assert regs.flags.Z == 1
    assert regs.flags.C == 1
    assert regs.flags.S == 0


def test_flag_view_writes_f():
    regs = Registers()
    regs.flags.C = 1
    regs.flags.Z = 1
    assert regs.F == Flag.C | Flag.Z
    regs.flags.C = 0
    assert regs.F == Flag.Z


def test_ex_af():
    regs = Registers()
    regs.AF = 0xDEAD
    regs.AF_ALT = 0xBEEF
    regs.ex_af()
    assert regs.AF == 0xBEEF
    assert regs.AF_ALT == 0xDEAD


def test_ex_de_hl():
    regs = Registers()
    regs.HL = 0xDEAD
    regs.DE = 0xBEEF
    regs.ex_de_hl()
    assert regs.HL == 0xBEEF
    assert regs.DE == 0xDEAD


def test_exx():
    regs = Registers()
    regs.BC = 0x1111
    regs.BC_ALT = 0x2222
    regs.DE = 0x3333
    regs.DE_ALT = 0x4444
    regs.HL = 0x5555
    regs.HL_ALT = 0x6666
    regs.exx()
    assert (regs.BC, regs.BC_ALT) == (0x2222, 0x1111)
    assert (regs.DE, regs.DE_ALT) == (0x4444, 0x3333)
    assert (regs.HL, regs.HL_ALT) == (0x6666, 0x5555)


def test_exx_twice_is_identity():
    regs = Registers()
    regs.BC, regs.DE, regs.HL = 0x1111, 0x3333, 0x5555
    regs.exx()
    regs.exx()
    assert (regs.BC, regs.DE, regs.HL) == (0x1111, 0x3333, 0x5555)


def test_parity_values():
    assert parity(0) == 0
    assert parity(1) == 1
    assert parity(0xFF) == 0


@pytest.mark.parametrize("x", range(0, 256, 7))
def test_parity_flips_with_one_bit(x):
    assert parity(x ^ 1) == 1 - parity(x)


def test_format_state_no_flags():
    regs = Registers()
    lines = regs.format_state().splitlines()
    assert lines[-1] == "Flags: None set"
    assert "AF: 0x0000" in lines[0]


def test_format_state_shows_registers_and_flags():
    regs = Registers()
    regs.HL = 0xDEAD
    regs.PC = 0x1234
    regs.F = Flag.S | Flag.C
    text = regs.format_state()
    assert "HL: 0xDEAD" in text
    assert "PC: 0x1234" in text
    assert text.splitlines()[-1] == "Flags: S C "


def test_format_state_shows_alternate_registers():
    regs = Registers()
    regs.BC_ALT = 0x2222
    regs.HL_ALT = 0x6666
    text = regs.format_state()
    assert "'BC: 0x2222" in text
    assert "'HL: 0x6666" in text