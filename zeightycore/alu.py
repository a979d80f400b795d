"""Z80 8-bit arithmetic, logic, rotate and decimal-adjust operations."""

from __future__ import annotations

from enum import IntEnum

from .registers import Flag, parity

_S = int(Flag.S)
_Z = int(Flag.Z)
_F5 = int(Flag.F5)
_H = int(Flag.H)
_F3 = int(Flag.F3)
_PV = int(Flag.PV)
_N = int(Flag.N)
_C = int(Flag.C)


class AluOp(IntEnum):
    """Accumulator operations, numbered as in the opcode's y field."""

    ADD = 0
    ADC = 1
    SUB = 2
    SBC = 3
    AND = 4
    XOR = 5
    OR = 6
    CP = 7


class RotOp(IntEnum):
    """Rotate and shift operations of the CB table, numbered as in the y field."""

    RLC = 0
    RRC = 1
    RL = 2
    RR = 3
    SLA = 4
    SRA = 5
    SLL = 6
    SRL = 7


def _sign8(v: int) -> int:
    return _S if v & 0x80 else 0


def _zero(v: int) -> int:
    return 0 if v else _Z


def _undef8(v: int) -> int:
    v &= 0xFF
    return (_F5 if v & 0x20 else 0) | (_F3 if v & 0x08 else 0)


def _parity(v: int) -> int:
    return 0 if parity(v) else _PV


def _carry8(v: int) -> int:
    return _C if v & 0x100 else 0


def _overflow_add(op1: int, op2: int, result: int) -> int:
    same = (op1 & 0x80) == (op2 & 0x80)
    return _PV if same and (op1 & 0x80) != (result & 0x80) else 0


def _overflow_sub(op1: int, op2: int, result: int) -> int:
    differ = (op1 & 0x80) != (op2 & 0x80)
    return _PV if differ and (op1 & 0x80) != (result & 0x80) else 0


def _halfcarry_add(op1: int, op2: int, carry: int) -> int:
    return _H if ((op1 & 0xF) + (op2 & 0xF) + carry) & 0x10 else 0


def _halfcarry_sub(op1: int, op2: int, carry: int) -> int:
    return _H if ((op1 & 0xF) - (op2 & 0xF) - carry) & 0x10 else 0


def alu(op: AluOp | int, a: int, value: int, f: int) -> tuple[int, int]:
    """Apply ``op`` to accumulator ``a`` and ``value``; return the new A and F."""
    op = AluOp(op)
    a &= 0xFF
    value &= 0xFF
    carry = 1 if f & _C else 0

    if op is AluOp.ADD:
        result = (a + value) & 0xFF
        flags = (_sign8(result) | _zero(result) | _undef8(result)
                 | _overflow_add(a, value, result) | _carry8(a + value)
                 | _halfcarry_add(a, value, 0))
    elif op is AluOp.ADC:
        result = (a + value + carry) & 0xFF
        flags = (_sign8(result) | _zero(result) | _undef8(result)
                 | _overflow_add(a, value, result) | _carry8(a + value + carry)
                 | _halfcarry_add(a, value, carry))
    elif op is AluOp.SUB:
        result = (a - value) & 0xFF
        flags = (_sign8(result) | _zero(result) | _undef8(result)
                 | _overflow_sub(a, value, result) | _N | _carry8(a - value)
                 | _halfcarry_sub(a, value, 0))
    elif op is AluOp.SBC:
        result = (a - value - carry) & 0xFF
        flags = (_sign8(result) | _zero(result) | _undef8(result)
                 | _overflow_sub(a, value, result) | _N | _carry8(a - value - carry)
                 | _halfcarry_sub(a, value, carry))
    elif op is AluOp.AND:
        result = a & value
        flags = _sign8(result) | _zero(result) | _undef8(result) | _parity(result) | _H
    elif op is AluOp.XOR:
        result = a ^ value
        flags = _sign8(result) | _zero(result) | _undef8(result) | _parity(result)
    elif op is AluOp.OR:
        result = a | value
        flags = _sign8(result) | _zero(result) | _undef8(result) | _parity(result)
    else:
        diff = (a - value) & 0xFF
        flags = (_sign8(diff) | _zero(diff) | _undef8(value) | _N
                 | _carry8(a - value) | _overflow_sub(a, value, diff)
                 | _halfcarry_sub(a, value, 0))
        result = a
    return result, flags


def daa(a: int, f: int) -> tuple[int, int]:
    """Decimal-adjust the accumulator after a BCD add or subtract."""
    a &= 0xFF
    adjust = 0
    if (a & 0xF) > 9 or f & _H:
        adjust += 0x06
    if ((a + adjust) >> 4) > 9 or _carry8(a + adjust) or f & _C:
        adjust += 0x60
    subtract = bool(f & _N)
    if subtract:
        result = (a - adjust) & 0xFF
        half = _halfcarry_sub(a, adjust, 0)
    else:
        result = (a + adjust) & 0xFF
        half = _halfcarry_add(a, adjust, 0)
    flags = (_sign8(result) | _zero(result) | _undef8(result) | _parity(result)
             | (_N if subtract else 0) | (_C if adjust >= 0x60 else 0) | half)
    return result, flags


def rotate(op: RotOp | int, value: int, f: int) -> tuple[int, int]:
    """Apply a CB-table rotate or shift to ``value``; return the result and new F."""
    op = RotOp(op)
    value &= 0xFF
    bit7 = (value >> 7) & 1
    bit0 = value & 1
    carry_in = 1 if f & _C else 0

    if op is RotOp.RLC:
        result, carry_out = (value << 1) | bit7, bit7
    elif op is RotOp.RRC:
        result, carry_out = (value >> 1) | (bit0 << 7), bit0
    elif op is RotOp.RL:
        result, carry_out = (value << 1) | carry_in, bit7
    elif op is RotOp.RR:
        result, carry_out = (value >> 1) | (carry_in << 7), bit0
    elif op is RotOp.SLA:
        result, carry_out = value << 1, bit7
    elif op is RotOp.SRA:
        result, carry_out = (value >> 1) | (bit7 << 7), bit0
    elif op is RotOp.SLL:
        result, carry_out = (value << 1) | 1, bit7
    else:
        result, carry_out = value >> 1, bit0

    result &= 0xFF
    flags = ((_C if carry_out else 0) | _sign8(result) | _parity(result)
             | _undef8(result) | _zero(result))
    return result, flags