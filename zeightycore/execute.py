"""Instruction decoding and execution for the Z80 processor."""

from __future__ import annotations

from .alu import alu, daa, rotate
from .cpu import Cpu
from .registers import Flag, parity

_S = int(Flag.S)
_Z = int(Flag.Z)
_F5 = int(Flag.F5)
_H = int(Flag.H)
_F3 = int(Flag.F3)
_PV = int(Flag.PV)
_N = int(Flag.N)
_C = int(Flag.C)

_PLAIN = ("H", "L", "HL")
_INDEX_NAMES = {0xDD: ("IXH", "IXL", "IX"), 0xFD: ("IYH", "IYL", "IY")}
_CONDITION_FLAGS = (_Z, _C, _PV, _S)


def _bit(condition, flag: int) -> int:
    return flag if condition else 0


def _sign8(v: int) -> int:
    return _S if v & 0x80 else 0


def _sign16(v: int) -> int:
    return _S if v & 0x8000 else 0


def _zero(v: int) -> int:
    return 0 if v else _Z


def _undef8(v: int) -> int:
    v &= 0xFF
    return _bit(v & 0x20, _F5) | _bit(v & 0x08, _F3)


def _undef8_block(v: int) -> int:
    v &= 0xFF
    return _bit(v & 0x02, _F5) | _bit(v & 0x08, _F3)


def _undef16(v: int) -> int:
    v &= 0xFFFF
    return _bit(v & 0x2000, _F5) | _bit(v & 0x0800, _F3)


def _parity(v: int) -> int:
    return 0 if parity(v) else _PV


def _carry16(v: int) -> int:
    return _bit(v & 0x10000, _C)


def _overflow16_add(op1: int, op2: int, result: int) -> int:
    return _bit((op1 & 0x8000) == (op2 & 0x8000) and (op1 & 0x8000) != (result & 0x8000), _PV)


def _overflow16_sub(op1: int, op2: int, result: int) -> int:
    return _bit((op1 & 0x8000) != (op2 & 0x8000) and (op1 & 0x8000) != (result & 0x8000), _PV)


def _halfcarry8_add(op1: int, op2: int, carry: int) -> int:
    return _bit(((op1 & 0xF) + (op2 & 0xF) + carry) & 0x10, _H)


def _halfcarry8_sub(op1: int, op2: int, carry: int) -> int:
    return _bit(((op1 & 0xF) - (op2 & 0xF) - carry) & 0x10, _H)


def _halfcarry16_add(op1: int, op2: int, carry: int) -> int:
    return _bit(((op1 & 0xFFF) + (op2 & 0xFFF) + carry) & 0x1000, _H)


def _halfcarry16_sub(op1: int, op2: int, carry: int) -> int:
    return _bit(((op1 & 0xFFF) - (op2 & 0xFFF) - carry) & 0x1000, _H)


def execute(cpu: Cpu, cycles: int) -> int:
    """Run ``cpu`` for at least ``cycles`` clock cycles.

    Execution always finishes the current instruction, prefixes included.
    Returns the cycles left over, which is zero or negative when the last
    instruction ran past the budget.
    """
    return _Executor(cpu).run(cycles)


class _Executor:
    def __init__(self, cpu: Cpu) -> None:
        self.cpu = cpu
        self.r = cpu.registers
        self.cycles = 0
        self.opcode = 0

    # -- opcode fields -------------------------------------------------

    @property
    def x(self) -> int:
        return self.opcode >> 6

    @property
    def y(self) -> int:
        return (self.opcode >> 3) & 7

    @property
    def z(self) -> int:
        return self.opcode & 7

    @property
    def p(self) -> int:
        return (self.opcode >> 4) & 3

    @property
    def q(self) -> int:
        return (self.opcode >> 3) & 1

    # -- operand fetches -----------------------------------------------

    def read_n(self) -> int:
        value = self.cpu.read_byte(self.r.PC)
        self.r.PC = self.r.PC + 1
        return value

    def read_nn(self) -> int:
        value = self.cpu.read_word(self.r.PC)
        self.r.PC = self.r.PC + 2
        return value

    def read_d(self) -> int:
        value = self.read_n()
        return value - 0x100 if value & 0x80 else value

    # -- register access -----------------------------------------------

    def _names(self) -> tuple:
        return _INDEX_NAMES.get(self.cpu.prefix >> 8, _PLAIN)

    def _index_base(self):
        names = _INDEX_NAMES.get(self.cpu.prefix >> 8)
        return None if names is None else getattr(self.r, names[2])

    def _r_name(self, i: int) -> str:
        if i == 4:
            return self._names()[0]
        if i == 5:
            return self._names()[1]
        return ("B", "C", "D", "E", "", "", "", "A")[i]

    def read_r(self, i: int) -> int:
        if i != 6:
            return getattr(self.r, self._r_name(i))
        self.cycles += 3
        base = self._index_base()
        if base is None:
            return self.cpu.read_byte(self.r.HL)
        self.cycles += 8
        self.r.WZ = base + self.read_d()
        return self.cpu.read_byte(self.r.WZ)

    def write_r(self, i: int, value: int) -> int:
        value &= 0xFF
        if i != 6:
            setattr(self.r, self._r_name(i), value)
            return value
        self.cycles += 3
        base = self._index_base()
        if base is None:
            self.cpu.write_byte(self.r.HL, value)
        else:
            self.cycles += 4
            self.r.WZ = base + self.read_d()
            self.cpu.write_byte(self.r.WZ, value)
        return value

    def load_r(self, src: int, dst: int) -> int:
        cpu = self.cpu
        if dst == 6 or src == 6:
            saved = cpu.prefix
            if dst == 6:
                cpu.prefix &= 0xFF
            value = self.read_r(src)
            cpu.prefix = saved
            if src == 6:
                cpu.prefix &= 0xFF
            return self.write_r(dst, value)
        return self.write_r(dst, self.read_r(src))

    def hl(self) -> int:
        return getattr(self.r, self._names()[2])

    def set_hl(self, value: int) -> int:
        value &= 0xFFFF
        setattr(self.r, self._names()[2], value)
        return value

    def _rp_name(self, i: int, last: str) -> str:
        return ("BC", "DE", self._names()[2], last)[i]

    def read_rp(self, i: int) -> int:
        return getattr(self.r, self._rp_name(i, "SP"))

    def write_rp(self, i: int, value: int) -> None:
        setattr(self.r, self._rp_name(i, "SP"), value & 0xFFFF)

    def read_rp2(self, i: int) -> int:
        return getattr(self.r, self._rp_name(i, "AF"))

    def write_rp2(self, i: int, value: int) -> None:
        setattr(self.r, self._rp_name(i, "AF"), value & 0xFFFF)

    def condition(self, i: int) -> bool:
        is_set = bool(self.r.F & _CONDITION_FLAGS[i >> 1])
        return is_set if i & 1 else not is_set

    def _copy_undoc_from_a(self) -> None:
        self.r.F = (self.r.F & ~(_F3 | _F5)) | (self.r.A & (_F3 | _F5))

    # -- main loop -----------------------------------------------------

    def run(self, cycles: int) -> int:
        cpu = self.cpu
        while cycles > 0 or cpu.prefix != 0:
            self.cycles = 0
            self._step()
            spent = self.cycles & 0xFF
            cycles -= spent
            if spent == 0:
                cpu.log.error("unrecognized instruction 0x%02X", self.opcode)
                cycles -= 1
        return cycles

    def _step(self) -> None:
        cpu, r = self.cpu, self.r
        if cpu.iff2 and not cpu.prefix:
            if cpu.iff_wait:
                cpu.iff_wait = 0
            elif cpu.interrupt:
                cpu.halted = 0
                self._interrupt()
                return
        if cpu.halted:
            self.cycles += 4
            return

        self.opcode = self.read_n()
        old_r = r.R
        r.R = ((old_r + 1) & 0x7F) | (old_r & 0x80)

        if (cpu.prefix & 0xFF) == 0xCB:
            self._cb()
            reset = True
        elif cpu.prefix >> 8 == 0xED:
            self._ed()
            reset = True
        else:
            reset = self._unprefixed()
        if reset:
            cpu.prefix = 0

    def _interrupt(self) -> None:
        cpu, r = self.cpu, self.r
        if cpu.int_mode == 0:
            cpu.log.warning("interrupt mode 0 is not supported")
        elif cpu.int_mode == 1:
            self.cycles += 13
            cpu.push(r.PC)
            r.PC = 0x38
            cpu.iff1 = cpu.iff2 = 0
        elif cpu.int_mode == 2:
            self.cycles += 19
            cpu.push(r.PC)
            r.PC = r.I * 256 + cpu.bus
            cpu.iff1 = cpu.iff2 = 0

    # -- CB table ------------------------------------------------------

    def _cb(self) -> None:
        cpu, r = self.cpu, self.r
        indexed = cpu.prefix >> 8
        if indexed:
            self.opcode = cpu.read_byte(r.PC)
            r.PC = r.PC - 1
        x, y, z = self.x, self.y, self.z
        self.cycles += 4
        if x == 0:
            value = self.read_r(z)
            if z == 6 and indexed:
                r.PC = r.PC - 1
            result, flags = rotate(y, value, r.F)
            self.write_r(z, result)
            r.F = flags
        elif x == 1:
            old = self.read_r(z)
            new = old & (1 << y)
            r.F = (_sign8(new) | _zero(new)
                   | (_undef16(r.WZ) if z == 6 else _undef8(old))
                   | _parity(new) | (r.F & _C) | _H)
        else:
            old = self.read_r(z)
            old = old & ~(1 << y) if x == 2 else old | (1 << y)
            if z == 6 and indexed:
                r.PC = r.PC - 1
            self.write_r(z, old)
        if indexed:
            r.PC = r.PC + 1

    # -- ED table ------------------------------------------------------

    def _ed(self) -> None:
        cpu, r = self.cpu, self.r
        x, y, z = self.x, self.y, self.z
        if x == 1:
            self._ed_x1(y, z)
        elif x == 2 and y >= 4 and z < 4:
            self._block(y, z)
        else:
            self.cycles += 4
            cpu.iff_wait = 1

    def _ed_x1(self, y: int, z: int) -> None:
        cpu, r = self.cpu, self.r
        if z == 0:
            self.cycles += 8
            new = cpu.port_in(r.C)
            if y != 6:
                self.read_r(y)
                self.write_r(y, new)
            r.F = (_sign8(new) | _undef8(new) | (r.F & _C)
                   | _zero(new) | _parity(new))
        elif z == 1:
            self.cycles += 8
            # CMOS parts output 0xFF for OUT (C), 0.
            cpu.port_out(r.C, 0xFF if y == 6 else self.read_r(y))
        elif z == 2:
            self.cycles += 11
            carry = r.F & _C
            old16 = r.HL
            op16 = self.read_rp(self.p)
            if self.q == 0:
                r.HL = old16 - (op16 + carry)
                r.WZ = r.HL
                r.F = (_sign16(r.HL) | _zero(r.HL) | _undef16(r.HL)
                       | _overflow16_sub(old16, op16, r.HL) | _N
                       | _carry16(old16 - op16 - carry)
                       | _halfcarry16_sub(old16, op16, carry))
            else:
                r.HL = old16 + op16 + carry
                r.WZ = r.HL
                r.F = (_sign16(r.HL) | _zero(r.HL) | _undef16(r.HL)
                       | _overflow16_add(old16, op16, r.HL)
                       | _carry16(old16 + op16 + carry)
                       | _halfcarry16_add(old16, op16, carry))
        elif z == 3:
            self.cycles += 16
            r.WZ = self.read_nn()
            if self.q == 0:
                cpu.write_word(r.WZ, self.read_rp(self.p))
            else:
                self.write_rp(self.p, cpu.read_word(r.WZ))
        elif z == 4:
            self.cycles += 4
            old = r.A
            r.A = -old
            r.F = (_sign8(r.A) | _zero(r.A) | _undef8(r.A) | _bit(old == 0x80, _PV)
                   | _N | _bit(old != 0, _C) | _halfcarry8_sub(0, old, 0))
        elif z == 5:
            self.cycles += 14
            r.PC = cpu.pop()
        elif z == 6:
            self.cycles += 4
            cpu.int_mode = (0, 0, 1, 2)[y & 3]
        else:
            self._ed_z7(y)

    def _ed_z7(self, y: int) -> None:
        cpu, r = self.cpu, self.r
        if y == 0:
            self.cycles += 5
            r.I = r.A
        elif y == 1:
            self.cycles += 5
            r.R = r.A
        elif y in (2, 3):
            self.cycles += 5
            r.A = r.I if y == 2 else r.R
            r.F = (_sign8(r.A) | _zero(r.A) | _undef8(r.A)
                   | _bit(cpu.iff2, _PV) | (r.F & _C))
        elif y in (4, 5):
            self.cycles += 14
            old = r.A
            new = cpu.read_byte(r.HL)
            if y == 4:
                r.A = (old & 0xF0) | (new & 0x0F)
                new = (new >> 4) | ((old << 4) & 0xFF)
            else:
                r.A = (old & 0xF0) | (new >> 4)
                new = ((new << 4) & 0xFF) | (old & 0x0F)
            cpu.write_byte(r.HL, new)
            r.F = ((r.F & _C) | _sign8(r.A) | _zero(r.A)
                   | _parity(r.A) | _undef8(r.A))
        else:
            self.cycles += 4

    def _block(self, y: int, z: int) -> None:
        cpu, r = self.cpu, self.r
        step = 1 if y in (4, 6) else -1
        repeat = y >= 6
        self.cycles += 12
        if z == 0:
            old = cpu.read_byte(r.HL)
            r.HL = r.HL + step
            cpu.write_byte(r.DE, old)
            r.DE = r.DE + step
            r.BC = r.BC - 1
            r.F = ((r.F & (_S | _Z | _C)) | _bit(r.BC, _PV)
                   | _undef8_block(r.A + old))
            again = repeat and r.BC != 0
        elif z == 1:
            old = cpu.read_byte(r.HL)
            r.HL = r.HL + step
            new = (r.A - old) & 0xFF
            hc = 1 if _halfcarry8_sub(r.A, old, 0) else 0
            r.BC = r.BC - 1
            r.F = (_sign8(new) | _zero(new) | _bit(hc, _H) | _bit(r.BC, _PV)
                   | _N | (r.F & _C) | _undef8_block(new - hc))
            again = repeat and r.BC != 0 and not (r.F & _Z)
        else:
            if z == 2:
                cpu.write_byte(r.HL, cpu.port_in(r.C))
            else:
                cpu.port_out(r.C, cpu.read_byte(r.HL))
            r.HL = r.HL + step
            r.B = r.B - 1
            r.F = (r.F & ~_Z) | _bit(r.B == 0, _Z) | _N
            again = repeat and r.B != 0
        if again:
            self.cycles += 5
            r.PC = r.PC - 2

    # -- unprefixed table ----------------------------------------------

    def _unprefixed(self) -> bool:
        x = self.x
        if x == 0:
            self._x0()
        elif x == 1:
            self.cycles += 4
            if self.z == 6 and self.y == 6:
                self.cpu.halted = 1
            else:
                self.load_r(self.z, self.y)
        elif x == 2:
            self._alu(self.y, self.read_r(self.z))
        else:
            return self._x3()
        return True

    def _alu(self, op: int, value: int) -> None:
        self.cycles += 4
        self.r.A, self.r.F = alu(op, self.r.A, value, self.r.F)

    def _relative_jump(self, d: int) -> None:
        self.r.PC = self.r.PC + d
        self.r.WZ = self.r.PC

    def _x0(self) -> None:
        cpu, r = self.cpu, self.r
        y, z, p, q = self.y, self.z, self.p, self.q
        if z == 0:
            if y == 0:
                self.cycles += 4
            elif y == 1:
                self.cycles += 4
                r.ex_af()
            elif y == 2:
                self.cycles += 8
                d = self.read_d()
                r.B = r.B - 1
                if r.B != 0:
                    self.cycles += 5
                    self._relative_jump(d)
            elif y == 3:
                self.cycles += 12
                self._relative_jump(self.read_d())
            else:
                self.cycles += 7
                d = self.read_d()
                if self.condition(y - 4):
                    self.cycles += 5
                    self._relative_jump(d)
        elif z == 1:
            if q == 0:
                self.cycles += 10
                self.write_rp(p, self.read_nn())
            else:
                self.cycles += 11
                old16 = self.hl()
                op16 = self.read_rp(p)
                new16 = self.set_hl(old16 + op16)
                r.WZ = new16
                r.F = ((r.F & (_S | _Z | _PV)) | _undef16(new16)
                       | _carry16(old16 + op16) | _halfcarry16_add(old16, op16, 0))
        elif z == 2:
            self._x0_z2(p, q)
        elif z == 3:
            self.cycles += 6
            self.write_rp(p, self.read_rp(p) + (1 if q == 0 else -1))
        elif z in (4, 5):
            self.cycles += 4
            old = self.read_r(y)
            if y == 6 and cpu.prefix >> 8:
                r.PC = r.PC - 1
            if z == 4:
                new = self.write_r(y, old + 1)
                r.F = ((r.F & _C) | _sign8(new) | _zero(new)
                       | _halfcarry8_add(old, 0, 1) | _bit(old == 0x7F, _PV)
                       | _undef8(new))
            else:
                new = self.write_r(y, old - 1)
                r.F = ((r.F & _C) | _sign8(new) | _zero(new)
                       | _halfcarry8_sub(old, 0, 1) | _bit(old == 0x80, _PV)
                       | _N | _undef8(new))
        elif z == 6:
            self.cycles += 7
            indexed = y == 6 and cpu.prefix >> 8
            if indexed:
                r.PC = r.PC + 1
            value = self.read_n()
            if indexed:
                r.PC = r.PC - 2
            self.write_r(y, value)
            if indexed:
                r.PC = r.PC + 1
        else:
            self._x0_z7(y)

    def _x0_z2(self, p: int, q: int) -> None:
        cpu, r = self.cpu, self.r
        if q == 0:
            if p == 0:
                self.cycles += 7
                cpu.write_byte(r.BC, r.A)
            elif p == 1:
                self.cycles += 7
                cpu.write_byte(r.DE, r.A)
            elif p == 2:
                self.cycles += 16
                r.WZ = self.read_nn()
                cpu.write_word(r.WZ, self.hl())
            else:
                self.cycles += 13
                r.WZ = self.read_nn()
                cpu.write_byte(r.WZ, r.A)
        else:
            if p == 0:
                self.cycles += 7
                r.A = cpu.read_byte(r.BC)
            elif p == 1:
                self.cycles += 7
                r.A = cpu.read_byte(r.DE)
            elif p == 2:
                self.cycles += 16
                r.WZ = self.read_nn()
                self.set_hl(cpu.read_word(r.WZ))
            else:
                self.cycles += 13
                r.WZ = self.read_nn()
                r.A = cpu.read_byte(r.WZ)

    def _x0_z7(self, y: int) -> None:
        r = self.r
        self.cycles += 4
        if y == 4:
            r.A, r.F = daa(r.A, r.F)
            return
        if y < 4:
            a = r.A
            carry_in = r.F & _C
            if y == 0:
                carry_out = a >> 7
                r.A = (a << 1) | carry_out
            elif y == 1:
                carry_out = a & 1
                r.A = (a >> 1) | (carry_out << 7)
            elif y == 2:
                carry_out = a >> 7
                r.A = (a << 1) | carry_in
            else:
                carry_out = a & 1
                r.A = (a >> 1) | (carry_in << 7)
            r.F = (r.F & ~(_C | _N | _H)) | _bit(carry_out, _C)
        elif y == 5:
            r.A = ~r.A
            r.F = r.F | _N | _H
        elif y == 6:
            r.F = (r.F & ~(_N | _H)) | _C
        else:
            carry = r.F & _C
            r.F = (r.F & ~(_H | _C | _N)) | _bit(carry, _H) | _bit(not carry, _C)
        self._copy_undoc_from_a()

    def _x3(self) -> bool:
        cpu, r = self.cpu, self.r
        y, z, p, q = self.y, self.z, self.p, self.q
        if z == 0:
            self.cycles += 5
            if self.condition(y):
                r.PC = cpu.pop()
                self.cycles += 6
        elif z == 1:
            if q == 0:
                self.cycles += 10
                self.write_rp2(p, cpu.pop())
            elif p == 0:
                self.cycles += 10
                r.PC = cpu.pop()
            elif p == 1:
                self.cycles += 4
                r.exx()
            elif p == 2:
                self.cycles += 4
                r.PC = self.hl()
            else:
                self.cycles += 6
                r.SP = self.hl()
        elif z == 2:
            self.cycles += 10
            target = self.read_nn()
            if self.condition(y):
                r.PC = target
        elif z == 3:
            return self._x3_z3(y)
        elif z == 4:
            self.cycles += 10
            target = self.read_nn()
            if self.condition(y):
                self.cycles += 7
                cpu.push(r.PC)
                r.PC = target
        elif z == 5:
            if q == 0:
                self.cycles += 11
                cpu.push(self.read_rp2(p))
            elif p == 0:
                self.cycles += 17
                target = self.read_nn()
                cpu.push(r.PC)
                r.PC = target
            else:
                self.cycles += 4
                cpu.prefix = (cpu.prefix & 0xFF) | ((0xDD, 0xED, 0xFD)[p - 1] << 8)
                return False
        elif z == 6:
            self._alu(y, self.read_n())
        else:
            self.cycles += 11
            cpu.push(r.PC)
            r.PC = y * 8
        return True

    def _x3_z3(self, y: int) -> bool:
        cpu, r = self.cpu, self.r
        if y == 0:
            self.cycles += 10
            r.PC = self.read_nn()
        elif y == 1:
            self.cycles += 4
            cpu.prefix = (cpu.prefix & 0xFF00) | 0xCB
            return False
        elif y == 2:
            self.cycles += 11
            cpu.port_out(self.read_n(), r.A)
        elif y == 3:
            self.cycles += 11
            r.A = cpu.port_in(self.read_n())
        elif y == 4:
            self.cycles += 19
            r.WZ = cpu.read_word(r.SP)
            cpu.write_word(r.SP, self.hl())
            self.set_hl(r.WZ)
        elif y == 5:
            self.cycles += 4
            r.ex_de_hl()
        elif y == 6:
            self.cycles += 4
            cpu.iff1 = cpu.iff2 = 0
        else:
            self.cycles += 4
            cpu.iff1 = cpu.iff2 = 1
            cpu.iff_wait = 1
        return True