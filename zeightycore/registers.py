"""Z80 register file, flag bits and register identifiers."""

from __future__ import annotations

from enum import IntFlag


class Flag(IntFlag):
    """Bits of the F register."""

    NONE = 0
    C = 1 << 0
    N = 1 << 1
    PV = 1 << 2
    F3 = 1 << 3
    H = 1 << 4
    F5 = 1 << 5
    Z = 1 << 6
    S = 1 << 7


class Reg(IntFlag):
    """Identifiers for registers, usable as a mask of several registers."""

    A = 1 << 0
    F = 1 << 1
    AF = 1 << 2
    AF_ALT = 1 << 3
    B = 1 << 4
    C = 1 << 5
    BC = 1 << 6
    BC_ALT = 1 << 7
    D = 1 << 8
    E = 1 << 9
    DE = 1 << 10
    DE_ALT = 1 << 11
    H = 1 << 12
    L = 1 << 13
    HL = 1 << 14
    HL_ALT = 1 << 15
    PC = 1 << 16
    SP = 1 << 17
    I = 1 << 18  # noqa: E741
    R = 1 << 19
    IXH = 1 << 20
    IXL = 1 << 21
    IX = 1 << 22
    IYH = 1 << 23
    IYL = 1 << 24
    IY = 1 << 25


def parity(x: int) -> int:
    """Return 1 if ``x`` (taken as a byte) has an odd number of set bits, else 0."""
    return bin(x & 0xFF).count("1") & 1


class _Masked:
    """A register field that wraps its value to a fixed width."""

    def __init__(self, mask: int) -> None:
        self._mask = mask
        self._attr = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self._attr = "_" + name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.__dict__[self._attr]

    def __set__(self, obj, value: int) -> None:
        obj.__dict__[self._attr] = int(value) & self._mask


class _Pair:
    """A 16-bit register made of a high and a low 8-bit register."""

    def __init__(self, high: str, low: str) -> None:
        self._high = high
        self._low = low

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return (getattr(obj, self._high) << 8) | getattr(obj, self._low)

    def __set__(self, obj, value: int) -> None:
        value = int(value)
        setattr(obj, self._high, (value >> 8) & 0xFF)
        setattr(obj, self._low, value & 0xFF)


class _FlagBit:
    """One bit of F, read as 0 or 1."""

    def __init__(self, flag: Flag) -> None:
        self._bit = int(flag)

    def __get__(self, view, owner=None):
        if view is None:
            return self
        return 1 if view._registers.F & self._bit else 0

    def __set__(self, view, value) -> None:
        regs = view._registers
        if value:
            regs.F = regs.F | self._bit
        else:
            regs.F = regs.F & ~self._bit


class _Flags:
    """Attribute view of the flag bits of a register file."""

    __slots__ = ("_registers",)

    S = _FlagBit(Flag.S)
    Z = _FlagBit(Flag.Z)
    F5 = _FlagBit(Flag.F5)
    H = _FlagBit(Flag.H)
    F3 = _FlagBit(Flag.F3)
    PV = _FlagBit(Flag.PV)
    N = _FlagBit(Flag.N)
    C = _FlagBit(Flag.C)

    def __init__(self, registers: "Registers") -> None:
        self._registers = registers

    def __repr__(self) -> str:
        return f"Flags({Flag(self._registers.F)!r})"


_BYTE_FIELDS = ("A", "F", "B", "C", "D", "E", "H", "L", "IXH", "IXL", "IYH", "IYL", "I", "R")
_WORD_FIELDS = ("AF_ALT", "BC_ALT", "DE_ALT", "HL_ALT", "PC", "SP", "WZ")


class Registers:
    """The Z80 register file. 16-bit pairs share storage with their halves."""

    A = _Masked(0xFF)
    F = _Masked(0xFF)
    B = _Masked(0xFF)
    C = _Masked(0xFF)
    D = _Masked(0xFF)
    E = _Masked(0xFF)
    H = _Masked(0xFF)
    L = _Masked(0xFF)
    IXH = _Masked(0xFF)
    IXL = _Masked(0xFF)
    IYH = _Masked(0xFF)
    IYL = _Masked(0xFF)
    I = _Masked(0xFF)  # noqa: E741
    R = _Masked(0xFF)

    AF_ALT = _Masked(0xFFFF)
    BC_ALT = _Masked(0xFFFF)
    DE_ALT = _Masked(0xFFFF)
    HL_ALT = _Masked(0xFFFF)
    PC = _Masked(0xFFFF)
    SP = _Masked(0xFFFF)
    WZ = _Masked(0xFFFF)

    AF = _Pair("A", "F")
    BC = _Pair("B", "C")
    DE = _Pair("D", "E")
    HL = _Pair("H", "L")
    IX = _Pair("IXH", "IXL")
    IY = _Pair("IYH", "IYL")

    def __init__(self) -> None:
        for name in _BYTE_FIELDS + _WORD_FIELDS:
            setattr(self, name, 0)

    @property
    def flags(self) -> _Flags:
        """Read/write access to individual flag bits (``regs.flags.Z = 1``)."""
        return _Flags(self)

    def ex_af(self) -> None:
        """Swap AF with its shadow register."""
        self.AF, self.AF_ALT = self.AF_ALT, self.AF

    def ex_de_hl(self) -> None:
        """Swap DE and HL."""
        self.DE, self.HL = self.HL, self.DE

    def exx(self) -> None:
        """Swap BC, DE and HL with their shadow registers."""
        self.HL, self.HL_ALT = self.HL_ALT, self.HL
        self.DE, self.DE_ALT = self.DE_ALT, self.DE
        self.BC, self.BC_ALT = self.BC_ALT, self.BC

    def format_state(self) -> str:
        """Return a human-readable dump of the registers and flags."""
        lines = [
            f"   AF: 0x{self.AF:04X}   BC: 0x{self.BC:04X}   DE: 0x{self.DE:04X}  HL: 0x{self.HL:04X}",
            f"  'AF: 0x{self.AF_ALT:04X}  'BC: 0x{self.BC_ALT:04X}  'DE: 0x{self.DE_ALT:04X} 'HL: 0x{self.HL_ALT:04X}",
            f"   PC: 0x{self.PC:04X}   SP: 0x{self.SP:04X}   IX: 0x{self.IX:04X}  IY: 0x{self.IY:04X}",
        ]
        flags = self.flags
        labels = (
            (flags.S, "S "),
            (flags.Z, "Z "),
            (flags.H, "H "),
            (flags.F3, "5 "),
            (flags.PV, "P/V "),
            (flags.F5, "3 "),
            (flags.N, "N "),
            (flags.C, "C "),
        )
        text = "".join(label for bit, label in labels if bit)
        if self.F == 0:
            text += "None set"
        lines.append("Flags: " + text)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Registers(AF=0x{self.AF:04X}, BC=0x{self.BC:04X}, DE=0x{self.DE:04X}, "
            f"HL=0x{self.HL:04X}, PC=0x{self.PC:04X}, SP=0x{self.SP:04X}, "
            f"IX=0x{self.IX:04X}, IY=0x{self.IY:04X})"
        )