"""Z80 processor state: registers, memory and I/O port access, stack."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, MutableSequence, Optional, Protocol

from .registers import Reg, Registers

_BYTE_REGISTERS = {
    Reg.A: "A",
    Reg.F: "F",
    Reg.B: "B",
    Reg.C: "C",
    Reg.D: "D",
    Reg.E: "E",
    Reg.H: "H",
    Reg.L: "L",
    Reg.I: "I",
    Reg.R: "R",
    Reg.IXH: "IXH",
    Reg.IXL: "IXL",
    Reg.IYH: "IYH",
    Reg.IYL: "IYL",
}

_WORD_REGISTERS = {
    Reg.AF: "AF",
    Reg.AF_ALT: "AF_ALT",
    Reg.BC: "BC",
    Reg.BC_ALT: "BC_ALT",
    Reg.DE: "DE",
    Reg.DE_ALT: "DE_ALT",
    Reg.HL: "HL",
    Reg.HL_ALT: "HL_ALT",
}


class _Hook(Protocol):
    def on_register_read(self, reg: Reg, value: int) -> int: ...

    def on_register_write(self, reg: Reg, value: int) -> int: ...

    def on_port_in(self, port: int, value: int) -> int: ...

    def on_port_out(self, port: int, value: int) -> int: ...


@dataclass
class IODevice:
    """A device attached to an I/O port.

    ``read_in`` is called with no arguments and returns a byte; ``write_out``
    is called with the byte written. Either may be missing.
    """

    device: Any = None
    read_in: Optional[Callable[[], int]] = None
    write_out: Optional[Callable[[int], None]] = None


@dataclass(eq=False)
class Cpu:
    """State of a Z80 processor connected to memory and 256 I/O ports.

    ``memory`` is any byte sequence indexable by 16-bit addresses; by default
    the processor gets 64 KiB of zeroed RAM. ``hook``, if given, may observe
    and alter register and port traffic.
    """

    memory: MutableSequence[int] = field(default_factory=lambda: bytearray(0x10000))
    hook: Optional[_Hook] = None
    log: logging.Logger = field(default_factory=lambda: logging.getLogger("zeightycore.cpu"))
    registers: Registers = field(default_factory=Registers)
    devices: list = field(default_factory=lambda: [IODevice() for _ in range(0x100)])
    iff1: int = 0
    iff2: int = 0
    int_mode: int = 0
    iff_wait: int = 0
    halted: int = 0
    bus: int = 0
    prefix: int = 0
    interrupt: int = 0

    def read_register_byte(self, reg: Reg) -> int:
        """Read an 8-bit register; an unknown register reads as 0xFF."""
        name = _BYTE_REGISTERS.get(Reg(reg))
        value = getattr(self.registers, name) if name else 0xFF
        if self.hook is not None:
            value = self.hook.on_register_read(Reg(reg), value)
        return value & 0xFF

    def read_register_word(self, reg: Reg) -> int:
        """Read a 16-bit register pair; an unknown register reads as 0xFFFF."""
        name = _WORD_REGISTERS.get(Reg(reg))
        value = getattr(self.registers, name) if name else 0xFFFF
        if self.hook is not None:
            value = self.hook.on_register_read(Reg(reg), value)
        return value & 0xFFFF

    def write_register_byte(self, reg: Reg, value: int) -> int:
        """Write an 8-bit register and return the value actually stored."""
        value &= 0xFF
        if self.hook is not None:
            value = self.hook.on_register_write(Reg(reg), value) & 0xFF
        name = _BYTE_REGISTERS.get(Reg(reg))
        if name:
            setattr(self.registers, name, value)
        return value

    def write_register_word(self, reg: Reg, value: int) -> int:
        """Write a 16-bit register pair and return the value actually stored."""
        value &= 0xFFFF
        if self.hook is not None:
            value = self.hook.on_register_write(Reg(reg), value) & 0xFFFF
        name = _WORD_REGISTERS.get(Reg(reg))
        if name:
            setattr(self.registers, name, value)
        return value

    def read_byte(self, address: int) -> int:
        """Read the byte at ``address``."""
        return self.memory[address & 0xFFFF] & 0xFF

    def write_byte(self, address: int, value: int) -> None:
        """Write ``value`` to ``address``."""
        self.memory[address & 0xFFFF] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a little-endian word at ``address``."""
        return self.read_byte(address) | (self.read_byte(address + 1) << 8)

    def write_word(self, address: int, value: int) -> None:
        """Write ``value`` as a little-endian word at ``address``."""
        self.write_byte(address, value & 0xFF)
        self.write_byte(address + 1, (value >> 8) & 0xFF)

    def port_in(self, port: int) -> int:
        """Read from an I/O port; an unconnected port reads as 0."""
        device = self.devices[port & 0xFF]
        if device.read_in is None:
            return 0
        value = device.read_in() & 0xFF
        if self.hook is not None:
            value = self.hook.on_port_in(port & 0xFF, value) & 0xFF
        return value

    def port_out(self, port: int, value: int) -> None:
        """Write to an I/O port; writes to an unconnected port are dropped."""
        device = self.devices[port & 0xFF]
        if device.write_out is None:
            return
        value &= 0xFF
        if self.hook is not None:
            value = self.hook.on_port_out(port & 0xFF, value) & 0xFF
        device.write_out(value)

    def push(self, value: int) -> None:
        """Push a word onto the stack."""
        sp = (self.registers.SP - 2) & 0xFFFF
        self.write_word(sp, value)
        self.registers.SP = sp

    def pop(self) -> int:
        """Pop a word off the stack."""
        value = self.read_word(self.registers.SP)
        self.registers.SP = self.registers.SP + 2
        return value