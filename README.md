# zeightycore

A Z80 processor core written in plain Python. It models the register file
(including the shadow registers, the index registers and the hidden `WZ`
register), decodes and runs the instruction set with the `CB`, `DD`, `ED`
and `FD` prefixes, counts T-states, and takes maskable interrupts in modes
1 and 2.

It has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `zeightycore.registers` — the `Registers` file, the `Flag` bits of the F
  register, the `Reg` selectors and `parity()`. Byte registers (`A`, `F`,
  `B` … `IXH`, `IYL`, `I`, `R`) and word registers (`PC`, `SP`, `WZ`, the
  shadow pairs `AF_ALT` … `HL_ALT`) wrap to their width; the pairs `AF`,
  `BC`, `DE`, `HL`, `IX`, `IY` share storage with their halves. Single flag
  bits can be read and set through `registers.flags` (for example
  `registers.flags.Z = 1`). `Registers` also offers `ex_af()`, `ex_de_hl()`,
  `exx()` and `format_state()`, which returns a readable dump as a string.
- `zeightycore.alu` — the 8-bit arithmetic used by the core, usable on its
  own: `alu(op, a, value, f)` with an `AluOp`, `rotate(op, value, f)` with a
  `RotOp`, and `daa(a, f)`. Each returns a tuple of the new value and the new
  flags.
- `zeightycore.cpu` — the `Cpu` dataclass: memory access through
  `read_byte`/`write_byte`/`read_word`/`write_word`, the 256 I/O ports
  (each an `IODevice`) through `port_in`/`port_out`, the stack through
  `push`/`pop`, and register access by `Reg` selector with
  `read_register_byte`/`write_register_byte` and their word variants.
  By default a `Cpu` gets 64 KiB of zeroed RAM; any mutable byte sequence
  can be passed as `memory`. An optional `hook` object may observe and
  alter register reads and writes and port traffic through its
  `on_register_read`, `on_register_write`, `on_port_in` and `on_port_out`
  methods.
- `zeightycore.execute` — `execute(cpu, cycles)` runs instructions until the
  cycle budget is spent (always finishing a prefixed instruction) and
  returns what is left of it: zero, or negative if the last instruction
  overran. Unrecognised opcodes are reported through the cpu's logger.
- `zeightycore.keys` — the calculator keypad scan codes in the `KEYS`
  mapping, with `key_code(name)` and `key_name(code)`; both raise `KeyError`
  for an unknown key.

## Example

```python
from zeightycore.cpu import Cpu
from zeightycore.execute import execute

cpu = Cpu()
cpu.write_byte(0x0000, 0x80)   # ADD A, B
cpu.registers.A = 0x10
cpu.registers.B = 0x20

left = execute(cpu, 4)
assert cpu.registers.A == 0x30
assert left == 0
```

Peripherals are attached to ports as `IODevice` objects holding a read and a
write callable (`read_in()` returning a byte, `write_out(value)`); a port
without a reader reads as zero and writes to a port without a writer are
ignored.

## What it does not do

The package is a processor core only. It has no calculator hardware around
it: no memory banking or flash, no display controller, no keyboard or link
port devices, no timers, no ROM loading, no debugger or disassembler, and
no command or window to run a program in. Interrupt mode 0 is not
supported (a warning is logged), and non-maskable interrupts are not
modelled.