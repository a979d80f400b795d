"""A cycle-counting Z80 CPU core with its register model, ALU and key codes."""

__version__ = "0.1.0"
__all__ = ["alu", "cpu", "execute", "keys", "registers"]