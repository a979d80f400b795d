"""Names of calculator keys and their keyboard scan codes."""

from __future__ import annotations

from types import MappingProxyType

KEYS = MappingProxyType({
    "DOWN": 0x00,
    "LEFT": 0x01,
    "RIGHT": 0x02,
    "UP": 0x03,
    "ENTER": 0x10,
    "+": 0x11,
    "-": 0x12,
    "*": 0x13,
    "/": 0x14,
    "^": 0x15,
    "CLEAR": 0x16,
    "(-)": 0x20,
    "3": 0x21,
    "6": 0x22,
    "9": 0x23,
    ")": 0x24,
    "TAN": 0x25,
    "VARS": 0x26,
    ".": 0x30,
    "2": 0x31,
    "5": 0x32,
    "8": 0x33,
    "(": 0x34,
    "COS": 0x35,
    "PRGM": 0x36,
    "STAT": 0x37,
    "0": 0x40,
    "1": 0x41,
    "4": 0x42,
    "7": 0x43,
    ",": 0x44,
    "SIN": 0x45,
    "APPS": 0x46,
    "XTON": 0x47,
    "STO": 0x51,
    "LN": 0x52,
    "LOG": 0x53,
    "X2": 0x54,
    "X-1": 0x55,
    "MATH": 0x56,
    "ALPHA": 0x57,
    "GRAPH": 0x60,
    "TRACE": 0x61,
    "ZOOM": 0x62,
    "WIND": 0x63,
    "Y=": 0x64,
    "2nd": 0x65,
    "MODE": 0x66,
    "DEL": 0x67,
})

_NAMES = MappingProxyType({code: name for name, code in KEYS.items()})


def key_code(name: str) -> int:
    """Return the scan code of the key called ``name``."""
    try:
        return KEYS[name]
    except KeyError:
        raise KeyError(f"unknown key: {name!r}") from None


def key_name(code: int) -> str:
    """Return the name of the key with scan code ``code``."""
    try:
        return _NAMES[code]
    except KeyError:
        raise KeyError(f"unknown key code: 0x{code:02X}") from None