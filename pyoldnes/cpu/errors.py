"""Error types raised by the 6502 engine."""

from __future__ import annotations


class CPUError(Exception):
    """Base error for CPU-related failures."""


class UnknownOpcodeError(CPUError):
    """Raised when a fetched byte has no entry in the instruction table."""

    def __init__(self, opcode: int, address: int | None = None) -> None:
        where = "" if address is None else f" at {address:#06x}"
        super().__init__(f"unknown opcode {opcode:#04x}{where}")
        self.opcode = opcode
        self.address = address
