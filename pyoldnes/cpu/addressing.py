"""Addressing-mode resolution.

``resolve`` reads the operand bytes that follow an opcode, advances the
program counter past them and returns either an immediate value or an
effective address. Zero-page arithmetic wraps inside page 0; 16-bit address
arithmetic never wraps and raises ``AddressOutOfRangeError`` instead.

Operand bytes in the instruction stream are assembled high byte first by
default. Pass ``byte_order="little"`` for the order used by 6502 hardware.
Pointers stored in memory (``INDIRECT``, ``INDIRECT_X``, ``INDIRECT_Y``) are
always little-endian.
"""

from __future__ import annotations

from typing import Callable, Final

from pyoldnes.bus import MemoryBus, check_address

from .opcodes import AddressingMode
from .registers import RegisterFile

BYTE_ORDERS: Final = ("big", "little")


def fetch_byte(registers: RegisterFile, memory: MemoryBus) -> int:
    value = memory.load8(registers.pc)
    registers.pc = (registers.pc + 1) & 0xFFFF
    return value


def fetch_word(registers: RegisterFile, memory: MemoryBus, byte_order: str = "big") -> int:
    first = fetch_byte(registers, memory)
    second = fetch_byte(registers, memory)
    if byte_order == "little":
        return (second << 8) | first
    return (first << 8) | second


def read_zero_page_pointer(memory: MemoryBus, pointer: int) -> int:
    """Read the little-endian word at ``pointer`` without leaving page 0."""

    low = memory.load8(pointer & 0xFF)
    high = memory.load8((pointer + 1) & 0xFF)
    return (high << 8) | low


def _implied(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return 0


def _immediate(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return fetch_byte(registers, memory)


def _zero_page(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return fetch_byte(registers, memory)


def _zero_page_x(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return (fetch_byte(registers, memory) + registers.x) & 0xFF


def _zero_page_y(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return (fetch_byte(registers, memory) + registers.y) & 0xFF


def _absolute(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    return fetch_word(registers, memory, byte_order)


def _absolute_x(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    base = fetch_word(registers, memory, byte_order)
    return check_address(base + registers.x)


def _absolute_y(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    base = fetch_word(registers, memory, byte_order)
    return check_address(base + registers.y)


def _indirect(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    pointer = fetch_word(registers, memory, byte_order)
    return memory.load16(pointer)


def _indirect_x(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    pointer = (fetch_byte(registers, memory) + registers.x) & 0xFF
    return read_zero_page_pointer(memory, pointer)


def _indirect_y(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    base = read_zero_page_pointer(memory, fetch_byte(registers, memory))
    return check_address(base + registers.y)


def _relative(registers: RegisterFile, memory: MemoryBus, byte_order: str) -> int:
    displacement = fetch_byte(registers, memory)
    if displacement & 0x80:
        displacement -= 0x100
    return check_address(registers.pc + displacement)


_RESOLVERS: Final[dict[AddressingMode, Callable[[RegisterFile, MemoryBus, str], int]]] = {
    AddressingMode.IMPLIED: _implied,
    AddressingMode.ACCUMULATOR: _implied,
    AddressingMode.IMMEDIATE: _immediate,
    AddressingMode.ZERO_PAGE: _zero_page,
    AddressingMode.ZERO_PAGE_X: _zero_page_x,
    AddressingMode.ZERO_PAGE_Y: _zero_page_y,
    AddressingMode.ABSOLUTE: _absolute,
    AddressingMode.ABSOLUTE_X: _absolute_x,
    AddressingMode.ABSOLUTE_Y: _absolute_y,
    AddressingMode.INDIRECT: _indirect,
    AddressingMode.INDIRECT_X: _indirect_x,
    AddressingMode.INDIRECT_Y: _indirect_y,
    AddressingMode.RELATIVE: _relative,
}


def resolve(
    mode: AddressingMode,
    registers: RegisterFile,
    memory: MemoryBus,
    *,
    byte_order: str = "big",
) -> int:
    """Return the operand for ``mode`` and advance ``registers.pc`` past it.

    IMMEDIATE yields the operand value itself, IMPLIED and ACCUMULATOR yield
    ``0`` and RELATIVE yields the branch target. Every other mode yields an
    effective address.
    """

    if byte_order not in BYTE_ORDERS:
        raise ValueError(f"unsupported operand byte order: {byte_order!r}")
    return _RESOLVERS[mode](registers, memory, byte_order)
