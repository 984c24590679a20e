"""Tests for operand resolution across the addressing modes."""

from __future__ import annotations

import pytest

from pyoldnes.bus import AddressOutOfRangeError, MemoryBus
from pyoldnes.cpu import AddressingMode, RegisterFile, resolve


def make_context(operands: list[int], *, pc: int = 0x8000) -> tuple[RegisterFile, MemoryBus]:
    memory = MemoryBus()
    memory.load_block(pc, operands)
    return RegisterFile(pc=pc), memory


def test_implied_reads_nothing() -> None:
    registers, memory = make_context([0xFF])

    assert resolve(AddressingMode.IMPLIED, registers, memory) == 0
    assert registers.pc == 0x8000


def test_immediate_returns_value_and_advances_pc() -> None:
    registers, memory = make_context([0x42])

    assert resolve(AddressingMode.IMMEDIATE, registers, memory) == 0x42
    assert registers.pc == 0x8001


def test_zero_page_x_wraps_within_page_zero() -> None:
    registers, memory = make_context([0xF0])
    registers.x = 0x20

    assert resolve(AddressingMode.ZERO_PAGE_X, registers, memory) == 0x10
    assert registers.pc == 0x8001


def test_zero_page_y_wraps_within_page_zero() -> None:
    registers, memory = make_context([0xFF])
    registers.y = 0x01

    assert resolve(AddressingMode.ZERO_PAGE_Y, registers, memory) == 0x00


def test_absolute_reads_high_byte_first_by_default() -> None:
    registers, memory = make_context([0x12, 0x34])

    assert resolve(AddressingMode.ABSOLUTE, registers, memory) == 0x1234
    assert registers.pc == 0x8002


def test_absolute_little_endian_operands() -> None:
    registers, memory = make_context([0x12, 0x34])

    assert resolve(AddressingMode.ABSOLUTE, registers, memory, byte_order="little") == 0x3412


def test_absolute_x_carries_into_next_page() -> None:
    registers, memory = make_context([0x00, 0xFF])
    registers.x = 0x01

    assert resolve(AddressingMode.ABSOLUTE_X, registers, memory) == 0x0100


def test_absolute_y_past_top_of_memory_raises() -> None:
    registers, memory = make_context([0xFF, 0xFF])
    registers.y = 0x01

    with pytest.raises(AddressOutOfRangeError) as excinfo:
        resolve(AddressingMode.ABSOLUTE_Y, registers, memory)
    assert excinfo.value.address == 0x10000


def test_indirect_reads_little_endian_pointer() -> None:
    registers, memory = make_context([0x02, 0x00])
    memory.store8(0x0200, 0x34)
    memory.store8(0x0201, 0x12)

    assert resolve(AddressingMode.INDIRECT, registers, memory) == 0x1234
    assert registers.pc == 0x8002


def test_indirect_pointer_at_top_of_memory_raises() -> None:
    registers, memory = make_context([0xFF, 0xFF])

    with pytest.raises(AddressOutOfRangeError):
        resolve(AddressingMode.INDIRECT, registers, memory)


def test_indirect_x_indexes_before_dereference() -> None:
    registers, memory = make_context([0x20])
    registers.x = 0x04
    memory.store8(0x0024, 0x74)
    memory.store8(0x0025, 0x20)

    assert resolve(AddressingMode.INDIRECT_X, registers, memory) == 0x2074


def test_indirect_x_pointer_wraps_within_page_zero() -> None:
    registers, memory = make_context([0xFF])
    memory.store8(0x00FF, 0x00)
    memory.store8(0x0000, 0x30)
    memory.store8(0x0100, 0x99)

    assert resolve(AddressingMode.INDIRECT_X, registers, memory) == 0x3000


def test_indirect_y_indexes_after_dereference() -> None:
    registers, memory = make_context([0x86])
    registers.y = 0x10
    memory.store8(0x0086, 0x28)
    memory.store8(0x0087, 0x40)

    assert resolve(AddressingMode.INDIRECT_Y, registers, memory) == 0x4038


def test_indirect_x_and_indirect_y_differ() -> None:
    memory = MemoryBus()
    memory.load_block(0x8000, [0x10])
    memory.store16(0x0010, 0x3000)
    memory.store16(0x0014, 0x6050)

    pre = RegisterFile(pc=0x8000, x=0x04)
    post = RegisterFile(pc=0x8000, y=0x04)

    assert resolve(AddressingMode.INDIRECT_X, pre, memory) == 0x6050
    assert resolve(AddressingMode.INDIRECT_Y, post, memory) == 0x3004


def test_indirect_y_past_top_of_memory_raises() -> None:
    registers, memory = make_context([0x40])
    registers.y = 0x02
    memory.store16(0x0040, 0xFFFF)

    with pytest.raises(AddressOutOfRangeError):
        resolve(AddressingMode.INDIRECT_Y, registers, memory)


@pytest.mark.parametrize(
    "displacement, target",
    [
        (0x05, 0x8006),
        (0x00, 0x8001),
        (0xFE, 0x7FFF),
        (0x80, 0x7F81),
    ],
)
def test_relative_targets_are_signed_from_next_instruction(displacement: int, target: int) -> None:
    registers, memory = make_context([displacement])

    assert resolve(AddressingMode.RELATIVE, registers, memory) == target
    assert registers.pc == 0x8001


def test_relative_target_below_zero_raises() -> None:
    registers, memory = make_context([0x80], pc=0x0010)

    with pytest.raises(AddressOutOfRangeError):
        resolve(AddressingMode.RELATIVE, registers, memory)


def test_unknown_byte_order_is_rejected() -> None:
    registers, memory = make_context([0x00, 0x00])

    with pytest.raises(ValueError):
        resolve(AddressingMode.ABSOLUTE, registers, memory, byte_order="middle")
