"""Tests for the raw program loader."""

from __future__ import annotations

import io

import pytest

from pyoldnes.bus import LoadOverflowError
from pyoldnes.cpu import MOS6502
from pyoldnes.loader import ProgramFormatError, ProgramImage, load_program, load_program_from_path


def test_load_program_installs_image_at_load_address() -> None:
    cpu = MOS6502()

    image = load_program(io.BytesIO(bytes([0xA9, 0x05, 0x00])), cpu, name="demo")

    assert image == ProgramImage(name="demo", start=0x8000, length=3)
    assert image.end == 0x8002
    assert cpu.memory.read_block(0x8000, 3) == bytes([0xA9, 0x05, 0x00])
    assert cpu.registers.pc == 0x8000


def test_loaded_image_runs() -> None:
    cpu = MOS6502(load_address=0x0600)
    load_program(io.BytesIO(bytes([0xA2, 0x2A, 0x86, 0x01, 0xA5, 0x01, 0x00])), cpu)

    result = cpu.run()

    assert result.halted
    assert result.registers.a == 42


def test_empty_image_is_rejected() -> None:
    with pytest.raises(ProgramFormatError):
        load_program(io.BytesIO(b""), MOS6502())


def test_oversized_image_raises_overflow() -> None:
    cpu = MOS6502(load_address=0xFFF0)

    with pytest.raises(LoadOverflowError):
        load_program(io.BytesIO(bytes(0x20)), cpu)


def test_load_program_from_path(tmp_path) -> None:
    path = tmp_path / "count.bin"
    path.write_bytes(bytes([0xA2, 0x03, 0xCA, 0xD0, 0xFD, 0x00]))
    cpu = MOS6502()

    image = load_program_from_path(path, cpu)

    assert image.name == "count.bin"
    assert image.length == 6
    assert cpu.run().registers.x == 0
