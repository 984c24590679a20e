"""Raw binary program loader.

A raw image is an unframed byte sequence copied verbatim to the engine's
load address. No header or container format is recognised.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from pyoldnes.cpu import MOS6502

from .program import ProgramImage


class ProgramFormatError(RuntimeError):
    """Raised when a program image cannot be installed."""


def load_program(stream: BinaryIO, cpu: MOS6502, *, name: str = "") -> ProgramImage:
    """Read ``stream`` to the end and install it at ``cpu.load_address``."""

    data = stream.read()
    if not data:
        raise ProgramFormatError("program image is empty")
    count = cpu.load(data)
    return ProgramImage(name=name, start=cpu.load_address, length=count)


def load_program_from_path(path: Path, cpu: MOS6502) -> ProgramImage:
    """Load a raw program image from the filesystem."""

    with path.open("rb") as handle:
        return load_program(handle, cpu, name=path.name)
