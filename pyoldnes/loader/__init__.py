"""Loaders for program images."""

from __future__ import annotations

from .program import ProgramImage
from .raw import ProgramFormatError, load_program, load_program_from_path

__all__ = [
    "ProgramImage",
    "ProgramFormatError",
    "load_program",
    "load_program_from_path",
]
