"""6502 instruction engine.

The core is ``pyoldnes.cpu`` (register file, instruction table, addressing
resolver and execution engine) on top of the flat ``pyoldnes.bus`` memory.
``loader``, ``system`` and ``utils`` are thin collaborators used by
``run.py``.
"""

from __future__ import annotations

from . import bus, cpu, loader, system, utils

__all__: list[str] = [
    "bus",
    "cpu",
    "loader",
    "system",
    "utils",
]
