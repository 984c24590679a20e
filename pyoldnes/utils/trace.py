"""Execution trace buffer for post-mortem diagnostics."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Sequence

from .debug import debug_log


@dataclass(frozen=True)
class TraceEntry:
    """Register state seen at the start of one instruction."""

    pc: int
    opcode: int | None
    mnemonic: str
    a: int
    x: int
    y: int
    sp: int
    p: int
    halted: bool
    note: str = ""

    @classmethod
    def capture(cls, registers, opcode: int | None, *, halted: bool, mnemonic: str = "", note: str = "") -> "TraceEntry":
        return cls(
            pc=registers.pc & 0xFFFF,
            opcode=None if opcode is None else opcode & 0xFF,
            mnemonic=mnemonic,
            a=registers.a & 0xFF,
            x=registers.x & 0xFF,
            y=registers.y & 0xFF,
            sp=registers.sp & 0xFF,
            p=registers.p & 0xFF,
            halted=halted,
            note=note,
        )

    def markers(self) -> str:
        parts = (["HALT"] if self.halted else []) + ([self.note] if self.note else [])
        return ",".join(parts) or "-"

    def format(self) -> str:
        opcode = "--" if self.opcode is None else f"{self.opcode:02X}"
        return (
            f"pc={self.pc:04X} opcode={opcode} {self.mnemonic or '?':<9} "
            f"A={self.a:02X} X={self.x:02X} Y={self.y:02X} SP={self.sp:02X} P={self.p:02X} "
            f"flags={self.markers()}"
        )


class TraceRecorder:
    """Keeps the most recent ``capacity`` trace entries, oldest first."""

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._entries: deque[TraceEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def record_step(
        self,
        registers,
        opcode: int | None,
        *,
        halted: bool,
        mnemonic: str = "",
        note: str = "",
    ) -> None:
        self._entries.append(
            TraceEntry.capture(registers, opcode, halted=halted, mnemonic=mnemonic, note=note)
        )

    def entries(self, limit: int | None = None) -> Iterator[TraceEntry]:
        """Yield the newest ``limit`` entries (all when ``None``), oldest first."""

        skip = 0 if limit is None else max(len(self._entries) - max(limit, 0), 0)
        for index, entry in enumerate(self._entries):
            if index >= skip:
                yield entry

    def last_entry(self) -> TraceEntry | None:
        return self._entries[-1] if self._entries else None

    def format_entries(self, limit: int | None = None) -> Sequence[str]:
        return [entry.format() for entry in self.entries(limit)]

    def dump(self, category: str, limit: int | None = None) -> None:
        for line in self.format_entries(limit):
            debug_log(category, line)

    def clear(self) -> None:
        self._entries.clear()
