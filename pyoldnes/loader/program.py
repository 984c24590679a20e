"""Program metadata structures for loaders."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProgramImage:
    """Describes a raw program image installed into memory."""

    name: str = ""
    start: int = 0
    length: int = 0

    @property
    def end(self) -> int:
        return self.start + self.length - 1
