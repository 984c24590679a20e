"""Programmer-visible 6502 register file and status flag helpers."""

from __future__ import annotations

from dataclasses import dataclass

from pyoldnes.bus import DEFAULT_LOAD_ADDRESS

# 7  bit  0
# NV1B DIZC
FLAG_N = 0x80
FLAG_V = 0x40
FLAG_U = 0x20
FLAG_B = 0x10
FLAG_D = 0x08
FLAG_I = 0x04
FLAG_Z = 0x02
FLAG_C = 0x01

FLAG_NAMES = (
    (FLAG_N, "N"),
    (FLAG_V, "V"),
    (FLAG_U, "-"),
    (FLAG_B, "B"),
    (FLAG_D, "D"),
    (FLAG_I, "I"),
    (FLAG_Z, "Z"),
    (FLAG_C, "C"),
)

POWER_ON_SP = 0xFD
POWER_ON_STATUS = FLAG_U | FLAG_I


def compute_zero_and_negative(value: int) -> tuple[bool, bool]:
    """Return ``(zero, negative)`` for an 8-bit result."""

    value &= 0xFF
    return value == 0, (value & 0x80) != 0


@dataclass
class RegisterFile:
    """Snapshot of the 6502 register file."""

    pc: int = DEFAULT_LOAD_ADDRESS
    sp: int = POWER_ON_SP
    a: int = 0x00
    x: int = 0x00
    y: int = 0x00
    p: int = POWER_ON_STATUS

    def clone(self) -> "RegisterFile":
        return RegisterFile(self.pc, self.sp, self.a, self.x, self.y, self.p)

    def restore(self, other: "RegisterFile") -> None:
        self.pc = other.pc
        self.sp = other.sp
        self.a = other.a
        self.x = other.x
        self.y = other.y
        self.p = other.p

    def get_flag(self, flag: int) -> bool:
        return (self.p & flag) != 0

    def set_flag(self, flag: int, enabled: bool) -> None:
        if enabled:
            self.p |= flag
        else:
            self.p &= ~flag & 0xFF

    def flag_string(self) -> str:
        """Render P as ``NV-BDIZC`` with cleared bits shown as ``.``."""

        return "".join(name if self.p & mask else "." for mask, name in FLAG_NAMES)

    def format(self) -> str:
        return (
            f"PC={self.pc:04X} A={self.a:02X} X={self.x:02X} Y={self.y:02X} "
            f"SP={self.sp:02X} P={self.p:02X} [{self.flag_string()}]"
        )
