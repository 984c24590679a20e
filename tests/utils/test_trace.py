from types import SimpleNamespace

import pytest

from pyoldnes.utils.trace import TraceRecorder


def _registers(**kwargs):
    defaults = {"pc": 0x8000, "a": 0x00, "x": 0x00, "y": 0x00, "sp": 0xFD, "p": 0x24}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_trace_recorder_overwrites_old_entries():
    recorder = TraceRecorder(capacity=2)

    recorder.record_step(_registers(pc=0x8000, a=0x11), 0xA9, halted=False, mnemonic="LDA #imm")
    recorder.record_step(_registers(pc=0x8002, x=0x22), 0xAA, halted=False, mnemonic="TAX")
    recorder.record_step(_registers(pc=0x8003, y=0x33), 0x02, halted=False, mnemonic="???", note="unknown-opcode")

    lines = list(recorder.format_entries())
    assert len(recorder) == 2
    assert len(lines) == 2
    assert "pc=8002" in lines[0]
    assert "pc=8003" in lines[1]
    assert "Y=33" in lines[1]
    assert "flags=unknown-opcode" in lines[1]


def test_trace_recorder_handles_empty_state():
    recorder = TraceRecorder(1)
    recorder.record_step(_registers(pc=0x2000), None, halted=True, note="halted")

    lines = list(recorder.format_entries())
    assert len(lines) == 1
    assert "opcode=--" in lines[0]
    assert "flags=HALT,halted" in lines[0]


def test_trace_line_layout():
    recorder = TraceRecorder(4)
    recorder.record_step(_registers(), 0xEA, halted=False, mnemonic="NOP")

    assert recorder.format_entries() == [
        "pc=8000 opcode=EA NOP       A=00 X=00 Y=00 SP=FD P=24 flags=-"
    ]


def test_entries_limit_and_last_entry():
    recorder = TraceRecorder(8)
    assert recorder.last_entry() is None

    for offset in range(5):
        recorder.record_step(_registers(pc=0x8000 + offset), 0xEA, halted=False)

    assert [entry.pc for entry in recorder.entries(2)] == [0x8003, 0x8004]
    assert recorder.last_entry().pc == 0x8004

    recorder.clear()
    assert len(recorder) == 0
    assert list(recorder.entries()) == []


def test_dump_goes_through_debug_log(monkeypatch, capsys):
    from pyoldnes.utils import debug

    monkeypatch.setenv(debug.ENV_VAR, "trace")
    debug.reload_categories()
    try:
        recorder = TraceRecorder(2)
        recorder.record_step(_registers(), 0x00, halted=True, mnemonic="BRK")
        recorder.dump("trace")
    finally:
        monkeypatch.delenv(debug.ENV_VAR)
        debug.reload_categories()

    assert "[PYOLDNES][trace] pc=8000 opcode=00 BRK" in capsys.readouterr().out


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        TraceRecorder(0)
