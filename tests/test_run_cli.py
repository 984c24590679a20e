"""Tests for the ``run.py`` command-line entry point."""

from __future__ import annotations

import pytest

import run


def test_demo_program_runs_to_brk(capsys) -> None:
    assert run.main([]) == 0

    out = capsys.readouterr().out
    assert out.startswith("halted after 2 instructions: PC=8003 A=05")


def test_program_file_with_trace(tmp_path, capsys) -> None:
    path = tmp_path / "store.bin"
    path.write_bytes(bytes([0xA2, 0x2A, 0x86, 0x01, 0xA5, 0x01, 0x00]))

    assert run.main(["--program", str(path), "--trace", "2"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("pc=8004 opcode=A5 LDA zp")
    assert lines[1].startswith("pc=8006 opcode=00 BRK")
    assert lines[2].startswith("halted after 4 instructions: PC=8007 A=2A X=2A")


def test_little_endian_operands_and_load_address(tmp_path, capsys) -> None:
    path = tmp_path / "jump.bin"
    path.write_bytes(bytes([0x4C, 0x04, 0x06, 0x00, 0xA9, 0x07, 0x00]))

    argv = ["--program", str(path), "--load-address", "0x600", "--little-endian-operands"]
    assert run.main(argv) == 0

    assert "A=07" in capsys.readouterr().out


def test_step_limit_reports_stopped(tmp_path, capsys) -> None:
    path = tmp_path / "loop.bin"
    path.write_bytes(bytes([0x4C, 0x80, 0x00]))

    assert run.main(["--program", str(path), "--max-steps", "5"]) == 0

    assert capsys.readouterr().out.startswith("stopped after 5 instructions")


def test_unknown_opcode_exits_with_error(tmp_path, capsys) -> None:
    path = tmp_path / "bad.bin"
    path.write_bytes(bytes([0xA9, 0x01, 0x02]))

    with pytest.raises(SystemExit) as excinfo:
        run.main(["--program", str(path)])

    assert excinfo.value.code == 1
    assert "unknown opcode 0x02 at 0x8002" in capsys.readouterr().err


def test_empty_program_exits_with_error(tmp_path, capsys) -> None:
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")

    with pytest.raises(SystemExit) as excinfo:
        run.main(["--program", str(path)])

    assert excinfo.value.code == 1
    assert "program image is empty" in capsys.readouterr().err


def test_missing_program_file_is_a_usage_error(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run.main(["--program", str(tmp_path / "missing.bin")])

    assert excinfo.value.code == 2


def test_out_of_range_load_address_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        run.main(["--load-address", "0x10000"])

    assert excinfo.value.code == 2
