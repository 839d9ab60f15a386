#!/usr/bin/env python3
"""
Command line tests
"""

import pytest

from elf_samples import build_elf, read_header, patch_header, write_file

from elfstrip.main import main, verify_output


def test_main_strips_file(tmp_path, capsys):
    data = build_elf()
    input_path = write_file(tmp_path / "prog", data)
    output_path = str(tmp_path / "prog.stripped")

    assert main([input_path, output_path]) == 0

    with open(output_path, 'rb') as f:
        output = f.read()
    assert len(output) == read_header(data).e_shoff
    assert read_header(output).e_shnum == 0
    assert "verification passed" in capsys.readouterr().err


def test_main_debug_flag(tmp_path, capsys):
    input_path = write_file(tmp_path / "prog", build_elf(False))
    output_path = str(tmp_path / "out")

    assert main(['-d', input_path, output_path]) == 0
    assert "DEBUG:" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [
    ['--help'],
    ['-h', 'a', 'b'],
    [],
    ['only-one'],
    ['one', 'two', 'three'],
    ['--bogus', 'a', 'b'],
    ['--debug=1', 'a', 'b'],
    ['--help=x'],
])
def test_main_usage_exits_zero(argv, tmp_path, capsys):
    assert main(argv) == 0

    captured = capsys.readouterr()
    assert "<infile> <outfile>" in captured.err
    assert "section stripper" in captured.err
    assert captured.out == ""


def test_main_rejects_non_elf(tmp_path, capsys):
    input_path = write_file(tmp_path / "readme", b"plain text, definitely not ELF")
    output_path = tmp_path / "out"

    assert main([input_path, str(output_path)]) == 1
    assert "Not a valid ELF file" in capsys.readouterr().err
    assert not output_path.exists()


def test_main_rejects_unsupported_class(tmp_path, capsys):
    data = build_elf()
    data[4] = 7
    input_path = write_file(tmp_path / "prog", data)

    assert main([input_path, str(tmp_path / "out")]) == 1
    assert "Unsupported ELF class 7" in capsys.readouterr().err


def test_main_rejects_malformed_table(tmp_path, capsys):
    input_path = write_file(tmp_path / "prog", patch_header(build_elf(), e_shoff=0x7fffffff))

    assert main([input_path, str(tmp_path / "out")]) == 1
    assert "ERROR:" in capsys.readouterr().err


def test_main_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "missing"), str(tmp_path / "out")]) == 1
    assert "Failed to open file" in capsys.readouterr().err


def test_verify_output(tmp_path):
    unstripped = write_file(tmp_path / "prog", build_elf())
    stripped = str(tmp_path / "out")
    not_elf = write_file(tmp_path / "text", b"hello")

    assert main([unstripped, stripped]) == 0
    assert verify_output(stripped) is True
    assert verify_output(unstripped) is False
    assert verify_output(not_elf) is False
