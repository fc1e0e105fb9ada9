import json

from marshal_fixtures import dump
from marshal_reader.__main__ import main


def test_cli_prints_json(tmp_path, capsys):
    path = tmp_path / "data.bin"
    path.write_bytes(dump({"name": "x", "values": [1, 2.5, None, 2**70]}))

    assert main([str(path)]) == 0

    out = capsys.readouterr().out
    print("CLI output:", out)
    assert json.loads(out) == {"name": "x", "values": [1, 2.5, None, 2**70]}


def test_cli_renders_patterns_as_source(tmp_path, capsys):
    path = tmp_path / "re.bin"
    path.write_bytes(b"\x04\x08/\x06a\x01")

    assert main([str(path)]) == 0
    assert json.loads(capsys.readouterr().out) == "(?i)a"


def test_cli_lenient_flag(tmp_path, capsys):
    path = tmp_path / "unknown.bin"
    path.write_bytes(b"\x04\x08o")

    assert main([str(path)]) == 1
    assert main([str(path), "--lenient"]) == 0
    assert capsys.readouterr().out.strip().endswith("null")


def test_cli_reports_decode_errors(tmp_path, capsys):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"\x04\x07\x30")

    assert main([str(path)]) == 1
    assert "Unsupported marshal version" in capsys.readouterr().err


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.bin")]) == 1
    assert "missing.bin" in capsys.readouterr().err
