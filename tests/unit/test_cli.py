import os
import subprocess
import sys

import pytest

import json_validator as jv

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
SCRIPT = os.path.join(REPO_ROOT, "json_validator.py")


@pytest.fixture
def write(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")
        return str(path)
    return _write


def run_script(*args, stdin=None):
    cmd = [sys.executable, SCRIPT, *args]
    return subprocess.run(cmd, capture_output=True, input=stdin)


def test_valid_file_exits_0_silently(write):
    cp = run_script(write("ok.json", '{"a": [1, 2, 3]}'))
    assert cp.returncode == 0
    assert cp.stdout == b""
    assert cp.stderr == b""


def test_invalid_file_exits_1_with_diagnostic(write):
    path = write("bad.json", '{\n  "a": 1,\n}')
    cp = run_script(path)
    assert cp.returncode == 1
    assert f"{path}:3:1: UnexpectedToken:".encode() in cp.stderr


def test_empty_file_is_invalid(write):
    cp = run_script(write("empty.json", ""))
    assert cp.returncode == 1
    assert b"UnexpectedEof" in cp.stderr


def test_missing_file_exits_2(tmp_path):
    cp = run_script(str(tmp_path / "nope.json"))
    assert cp.returncode == 2
    assert b"cannot read file" in cp.stderr


def test_stdin_dash():
    assert run_script("-", stdin=b"[true]").returncode == 0
    assert run_script("-", stdin=b"[tru]").returncode == 1


def test_invalid_utf8_file(write):
    cp = run_script(write("latin1.json", b'["caf\xe9"]'))
    assert cp.returncode == 1
    assert b"InvalidEncoding" in cp.stderr


def test_max_depth_flag(write):
    path = write("deep.json", "[[[[]]]]")
    assert run_script(path).returncode == 0
    assert run_script(path, "--max-depth", "3").returncode == 1
    assert run_script(path, "--max-depth", "-1").returncode == 2


# In-process runs of the entrypoint below; argv never leaves the test.

def test_multiple_files_each_reported(write, capsys):
    good = write("good.json", "[]")
    bad1 = write("bad1.json", "[01]")
    bad2 = write("bad2.json", "{} x")
    assert jv._cli([good, bad1, bad2]) == jv.EXIT_INVALID
    err = capsys.readouterr().err
    assert "bad1.json:1:2: InvalidNumber" in err
    assert "bad2.json:1:4: TrailingData" in err
    assert "good.json" not in err


def test_unreadable_file_outranks_invalid(write, tmp_path):
    bad = write("bad.json", "[")
    assert jv._cli([bad, str(tmp_path / "missing.json")]) == jv.EXIT_IO_ERROR


def test_quiet_suppresses_diagnostics(write, capsys):
    assert jv._cli(["-q", write("bad.json", "[1,]")]) == jv.EXIT_INVALID
    assert capsys.readouterr().err == ""


def test_verbose_logs_ok(write, caplog):
    caplog.set_level("INFO", logger="json_validator")
    path = write("good.json", "{}")
    assert jv._cli(["-v", path]) == jv.EXIT_OK
    assert f"{path}: OK" in caplog.text


def test_policy_flags(write):
    dup = write("dup.json", '{"a": 1, "a": 2}')
    scalar = write("scalar.json", "42")
    assert jv._cli([dup, scalar]) == jv.EXIT_OK
    assert jv._cli(["--reject-duplicate-keys", dup]) == jv.EXIT_INVALID
    assert jv._cli(["--require-container", scalar]) == jv.EXIT_INVALID


def test_debug_dumps_tokens(write, capsys):
    assert jv._cli(["--debug", write("t.json", '{"a": null}')]) == jv.EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "0\tOBJECT_OPEN\t'{'",
        "1\tSTRING\t'a'",
        "4\tCOLON\t':'",
        "6\tNULL\t'null'",
        "10\tOBJECT_CLOSE\t'}'",
        "11\tEND\t''",
    ]


def test_debug_stops_at_lexical_error(write, capsys):
    # grammar is not checked in debug mode, only the token stream
    assert jv._cli(["--debug", write("t.json", "]] @")]) == jv.EXIT_INVALID
    out, err = capsys.readouterr()
    assert out.count("ARRAY_CLOSE") == 2
    assert "UnexpectedCharacter" in err


def test_no_files_is_usage_error():
    with pytest.raises(SystemExit) as ei:
        jv._cli([])
    assert ei.value.code == 2
