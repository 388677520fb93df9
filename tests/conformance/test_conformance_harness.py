import os
import subprocess
import sys

import pytest

import json_validator as jv
from json_errors import ErrorKind

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
SCRIPT = os.path.join(REPO_ROOT, "json_validator.py")
TEST_DIR = os.path.dirname(__file__)

json_files = sorted(f for f in os.listdir(TEST_DIR) if f.endswith(".json"))

VALID_FILES = [f for f in json_files if f.startswith("pass")]
INVALID_FILES = [f for f in json_files if f.startswith("fail")]

# Hard fail if test files are missing
if not VALID_FILES:
    raise RuntimeError("No pass*.json files found in conformance directory")
if not INVALID_FILES:
    raise RuntimeError("No fail*.json files found in conformance directory")


def _read(filename):
    with open(os.path.join(TEST_DIR, filename), "rb") as fh:
        return fh.read()


@pytest.mark.parametrize("filename", VALID_FILES)
def test_valid_json_returns_0(filename):
    path = os.path.join(TEST_DIR, filename)
    result = subprocess.run([sys.executable, SCRIPT, path], capture_output=True)
    assert result.returncode == 0, f"Expected 0 from {filename}, got {result.returncode}: {result.stderr!r}"


@pytest.mark.parametrize("filename", INVALID_FILES)
def test_invalid_json_returns_1(filename):
    path = os.path.join(TEST_DIR, filename)
    result = subprocess.run([sys.executable, SCRIPT, path], capture_output=True)
    assert result.returncode == 1, f"Expected 1 from {filename}, got {result.returncode}"


@pytest.mark.parametrize("filename,kind", [
    ("fail1.json", ErrorKind.UNEXPECTED_EOF),
    ("fail2.json", ErrorKind.UNEXPECTED_CHARACTER),
    ("fail3.json", ErrorKind.UNEXPECTED_TOKEN),
    ("fail4.json", ErrorKind.EXPECTED_TOKEN),
    ("fail6.json", ErrorKind.TRAILING_DATA),
    ("fail8.json", ErrorKind.UNEXPECTED_TOKEN),
    ("fail9.json", ErrorKind.TRAILING_DATA),
    ("fail12.json", ErrorKind.INVALID_NUMBER),
    ("fail14.json", ErrorKind.INVALID_STRING),
    ("fail17.json", ErrorKind.TOO_DEEP),
    ("fail18.json", ErrorKind.EXPECTED_TOKEN),
    ("fail24.json", ErrorKind.INVALID_STRING),
    ("fail28.json", ErrorKind.INVALID_NUMBER),
    ("fail32.json", ErrorKind.EXPECTED_TOKEN),
    ("fail33.json", ErrorKind.UNEXPECTED_EOF),
    ("fail35.json", ErrorKind.INVALID_STRING),
    ("fail36.json", ErrorKind.UNEXPECTED_CHARACTER),
    ("fail37.json", ErrorKind.INVALID_ENCODING),
    ("fail38.json", ErrorKind.INVALID_STRING),
    ("fail41.json", ErrorKind.TRAILING_DATA),
    ("fail44.json", ErrorKind.UNEXPECTED_CHARACTER),
])
def test_failure_kind(filename, kind):
    verdict = jv.validate(_read(filename))
    assert not verdict.is_valid
    assert verdict.error.kind is kind


@pytest.mark.parametrize("filename", VALID_FILES)
def test_valid_files_are_deterministic(filename):
    data = _read(filename)
    assert jv.validate(data) == jv.validate(data) == jv.VALID


@pytest.mark.parametrize("filename", VALID_FILES)
def test_valid_files_with_garbage_appended_are_trailing_data(filename):
    verdict = jv.validate(_read(filename) + b" x")
    assert verdict.error.kind is ErrorKind.TRAILING_DATA
