"""Tests for file identity and the PE header summary."""

import pytest

from core.utils import compute_identity, describe_binary, identity_of_bytes, make_file_path, validate_file

ABC_SHA1 = "A9993E364706816ABA3E25717850C26C9CD0D89D"


def test_identity_is_upper_case_sha1_and_size(tmp_path):
    target = tmp_path / "abc.bin"
    target.write_bytes(b"abc")

    identity = compute_identity(str(target))

    assert identity.checksum == ABC_SHA1
    assert identity.byte_size == 3
    assert identity == identity_of_bytes(b"abc")


def test_copies_share_identity(tmp_path):
    first = tmp_path / "a" / "x.dll"
    second = tmp_path / "b" / "X.DLL"
    for p in (first, second):
        p.parent.mkdir()
        p.write_bytes(b"MZ payload")

    a, b = make_file_path(str(first)), make_file_path(str(second))

    assert a.identity == b.identity
    assert a != b
    assert a.file_hint == b.file_hint


def test_validate_file_rejects_missing_and_directories(tmp_path):
    with pytest.raises(FileNotFoundError):
        validate_file(str(tmp_path / "missing.dll"))
    with pytest.raises(ValueError):
        validate_file(str(tmp_path))


def test_describe_non_pe_file(tmp_path):
    target = tmp_path / "notes.txt"
    target.write_bytes(b"hello")

    info = describe_binary(str(target))

    assert info.identity.byte_size == 5
    assert info.arch == ""
    assert info.is_dll is False
    assert info.to_dict()["entry_point"] == "0x0"


def test_describe_truncated_pe_keeps_identity(binary_file):
    info = describe_binary(binary_file)

    assert info.identity.byte_size == 64
    assert info.bits == 0
    assert info.section_names == []
