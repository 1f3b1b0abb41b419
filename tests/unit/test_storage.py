"""Unit tests for the SecretStorage core module."""

import os

import pytest
from unittest.mock import patch

from lumenbox.core.exceptions import InvalidInputError
from lumenbox.core.storage import SUFFIX, SecretStorage


@pytest.fixture
def storage(tmp_path):
    """Return a SecretStorage instance rooted in tmp_path."""
    return SecretStorage(tmp_path / "store")


def test_root_created(tmp_path):
    root = tmp_path / "nested" / "root"
    SecretStorage(root)
    assert root.is_dir()


def test_default_root_under_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    storage = SecretStorage()
    assert storage.root == tmp_path / ".lumenbox"


def test_write_appends_enc_suffix(storage):
    path = storage.write("mnemonic", b"Salted__blob")
    assert path.name == "mnemonic.enc"
    assert path.read_bytes() == b"Salted__blob"
    assert SUFFIX == ".enc"


def test_read_returns_written_bytes(storage):
    storage.write("privateKey", b"\x00\x01\x02")
    assert storage.read("privateKey") == b"\x00\x01\x02"


def test_write_replaces_existing(storage):
    storage.write("k", b"old")
    storage.write("k", b"new")
    assert storage.read("k") == b"new"


def test_write_leaves_no_temporary_files(storage):
    storage.write("k", b"data")
    assert [p.name for p in storage.root.iterdir()] == ["k.enc"]


def test_failed_write_keeps_previous_container(storage):
    storage.write("k", b"original")
    with patch("lumenbox.core.storage.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError, match="disk full"):
            storage.write("k", b"replacement")
    assert storage.read("k") == b"original"
    # the temporary file is cleaned up
    assert [p.name for p in storage.root.iterdir()] == ["k.enc"]


def test_read_missing_raises_file_not_found(storage):
    with pytest.raises(FileNotFoundError):
        storage.read("missing")


def test_exists_and_delete(storage):
    assert storage.exists("k") is False
    storage.write("k", b"data")
    assert storage.exists("k") is True
    storage.delete("k")
    assert storage.exists("k") is False


def test_delete_missing_raises(storage):
    with pytest.raises(FileNotFoundError):
        storage.delete("missing")


def test_list_names_sorted_and_filtered(storage):
    storage.write("b", b"1")
    storage.write("a", b"2")
    (storage.root / "notes.txt").write_text("ignored")
    (storage.root / ".a.enc.xyz.tmp").write_bytes(b"in flight")
    assert storage.list_names() == ["a", "b"]


@pytest.mark.parametrize("name", ["", "   ", "../escape", "dir/name", "dir\\name", ".", "..", ".hidden"])
def test_invalid_names_rejected(storage, name):
    with pytest.raises(InvalidInputError):
        storage.path_for(name)


def test_read_permission_error_propagates(storage):
    storage.write("k", b"data")
    with patch("pathlib.Path.read_bytes", side_effect=PermissionError("denied")):
        with pytest.raises(PermissionError):
            storage.read("k")


def test_written_file_is_fsynced(storage):
    with patch("lumenbox.core.storage.os.fsync", wraps=os.fsync) as fsync:
        storage.write("k", b"data")
    assert fsync.called
