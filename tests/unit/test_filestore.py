import re

import pytest

from boringblog.adapters.fs.filestore import FileSystemStore, random_upload_name


@pytest.fixture
def store(tmp_path):
    return FileSystemStore(str(tmp_path / "uploads"))


def test_save_and_get(store):
    name = store.save("a.png", b"data")
    assert name == "a.png"
    assert store.get("a.png") == b"data"


def test_delete(store):
    store.save("a.png", b"data")
    store.delete("a.png")
    with pytest.raises(FileNotFoundError):
        store.get("a.png")


def test_traversal_rejected(store):
    with pytest.raises(ValueError):
        store.save("../escape.png", b"x")


def test_random_upload_name():
    assert re.fullmatch(r"\d{13}-[0-9a-f]{16}\.png", random_upload_name(".PNG"))
    assert random_upload_name("").endswith(".bin")
