import pytest

from pixie_stitch.core.errors import OutputError, PixieStitchError
from pixie_stitch.storage import FSStorage, get_storage


def test_prepare_dir_replaces_previous_output(tmp_path):
    storage = get_storage(tmp_path)
    old = storage.prepare_dir("cat", "centered")
    (old / "stale.png").write_bytes(b"x")
    fresh = storage.prepare_dir("cat", "centered")
    assert fresh == tmp_path / "cat_centered"
    assert list(fresh.iterdir()) == []


def test_file_in_the_way_is_an_output_error(tmp_path):
    (tmp_path / "cat").write_text("not a directory", encoding="utf-8")
    storage = FSStorage(tmp_path)
    with pytest.raises(OutputError) as exc_info:
        storage.prepare_dir("cat")
    assert exc_info.value.output_path == str(tmp_path / "cat")
    assert isinstance(exc_info.value, PixieStitchError)
    # the file is left untouched
    assert (tmp_path / "cat").read_text(encoding="utf-8") == "not a directory"


def test_writing_below_a_file_is_an_output_error(tmp_path):
    (tmp_path / "blocker").write_bytes(b"")
    storage = FSStorage(tmp_path)
    with pytest.raises(OutputError):
        storage.save_bytes(tmp_path / "blocker" / "out.png", b"data")


def test_reading_back_a_missing_sheet_is_an_output_error(tmp_path):
    storage = FSStorage(tmp_path)
    assert storage.read_bytes(storage.save_text("a/b.txt", "hi")) == b"hi"
    with pytest.raises(OutputError):
        storage.read_bytes("a/missing.png")


def test_root_that_is_a_file_is_an_output_error(tmp_path):
    root = tmp_path / "out"
    root.write_bytes(b"")
    with pytest.raises(OutputError):
        FSStorage(root)
