import json
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from pixie_stitch.core.errors import ImageInputError
from pixie_stitch.core.pipeline import (
    pattern_set_tasks,
    prepare_image,
    process_image_to_pattern,
    run_batch,
    run_tasks,
)
from pixie_stitch.core.types import PatternVariant
from pixie_stitch.storage import FSStorage
from tests.utils import bundled_resources, make_checker_image, make_rgba_image, write_png

VARIANT_FILES = [variant.value for variant in PatternVariant]


def _pattern_files(name, suffix):
    return {f"{name}_{variant}_{suffix}.png" for variant in VARIANT_FILES}


def _names(directory):
    return {p.name for p in directory.iterdir()}


def test_single_page_image_writes_all_outputs(tmp_path):
    src = write_png(
        tmp_path / "cat.png",
        make_rgba_image([[(0, 0, 0), (255, 255, 255)], [(190, 45, 45), (0, 0, 0, 0)]]),
    )
    out = tmp_path / "out"
    records = run_batch([src], resources=bundled_resources(), output_dir=out, max_workers=2)

    assert [r.status for r in records] == ["done"]
    assert records[0].meta["colors"] == 3
    assert records[0].meta["segments"] == 1

    assert _names(out / "cat") == _pattern_files("cat", "complete") | {
        "cat_legend.png",
        "cat_patterns.pdf",
        "cat_pattern.json",
    }
    assert _names(out / "cat_centered") == _pattern_files("cat", "complete") | {"cat_legend.png"}
    assert _names(out / "cat_preview") == {
        "cat_complete.png",
        "cat_complete_background.png",
        "cat_complete_stitches.png",
    }
    assert (out / "cat" / "cat_patterns.pdf").read_bytes().startswith(b"%PDF")

    summary = json.loads((out / "cat" / "cat_pattern.json").read_text(encoding="utf-8"))
    assert summary["canvasGrid"] == {"width": 2, "height": 2}
    assert summary["palette_size"] == 3
    assert summary["total_stitches"] == 3
    assert summary["segments"] == []
    assert summary["centered_origin"] == [1, 1]
    assert "cat/cat_pattern.json" in summary["files"]
    assert "cat_preview/cat_complete.png" in summary["files"]
    assert len(records[0].files) == len(summary["files"])


def test_wide_image_is_split_into_pages(tmp_path):
    src = write_png(tmp_path / "wide.png", make_checker_image(61, 2))
    out = tmp_path / "out"
    records = run_batch(
        [src], resources=bundled_resources(), output_dir=out, max_workers=2, write_pdf=False
    )
    assert records[0].status == "done"

    expected = (
        _pattern_files("wide", "complete")
        | _pattern_files("wide", "segment_1")
        | _pattern_files("wide", "segment_2")
        | {"wide_legend.png"}
    )
    assert _names(out / "wide_centered") == expected
    assert _names(out / "wide") == expected | {"wide_pattern.json"}

    summary = json.loads((out / "wide" / "wide_pattern.json").read_text(encoding="utf-8"))
    assert [s["number"] for s in summary["segments"]] == [1, 2]
    assert summary["segments"][1]["x"] == 60
    assert summary["segments"][1]["width"] == 1
    assert summary["segments"][1]["origin_centered"] == [60 - 31, -1]


def test_a_second_run_replaces_previous_output(tmp_path):
    src = write_png(tmp_path / "dot.png", make_rgba_image([[(10, 200, 10)]]))
    out = tmp_path / "out"
    (out / "dot").mkdir(parents=True)
    (out / "dot" / "stale.txt").write_text("old", encoding="utf-8")
    run_batch([src], resources=bundled_resources(), output_dir=out, max_workers=1, write_pdf=False)
    assert not (out / "dot" / "stale.txt").exists()


def test_bad_input_fails_without_stopping_the_batch(tmp_path):
    bad = tmp_path / "photo.jpg"
    bad.write_bytes(b"jpeg")
    good = write_png(tmp_path / "good.png", make_rgba_image([[(0, 0, 0)]]))
    out = tmp_path / "out"
    records = run_batch(
        [bad, good], resources=bundled_resources(), output_dir=out, max_workers=1, write_pdf=False
    )
    assert [r.status for r in records] == ["failed", "done"]
    assert "GIF or PNG" in records[0].error
    assert not (out / "photo").exists()
    assert (out / "good").is_dir()


def test_strict_batch_stops_at_the_first_failure(tmp_path):
    missing = tmp_path / "missing.png"
    good = write_png(tmp_path / "good.png", make_rgba_image([[(0, 0, 0)]]))
    out = tmp_path / "out"
    records = run_batch(
        [missing, good],
        resources=bundled_resources(),
        output_dir=out,
        max_workers=1,
        strict=True,
        write_pdf=False,
    )
    assert [r.status for r in records] == ["failed", "skipped"]
    assert not (out / "good").exists()


def test_too_many_colors_fail_before_writing(tmp_path):
    rng = np.random.default_rng(21)
    image = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
    image[..., 3] = 255
    src = write_png(tmp_path / "noisy.png", image)
    out = tmp_path / "out"
    records = run_batch([src], resources=bundled_resources(), output_dir=out, write_pdf=False)
    assert records[0].failed
    assert "Not enough symbols" in records[0].error
    assert not (out / "noisy").exists()


def test_quantized_image_is_shared_read_only():
    image = make_rgba_image([[(250, 0, 0), (0, 0, 250)]])
    quantized, mapping = process_image_to_pattern(image, bundled_resources())
    assert len(mapping) == 2
    with pytest.raises(ValueError):
        quantized[0, 0] = (0, 0, 0, 0)


def test_pattern_set_covers_complete_image_and_each_segment(tmp_path):
    src = write_png(tmp_path / "grid.png", make_checker_image(3, 3))
    resources = bundled_resources()
    prepared = prepare_image(src, resources, segment_width=2, segment_height=2)
    assert len(prepared.segments) == 4
    storage = FSStorage(tmp_path / "out")
    tasks = pattern_set_tasks(prepared, resources, storage, "centered", tmp_path / "out")
    names = [name for name, _task in tasks]
    assert len(names) == len(set(names)) == 1 + 4 * (1 + 4)
    assert names[0] == "centered legend"


def test_prepare_image_reports_decode_errors(tmp_path):
    with pytest.raises(ImageInputError):
        prepare_image(tmp_path / "nothing.gif", bundled_resources())


def test_failed_task_is_reported_not_raised():
    def broken():
        raise RuntimeError("boom")

    with ThreadPoolExecutor(max_workers=2) as executor:
        outcomes = run_tasks(executor, [("ok", lambda: []), ("broken", broken)])
    assert outcomes[0].ok
    assert not outcomes[1].ok
    assert isinstance(outcomes[1].error, RuntimeError)


def test_output_failure_fails_only_that_image(tmp_path):
    cat = write_png(tmp_path / "cat.png", make_rgba_image([[(0, 0, 0)]]))
    dog = write_png(tmp_path / "dog.png", make_rgba_image([[(255, 255, 255)]]))
    out = tmp_path / "out"
    out.mkdir()
    (out / "cat").write_text("a file where the output directory goes", encoding="utf-8")

    records = run_batch(
        [cat, dog], resources=bundled_resources(), output_dir=out, max_workers=1, write_pdf=False
    )
    assert [r.status for r in records] == ["failed", "done"]
    assert "not a directory" in records[0].error
    assert str(cat) in records[0].error
    assert (out / "dog" / "dog_pattern.json").is_file()


def test_images_sharing_a_name_do_not_overwrite_each_other(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    first = write_png(tmp_path / "a" / "cat.png", make_rgba_image([[(0, 0, 0)]]))
    second = write_png(
        tmp_path / "b" / "cat.png", make_rgba_image([[(0, 0, 0), (255, 255, 255)]])
    )
    out = tmp_path / "out"
    records = run_batch(
        [first, second], resources=bundled_resources(), output_dir=out, max_workers=1, write_pdf=False
    )
    assert [r.status for r in records] == ["done", "failed"]
    assert str(first) in records[1].error and str(second) in records[1].error

    summary = json.loads((out / "cat" / "cat_pattern.json").read_text(encoding="utf-8"))
    assert summary["palette_size"] == 1


def test_same_path_twice_gets_two_records(tmp_path):
    src = write_png(tmp_path / "dot.png", make_rgba_image([[(0, 0, 0)]]))
    records = run_batch(
        [src, src],
        resources=bundled_resources(),
        output_dir=tmp_path / "out",
        max_workers=1,
        write_pdf=False,
    )
    assert [r.status for r in records] == ["done", "failed"]
    assert records[0].job_id != records[1].job_id
