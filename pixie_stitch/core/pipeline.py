import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .. import settings
from ..color.palette_loader import Palette, load_palette
from ..color.palette_matcher import PaletteMatcher
from ..export.json_exporter import build_summary, export_json
from ..export.pdf_exporter import export_pdf
from ..imaging.codec import decode_image
from ..storage import FSStorage, get_storage
from .color_mapping import ColorMapping, build_color_mapping
from .errors import ImageInputError, PixieStitchError
from .jobs import JobRecord, JobStore
from .legend import legend_filename, render_legend
from .pattern_render import RenderOptions, pattern_filename, render_pattern
from .preview import preview_filenames, render_preview
from .resources import Resources, load_resources
from .segments import Segment, logical_origin, split_into_segments
from .types import CoordinateMode, PatternVariant

logger = logging.getLogger(__name__)

# mode -> output directory suffix
COORDINATE_MODE_DIRS = {"absolute": "", "centered": "centered"}
PREVIEW_DIR = "preview"

Task = Callable[[], List[Path]]


# =====================================================================
#  Helpers
# =====================================================================


@contextmanager
def timed(label: str):
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", label, time.perf_counter() - started)


@dataclass(frozen=True)
class TaskOutcome:
    """Result of one render task: the files it wrote, or the exception it raised."""

    name: str
    paths: Tuple[Path, ...] = ()
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, eq=False)
class PreparedImage:
    path: Path
    name: str
    image: np.ndarray
    mapping: ColorMapping
    segments: Tuple[Segment, ...]

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def segment_positions(self) -> List[Tuple[int, int]]:
        return [(s.column, s.row) for s in self.segments]


def image_name(image_path: Union[str, Path]) -> str:
    return Path(image_path).stem


# =====================================================================
#  IMAGE → COLOR MAPPING (barrier phase)
# =====================================================================


def process_image_to_pattern(
    image: np.ndarray,
    resources: Resources,
    palette: Optional[Palette] = None,
    image_path: Optional[str] = None,
) -> Tuple[np.ndarray, ColorMapping]:
    """
    Quantize ``image`` onto the thread palette and build its ColorMapping.
    Both results are final: every render task shares them read-only.
    """
    palette = palette or load_palette("DMC")
    with timed("quantize"):
        quantized = PaletteMatcher(palette).quantize(image)
    quantized.setflags(write=False)
    with timed("color mapping"):
        mapping = build_color_mapping(
            quantized,
            palette,
            resources.glyph_symbols,
            resources.alphanumeric_symbols,
            resources.stitch_tiles,
            resources.stitch_luminance_tiles,
            image_path=image_path,
        )
    return quantized, mapping


def prepare_image(
    image_path: Union[str, Path],
    resources: Resources,
    palette: Optional[Palette] = None,
    segment_width: int = settings.SEGMENT_WIDTH,
    segment_height: int = settings.SEGMENT_HEIGHT,
) -> PreparedImage:
    path = Path(image_path)
    image = decode_image(path)
    quantized, mapping = process_image_to_pattern(image, resources, palette, str(path))
    segments = split_into_segments(quantized, segment_width, segment_height)
    return PreparedImage(
        path=path,
        name=image_name(path),
        image=quantized,
        mapping=mapping,
        segments=tuple(segments),
    )


# =====================================================================
#  RENDER TASKS
# =====================================================================


def _pattern_task(
    prepared: PreparedImage,
    resources: Resources,
    storage: FSStorage,
    out_dir: Path,
    bitmap: np.ndarray,
    options: RenderOptions,
    suffix: str,
) -> Task:
    def run() -> List[Path]:
        sheet = render_pattern(bitmap, prepared.mapping, options, resources.font, resources.font_big)
        target = out_dir / pattern_filename(prepared.name, options.variant, suffix)
        return [storage.save_png(target, sheet)]

    return run


def _legend_task(
    prepared: PreparedImage, resources: Resources, storage: FSStorage, out_dir: Path
) -> Task:
    def run() -> List[Path]:
        legend = render_legend(
            prepared.mapping,
            prepared.width,
            prepared.height,
            resources.font,
            prepared.segment_positions,
        )
        return [storage.save_png(out_dir / legend_filename(prepared.name), legend)]

    return run


def _preview_task(
    prepared: PreparedImage, resources: Resources, storage: FSStorage, out_dir: Path
) -> Task:
    def run() -> List[Path]:
        images = render_preview(prepared.image, prepared.mapping, resources.background_tile_8x8)
        names = preview_filenames(prepared.name)
        return [
            storage.save_png(out_dir / names["background"], images.background),
            storage.save_png(out_dir / names["stitches"], images.stitches),
            storage.save_png(out_dir / names["combined"], images.combined),
        ]

    return run


def pattern_set_tasks(
    prepared: PreparedImage,
    resources: Resources,
    storage: FSStorage,
    mode: CoordinateMode,
    out_dir: Path,
) -> List[Tuple[str, Task]]:
    """
    Legend plus every variant for the complete image and, when the image spans several pages,
    for each segment.
    """
    origin_bars = mode == "centered"
    tasks: List[Tuple[str, Task]] = [
        (f"{mode} legend", _legend_task(prepared, resources, storage, out_dir))
    ]

    sets: List[Tuple[np.ndarray, int, int, Optional[int], str]] = []
    lx, ly = logical_origin(mode, prepared.width, prepared.height)
    sets.append((prepared.image, lx, ly, None, "complete"))
    if len(prepared.segments) > 1:
        for segment in prepared.segments:
            lx, ly = logical_origin(
                mode, prepared.width, prepared.height, segment.pixel_x, segment.pixel_y
            )
            sets.append((segment.bitmap, lx, ly, segment.number, f"segment_{segment.number}"))

    for bitmap, lx, ly, number, suffix in sets:
        for variant in PatternVariant:
            options = RenderOptions.for_variant(variant, lx, ly, origin_bars, number)
            tasks.append(
                (
                    f"{mode} {variant.value} {suffix}",
                    _pattern_task(prepared, resources, storage, out_dir, bitmap, options, suffix),
                )
            )
    return tasks


def _run_task(name: str, task: Task) -> TaskOutcome:
    try:
        return TaskOutcome(name=name, paths=tuple(task()))
    except Exception as exc:
        logger.warning("Task '%s' failed: %s", name, exc)
        return TaskOutcome(name=name, error=exc)


def run_tasks(executor: Executor, tasks: Sequence[Tuple[str, Task]]) -> List[TaskOutcome]:
    """Run all tasks on ``executor`` and wait for every one of them."""
    futures = [executor.submit(_run_task, name, task) for name, task in tasks]
    return [future.result() for future in futures]


# =====================================================================
#  BOOKLET / SUMMARY
# =====================================================================


def _booklet_pages(
    prepared: PreparedImage, storage: FSStorage, out_dir: Path
) -> List[Tuple[str, bytes]]:
    variant = PatternVariant.COLORIZED
    sheets = [
        ("Legend", legend_filename(prepared.name)),
        ("Complete pattern", pattern_filename(prepared.name, variant, "complete")),
    ]
    if len(prepared.segments) > 1:
        for segment in prepared.segments:
            sheets.append(
                (
                    f"Pattern part {segment.number}",
                    pattern_filename(prepared.name, variant, f"segment_{segment.number}"),
                )
            )
    return [(caption, storage.read_bytes(out_dir / filename)) for caption, filename in sheets]


def write_booklet(prepared: PreparedImage, storage: FSStorage, out_dir: Path) -> Path:
    footer = (
        f"Grid: {prepared.width} x {prepared.height} cells · Colors: {len(prepared.mapping)} · "
        f"Stitches: {sum(info.count for info in prepared.mapping.values())}"
    )
    pdf = export_pdf(prepared.name, _booklet_pages(prepared, storage, out_dir), footer=footer)
    return storage.save_bytes(out_dir / f"{prepared.name}_patterns.pdf", pdf)


def write_summary(
    prepared: PreparedImage, storage: FSStorage, out_dir: Path, files: Sequence[Path]
) -> Path:
    target = out_dir / f"{prepared.name}_pattern.json"
    relative = [p.relative_to(storage.root).as_posix() for p in [*files, target]]
    summary = build_summary(
        prepared.name, prepared.width, prepared.height, prepared.mapping, prepared.segments, relative
    )
    return storage.save_text(target, export_json(summary))


# =====================================================================
#  DRIVER
# =====================================================================


def process_image_file(
    image_path: Union[str, Path],
    resources: Resources,
    storage: FSStorage,
    executor: Executor,
    jobs: JobStore,
    palette: Optional[Palette] = None,
    write_pdf: bool = settings.EXPORT_PDF,
    job_id: Optional[str] = None,
) -> JobRecord:
    """
    Turn one image into its pattern, centered pattern and preview directories.

    Input and symbol errors raise PixieStitchError before anything is written, output errors
    raise OutputError. Render task failures do not raise: they mark the returned record as
    failed.
    """
    path = Path(image_path)
    job_id = job_id or str(path)
    jobs.start(job_id, path.name)
    logger.info("Processing %s", path)

    with timed(f"prepare {path.name}"):
        prepared = prepare_image(path, resources, palette)
    jobs.report(
        job_id,
        progress=0.2,
        colors=len(prepared.mapping),
        segments=len(prepared.segments),
        width=prepared.width,
        height=prepared.height,
    )
    logger.info(
        "%s: %dx%d cells, %d colors, %d segment(s)",
        path.name,
        prepared.width,
        prepared.height,
        len(prepared.mapping),
        len(prepared.segments),
    )

    dirs = {mode: storage.prepare_dir(prepared.name, suffix) for mode, suffix in COORDINATE_MODE_DIRS.items()}
    preview_dir = storage.prepare_dir(prepared.name, PREVIEW_DIR)

    tasks: List[Tuple[str, Task]] = []
    for mode, out_dir in dirs.items():
        tasks.extend(pattern_set_tasks(prepared, resources, storage, mode, out_dir))
    tasks.append(("preview", _preview_task(prepared, resources, storage, preview_dir)))

    with timed(f"render {len(tasks)} tasks for {path.name}"):
        outcomes = run_tasks(executor, tasks)

    files = [p for outcome in outcomes for p in outcome.paths]
    jobs.add_files(job_id, files)
    failed = [outcome for outcome in outcomes if not outcome.ok]
    if failed:
        return jobs.fail(job_id, f"{failed[0].name}: {failed[0].error}")

    jobs.report(job_id, progress=0.9)
    main_dir = dirs["absolute"]
    extras = []
    if write_pdf:
        with timed(f"booklet {path.name}"):
            extras.append(write_booklet(prepared, storage, main_dir))
    extras.append(write_summary(prepared, storage, main_dir, [*files, *extras]))
    jobs.add_files(job_id, extras)

    logger.info("Finished %s: %d files written", path.name, len(files) + len(extras))
    return jobs.finish(job_id)


def _batch_job_id(jobs: JobStore, image_path: Path, index: int) -> str:
    # the same path given twice still gets two records
    job_id = str(image_path)
    return job_id if job_id not in jobs else f"{job_id}#{index + 1}"


def run_batch(
    image_paths: Sequence[Union[str, Path]],
    resources: Optional[Resources] = None,
    output_dir: Optional[Union[str, Path]] = None,
    max_workers: int = settings.MAX_WORKERS,
    strict: bool = settings.STRICT_BATCH,
    write_pdf: bool = settings.EXPORT_PDF,
) -> List[JobRecord]:
    """
    Process images one after another, rendering each on a shared thread pool.

    A failing image is recorded and the batch goes on with the next one; with ``strict`` the
    batch stops at the first failure and the remaining images are marked skipped. Output
    directories are named after the image stem, so a later image whose stem was already used
    in this batch fails instead of replacing the earlier image's output.
    """
    resources = resources or load_resources()
    storage = get_storage(output_dir)
    palette = load_palette("DMC")
    jobs = JobStore()
    # output name -> image that owns it
    claimed: Dict[str, Path] = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        for index, image_path in enumerate(image_paths):
            path = Path(image_path)
            job_id = _batch_job_id(jobs, path, index)
            try:
                owner = claimed.get(image_name(path))
                if owner is not None:
                    raise ImageInputError(
                        f"Output name '{image_name(path)}' of '{path}' is already used by "
                        f"'{owner}' in this batch",
                        image_path=path,
                    )
                claimed[image_name(path)] = path
                record = process_image_file(
                    path, resources, storage, executor, jobs, palette, write_pdf, job_id
                )
            except PixieStitchError as exc:
                if exc.image_path is None:
                    exc.image_path = str(path)
                logger.error("%s", exc)
                record = jobs.fail(job_id, str(exc), image=path.name)

            if record.failed and strict:
                for later_index, skipped in enumerate(image_paths[index + 1 :], start=index + 1):
                    skipped = Path(skipped)
                    jobs.skip(_batch_job_id(jobs, skipped, later_index), skipped.name)
                logger.error("Stopping batch after failure of %s", path)
                break

    return jobs.records()


__all__ = [
    "PreparedImage",
    "TaskOutcome",
    "pattern_set_tasks",
    "prepare_image",
    "process_image_file",
    "process_image_to_pattern",
    "run_batch",
    "run_tasks",
]
