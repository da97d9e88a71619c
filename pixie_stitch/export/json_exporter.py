from typing import Iterable, Sequence

from ..core.color_mapping import ColorMapping
from ..core.legend import build_legend
from ..core.segments import Segment, image_center, logical_origin
from ..models.pattern import CanvasGrid, LegendEntry, PatternSummary, SegmentInfo, ThreadRef


def build_summary(
    image_name: str,
    width: int,
    height: int,
    mapping: ColorMapping,
    segments: Sequence[Segment],
    files: Iterable[str] = (),
) -> PatternSummary:
    legend = [
        LegendEntry(
            index=index,
            thread=ThreadRef(brand=row["brand"], code=row["code"], rgb=row["rgb"]),
            hex="#{:02x}{:02x}{:02x}".format(*row["rgb"]),
            count=row["count"],
            percent=row["percent"],
        )
        for index, row in enumerate(build_legend(mapping), start=1)
    ]
    segment_infos = []
    if len(segments) > 1:
        for segment in segments:
            segment_infos.append(
                SegmentInfo(
                    number=segment.number,
                    column=segment.column,
                    row=segment.row,
                    x=segment.pixel_x,
                    y=segment.pixel_y,
                    width=segment.width,
                    height=segment.height,
                    origin_absolute=logical_origin(
                        "absolute", width, height, segment.pixel_x, segment.pixel_y
                    ),
                    origin_centered=logical_origin(
                        "centered", width, height, segment.pixel_x, segment.pixel_y
                    ),
                )
            )
    return PatternSummary(
        image=image_name,
        canvasGrid=CanvasGrid(width=width, height=height),
        palette_size=len(mapping),
        total_stitches=sum(entry.count for entry in legend),
        legend=legend,
        segments=segment_infos,
        files=sorted(files),
        centered_origin=image_center(width, height),
    )


def export_json(summary: PatternSummary) -> str:
    return summary.model_dump_json(indent=2)
