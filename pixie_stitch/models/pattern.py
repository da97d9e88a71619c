from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


class CanvasGrid(BaseModel):
    width: int
    height: int


class ThreadRef(BaseModel):
    brand: Literal["DMC"] = "DMC"
    code: str
    rgb: Tuple[int, int, int]


class LegendEntry(BaseModel):
    index: int
    thread: ThreadRef
    hex: str
    count: int
    percent: float


class SegmentInfo(BaseModel):
    number: int
    column: int
    row: int
    x: int
    y: int
    width: int
    height: int
    origin_absolute: Tuple[int, int]
    origin_centered: Tuple[int, int]


class PatternSummary(BaseModel):
    image: str
    canvasGrid: CanvasGrid
    palette_size: int
    total_stitches: int
    legend: List[LegendEntry]
    segments: List[SegmentInfo] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list)
    centered_origin: Optional[Tuple[int, int]] = None
