"""In-memory scene graph for a tubesheet drawing.

Model coordinates: mm, origin at the shell centre, y up. Serialisation to
SVG lives in gen_tubesheet.py.
"""
import math
from typing import NamedTuple

import numpy as np

from tubesheet.types import Tube
from tubesheet.geometry import round_to
from tubesheet.sheet import TubeSheet
from drawing.constants import (
    TUBE_STYLE, SHELL_STYLE, OTL_STYLE, CROSSHAIR_STYLE,
    VIEWBOX_PADDING, CROSSHAIR_EXTENT, META_DECIMALS,
)


class BBox(NamedTuple):
    min_x: float; min_y: float; max_x: float; max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


class CircleShape(NamedTuple):
    cx: float; cy: float; d: float
    style: str
    number: int | None = None     # 1-based tube number; None for boundaries


class LineShape(NamedTuple):
    x1: float; y1: float; x2: float; y2: float
    style: str


class SceneMeta(NamedTuple):
    """Drawing description; lengths rounded to 2 dp."""
    shell_id: float
    otl: float
    tube_od: float
    pitch: float
    pitch_ratio: float
    pattern: str
    num_tubes: int


class Scene(NamedTuple):
    tubes: list[CircleShape]
    shell: CircleShape
    otl: CircleShape
    crosshairs: list[LineShape]
    viewbox: BBox
    meta: SceneMeta

# ============================================================
# Bounding Boxes
# ============================================================
def circles_bbox(circles: list[CircleShape]) -> BBox:
    """Bounding box of a set of circles (each may have its own diameter)."""
    a = np.asarray([(c.cx, c.cy, c.d / 2) for c in circles], dtype=float)
    return BBox(float(np.min(a[:, 0] - a[:, 2])), float(np.min(a[:, 1] - a[:, 2])),
                float(np.max(a[:, 0] + a[:, 2])), float(np.max(a[:, 1] + a[:, 2])))

def lines_bbox(lines: list[LineShape]) -> BBox:
    xs = [v for ln in lines for v in (ln.x1, ln.x2)]
    ys = [v for ln in lines for v in (ln.y1, ln.y2)]
    return BBox(min(xs), min(ys), max(xs), max(ys))

def union_bbox(boxes: list[BBox]) -> BBox:
    return BBox(min(b.min_x for b in boxes), min(b.min_y for b in boxes),
                max(b.max_x for b in boxes), max(b.max_y for b in boxes))

def pad_bbox(b: BBox, fraction: float) -> BBox:
    """Scale every bound about the origin by 1 + fraction (the scene is origin-centred)."""
    k = 1 + fraction
    return BBox(b.min_x * k, b.min_y * k, b.min_x * k + b.width * k, b.min_y * k + b.height * k)

# ============================================================
# Shapes
# ============================================================
def tube_circles(field: list[Tube], tube_od: float) -> list[CircleShape]:
    """One circle per tube, numbered 1..n in field order."""
    return [CircleShape(t.x, t.y, tube_od, TUBE_STYLE, i + 1) for i, t in enumerate(field)]

def centred_cross(diameter: float, extent: float = CROSSHAIR_EXTENT) -> list[LineShape]:
    """Horizontal and vertical centre lines spanning *extent* x the radius each way."""
    r = diameter / 2 * extent
    return [LineShape(-r, 0.0, r, 0.0, CROSSHAIR_STYLE),
            LineShape(0.0, -r, 0.0, r, CROSSHAIR_STYLE)]

def scene_meta(sheet: TubeSheet, shell_id: float) -> SceneMeta:
    return SceneMeta(
        shell_id=round_to(shell_id, META_DECIMALS),
        otl=round_to(sheet.otl, META_DECIMALS),
        tube_od=round_to(sheet.tube_od, META_DECIMALS),
        pitch=round_to(sheet.pitch, META_DECIMALS),
        pitch_ratio=round_to(sheet.pitch_ratio, META_DECIMALS),
        pattern=str(sheet.pattern),
        num_tubes=sheet.num_tubes,
    )

def describe(meta: SceneMeta) -> str:
    return (f"Shell ID: {meta.shell_id} mm; OTL: {meta.otl} mm; Tube OD: {meta.tube_od} mm;"
            f" Pitch: {meta.pitch} mm; Pitch Ratio: {meta.pitch_ratio};"
            f" Pitch Layout: {meta.pattern}; Number of Tubes: {meta.num_tubes};")

def build_scene(sheet: TubeSheet, padding: float = VIEWBOX_PADDING) -> Scene | None:
    """Scene for a solved sheet; None when there is nothing to draw."""
    field = sheet.tube_field
    shell_id = sheet.resolved_shell_id
    if not field or not sheet.otl or shell_id is None or not math.isfinite(shell_id):
        return None

    tubes = tube_circles(field, sheet.tube_od)
    shell = CircleShape(0.0, 0.0, shell_id, SHELL_STYLE)
    otl = CircleShape(0.0, 0.0, sheet.otl, OTL_STYLE)
    cross = centred_cross(shell_id)
    viewbox = pad_bbox(union_bbox([
        circles_bbox([shell]), circles_bbox([otl]), circles_bbox(tubes), lines_bbox(cross),
    ]), padding)
    return Scene(tubes=tubes, shell=shell, otl=otl, crosshairs=cross,
                 viewbox=viewbox, meta=scene_meta(sheet, shell_id))
