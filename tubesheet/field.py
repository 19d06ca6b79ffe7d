"""Tube field generation, outer tube limit, and spacing checks."""
import logging, math

import numpy as np
from scipy.spatial import cKDTree

from .types import Tube, TubeField, LayoutPattern, OffsetOption, StepVector, AUTO
from .geometry import (
    TubeSheetError, GeometryInfeasible, InvalidField,
    DIAMETER_DECIMALS, OTL_DECIMALS, round_up, fits,
    check_inputs, check_shell, layout_constants,
)
from .memo import ResultCache, memoize

logger = logging.getLogger(__name__)

MAX_SCAN_ITERATIONS = 999_999

FIELD_CACHE = ResultCache()

# ============================================================
# Grid Scan and Symmetry
# ============================================================
def _scan_quadrant(max_otl: float, tube_od: float, step: StepVector, offset: float) -> list[Tube]:
    """Tubes of the upper half-plane rows, scanned outward from the centre line.

    A row ends at its first rejected position; rows end once y leaves the OTL.
    """
    quarter = []
    for j in range(MAX_SCAN_ITERATIONS):
        y = j * step.dy
        if abs(y) > max_otl:
            break
        c_mult = j % 2
        for i in range(MAX_SCAN_ITERATIONS):
            x = step.C * c_mult + i * step.dx - offset
            if abs(x) > max_otl or not fits(2*math.hypot(x, y) + tube_od, max_otl):
                break
            quarter.append(Tube(x, y))
    return quarter

def _mirror_x(field: TubeField) -> list[Tube]:
    """Reflect across the vertical axis (x -> -x); +0.0 folds -0.0 away."""
    return [Tube(-t.x + 0.0, t.y) for t in field]

def _mirror_y(field: TubeField) -> list[Tube]:
    """Reflect across the horizontal axis (y -> -y)."""
    return [Tube(t.x, -t.y + 0.0) for t in field]

def _merge_unique(*fields: TubeField) -> list[Tube]:
    """Concatenate fields, dropping exact coordinate repeats (first one wins)."""
    return list(dict.fromkeys(t for f in fields for t in f))

def apply_symmetry(quarter: TubeField) -> list[Tube]:
    """Complete a quarter field by 4-fold mirror symmetry, sorted by (y, x)."""
    half = _merge_unique(quarter, _mirror_x(quarter))
    full = _merge_unique(quarter, _mirror_x(quarter), _mirror_y(half))
    return sorted(full, key=lambda t: (t.y, t.x))

# ============================================================
# Radial Rings
# ============================================================
def radial_field(shell_id: float, clearance: float, tube_od: float, pitch_ratio: float) -> list[Tube]:
    """Single ring of equally pitched tubes, tube 0 at the top, then clockwise.

    Raises GeometryInfeasible if the ring cannot hold two tubes.
    """
    pitch = tube_od * pitch_ratio
    span = shell_id - clearance - tube_od   # widest ring centre diameter
    if not span > 0 or round(pitch / span, OTL_DECIMALS) > 1:
        raise GeometryInfeasible(
            f"Pitch {pitch} exceeds ring diameter {span}; no radial layout")
    n = math.floor(round(math.pi / math.asin(min(pitch / span, 1.0)), DIAMETER_DECIMALS))
    r = pitch / math.sin(math.pi / n) / 2
    step = 2 * math.pi / n
    field = [Tube(0.0, r)]
    for i in range(1, n):
        angle = math.pi / 2 - step * i
        field.append(Tube(r * math.cos(angle), r * math.sin(angle)))
    return field

# ============================================================
# Tube Field Generator
# ============================================================
@memoize(FIELD_CACHE)
def _tube_field(
    shell_id: float, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: OffsetOption = AUTO,
) -> tuple[Tube, ...] | None:
    """Immutable, cached field; None when no layout exists for these inputs."""
    try:
        check_inputs(clearance, tube_od, pitch_ratio)
        check_shell(shell_id, clearance, tube_od)
        args = (shell_id, clearance, tube_od, pitch_ratio, pattern)
        shell_id = round_up(shell_id, DIAMETER_DECIMALS)

        if pattern == "radial":
            return tuple(radial_field(shell_id, clearance, tube_od, pitch_ratio))

        step = layout_constants(tube_od * pitch_ratio, pattern)
        if offset == AUTO:
            offset = tube_count(*args, offset=True) > tube_count(*args, offset=False)
        quarter = _scan_quadrant(shell_id - clearance, tube_od, step,
                                 step.dx / 2 if offset else 0.0)
        return tuple(apply_symmetry(quarter))
    except (TubeSheetError, ValueError, ZeroDivisionError) as e:
        logger.warning("No tube field for shell ID %r, %r layout: %s", shell_id, pattern, e)
        return None

def generate_tube_field(
    shell_id: float, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: OffsetOption = AUTO,
) -> TubeField | None:
    """Tube centres that fit inside *shell_id* less *clearance*.

    offset True staggers row 0 by half a column step, False centres a
    tube on the origin, "AUTO" takes whichever packs strictly more tubes
    (ties keep the centred grid). Returns None, after logging, when the
    inputs admit no layout. The returned list is a fresh copy.
    """
    if offset not in (True, False, AUTO):
        raise ValueError(f"offset must be True, False or 'AUTO', got {offset!r}")
    field = _tube_field(shell_id, clearance, tube_od, pitch_ratio, pattern, offset)
    return None if field is None else list(field)

def tube_count(
    shell_id: float, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: OffsetOption = AUTO,
) -> int:
    """Number of tubes in the generated field; 0 when there is none."""
    field = _tube_field(shell_id, clearance, tube_od, pitch_ratio, pattern, offset)
    return len(field) if field else 0

# ============================================================
# Outer Tube Limit
# ============================================================
def field_otl(field: TubeField, tube_od: float) -> float:
    """Smallest centred circle containing every tube, rounded up to 11 dp.

    Raises InvalidField for an empty field or a zero diameter.
    """
    if not field:
        raise InvalidField("Empty tube field")
    pts = np.asarray(field, dtype=float)
    d = float(np.max(2 * np.hypot(pts[:, 0], pts[:, 1]) + tube_od))
    if d == 0:
        raise InvalidField("Tube field has zero outer diameter")
    return round_up(d, OTL_DECIMALS)

def tube_field_otl(
    shell_id: float, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: OffsetOption = AUTO,
) -> float | None:
    """OTL of the field generated for *shell_id*; None when there is no usable field."""
    field = _tube_field(shell_id, clearance, tube_od, pitch_ratio, pattern, offset)
    if field is None:
        return None
    try:
        return field_otl(field, tube_od)
    except InvalidField as e:
        logger.debug("No OTL for shell ID %r, %r layout: %s", shell_id, pattern, e)
        return None

# ============================================================
# Spacing Check
# ============================================================
def min_tube_spacing(field: TubeField) -> float:
    """Smallest centre-to-centre distance in the field (inf below two tubes)."""
    if len(field) < 2:
        return math.inf
    pts = np.asarray(field, dtype=float)
    dist, _ = cKDTree(pts).query(pts, k=2)
    return float(dist[:, 1].min())
