"""Error types, rounding, input checks, pitch grid constants, and formatting."""
import math, sys
from .types import LayoutPattern, PATTERNS, StepVector

# ============================================================
# Error Types
# ============================================================
class TubeSheetError(ValueError):
    """Base class for tubesheet layout failures."""

class InvalidLayout(TubeSheetError):
    """Unrecognised layout pattern tag."""

class GeometryInfeasible(TubeSheetError):
    """Tube, shell and clearance cannot form a layout."""

class InvalidField(TubeSheetError):
    """Empty or degenerate tube field."""

class NoFeasibleLayout(TubeSheetError):
    """Neither offset option produced a minimum diameter."""

class MaxIterationsExceeded(TubeSheetError):
    """Diameter search did not converge within its iteration cap."""

class SolverExhausted(TubeSheetError):
    """All retries of the minimum diameter search failed."""

# ============================================================
# Precision
# ============================================================
DIAMETER_DECIMALS = 8   # shell diameters
OTL_DECIMALS = 11       # outer tube limits and admission tests

def round_up(value: float, decimals: int) -> float:
    """Round toward +inf at the given number of decimal places.

    A scaled value within a few ulps of an integer is taken as that integer,
    so 19.05 stays 19.05 instead of creeping up to 19.05000001.
    """
    m = 10 ** decimals
    scaled = value * m
    nearest = round(scaled)
    if abs(scaled - nearest) <= 8 * sys.float_info.epsilon * abs(scaled):
        scaled = nearest
    return math.ceil(scaled) / m

def round_to(value: float, decimals: int = 0) -> float:
    """Round half up, nudged by machine epsilon so 1.005 -> 1.01."""
    p = 10 ** decimals
    return math.floor(value * p * (1 + sys.float_info.epsilon) + 0.5) / p

def fits(extent: float, limit: float) -> bool:
    """extent <= limit, compared at OTL precision."""
    return round(extent, OTL_DECIMALS) <= round(limit, OTL_DECIMALS)

# ============================================================
# Input Checks
# ============================================================
def check_inputs(clearance: float, tube_od: float, pitch_ratio: float) -> None:
    """Reject tube geometry that no shell could hold. Raises GeometryInfeasible."""
    if not tube_od > 0:
        raise GeometryInfeasible(f"Tube OD must be greater than 0, got {tube_od}")
    if not pitch_ratio >= 1:
        raise GeometryInfeasible(f"Pitch ratio must be 1 or greater, got {pitch_ratio}")
    if not clearance >= 0:
        raise GeometryInfeasible(f"OTL clearance must be 0 or greater, got {clearance}")

def check_shell(shell_id: float, clearance: float, tube_od: float) -> None:
    """Reject a shell too small for a single tube. Raises GeometryInfeasible."""
    if not shell_id > 0:
        raise GeometryInfeasible(f"Shell ID must be greater than 0, got {shell_id}")
    if not fits(tube_od, shell_id - clearance):
        raise GeometryInfeasible(
            f"Tube OD {tube_od} exceeds max allowable OTL {shell_id - clearance}")

def parse_pattern(value) -> LayoutPattern:
    """Normalise a pattern tag: 30/45/60/90, "radial", their string forms, or 0 for radial."""
    if isinstance(value, str):
        v = value.strip().lower()
        if v == "radial":
            return "radial"
        try:
            value = float(v)
        except ValueError:
            raise InvalidLayout(f"Unknown layout pattern: {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidLayout(f"Unknown layout pattern: {value!r}")
    if value == 0:
        return "radial"
    for p in PATTERNS[:-1]:
        if value == p:
            return p
    raise InvalidLayout(f"Unknown layout pattern: {value!r}")

# ============================================================
# Pitch Grid Constants
# ============================================================
_SIN60 = math.sqrt(3) / 2
_COS45 = 1 / math.sqrt(2)

def layout_constants(pitch: float, pattern: LayoutPattern) -> StepVector:
    """Row/column steps for a grid pattern.

    dx is the step between tubes in a row, dy the step between rows and
    C the stagger applied to odd rows. Radial layouts have no grid and
    raise InvalidLayout like any unknown tag.
    """
    if pattern == 30:
        return StepVector(dx=pitch, dy=pitch*_SIN60, C=pitch/2)
    if pattern == 60:
        dx = pitch*_SIN60*2
        return StepVector(dx=dx, dy=pitch/2, C=dx/2)
    if pattern == 90:
        return StepVector(dx=pitch, dy=pitch, C=0.0)
    if pattern == 45:
        dx = pitch/_COS45
        return StepVector(dx=dx, dy=dx/2, C=dx/2)
    raise InvalidLayout(f"No pitch grid for layout pattern {pattern!r}")

# ============================================================
# Formatting Helpers
# ============================================================
def fmt_sig3(x: float) -> str:
    """Format for display: nearest integer above 100, else 3 significant figures.

    Both forms carry thousands separators: 1234.4 -> '1,234', 0.012345 -> '0.0123',
    19.049 -> '19'.
    """
    if x > 100:
        return f"{int(math.floor(x + 0.5)):,}"
    v = float(f"{x:.3g}")
    if v.is_integer():
        return f"{int(v):,}"
    return f"{v:,}"

def fmt_mm(x: float | None, decimals: int = 2) -> str:
    """Millimetre value rounded for reports; '-' when missing."""
    if x is None:
        return "-"
    return f"{round_to(x, decimals):,.{decimals}f} mm"
