"""Minimum shell diameter search for a target tube count."""
import logging, math

from .types import LayoutPattern, OffsetOption, AUTO
from .geometry import (
    TubeSheetError, GeometryInfeasible, MaxIterationsExceeded,
    NoFeasibleLayout, SolverExhausted,
    DIAMETER_DECIMALS, round_up, check_inputs, layout_constants,
)
from .field import tube_count, tube_field_otl
from .memo import ResultCache, memoize

logger = logging.getLogger(__name__)

BETA = 1.1            # diameter growth factor while the target is unbracketed
MAX_ITERATIONS = 100
MAX_RETRIES = 5
PACKING_DENSITY = {30: 0.84, 60: 0.84, 45: 0.61, 90: 0.61}

SOLVER_CACHE = ResultCache()

_STEP = 10 ** -DIAMETER_DECIMALS   # one unit in the last diameter decimal

# ============================================================
# Search Helpers
# ============================================================
def _initial_guess(
    min_tubes: int, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: bool,
) -> float:
    """Packing-density estimate of the shell diameter, floored at the smallest useful shell."""
    pitch = tube_od * pitch_ratio
    d = pitch * math.sqrt(min_tubes / PACKING_DENSITY[pattern]) + clearance
    if not offset:
        floor = tube_od + clearance + 0.1
    elif pattern in (30, 60):
        floor = 2 * pitch + clearance + 0.1
    else:
        floor = math.hypot(pitch, pitch / 2) * 2 + clearance + 0.1
    return max(d, floor)

def _probe(d: float, min_tubes: int, clearance: float, *args) -> tuple[float, int]:
    """Count tubes at *d*.

    A diameter reaching *min_tubes* snaps down to the tightest shell (8 dp)
    holding the same field. One short of the target comes back unchanged,
    as a lower bound at the diameter actually probed.
    """
    n = tube_count(d, clearance, *args)
    if n < min_tubes:
        return d, n
    d = round_up(tube_field_otl(d, clearance, *args) + clearance, DIAMETER_DECIMALS)
    return d, tube_count(d, clearance, *args)

def _search(
    min_tubes: int, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: bool,
) -> float:
    """Smallest diameter giving at least *min_tubes* for one fixed offset.

    Raises MaxIterationsExceeded if the bracket does not close in time.
    """
    args = (clearance, tube_od, pitch_ratio, pattern, offset)

    d = _initial_guess(min_tubes, *args)
    for _ in range(MAX_ITERATIONS):
        if tube_field_otl(d, *args) is not None:
            break
        d *= BETA
    else:
        raise MaxIterationsExceeded(f"No {pattern} tube field below diameter {d:.3f}")

    d_old, n_old = _probe(d, min_tubes, *args)
    d_new, n_new = _probe(d_old * BETA, min_tubes, *args)
    d_best = None    # smallest diameter seen reaching the target
    d_under = None   # largest diameter seen short of the target

    for iteration in range(MAX_ITERATIONS):
        for d_i, n_i in ((d_old, n_old), (d_new, n_new)):
            if n_i >= min_tubes:
                if d_best is None or d_i < d_best:
                    d_best = d_i
            elif d_under is None or d_i > d_under:
                d_under = d_i
        logger.debug("iter %d: D=%.8f n=%d (target %d, bracket %s..%s)",
                     iteration, d_new, n_new, min_tubes, d_under, d_best)

        if n_new == min_tubes:
            return d_new
        if d_best is not None:
            if d_under is not None and d_best - d_under <= _STEP:
                return d_best
            if iteration >= 1:
                # local minimum: one step smaller loses tubes below the target
                d_check, n_check = _probe(d_best - _STEP, min_tubes, *args)
                if n_check < min_tubes:
                    return d_best
                d_best = min(d_best, d_check)

        if d_best is None:
            d_next = d_under * BETA
        elif d_under is None:
            d_next = d_best / BETA
        else:
            d_next = (d_under + d_best) / 2
        d_old, n_old = d_new, n_new
        d_new, n_new = _probe(d_next, min_tubes, *args)

    raise MaxIterationsExceeded(
        f"{min_tubes} tubes, {pattern} layout: no convergence in {MAX_ITERATIONS} iterations")

@memoize(SOLVER_CACHE)
def _min_diameter(
    min_tubes: int, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: bool,
) -> float:
    """Fixed-offset search, retried with one more tube after each failure.

    Retrying with a larger target works around count jumps the search
    cannot land on; the diameter returned then fits more tubes than asked.
    """
    target = min_tubes
    for attempt in range(MAX_RETRIES + 1):
        try:
            return _search(target, clearance, tube_od, pitch_ratio, pattern, offset)
        except TubeSheetError as e:
            if attempt == MAX_RETRIES:
                raise SolverExhausted(
                    f"Min ID for {min_tubes} tubes not found after {MAX_RETRIES} retries") from e
            target += 1
            logger.info("Retry %d/%d with target %d tubes: %s", attempt + 1, MAX_RETRIES, target, e)

# ============================================================
# Public Entry Point
# ============================================================
def find_min_diameter(
    min_tubes: int, clearance: float, tube_od: float, pitch_ratio: float,
    pattern: LayoutPattern, offset: OffsetOption = AUTO,
) -> float:
    """Smallest shell ID (8 dp) whose tube field holds at least *min_tubes*.

    One tube needs tube OD plus clearance; a radial ring has a closed form.
    Grid patterns search each offset; "AUTO" takes the smaller of the
    two and raises NoFeasibleLayout if both fail. Bad inputs raise
    GeometryInfeasible or InvalidLayout before any search.
    """
    check_inputs(clearance, tube_od, pitch_ratio)
    if isinstance(min_tubes, bool) or not min_tubes >= 1 or int(min_tubes) != min_tubes:
        raise GeometryInfeasible(f"Tube count must be a positive integer, got {min_tubes!r}")
    min_tubes = int(min_tubes)

    if min_tubes == 1:
        return round_up(tube_od + clearance, DIAMETER_DECIMALS)

    pitch = tube_od * pitch_ratio
    if pattern == "radial":
        return pitch / math.sin(math.pi / min_tubes) + tube_od + clearance

    layout_constants(pitch, pattern)
    if offset != AUTO:
        return _min_diameter(min_tubes, clearance, tube_od, pitch_ratio, pattern, bool(offset))

    found = []
    for opt in (True, False):
        try:
            found.append(_min_diameter(min_tubes, clearance, tube_od, pitch_ratio, pattern, opt))
        except SolverExhausted as e:
            logger.warning("offset=%s: %s", opt, e)
    if not found:
        raise NoFeasibleLayout(f"No {pattern} layout for {min_tubes} tubes with either offset")
    return min(found)
