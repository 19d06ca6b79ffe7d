"""Tube field generation, OTL, minimum shell diameter, and the tubesheet aggregate."""

from .types import Tube, TubeField, LayoutPattern, OffsetOption, StepVector, PATTERNS, AUTO
from .geometry import (
    TubeSheetError, InvalidLayout, GeometryInfeasible, InvalidField,
    NoFeasibleLayout, MaxIterationsExceeded, SolverExhausted,
    round_up, round_to, fits, check_inputs, check_shell, parse_pattern,
    layout_constants, fmt_sig3, fmt_mm,
)
from .memo import ResultCache, memoize
from .field import (
    generate_tube_field, tube_count, field_otl, tube_field_otl,
    radial_field, apply_symmetry, min_tube_spacing, FIELD_CACHE,
)
from .solver import find_min_diameter, SOLVER_CACHE
from .sheet import (
    TubeSheetConfig, TubeSheetResult, TubeSheet,
    has_driver, validate_config, derive_results, compare_patterns,
)


def clear_caches() -> None:
    """Drop every memoised field and diameter."""
    FIELD_CACHE.clear()
    SOLVER_CACHE.clear()
