"""Tubesheet aggregate: inputs in, derived layout out."""
import logging, math
from typing import NamedTuple

from .types import Tube, LayoutPattern, PATTERNS
from .geometry import (
    TubeSheetError, GeometryInfeasible, check_inputs, parse_pattern,
)
from .field import generate_tube_field, tube_count, field_otl
from .solver import find_min_diameter

logger = logging.getLogger(__name__)


class TubeSheetConfig(NamedTuple):
    """Layout inputs. shell_id, when given, wins over min_tubes for the tube count."""
    clearance: float
    tube_od: float
    pitch_ratio: float
    pattern: LayoutPattern
    min_tubes: int | None = None
    shell_id: float | None = None


class TubeSheetResult(NamedTuple):
    """Derived layout. All None (and 0 tubes) when no driver is set."""
    min_id: float | None
    num_tubes: int
    tube_field: list[Tube] | None
    otl: float | None


EMPTY_RESULT = TubeSheetResult(min_id=None, num_tubes=0, tube_field=None, otl=None)


def _given(value) -> bool:
    """A driver counts as supplied when it is a positive, finite number."""
    return value is not None and not isinstance(value, bool) and math.isfinite(value) and value > 0


def has_driver(config: TubeSheetConfig) -> bool:
    """True when a shell ID or a tube count is set to drive the layout."""
    return _given(config.shell_id) or _given(config.min_tubes)


def validate_config(config: TubeSheetConfig) -> TubeSheetConfig:
    """Check tube geometry and normalise the pattern tag.

    Raises InvalidLayout or GeometryInfeasible.
    """
    check_inputs(config.clearance, config.tube_od, config.pitch_ratio)
    pattern = parse_pattern(config.pattern)
    if _given(config.min_tubes) and int(config.min_tubes) != config.min_tubes:
        raise GeometryInfeasible(f"Tube count must be an integer, got {config.min_tubes!r}")
    return config._replace(pattern=pattern)


def derive_results(config: TubeSheetConfig) -> TubeSheetResult:
    """Min ID, tube count, tube field and OTL for one set of inputs.

    Computed as a whole, in dependency order. A fixed shell ID gives the
    count; otherwise the minimum ID for min_tubes is solved first and the
    field is laid out in it. A single tube sits on the shell axis for every
    pattern, radial included. Solver exhaustion propagates.
    """
    return _derive(validate_config(config))


def _derive(config: TubeSheetConfig) -> TubeSheetResult:
    c, od, pr, pattern = config.clearance, config.tube_od, config.pitch_ratio, config.pattern

    if _given(config.shell_id):
        shell_id = config.shell_id
        field = generate_tube_field(shell_id, c, od, pr, pattern)
        num_tubes = tube_count(shell_id, c, od, pr, pattern)
        min_id = find_min_diameter(num_tubes, c, od, pr, pattern) if num_tubes else None
    elif _given(config.min_tubes):
        min_id = find_min_diameter(int(config.min_tubes), c, od, pr, pattern)
        field = generate_tube_field(min_id, c, od, pr, pattern)
        if field is None and config.min_tubes == 1:
            # a ring needs two tubes
            field = [Tube(0.0, 0.0)]
        num_tubes = len(field) if field else 0
    else:
        logger.debug("No shell ID or tube count given; nothing to derive")
        return EMPTY_RESULT

    otl = field_otl(field, od) if field else None
    return TubeSheetResult(min_id=min_id, num_tubes=num_tubes, tube_field=field, otl=otl)


class TubeSheet(NamedTuple):
    """A config paired with its derived result.

    Changing an input means building a new sheet with replace(), which
    recomputes every derived value.
    """
    config: TubeSheetConfig
    result: TubeSheetResult

    @classmethod
    def build(cls, clearance: float, tube_od: float, pitch_ratio: float,
              pattern: LayoutPattern, min_tubes: int | None = None,
              shell_id: float | None = None) -> "TubeSheet":
        config = validate_config(TubeSheetConfig(
            clearance, tube_od, pitch_ratio, pattern, min_tubes, shell_id))
        return cls(config, _derive(config))

    def replace(self, **changes) -> "TubeSheet":
        return TubeSheet.build(*self.config._replace(**changes))

    clearance = property(lambda self: self.config.clearance)
    tube_od = property(lambda self: self.config.tube_od)
    pitch_ratio = property(lambda self: self.config.pitch_ratio)
    pattern = property(lambda self: self.config.pattern)
    shell_id = property(lambda self: self.config.shell_id)
    min_id = property(lambda self: self.result.min_id)
    num_tubes = property(lambda self: self.result.num_tubes)
    otl = property(lambda self: self.result.otl)

    @property
    def tube_field(self) -> list[Tube] | None:
        """Copy of the tube field; the result itself is never handed out for mutation."""
        field = self.result.tube_field
        return None if field is None else list(field)

    @property
    def pitch(self) -> float:
        return self.config.tube_od * self.config.pitch_ratio

    @property
    def resolved_shell_id(self) -> float | None:
        """Shell ID to draw: the fixed shell ID when valid, else the minimum ID."""
        if _given(self.config.shell_id):
            return self.config.shell_id
        return self.result.min_id


def compare_patterns(clearance: float, tube_od: float, pitch_ratio: float,
                     min_tubes: int) -> dict[LayoutPattern, TubeSheet | None]:
    """Solve every pattern for the same target; None where a pattern has no layout."""
    sheets = {}
    for pattern in PATTERNS:
        try:
            sheets[pattern] = TubeSheet.build(clearance, tube_od, pitch_ratio, pattern, min_tubes)
        except TubeSheetError as e:
            logger.warning("%s layout: %s", pattern, e)
            sheets[pattern] = None
    return sheets
