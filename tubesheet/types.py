"""Shared type definitions for the tubesheet layout engine."""
from typing import Literal, NamedTuple

LayoutPattern = Literal[30, 45, 60, 90, "radial"]
OffsetOption = bool | Literal["AUTO"]

PATTERNS: tuple[LayoutPattern, ...] = (30, 45, 60, 90, "radial")
AUTO: Literal["AUTO"] = "AUTO"

class Tube(NamedTuple):
    x: float; y: float

TubeField = list[Tube]

class StepVector(NamedTuple):
    """Grid stepping for one pattern: column step, row step, odd-row stagger."""
    dx: float; dy: float; C: float
