"""Regenerate the tubesheet SVG of every layout pattern for one input set.

Solves each pattern for the example inputs in drawing/constants.py and
writes tubesheet_<pattern>.svg next to this file (or into out_dir).
A pattern with no layout is reported and skipped.
"""
import os, logging

from tubesheet.types import PATTERNS
from tubesheet.geometry import TubeSheetError
from tubesheet.sheet import TubeSheet
from drawing.gen_tubesheet import write_tubesheet_svg
from drawing.constants import (
    DEFAULT_TUBE_OD, DEFAULT_PITCH_RATIO, DEFAULT_CLEARANCE, DEFAULT_MIN_TUBES,
)

_DIR = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger(__name__)


def main(out_dir=None, min_tubes=DEFAULT_MIN_TUBES):
    """Write one SVG per pattern; returns {pattern: path} for those written."""
    out_dir = out_dir or _DIR
    written = {}
    for pattern in PATTERNS:
        try:
            sheet = TubeSheet.build(DEFAULT_CLEARANCE, DEFAULT_TUBE_OD, DEFAULT_PITCH_RATIO,
                                    pattern, min_tubes=min_tubes)
        except TubeSheetError as e:
            logger.warning("%s layout skipped: %s", pattern, e)
            continue
        svg_path = os.path.join(out_dir, f"tubesheet_{pattern}.svg")
        write_tubesheet_svg(sheet, svg_path)
        written[pattern] = svg_path
        print(f"  {str(pattern):<7s} {sheet.num_tubes:>5d} tubes  ->  {os.path.relpath(svg_path, out_dir)}")

    print("done.")
    return written


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()
