"""Generate a tubesheet layout SVG and print a layout report.

Solves the minimum shell ID for a tube count (or lays out a fixed shell),
then draws every tube, the shell, the OTL and the centre lines.
Outputs tubesheet_<pattern>.svg unless -o is given.
"""
import os, sys, argparse, logging

# Ensure project root is on sys.path for package imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tubesheet.geometry import TubeSheetError, parse_pattern, fmt_sig3, fmt_mm
from tubesheet.field import min_tube_spacing
from tubesheet.sheet import TubeSheet, has_driver, compare_patterns
from drawing.scene import Scene, CircleShape, LineShape, build_scene, describe
from drawing.constants import (
    SVG_NS, SVG_HEIGHT, TITLE, LABEL_SCALE, LABEL_STYLE,
    DEFAULT_TUBE_OD, DEFAULT_PITCH_RATIO, DEFAULT_CLEARANCE, DEFAULT_MIN_TUBES,
)

logger = logging.getLogger(__name__)

# ============================================================
# SVG Helpers
# ============================================================

def to_svg(x, y):
    """Model (y up) to SVG (y down)."""
    return (x, -y)

def circle_el(out, c: CircleShape, element_id=None):
    cx, cy = to_svg(c.cx, c.cy)
    id_attr = f' id="{element_id}"' if element_id else ""
    out.append(f'<circle{id_attr} cx="{cx:.6f}" cy="{cy:.6f}" r="{c.d/2:.6f}" style="{c.style}"/>')

def line_el(out, ln: LineShape):
    x1, y1 = to_svg(ln.x1, ln.y1); x2, y2 = to_svg(ln.x2, ln.y2)
    out.append(f'<line x1="{x1:.6f}" y1="{y1:.6f}" x2="{x2:.6f}" y2="{y2:.6f}" style="{ln.style}"/>')

def label_el(out, c: CircleShape):
    """Tube number centred on its circle."""
    x, y = to_svg(c.cx, c.cy)
    out.append(f'<text x="{x:.6f}" y="{y:.6f}" text-anchor="middle" dominant-baseline="central"'
               f' font-size="{c.d*LABEL_SCALE:.4f}" style="{LABEL_STYLE}">{c.number}</text>')

def svg_viewbox(scene: Scene) -> str:
    b = scene.viewbox
    # y flips, so the top edge in SVG is the model's max_y
    return f"{b.min_x:.6f} {-b.max_y:.6f} {b.width:.6f} {b.height:.6f}"

# ============================================================
# SVG Rendering
# ============================================================

def render_svg(scene: Scene | None, labels=False):
    """Serialise a scene to an SVG document string.

    With no scene (nothing solved yet) an empty drawing is returned.
    """
    if scene is None:
        return f'<svg xmlns="{SVG_NS}" height="{SVG_HEIGHT}" role="img"><title>{TITLE}</title></svg>'

    out = []
    out.append(f'<svg xmlns="{SVG_NS}" viewBox="{svg_viewbox(scene)}" height="{SVG_HEIGHT}"'
               f' role="img" aria-labelledby="title desc">')
    out.append(f'<title id="title">{TITLE}</title>')
    out.append(f'<desc id="desc">{describe(scene.meta)}</desc>')

    # Tubes
    out.append('<g id="tubes">')
    for c in scene.tubes:
        circle_el(out, c, f"tube-{c.number}")
    out.append('</g>')

    if labels:
        out.append('<g id="tube-numbers">')
        for c in scene.tubes:
            label_el(out, c)
        out.append('</g>')

    # Boundaries and centre lines
    circle_el(out, scene.shell, "shell")
    circle_el(out, scene.otl, "otl")
    for ln in scene.crosshairs:
        line_el(out, ln)

    out.append('</svg>')
    return "\n".join(out)

def write_tubesheet_svg(sheet: TubeSheet, svg_path, labels=False):
    """Render *sheet* to *svg_path*; returns the scene (None if nothing was drawn)."""
    scene = build_scene(sheet)
    with open(svg_path, "w") as f:
        f.write(render_svg(scene, labels))
    return scene

# ============================================================
# Reports
# ============================================================

def print_report(sheet: TubeSheet):
    print(f"Layout:        {sheet.pattern}")
    print(f"Tube OD:       {fmt_mm(sheet.tube_od)}")
    print(f"Pitch:         {fmt_mm(sheet.pitch)}  (ratio {sheet.pitch_ratio})")
    print(f"Clearance:     {fmt_mm(sheet.clearance)}")
    if sheet.shell_id is not None:
        print(f"Shell ID:      {fmt_mm(sheet.shell_id)}")
    print(f"Min shell ID:  {fmt_mm(sheet.min_id)}")
    print(f"OTL:           {fmt_mm(sheet.otl)}")
    print(f"Tubes:         {fmt_sig3(sheet.num_tubes)}")
    field = sheet.tube_field
    if field and len(field) > 1:
        print(f"Min spacing:   {fmt_mm(min_tube_spacing(field))}")

def print_comparison(sheets):
    """One line per pattern: min shell ID, tube count, OTL."""
    print(f"  {'layout':<8s} {'min ID':>14s} {'tubes':>7s} {'OTL':>14s}")
    for pattern, sheet in sheets.items():
        if sheet is None:
            print(f"  {str(pattern):<8s} {'no layout':>14s}")
            continue
        print(f"  {str(pattern):<8s} {fmt_mm(sheet.min_id):>14s} {sheet.num_tubes:>7d}"
              f" {fmt_mm(sheet.otl):>14s}")

# ============================================================
# Main entry point
# ============================================================

def build_parser():
    p = argparse.ArgumentParser(
        prog="tubesheet-gen",
        description="Lay out a heat exchanger tubesheet and draw it as SVG.")
    p.add_argument("--tube-od", type=float, default=DEFAULT_TUBE_OD, help="tube outer diameter, mm")
    p.add_argument("--pitch-ratio", type=float, default=DEFAULT_PITCH_RATIO, help="pitch / tube OD")
    p.add_argument("--clearance", type=float, default=DEFAULT_CLEARANCE,
                   help="shell ID minus OTL, mm")
    p.add_argument("--pattern", default="30",
                   help="layout: 30, 45, 60, 90 or radial (default 30)")
    p.add_argument("--min-tubes", type=int, default=None,
                   help=f"tubes required (default {DEFAULT_MIN_TUBES} when no shell ID)")
    p.add_argument("--shell-id", type=float, default=None,
                   help="fixed shell ID, mm; overrides --min-tubes")
    p.add_argument("--compare", action="store_true",
                   help="solve every layout for --min-tubes and print a table")
    p.add_argument("--labels", action="store_true", help="number the tubes in the drawing")
    p.add_argument("-o", "--output", default=None, help="SVG path (default tubesheet_<pattern>.svg)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug")
    return p

def main(argv=None):
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    min_tubes = args.min_tubes
    if min_tubes is None and args.shell_id is None:
        min_tubes = DEFAULT_MIN_TUBES

    try:
        if args.compare:
            if min_tubes is None:
                print("Inputs incomplete: --compare needs --min-tubes", file=sys.stderr)
                return 2
            print_comparison(compare_patterns(args.clearance, args.tube_od, args.pitch_ratio, min_tubes))
            return 0

        pattern = parse_pattern(args.pattern)
        sheet = TubeSheet.build(args.clearance, args.tube_od, args.pitch_ratio, pattern,
                                min_tubes=min_tubes, shell_id=args.shell_id)
    except TubeSheetError as e:
        logger.error("%s", e)
        return 1

    if not has_driver(sheet.config):
        print("Inputs incomplete: give --min-tubes or --shell-id", file=sys.stderr)
        return 2
    if not sheet.tube_field:
        logger.error("No tube field fits shell ID %s", sheet.shell_id)
        return 1

    svg_path = args.output or f"tubesheet_{pattern}.svg"
    write_tubesheet_svg(sheet, svg_path, args.labels)
    print(f"Tubesheet written to {svg_path}")
    print_report(sheet)
    return 0


if __name__ == "__main__":
    sys.exit(main())
