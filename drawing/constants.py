"""Named constants for tubesheet drawings.

Lengths in mm. Styles are SVG style strings; strokes do not scale with the
drawing so a 5 m shell and a 50 mm shell read the same on screen.
"""

SVG_NS = "http://www.w3.org/2000/svg"
SVG_HEIGHT = "100dvh"
TITLE = "Tubesheet Layout Drawing"

VIEWBOX_PADDING = 0.1             # fraction added around the union of all shapes
CROSSHAIR_EXTENT = 1.1            # crosshair half-length / shell radius
LABEL_SCALE = 0.35                # tube number font size / tube OD
META_DECIMALS = 2                 # rounding of lengths in the drawing description

TUBE_STYLE = "stroke:black; fill:none; stroke-width:1; vector-effect:non-scaling-stroke;"
SHELL_STYLE = "stroke:black; fill:none; stroke-width:2; vector-effect:non-scaling-stroke;"
OTL_STYLE = ("stroke:black; fill:none; stroke-dasharray:8 4; stroke-width:0.5;"
             " vector-effect:non-scaling-stroke;")
CROSSHAIR_STYLE = OTL_STYLE
LABEL_STYLE = "fill:black; font-family:Arial;"

# Example inputs: 3/4" tubes on a 1.25 pitch ratio, 3.2 mm OTL clearance
DEFAULT_TUBE_OD = 19.05
DEFAULT_PITCH_RATIO = 1.25
DEFAULT_CLEARANCE = 3.2
DEFAULT_MIN_TUBES = 100
