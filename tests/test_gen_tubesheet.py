"""Tests for drawing/scene.py and drawing/gen_tubesheet.py SVG generation."""
from tubesheet.sheet import TubeSheet
from drawing.scene import (
    BBox, CircleShape, LineShape,
    circles_bbox, lines_bbox, union_bbox, pad_bbox, centred_cross,
    build_scene, describe,
)
from drawing.gen_tubesheet import (
    to_svg, circle_el, line_el, render_svg, write_tubesheet_svg, main,
)

HEX_ARGS = ["--tube-od", "10", "--pitch-ratio", "1", "--clearance", "0"]


# ============================================================
# Bounding boxes
# ============================================================

class TestBBox:
    def test_circles(self):
        b = circles_bbox([CircleShape(0, 0, 10, ""), CircleShape(10, 2, 4, "")])
        assert b == BBox(-5, -5, 12, 5)

    def test_lines(self):
        b = lines_bbox([LineShape(-3, 0, 3, 0, ""), LineShape(0, -1, 0, 7, "")])
        assert b == BBox(-3, -1, 3, 7)

    def test_union(self):
        assert union_bbox([BBox(-1, -2, 3, 4), BBox(-5, 0, 1, 9)]) == BBox(-5, -2, 3, 9)

    def test_pad_scales_about_origin(self):
        b = pad_bbox(BBox(-10, -10, 10, 10), 0.1)
        assert abs(b.min_x + 11) < 1e-12
        assert abs(b.width - 22) < 1e-12
        assert abs(b.max_y - 11) < 1e-12

    def test_cross_extent(self):
        h, v = centred_cross(30)
        assert abs(h.x2 - 16.5) < 1e-12 and h.x1 == -h.x2
        assert abs(v.y2 - 16.5) < 1e-12 and v.x1 == 0.0


# ============================================================
# Scene
# ============================================================

class TestScene:
    def test_nothing_to_draw(self):
        assert build_scene(TubeSheet.build(3.2, 19.05, 1.25, 30)) is None

    def test_tubes_numbered_in_field_order(self, hex_sheet):
        scene = build_scene(hex_sheet)
        assert [c.number for c in scene.tubes] == list(range(1, 8))
        assert [(c.cx, c.cy) for c in scene.tubes] == hex_sheet.tube_field

    def test_boundaries(self, hex_sheet):
        scene = build_scene(hex_sheet)
        assert scene.shell.d == 30.0
        assert scene.otl.d == hex_sheet.otl
        assert len(scene.crosshairs) == 2

    def test_viewbox_padded_around_crosshairs(self, hex_sheet):
        vb = build_scene(hex_sheet).viewbox
        assert abs(vb.min_x + 18.15) < 1e-9
        assert abs(vb.max_y - 18.15) < 1e-9
        assert abs(vb.width - 36.3) < 1e-9

    def test_solved_sheet_draws_min_id(self, e2e_sheet):
        scene = build_scene(e2e_sheet)
        assert scene.shell.d == e2e_sheet.min_id
        assert len(scene.tubes) == e2e_sheet.num_tubes

    def test_describe(self, hex_sheet):
        text = describe(build_scene(hex_sheet).meta)
        assert text == ("Shell ID: 30.0 mm; OTL: 30.0 mm; Tube OD: 10.0 mm; Pitch: 10.0 mm;"
                        " Pitch Ratio: 1.0; Pitch Layout: 30; Number of Tubes: 7;")

    def test_describe_rounds_to_2dp(self, e2e_sheet):
        meta = build_scene(e2e_sheet).meta
        assert meta.pitch == 23.81
        assert meta.shell_id == round(e2e_sheet.min_id, 2)


# ============================================================
# SVG helpers
# ============================================================

def test_to_svg_flips_y():
    assert to_svg(3.0, 4.0) == (3.0, -4.0)


def test_circle_el():
    out = []
    circle_el(out, CircleShape(1, 2, 10, "fill:none;"), "tube-1")
    assert out == ['<circle id="tube-1" cx="1.000000" cy="-2.000000" r="5.000000" style="fill:none;"/>']


def test_line_el():
    out = []
    line_el(out, LineShape(-1, 0, 1, 0, "s"))
    assert len(out) == 1
    assert 'x1="-1.000000"' in out[0] and 'x2="1.000000"' in out[0]


# ============================================================
# SVG document
# ============================================================

class TestRenderSvg:
    def test_empty(self):
        svg = render_svg(None)
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert "<circle" not in svg

    def test_structure(self, hex_sheet):
        svg = render_svg(build_scene(hex_sheet))
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
        assert svg.endswith("</svg>")
        assert svg.count("<circle") == 7 + 2
        assert svg.count("<line") == 2
        assert 'id="shell"' in svg and 'id="otl"' in svg
        assert "<title" in svg and "<desc" in svg

    def test_viewbox(self, hex_sheet):
        svg = render_svg(build_scene(hex_sheet))
        assert 'viewBox="-18.150000 -18.150000 36.300000 36.300000"' in svg

    def test_first_tube_bottom_left(self, hex_sheet):
        svg = render_svg(build_scene(hex_sheet))
        assert '<circle id="tube-1" cx="-5.000000" cy="8.660254"' in svg

    def test_labels(self, hex_sheet):
        scene = build_scene(hex_sheet)
        assert "<text" not in render_svg(scene)
        assert render_svg(scene, labels=True).count("<text") == 7

    def test_write(self, hex_sheet, tmp_path):
        path = tmp_path / "hex.svg"
        scene = write_tubesheet_svg(hex_sheet, path)
        assert scene is not None
        assert path.read_text() == render_svg(scene)


# ============================================================
# Command line
# ============================================================

class TestMain:
    def test_fixed_shell(self, tmp_path, capsys):
        path = tmp_path / "out.svg"
        assert main(HEX_ARGS + ["--shell-id", "30", "-o", str(path)]) == 0
        out = capsys.readouterr().out
        assert path.exists()
        assert "Tubes:         7" in out
        assert "Min spacing:   10.00 mm" in out

    def test_default_output_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(HEX_ARGS + ["--min-tubes", "7"]) == 0
        assert (tmp_path / "tubesheet_30.svg").exists()

    def test_radial(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(["--pattern", "radial", "--min-tubes", "8"]) == 0
        assert (tmp_path / "tubesheet_radial.svg").read_text().count("<circle") == 8 + 2

    def test_labels(self, tmp_path):
        path = tmp_path / "out.svg"
        assert main(HEX_ARGS + ["--shell-id", "30", "--labels", "-o", str(path)]) == 0
        assert "<text" in path.read_text()

    def test_compare(self, capsys):
        assert main(HEX_ARGS + ["--min-tubes", "7", "--compare"]) == 0
        out = capsys.readouterr().out
        for name in ("30", "45", "60", "90", "radial"):
            assert name in out

    def test_invalid_geometry(self, caplog):
        assert main(["--tube-od", "0"]) == 1
        assert "Tube OD must be greater than 0" in caplog.text

    def test_unknown_pattern(self):
        assert main(["--pattern", "hex"]) == 1

    def test_shell_too_small(self, tmp_path, caplog):
        assert main(["--shell-id", "20", "-o", str(tmp_path / "x.svg")]) == 1
        assert not (tmp_path / "x.svg").exists()

    def test_inputs_incomplete(self, capsys):
        assert main(["--min-tubes", "0"]) == 2
        assert "Inputs incomplete" in capsys.readouterr().err

    def test_compare_needs_count(self, capsys):
        assert main(["--shell-id", "100", "--compare"]) == 2
