"""Tests for gen_all.py batch generation."""
from tubesheet.types import PATTERNS
import gen_all


def test_writes_every_pattern(tmp_path, capsys):
    written = gen_all.main(out_dir=str(tmp_path), min_tubes=7)
    assert set(written) == set(PATTERNS)
    for pattern, path in written.items():
        assert path.endswith(f"tubesheet_{pattern}.svg")
        assert open(path).read().startswith("<svg")
    assert "done." in capsys.readouterr().out
