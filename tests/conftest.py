"""Shared test fixtures for tubesheet layout tests."""
import pytest
from tubesheet.sheet import TubeSheet

# 3/4" tubes, 1.25 pitch ratio, 3.2 mm OTL clearance
E2E_INPUTS = dict(clearance=3.2, tube_od=19.05, pitch_ratio=1.25)


@pytest.fixture(scope="session")
def e2e_sheet():
    """30 degree layout solved for 100 tubes."""
    return TubeSheet.build(pattern=30, min_tubes=100, **E2E_INPUTS)


@pytest.fixture(scope="session")
def hex_sheet():
    """Seven touching 10 mm tubes in a 30 mm shell, no clearance."""
    return TubeSheet.build(0.0, 10.0, 1.0, 30, shell_id=30.0)


@pytest.fixture(scope="session")
def radial_sheet():
    """Radial ring solved for 8 tubes."""
    return TubeSheet.build(pattern="radial", min_tubes=8, **E2E_INPUTS)
