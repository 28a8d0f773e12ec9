"""
NAVHYDRO Test Configuration and Fixtures

Analytic hulls shared by the unit tests:
- barge: 100 x 20 x 10 m box, 5 stations, waterlines every 2.5 m
- wigley: L=100, B=10, T=6.25 Wigley hull, 21 stations, 0.625 m waterlines
"""

import pytest

from navhydro.core.config import EngineConfig, set_engine_config
from navhydro.geometry import Loadcase, rectangular_barge, wigley_hull
from navhydro.service import HydrostaticsEngine, InMemoryVesselRepository


@pytest.fixture(autouse=True)
def default_engine_config():
    """Run every test with the built-in defaults, independent of NAVHYDRO_* variables."""
    set_engine_config(EngineConfig())
    yield
    set_engine_config(None)


@pytest.fixture
def barge():
    """Box barge, design draft 5 m."""
    return rectangular_barge(length=100, beam=20, depth=10, design_draft=5)


@pytest.fixture
def wigley():
    """Wigley hull at design draft 6.25 m."""
    return wigley_hull()


@pytest.fixture
def seawater():
    """Seawater loadcase without KG."""
    return Loadcase(name="Seawater")


@pytest.fixture
def barge_loadcase():
    """Barge loadcase with KG 6 m (GMt = 3.1667 m at T = 5 m)."""
    return Loadcase(name="Barge KG 6", kg=6, loadcase_id="lc-kg6", vessel_id="barge")


@pytest.fixture
def engine(barge, wigley, barge_loadcase):
    """Engine over an in-memory repository holding both hulls."""
    repository = InMemoryVesselRepository()
    repository.add_vessel("barge", barge)
    repository.add_vessel("wigley", wigley)
    repository.add_loadcase("barge", barge_loadcase)
    repository.add_loadcase("wigley", Loadcase(name="Wigley KG T/2", kg="3.125", loadcase_id="lc-wigley"))
    return HydrostaticsEngine(repository, EngineConfig())
