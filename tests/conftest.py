import matplotlib

matplotlib.use("Agg")

import pytest

from lcresonance.config import SimulationConfig
from lcresonance.model.circuit import CircuitParameters
from lcresonance.model.geometry_primitives import Line, Point
from lcresonance.model.layout import CircuitLayout
from lcresonance.model.path import SegmentKind, SegmentSpec, build_path
from lcresonance.simulation.driver import Simulation


@pytest.fixture
def params() -> CircuitParameters:
    # 10 uF, 10 mH, 100 uC
    return CircuitParameters.from_display_units(10.0, 10.0, 100.0)


@pytest.fixture
def unit_params() -> CircuitParameters:
    return CircuitParameters(capacitance=1.0, inductance=1.0, initial_charge=1.0)


@pytest.fixture
def layout_path():
    return CircuitLayout().build_path()


@pytest.fixture
def three_segment_path():
    """Straight path along +X with segment lengths 1, 2, 1; the middle one is the inductor."""
    return build_path([
        SegmentSpec(SegmentKind.WIRE, Line(Point(0.0, 0.0), Point(1.0, 0.0))),
        SegmentSpec(SegmentKind.INDUCTOR, Line(Point(1.0, 0.0), Point(3.0, 0.0))),
        SegmentSpec(SegmentKind.WIRE, Line(Point(3.0, 0.0), Point(4.0, 0.0))),
    ])


@pytest.fixture
def simulation(params) -> Simulation:
    return Simulation(params, config=SimulationConfig(seed=1234))
