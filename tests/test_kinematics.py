import numpy as np
import pytest

from lcresonance.config import HIDDEN_POSITION
from lcresonance.exceptions import EffectRegionUnavailable
from lcresonance.model.circuit import CircuitState
from lcresonance.model.geometry_primitives import Line, Point
from lcresonance.model.path import SegmentKind, SegmentSpec, build_path
from lcresonance.simulation.kinematics import (
    advance,
    induced_field_indicators,
    initial_progress,
    locate_effect_region,
    magnetic_field_indicator,
    resolve_position,
    resolve_positions,
)


def test_advance_moves_by_scaled_distance():
    assert advance(0.1, flow_speed=2.0, dt=0.5, total_length=10.0, speed_scale=1.0) == pytest.approx(0.2)
    assert advance(0.1, flow_speed=-2.0, dt=0.5, total_length=10.0, speed_scale=1.0) == pytest.approx(0.0, abs=1e-12)


def test_advance_wraps_both_directions():
    assert advance(0.95, flow_speed=1.0, dt=1.0, total_length=10.0, speed_scale=1.0) == pytest.approx(0.05)
    assert advance(0.05, flow_speed=-1.0, dt=1.0, total_length=10.0, speed_scale=1.0) == pytest.approx(0.95)


def test_progress_always_stays_in_unit_interval():
    rng = np.random.default_rng(7)
    progress = rng.random(500)
    for speed in rng.normal(scale=3.0, size=300):
        progress = advance(progress, flow_speed=speed, dt=0.37, total_length=1.3, speed_scale=1.0)
        assert np.all(progress >= 0.0)
        assert np.all(progress < 1.0)


def test_tiny_negative_step_never_returns_one():
    assert advance(0.0, flow_speed=-1e-20, dt=1.0, total_length=1.0, speed_scale=1.0) < 1.0


def test_zero_flow_speed_keeps_progress():
    progress = initial_progress(64, np.random.default_rng(3))
    original = progress.copy()
    for _ in range(1000):
        progress = advance(progress, flow_speed=0.0, dt=1e-3, total_length=12.0)
    np.testing.assert_array_equal(progress, original)


def test_advance_preserves_scalar_type():
    assert isinstance(advance(0.5, 1.0, 1e-9, 10.0), float)
    assert isinstance(advance(np.array([0.5]), 1.0, 1e-9, 10.0), np.ndarray)


def test_initial_progress_is_in_range():
    progress = initial_progress(160, np.random.default_rng(0))
    assert progress.shape == (160,)
    assert np.all((progress >= 0.0) & (progress < 1.0))


def test_resolve_position_falls_back_to_hidden(three_segment_path):
    np.testing.assert_allclose(resolve_position(three_segment_path, 0.5), [2.0, 0.0, 0.0])
    np.testing.assert_array_equal(resolve_position(three_segment_path, float("nan")), HIDDEN_POSITION)
    np.testing.assert_array_equal(resolve_position(None, 0.5), HIDDEN_POSITION)


def test_resolve_positions_hides_invalid_and_masked_carriers(three_segment_path):
    progress = np.array([0.1, np.nan, 0.5, 0.9])
    out = resolve_positions(three_segment_path, progress, hidden_kinds={SegmentKind.INDUCTOR})
    assert out.shape == (4, 3)
    np.testing.assert_allclose(out[0], [0.4, 0.0, 0.0])
    np.testing.assert_array_equal(out[1], HIDDEN_POSITION)
    np.testing.assert_array_equal(out[2], HIDDEN_POSITION)
    np.testing.assert_allclose(out[3], [3.6, 0.0, 0.0])


def test_resolve_positions_custom_sentinel(three_segment_path):
    out = resolve_positions(three_segment_path, np.array([np.inf]), hidden=(0.0, -9.0, 0.0))
    np.testing.assert_array_equal(out, [[0.0, -9.0, 0.0]])


def test_locate_effect_region(three_segment_path):
    start, end = locate_effect_region(three_segment_path, SegmentKind.INDUCTOR)
    assert (start, end) == pytest.approx((0.25, 0.75))
    assert 0.0 <= start < end <= 1.0


def test_locate_effect_region_missing_segment(three_segment_path):
    with pytest.raises(EffectRegionUnavailable):
        locate_effect_region(three_segment_path, SegmentKind.CAPACITOR_PLATE)


def test_locate_effect_region_degenerate_interval(params):
    # The inductor vanishes next to the huge wire in floating point: start == end == 1
    path = build_path([
        SegmentSpec(SegmentKind.WIRE, Line(Point(0.0, 0.0), Point(1e20, 0.0))),
        SegmentSpec(SegmentKind.INDUCTOR, Line(Point(0.0, 1.0), Point(0.0, 1.0, 1e-3)), droppable=False),
    ])
    assert path.find_segment(SegmentKind.INDUCTOR) is not None
    with pytest.raises(EffectRegionUnavailable):
        locate_effect_region(path, SegmentKind.INDUCTOR)

    state = _state_with_full_inductor_voltage(params)
    assert induced_field_indicators(path, state, params, count=32) == ()


def test_layout_inductor_region(layout_path):
    start, end = locate_effect_region(layout_path, SegmentKind.INDUCTOR)
    inductor = layout_path.find_segment(SegmentKind.INDUCTOR)
    assert end - start == pytest.approx(inductor.length / layout_path.total_length)
    # The winding is the longest part of the loop
    assert end - start > 0.5


def _state_with_full_inductor_voltage(params, dIdt_sign=1.0):
    dIdt = dIdt_sign * params.initial_charge / (params.inductance * params.capacitance)
    return CircuitState(Q=params.initial_charge, I=0.0, dIdt=dIdt, Vl=-params.inductance * dIdt)


def test_induced_field_follows_the_winding_against_di_dt(layout_path, params):
    state = _state_with_full_inductor_voltage(params)
    indicators = induced_field_indicators(layout_path, state, params, count=32)
    assert len(indicators) == 32

    start, end = locate_effect_region(layout_path, SegmentKind.INDUCTOR)
    progresses = start + np.arange(32) / 32 * (end - start)
    tangents = layout_path.tangent_at_progress(progresses)
    for indicator, tangent in zip(indicators, tangents):
        assert indicator.magnitude == pytest.approx(1.0)
        assert np.dot(indicator.direction, tangent) == pytest.approx(-1.0)

    reversed_state = _state_with_full_inductor_voltage(params, dIdt_sign=-1.0)
    flipped = induced_field_indicators(layout_path, reversed_state, params, count=32)
    assert np.dot(flipped[5].direction, tangents[5]) == pytest.approx(1.0)


def test_induced_field_is_suppressed_when_weak_or_unavailable(layout_path, three_segment_path, params):
    assert induced_field_indicators(layout_path, CircuitState.initial(params), params, count=32) == ()

    no_inductor = build_path([(SegmentKind.WIRE, Line(Point(0.0, 0.0), Point(1.0, 0.0)))])
    state = _state_with_full_inductor_voltage(params)
    assert induced_field_indicators(no_inductor, state, params, count=32) == ()


def test_magnetic_field_indicator(layout_path, params):
    assert magnetic_field_indicator(layout_path, CircuitState.initial(params), params) is None

    forward = magnetic_field_indicator(layout_path, CircuitState(I=params.peak_current), params)
    assert forward.magnitude == pytest.approx(1.0)
    np.testing.assert_allclose(forward.direction, [1.0, 0.0, 0.0], atol=1e-9)
    # Centred on the solenoid axis
    np.testing.assert_allclose(forward.anchor, [0.0, 1.0, 0.0], atol=1e-9)

    backward = magnetic_field_indicator(layout_path, CircuitState(I=-0.5 * params.peak_current), params)
    assert backward.magnitude == pytest.approx(0.5)
    np.testing.assert_allclose(backward.direction, [-1.0, 0.0, 0.0], atol=1e-9)


def test_magnetic_field_indicator_without_inductor(three_segment_path, params):
    no_inductor = build_path([(SegmentKind.WIRE, Line(Point(0.0, 0.0), Point(1.0, 0.0)))])
    assert magnetic_field_indicator(no_inductor, CircuitState(I=params.peak_current), params) is None
