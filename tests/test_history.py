import numpy as np
import pytest

from lcresonance.model.circuit import CircuitState
from lcresonance.simulation.history import History, RingBuffer


def test_ring_buffer_discards_oldest():
    buffer = RingBuffer(3)
    for value in range(5):
        buffer.append(float(value))
    assert len(buffer) == 3
    assert buffer.capacity == 3
    np.testing.assert_array_equal(buffer.to_array(), [2.0, 3.0, 4.0])

    buffer.clear()
    assert len(buffer) == 0
    assert buffer.to_array().shape == (0,)


def test_ring_buffer_rejects_zero_capacity():
    with pytest.raises(ValueError):
        RingBuffer(0)


def test_history_records_display_units(params):
    history = History(capacity=10)
    history.record(CircuitState.initial(params), params)
    data = history.as_arrays()

    assert set(data) == set(History.CHANNELS)
    assert data["Q_uC"][0] == pytest.approx(100.0)
    assert data["I_mA"][0] == 0.0
    assert data["U_E_uJ"][0] == pytest.approx(params.initial_energy * 1e6)
    assert data["U_total_uJ"][0] == pytest.approx(data["U_E_uJ"][0] + data["U_L_uJ"][0])


def test_history_keeps_only_the_latest_window(params):
    history = History(capacity=4)
    for i in range(10):
        history.record(CircuitState(t=float(i), Q=params.initial_charge), params)
    assert len(history) == 4
    assert history.capacity == 4
    np.testing.assert_array_equal(history.as_arrays()["t"], [6.0, 7.0, 8.0, 9.0])


def test_history_skips_non_finite_samples(params):
    history = History(capacity=4)
    assert history.record(CircuitState(t=0.0, Q=1e-6), params)
    assert not history.record(CircuitState(t=1.0, Q=float("nan")), params)
    assert not history.record(CircuitState(t=2.0, I=float("inf")), params)
    assert len(history) == 1
    # Channels stay aligned
    assert all(len(values) == 1 for values in history.as_arrays().values())
