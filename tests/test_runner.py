import pytest

from lcresonance.exceptions import InstabilityDetected
from lcresonance.simulation.runner import FrameLoop


class FakeClock:
    """Advances by a fixed amount every time it is read."""

    def __init__(self, step=0.0):
        self.now = 0.0
        self.step = step
        self.slept = []

    def __call__(self):
        value = self.now
        self.now += self.step
        return value

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


def test_run_stops_after_max_frames(simulation):
    clock = FakeClock()
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep, frame_interval=0.25)
    simulation.start()

    assert loop.run(max_frames=5) == 5
    assert simulation.running
    assert len(simulation.history) == 6
    # The fake frame took no time, so the loop waited the whole interval
    assert clock.slept == pytest.approx([0.25] * 5)
    assert loop.last_error is None


def test_run_stops_after_duration(simulation):
    clock = FakeClock()
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep, frame_interval=0.25)
    simulation.start()
    assert loop.run(duration=1.0) == 4


def test_slow_frames_do_not_sleep(simulation):
    clock = FakeClock(step=1.0)
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep, frame_interval=0.25)
    simulation.start()
    loop.run(max_frames=3)
    assert clock.slept == []


def test_run_does_nothing_when_not_running(simulation):
    clock = FakeClock()
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep)
    assert loop.run(max_frames=10) == 0
    assert simulation.state.t == 0.0


def test_pause_from_an_observer_ends_the_loop(simulation):
    clock = FakeClock()
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep, frame_interval=0.0)
    simulation.add_observer(lambda snapshot: simulation.pause())
    simulation.start()
    assert loop.run(max_frames=10) == 1
    assert not simulation.running


def test_instability_stops_the_loop(simulation, params):
    clock = FakeClock()
    loop = FrameLoop(simulation, clock=clock, sleep=clock.sleep, frame_interval=0.0)
    simulation.start()
    simulation.state.Q = float("nan")

    assert loop.run(max_frames=10) == 0
    assert isinstance(loop.last_error, InstabilityDetected)
    assert simulation.halted


def test_negative_frame_interval_is_rejected(simulation):
    with pytest.raises(ValueError):
        FrameLoop(simulation, frame_interval=-1.0)
