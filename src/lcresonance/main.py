"""
Headless Demo
=============
Runs the simulation without a renderer, logs the energy drift and plots the
rolling history.

Usage:
    $ python -m lcresonance
"""
import logging

from lcresonance.logging_config import setup_logging
from lcresonance.model.circuit import CircuitParameters
from lcresonance.simulation.driver import Simulation
from lcresonance.simulation.runner import FrameLoop
from lcresonance.view.plotting import plot_history

logger = logging.getLogger(__name__)


def run_demo(frames: int = 2000, speed_factor: float = 5.0, show_plot: bool = True) -> Simulation:
    # 1. Build the simulation with the default slider values (10 uF, 10 mH, 100 uC)
    params = CircuitParameters.from_display_units(10.0, 10.0, 100.0)
    simulation = Simulation(params)
    simulation.set_speed_factor(speed_factor)

    # 2. Run as fast as possible (no frame pacing)
    loop = FrameLoop(simulation, frame_interval=0.0)
    simulation.start()
    ticked = loop.run(max_frames=frames)

    snapshot = simulation.snapshot()
    drift = (snapshot.U_total - params.initial_energy) / params.initial_energy
    logger.info(f"Ran {ticked} frames up to t = {snapshot.t:.3e} s "
                f"({snapshot.t / params.natural_period:.2f} periods).")
    logger.info(f"Q = {snapshot.Q * 1e6:.2f} uC, I = {snapshot.I * 1e3:.2f} mA, "
                f"relative energy drift = {drift:.2e}, phase: {snapshot.phase}")

    # 3. Charts
    if show_plot:
        plot_history(simulation.history, show=True)
    return simulation


def main() -> None:
    # Use logging.DEBUG to see every dropped segment and hidden carrier
    setup_logging(level=logging.INFO)
    run_demo()


if __name__ == "__main__":
    main()
