"""
Frame Loop
==========
Cooperative scheduling loop that ticks a ``Simulation`` once per frame.

The clock and the sleep function are injectable so the loop can be driven
without a real frame clock (tests pass fakes).
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from lcresonance.exceptions import InstabilityDetected
from lcresonance.simulation.driver import Simulation

logger = logging.getLogger(__name__)


class FrameLoop:
    def __init__(
        self,
        simulation: Simulation,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        frame_interval: float = 1.0 / 60.0,
    ) -> None:
        if frame_interval < 0.0:
            raise ValueError(f"Frame interval must not be negative, got {frame_interval}.")
        self.simulation = simulation
        self.clock = clock
        self.sleep = sleep
        self.frame_interval = frame_interval
        self.last_error: Optional[InstabilityDetected] = None

    def run(self, max_frames: Optional[int] = None, duration: Optional[float] = None) -> int:
        """
        Tick the simulation until it stops running or a limit is reached.

        An instability halts the loop; it is logged and kept in ``last_error``.

        Args:
            max_frames: Stop after this many frames.
            duration: Stop once this much clock time has elapsed [s].

        Returns:
            Number of frames that were ticked.
        """
        self.last_error = None
        frames = 0
        started = self.clock()

        while self.simulation.running:
            if max_frames is not None and frames >= max_frames:
                break
            if duration is not None and self.clock() - started >= duration:
                break

            frame_start = self.clock()
            try:
                self.simulation.tick()
            except InstabilityDetected as e:
                logger.error(f"Frame loop stopped: {e}")
                self.last_error = e
                break
            frames += 1

            # Yield back to the host until the next frame is due
            remaining = self.frame_interval - (self.clock() - frame_start)
            if remaining > 0.0:
                self.sleep(remaining)

        logger.debug(f"Frame loop finished after {frames} frames.")
        return frames
