"""
Simulation Driver
=================
Owns the circuit state, the composite path and the charge carriers, and
advances them one rendered frame at a time.

Why is this file needed?
------------------------
1. Sub-stepping: One frame runs N integration sub-steps (N scales with the
   speed factor) but is reported to the outside world exactly once.
2. Ownership: State and path are only mutated here. Observers receive an
   immutable ``FrameSnapshot``, never a live handle.
3. Control surface: reset / start / pause / speed changes take effect only at
   a tick boundary.

Classes:
    FrameSnapshot: Read-only per-frame data for renderers and charts.
    Simulation: The driver.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, List, Optional, TYPE_CHECKING

import numpy as np

from lcresonance.config import (
    DEFAULT_CAPACITANCE_UF,
    DEFAULT_INDUCTANCE_MH,
    DEFAULT_INITIAL_CHARGE_UC,
    DEFAULT_SPEED_FACTOR,
    MIN_DISPLAY_ENERGY,
    SimulationConfig,
)
from lcresonance.exceptions import InstabilityDetected
from lcresonance.model.circuit import CircuitParameters, CircuitPhase, CircuitState, describe_phase
from lcresonance.model.layout import CircuitLayout
from lcresonance.model.path import CompositePath, SegmentKind
from lcresonance.simulation.history import History
from lcresonance.simulation.kinematics import (
    FieldIndicator,
    advance,
    induced_field_indicators,
    initial_progress,
    magnetic_field_indicator,
    resolve_positions,
)
from lcresonance.solvers.integrator import ExplicitEulerIntegrator

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    """Immutable copy of everything a renderer or chart needs for one frame."""
    t: float
    Q: float
    I: float
    dIdt: float
    Vc: float
    Vl: float
    U_E: float
    U_L: float
    U_total: float
    phase: CircuitPhase
    carrier_positions: npt.NDArray[np.float64]
    induced_field: tuple[FieldIndicator, ...]
    magnetic_field: Optional[FieldIndicator]
    energy_fractions: tuple[float, float, float]
    running: bool
    halted: bool


FrameObserver = Callable[[FrameSnapshot], None]


class Simulation:
    """
    Drives the LC loop simulation.

    Pass an instance to the frame loop (or call ``tick`` from the host's frame
    callback). Tests drive ``tick`` directly with controlled ``macro_dt``.
    """
    # Carriers crossing the capacitor are not drawn
    HIDDEN_KINDS = frozenset({SegmentKind.CAPACITOR_GAP, SegmentKind.CAPACITOR_PLATE})

    def __init__(
        self,
        params: Optional[CircuitParameters] = None,
        config: Optional[SimulationConfig] = None,
        layout: Optional[CircuitLayout] = None,
        integrator: Optional[ExplicitEulerIntegrator] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.layout = layout or CircuitLayout()
        self.integrator = integrator or ExplicitEulerIntegrator()
        self.history = History(capacity=self.config.history_capacity)

        self.speed_factor: float = DEFAULT_SPEED_FACTOR
        self.running: bool = False
        self.halted: bool = False

        self._rng = np.random.default_rng(self.config.seed)
        self._observers: List[FrameObserver] = []
        self._ticking = False
        self._pending: List[Callable[[], None]] = []

        self.params: CircuitParameters = params or CircuitParameters.from_display_units(
            DEFAULT_CAPACITANCE_UF, DEFAULT_INDUCTANCE_MH, DEFAULT_INITIAL_CHARGE_UC
        )
        self.state: CircuitState = CircuitState.initial(self.params)
        self.path: CompositePath
        self.max_energy: float = MIN_DISPLAY_ENERGY
        self._progress: npt.NDArray[np.float64] = np.empty(0)
        self._positions: npt.NDArray[np.float64] = np.empty((0, 3))

        self._apply_reset(self.params)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def add_observer(self, observer: FrameObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: FrameObserver) -> None:
        self._observers.remove(observer)

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------
    def _defer_or_run(self, action: Callable[[], None]) -> None:
        if self._ticking:
            self._pending.append(action)
        else:
            action()

    def reset(self, params: Optional[CircuitParameters] = None) -> None:
        """
        Stop the run and rebuild state, path and carriers from scratch.

        Raises:
            DegeneratePathError: If the layout produces an invalid path.
        """
        target = params or self.params
        self._defer_or_run(lambda: self._apply_reset(target))

    def set_speed_factor(self, factor: float) -> None:
        if not (math.isfinite(factor) and factor > 0.0):
            raise ValueError(f"Speed factor must be a positive finite number, got {factor}.")
        self._defer_or_run(lambda: setattr(self, "speed_factor", float(factor)))

    def start(self) -> None:
        self._defer_or_run(self._apply_start)

    def pause(self) -> None:
        self._defer_or_run(self._apply_pause)

    def _apply_reset(self, params: CircuitParameters) -> None:
        self.running = False
        self.halted = False
        logger.info("Resetting simulation...")

        # Build the path first so a degenerate layout leaves nothing half-initialized
        path = self.layout.build_path()

        self.params = params
        self.path = path
        self.state = CircuitState.initial(params)
        self.max_energy = max(params.initial_energy, MIN_DISPLAY_ENERGY)

        self.history.clear()
        self.history.record(self.state, self.params)

        self._progress = initial_progress(self.config.num_carriers, self._rng)
        self._positions = self._resolve_carriers()
        logger.info(f"Simulation reset complete. Initial Q: {params.initial_charge:.3e} C, "
                    f"period: {params.natural_period:.3e} s.")

    def _apply_start(self) -> None:
        if self.halted:
            logger.warning("Simulation is halted after an instability; reset it before starting.")
            return
        if self.running:
            return
        self.running = True
        self.max_energy = max(self.state.energies(self.params).total, MIN_DISPLAY_ENERGY)
        logger.info(f"Starting simulation with max energy: {self.max_energy:.3e} J")

    def _apply_pause(self) -> None:
        if self.running:
            self.running = False
            logger.info("Simulation paused.")

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def sub_step_count(self) -> int:
        return max(1, math.floor(self.config.steps_per_unit_speed * self.speed_factor))

    def _check_stability(self) -> None:
        Q, I = self.state.Q, self.state.I
        bound = abs(self.params.initial_charge) * self.config.instability_factor
        if self.state.is_finite() and abs(Q) <= bound:
            return

        self.running = False
        self.halted = True
        msg = f"Unstable! Q = {Q:.3e} C, I = {I:.3e} A at t = {self.state.t:.3e} s."
        logger.error(msg)
        raise InstabilityDetected(msg, state=self.state.copy())

    def tick(self, macro_dt: Optional[float] = None) -> Optional[FrameSnapshot]:
        """
        Advance one frame.

        Controls called during the frame (e.g. by an observer) are applied
        after it; if the frame raises they are dropped.

        Args:
            macro_dt: Simulated time for this frame. Defaults to
                ``base_dt * speed_factor``.

        Returns:
            The frame snapshot, or None if the simulation is not running.

        Raises:
            InstabilityDetected: If the trajectory diverged. The state is left
                at its last valid values and the run is halted.
        """
        if not self.running:
            return None

        if macro_dt is None:
            macro_dt = self.config.base_dt * self.speed_factor
        if not (math.isfinite(macro_dt) and macro_dt > 0.0):
            raise ValueError(f"Frame time step must be a positive finite number, got {macro_dt}.")

        n_steps = self.sub_step_count()
        dt = macro_dt / n_steps
        total_length = self.path.total_length

        self._ticking = True
        try:
            for _ in range(n_steps):
                self._check_stability()
                self.integrator.step(self.state, self.params, dt)
                self._progress = advance(
                    self._progress, self.state.I, dt, total_length, self.config.speed_scale
                )

            self.history.record(self.state, self.params)
            self._positions = self._resolve_carriers()
            snapshot = self.snapshot()
            for observer in list(self._observers):
                observer(snapshot)
        except Exception:
            # Controls queued by a frame that did not finish are discarded
            self._pending.clear()
            raise
        finally:
            self._ticking = False

        self._apply_pending()
        return snapshot

    def _apply_pending(self) -> None:
        pending, self._pending = self._pending, []
        for action in pending:
            action()

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------
    @property
    def carrier_progress(self) -> npt.NDArray[np.float64]:
        return self._progress.copy()

    def _resolve_carriers(self) -> npt.NDArray[np.float64]:
        return resolve_positions(
            self.path,
            self._progress,
            hidden_kinds=self.HIDDEN_KINDS,
            hidden=self.config.hidden_position
        )

    def _energy_fractions(self, U_E: float, U_L: float, U_total: float) -> tuple[float, float, float]:
        if self.max_energy <= MIN_DISPLAY_ENERGY:
            return 0.0, 0.0, 0.0
        return tuple(min(1.0, max(0.0, u / self.max_energy)) for u in (U_E, U_L, U_total))

    def snapshot(self) -> FrameSnapshot:
        """Build an immutable snapshot of the current frame."""
        state = self.state
        energies = state.energies(self.params)

        positions = self._positions.copy()
        positions.setflags(write=False)

        n_arrows = int(self.layout.num_turns * self.config.e_arrows_per_turn)
        induced = induced_field_indicators(
            self.path, state, self.params, count=n_arrows, offset=self.layout.wire_radius * 3.0
        )
        magnetic = magnetic_field_indicator(self.path, state, self.params)

        return FrameSnapshot(
            t=state.t,
            Q=state.Q,
            I=state.I,
            dIdt=state.dIdt,
            Vc=state.Vc,
            Vl=state.Vl,
            U_E=energies.electric,
            U_L=energies.magnetic,
            U_total=energies.total,
            phase=describe_phase(state, self.params, self.running),
            carrier_positions=positions,
            induced_field=induced,
            magnetic_field=magnetic,
            energy_fractions=self._energy_fractions(energies.electric, energies.magnetic, energies.total),
            running=self.running,
            halted=self.halted,
        )
