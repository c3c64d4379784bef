from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lcresonance.model.circuit import CircuitParameters, CircuitState

logger = logging.getLogger(__name__)


class ExplicitEulerIntegrator:
    """
    Forward Euler integrator for the ideal LC loop.

    Governing law (no resistance):
        dI/dt = Q / (L C),  dQ/dt = -I,  Vc = Q / C,  Vl = -L dI/dt

    The method is only conditionally stable. Keep ``dt`` small relative to the
    natural period and let the caller watch the trajectory for divergence.
    """

    def step(self, state: CircuitState, params: CircuitParameters, dt: float) -> CircuitState:
        """
        Advance the state by one sub-step in place.

        Derivatives and voltages are evaluated from the charge before the update.

        Args:
            state: State to advance (mutated).
            params: Circuit parameters.
            dt: Sub-step size in seconds, strictly positive.

        Returns:
            The same ``state`` instance.
        """
        if not (dt > 0.0 and math.isfinite(dt)):
            raise ValueError(f"Time step must be a positive finite number, got {dt}.")

        C = params.capacitance
        L = params.inductance

        state.Vc = state.Q / C
        state.dIdt = state.Q / (L * C)
        state.Vl = -L * state.dIdt

        dQ = -state.I * dt
        dI = state.dIdt * dt

        state.Q += dQ
        state.I += dI
        state.t += dt
        return state

    def integrate(self, state: CircuitState, params: CircuitParameters, dt: float, n_steps: int) -> CircuitState:
        """
        Free-running integration over ``n_steps`` sub-steps, with no divergence guard.
        """
        for _ in range(n_steps):
            self.step(state, params, dt)
        logger.debug(f"Integrated {n_steps} steps of {dt:.3e} s, t = {state.t:.6e} s.")
        return state
