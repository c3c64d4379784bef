"""
Circuit State (Data Model)
==========================
Parameters and mutable state of the ideal LC loop.

Classes:
    CircuitParameters: Capacitance, inductance and initial charge (immutable per run).
    CircuitState: Time, charge, current, dI/dt and the two voltages.
    EnergySnapshot: Electric, magnetic and total stored energy.
    CircuitPhase: Human readable phase of the oscillation.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
import math


@dataclass(frozen=True)
class CircuitParameters:
    """
    Physical parameters of the loop in SI units.

    Any change requires a full reset of the simulation.
    """
    capacitance: float
    inductance: float
    initial_charge: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.capacitance) and self.capacitance > 0.0):
            raise ValueError(f"Capacitance must be a positive finite number, got {self.capacitance}.")
        if not (math.isfinite(self.inductance) and self.inductance > 0.0):
            raise ValueError(f"Inductance must be a positive finite number, got {self.inductance}.")
        if not math.isfinite(self.initial_charge):
            raise ValueError(f"Initial charge must be finite, got {self.initial_charge}.")

    @classmethod
    def from_display_units(cls, capacitance_uF: float, inductance_mH: float, initial_charge_uC: float) -> CircuitParameters:
        """Create parameters from the units used by the controls (uF, mH, uC)."""
        return cls(
            capacitance=capacitance_uF * 1e-6,
            inductance=inductance_mH * 1e-3,
            initial_charge=initial_charge_uC * 1e-6
        )

    @property
    def angular_frequency(self) -> float:
        return 1.0 / math.sqrt(self.inductance * self.capacitance)

    @property
    def natural_period(self) -> float:
        return 2.0 * math.pi * math.sqrt(self.inductance * self.capacitance)

    @property
    def peak_current(self) -> float:
        return abs(self.initial_charge) / math.sqrt(self.inductance * self.capacitance)

    @property
    def initial_energy(self) -> float:
        return 0.5 * self.initial_charge ** 2 / self.capacitance


@dataclass(frozen=True)
class EnergySnapshot:
    electric: float
    magnetic: float

    @property
    def total(self) -> float:
        return self.electric + self.magnetic


@dataclass
class CircuitState:
    """
    Mutable state of the loop, advanced once per integration sub-step.

    Attributes:
        t: Elapsed time [s].
        Q: Charge on the capacitor [C].
        I: Loop current [A].
        dIdt: Rate of change of the current [A/s].
        Vc: Capacitor voltage [V].
        Vl: Inductor voltage [V].
    """
    t: float = 0.0
    Q: float = 0.0
    I: float = 0.0
    dIdt: float = 0.0
    Vc: float = 0.0
    Vl: float = 0.0

    @classmethod
    def initial(cls, params: CircuitParameters) -> CircuitState:
        """State right after a reset: capacitor fully charged, no current."""
        q0 = params.initial_charge
        return cls(t=0.0, Q=q0, I=0.0, dIdt=0.0, Vc=q0 / params.capacitance, Vl=0.0)

    def copy(self) -> CircuitState:
        return replace(self)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.t, self.Q, self.I, self.dIdt, self.Vc, self.Vl))

    def energies(self, params: CircuitParameters) -> EnergySnapshot:
        return EnergySnapshot(
            electric=0.5 * self.Q * self.Q / params.capacitance,
            magnetic=0.5 * params.inductance * self.I * self.I
        )


class CircuitPhase(StrEnum):
    PAUSED = "Paused"
    CAPACITOR_MAX_CHARGE = "Capacitor Max Charge"
    MAX_CURRENT = "Max Current / Cap Zero"
    CAPACITOR_DISCHARGING = "Cap Discharging / Ind Energizing"
    INDUCTOR_DISCHARGING = "Ind Discharging / Cap Recharging"
    TRANSITIONING = "Transitioning"


def describe_phase(state: CircuitState, params: CircuitParameters, running: bool) -> CircuitPhase:
    """
    Classify the oscillation phase from charge and current relative to their peaks.

    Args:
        state: Current circuit state.
        params: Circuit parameters (for the peak values).
        running: Whether the simulation is advancing.

    Returns:
        The matching ``CircuitPhase``.
    """
    if not running:
        return CircuitPhase.PAUSED

    q_rel = state.Q / max(1e-9, abs(params.initial_charge))
    i_rel = state.I / max(1e-9, params.peak_current)

    if abs(q_rel) > 0.98 and abs(i_rel) < 0.05:
        return CircuitPhase.CAPACITOR_MAX_CHARGE
    if abs(q_rel) < 0.05 and abs(i_rel) > 0.95:
        return CircuitPhase.MAX_CURRENT
    if (state.Q > 0 and state.I > 0) or (state.Q < 0 and state.I < 0):
        return CircuitPhase.CAPACITOR_DISCHARGING
    if (state.Q > 0 and state.I < 0) or (state.Q < 0 and state.I > 0):
        return CircuitPhase.INDUCTOR_DISCHARGING
    return CircuitPhase.TRANSITIONING
