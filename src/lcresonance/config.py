"""
Configuration & Tuning Constants
================================
This module serves as the central registry for the simulation constants.

Why is this file needed?
------------------------
1. Abstraction: The integration step, sub-stepping rate and the presentation
   scales are tuned numbers. Keeping them here prevents magic numbers from
   being scattered throughout the code.
2. Overrides: ``SimulationConfig`` bundles the overridable values so a host
   (or a test) can change them per simulation without touching globals.

Exports:
    BASE_DT (float): Macro time step per frame at speed factor 1 [s].
    STEPS_PER_UNIT_SPEED (int): Integration sub-steps per frame at speed factor 1.
    CHARGE_CARRIER_SPEED_SCALE (float): Current -> carrier speed calibration.
    INSTABILITY_FACTOR (float): Divergence bound as a multiple of |Q0|.
    SimulationConfig: Dataclass with the overridable values.
"""
from __future__ import annotations

from dataclasses import dataclass
import math

# Time stepping
BASE_DT: float = 1.5e-7
STEPS_PER_UNIT_SPEED: int = 30

# Presentation calibration; no physical derivation
CHARGE_CARRIER_SPEED_SCALE: float = 5.0e7
NUM_CHARGE_CARRIERS: int = 160

# The run is halted once |Q| exceeds this multiple of |Q0|
INSTABILITY_FACTOR: float = 15.0

# Rolling display window
MAX_HISTORY_POINTS: int = 800

# Position emitted for carriers that must not be drawn
HIDDEN_POSITION: tuple[float, float, float] = (1e5, 1e5, 1e5)

# Segments shorter than this are construction artifacts and get dropped
ZERO_LENGTH_EPSILON: float = 1e-6

# Default circuit parameters in display units (uF, mH, uC)
DEFAULT_CAPACITANCE_UF: float = 10.0
DEFAULT_INDUCTANCE_MH: float = 10.0
DEFAULT_INITIAL_CHARGE_UC: float = 100.0
DEFAULT_SPEED_FACTOR: float = 1.0

# Field indicators
NUM_E_ARROWS_PER_TURN: int = 4
E_FIELD_VISIBILITY_THRESHOLD: float = 0.05
B_FIELD_VISIBILITY_THRESHOLD: float = 0.02

# Below this the energy bars are blanked
MIN_DISPLAY_ENERGY: float = 1e-12


@dataclass(frozen=True)
class SimulationConfig:
    """
    Overridable tuning values for one ``Simulation``.
    """
    base_dt: float = BASE_DT
    steps_per_unit_speed: int = STEPS_PER_UNIT_SPEED
    speed_scale: float = CHARGE_CARRIER_SPEED_SCALE
    num_carriers: int = NUM_CHARGE_CARRIERS
    instability_factor: float = INSTABILITY_FACTOR
    history_capacity: int = MAX_HISTORY_POINTS
    hidden_position: tuple[float, float, float] = HIDDEN_POSITION
    e_arrows_per_turn: int = NUM_E_ARROWS_PER_TURN
    seed: int | None = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.base_dt) and self.base_dt > 0.0):
            raise ValueError(f"base_dt must be a positive finite number, got {self.base_dt}.")
        if self.steps_per_unit_speed < 1:
            raise ValueError(f"steps_per_unit_speed must be at least 1, got {self.steps_per_unit_speed}.")
        if self.num_carriers < 0:
            raise ValueError(f"num_carriers must not be negative, got {self.num_carriers}.")
        if self.instability_factor <= 0.0:
            raise ValueError(f"instability_factor must be positive, got {self.instability_factor}.")
        if self.history_capacity < 1:
            raise ValueError(f"history_capacity must be at least 1, got {self.history_capacity}.")
