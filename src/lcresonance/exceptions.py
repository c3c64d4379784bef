"""
Simulation Errors
=================
Fatal and soft failure conditions raised by the simulation core.

Classes:
    LCSimulationError: Common base class.
    DegeneratePathError: The circuit path could not be built (fatal).
    InstabilityDetected: The integrated trajectory diverged (fatal to the run).
    EffectRegionUnavailable: A visual effect cannot be placed this frame (soft).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lcresonance.model.circuit import CircuitState


class LCSimulationError(Exception):
    """Base class for all errors raised by the simulation core."""


class DegeneratePathError(LCSimulationError):
    """Raised when the segment list is empty or the total path length is not positive."""


class InstabilityDetected(LCSimulationError):
    """
    Raised when charge or current becomes non-finite or exceeds the sanity bound.

    The run is halted; only an explicit reset may resume it.
    """

    def __init__(self, message: str, state: Optional[CircuitState] = None) -> None:
        super().__init__(message)
        self.state = state


class EffectRegionUnavailable(LCSimulationError):
    """Raised when a segment-anchored effect region is missing or degenerate."""
