"""Simulation core for an ideal LC resonant circuit with an animated charge-carrier path."""
from lcresonance.config import SimulationConfig
from lcresonance.exceptions import (
    DegeneratePathError,
    EffectRegionUnavailable,
    InstabilityDetected,
    LCSimulationError,
)
from lcresonance.model.circuit import CircuitParameters, CircuitPhase, CircuitState
from lcresonance.model.layout import CircuitLayout
from lcresonance.model.path import CompositePath, PathSegment, SegmentKind, SegmentSpec, build_path
from lcresonance.simulation.driver import FrameSnapshot, Simulation
from lcresonance.simulation.runner import FrameLoop

__all__ = [
    "CircuitLayout",
    "CircuitParameters",
    "CircuitPhase",
    "CircuitState",
    "CompositePath",
    "DegeneratePathError",
    "EffectRegionUnavailable",
    "FrameLoop",
    "FrameSnapshot",
    "InstabilityDetected",
    "LCSimulationError",
    "PathSegment",
    "SegmentKind",
    "SegmentSpec",
    "Simulation",
    "SimulationConfig",
    "build_path",
]
