"""
Rolling History
Fixed-capacity buffers holding the most recent samples for charting.
"""
from __future__ import annotations

from collections import deque
import math
from typing import Deque, Dict, Iterator, TYPE_CHECKING

import numpy as np

from lcresonance.config import MAX_HISTORY_POINTS

if TYPE_CHECKING:
    import numpy.typing as npt

    from lcresonance.model.circuit import CircuitParameters, CircuitState


class RingBuffer:
    """Fixed-capacity buffer that discards the oldest sample when full."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}.")
        self._data: Deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._data.maxlen

    def append(self, value: float) -> None:
        self._data.append(value)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[float]:
        return iter(self._data)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.fromiter(self._data, dtype=np.float64, count=len(self._data))


class History:
    """
    Display window of time, charge, current and energies.

    Values are stored in display units: uC, mA and uJ.
    """
    CHANNELS = ("t", "Q_uC", "I_mA", "U_E_uJ", "U_L_uJ", "U_total_uJ")

    def __init__(self, capacity: int = MAX_HISTORY_POINTS) -> None:
        self._buffers: Dict[str, RingBuffer] = {name: RingBuffer(capacity) for name in self.CHANNELS}

    def __len__(self) -> int:
        return len(self._buffers["t"])

    @property
    def capacity(self) -> int:
        return self._buffers["t"].capacity

    def record(self, state: CircuitState, params: CircuitParameters) -> bool:
        """
        Append one sample. Non-finite samples are skipped.

        Returns:
            True if the sample was recorded.
        """
        energies = state.energies(params)
        sample = {
            "t": state.t,
            "Q_uC": state.Q * 1e6,
            "I_mA": state.I * 1e3,
            "U_E_uJ": energies.electric * 1e6,
            "U_L_uJ": energies.magnetic * 1e6,
            "U_total_uJ": energies.total * 1e6,
        }
        if not all(math.isfinite(v) for v in sample.values()):
            return False

        for name, value in sample.items():
            self._buffers[name].append(value)
        return True

    def clear(self) -> None:
        for buffer in self._buffers.values():
            buffer.clear()

    def as_arrays(self) -> Dict[str, npt.NDArray[np.float64]]:
        return {name: buffer.to_array() for name, buffer in self._buffers.items()}
