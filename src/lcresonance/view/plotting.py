"""
Plotting Utilities
Charts of the rolling history (matplotlib) and conversion of the spatial
outputs into PyVista datasets for 3D renderers.
"""
from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
import pyvista as pv

from lcresonance.config import HIDDEN_POSITION

if TYPE_CHECKING:
    import numpy.typing as npt
    from matplotlib.figure import Figure

    from lcresonance.model.path import CompositePath
    from lcresonance.simulation.history import History
    from lcresonance.simulation.kinematics import FieldIndicator


def _style_axes(ax: plt.Axes) -> None:
    ax.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
    ax.minorticks_on()
    ax.grid(visible=True, which='minor', axis='both', linestyle=':', color='gray', lw=0.5)


def plot_history(history: History, show: bool = False) -> Figure:
    """
    Plot charge & current and the energies over the rolling window.

    Args:
        history: The rolling history of the simulation.
        show: Call ``plt.show()`` after drawing.

    Returns:
        The created figure.
    """
    data = history.as_arrays()
    t = data["t"]

    plt.rcParams["figure.constrained_layout.use"] = True
    fig, (ax_qi, ax_energy) = plt.subplots(2, 1, figsize=(7, 6), sharex=True)

    ax_qi.plot(t, data["Q_uC"], color='#5dade2', lw=1.5, label='Q (µC)')
    ax_qi.set_ylabel("Q (µC)")
    ax_i = ax_qi.twinx()
    ax_i.plot(t, data["I_mA"], color='#e74c3c', lw=1.5, label='I (mA)')
    ax_i.set_ylabel("I (mA)")
    _style_axes(ax_qi)
    ax_qi.set_title("Charge & Current")
    lines = ax_qi.get_lines() + ax_i.get_lines()
    ax_qi.legend(lines, [line.get_label() for line in lines], loc='best')

    ax_energy.fill_between(t, data["U_E_uJ"], color='#5dade2', alpha=0.1)
    ax_energy.plot(t, data["U_E_uJ"], color='#5dade2', lw=1.5, label='U E')
    ax_energy.fill_between(t, data["U_L_uJ"], color='#e74c3c', alpha=0.1)
    ax_energy.plot(t, data["U_L_uJ"], color='#e74c3c', lw=1.5, label='U B')
    ax_energy.plot(t, data["U_total_uJ"], color='#af7ac5', lw=1.5, linestyle='--', label='U Tot')
    ax_energy.set_ylim(bottom=0.0)
    _style_axes(ax_energy)
    ax_energy.set_title("Energy (µJ)")
    ax_energy.set_xlabel("Time (s)")
    ax_energy.set_ylabel("Energy")
    ax_energy.legend(loc='best')

    if len(t) > 1:
        ax_energy.set_xlim(t[0], t[-1])

    if show:
        plt.show()
    return fig


def path_to_polydata(path: CompositePath, max_length: Optional[float] = 0.05) -> pv.PolyData:
    """Polyline of the whole circuit loop."""
    points = path.discretize(max_length=max_length)
    return pv.lines_from_points(points)


def carriers_to_polydata(
    positions: npt.NDArray[np.float64],
    hidden: Sequence[float] = HIDDEN_POSITION
) -> pv.PolyData:
    """Point cloud of the visible charge carriers; hidden ones are left out."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    visible = ~np.all(positions == np.asarray(hidden, dtype=np.float64), axis=1)
    if not np.any(visible):
        return pv.PolyData()
    return pv.PolyData(positions[visible])


def indicators_to_polydata(indicators: Sequence[FieldIndicator]) -> pv.PolyData:
    """
    Anchor points with a ``vectors`` array (direction scaled by magnitude),
    ready for ``PolyData.glyph(orient="vectors")``.
    """
    if not indicators:
        return pv.PolyData()
    anchors = np.array([ind.anchor for ind in indicators], dtype=np.float64)
    vectors = np.array([np.multiply(ind.direction, ind.magnitude) for ind in indicators], dtype=np.float64)
    cloud = pv.PolyData(anchors)
    cloud.point_data["vectors"] = vectors
    return cloud
