"""
Figures for velocity models, shot records and wavefield snapshots.

Every function consumes arrays produced by the modeling classes, returns the
matplotlib figure, and optionally saves and/or shows it. Arrays are ordered
(x, z), so they are transposed for display with depth pointing down.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import Normalize

from .modeling import ConfigError, VelocityModel


DEFAULT_PLOT = {
    "title_color": "black",
    "title_size": 12,
    "tick_color": "black",
    "tick_size": 10,
    "colorbar_label_size": 10,
    "colorbar_tick_size": 8,
    "figsize": (10, 8),
    "dpi": 100,
    "source_color": "red",
    "receiver_color": "green",
}


def _plot_config(overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    plot_cfg = dict(DEFAULT_PLOT)
    plot_cfg.update(overrides or {})
    return plot_cfg
# end def _plot_config


def _check_2d(model: VelocityModel) -> None:
    if model.grid.ndim != 2:
        raise ConfigError(f"Only 2D models can be plotted, got a {model.grid.ndim}D model")
    # end if
# end def _check_2d


def _style_axes(ax: plt.Axes, plot_cfg: Dict[str, Any], title: str, xlabel: str, ylabel: str) -> None:
    """
    Apply styling to the axes.

    Args:
        ax (plt.Axes): Axes to style.
        plot_cfg (Dict[str, Any]): Plot configuration.
        title (str): Title for the axes.
        xlabel (str): Label of the horizontal axis.
        ylabel (str): Label of the vertical axis.
    """
    ax.set_title(title, color=plot_cfg["title_color"], fontsize=plot_cfg["title_size"])
    ax.set_xlabel(xlabel, color=plot_cfg["tick_color"], fontsize=plot_cfg["tick_size"])
    ax.set_ylabel(ylabel, color=plot_cfg["tick_color"], fontsize=plot_cfg["tick_size"])
    ax.tick_params(
        axis="both",
        which="both",
        colors=plot_cfg["tick_color"],
        labelsize=plot_cfg["tick_size"],
    )
# end def _style_axes


def _add_colorbar(fig: plt.Figure, image, ax: plt.Axes, plot_cfg: Dict[str, Any], label: str) -> None:
    cbar = fig.colorbar(image, ax=ax)
    cbar.set_label(label, color=plot_cfg["tick_color"], size=plot_cfg["colorbar_label_size"])
    cbar.ax.tick_params(colors=plot_cfg["tick_color"], labelsize=plot_cfg["colorbar_tick_size"])
# end def _add_colorbar


def _finish(fig: plt.Figure, output: Optional[Path], show: bool) -> plt.Figure:
    fig.tight_layout()
    if output is not None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, dpi=150, bbox_inches="tight")
    # end if
    if show:
        plt.show()
    # end if
    return fig
# end def _finish


def _extent(model: VelocityModel) -> Tuple[float, float, float, float]:
    (x0, x1), (z0, z1) = model.grid.extent
    return (x0, x1, z1, z0)
# end def _extent


def plot_velocity(
    model: VelocityModel,
    source: Optional[np.ndarray] = None,
    receivers: Optional[np.ndarray] = None,
    cmap: str = "jet",
    output: Optional[Path] = None,
    show: bool = False,
    plot_cfg: Optional[Dict[str, Any]] = None,
) -> plt.Figure:
    """
    Plot the velocity of the physical domain with the acquisition geometry.

    Args:
        model (VelocityModel): Model to display.
        source (np.ndarray, optional): Source coordinates (npoint, 2).
        receivers (np.ndarray, optional): Receiver coordinates (npoint, 2).
        cmap (str): Colormap name.
        output (Path, optional): File to save the figure to.
        show (bool): Display the figure interactively.
        plot_cfg (dict, optional): Overrides of :data:`DEFAULT_PLOT`.

    Returns:
        plt.Figure: The figure.
    """
    _check_2d(model)
    plot_cfg = _plot_config(plot_cfg)

    fig, ax = plt.subplots(figsize=plot_cfg["figsize"], dpi=plot_cfg["dpi"])
    image = ax.imshow(
        np.transpose(model.vp),
        extent=_extent(model),
        cmap=cmap,
        vmin=model.min_velocity,
        vmax=model.max_velocity,
        aspect="auto",
    )
    _add_colorbar(fig, image, ax, plot_cfg, "Velocity (km/s)")

    if receivers is not None:
        receivers = np.atleast_2d(receivers)
        ax.scatter(receivers[:, 0], receivers[:, 1], s=25, c=plot_cfg["receiver_color"], marker="D", label="Receivers")
    # end if
    if source is not None:
        source = np.atleast_2d(source)
        ax.scatter(source[:, 0], source[:, 1], s=25, c=plot_cfg["source_color"], marker="o", label="Source")
    # end if
    if source is not None or receivers is not None:
        ax.legend(loc="upper right")
    # end if

    (x0, x1), (z0, z1) = model.grid.extent
    ax.set_xlim(x0, x1)
    ax.set_ylim(z1, z0)
    _style_axes(ax, plot_cfg, "Velocity model", "X position (m)", "Depth (m)")
    return _finish(fig, output, show)
# end def plot_velocity


def plot_shotrecord(
    receiver_data: np.ndarray,
    model: VelocityModel,
    t0: float,
    tn: float,
    clip: float = 0.1,
    output: Optional[Path] = None,
    show: bool = False,
    plot_cfg: Optional[Dict[str, Any]] = None,
) -> plt.Figure:
    """
    Plot a shot record (time vertically, receivers horizontally).

    Args:
        receiver_data (np.ndarray): Samples of shape (nt, npoint).
        model (VelocityModel): Model giving the horizontal extent.
        t0 (float): First time (ms).
        tn (float): Last time (ms).
        clip (float): Fraction of the maximum amplitude used as color limit.
        output (Path, optional): File to save the figure to.
        show (bool): Display the figure interactively.
        plot_cfg (dict, optional): Overrides of :data:`DEFAULT_PLOT`.

    Returns:
        plt.Figure: The figure.
    """
    _check_2d(model)
    plot_cfg = _plot_config(plot_cfg)

    scale = clip * (float(np.max(np.abs(receiver_data))) or 1.0)
    (x0, x1), _ = model.grid.extent

    fig, ax = plt.subplots(figsize=plot_cfg["figsize"], dpi=plot_cfg["dpi"])
    image = ax.imshow(
        receiver_data,
        vmin=-scale,
        vmax=scale,
        cmap="gray",
        extent=[x0, x1, 1e-3 * tn, 1e-3 * t0],
        aspect="auto",
    )
    _add_colorbar(fig, image, ax, plot_cfg, "Amplitude")
    _style_axes(ax, plot_cfg, "Shot record", "X position (m)", "Time (s)")
    return _finish(fig, output, show)
# end def plot_shotrecord


def plot_wavefield(
    field: np.ndarray,
    model: VelocityModel,
    time: Optional[float] = None,
    overlay_velocity: bool = True,
    output: Optional[Path] = None,
    show: bool = False,
    plot_cfg: Optional[Dict[str, Any]] = None,
) -> plt.Figure:
    """
    Plot a wavefield snapshot of the physical domain.

    Args:
        field (np.ndarray): Interior wavefield of shape (nx, nz).
        model (VelocityModel): Model on which the field was computed.
        time (float, optional): Snapshot time (ms), shown in the title.
        overlay_velocity (bool): Draw the velocity model underneath.
        output (Path, optional): File to save the figure to.
        show (bool): Display the figure interactively.
        plot_cfg (dict, optional): Overrides of :data:`DEFAULT_PLOT`.

    Returns:
        plt.Figure: The figure.
    """
    _check_2d(model)
    if field.shape != model.shape:
        raise ConfigError(f"Wavefield shape {field.shape} does not match model shape {model.shape}")
    # end if
    plot_cfg = _plot_config(plot_cfg)

    abs_max = float(np.max(np.abs(field))) or 1.0
    fig, ax = plt.subplots(figsize=plot_cfg["figsize"], dpi=plot_cfg["dpi"])
    if overlay_velocity:
        ax.imshow(np.transpose(model.vp), extent=_extent(model), cmap="viridis", alpha=0.5, aspect="auto")
    # end if
    image = ax.imshow(
        np.transpose(field),
        extent=_extent(model),
        cmap="seismic",
        norm=Normalize(vmin=-abs_max, vmax=abs_max),
        alpha=0.8 if overlay_velocity else None,
        aspect="auto",
    )
    _add_colorbar(fig, image, ax, plot_cfg, "Amplitude")

    title = "Wavefield" if time is None else f"Wavefield (t = {time:.1f} ms)"
    _style_axes(ax, plot_cfg, title, "X position (m)", "Depth (m)")
    return _finish(fig, output, show)
# end def plot_wavefield


def plot_wavelet(
    time_values: np.ndarray,
    wavelet: np.ndarray,
    title: str = "Source wavelet",
    output: Optional[Path] = None,
    show: bool = False,
) -> plt.Figure:
    """Plot a source time function (time in ms)."""
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(time_values, wavelet)
    ax.set_xlabel("Time (ms)")
    ax.set_ylabel("Amplitude")
    ax.set_title(title)
    ax.grid(True)
    return _finish(fig, output, show)
# end def plot_wavelet
