"""
Single-shot acoustic simulation driven by a configuration.

This module glues the configuration sections to the modeling classes: it
builds the velocity model, the time axis, the Ricker source and the receiver
line, runs the forward propagator and stores the shot record.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
from rich.console import Console

from .config import ModelSection, SimulationConfig
from .modeling import (
    AcousticForwardPropagator,
    Grid,
    ReceiverArray,
    SourceWavelet,
    TimeAxis,
    VelocityModel,
    check_velocity,
    circle_velocity,
    layered_velocity,
    points_per_wavelength,
    receiver_line,
    smooth_model,
)
from .modeling.exceptions import ConfigError


console = Console()


def _load_velocity_file(path: Path) -> np.ndarray:
    """
    Load a velocity array saved with ``numpy.save``.

    Args:
        path (Path): Path to the ``.npy`` file.

    Returns:
        np.ndarray: Velocity array (km/s).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Velocity model file not found: {path}")
    # end if
    try:
        return np.load(path)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to load velocity model from {path}: {e}") from e
    # end try
# end def _load_velocity_file


def build_velocity_array(section: ModelSection, grid: Grid) -> np.ndarray:
    """
    Create the raw velocity array described by a model section.

    Args:
        section (ModelSection): Model section of the configuration.
        grid (Grid): Target grid.

    Returns:
        np.ndarray: Velocity array with the grid's physical shape.
    """
    shape = tuple(grid.shape)
    if section.type == "constant":
        vp = np.full(shape, section.vp)
    elif section.type == "layered":
        vp = layered_velocity(shape, section.layers)
    elif section.type == "circle":
        vp = circle_velocity(
            shape, grid.spacing, section.vp_background, section.vp_circle, section.radius
        )
    else:
        vp = _load_velocity_file(section.path)
        if vp.shape != shape:
            raise ConfigError(
                f"Velocity model in {section.path} has shape {vp.shape}, grid expects {shape}"
            )
        # end if
    # end if
    return check_velocity(vp)
# end def build_velocity_array


def build_model(config: SimulationConfig) -> VelocityModel:
    """Create the velocity model of a configuration."""
    grid = Grid(
        shape=config.grid.shape,
        spacing=config.grid.spacing,
        origin=config.grid.origin,
        nbl=config.grid.nbl,
    )
    model = VelocityModel(build_velocity_array(config.model, grid), grid)
    if config.model.smooth:
        model = smooth_model(model, sigma=config.model.smooth)
    # end if
    return model
# end def build_model


def build_time_axis(config: SimulationConfig, model: VelocityModel) -> TimeAxis:
    """
    Time axis of a configuration.

    ``dt: critical`` selects the critical time step of the model and stencil.
    """
    propagation = config.propagation
    if propagation.dt == "critical":
        dt = model.critical_dt(propagation.space_order)
    else:
        dt = float(propagation.dt)
    # end if

    if propagation.nt is not None:
        return TimeAxis(start=0.0, step=dt, num=propagation.nt)
    # end if
    return TimeAxis(start=0.0, stop=propagation.tn, step=dt)
# end def build_time_axis


def run_shot(
    config: SimulationConfig,
    log: bool = False,
    progress: bool = False,
) -> Dict[str, Any]:
    """
    Run the forward simulation of a single shot.

    Args:
        config (SimulationConfig): Validated configuration.
        log (bool): Print the setup and a dispersion estimate.
        progress (bool): Display a progress bar while propagating.

    Returns:
        dict: Simulation results containing:
            - 'model': The VelocityModel
            - 'time_axis': The TimeAxis
            - 'source': The SourceWavelet
            - 'receivers': The ReceiverArray
            - 'receiver_data': Shot record of shape (nt, npoint)
            - 'wavefield': Interior wavefield (last slice, or history when saving)
            - 'critical_dt': Critical time step (ms)
    """
    model = build_model(config)
    time_axis = build_time_axis(config, model)

    source = SourceWavelet.ricker(
        np.asarray(config.source.coordinates, dtype=np.float64),
        time_axis,
        f0=config.source.f0,
        t0=config.source.t0,
        amplitude=config.source.amplitude,
        interpolation=config.source.interpolation,
    )

    if config.receivers.coordinates is not None:
        receiver_coordinates = np.asarray(config.receivers.coordinates, dtype=np.float64)
    else:
        receiver_coordinates = receiver_line(
            config.receivers.start, config.receivers.end, config.receivers.npoint
        )
    # end if
    receivers = ReceiverArray(
        receiver_coordinates, time_axis.num, interpolation=config.receivers.interpolation
    )

    if log:
        console.log(f"[yellow]Time axis:[/] {time_axis}")
        console.log(f"[yellow]Sources:[/] {source.npoint}, [yellow]receivers:[/] {receivers.npoint}")
        ppw = points_per_wavelength(model.min_velocity, config.source.f0, max(model.spacing))
        console.log(f"[yellow]Points per minimum wavelength:[/] {ppw:.1f}")
        if ppw < 5.0:
            console.log("[red]Warning:[/] fewer than 5 points per wavelength, expect numerical dispersion")
        # end if
    # end if

    propagator = AcousticForwardPropagator(
        model,
        nt=time_axis.num,
        dt=time_axis.step,
        source=source,
        receivers=receivers,
        space_order=config.propagation.space_order,
        save=config.propagation.save,
        log=log,
    )
    results = propagator.run(progress=progress)

    return {
        "model": model,
        "time_axis": time_axis,
        "source": source,
        "receivers": receivers,
        "receiver_data": results["receiver_data"],
        "wavefield": propagator.interior_wavefield(),
        "critical_dt": results["critical_dt"],
    }
# end def run_shot


def save_results(
    results: Dict[str, Any],
    output_dir: Path,
    save_wavefield: bool = False,
) -> Dict[str, Path]:
    """
    Write the shot record (and optionally the wavefield) as ``.npy`` files.

    Args:
        results (dict): Output of :func:`run_shot`.
        output_dir (Path): Destination directory, created if needed.
        save_wavefield (bool): Also store the interior wavefield.

    Returns:
        Dict[str, Path]: Written files by kind.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = {}
    written["shot_record"] = output_dir / "shot_record.npy"
    np.save(written["shot_record"], results["receiver_data"])

    written["receivers"] = output_dir / "receiver_coordinates.npy"
    np.save(written["receivers"], results["receivers"].coordinates)

    if save_wavefield:
        written["wavefield"] = output_dir / "wavefield.npy"
        np.save(written["wavefield"], results["wavefield"])
    # end if

    return written
# end def save_results


def run_from_file(
    config_path: Path,
    output_dir: Optional[Path] = None,
    save_wavefield: bool = False,
    log: bool = False,
    progress: bool = False,
) -> Dict[str, Any]:
    """
    Load a YAML configuration, run the shot and optionally save it.

    Returns:
        dict: Results of :func:`run_shot`, with the written files under 'files'.
    """
    config = SimulationConfig.from_yaml(Path(config_path).expanduser())
    results = run_shot(config, log=log, progress=progress)
    results["config"] = config
    results["files"] = save_results(results, output_dir, save_wavefield) if output_dir is not None else {}
    return results
# end def run_from_file
