"""
Command-line interface for running fwiprop simulations.

This module exposes a Click-based CLI that wraps the forward modelling
helpers: running a shot from a YAML configuration, computing the critical
time step of a grid, building layered velocity files and plotting wavelets.
"""

# Imports
from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence, Tuple
import click
import numpy as np
import yaml
from rich.console import Console
from rich.table import Table
from fwiprop.cli_wavelets import wavelets
from fwiprop.config import SimulationConfig
from fwiprop.modeling import Grid, VelocityModel, check_velocity, layered_velocity
from fwiprop.modeling.exceptions import FWIPropError
from fwiprop.simulation import run_from_file

# Console used by every command for status output
console = Console()


class ClickBaseException(click.ClickException):
    """
    Error reported to the user by Click as ``Error: <message>``.

    Domain errors raised by the modelling layer are wrapped so that the
    command exits with a non-zero status and a one-line message.
    """

    def __init__(self, exc: Exception):
        super().__init__(str(exc))
    # end def __init__

# end class ClickBaseException


@click.group(help="Command-line interface for acoustic forward modelling.")
def cli() -> None:
    """
    Root group of the ``fwiprop`` command.
    """
# end def cli

# Wavelet subcommands live in their own module
cli.add_command(wavelets)


@cli.command(help="Run a single-shot acoustic simulation from a YAML configuration.")
@click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Path to the YAML configuration file.",
)
@click.option(
    "--output",
    "output_dir",
    required=True,
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True),
    help="Directory where the shot record and figures are written.",
)
@click.option(
    "--plot/--no-plot",
    default=True,
    show_default=True,
    help="Save figures of the model, the shot record and the last wavefield.",
)
@click.option(
    "--save-wavefield",
    is_flag=True,
    help="Also write the interior wavefield to wavefield.npy.",
)
@click.option(
    "--progress/--no-progress",
    default=True,
    show_default=True,
    help="Display a progress bar while propagating.",
)
def run(
    config_path: Path,
    output_dir: Path,
    plot: bool,
    save_wavefield: bool,
    progress: bool,
) -> None:
    """
    Run the simulation and save its outputs.

    Args:
        config_path: Path to the YAML configuration describing the simulation.
        output_dir: Directory receiving ``shot_record.npy`` and figures.
        plot: Whether to write PNG figures.
        save_wavefield: Whether to write the wavefield array.
        progress: Whether to show a progress bar.
    """
    try:
        console.log(f"[green]Running simulation from[/green] {config_path}")
        results = run_from_file(
            config_path,
            output_dir=output_dir,
            save_wavefield=save_wavefield,
            log=True,
            progress=progress,
        )
    except (FileNotFoundError, FWIPropError, yaml.YAMLError) as exc:
        raise ClickBaseException(exc) from exc
    # end try

    model = results["model"]
    time_axis = results["time_axis"]
    figure_paths = []
    if plot and model.grid.ndim == 2:
        from fwiprop.plotting import plot_shotrecord, plot_velocity, plot_wavefield
        import matplotlib.pyplot as plt

        console.log("[green]Writing figures[/green]")
        output_dir = Path(output_dir)
        wavefield = results["wavefield"]
        last_slice = wavefield[-1] if wavefield.ndim == model.grid.ndim + 1 else wavefield
        figures = [
            plot_velocity(
                model,
                source=results["source"].coordinates,
                receivers=results["receivers"].coordinates,
                output=output_dir / "velocity.png",
            ),
            plot_shotrecord(
                results["receiver_data"], model, time_axis.start, time_axis.stop,
                output=output_dir / "shot_record.png",
            ),
            plot_wavefield(last_slice, model, time=time_axis.stop, output=output_dir / "wavefield.png"),
        ]
        for fig in figures:
            plt.close(fig)
        # end for
        figure_paths = [output_dir / name for name in ("velocity.png", "shot_record.png", "wavefield.png")]
    # end if

    # Summary of the run and of the files written
    info_table = Table(title="Simulation Summary")
    info_table.add_column("Setting", style="cyan", no_wrap=True)
    info_table.add_column("Value", style="magenta")
    info_table.add_row("Configuration", str(config_path))
    info_table.add_row("Model", str(model))
    info_table.add_row("Time axis", repr(time_axis))
    info_table.add_row("Critical dt (ms)", f"{results['critical_dt']:.6g}")
    for kind, path in results["files"].items():
        info_table.add_row(kind.replace("_", " ").capitalize(), str(path))
    # end for
    for path in figure_paths:
        info_table.add_row("Figure", str(path))
    # end for
    console.print(info_table)
# end def run


@cli.command(
    name="critical-dt",
    help="Print the critical time step of a grid for a given maximum velocity.",
)
@click.option(
    "--shape",
    type=int,
    multiple=True,
    required=True,
    help="Number of grid points per dimension; repeat for each dimension.",
)
@click.option(
    "--spacing",
    type=float,
    multiple=True,
    required=True,
    help="Grid spacing in metres per dimension; repeat for each dimension.",
)
@click.option(
    "--vmax",
    type=float,
    required=True,
    help="Maximum velocity of the model in km/s.",
)
@click.option(
    "--space-order",
    type=int,
    default=2,
    show_default=True,
    help="Even order of the finite-difference Laplacian.",
)
def critical_dt(
    shape: Tuple[int, ...],
    spacing: Tuple[float, ...],
    vmax: float,
    space_order: int,
) -> None:
    """
    Compute the largest stable time step.

    Args:
        shape: Grid shape.
        spacing: Grid spacing (m).
        vmax: Maximum velocity (km/s).
        space_order: Spatial order of the stencil.
    """
    try:
        grid = Grid(shape=shape, spacing=spacing, nbl=0)
        model = VelocityModel(np.full(tuple(shape), vmax), grid)
        value = model.critical_dt(space_order)
    except FWIPropError as exc:
        raise ClickBaseException(exc) from exc
    # end try
    console.print(f"[green]Critical dt:[/green] {value:.6g} ms")
# end def critical_dt


@cli.command(
    name="layered-model",
    help="Write a horizontally layered velocity array (km/s) usable as a 'file' model.",
)
@click.option(
    "--shape",
    nargs=2,
    type=int,
    required=True,
    help="Number of grid points along x and along depth.",
)
@click.option(
    "--layer",
    "layers",
    nargs=2,
    type=(int, float),
    multiple=True,
    required=True,
    help="THICKNESS VELOCITY of a layer, top to bottom; a final thickness of 0 fills the rest.",
)
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Destination ``.npy`` file.",
)
@click.option(
    "--spacing",
    nargs=2,
    type=float,
    default=None,
    help="Grid spacing in metres; when given, a PNG preview is written next to the array.",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Replace an existing output file.",
)
def layered_model(
        shape: Tuple[int, int],
        layers: Sequence[Tuple[int, float]],
        output_path: Path,
        spacing: Optional[Tuple[float, float]],
        overwrite: bool,
) -> None:
    """
    Build a layered velocity array and save it with ``numpy.save``.

    Args:
        shape: (nx, nz) grid size; layers stack along the second axis.
        layers: ``(thickness, velocity)`` pairs in grid points and km/s.
        output_path: Destination of the array.
        spacing: Optional grid spacing used for the preview figure.
        overwrite: Whether an existing file may be replaced.
    """
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise click.ClickException(f"{output_path} exists, pass --overwrite to replace it")
    # end if

    try:
        vp = check_velocity(layered_velocity(shape, list(layers)))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        np.save(output_path, vp)

        if spacing is not None:
            from fwiprop.plotting import plot_velocity
            import matplotlib.pyplot as plt

            model = VelocityModel.from_array(vp, spacing, nbl=0)
            plt.close(plot_velocity(model, output=output_path.with_suffix(".png")))
        # end if
    except (FWIPropError, OSError) as exc:
        raise ClickBaseException(exc) from exc
    # end try
    console.print(f"[green]Layered model {vp.shape} written to[/green] {output_path}")
# end def layered_model


@cli.command(
    name="init-config",
    help="Write a YAML configuration with every default value.",
)
@click.argument(
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
)
def init_config(output_path: Path) -> None:
    """
    Write the default configuration as a starting point.

    Args:
        output_path: Destination YAML file.
    """
    try:
        SimulationConfig().to_yaml(output_path)
    except OSError as exc:
        raise ClickBaseException(exc) from exc
    # end try
    console.print(f"[green]Default configuration written to[/green] {output_path}")
# end def init_config


def main(
        argv: Optional[Sequence[str]] = None
) -> int:
    """
    Run the ``fwiprop`` command and return a process exit status.

    Args:
        argv: Arguments without the program name, defaults to ``sys.argv[1:]``.

    Returns:
        0 when the command completed, 1 when it failed or was aborted.
    """
    try:
        cli.main(args=list(argv) if argv is not None else None, prog_name="fwiprop", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 1
    except click.exceptions.Abort:
        return 1
    # end try
    return 0
# end def main


if __name__ == "__main__":
    raise SystemExit(main())
# end if
