"""
Wavelet subcommands of the fwiprop CLI.

The ``wavelets`` group samples the source signatures used by the propagator
on a time axis and plots or stores them.
"""

# Imports
from pathlib import Path
from typing import Optional

import click
import numpy as np

from fwiprop.modeling.exceptions import FWIPropError
from fwiprop.modeling.wavelets import TimeAxis, ricker
from fwiprop.plotting import plot_wavelet


@click.group(help="Inspect source wavelets before running a simulation.")
def wavelets() -> None:
    """
    Group of the wavelet subcommands.
    """
    pass
# end wavelets


@wavelets.command(help="Sample a Ricker wavelet and plot it.")
@click.option(
    "--frequency",
    "-f",
    type=float,
    required=True,
    help="Peak frequency of the wavelet in kHz (0.010 for 10 Hz).",
)
@click.option(
    "--time-step",
    "-dt",
    type=float,
    required=True,
    help="Sampling interval in ms.",
)
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Length of the signal in ms. Defaults to three periods.",
)
@click.option(
    "--t0",
    type=float,
    default=None,
    help="Time of the main peak in ms. Defaults to one period.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="PNG file for the figure; the figure is shown on screen when omitted.",
)
@click.option(
    "--save-data",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Optional .npy file receiving a (2, nt) array of times and amplitudes.",
)
def ricker_wavelet(
    frequency: float,
    time_step: float,
    duration: Optional[float],
    t0: Optional[float],
    output: Optional[Path],
    save_data: Optional[Path],
) -> None:
    """
    Sample a Ricker wavelet on a regular time axis and plot it.

    Args:
        frequency: Peak frequency of the wavelet in kHz.
        time_step: Sampling interval in ms.
        duration: Signal length in ms, three periods when omitted.
        t0: Time of the main peak in ms.
        output: Figure destination, shown on screen when omitted.
        save_data: Where to store the stacked times and amplitudes.
    """
    try:
        if frequency <= 0:
            raise click.BadParameter("frequency must be positive", param_hint="--frequency")
        # end if
        if duration is None:
            duration = 3.0 / frequency
        # end if

        time_axis = TimeAxis(start=0.0, stop=duration, step=time_step)
        wavelet = ricker(frequency, time_axis.time_values, t0=t0, log=True)

        # Row 0 holds the times, row 1 the amplitudes
        if save_data is not None:
            save_data = Path(save_data)
            save_data.parent.mkdir(parents=True, exist_ok=True)
            np.save(save_data, np.stack([time_axis.time_values, wavelet]))
            click.echo(f"Samples written to {save_data}")
        # end if

        plot_wavelet(
            time_axis.time_values,
            wavelet,
            title=f"Ricker Wavelet (f0={frequency} kHz, dt={time_step} ms)",
            output=output,
            show=output is None,
        )
        if output is not None:
            click.echo(f"Figure written to {output}")
        # end if
    except FWIPropError as exc:
        raise click.ClickException(str(exc)) from exc
    # end try
# end def ricker_wavelet
