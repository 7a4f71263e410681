"""
Wavelet Generators for Seismic Modeling.

This module provides the time axis bookkeeping of a simulation and the
Ricker wavelet (Mexican hat wavelet) used as the default source signature.
Times are expressed in milliseconds and frequencies in kHz.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from rich.console import Console

from .exceptions import ConfigError


console = Console()


class TimeAxis:
    """
    Regular sampling of the simulation time.

    Exactly two of ``stop``, ``step`` and ``num`` must be given together with
    ``start``. When ``stop`` and ``step`` are given the number of samples is
    ``ceil((stop - start + step) / step)`` so that ``stop`` is covered.

    Attributes:
        start (float): First time sample (ms).
        stop (float): Last time sample (ms).
        step (float): Sampling interval (ms).
        num (int): Number of samples.
    """

    def __init__(
        self,
        start: float = 0.0,
        stop: Optional[float] = None,
        step: Optional[float] = None,
        num: Optional[int] = None,
    ):
        given = sum(value is not None for value in (stop, step, num))
        if given != 2:
            raise ConfigError("TimeAxis needs exactly two of 'stop', 'step' and 'num'")
        # end if

        if num is None:
            if step <= 0:
                raise ConfigError(f"Time step must be positive, got {step}")
            # end if
            num = int(np.ceil((stop - start + step) / step))
            stop = start + step * (num - 1)
        elif step is None:
            if num < 2:
                raise ConfigError(f"TimeAxis needs at least 2 samples, got {num}")
            # end if
            step = (stop - start) / (num - 1)
        else:
            stop = start + step * (num - 1)
        # end if

        if step <= 0 or num < 1:
            raise ConfigError(f"Invalid time axis: step={step}, num={num}")
        # end if

        self.start = float(start)
        self.stop = float(stop)
        self.step = float(step)
        self.num = int(num)
    # end def __init__

    @property
    def time_values(self) -> np.ndarray:
        """Sample times (ms)."""
        return self.start + np.arange(self.num) * self.step

    def __len__(self) -> int:
        return self.num

    def __repr__(self) -> str:
        return f"TimeAxis(start={self.start}, stop={self.stop}, step={self.step:.6g}, num={self.num})"

# end class TimeAxis


def ricker(
        frequency: float,
        time_values: np.ndarray,
        t0: Optional[float] = None,
        amplitude: float = 1.0,
        log: bool = False,
) -> np.ndarray:
    """
    Generate a Ricker wavelet (Mexican hat wavelet).

    A Ricker wavelet is commonly used in seismic modeling to represent
    a seismic source. It is the negative normalized second derivative of a
    Gaussian function and has a characteristic shape with a main peak and
    two smaller side lobes.

    Args:
        frequency (float): Peak frequency of the wavelet in kHz.
        time_values (numpy.ndarray): Sample times in ms.
        t0 (float, optional): Time of the main peak in ms. Defaults to ``1 / frequency``
            so that the wavelet starts close to zero at ``t = 0``.
        amplitude (float, optional): Amplitude of the main peak.
        log (bool, optional): If True, the wavelet parameters are logged.

    Returns:
        numpy.ndarray: The wavelet samples, same length as ``time_values``.

    Example:
        >>> time_axis = TimeAxis(start=0.0, stop=1000.0, step=1.0)
        >>> wavelet = ricker(0.010, time_axis.time_values)  # 10 Hz peak
    """
    if frequency <= 0:
        raise ConfigError(f"Ricker frequency must be positive, got {frequency}")
    # end if
    if t0 is None:
        t0 = 1.0 / frequency
    # end if

    if log:
        console.log(f"[green]Generating Ricker wavelet[/]")
        console.log(f"[yellow]Frequency: [/] {frequency} kHz")
        console.log(f"[yellow]Peak time: [/] {t0} ms")
        console.log(f"[yellow]Number of samples: [/] {len(time_values)}")
    # end if

    # (1 - 2 beta) exp(-beta) with beta = (pi f (t - t0))^2
    beta = (np.pi * frequency * (np.asarray(time_values, dtype=np.float64) - t0)) ** 2
    return amplitude * (1.0 - 2.0 * beta) * np.exp(-beta)
# end def ricker
