"""
Validation utilities for velocity models.

This module provides checks applied to raw velocity arrays before they are
turned into a :class:`~fwiprop.modeling.velocity_model.VelocityModel`.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from rich.console import Console

from .exceptions import ConfigError


console = Console()


def check_velocity(
    vp: np.ndarray,
    min_v: Optional[float] = None,
    max_v: Optional[float] = None,
    verbose: bool = False,
) -> np.ndarray:
    """
    Check that a velocity array can be used for wave propagation.

    A valid model:
    - Does not contain NaN or Inf values
    - Is strictly positive everywhere (so that ``m = 1 / vp**2`` is finite and positive)
    - Stays within ``[min_v, max_v]`` when bounds are given

    Args:
        vp: Velocity model (km/s) as a numpy array
        min_v: Minimum allowed velocity value
        max_v: Maximum allowed velocity value
        verbose: Whether to print a short summary of the model

    Returns:
        The velocity array as float64

    Raises:
        ConfigError: If one of the checks fails
    """
    vp = np.asarray(vp, dtype=np.float64)

    if vp.size == 0:
        raise ConfigError("Velocity model is empty")
    # end if

    if np.isnan(vp).any() or np.isinf(vp).any():
        raise ConfigError("NaN or Inf detected in the velocity model")
    # end if

    if np.any(vp <= 0):
        raise ConfigError(f"{np.mean(vp <= 0) * 100:.2f}% of the velocity values are <= 0")
    # end if

    if min_v is not None and vp.min() < min_v:
        raise ConfigError(f"Velocity {vp.min():.4f} below the allowed minimum {min_v}")
    # end if

    if max_v is not None and vp.max() > max_v:
        raise ConfigError(f"Velocity {vp.max():.4f} above the allowed maximum {max_v}")
    # end if

    if verbose:
        console.log(
            f"[green]Velocity model OK[/] shape={vp.shape}, "
            f"range=[{vp.min():.3f}, {vp.max():.3f}] km/s"
        )
    # end if

    return vp
# end def check_velocity


def points_per_wavelength(min_velocity: float, peak_frequency: float, spacing: float) -> float:
    """
    Number of grid points per minimum wavelength.

    Uses ``2.5 * f0`` as the highest significant frequency of a Ricker wavelet.

    Args:
        min_velocity: Slowest velocity (km/s)
        peak_frequency: Peak frequency of the source (kHz)
        spacing: Largest grid spacing (m)

    Returns:
        Points per wavelength; values below ~5 lead to visible numerical dispersion
    """
    if peak_frequency <= 0 or spacing <= 0:
        raise ConfigError("peak_frequency and spacing must be positive")
    # end if
    return float(min_velocity / (2.5 * peak_frequency) / spacing)
# end def points_per_wavelength
