"""
Demo velocity models.

Small collection of synthetic media used for forward-modelling experiments:
homogeneous, horizontally layered, a circular anomaly in a constant
background (the classic FWI test case), and smoothed copies used as starting
models. Arrays are ordered (x, y[, z]) with the last axis pointing down.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.ndimage import gaussian_filter

from .exceptions import ConfigError
from .validation import check_velocity
from .velocity_model import VelocityModel


def constant_model(
        shape: Sequence[int],
        spacing: Sequence[float],
        vp: float = 1.5,
        nbl: int = 40,
        origin: Optional[Sequence[float]] = None,
) -> VelocityModel:
    """Homogeneous medium with velocity ``vp`` (km/s)."""
    data = np.full(tuple(shape), float(vp))
    return VelocityModel.from_array(check_velocity(data), spacing, origin=origin, nbl=nbl)
# end def constant_model


def layered_velocity(
        shape: Sequence[int],
        layers: Sequence[Tuple[int, float]],
) -> np.ndarray:
    """
    Construct a stratified velocity array from layer specifications.

    Args:
        shape: Grid shape (x, y[, z]); layers stack along the last axis.
        layers: Sequence of ``(thickness, velocity)`` pairs from top to bottom.
            The final layer may use a thickness of ``0`` to fill the remaining depth.

    Returns:
        Velocity array of the requested shape.

    Raises:
        ConfigError: If the layers are empty, use a non-positive thickness
            (apart from a trailing zero) or do not add up to the depth.
    """
    if not layers:
        raise ConfigError("At least one layer specification must be provided.")
    # end if

    shape = tuple(shape)
    nz = shape[-1]
    model = np.empty(shape, dtype=np.float64)

    depth_index = 0
    last_index = len(layers) - 1

    for idx, (layer_thickness, velocity) in enumerate(layers):
        if layer_thickness < 0:
            raise ConfigError("Layer thickness must be non-negative.")
        # end if

        if idx == last_index and layer_thickness == 0:
            if depth_index >= nz:
                raise ConfigError("No remaining depth to fill: preceding layers already reach nz.")
            # end if
            model[..., depth_index:] = float(velocity)
            depth_index = nz
            continue
        # end if

        if layer_thickness == 0:
            raise ConfigError("Only the final layer may use zero thickness.")
        # end if

        next_depth = depth_index + int(layer_thickness)
        if next_depth > nz:
            raise ConfigError(f"Layer thicknesses exceed nz={nz}; adjust layer definitions.")
        # end if

        model[..., depth_index:next_depth] = float(velocity)
        depth_index = next_depth
    # end for

    if depth_index != nz:
        raise ConfigError(
            f"Sum of layer thicknesses ({depth_index}) must match nz ({nz}). "
            "Set the final layer thickness to 0 to fill the remaining depth."
        )
    # end if

    return model
# end def layered_velocity


def layered_model(
        shape: Sequence[int],
        spacing: Sequence[float],
        layers: Sequence[Tuple[int, float]],
        nbl: int = 40,
        origin: Optional[Sequence[float]] = None,
) -> VelocityModel:
    """Horizontally layered medium, see :func:`layered_velocity`."""
    data = check_velocity(layered_velocity(shape, layers))
    return VelocityModel.from_array(data, spacing, origin=origin, nbl=nbl)
# end def layered_model


def circle_velocity(
        shape: Sequence[int],
        spacing: Sequence[float],
        vp_background: float = 2.5,
        vp_circle: float = 3.0,
        radius: Optional[float] = None,
        center: Optional[Sequence[float]] = None,
) -> np.ndarray:
    """
    Constant background with a circular (spherical in 3D) anomaly.

    Args:
        shape: Grid shape.
        spacing: Grid spacing (m).
        vp_background: Background velocity (km/s).
        vp_circle: Velocity inside the anomaly (km/s).
        radius: Anomaly radius in metres, 15% of the smallest extent by default.
        center: Anomaly centre relative to the first grid point (m), the middle of the domain by default.

    Returns:
        Velocity array of the requested shape.
    """
    shape = tuple(shape)
    spacing = np.asarray(spacing, dtype=np.float64)
    lengths = (np.asarray(shape) - 1) * spacing

    if radius is None:
        radius = 0.15 * float(lengths.min())
    # end if
    if radius <= 0:
        raise ConfigError(f"Anomaly radius must be positive, got {radius}")
    # end if
    center = lengths / 2.0 if center is None else np.asarray(center, dtype=np.float64)

    axes = [np.arange(n) * h for n, h in zip(shape, spacing)]
    mesh = np.meshgrid(*axes, indexing="ij")
    distance2 = sum((coordinate - c) ** 2 for coordinate, c in zip(mesh, center))

    model = np.full(shape, float(vp_background))
    model[distance2 <= radius ** 2] = float(vp_circle)
    return model
# end def circle_velocity


def circle_model(
        shape: Sequence[int],
        spacing: Sequence[float],
        vp_background: float = 2.5,
        vp_circle: float = 3.0,
        radius: Optional[float] = None,
        nbl: int = 40,
        origin: Optional[Sequence[float]] = None,
) -> VelocityModel:
    """Circular anomaly model, see :func:`circle_velocity`."""
    data = circle_velocity(shape, spacing, vp_background, vp_circle, radius)
    return VelocityModel.from_array(check_velocity(data), spacing, origin=origin, nbl=nbl)
# end def circle_model


def smooth_model(model: VelocityModel, sigma: float = 5.0) -> VelocityModel:
    """
    Gaussian-smoothed copy of a model, typically the starting model of an inversion.

    Smoothing is applied to the slowness to keep travel times close to the
    original medium.

    Args:
        model: Model to smooth.
        sigma: Standard deviation of the gaussian kernel in grid points.

    Returns:
        A new model on the same grid and with the same absorbing layer.
    """
    if sigma < 0:
        raise ConfigError(f"sigma must be non-negative, got {sigma}")
    # end if
    slowness = gaussian_filter(1.0 / model.vp, sigma=sigma, mode="nearest")
    return VelocityModel(1.0 / slowness, model.grid, reflection_coefficient=model.reflection_coefficient)
# end def smooth_model
