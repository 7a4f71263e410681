"""
Absorbing boundary layer.

A damping term ``eta * du/dt`` is switched on inside the padding so that
outgoing waves decay before they reach the edge of the allocated grid and
reflect back into the physical domain.
"""

import numpy as np


# Theoretical reflection coefficient targeted by the damping ramp
REFLECTION_COEFFICIENT = 1e-3


def damping_profile(
    boundary_cell_count: int,
    grid_spacing: float,
    max_velocity: float,
    reflection_coefficient: float = REFLECTION_COEFFICIENT,
) -> np.ndarray:
    """
    Quadratic damping rate across the absorbing layer.

    The classical sponge estimate ``3 c log(1/R) / (2 L)`` sets the rate at the
    outer edge of a layer of thickness ``L`` so that a wave crossing it twice
    is attenuated by roughly ``R``.

    Args:
        boundary_cell_count (int): Number of absorbing cells (nbl).
        grid_spacing (float): Grid spacing normal to the layer (m).
        max_velocity (float): Largest velocity of the model (km/s, i.e. m/ms).
        reflection_coefficient (float): Target reflection amplitude.

    Returns:
        numpy.ndarray: Damping rates (1/ms) for depths ``1..nbl`` into the layer,
            ordered from the interior boundary outwards.
    """
    if boundary_cell_count <= 0:
        return np.zeros(0)
    # end if

    absorbing_thickness = boundary_cell_count * grid_spacing
    damping_scale = 3.0 * max_velocity * np.log(1.0 / reflection_coefficient) / (2.0 * absorbing_thickness)
    depth = np.arange(1, boundary_cell_count + 1) / boundary_cell_count
    return damping_scale * depth ** 2
# end def damping_profile


def damping_rate(
    padded_shape,
    boundary_cell_count: int,
    spacing,
    max_velocity: float,
    reflection_coefficient: float = REFLECTION_COEFFICIENT,
) -> np.ndarray:
    """
    Build the damping rate ``sigma`` on the padded grid.

    Contributions of the different axes are summed, so corners damp the most.
    The rate is exactly zero on every interior point and grows monotonically
    towards the outer edge of the padding.

    Args:
        padded_shape (tuple): Shape of the padded arrays.
        boundary_cell_count (int): Number of absorbing cells on each edge.
        spacing (tuple): Grid spacing per axis (m).
        max_velocity (float): Largest velocity of the model (km/s).
        reflection_coefficient (float): Target reflection amplitude.

    Returns:
        numpy.ndarray: Damping rate (1/ms) for each padded grid point.
    """
    sigma = np.zeros(padded_shape, dtype=np.float64)
    if boundary_cell_count <= 0:
        return sigma
    # end if

    for axis, (n_padded, h) in enumerate(zip(padded_shape, spacing)):
        profile = damping_profile(boundary_cell_count, h, max_velocity, reflection_coefficient)
        axis_sigma = np.zeros(n_padded)
        axis_sigma[:boundary_cell_count] = profile[::-1]
        axis_sigma[n_padded - boundary_cell_count:] = profile

        # Broadcast the 1D ramp along the other axes
        broadcast_shape = [1] * len(padded_shape)
        broadcast_shape[axis] = n_padded
        sigma += axis_sigma.reshape(broadcast_shape)
    # end for

    return sigma
# end def damping_rate
