"""
Finite-difference stencils for the acoustic wave equation.

The Laplacian is separable: a centred second-derivative stencil is applied
along each axis and the contributions are summed. The weights of the
centred stencil of order ``2k`` have the closed form

    w_j = 2 (-1)^(j+1) (k!)^2 / (j^2 (k-j)! (k+j)!),   j = 1..k
    w_0 = -2 sum_j w_j

so a weight table is computed once per propagator instead of being derived
from expressions at run time.
"""

from __future__ import annotations

from functools import lru_cache
from math import factorial
from typing import Sequence, Tuple

import numpy as np

from .exceptions import ConfigError


def validate_space_order(space_order: int) -> int:
    """
    Check that a spatial order is an even integer of at least 2.

    Returns:
        int: The validated order.

    Raises:
        ConfigError: If the order is odd, too small or not an integer.
    """
    try:
        is_integer = not isinstance(space_order, bool) and int(space_order) == space_order
    except (TypeError, ValueError):
        is_integer = False
    # end try
    if not is_integer:
        raise ConfigError(f"space_order must be an integer, got {space_order!r}")
    # end if
    space_order = int(space_order)
    if space_order < 2 or space_order % 2 != 0:
        raise ConfigError(f"space_order must be an even integer >= 2, got {space_order}")
    # end if
    return space_order
# end def validate_space_order


@lru_cache(maxsize=None)
def _weights(space_order: int) -> Tuple[float, ...]:
    k = space_order // 2
    side = [
        2.0 * (-1) ** (j + 1) * factorial(k) ** 2 / (j ** 2 * factorial(k - j) * factorial(k + j))
        for j in range(1, k + 1)
    ]
    return (-2.0 * sum(side),) + tuple(side)
# end def _weights


def second_derivative_weights(space_order: int) -> np.ndarray:
    """
    Centred second-derivative weights for unit grid spacing.

    Args:
        space_order (int): Even accuracy order of the stencil.

    Returns:
        np.ndarray: Array ``[w_0, w_1, ..., w_k]`` with ``k = space_order // 2``;
            the stencil is symmetric so ``w_-j = w_j``.

    Example:
        >>> second_derivative_weights(4)
        array([-2.5       ,  1.33333333, -0.08333333])
    """
    return np.array(_weights(validate_space_order(space_order)))
# end def second_derivative_weights


def stencil_norm(space_order: int) -> float:
    """
    Magnitude of the second-derivative stencil symbol at the Nyquist wavenumber.

    The weights alternate in sign, so this is ``|w_0| + 2 sum_j |w_j|``; it bounds
    the largest eigenvalue of the discrete operator and sets the CFL limit.
    """
    weights = second_derivative_weights(space_order)
    return float(abs(weights[0]) + 2.0 * np.sum(np.abs(weights[1:])))
# end def stencil_norm


def core_region(shape: Sequence[int], radius: int) -> Tuple[slice, ...]:
    """Slices of the points whose stencil taps all fall inside an array of ``shape``."""
    return tuple(slice(radius, n - radius) for n in shape)
# end def core_region


def laplacian(
    field: np.ndarray,
    weights: np.ndarray,
    spacing: Sequence[float],
) -> np.ndarray:
    """
    Apply the finite-difference Laplacian on the core region of a field.

    Args:
        field (np.ndarray): 2D or 3D field.
        weights (np.ndarray): One-sided weight table from :func:`second_derivative_weights`.
        spacing (Sequence[float]): Grid spacing per axis (m).

    Returns:
        np.ndarray: Laplacian on ``core_region(field.shape, len(weights) - 1)``.
    """
    radius = len(weights) - 1
    core = core_region(field.shape, radius)
    result = np.zeros(tuple(s.stop - s.start for s in core), dtype=field.dtype)

    for axis, h in enumerate(spacing):
        partial = weights[0] * field[core]
        for j in range(1, radius + 1):
            plus = list(core)
            minus = list(core)
            plus[axis] = slice(core[axis].start + j, core[axis].stop + j)
            minus[axis] = slice(core[axis].start - j, core[axis].stop - j)
            partial += weights[j] * (field[tuple(plus)] + field[tuple(minus)])
        # end for
        result += partial / h ** 2
    # end for

    return result
# end def laplacian
