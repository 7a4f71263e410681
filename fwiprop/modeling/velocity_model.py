"""
Velocity model on a padded grid.

A :class:`VelocityModel` turns a raw velocity array (km/s) and its grid into
the two coefficient fields of the damped acoustic wave equation

    m * d2u/dt2 - laplace(u) + eta * du/dt = q

namely the squared slowness ``m = 1 / c**2`` and the damping ``eta``, both
sampled on the padded grid. The model is immutable once built.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from .absorbing import REFLECTION_COEFFICIENT, damping_rate
from .exceptions import ConfigError
from .grid import Grid
from .stencils import stencil_norm

# Default Courant safety factor applied to the exact stability bound
DEFAULT_COURANT = 0.9


class VelocityModel:
    """
    Squared slowness and damping fields of an acoustic medium.

    Attributes:
        grid (Grid): Grid geometry, padding included.
        vp (np.ndarray): Velocity on the physical grid (km/s).
        m (np.ndarray): Squared slowness on the padded grid (s^2/km^2).
        damp (np.ndarray): Damping coefficient ``eta`` on the padded grid.
        sigma (np.ndarray): Damping rate ``eta / m`` on the padded grid (1/ms).
        reflection_coefficient (float): Target reflection of the absorbing layer.
    """

    def __init__(
        self,
        vp: np.ndarray,
        grid: Grid,
        reflection_coefficient: float = REFLECTION_COEFFICIENT,
    ):
        """
        Build the model fields.

        Args:
            vp (np.ndarray): Velocity array (km/s) with the grid's physical shape.
            grid (Grid): Grid geometry.
            reflection_coefficient (float): Target reflection of the absorbing layer.

        Raises:
            ConfigError: If the shape does not match the grid or if some velocity
                is not finite or not strictly positive.
        """
        vp = np.array(vp, dtype=np.float64)
        if vp.shape != tuple(grid.shape):
            raise ConfigError(f"Velocity shape {vp.shape} does not match grid shape {tuple(grid.shape)}")
        # end if
        if not np.all(np.isfinite(vp)):
            raise ConfigError("Velocity model contains NaN or Inf values")
        # end if
        if np.any(vp <= 0):
            raise ConfigError(
                f"Velocity must be strictly positive everywhere, minimum is {vp.min():.6g} km/s"
            )
        # end if
        if not 0.0 < reflection_coefficient < 1.0:
            raise ConfigError(f"reflection_coefficient must lie in (0, 1), got {reflection_coefficient}")
        # end if

        self._grid = grid
        self._vp = vp
        self._reflection_coefficient = float(reflection_coefficient)

        # Edge padding keeps the interior geology untouched
        padded_vp = np.pad(vp, grid.nbl, mode="edge")
        self._m = 1.0 / padded_vp ** 2
        self._sigma = damping_rate(
            grid.padded_shape, grid.nbl, grid.spacing, float(vp.max()), reflection_coefficient
        )
        self._damp = self._sigma * self._m

        for array in (self._vp, self._m, self._sigma, self._damp):
            array.setflags(write=False)
        # end for
    # end def __init__

    @classmethod
    def from_array(
        cls,
        vp: np.ndarray,
        spacing: Sequence[float],
        origin: Optional[Sequence[float]] = None,
        nbl: int = 40,
        **kwargs,
    ) -> VelocityModel:
        """
        Create a model and its grid from a velocity array.

        Args:
            vp (np.ndarray): Velocity array (km/s), axes ordered (x, y[, z]).
            spacing (Sequence[float]): Grid spacing per axis (m).
            origin (Sequence[float], optional): Coordinates of the first point (m).
            nbl (int): Number of absorbing points on each side.

        Returns:
            VelocityModel: The new model.
        """
        vp = np.asarray(vp)
        grid = Grid(
            shape=vp.shape,
            spacing=tuple(spacing),
            origin=None if origin is None else tuple(origin),
            nbl=nbl,
        )
        return cls(vp, grid, **kwargs)
    # end def from_array

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def vp(self) -> np.ndarray:
        return self._vp

    @property
    def reflection_coefficient(self) -> float:
        return self._reflection_coefficient

    @property
    def m(self) -> np.ndarray:
        return self._m

    @property
    def damp(self) -> np.ndarray:
        return self._damp

    @property
    def sigma(self) -> np.ndarray:
        return self._sigma

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._grid.shape)

    @property
    def spacing(self) -> Tuple[float, ...]:
        return tuple(self._grid.spacing)

    @property
    def nbl(self) -> int:
        return self._grid.nbl

    @property
    def min_velocity(self) -> float:
        """Get the minimum velocity value."""
        return float(np.min(self._vp))

    @property
    def max_velocity(self) -> float:
        """Get the maximum velocity value."""
        return float(np.max(self._vp))

    @property
    def mean_velocity(self) -> float:
        """Get the mean velocity value."""
        return float(np.mean(self._vp))

    def critical_dt(self, space_order: int = 2, courant: float = DEFAULT_COURANT) -> float:
        """
        Largest stable time step of the explicit scheme (ms).

        Von Neumann analysis of the three-level update gives the exact bound
        ``2 / (c_max * sqrt(sum_d S / h_d**2))`` where ``S`` is the stencil norm at
        the Nyquist wavenumber. The bound is scaled by ``courant`` so that the
        returned value is strictly inside the stable region.

        Args:
            space_order (int): Spatial order of the finite-difference stencil.
            courant (float): Safety factor in (0, 1].

        Returns:
            float: Critical time step in ms.
        """
        if not 0.0 < courant <= 1.0:
            raise ConfigError(f"courant must lie in (0, 1], got {courant}")
        # end if
        norm = stencil_norm(space_order)
        spectral_radius = np.sqrt(sum(norm / h ** 2 for h in self.spacing))
        return float(courant * 2.0 / (self.max_velocity * spectral_radius))
    # end def critical_dt

    def __str__(self) -> str:
        shape_str = "x".join(str(n) for n in self.shape)
        spacing_str = ", ".join(f"{h:.2f}" for h in self.spacing)
        return (
            f"VelocityModel({self._grid.ndim}D, shape={shape_str}, spacing=({spacing_str}), "
            f"nbl={self.nbl}, range=[{self.min_velocity:.3f}, {self.max_velocity:.3f}] km/s)"
        )
    # end def __str__

# end class VelocityModel
