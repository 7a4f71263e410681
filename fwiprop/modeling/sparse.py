"""
Sparse point sets: sources and receivers.

Sources and receivers live at arbitrary physical locations. Each location is
mapped onto a few grid nodes with interpolation weights that sum to one.
Injection spreads a value onto those nodes and sampling gathers the nodal
values back with the same weights, so the two operations are adjoint.
"""

from __future__ import annotations

import itertools
from typing import Optional, Tuple

import numpy as np

from .exceptions import ConfigError, DomainError
from .grid import Grid
from .wavelets import TimeAxis, ricker


INTERPOLATIONS = ("nearest", "linear")


class PointInterpolator:
    """
    Interpolation weights of a set of points on a padded grid.

    Attributes:
        nodes (Tuple[np.ndarray, ...]): Padded-grid indices of every (point, node) pair.
        weights (np.ndarray): Interpolation weight of every (point, node) pair.
        point_ids (np.ndarray): Point index of every (point, node) pair.
        npoint (int): Number of points.
    """

    def __init__(
        self,
        grid: Grid,
        coordinates: np.ndarray,
        interpolation: str = "linear",
        margin: int = 0,
        name: str = "point",
    ):
        """
        Locate points on the padded grid.

        Args:
            grid (Grid): Grid geometry.
            coordinates (np.ndarray): Physical coordinates of shape (npoint, ndim).
            interpolation (str): "nearest" or "linear" (multilinear).
            margin (int): Number of outermost padded points that nodes may not touch.
            name (str): Label used in error messages.

        Raises:
            DomainError: If a node with non-zero weight falls outside the usable grid.
        """
        if interpolation not in INTERPOLATIONS:
            raise ConfigError(f"Unknown interpolation {interpolation!r}, expected one of {INTERPOLATIONS}")
        # end if

        position = grid.to_padded_index(coordinates)
        npoint, ndim = position.shape
        padded_shape = np.asarray(grid.padded_shape)

        if interpolation == "nearest":
            indices = np.rint(position).astype(int)[:, None, :]
            weights = np.ones((npoint, 1))
        else:
            base = np.floor(position).astype(int)
            frac = position - base
            offsets = np.array(list(itertools.product((0, 1), repeat=ndim)))
            indices = base[:, None, :] + offsets[None, :, :]
            weights = np.prod(
                np.where(offsets[None, :, :] == 1, frac[:, None, :], 1.0 - frac[:, None, :]),
                axis=-1,
            )
        # end if

        # Only nodes that actually receive a share must lie inside the usable region
        low = margin
        high = padded_shape - 1 - margin
        outside = np.any((indices < low) | (indices > high), axis=-1) & (weights > 0)
        if np.any(outside):
            bad = sorted(set(np.nonzero(outside)[0].tolist()))
            raise DomainError(
                f"{name} location(s) {np.atleast_2d(coordinates)[bad].tolist()} fall outside the "
                f"computational grid (padded extent {grid.padded_origin} + "
                f"{tuple((n - 1) * h for n, h in zip(grid.padded_shape, grid.spacing))} m, "
                f"{margin} halo point(s) excluded)"
            )
        # end if
        indices = np.clip(indices, 0, padded_shape - 1)

        nnode = indices.shape[1]
        self.npoint = npoint
        self.nodes = tuple(indices.reshape(-1, ndim).T)
        self.weights = weights.reshape(-1)
        self.point_ids = np.repeat(np.arange(npoint), nnode)
    # end def __init__

    def inject(self, field: np.ndarray, values: np.ndarray, scale: Optional[np.ndarray] = None) -> None:
        """
        Add point values to a field in place.

        Args:
            field (np.ndarray): Padded field to update.
            values (np.ndarray): One value per point.
            scale (np.ndarray, optional): Padded field multiplying the injected values
                at each node (e.g. ``dt**2 / m``).
        """
        contributions = self.weights * np.asarray(values)[self.point_ids]
        if scale is not None:
            contributions = contributions * scale[self.nodes]
        # end if
        np.add.at(field, self.nodes, contributions)
    # end def inject

    def sample(self, field: np.ndarray) -> np.ndarray:
        """
        Interpolate a field at the points.

        Returns:
            np.ndarray: One value per point.
        """
        return np.bincount(
            self.point_ids,
            weights=self.weights * field[self.nodes],
            minlength=self.npoint,
        )
    # end def sample

# end class PointInterpolator


class SparseTimeSeries:
    """
    Time series attached to a set of physical locations.

    Attributes:
        coordinates (np.ndarray): Physical locations of shape (npoint, ndim) in metres.
        data (np.ndarray): Samples of shape (nt, npoint).
        interpolation (str): Rule used to map locations onto grid nodes.
    """

    name = "point"

    def __init__(
        self,
        coordinates: np.ndarray,
        data: np.ndarray,
        interpolation: str = "linear",
    ):
        coordinates = np.atleast_2d(np.asarray(coordinates, dtype=np.float64))
        if coordinates.ndim != 2 or coordinates.shape[1] not in (2, 3):
            raise ConfigError(
                f"{self.name} coordinates must have shape (npoint, 2) or (npoint, 3), got {coordinates.shape}"
            )
        # end if
        if not np.all(np.isfinite(coordinates)):
            raise ConfigError(f"{self.name} coordinates contain NaN or Inf values")
        # end if

        data = np.asarray(data, dtype=np.float64)
        if data.ndim == 1:
            data = data[:, None]
        # end if
        if data.ndim != 2 or data.shape[1] != coordinates.shape[0]:
            raise ConfigError(
                f"{self.name} data of shape {data.shape} does not match "
                f"{coordinates.shape[0]} location(s)"
            )
        # end if
        if interpolation not in INTERPOLATIONS:
            raise ConfigError(f"Unknown interpolation {interpolation!r}, expected one of {INTERPOLATIONS}")
        # end if

        self.coordinates = coordinates
        self.data = data
        self.interpolation = interpolation
    # end def __init__

    @property
    def nt(self) -> int:
        return self.data.shape[0]

    @property
    def npoint(self) -> int:
        return self.coordinates.shape[0]

    def interpolator(self, grid: Grid, margin: int = 0) -> PointInterpolator:
        """Locate the points on a grid."""
        return PointInterpolator(grid, self.coordinates, self.interpolation, margin=margin, name=self.name)
    # end def interpolator

# end class SparseTimeSeries


class SourceWavelet(SparseTimeSeries):
    """Source time function(s) q(t) injected at one or several locations."""

    name = "Source"

    @classmethod
    def ricker(
        cls,
        coordinates: np.ndarray,
        time_axis: TimeAxis,
        f0: float,
        t0: Optional[float] = None,
        amplitude: float = 1.0,
        interpolation: str = "linear",
    ) -> SourceWavelet:
        """
        Ricker source fired at every given location.

        Args:
            coordinates (np.ndarray): Source locations (m).
            time_axis (TimeAxis): Simulation time axis.
            f0 (float): Peak frequency (kHz).
            t0 (float, optional): Peak time (ms), ``1 / f0`` by default.
            amplitude (float): Peak amplitude.
            interpolation (str): "nearest" or "linear".
        """
        coordinates = np.atleast_2d(np.asarray(coordinates, dtype=np.float64))
        wavelet = ricker(f0, time_axis.time_values, t0=t0, amplitude=amplitude)
        data = np.repeat(wavelet[:, None], coordinates.shape[0], axis=1)
        return cls(coordinates, data, interpolation=interpolation)
    # end def ricker

# end class SourceWavelet


class ReceiverArray(SparseTimeSeries):
    """Receivers recording the wavefield; ``data`` holds a copy of the last completed run."""

    name = "Receiver"

    def __init__(self, coordinates: np.ndarray, nt: int, interpolation: str = "linear"):
        coordinates = np.atleast_2d(np.asarray(coordinates, dtype=np.float64))
        if int(nt) < 1:
            raise ConfigError(f"Receiver buffer needs at least one time sample, got nt={nt}")
        # end if
        super().__init__(coordinates, np.zeros((int(nt), coordinates.shape[0])), interpolation)
    # end def __init__

# end class ReceiverArray


def receiver_line(
    start: Tuple[float, ...],
    end: Tuple[float, ...],
    npoint: int,
) -> np.ndarray:
    """
    Evenly spaced receiver coordinates between two points (inclusive).

    Returns:
        np.ndarray: Coordinates of shape (npoint, ndim).
    """
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    if start.shape != end.shape:
        raise ConfigError(f"Line end points {start.tolist()} and {end.tolist()} differ in dimension")
    # end if
    if npoint < 1:
        raise ConfigError(f"A receiver line needs at least one point, got {npoint}")
    # end if
    fractions = np.linspace(0.0, 1.0, npoint)[:, None]
    return start[None, :] + fractions * (end - start)[None, :]
# end def receiver_line
