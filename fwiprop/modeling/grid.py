"""
Padded Cartesian grid geometry.

The physical domain is a regular lattice of ``shape`` points separated by
``spacing`` metres. Wave propagation happens on a larger array obtained by
adding ``nbl`` absorbing points on every side of every dimension.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .exceptions import ConfigError


class Grid(BaseModel):
    """
    Regular 2D or 3D grid with an absorbing padding layer.

    Attributes:
        shape (Tuple[int, ...]): Number of physical grid points per dimension (x, y[, z]).
        spacing (Tuple[float, ...]): Grid spacing per dimension (m).
        origin (Tuple[float, ...]): Physical coordinates of the first interior point (m).
        nbl (int): Number of absorbing boundary points added on each side.
    """
    shape: Tuple[int, ...]
    spacing: Tuple[float, ...]
    origin: Optional[Tuple[float, ...]] = None
    nbl: int = 40

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid grid: {exc}") from exc
        # end try
    # end def __init__

    @model_validator(mode="before")
    @classmethod
    def default_origin(cls, data: Any) -> Any:
        """Place the origin at zero when none is given."""
        if isinstance(data, dict) and data.get("origin") is None and data.get("shape") is not None:
            data = dict(data)
            data["origin"] = tuple(0.0 for _ in data["shape"])
        # end if
        return data
    # end def default_origin

    @field_validator("shape")
    @classmethod
    def validate_shape(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(value) not in (2, 3):
            raise ValueError(f"only 2D and 3D grids are supported, got shape {value}")
        # end if
        if any(n < 2 for n in value):
            raise ValueError(f"every dimension needs at least 2 points, got {value}")
        # end if
        return value
    # end def validate_shape

    @field_validator("spacing")
    @classmethod
    def validate_spacing(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        if any(not np.isfinite(h) or h <= 0 for h in value):
            raise ValueError(f"grid spacing must be positive, got {value}")
        # end if
        return value
    # end def validate_spacing

    @field_validator("nbl")
    @classmethod
    def validate_nbl(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"nbl must be non-negative, got {value}")
        # end if
        return value
    # end def validate_nbl

    @model_validator(mode="after")
    def validate_dimensions(self) -> Grid:
        """Check that shape, spacing and origin agree on the dimension count."""
        if len(self.spacing) != len(self.shape):
            raise ValueError(
                f"spacing {self.spacing} does not match the {len(self.shape)}D shape {self.shape}"
            )
        # end if
        if len(self.origin) != len(self.shape):
            raise ValueError(
                f"origin {self.origin} does not match the {len(self.shape)}D shape {self.shape}"
            )
        # end if
        return self
    # end def validate_dimensions

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.shape)

    @property
    def padded_shape(self) -> Tuple[int, ...]:
        """Shape of the allocated arrays, padding included."""
        return tuple(n + 2 * self.nbl for n in self.shape)

    @property
    def padded_origin(self) -> Tuple[float, ...]:
        """Physical coordinates of the first padded point (m)."""
        return tuple(o - self.nbl * h for o, h in zip(self.origin, self.spacing))

    @property
    def extent(self) -> Tuple[Tuple[float, float], ...]:
        """(start, end) physical coordinates of the interior domain per dimension."""
        return tuple(
            (o, o + (n - 1) * h) for o, n, h in zip(self.origin, self.shape, self.spacing)
        )

    @property
    def interior(self) -> Tuple[slice, ...]:
        """Slices selecting the physical domain inside a padded array."""
        return tuple(slice(self.nbl, self.nbl + n) for n in self.shape)

    def coordinates(self, dimension: int, padded: bool = False) -> np.ndarray:
        """
        Physical coordinates of the grid points along one dimension.

        Args:
            dimension (int): Dimension index (0 for x, 1 for y, 2 for z).
            padded (bool): Include the absorbing points.

        Returns:
            np.ndarray: Coordinates in metres.
        """
        if not 0 <= dimension < self.ndim:
            raise ConfigError(f"Dimension {dimension} is out of range for a {self.ndim}D grid")
        # end if
        h = self.spacing[dimension]
        if padded:
            return self.padded_origin[dimension] + np.arange(self.padded_shape[dimension]) * h
        # end if
        return self.origin[dimension] + np.arange(self.shape[dimension]) * h
    # end def coordinates

    def to_padded_index(self, coordinates: np.ndarray) -> np.ndarray:
        """
        Convert physical coordinates into fractional padded-grid indices.

        Args:
            coordinates (np.ndarray): Array of shape (npoint, ndim) in metres.

        Returns:
            np.ndarray: Fractional indices of shape (npoint, ndim).
        """
        coordinates = np.atleast_2d(np.asarray(coordinates, dtype=np.float64))
        if coordinates.shape[-1] != self.ndim:
            raise ConfigError(
                f"Expected coordinates with {self.ndim} components, got shape {coordinates.shape}"
            )
        # end if
        origin = np.asarray(self.origin)
        spacing = np.asarray(self.spacing)
        return (coordinates - origin) / spacing + self.nbl
    # end def to_padded_index

    def strip_padding(self, field: np.ndarray) -> np.ndarray:
        """
        Remove the absorbing points from a padded field.

        Leading axes (e.g. time) are kept untouched.
        """
        leading = (slice(None),) * (field.ndim - self.ndim)
        return field[leading + self.interior]
    # end def strip_padding

# end class Grid
