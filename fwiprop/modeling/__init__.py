"""Acoustic wave propagation for full-waveform inversion forward modelling."""

from .exceptions import (
    ConfigError,
    DomainError,
    FWIPropError,
    PropagatorStateError,
    StabilityError,
)

from .grid import Grid
from .stencils import laplacian, second_derivative_weights, stencil_norm
from .absorbing import damping_profile, damping_rate
from .velocity_model import VelocityModel
from .validation import check_velocity, points_per_wavelength
from .wavelets import TimeAxis, ricker

# Import sparse point classes
from .sparse import (
    PointInterpolator,
    ReceiverArray,
    SourceWavelet,
    SparseTimeSeries,
    receiver_line,
)

from .propagator import AcousticForwardPropagator, PropagatorState

# Import demo model builders
from .demo_models import (
    circle_model,
    circle_velocity,
    constant_model,
    layered_model,
    layered_velocity,
    smooth_model,
)

__all__ = [
    # Errors
    "FWIPropError",
    "ConfigError",
    "StabilityError",
    "DomainError",
    "PropagatorStateError",

    # Grid and model
    "Grid",
    "VelocityModel",
    "check_velocity",
    "points_per_wavelength",
    "damping_profile",
    "damping_rate",

    # Stencils
    "laplacian",
    "second_derivative_weights",
    "stencil_norm",

    # Wavelets
    "TimeAxis",
    "ricker",

    # Sources and receivers
    "PointInterpolator",
    "SparseTimeSeries",
    "SourceWavelet",
    "ReceiverArray",
    "receiver_line",

    # Propagation
    "AcousticForwardPropagator",
    "PropagatorState",

    # Demo models
    "constant_model",
    "layered_model",
    "layered_velocity",
    "circle_model",
    "circle_velocity",
    "smooth_model",
]
