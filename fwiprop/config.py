"""
Simulation configuration.

A simulation is described by a YAML file with the sections ``grid``,
``model``, ``source``, ``receivers`` and ``propagation``. Each section is
validated by a pydantic model; missing sections and keys take the defaults
below.

Example:

    grid:
      shape: [101, 101]
      spacing: [10.0, 10.0]
      nbl: 40
    model:
      type: circle
      vp_background: 2.5
      vp_circle: 3.0
    source:
      coordinates: [[500.0, 20.0]]
      f0: 0.010
    receivers:
      start: [0.0, 980.0]
      end: [1000.0, 980.0]
      npoint: 101
    propagation:
      tn: 1000.0
      dt: critical
      space_order: 4
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .modeling.exceptions import ConfigError


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")
# end class _Section


class GridSection(_Section):
    """Physical grid and absorbing layer."""
    shape: Tuple[int, ...] = (101, 101)
    spacing: Tuple[float, ...] = (10.0, 10.0)
    origin: Optional[Tuple[float, ...]] = None
    nbl: int = Field(default=40, ge=0)
# end class GridSection


class ModelSection(_Section):
    """Velocity model (km/s) to build or load."""
    type: Literal["constant", "layered", "circle", "file"] = "constant"
    vp: float = Field(default=1.5, gt=0)
    layers: List[Tuple[int, float]] = Field(default_factory=list)
    vp_background: float = Field(default=2.5, gt=0)
    vp_circle: float = Field(default=3.0, gt=0)
    radius: Optional[float] = Field(default=None, gt=0)
    path: Optional[Path] = None
    smooth: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_type_parameters(self) -> ModelSection:
        if self.type == "layered" and not self.layers:
            raise ValueError("a layered model needs at least one entry in 'layers'")
        # end if
        if self.type == "file" and self.path is None:
            raise ValueError("a 'file' model needs a 'path' to a .npy velocity array")
        # end if
        return self
    # end def check_type_parameters
# end class ModelSection


class SourceSection(_Section):
    """Ricker source(s)."""
    coordinates: List[Tuple[float, ...]] = Field(default_factory=lambda: [(500.0, 20.0)])
    f0: float = Field(default=0.010, gt=0, description="Peak frequency (kHz)")
    t0: Optional[float] = Field(default=None, description="Peak time (ms), 1/f0 by default")
    amplitude: float = 1.0
    interpolation: Literal["nearest", "linear"] = "linear"

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value: List[Tuple[float, ...]]) -> List[Tuple[float, ...]]:
        if not value:
            raise ValueError("at least one source location is required")
        # end if
        return value
    # end def check_coordinates
# end class SourceSection


class ReceiverSection(_Section):
    """Receivers, either explicit coordinates or a straight line."""
    coordinates: Optional[List[Tuple[float, ...]]] = None
    start: Tuple[float, ...] = (0.0, 980.0)
    end: Tuple[float, ...] = (1000.0, 980.0)
    npoint: int = Field(default=101, ge=1)
    interpolation: Literal["nearest", "linear"] = "linear"
# end class ReceiverSection


class PropagationSection(_Section):
    """Time stepping parameters."""
    tn: float = Field(default=1000.0, gt=0, description="Simulation length (ms)")
    nt: Optional[int] = Field(default=None, ge=2, description="Overrides tn when given")
    dt: Union[Literal["critical"], float] = "critical"
    space_order: int = 2
    save: bool = False

    @field_validator("dt")
    @classmethod
    def check_dt(cls, value: Union[str, float]) -> Union[str, float]:
        if value != "critical" and value <= 0:
            raise ValueError(f"dt must be positive or 'critical', got {value}")
        # end if
        return value
    # end def check_dt

    @field_validator("space_order")
    @classmethod
    def check_space_order(cls, value: int) -> int:
        if value < 2 or value % 2:
            raise ValueError(f"space_order must be an even integer >= 2, got {value}")
        # end if
        return value
    # end def check_space_order
# end class PropagationSection


class SimulationConfig(_Section):
    """Complete description of a single-shot simulation."""
    grid: GridSection = Field(default_factory=GridSection)
    model: ModelSection = Field(default_factory=ModelSection)
    source: SourceSection = Field(default_factory=SourceSection)
    receivers: ReceiverSection = Field(default_factory=ReceiverSection)
    propagation: PropagationSection = Field(default_factory=PropagationSection)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> SimulationConfig:
        """
        Validate a configuration dictionary.

        Raises:
            ConfigError: If a section contains unknown keys or invalid values.
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigError(f"Invalid simulation configuration: {exc}") from exc
        # end try
    # end def from_dict

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> SimulationConfig:
        """
        Load and validate a YAML configuration file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            SimulationConfig: The validated configuration.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ConfigError: If the file cannot be parsed or holds invalid values.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        # end if

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse configuration {path}: {e}") from e
        # end try

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} must be a mapping, got {type(data).__name__}")
        # end if

        config = cls.from_dict(data)

        # Relative model paths are resolved next to the configuration file
        if config.model.path is not None and not config.model.path.is_absolute():
            config.model.path = path.parent / config.model.path
        # end if

        return config
    # end def from_yaml

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Write the configuration, defaults included, to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, sort_keys=False)
        # end with
    # end def to_yaml

# end class SimulationConfig
