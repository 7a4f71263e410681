"""
Acoustic forward propagator with absorbing boundaries.

This module implements the explicit finite-difference time-domain scheme for
the damped acoustic wave equation

    m * d2u/dt2 - laplace(u) + eta * du/dt = q

Centred differences in time, and a centred (trapezoidal) treatment of the
damping term, give with ``g = eta * dt / (2 m)``

    u[t+1] = (2 u[t] - (1 - g) u[t-1] + dt**2 / m * (laplace(u[t]) + q[t])) / (1 + g)

The source sample ``q[t]`` is spread onto the grid nodes after the stencil
update, scaled by ``dt**2 / (m (1 + g))``. Receivers read ``u[t]`` at every step.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional

import numpy as np
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeRemainingColumn

from .exceptions import ConfigError, PropagatorStateError, StabilityError
from .sparse import ReceiverArray, SourceWavelet
from .stencils import core_region, laplacian, second_derivative_weights, validate_space_order
from .velocity_model import VelocityModel


console = Console()


class PropagatorState(str, Enum):
    """Life cycle of a propagator."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    FINALIZED = "finalized"
# end class PropagatorState


class AcousticForwardPropagator:
    """
    Forward modeling of the damped acoustic wave equation.

    The wavefield lives on the padded grid of the velocity model. By default
    only three time slices are kept in a rolling buffer; with ``save=True``
    the whole history of shape ``(nt, *padded_shape)`` is retained.

    A propagator runs once. :meth:`reset` zeroes the buffers and rewinds the
    time index so the same configuration can be run again.
    """

    def __init__(
        self,
        model: VelocityModel,
        nt: int,
        dt: float,
        source: Optional[SourceWavelet] = None,
        receivers: Optional[ReceiverArray] = None,
        space_order: int = 2,
        time_order: int = 2,
        save: bool = False,
        check_stability: bool = True,
        log: bool = False,
    ):
        """
        Validate the configuration and allocate the wavefield buffers.

        Args:
            model (VelocityModel): Medium, grid and absorbing layer.
            nt (int): Number of time samples (including ``t = 0``).
            dt (float): Time step (ms).
            source (SourceWavelet, optional): Source wavelet(s) with ``nt`` samples.
            receivers (ReceiverArray, optional): Receivers with an ``nt`` sample buffer.
            space_order (int): Even order of the spatial stencil.
            time_order (int): Order of the time discretisation, only 2 is supported.
            save (bool): Keep every time slice instead of a rolling buffer.
            check_stability (bool): Raise when ``dt`` exceeds the critical time step.
                Disable only to study unstable runs; a warning is logged instead.
            log (bool): Print setup information and progress.

        Raises:
            ConfigError: Inconsistent orders, sizes or padding.
            StabilityError: ``dt`` above the critical time step.
            DomainError: A source or receiver outside the computational grid.
        """
        self.state = PropagatorState.UNINITIALIZED
        self.space_order = validate_space_order(space_order)
        if time_order != 2:
            raise ConfigError(f"Only time_order=2 is supported, got {time_order}")
        # end if
        self.time_order = time_order

        if isinstance(nt, bool) or int(nt) != nt or nt < 2:
            raise ConfigError(f"nt must be an integer >= 2, got {nt!r}")
        # end if
        dt = float(dt)
        if not np.isfinite(dt) or dt <= 0:
            raise ConfigError(f"dt must be positive, got {dt}")
        # end if

        self.model = model
        self.grid = model.grid
        self.nt = int(nt)
        self.dt = dt
        self.save = bool(save)
        self.log = log
        self.radius = self.space_order // 2

        if self.grid.nbl < self.radius:
            raise ConfigError(
                f"Padding nbl={self.grid.nbl} is narrower than the stencil half-width "
                f"{self.radius} of space_order={self.space_order}"
            )
        # end if

        if source is not None and source.nt != self.nt:
            raise ConfigError(f"Source has {source.nt} time samples, expected nt={self.nt}")
        # end if
        if receivers is not None and receivers.nt != self.nt:
            raise ConfigError(f"Receivers have {receivers.nt} time samples, expected nt={self.nt}")
        # end if
        for points in (source, receivers):
            if points is not None and points.coordinates.shape[1] != self.grid.ndim:
                raise ConfigError(
                    f"{points.name} coordinates are {points.coordinates.shape[1]}D, "
                    f"the grid is {self.grid.ndim}D"
                )
            # end if
        # end for

        self.critical_dt = model.critical_dt(self.space_order)
        if self.dt > self.critical_dt:
            if check_stability:
                raise StabilityError(self.dt, self.critical_dt)
            # end if
            console.log(
                f"[red]Warning:[/] dt={self.dt:.6g} ms exceeds the critical time step "
                f"{self.critical_dt:.6g} ms, the simulation will diverge"
            )
        # end if

        self.source = source
        self.receivers = receivers

        # Sources and receivers must stay clear of the fixed halo
        self._source_interp = source.interpolator(self.grid, margin=self.radius) if source else None
        self._receiver_interp = receivers.interpolator(self.grid, margin=self.radius) if receivers else None

        # Stencil and update coefficients restricted to the updated region
        self._weights = second_derivative_weights(self.space_order)
        self._core = core_region(self.grid.padded_shape, self.radius)
        g = model.damp * self.dt / (2.0 * model.m)
        self._dt2_m = self.dt ** 2 / model.m
        self._dt2_m_core = self._dt2_m[self._core]
        self._source_scale = self._dt2_m / (1.0 + g)
        self._inv_one_plus_g = 1.0 / (1.0 + g[self._core])
        self._one_minus_g = 1.0 - g[self._core]
        self._zero = np.zeros(self.grid.padded_shape)
        self._zero.setflags(write=False)

        if self.log:
            console.log(f"[yellow]Model:[/] {model}")
            console.log(f"[yellow]Padded shape:[/] {self.grid.padded_shape}")
            console.log(f"[yellow]Space order:[/] {self.space_order}")
            console.log(f"[yellow]Time steps:[/] {self.nt} with dt = {self.dt:.6g} ms")
            console.log(f"[yellow]Critical dt:[/] {self.critical_dt:.6g} ms")
        # end if

        self.initialize()
    # end def __init__

    def initialize(self) -> None:
        """
        Allocate zero-filled wavefield buffers and rewind time.

        The shot record is owned by the propagator, so other propagators built
        on the same receivers never touch it. Moves the propagator to ``INITIALIZED``.
        """
        n_slots = self.nt if self.save else 3
        self._buffer = np.zeros((n_slots,) + tuple(self.grid.padded_shape), dtype=np.float64)
        self._record = np.zeros((self.nt, self.receivers.npoint)) if self.receivers is not None else None
        self.time_index = 0
        self.state = PropagatorState.INITIALIZED
    # end def initialize

    reset = initialize

    def _slot(self, time_index: int) -> np.ndarray:
        """Buffer holding ``u[time_index]``."""
        if time_index < 0:
            return self._zero
        # end if
        return self._buffer[time_index if self.save else time_index % 3]
    # end def _slot

    def step(self, time_index: int) -> None:
        """
        Compute ``u[time_index + 1]`` from the two previous slices and inject the source.

        The next slice is written into its own buffer slot, which never aliases
        the slices being read.
        """
        u_previous = self._slot(time_index - 1)
        u_current = self._slot(time_index)
        u_next = self._slot(time_index + 1)
        core = self._core

        u_next[core] = (
            2.0 * u_current[core]
            - self._one_minus_g * u_previous[core]
            + self._dt2_m_core * laplacian(u_current, self._weights, self.grid.spacing)
        ) * self._inv_one_plus_g

        if self._source_interp is not None:
            self._source_interp.inject(u_next, self.source.data[time_index], scale=self._source_scale)
        # end if
    # end def step

    def run(
        self,
        callback: Optional[Callable[[AcousticForwardPropagator, int], None]] = None,
        progress: bool = False,
    ) -> Dict[str, Any]:
        """
        Propagate over all ``nt`` time samples.

        Args:
            callback (callable, optional): Called as ``callback(propagator, time_index)``
                once ``u[time_index]`` has been recorded and, except at the last index,
                ``u[time_index + 1]`` computed.
            progress (bool): Display a progress bar.

        Returns:
            dict: Simulation results containing:
                - 'receiver_data': Recorded samples of shape (nt, npoint), or None
                - 'wavefield': Final slice, or the full history when saving
                - 'time_step': Time step (ms)
                - 'critical_dt': Critical time step (ms)
                - 'num_time_steps': Number of time samples

        Raises:
            PropagatorStateError: If the propagator is not freshly initialized.
        """
        if self.state != PropagatorState.INITIALIZED:
            raise PropagatorStateError(
                f"Cannot run a propagator in state '{self.state.value}', call reset() first"
            )
        # end if

        try:
            if progress:
                with Progress(
                    TextColumn("[bold blue]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    TimeRemainingColumn(),
                    console=console,
                ) as progress_bar:
                    task = progress_bar.add_task("[cyan]Propagating...", total=self.nt)
                    for time_index in range(self.nt):
                        self._advance(time_index, callback)
                        progress_bar.advance(task)
                    # end for
                # end with
            else:
                for time_index in range(self.nt):
                    self._advance(time_index, callback)
                # end for
            # end if
        except BaseException:
            # A failed or interrupted run leaves nothing readable
            self.state = PropagatorState.UNINITIALIZED
            raise
        # end try

        self.state = PropagatorState.FINALIZED
        if self.receivers is not None:
            # The receivers keep a copy of the latest completed shot
            self.receivers.data = self._record.copy()
        # end if
        if self.log:
            console.log(f"[green]Propagation finished after {self.nt} time samples[/]")
        # end if

        return {
            "receiver_data": self.receiver_data if self.receivers is not None else None,
            "wavefield": self.wavefield,
            "time_step": self.dt,
            "critical_dt": self.critical_dt,
            "num_time_steps": self.nt,
        }
    # end def run

    def _advance(self, time_index: int, callback: Optional[Callable]) -> None:
        if self._receiver_interp is not None:
            self._record[time_index] = self._receiver_interp.sample(self._slot(time_index))
        # end if
        if time_index < self.nt - 1:
            self.step(time_index)
        # end if
        self.time_index = time_index
        if callback is not None:
            callback(self, time_index)
        # end if
    # end def _advance

    def _require_finalized(self) -> None:
        if self.state != PropagatorState.FINALIZED:
            raise PropagatorStateError(
                f"Outputs are only available after a complete run (state '{self.state.value}')"
            )
        # end if
    # end def _require_finalized

    def current(self, time_index: Optional[int] = None) -> np.ndarray:
        """
        Live view of a padded time slice, usable from a callback during the run.

        Only the last three slices are available unless the propagator saves
        the full history. Slices beyond ``u[nt-1]`` do not exist.
        """
        time_index = self.time_index if time_index is None else time_index
        if time_index > min(self.time_index + 1, self.nt - 1):
            raise PropagatorStateError(
                f"Slice {time_index} has not been computed yet (current index {self.time_index})"
            )
        # end if
        if not self.save and time_index < self.time_index - 1:
            raise PropagatorStateError(
                f"Slice {time_index} is no longer in the rolling buffer (current index {self.time_index})"
            )
        # end if
        return self._slot(time_index)
    # end def current

    @property
    def wavefield(self) -> np.ndarray:
        """Padded final slice ``u[nt-1]``, or the whole history when saving."""
        self._require_finalized()
        if self.save:
            return self._buffer
        # end if
        return self._slot(self.nt - 1)

    @property
    def receiver_data(self) -> np.ndarray:
        """Recorded shot record of shape (nt, npoint)."""
        self._require_finalized()
        if self.receivers is None:
            raise PropagatorStateError("This propagator has no receivers")
        # end if
        return self._record

    def interior_wavefield(self) -> np.ndarray:
        """Wavefield output with the absorbing padding removed."""
        return self.grid.strip_padding(self.wavefield)
    # end def interior_wavefield

# end class AcousticForwardPropagator
