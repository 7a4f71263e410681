"""
Exceptions raised by the acoustic modeling tools.

Every error aborts the current simulation: a physics run is never clamped,
retried or partially reported.
"""


class FWIPropError(Exception):
    """Base class of all fwiprop errors."""
# end class FWIPropError


class ConfigError(FWIPropError, ValueError):
    """Malformed or inconsistent construction parameters."""
# end class ConfigError


class StabilityError(FWIPropError):
    """
    The time step exceeds the CFL bound of the explicit scheme.

    Attributes:
        dt (float): Requested time step (ms).
        critical_dt (float): Largest admissible time step (ms).
    """

    def __init__(self, dt: float, critical_dt: float):
        self.dt = dt
        self.critical_dt = critical_dt
        super().__init__(
            f"Time step dt={dt:.6g} ms exceeds the critical time step "
            f"{critical_dt:.6g} ms of this model and stencil"
        )
    # end def __init__

# end class StabilityError


class DomainError(FWIPropError, ValueError):
    """A source or receiver location falls outside the computational grid."""
# end class DomainError


class PropagatorStateError(FWIPropError, RuntimeError):
    """An operation was attempted in the wrong propagator state."""
# end class PropagatorStateError
