"""Exception hierarchy for SimpKinetics."""

from __future__ import annotations


class SimpKineticsError(Exception):
    """Base class for all errors raised by SimpKinetics."""


class ValidationError(SimpKineticsError, ValueError):
    """Raised when an argument violates a state invariant.

    Negative amounts, scalars or volumes, non-positive temperature or
    pressure, and vector/index dimension mismatches all end up here.
    """


class NameLookupError(SimpKineticsError, LookupError):
    """Raised when a species, element or phase name is unknown."""


class UnitError(SimpKineticsError, ValueError):
    """Raised when a unit string cannot be converted to the required dimension."""


class UnsupportedQuantityError(UnitError):
    """Raised when a quantity expression has an unrecognized kind."""


class ConvergenceError(SimpKineticsError, RuntimeError):
    """Raised when an equilibrium or ODE sub-solve exhausts its budget."""


class NotInitializedError(SimpKineticsError, RuntimeError):
    """Raised when a kinetic solver is stepped before being initialized."""
