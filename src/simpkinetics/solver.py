"""Partitioned kinetic-equilibrium time integration.

The kinetic solver advances a :class:`ChemicalState` in time. Kinetic species
are integrated from reaction rates with a scipy ODE method, equilibrium
species are re-solved after every kinetic advance, and inert species are held
fixed.

Each step integrates the vector ``u = [n_k, b_e]``: the kinetic amounts and
the element amounts held by the equilibrium species,

    dn_k/dt = nu_k^T r(T, P, n)
    db_e/dt = A_e nu_e^T r(T, P, n)

with the equilibrium and inert amounts frozen at their start-of-step values.
The equilibrium species are then re-solved for the new ``b_e`` next to the new
kinetic amounts, and the full amount vector is committed in one assignment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from scipy.integrate import BDF, DOP853, LSODA, RK23, RK45, Radau, solve_ivp

from simpkinetics.equilibrium import EquilibriumOptions, EquilibriumSolver
from simpkinetics.errors import (
    ConvergenceError,
    NotInitializedError,
    ValidationError,
)
from simpkinetics.kinetics import ReactionSystem
from simpkinetics.partition import Partition
from simpkinetics.state import ChemicalState

logger = logging.getLogger(__name__)

_ODE_METHODS = {
    "BDF": BDF,
    "Radau": Radau,
    "LSODA": LSODA,
    "RK45": RK45,
    "RK23": RK23,
    "DOP853": DOP853,
}


@dataclass(frozen=True)
class KineticOptions:
    """Options forwarded to the ODE integrator and the equilibrium solver.

    Attributes:
        rtol: Relative tolerance of the ODE integrator.
        atol: Absolute tolerance of the ODE integrator (mol).
        method: Name of the scipy ODE method.
        initial_step: Seed for the first internally chosen step (s). None lets
            the integrator choose.
        max_step: Largest internally chosen step (s).
        max_retries: Number of step halvings before a step is reported failed.
        nonnegative_tolerance: Kinetic amounts above ``-nonnegative_tolerance``
            are clipped to zero; anything lower rejects the step (mol).
        equilibrium: Options of the embedded equilibrium solver.
    """

    rtol: float = 1.0e-8
    atol: float = 1.0e-12
    method: str = "BDF"
    initial_step: float | None = None
    max_step: float = np.inf
    max_retries: int = 8
    nonnegative_tolerance: float = 1.0e-10
    equilibrium: EquilibriumOptions = field(default_factory=EquilibriumOptions)


@dataclass(frozen=True)
class _Decomposition:
    """Index sets and matrix blocks derived from the partition."""

    equilibrium: np.ndarray
    kinetic: np.ndarray
    inert: np.ndarray
    nu_kinetic: np.ndarray  # (reactions, kinetic)
    element_rates: np.ndarray  # A_e nu_e^T, (elements, reactions)


class _StepRejected(Exception):
    def __init__(self, step_size: float, reason: str):
        super().__init__(reason)
        self.step_size = step_size
        self.reason = reason


class KineticSolver:
    """Stepping engine for a partitioned kinetic-equilibrium system.

    Usage::

        solver = KineticSolver(reactions)
        solver.set_partition("equilibrium = H2O(l)")
        solver.initialize(state, 0.0)
        t = solver.step(state, 0.0, 1.0)
        solver.solve(state, t, 10.0, 1.0)

    ``step`` and ``solve`` require a prior ``initialize``, and a new one after
    every ``set_partition``.
    """

    def __init__(self, reactions: ReactionSystem):
        self.reactions = reactions
        self.system = reactions.system
        self.options = KineticOptions()
        self.partition = Partition.all_kinetic(self.system)
        self._decomposition: _Decomposition | None = None
        self._seed_step: float | None = None

    # -- configuration ------------------------------------------------------

    def set_options(self, options: KineticOptions) -> None:
        if options.method not in _ODE_METHODS:
            raise ValidationError(f"Unknown ODE method `{options.method}`.")
        self.options = options

    def set_partition(self, partition: Partition | str) -> None:
        if isinstance(partition, str):
            partition = Partition.from_string(self.system, partition)
        partition.validate(self.system.num_species)
        self.partition = partition
        self._decomposition = None

    @property
    def initialized(self) -> bool:
        return self._decomposition is not None

    # -- lifecycle ----------------------------------------------------------

    def initialize(self, state: ChemicalState, t0: float = 0.0) -> None:
        """Equilibrate the equilibrium species of ``state`` and cache the decomposition."""
        self._check_state(state)
        decomposition = self._decompose()

        if len(decomposition.equilibrium):
            n = state.species_amounts
            b_e = self.system.element_amounts_in_species(decomposition.equilibrium, n)
            result = self._equilibrium_solver().solve(
                state.temperature, state.pressure, n, decomposition.equilibrium, b_e
            )
            state.commit_amounts(result.n, result.element_potentials, result.species_potentials)

        self._decomposition = decomposition
        self._seed_step = self.options.initial_step
        logger.debug(
            "initialized at t=%g with %d equilibrium, %d kinetic and %d inert species",
            t0,
            len(decomposition.equilibrium),
            len(decomposition.kinetic),
            len(decomposition.inert),
        )

    def step(self, state: ChemicalState, t: float, dt: float | None = None) -> float:
        """Advance ``state`` by one step starting at time ``t`` and return the new time.

        With ``dt`` omitted the step size is chosen by the integrator; otherwise
        the state is advanced over ``dt``, or a fraction of it if the step had
        to be reduced. The returned time always matches the amount advanced.
        """
        t_new, _ = self._step(state, t, dt)
        return t_new

    def solve(self, state: ChemicalState, t0: float, t1: float, dt: float) -> float:
        """Advance ``state`` from ``t0`` to exactly ``t1`` in steps of at most ``dt``."""
        if not dt > 0.0:
            raise ValidationError(f"The step size must be positive, got {dt}.")
        if t1 < t0:
            raise ValidationError(f"The final time {t1} is before the initial time {t0}.")
        self._require_initialized()

        t = t0
        while t < t1:
            remaining = t1 - t
            h = min(dt, remaining)
            t_new, taken = self._step(state, t, h)
            t = t1 if (h == remaining and taken == h) else t_new
        return t

    # -- internals ----------------------------------------------------------

    def _step(self, state: ChemicalState, t: float, dt: float | None) -> tuple[float, float]:
        self._require_initialized()
        self._check_state(state)
        if dt is not None:
            if dt < 0.0:
                raise ValidationError(f"The step size must be non-negative, got {dt}.")
            if dt == 0.0:
                return t, 0.0

        h = dt
        for attempt in range(self.options.max_retries + 1):
            try:
                t_new, n, y, z = self._attempt(state, t, h)
            except _StepRejected as exc:
                if not exc.step_size > 0.0:
                    raise ConvergenceError(f"Kinetic step at t={t} failed: {exc.reason}") from exc
                h = 0.5 * exc.step_size
                logger.warning(
                    "step at t=%g rejected (%s); retrying with dt=%g", t, exc.reason, h
                )
                continue
            state.commit_amounts(n, y, z)
            taken = t_new - t if h is None else h
            self._seed_step = min(2.0 * taken, self.options.max_step)
            logger.debug("accepted step t=%g -> %g (attempt %d)", t, t + taken, attempt + 1)
            return (t_new if h is None else t + h), taken

        raise ConvergenceError(
            f"Kinetic step at t={t} failed after {self.options.max_retries} retries."
        )

    def _attempt(
        self, state: ChemicalState, t: float, h: float | None
    ) -> tuple[float, np.ndarray, np.ndarray | None, np.ndarray | None]:
        """Compute the composition after one step without touching ``state``."""
        opts = self.options
        dec = self._decomposition
        T, P = state.temperature, state.pressure
        n0 = state.species_amounts
        nk = len(dec.kinetic)

        u0 = np.concatenate(
            [n0[dec.kinetic], self.system.element_amounts_in_species(dec.equilibrium, n0)]
        )
        rhs = self._build_rhs(T, P, n0, dec)

        if u0.size == 0:
            # every species is inert
            if h is None:
                raise ValidationError("Cannot choose a step size when every species is inert.")
            return t + h, n0, None, None

        if h is None:
            t_new, u1 = self._internal_step(rhs, t, u0)
            h_tried = t_new - t
        else:
            h_tried = h
            sol = solve_ivp(
                rhs, (t, t + h), u0, method=opts.method, rtol=opts.rtol, atol=opts.atol
            )
            if not sol.success:
                raise _StepRejected(h, f"ODE integration failed: {sol.message}")
            t_new, u1 = t + h, sol.y[:, -1]

        n_kinetic = u1[:nk]
        if np.any(n_kinetic < -opts.nonnegative_tolerance):
            raise _StepRejected(h_tried, "negative kinetic amounts")
        n = n0.copy()
        n[dec.kinetic] = np.maximum(n_kinetic, 0.0)

        if not len(dec.equilibrium):
            return t_new, n, None, None

        b_e = u1[nk:]
        try:
            result = self._equilibrium_solver().solve(T, P, n, dec.equilibrium, b_e)
        except (ConvergenceError, ValidationError) as exc:
            raise _StepRejected(h_tried, f"equilibrium re-solve failed: {exc}") from exc
        return t_new, result.n, result.element_potentials, result.species_potentials

    def _internal_step(self, rhs, t: float, u0: np.ndarray) -> tuple[float, np.ndarray]:
        opts = self.options
        method = _ODE_METHODS[opts.method]
        kwargs = {"rtol": opts.rtol, "atol": opts.atol, "max_step": opts.max_step}
        if self._seed_step is not None:
            kwargs["first_step"] = self._seed_step
        integrator = method(rhs, t, u0, t + opts.max_step, **kwargs)
        message = integrator.step()
        if integrator.status == "failed":
            tried = self._seed_step if self._seed_step is not None else integrator.step_size
            raise _StepRejected(tried or 0.0, f"ODE step failed: {message}")
        return float(integrator.t), np.array(integrator.y, dtype=float)

    def _build_rhs(self, T: float, P: float, n0: np.ndarray, dec: _Decomposition):
        reactions = self.reactions
        nk = len(dec.kinetic)

        def rhs(_t: float, u: np.ndarray) -> np.ndarray:
            n = n0.copy()
            n[dec.kinetic] = np.maximum(u[:nk], 0.0)
            r = reactions.rates(T, P, n)
            return np.concatenate([dec.nu_kinetic.T @ r, dec.element_rates @ r])

        return rhs

    def _decompose(self) -> _Decomposition:
        partition = self.partition
        ie = np.array(partition.equilibrium_species, dtype=int)
        ik = np.array(partition.kinetic_species, dtype=int)
        ii = np.array(partition.inert_species, dtype=int)
        nu = self.reactions.stoichiometric_matrix
        A = self.system.formula_matrix
        return _Decomposition(
            equilibrium=ie,
            kinetic=ik,
            inert=ii,
            nu_kinetic=nu[:, ik],
            element_rates=A[:, ie] @ nu[:, ie].T,
        )

    def _equilibrium_solver(self) -> EquilibriumSolver:
        return EquilibriumSolver(self.system, self.options.equilibrium)

    def _require_initialized(self) -> None:
        if self._decomposition is None:
            raise NotInitializedError(
                "The kinetic solver must be initialized before stepping "
                "(and again after changing its partition)."
            )

    def _check_state(self, state: ChemicalState) -> None:
        if state.system is not self.system:
            raise ValidationError("The chemical state belongs to a different chemical system.")
