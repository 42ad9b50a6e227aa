"""Chemical equilibrium over a subset of species.

The solver minimizes the Gibbs energy of the equilibrium species subject to
element balance, holding every other species amount fixed. It iterates a
damped Newton method on the Lagrange conditions

    mu_i(n) / RT - (B^T lambda)_i = 0      for every equilibrium species i
    B n_e - Q^T b = 0

in log-amount variables, where B = Q^T A_e is the element balance reduced to
an independent set of rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from simpkinetics.constants import R_GAS
from simpkinetics.errors import ConvergenceError, ValidationError
from simpkinetics.partition import Partition
from simpkinetics.state import ChemicalState
from simpkinetics.system import ChemicalSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquilibriumOptions:
    """Solver options for equilibrium.

    Attributes:
        tolerance: Convergence tolerance on the scaled residual norm.
        max_iterations: Maximum number of Newton iterations.
        max_log_step: Largest change of any ln(n_i) in one iteration.
        amount_floor: Relative lower bound for initial guesses of the amounts.
    """

    tolerance: float = 1.0e-10
    max_iterations: int = 200
    max_log_step: float = 2.0
    amount_floor: float = 1.0e-12


@dataclass(frozen=True)
class EquilibriumResult:
    """Equilibrium composition and Lagrange multipliers.

    ``n`` holds the amounts of all species; only the equilibrium species were
    changed. Element potentials are in J/mol.
    """

    n: np.ndarray
    element_potentials: np.ndarray
    species_potentials: np.ndarray
    iterations: int
    converged: bool


@dataclass(frozen=True)
class EquilibriumProblem:
    """Inputs of an equilibrium calculation taken from a state."""

    temperature: float
    pressure: float
    n: np.ndarray
    equilibrium_species: tuple[int, ...]
    element_amounts: np.ndarray

    @classmethod
    def from_state(
        cls, state: ChemicalState, partition: Partition | None = None
    ) -> EquilibriumProblem:
        """Convert a state into an equilibrium problem for its equilibrium species."""
        system = state.system
        partition = partition or Partition.all_equilibrium(system)
        indices = partition.equilibrium_species
        n = state.species_amounts
        return cls(
            temperature=state.temperature,
            pressure=state.pressure,
            n=n,
            equilibrium_species=indices,
            element_amounts=system.element_amounts_in_species(indices, n),
        )


class EquilibriumSolver:
    def __init__(self, system: ChemicalSystem, options: EquilibriumOptions | None = None):
        self.system = system
        self.options = options or EquilibriumOptions()

    def solve_problem(self, problem: EquilibriumProblem) -> EquilibriumResult:
        return self.solve(
            problem.temperature,
            problem.pressure,
            problem.n,
            problem.equilibrium_species,
            problem.element_amounts,
        )

    def solve(
        self,
        temperature: float,
        pressure: float,
        n: np.ndarray,
        indices: Sequence[int],
        b: np.ndarray,
    ) -> EquilibriumResult:
        """Equilibrate the species at ``indices`` so that they hold element amounts ``b``.

        Args:
            temperature: Temperature (K).
            pressure: Pressure (Pa).
            n: Amounts of all species (mol). Entries at ``indices`` are the
                initial guess; all others are held fixed.
            indices: Indices of the equilibrium species.
            b: Element amounts the equilibrium species must contain (mol).

        Returns:
            The equilibrium result. ``n`` is a new array.

        Raises:
            ValidationError: If ``b`` cannot be represented by the species.
            ConvergenceError: If the iteration budget is exhausted.
        """
        opts = self.options
        system = self.system
        indices = np.asarray(indices, dtype=int)
        b = np.asarray(b, dtype=float)
        n = np.asarray(n, dtype=float).copy()
        RT = R_GAS * temperature
        y = np.zeros(system.num_elements)
        z = np.zeros(system.num_species)

        if b.shape != (system.num_elements,):
            raise ValidationError(
                f"Element amount vector has shape {b.shape}, expected ({system.num_elements},)."
            )
        if len(indices) == 0:
            return EquilibriumResult(n, y, z, 0, True)

        A = system.formula_matrix[:, indices]
        scale = max(float(np.max(np.abs(b))), 1.0e-300) if np.any(b) else 1.0
        zero_tol = 1.0e-14 * scale

        # Species carrying an element that is absent from b must vanish.
        signed_rows = np.any(A < 0.0, axis=1)
        forced_zero = np.zeros(len(indices), dtype=bool)
        for j in range(system.num_elements):
            if signed_rows[j]:
                continue
            if b[j] < -zero_tol:
                raise ValidationError(
                    f"Negative amount {b[j]} of element `{system.elements[j]}` in equilibrium."
                )
            if b[j] <= zero_tol:
                forced_zero |= A[j] > 0.0
        active = ~forced_zero
        n[indices[forced_zero]] = 0.0

        if not np.any(active):
            if np.max(np.abs(b)) > zero_tol:
                raise ValidationError("No equilibrium species can hold the given element amounts.")
            return EquilibriumResult(n, y, z, 0, True)

        iactive = indices[active]
        Aa = A[:, active]
        U, s, _ = np.linalg.svd(Aa, full_matrices=False)
        rank = int(np.sum(s > s[0] * 1.0e-12)) if s.size and s[0] > 0.0 else 0
        Q = U[:, :rank]
        B = Q.T @ Aa
        bq = Q.T @ b
        if np.linalg.norm(b - Q @ bq) > 1.0e-8 * scale:
            raise ValidationError(
                "The element amounts are inconsistent with the equilibrium species."
            )

        floor = opts.amount_floor * scale
        x = np.log(np.maximum(n[iactive], floor))
        n[iactive] = np.exp(x)

        mu = system.chemical_potentials(temperature, pressure, n)
        g_mu = mu.val[iactive] / RT
        lam = np.linalg.lstsq(B.T, g_mu, rcond=None)[0] if rank else np.zeros(0)

        m = len(iactive)
        error = np.inf
        for iteration in range(1, opts.max_iterations + 1):
            mu = system.chemical_potentials(temperature, pressure, n)
            g_mu = mu.val[iactive] / RT
            hessian = mu.ddn[np.ix_(iactive, iactive)] / RT
            na = n[iactive]

            residual_mu = g_mu - B.T @ lam
            residual_b = (B @ na - bq) / scale
            # Each element is balanced relative to the amounts that carry it,
            # so trace elements are held as tightly as the major ones.
            carried = np.abs(Aa) @ na + np.abs(b)
            imbalance = np.abs(Aa @ na - b)
            balance_error = np.max(
                np.where(carried > 0.0, imbalance / np.where(carried > 0.0, carried, 1.0), imbalance)
            )
            error = max(float(np.max(np.abs(residual_mu))), float(balance_error))
            logger.debug("equilibrium iteration %d: residual %.3e", iteration, error)

            jacobian = np.zeros((m + rank, m + rank))
            jacobian[:m, :m] = hessian * na[None, :]
            jacobian[:m, m:] = -B.T
            jacobian[m:, :m] = B * na[None, :] / scale
            rhs = -np.concatenate([residual_mu, residual_b])
            delta = np.linalg.lstsq(jacobian, rhs, rcond=None)[0]
            dx, dlam = delta[:m], delta[m:]

            if error < opts.tolerance:
                # One undamped step from the converged point leaves the
                # element balance at roundoff.
                x = x + dx
                lam = lam + dlam
                n[iactive] = np.exp(x)
                mu = system.chemical_potentials(temperature, pressure, n)
                y[:] = RT * (Q @ lam)
                zi = mu.val[indices] - (system.formula_matrix[:, indices].T @ y)
                z[indices] = np.where(np.isfinite(zi), zi, 0.0)
                z[iactive] = 0.0
                return EquilibriumResult(n, y, z, iteration, True)

            largest = float(np.max(np.abs(dx)))
            alpha = min(1.0, opts.max_log_step / largest) if largest > 0.0 else 1.0
            x = x + alpha * dx
            lam = lam + alpha * dlam
            n[iactive] = np.exp(x)

        raise ConvergenceError(
            f"Equilibrium did not converge in {opts.max_iterations} iterations "
            f"(residual {error:.3e})."
        )


def equilibrate(
    state: ChemicalState,
    partition: Partition | None = None,
    options: EquilibriumOptions | None = None,
) -> EquilibriumResult:
    """Equilibrate the equilibrium species of ``state`` in place.

    The element amounts held by the equilibrium species are preserved; all
    other species are left untouched.
    """
    problem = EquilibriumProblem.from_state(state, partition)
    result = EquilibriumSolver(state.system, options).solve_problem(problem)
    state.commit_amounts(result.n, result.element_potentials, result.species_potentials)
    return result
