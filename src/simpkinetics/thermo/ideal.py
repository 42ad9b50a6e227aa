"""Ideal activity models."""

from __future__ import annotations

import numpy as np

from simpkinetics.constants import R_GAS, REFERENCE_PRESSURE, WATER_MOLAR_MASS, WATER_SPECIES
from simpkinetics.errors import ValidationError
from simpkinetics.thermo.base import AMOUNT_FLOOR, ActivityModel, ThermoVector


def _safe_log(values: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore"):
        return np.log(values)


def _mole_fraction_terms(amounts: np.ndarray) -> ThermoVector:
    """ln(x_i) and its derivatives d ln(x_i)/dn_j = δij/n_i - 1/N."""
    total = float(np.sum(amounts))
    size = len(amounts)
    if total <= 0.0:
        return ThermoVector(np.full(size, -np.inf), np.zeros((size, size)))
    ln_x = _safe_log(amounts / total)
    ddn = np.diag(1.0 / np.maximum(amounts, AMOUNT_FLOOR)) - 1.0 / total
    return ThermoVector(ln_x, ddn)


class IdealSolution(ActivityModel):
    """Ideal mixing with activities equal to mole fractions."""

    def ln_activities(self, temperature, pressure, amounts, names):
        return _mole_fraction_terms(amounts)

    def volume(self, temperature, pressure, amounts, molar_volumes):
        return float(np.dot(amounts, molar_volumes))


class IdealGas(ActivityModel):
    """Ideal gas mixture: a_i = x_i P / P_ref."""

    def ln_activities(self, temperature, pressure, amounts, names):
        terms = _mole_fraction_terms(amounts)
        return ThermoVector(terms.val + np.log(pressure / REFERENCE_PRESSURE), terms.ddn)

    def volume(self, temperature, pressure, amounts, molar_volumes):
        return float(np.sum(amounts)) * R_GAS * temperature / pressure


class IdealAqueous(ActivityModel):
    """Ideal aqueous solution.

    The solvent activity is its mole fraction; solute activities are their
    molalities (mol per kg of water). The phase must contain ``H2O(l)``.
    """

    def __init__(self, solvent: str = WATER_SPECIES):
        self.solvent = solvent

    def _solvent_index(self, names: tuple[str, ...]) -> int:
        try:
            return names.index(self.solvent)
        except ValueError:
            raise ValidationError(
                f"Aqueous phase has no solvent species `{self.solvent}`."
            ) from None

    def ln_activities(self, temperature, pressure, amounts, names):
        iw = self._solvent_index(names)
        size = len(amounts)
        n_water = float(amounts[iw])

        terms = _mole_fraction_terms(amounts)
        ln_a = np.empty(size)
        ddn = np.zeros((size, size))
        ln_a[iw] = terms.val[iw]
        ddn[iw] = terms.ddn[iw]

        solutes = [i for i in range(size) if i != iw]
        if n_water > 0.0:
            kg_water = n_water * WATER_MOLAR_MASS
            ln_a[solutes] = _safe_log(amounts[solutes] / kg_water)
        else:
            ln_a[solutes] = -np.inf
        for i in solutes:
            ddn[i, i] = 1.0 / max(amounts[i], AMOUNT_FLOOR)
            ddn[i, iw] = -1.0 / max(n_water, AMOUNT_FLOOR)
        return ThermoVector(ln_a, ddn)

    def volume(self, temperature, pressure, amounts, molar_volumes):
        return float(np.dot(amounts, molar_volumes))
