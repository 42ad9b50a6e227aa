"""Kinetics helpers, rate expressions and the reaction network."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

import numpy as np

from simpkinetics.constants import R_GAS
from simpkinetics.models import Reaction
from simpkinetics.system import ChemicalSystem


class KineticsModel(Protocol):
    def rate(self, activities: Mapping[str, float], temperature: float) -> float:
        """Calculate reaction rate (mol/s) given species activities and temperature."""
        ...


@dataclass(frozen=True)
class ArrheniusKinetics:
    pre_exponential: float
    activation_energy: float

    def rate_constant(self, temperature: float) -> float:
        return self.pre_exponential * np.exp(-self.activation_energy / (R_GAS * temperature))


@dataclass(frozen=True)
class PowerLawKinetics:
    arrhenius: ArrheniusKinetics
    exponents: Mapping[str, float]

    def rate(self, activities: Mapping[str, float], temperature: float) -> float:
        k = self.arrhenius.rate_constant(temperature)
        rate = k
        for species, exponent in self.exponents.items():
            rate *= activities.get(species, 0.0) ** exponent
        return rate


@dataclass(frozen=True)
class MassActionKinetics:
    """Reversible mass-action kinetics: forward rate minus backward rate."""

    forward: PowerLawKinetics
    backward: PowerLawKinetics | None = None

    def rate(self, activities: Mapping[str, float], temperature: float) -> float:
        rate = self.forward.rate(activities, temperature)
        if self.backward is not None:
            rate -= self.backward.rate(activities, temperature)
        return rate


@dataclass(frozen=True)
class LHHWKinetics:
    """Langmuir-Hinshelwood / Eley-Rideal kinetics.

    Rate = (k * product(a_i^alpha_i)) / (1 + sum(K_j * a_j))^m
    """
    arrhenius: ArrheniusKinetics
    numerator_exponents: Mapping[str, float]
    adsorption_constants: Mapping[str, ArrheniusKinetics]
    denominator_exponent: float = 1.0

    def rate(self, activities: Mapping[str, float], temperature: float) -> float:
        # Numerator
        k = self.arrhenius.rate_constant(temperature)
        numerator = k
        for species, exponent in self.numerator_exponents.items():
            numerator *= activities.get(species, 0.0) ** exponent

        # Denominator
        denominator_sum = 1.0
        for species, ads_params in self.adsorption_constants.items():
            k_ads = ads_params.rate_constant(temperature)
            denominator_sum += k_ads * activities.get(species, 0.0)

        return numerator / (denominator_sum ** self.denominator_exponent)


class ReactionSystem:
    """A network of kinetically controlled reactions over a chemical system.

    Rates are evaluated from the species activities at (T, P, n) and combined
    with the stoichiometric matrix (reactions x species) to give species
    rates of change in mol/s.
    """

    def __init__(self, system: ChemicalSystem, reactions: Sequence[Reaction]):
        self.system = system
        self.reactions = tuple(reactions)
        matrix = np.zeros((len(self.reactions), system.num_species))
        for i, reaction in enumerate(self.reactions):
            for name, coefficient in reaction.stoichiometry.items():
                matrix[i, system.index_species(name)] = coefficient
        self._stoichiometry = matrix
        self._stoichiometry.setflags(write=False)

    @property
    def num_reactions(self) -> int:
        return len(self.reactions)

    @property
    def stoichiometric_matrix(self) -> np.ndarray:
        return self._stoichiometry

    def rates(self, temperature: float, pressure: float, n: np.ndarray) -> np.ndarray:
        a = self.system.activities(temperature, pressure, n).val
        activities = dict(zip(self.system.species_names(), a.tolist()))
        return np.array(
            [reaction.kinetics.rate(activities, temperature) for reaction in self.reactions],
            dtype=float,
        )

    def species_rates(self, temperature: float, pressure: float, n: np.ndarray) -> np.ndarray:
        """Rate of change of every species amount (mol/s)."""
        if not self.reactions:
            return np.zeros(self.system.num_species)
        return self._stoichiometry.T @ self.rates(temperature, pressure, n)
