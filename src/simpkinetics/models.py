"""Data structures for species, phases and reactions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from simpkinetics.kinetics import KineticsModel
    from simpkinetics.thermo import ActivityModel


@dataclass(frozen=True)
class Species:
    """A chemical species and its standard-state data.

    Attributes:
        name: Unique species name, e.g. ``"NaCl(aq)"``.
        elements: Element symbol to stoichiometric coefficient.
        charge: Electric charge in units of the elementary charge.
        molar_mass: Molar mass (kg/mol).
        standard_gibbs_energy: Standard molar Gibbs energy of formation (J/mol).
        molar_volume: Standard molar volume (m³/mol).
    """

    name: str
    elements: Mapping[str, float]
    charge: float = 0.0
    molar_mass: float = 0.0
    standard_gibbs_energy: float = 0.0
    molar_volume: float = 0.0


@dataclass(frozen=True)
class Phase:
    name: str
    species: tuple[Species, ...]
    model: ActivityModel


@dataclass(frozen=True)
class Reaction:
    name: str
    stoichiometry: Mapping[str, float]
    kinetics: KineticsModel
