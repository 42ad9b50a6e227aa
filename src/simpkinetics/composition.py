"""Build equilibrium problems from fluid recipes.

A composition is described the way a lab would prepare it: an aqueous fluid
of 1 kg of water with compounds at given molalities, and a gaseous fluid of
compounds at given mole fractions::

    composition = ChemicalComposition(system)
    composition.set_temperature(60.0, "degC")
    composition.set_aqueous_fluid("1 molal NaCl; 1 mmolal MgCl2")
    composition.set_gaseous_fluid("0.70 N2; 0.20 O2; 0.10 CO2")
    problem = composition.to_equilibrium_problem()

Compounds are chemical formulas, not species names; only their elements
enter the problem. The equilibrium solver decides which species carry them.
"""

from __future__ import annotations

import re

import numpy as np

from simpkinetics import units as unitconv
from simpkinetics.constants import DEFAULT_PRESSURE, DEFAULT_TEMPERATURE, WATER_MOLAR_MASS, WATER_SPECIES
from simpkinetics.equilibrium import EquilibriumProblem
from simpkinetics.errors import UnitError, ValidationError
from simpkinetics.partition import Partition
from simpkinetics.system import ChemicalSystem

_FORMULA = re.compile(r"^(?:[A-Z][a-z]?\d*(?:\.\d+)?)+$")
_ELEMENT = re.compile(r"([A-Z][a-z]?)(\d*(?:\.\d+)?)")
_WATER_ELEMENTS = {"H": 2.0, "O": 1.0}

# Mole fractions must add up to one within this tolerance.
_FRACTION_TOLERANCE = 1.0e-6


def parse_formula(formula: str) -> dict[str, float]:
    """Return the element counts of a formula such as ``"MgCl2"`` or ``"CO2"``."""
    formula = formula.strip()
    if not _FORMULA.match(formula):
        raise ValidationError(f"Cannot read `{formula}` as a chemical formula.")
    counts: dict[str, float] = {}
    for symbol, count in _ELEMENT.findall(formula):
        counts[symbol] = counts.get(symbol, 0.0) + (float(count) if count else 1.0)
    return counts


def _parse_recipe(text: str, default_units: str | None) -> list[tuple[float, str | None, str]]:
    entries = []
    for item in text.split(";"):
        item = item.strip()
        if not item:
            continue
        words = item.split()
        if len(words) == 2:
            value, units, compound = words[0], default_units, words[1]
        elif len(words) == 3:
            value, units, compound = words
        else:
            raise ValidationError(f"Cannot read the composition entry `{item}`.")
        try:
            amount = float(value)
        except ValueError:
            raise ValidationError(f"Invalid amount `{value}` in `{item}`.") from None
        if amount < 0.0:
            raise ValidationError(f"Negative amount in the composition entry `{item}`.")
        entries.append((amount, units, compound))
    return entries


class ChemicalComposition:
    """Recipe for the initial composition of a chemical system."""

    def __init__(self, system: ChemicalSystem):
        self._system = system
        self._partition = Partition.all_equilibrium(system)
        self._temperature = DEFAULT_TEMPERATURE
        self._pressure = DEFAULT_PRESSURE
        self._aqueous: dict[str, float] = {}
        self._gaseous: dict[str, float] = {}
        self._gas_amount = 0.0

    @property
    def system(self) -> ChemicalSystem:
        return self._system

    @property
    def partition(self) -> Partition:
        return self._partition

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def pressure(self) -> float:
        return self._pressure

    def set_partition(self, partition: Partition | str) -> None:
        if isinstance(partition, str):
            partition = Partition.from_string(self._system, partition)
        partition.validate(self._system.num_species)
        self._partition = partition

    def set_temperature(self, value: float, units: str = "K") -> None:
        kelvin = unitconv.convert(value, units, "K")
        if not kelvin > 0.0:
            raise ValidationError(f"Temperature must be positive, got {kelvin} K.")
        self._temperature = kelvin

    def set_pressure(self, value: float, units: str = "Pa") -> None:
        pascal = unitconv.convert(value, units, "Pa")
        if not pascal > 0.0:
            raise ValidationError(f"Pressure must be positive, got {pascal} Pa.")
        self._pressure = pascal

    def set_aqueous_fluid(self, molalities: str) -> None:
        """Set the compounds dissolved in 1 kg of water, e.g. ``"1 molal NaCl; 1 mmolal MgCl2"``.

        Entries without units are in molal. Replaces any previous aqueous fluid.
        """
        aqueous: dict[str, float] = {}
        for value, units, compound in _parse_recipe(molalities, "molal"):
            if unitconv.dimension(units) != "molality":
                raise UnitError(f"`{units}` is not a molality unit.")
            self._check_formula(compound)
            aqueous[compound] = aqueous.get(compound, 0.0) + unitconv.convert(value, units, "molal")
        self._aqueous = aqueous

    def set_gaseous_fluid(self, fractions: str, amount: float = 1.0, units: str = "mol") -> None:
        """Set the gas as mole fractions of a total amount, e.g. ``"0.70 N2; 0.20 O2; 0.10 CO2"``.

        The fractions must add up to one. Replaces any previous gaseous fluid.
        """
        total = unitconv.convert(amount, units, "mol")
        if total < 0.0:
            raise ValidationError(f"Negative gas amount {amount} {units}.")
        gaseous: dict[str, float] = {}
        for value, entry_units, compound in _parse_recipe(fractions, None):
            if entry_units is not None:
                raise ValidationError(f"Mole fractions take no units: `{entry_units}`.")
            self._check_formula(compound)
            gaseous[compound] = gaseous.get(compound, 0.0) + value
        if gaseous and abs(sum(gaseous.values()) - 1.0) > _FRACTION_TOLERANCE:
            raise ValidationError(
                f"Gas mole fractions add up to {sum(gaseous.values())}, expected 1."
            )
        self._gaseous = gaseous
        self._gas_amount = total

    def element_amounts(self) -> np.ndarray:
        """Amounts of every element in the recipe (mol)."""
        system = self._system
        b = np.zeros(system.num_elements)

        def add(formula: dict[str, float], amount: float) -> None:
            for symbol, count in formula.items():
                b[system.index_element(symbol)] += count * amount

        if self._aqueous:
            add(_WATER_ELEMENTS, 1.0 / WATER_MOLAR_MASS)
            for compound, molality in self._aqueous.items():
                add(parse_formula(compound), molality)
        for compound, fraction in self._gaseous.items():
            add(parse_formula(compound), fraction * self._gas_amount)
        return b

    def to_equilibrium_problem(self) -> EquilibriumProblem:
        """Convert the recipe into an equilibrium problem over the partition's equilibrium species.

        The solvent amount seeds the initial guess; every other species starts
        from zero and is raised to the solver's amount floor.
        """
        system = self._system
        n = np.zeros(system.num_species)
        equilibrium = self._partition.equilibrium_species
        if self._aqueous and WATER_SPECIES in system.species_names():
            iwater = system.index_species(WATER_SPECIES)
            if iwater in equilibrium:
                n[iwater] = 1.0 / WATER_MOLAR_MASS
        return EquilibriumProblem(
            temperature=self._temperature,
            pressure=self._pressure,
            n=n,
            equilibrium_species=equilibrium,
            element_amounts=self.element_amounts(),
        )

    def _check_formula(self, compound: str) -> None:
        for symbol in parse_formula(compound):
            self._system.index_element(symbol)
