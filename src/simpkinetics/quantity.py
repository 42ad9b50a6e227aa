"""Quantity extraction from a chemical state.

Expressions have the shape ``<kind>[<name>](:<units>)``:

    n[H2O(l)]          amount of a species (mol)
    n[Na+]:mmol        same, in other units
    b[Na]              amount of an element (mol)
    b[Na][Aqueous]     amount of an element in one phase
    m[Na+]             molality of a species (molal)
    a[Ca++]            activity of a species
    pH                 -log10 of the activity of H+

Parsing produces one of the tagged quantity types below and evaluation
dispatches on that type.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from simpkinetics import units as unitconv
from simpkinetics.constants import HYDRON_SPECIES, WATER_MOLAR_MASS, WATER_SPECIES
from simpkinetics.errors import UnsupportedQuantityError
from simpkinetics.state import ChemicalState


@dataclass(frozen=True)
class SpeciesAmount:
    species: str
    units: str = "mol"


@dataclass(frozen=True)
class ElementAmount:
    element: str
    phase: str | None = None
    units: str = "mol"


@dataclass(frozen=True)
class Molality:
    species: str
    units: str = "molal"


@dataclass(frozen=True)
class Activity:
    species: str


@dataclass(frozen=True)
class PH:
    pass


Quantity = SpeciesAmount | ElementAmount | Molality | Activity | PH

# Names may themselves contain parentheses, e.g. "H2O(l)", but not brackets.
_EXPRESSION = re.compile(r"^(?P<kind>[nbma])((?:\[[^\[\]]+\])+)$")
_BRACKETS = re.compile(r"\[([^\[\]]+)\]")


def parse_quantity(expression: str) -> Quantity:
    """Parse a quantity expression into its tagged representation."""
    body, _, units = expression.strip().partition(":")
    body = body.strip()
    units = units.strip() or None

    if body == "pH":
        if units is not None:
            raise UnsupportedQuantityError(f"The quantity `{expression}` does not take units.")
        return PH()

    match = _EXPRESSION.match(body)
    if match is None:
        raise UnsupportedQuantityError(
            f"The expression `{expression}` does not represent a valid quantity."
        )
    kind = match.group("kind")
    names = [name.strip() for name in _BRACKETS.findall(body)]

    if kind == "b" and len(names) <= 2:
        return ElementAmount(names[0], names[1] if len(names) == 2 else None, units or "mol")
    if len(names) != 1:
        raise UnsupportedQuantityError(
            f"The expression `{expression}` has too many bracketed names."
        )
    if kind == "n":
        return SpeciesAmount(names[0], units or "mol")
    if kind == "m":
        return Molality(names[0], units or "molal")
    if kind == "a":
        if units is not None:
            raise UnsupportedQuantityError(f"Activities are dimensionless: `{expression}`.")
        return Activity(names[0])
    raise UnsupportedQuantityError(
        f"The expression `{expression}` does not represent a valid quantity."
    )


def evaluate(state: ChemicalState, quantity: Quantity) -> float:
    """Evaluate a parsed quantity against the state."""
    if isinstance(quantity, SpeciesAmount):
        return state.species_amount(quantity.species, quantity.units)
    if isinstance(quantity, ElementAmount):
        if quantity.phase is None:
            return state.element_amount(quantity.element, quantity.units)
        return state.element_amount_in_phase(quantity.element, quantity.phase, quantity.units)
    if isinstance(quantity, Molality):
        n_water = state.species_amount(WATER_SPECIES)
        n_i = state.species_amount(quantity.species)
        kg_water = n_water * WATER_MOLAR_MASS
        molality = n_i / kg_water if kg_water > 0.0 else math.inf
        return unitconv.convert(molality, "molal", quantity.units)
    if isinstance(quantity, Activity):
        return _activity(state, quantity.species)
    if isinstance(quantity, PH):
        a_h = _activity(state, HYDRON_SPECIES)
        return -math.log10(a_h) if a_h > 0.0 else math.inf
    raise UnsupportedQuantityError(f"Unsupported quantity {quantity!r}.")


def _activity(state: ChemicalState, species: str) -> float:
    system = state.system
    index = system.index_species(species)
    a = system.activities(state.temperature, state.pressure, state.species_amounts).val
    return float(a[index])


def extract(state: ChemicalState, expression: str) -> float:
    """Parse ``expression`` and evaluate it against ``state``."""
    return evaluate(state, parse_quantity(expression))
