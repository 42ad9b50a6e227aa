"""Chemical state: temperature, pressure, species amounts and potentials.

A :class:`ChemicalState` is bound to one :class:`ChemicalSystem` and owns its
arrays outright; copies never share storage. Every mutator validates its
arguments before touching the state, so a failed call leaves it unchanged.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from simpkinetics import units as unitconv
from simpkinetics.constants import DEFAULT_PRESSURE, DEFAULT_TEMPERATURE
from simpkinetics.errors import UnitError, ValidationError
from simpkinetics.system import ChemicalSystem

SpeciesRef = int | str
PhaseRef = int | str
ElementRef = int | str


class ChemicalState:
    def __init__(self, system: ChemicalSystem):
        self._system = system
        self._temperature = DEFAULT_TEMPERATURE
        self._pressure = DEFAULT_PRESSURE
        self._n = np.zeros(system.num_species)
        self._y = np.zeros(system.num_elements)
        self._z = np.zeros(system.num_species)

    def copy(self) -> ChemicalState:
        other = ChemicalState.__new__(ChemicalState)
        other._system = self._system
        other._temperature = self._temperature
        other._pressure = self._pressure
        other._n = self._n.copy()
        other._y = self._y.copy()
        other._z = self._z.copy()
        return other

    def __copy__(self) -> ChemicalState:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> ChemicalState:
        return self.copy()

    # -- index resolution ---------------------------------------------------

    def _species_index(self, species: SpeciesRef) -> int:
        if isinstance(species, str):
            return self._system.index_species(species)
        if not 0 <= species < self._system.num_species:
            raise ValidationError(f"Species index {species} is out of range.")
        return int(species)

    def _element_index(self, element: ElementRef) -> int:
        if isinstance(element, str):
            return self._system.index_element(element)
        if not 0 <= element < self._system.num_elements:
            raise ValidationError(f"Element index {element} is out of range.")
        return int(element)

    def _phase_index(self, phase: PhaseRef) -> int:
        if isinstance(phase, str):
            return self._system.index_phase(phase)
        if not 0 <= phase < self._system.num_phases:
            raise ValidationError(f"Phase index {phase} is out of range.")
        return int(phase)

    # -- mutators -----------------------------------------------------------

    def set_temperature(self, value: float, units: str | None = None) -> None:
        if units is not None:
            value = unitconv.convert(value, units, "K")
        if not value > 0.0:
            raise ValidationError(
                f"Cannot set the temperature to a non-positive value ({value} K)."
            )
        self._temperature = float(value)

    def set_pressure(self, value: float, units: str | None = None) -> None:
        if units is not None:
            value = unitconv.convert(value, units, "Pa")
        if not value > 0.0:
            raise ValidationError(f"Cannot set the pressure to a non-positive value ({value} Pa).")
        self._pressure = float(value)

    def set_species_amounts(
        self, values: float | Sequence[float] | np.ndarray, indices: Sequence[int] | None = None
    ) -> None:
        """Set species amounts (mol).

        A scalar fills every amount. A vector replaces all amounts, or only
        those at ``indices`` when given.
        """
        if indices is None and np.ndim(values) == 0:
            value = float(values)
            if value < 0.0:
                raise ValidationError(f"Cannot set species amounts to a negative value ({value}).")
            self._n.fill(value)
            return

        values = np.asarray(values, dtype=float)
        if values.ndim != 1:
            raise ValidationError("Species amounts must be a one-dimensional vector.")
        if np.any(values < 0.0):
            raise ValidationError("Cannot set species amounts with negative entries.")

        if indices is None:
            if len(values) != self._system.num_species:
                raise ValidationError(
                    f"The amount vector has length {len(values)} but the system has "
                    f"{self._system.num_species} species."
                )
            self._n = values.copy()
            return

        indices = [self._species_index(int(i)) for i in indices]
        if len(values) != len(indices):
            raise ValidationError(
                f"The amount vector has length {len(values)} but {len(indices)} indices were given."
            )
        self._n[indices] = values

    def set_species_amount(self, species: SpeciesRef, amount: float, units: str | None = None) -> None:
        index = self._species_index(species)
        if units is not None:
            if unitconv.convertible(units, "mol"):
                amount = unitconv.convert(amount, units, "mol")
            elif unitconv.convertible(units, "kg"):
                molar_mass = self._system.species[index].molar_mass
                if molar_mass <= 0.0:
                    raise ValidationError(
                        f"Species `{self._system.species[index].name}` has no molar mass."
                    )
                amount = unitconv.convert(amount, units, "kg") / molar_mass
            else:
                raise UnitError(
                    f"Cannot set the amount of a species: units `{units}` are not "
                    "convertible to units of amount or mass (e.g. mol or kg)."
                )
        if amount < 0.0:
            raise ValidationError(f"Cannot set a negative species amount ({amount}).")
        self._n[index] = float(amount)

    def set_element_potentials(self, y: Sequence[float] | np.ndarray) -> None:
        y = np.asarray(y, dtype=float)
        if y.shape != (self._system.num_elements,):
            raise ValidationError(
                f"Expected {self._system.num_elements} element potentials, got shape {y.shape}."
            )
        self._y = y.copy()

    def set_species_potentials(self, z: Sequence[float] | np.ndarray) -> None:
        z = np.asarray(z, dtype=float)
        if z.shape != (self._system.num_species,):
            raise ValidationError(
                f"Expected {self._system.num_species} species potentials, got shape {z.shape}."
            )
        self._z = z.copy()

    def set_volume(self, volume: float) -> None:
        """Rescale all species amounts so the total volume equals ``volume`` (m³)."""
        if volume < 0.0:
            raise ValidationError(f"Cannot set a negative volume ({volume}).")
        total = float(np.sum(self._phase_volumes()))
        self.scale_species_amounts(volume / total if total != 0.0 else 0.0)

    def set_phase_volume(self, phase: PhaseRef, volume: float) -> None:
        """Rescale the amounts of one phase so its volume equals ``volume`` (m³)."""
        if volume < 0.0:
            raise ValidationError(f"Cannot set a negative phase volume ({volume}).")
        iphase = self._phase_index(phase)
        current = float(self._phase_volumes()[iphase])
        self.scale_species_amounts_in_phase(iphase, volume / current if current != 0.0 else 0.0)

    def scale_species_amounts(self, scalar: float) -> None:
        if scalar < 0.0:
            raise ValidationError(f"Cannot scale species amounts by a negative scalar ({scalar}).")
        self._n *= scalar

    def scale_species_amounts_in_phase(self, phase: PhaseRef, scalar: float) -> None:
        if scalar < 0.0:
            raise ValidationError(f"Cannot scale species amounts by a negative scalar ({scalar}).")
        block = self._system.species_range_in_phase(self._phase_index(phase))
        self._n[block.start:block.stop] *= scalar

    def _phase_volumes(self) -> np.ndarray:
        return self._system.phase_volumes(self._temperature, self._pressure, self._n)

    # -- accessors ----------------------------------------------------------

    @property
    def system(self) -> ChemicalSystem:
        return self._system

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def pressure(self) -> float:
        return self._pressure

    @property
    def species_amounts(self) -> np.ndarray:
        return self._n.copy()

    @property
    def element_potentials(self) -> np.ndarray:
        return self._y.copy()

    @property
    def species_potentials(self) -> np.ndarray:
        return self._z.copy()

    def temperature_in(self, units: str) -> float:
        return unitconv.convert(self._temperature, "K", units)

    def pressure_in(self, units: str) -> float:
        return unitconv.convert(self._pressure, "Pa", units)

    def species_amount(self, species: SpeciesRef, units: str | None = None) -> float:
        value = float(self._n[self._species_index(species)])
        return value if units is None else unitconv.convert(value, "mol", units)

    def element_amounts(self) -> np.ndarray:
        return self._system.element_amounts(self._n)

    def element_amounts_in_phase(self, phase: PhaseRef) -> np.ndarray:
        return self._system.element_amounts_in_phase(self._phase_index(phase), self._n)

    def element_amounts_in_species(self, indices: Sequence[SpeciesRef]) -> np.ndarray:
        return self._system.element_amounts_in_species(
            [self._species_index(i) for i in indices], self._n
        )

    def element_amount(self, element: ElementRef, units: str | None = None) -> float:
        value = float(self.element_amounts()[self._element_index(element)])
        return value if units is None else unitconv.convert(value, "mol", units)

    def element_amount_in_phase(
        self, element: ElementRef, phase: PhaseRef, units: str | None = None
    ) -> float:
        ielement = self._element_index(element)
        value = float(self.element_amounts_in_phase(phase)[ielement])
        return value if units is None else unitconv.convert(value, "mol", units)

    def element_amount_in_species(
        self, element: ElementRef, indices: Sequence[SpeciesRef], units: str | None = None
    ) -> float:
        ielement = self._element_index(element)
        value = float(self.element_amounts_in_species(indices)[ielement])
        return value if units is None else unitconv.convert(value, "mol", units)

    # -- commit ---------------------------------------------------------------

    def commit_amounts(
        self, n: np.ndarray, y: np.ndarray | None = None, z: np.ndarray | None = None
    ) -> None:
        """Replace amounts and potentials in one assignment after validating them.

        This is how the equilibrium and kinetic solvers write their results:
        either every array is replaced or, on a validation error, none is.
        Potentials left as None keep their current values.
        """
        if n.shape != self._n.shape or np.any(n < 0.0):
            raise ValidationError("Refusing to commit an invalid species amount vector.")
        new_y = self._y if y is None else np.asarray(y, dtype=float).copy()
        new_z = self._z if z is None else np.asarray(z, dtype=float).copy()
        if new_y.shape != self._y.shape or new_z.shape != self._z.shape:
            raise ValidationError("Refusing to commit potentials of the wrong dimension.")
        self._n, self._y, self._z = n.copy(), new_y, new_z

    # -- operators ----------------------------------------------------------

    def __add__(self, other: ChemicalState) -> ChemicalState:
        if not isinstance(other, ChemicalState):
            return NotImplemented
        return combine_amounts(self, other)

    def __mul__(self, scalar: float) -> ChemicalState:
        if isinstance(scalar, ChemicalState):
            return NotImplemented
        return scale_amounts(self, scalar)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return format_table(self)

    def __repr__(self) -> str:
        return (
            f"ChemicalState(T={self._temperature} K, P={self._pressure} Pa, "
            f"n={self._n.tolist()})"
        )


def combine_amounts(left: ChemicalState, right: ChemicalState) -> ChemicalState:
    """Copy of ``left`` whose amounts are the elementwise sum of both states.

    Temperature, pressure and potentials come from ``left``.
    """
    if left.system is not right.system and left.system.species_names() != right.system.species_names():
        raise ValidationError("Cannot combine states of different chemical systems.")
    result = left.copy()
    result.set_species_amounts(left._n + right._n)
    return result


def scale_amounts(state: ChemicalState, factor: float) -> ChemicalState:
    """Copy of ``state`` with every amount multiplied by ``factor`` (≥ 0)."""
    result = state.copy()
    result.scale_species_amounts(factor)
    return result


def format_table(state: ChemicalState) -> str:
    """Render the state as a fixed-width table, one row per species."""
    system = state.system
    T, P, n = state.temperature, state.pressure, state.species_amounts
    g0 = system.standard_gibbs_energies(T, P)
    mu = system.chemical_potentials(T, P, n).val
    a = system.activities(T, P, n).val

    header = ("Index", "Species", "Moles", "Activity", "GibbsEnergy", "ChemicalPotential")
    lines = [f"{header[0]:<10}" + "".join(f"{h:<20}" for h in header[1:])]
    for i, species in enumerate(system.species):
        row = [species.name, f"{n[i]:.6g}", f"{a[i]:.6g}", f"{g0[i]:.6g}", f"{mu[i]:.6g}"]
        lines.append(f"{i:<10}" + "".join(f"{cell:<20}" for cell in row))
    return "\n".join(lines) + "\n"
