"""Chemical system: species, elements, phases and their properties."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from simpkinetics.constants import CHARGE_ELEMENT, R_GAS
from simpkinetics.errors import NameLookupError, ValidationError
from simpkinetics.models import Phase, Species
from simpkinetics.thermo import ThermoVector


class ChemicalSystem:
    """An immutable collection of phases and the species they contain.

    Species are ordered phase by phase, so the species of a phase occupy a
    contiguous index range. Elements are sorted alphabetically, with the
    charge pseudo-element ``Z`` appended when any species is charged.
    """

    def __init__(self, phases: Sequence[Phase]):
        if not phases:
            raise ValidationError("A chemical system needs at least one phase.")
        self._phases = tuple(phases)
        self._species = tuple(s for phase in self._phases for s in phase.species)

        names = [s.name for s in self._species]
        if len(set(names)) != len(names):
            raise ValidationError("Species names must be unique across phases.")

        symbols = sorted({e for s in self._species for e in s.elements})
        if any(s.charge != 0.0 for s in self._species):
            symbols.append(CHARGE_ELEMENT)
        self._elements = tuple(symbols)

        self._phase_offsets = []
        offset = 0
        for phase in self._phases:
            self._phase_offsets.append(offset)
            offset += len(phase.species)

        matrix = np.zeros((len(self._elements), len(self._species)))
        for j, species in enumerate(self._species):
            for element, coefficient in species.elements.items():
                matrix[self._elements.index(element), j] = coefficient
            if CHARGE_ELEMENT in self._elements:
                matrix[-1, j] = species.charge
        self._formula_matrix = matrix
        self._formula_matrix.setflags(write=False)

        self._molar_masses = np.array([s.molar_mass for s in self._species])
        self._molar_volumes = np.array([s.molar_volume for s in self._species])
        self._standard_gibbs = np.array([s.standard_gibbs_energy for s in self._species])
        self._species_index = {name: i for i, name in enumerate(names)}

    # -- metadata -----------------------------------------------------------

    @property
    def species(self) -> tuple[Species, ...]:
        return self._species

    @property
    def elements(self) -> tuple[str, ...]:
        return self._elements

    @property
    def phases(self) -> tuple[Phase, ...]:
        return self._phases

    @property
    def num_species(self) -> int:
        return len(self._species)

    @property
    def num_elements(self) -> int:
        return len(self._elements)

    @property
    def num_phases(self) -> int:
        return len(self._phases)

    @property
    def formula_matrix(self) -> np.ndarray:
        """Formula matrix A with shape (n_elements, n_species)."""
        return self._formula_matrix

    @property
    def molar_masses(self) -> np.ndarray:
        return self._molar_masses.copy()

    def species_names(self) -> list[str]:
        return [s.name for s in self._species]

    def index_species(self, name: str) -> int:
        try:
            return self._species_index[name]
        except KeyError:
            raise NameLookupError(f"There is no species named `{name}` in the system.") from None

    def index_element(self, name: str) -> int:
        try:
            return self._elements.index(name)
        except ValueError:
            raise NameLookupError(f"There is no element named `{name}` in the system.") from None

    def index_phase(self, name: str) -> int:
        for i, phase in enumerate(self._phases):
            if phase.name == name:
                return i
        raise NameLookupError(f"There is no phase named `{name}` in the system.")

    def index_first_species_in_phase(self, iphase: int) -> int:
        self._check_phase_index(iphase)
        return self._phase_offsets[iphase]

    def num_species_in_phase(self, iphase: int) -> int:
        self._check_phase_index(iphase)
        return len(self._phases[iphase].species)

    def species_range_in_phase(self, iphase: int) -> range:
        start = self.index_first_species_in_phase(iphase)
        return range(start, start + self.num_species_in_phase(iphase))

    def _check_phase_index(self, iphase: int) -> None:
        if not 0 <= iphase < len(self._phases):
            raise ValidationError(f"Phase index {iphase} is out of range.")

    # -- element amounts ----------------------------------------------------

    def element_amounts(self, n: np.ndarray) -> np.ndarray:
        return self._formula_matrix @ n

    def element_amounts_in_phase(self, iphase: int, n: np.ndarray) -> np.ndarray:
        return self.element_amounts_in_species(list(self.species_range_in_phase(iphase)), n)

    def element_amounts_in_species(self, indices: Sequence[int], n: np.ndarray) -> np.ndarray:
        indices = list(indices)
        return self._formula_matrix[:, indices] @ np.asarray(n)[indices]

    # -- properties ---------------------------------------------------------

    def standard_gibbs_energies(self, temperature: float, pressure: float) -> np.ndarray:
        """Standard molar Gibbs energies (J/mol)."""
        return self._standard_gibbs.copy()

    def ln_activities(self, temperature: float, pressure: float, n: np.ndarray) -> ThermoVector:
        size = self.num_species
        val = np.empty(size)
        ddn = np.zeros((size, size))
        for iphase, phase in enumerate(self._phases):
            block = self.species_range_in_phase(iphase)
            names = tuple(s.name for s in phase.species)
            terms = phase.model.ln_activities(temperature, pressure, n[block.start:block.stop], names)
            val[block.start:block.stop] = terms.val
            ddn[block.start:block.stop, block.start:block.stop] = terms.ddn
        return ThermoVector(val, ddn)

    def activities(self, temperature: float, pressure: float, n: np.ndarray) -> ThermoVector:
        ln_a = self.ln_activities(temperature, pressure, n)
        a = np.exp(ln_a.val)
        return ThermoVector(a, a[:, None] * ln_a.ddn)

    def chemical_potentials(self, temperature: float, pressure: float, n: np.ndarray) -> ThermoVector:
        """mu_i = G0_i + RT ln a_i (J/mol)."""
        ln_a = self.ln_activities(temperature, pressure, n)
        RT = R_GAS * temperature
        g0 = self.standard_gibbs_energies(temperature, pressure)
        return ThermoVector(g0 + RT * ln_a.val, RT * ln_a.ddn)

    def phase_volumes(self, temperature: float, pressure: float, n: np.ndarray) -> np.ndarray:
        volumes = np.empty(self.num_phases)
        for iphase, phase in enumerate(self._phases):
            block = self.species_range_in_phase(iphase)
            volumes[iphase] = phase.model.volume(
                temperature,
                pressure,
                n[block.start:block.stop],
                self._molar_volumes[block.start:block.stop],
            )
        return volumes
