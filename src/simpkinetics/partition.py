"""Partition of species into equilibrium, kinetic and inert roles."""

from __future__ import annotations

from typing import Iterable

from simpkinetics.errors import ValidationError
from simpkinetics.system import ChemicalSystem

ROLES = ("equilibrium", "kinetic", "inert")


def _as_indices(values: Iterable[int], role: str) -> tuple[int, ...]:
    indices = []
    for value in values:
        if isinstance(value, bool) or int(value) != value or value < 0:
            raise ValidationError(f"Invalid {role} species index `{value}`.")
        indices.append(int(value))
    return tuple(sorted(set(indices)))


class Partition:
    """Assignment of every species to exactly one of three roles.

    Equilibrium species are re-solved after every kinetic step, kinetic
    species are integrated from reaction rates and inert species are held
    fixed. Instances are immutable; the solver replaces them wholesale.
    """

    def __init__(
        self,
        equilibrium: Iterable[int] = (),
        kinetic: Iterable[int] = (),
        inert: Iterable[int] = (),
    ):
        self._equilibrium = _as_indices(equilibrium, "equilibrium")
        self._kinetic = _as_indices(kinetic, "kinetic")
        self._inert = _as_indices(inert, "inert")

        eq, kin, ine = set(self._equilibrium), set(self._kinetic), set(self._inert)
        overlap = (eq & kin) | (eq & ine) | (kin & ine)
        if overlap:
            raise ValidationError(
                f"Species indices {sorted(overlap)} are assigned to more than one role."
            )

    @property
    def equilibrium_species(self) -> tuple[int, ...]:
        return self._equilibrium

    @property
    def kinetic_species(self) -> tuple[int, ...]:
        return self._kinetic

    @property
    def inert_species(self) -> tuple[int, ...]:
        return self._inert

    def validate(self, num_species: int) -> None:
        """Check every index is in range and every species has a role."""
        assigned = set(self._equilibrium) | set(self._kinetic) | set(self._inert)
        out_of_range = sorted(i for i in assigned if i >= num_species)
        if out_of_range:
            raise ValidationError(
                f"Species indices {out_of_range} are out of range for {num_species} species."
            )
        missing = sorted(set(range(num_species)) - assigned)
        if missing:
            raise ValidationError(f"Species indices {missing} have no partition role.")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Partition):
            return NotImplemented
        return (self._equilibrium, self._kinetic, self._inert) == (
            other._equilibrium,
            other._kinetic,
            other._inert,
        )

    def __hash__(self) -> int:
        return hash((self._equilibrium, self._kinetic, self._inert))

    def __repr__(self) -> str:
        return (
            f"Partition(equilibrium={list(self._equilibrium)}, "
            f"kinetic={list(self._kinetic)}, inert={list(self._inert)})"
        )

    # -- factories ----------------------------------------------------------

    @classmethod
    def all_equilibrium(cls, system: ChemicalSystem) -> Partition:
        return cls(equilibrium=range(system.num_species))

    @classmethod
    def all_kinetic(cls, system: ChemicalSystem) -> Partition:
        return cls(kinetic=range(system.num_species))

    @classmethod
    def all_equilibrium_except(
        cls, system: ChemicalSystem, kinetic: Iterable[int], inert: Iterable[int] = ()
    ) -> Partition:
        kinetic = _checked(system, kinetic, "kinetic")
        inert = _checked(system, inert, "inert")
        equilibrium = set(range(system.num_species)) - set(kinetic) - set(inert)
        return cls(equilibrium, kinetic, inert)

    @classmethod
    def all_kinetic_except(
        cls, system: ChemicalSystem, equilibrium: Iterable[int], inert: Iterable[int] = ()
    ) -> Partition:
        equilibrium = _checked(system, equilibrium, "equilibrium")
        inert = _checked(system, inert, "inert")
        kinetic = set(range(system.num_species)) - set(equilibrium) - set(inert)
        return cls(equilibrium, kinetic, inert)

    @classmethod
    def from_string(cls, system: ChemicalSystem, text: str) -> Partition:
        """Build a partition from a descriptor such as ``"kinetic = Calcite; inert = Quartz"``.

        Clauses are separated by semicolons; each clause is ``role = names``
        with whitespace-separated species names. If the descriptor names
        equilibrium species but no kinetic species, the remaining species are
        kinetic; otherwise they are equilibrium.
        """
        named: dict[str, list[int]] = {}
        for clause in text.split(";"):
            clause = clause.strip()
            if not clause:
                continue
            role, sep, names = clause.partition("=")
            role = role.strip().lower()
            if not sep or role not in ROLES:
                raise ValidationError(f"Invalid partition clause `{clause}`.")
            if role in named:
                raise ValidationError(f"Partition role `{role}` is given more than once.")
            named[role] = [system.index_species(name) for name in names.split()]

        seen: dict[int, str] = {}
        for role, indices in named.items():
            for i in indices:
                if seen.setdefault(i, role) != role:
                    raise ValidationError(
                        f"Species `{system.species[i].name}` is listed as both "
                        f"{seen[i]} and {role}."
                    )

        if "equilibrium" in named and "kinetic" not in named:
            return cls.all_kinetic_except(system, named["equilibrium"], named.get("inert", ()))
        return cls.all_equilibrium_except(system, named.get("kinetic", ()), named.get("inert", ()))


def _checked(system: ChemicalSystem, indices: Iterable[int], role: str) -> tuple[int, ...]:
    indices = _as_indices(indices, role)
    for i in indices:
        if i >= system.num_species:
            raise ValidationError(f"The {role} species index {i} is out of range.")
    return indices
