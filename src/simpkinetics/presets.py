"""Ready-made species data and the NaCl association example."""

from __future__ import annotations

from typing import Iterable, Sequence

from simpkinetics.kinetics import ArrheniusKinetics, MassActionKinetics, PowerLawKinetics, ReactionSystem
from simpkinetics.models import Phase, Reaction, Species
from simpkinetics.system import ChemicalSystem
from simpkinetics.thermo import IdealAqueous, IdealGas

# Standard Gibbs energies of formation at 298.15 K (J/mol), molar volumes in m³/mol.
AQUEOUS_SPECIES: dict[str, Species] = {
    s.name: s
    for s in (
        Species("H2O(l)", {"H": 2, "O": 1}, 0.0, 0.018015268, -237181.4, 1.8068e-5),
        Species("H+", {"H": 1}, 1.0, 0.001007940, 0.0, 0.0),
        Species("OH-", {"O": 1, "H": 1}, -1.0, 0.017007340, -157220.0, -4.18e-6),
        Species("Na+", {"Na": 1}, 1.0, 0.022989770, -261880.0, -1.21e-6),
        Species("Cl-", {"Cl": 1}, -1.0, 0.035453000, -131290.0, 1.779e-5),
        Species("NaCl(aq)", {"Na": 1, "Cl": 1}, 0.0, 0.058442770, -388735.0, 2.44e-5),
        Species("CO2(aq)", {"C": 1, "O": 2}, 0.0, 0.044009500, -385974.0, 3.281e-5),
        Species("HCO3-", {"H": 1, "C": 1, "O": 3}, -1.0, 0.061016840, -586940.0, 2.421e-5),
    )
}

GASEOUS_SPECIES: dict[str, Species] = {
    s.name: s
    for s in (
        Species("CO2(g)", {"C": 1, "O": 2}, 0.0, 0.044009500, -394359.0, 0.0),
        Species("H2O(g)", {"H": 2, "O": 1}, 0.0, 0.018015268, -228582.0, 0.0),
    )
}


def build_system(aqueous: Sequence[str], gaseous: Iterable[str] = ()) -> ChemicalSystem:
    """Build a system with an aqueous phase and, optionally, a gaseous phase."""
    phases = [Phase("Aqueous", tuple(AQUEOUS_SPECIES[name] for name in aqueous), IdealAqueous())]
    gaseous = tuple(gaseous)
    if gaseous:
        phases.append(Phase("Gaseous", tuple(GASEOUS_SPECIES[name] for name in gaseous), IdealGas()))
    return ChemicalSystem(phases)


def nacl_system() -> ChemicalSystem:
    return build_system(["H2O(l)", "Na+", "Cl-", "NaCl(aq)"])


def nacl_reactions(
    system: ChemicalSystem, forward: float = 0.1, backward: float = 0.01
) -> ReactionSystem:
    """Na+ + Cl- = NaCl(aq) with mass-action rates on activities (mol/s)."""
    kinetics = MassActionKinetics(
        forward=PowerLawKinetics(ArrheniusKinetics(forward, 0.0), {"Na+": 1.0, "Cl-": 1.0}),
        backward=PowerLawKinetics(ArrheniusKinetics(backward, 0.0), {"NaCl(aq)": 1.0}),
    )
    reaction = Reaction("NaCl association", {"Na+": -1.0, "Cl-": -1.0, "NaCl(aq)": 1.0}, kinetics)
    return ReactionSystem(system, [reaction])
