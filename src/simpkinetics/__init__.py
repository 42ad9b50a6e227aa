"""SimpKinetics core package."""

from simpkinetics.composition import ChemicalComposition
from simpkinetics.equilibrium import EquilibriumOptions, EquilibriumSolver, equilibrate
from simpkinetics.errors import (
    ConvergenceError,
    NameLookupError,
    NotInitializedError,
    SimpKineticsError,
    UnitError,
    UnsupportedQuantityError,
    ValidationError,
)
from simpkinetics.kinetics import (
    ArrheniusKinetics,
    LHHWKinetics,
    MassActionKinetics,
    PowerLawKinetics,
    ReactionSystem,
)
from simpkinetics.models import Phase, Reaction, Species
from simpkinetics.partition import Partition
from simpkinetics.quantity import extract, parse_quantity
from simpkinetics.solver import KineticOptions, KineticSolver
from simpkinetics.state import ChemicalState, combine_amounts, format_table, scale_amounts
from simpkinetics.system import ChemicalSystem

__all__ = [
    "ArrheniusKinetics",
    "ChemicalComposition",
    "ChemicalState",
    "ChemicalSystem",
    "ConvergenceError",
    "EquilibriumOptions",
    "EquilibriumSolver",
    "KineticOptions",
    "KineticSolver",
    "LHHWKinetics",
    "MassActionKinetics",
    "NameLookupError",
    "NotInitializedError",
    "Partition",
    "Phase",
    "PowerLawKinetics",
    "Reaction",
    "ReactionSystem",
    "SimpKineticsError",
    "Species",
    "UnitError",
    "UnsupportedQuantityError",
    "ValidationError",
    "combine_amounts",
    "equilibrate",
    "extract",
    "format_table",
    "parse_quantity",
    "scale_amounts",
]
