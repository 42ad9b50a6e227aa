"""Command-line entrypoints for SimpKinetics."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List

import typer

from simpkinetics.equilibrium import EquilibriumOptions
from simpkinetics.kinetics import (
    ArrheniusKinetics,
    LHHWKinetics,
    MassActionKinetics,
    PowerLawKinetics,
    ReactionSystem,
)
from simpkinetics.models import Phase, Reaction, Species
from simpkinetics.presets import nacl_reactions, nacl_system
from simpkinetics.quantity import extract
from simpkinetics.solver import KineticOptions, KineticSolver
from simpkinetics.state import ChemicalState, format_table
from simpkinetics.system import ChemicalSystem
from simpkinetics.thermo import IdealAqueous, IdealGas, IdealSolution

app = typer.Typer(add_completion=False)

_ACTIVITY_MODELS = {
    "aqueous": IdealAqueous,
    "gas": IdealGas,
    "solution": IdealSolution,
}


@app.callback()
def main(
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity.")
    ] = 0,
) -> None:
    """Partitioned kinetic-equilibrium simulations."""
    level = logging.WARNING - 10 * min(verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_arrhenius(data: Dict[str, Any]) -> ArrheniusKinetics:
    return ArrheniusKinetics(
        pre_exponential=float(data["A"]),
        activation_energy=float(data.get("Ea", 0.0)),
    )


def _parse_kinetics(data: Dict[str, Any]) -> Any:
    k_type = data.get("type", "power_law").lower()
    arrhenius = _parse_arrhenius(data["arrhenius"])

    if k_type == "power_law":
        return PowerLawKinetics(
            arrhenius=arrhenius, exponents=data.get("exponents", {})
        )
    elif k_type == "mass_action":
        forward = PowerLawKinetics(arrhenius=arrhenius, exponents=data.get("exponents", {}))
        backward = None
        if "backward" in data:
            backward_data = data["backward"]
            backward = PowerLawKinetics(
                arrhenius=_parse_arrhenius(backward_data["arrhenius"]),
                exponents=backward_data.get("exponents", {}),
            )
        return MassActionKinetics(forward=forward, backward=backward)
    elif k_type == "lhhw":
        ads_consts = {
            sp: _parse_arrhenius(p) for sp, p in data.get("adsorption_constants", {}).items()
        }
        return LHHWKinetics(
            arrhenius=arrhenius,
            numerator_exponents=data.get("numerator_exponents", {}),
            adsorption_constants=ads_consts,
            denominator_exponent=float(data.get("denominator_exponent", 1.0)),
        )
    else:
        raise ValueError(f"Unknown kinetics type: {k_type}")


def _parse_system(data: List[Dict[str, Any]]) -> ChemicalSystem:
    phases = []
    for phase in data:
        model_name = phase.get("model", "solution").lower()
        if model_name not in _ACTIVITY_MODELS:
            raise ValueError(f"Unknown activity model: {model_name}")
        species = tuple(
            Species(
                name=s["name"],
                elements=s.get("elements", {}),
                charge=float(s.get("charge", 0.0)),
                molar_mass=float(s.get("molar_mass", 0.0)),
                standard_gibbs_energy=float(s.get("G0", 0.0)),
                molar_volume=float(s.get("V0", 0.0)),
            )
            for s in phase["species"]
        )
        phases.append(Phase(phase["name"], species, _ACTIVITY_MODELS[model_name]()))
    return ChemicalSystem(phases)


def _parse_state(system: ChemicalSystem, data: Dict[str, Any]) -> ChemicalState:
    state = ChemicalState(system)
    if "T" in data:
        state.set_temperature(float(data["T"]), data.get("T_units", "K"))
    if "P" in data:
        state.set_pressure(float(data["P"]), data.get("P_units", "Pa"))
    for name, amount in data.get("amounts", {}).items():
        if isinstance(amount, list):
            value, units = amount
            state.set_species_amount(name, float(value), units)
        else:
            state.set_species_amount(name, float(amount))
    return state


def _parse_options(data: Dict[str, Any]) -> KineticOptions:
    data = dict(data)
    equilibrium = EquilibriumOptions(**data.pop("equilibrium", {}))
    return KineticOptions(equilibrium=equilibrium, **data)


def _simulate(
    solver: KineticSolver,
    state: ChemicalState,
    t0: float,
    t1: float,
    dt: float,
    outputs: List[str],
) -> Dict[str, Any]:
    solver.initialize(state, t0)
    times = [t0]
    series = {q: [extract(state, q)] for q in outputs}
    t = t0
    while t < t1:
        t = solver.solve(state, t, min(t + dt, t1), dt)
        times.append(t)
        for q in outputs:
            series[q].append(extract(state, q))
    return {"time": times, "quantities": series}


@app.command()
def run(
    config_file: Annotated[
        Path, typer.Argument(help="Path to JSON configuration file.")
    ],
    output: Annotated[
        Path | None, typer.Option(help="Path to save output JSON.")
    ] = None,
) -> None:
    """Run a kinetic simulation from a config file."""
    with open(config_file, "r") as f:
        config = json.load(f)

    system = _parse_system(config["phases"])
    reactions = ReactionSystem(
        system,
        [
            Reaction(r["name"], r["stoichiometry"], _parse_kinetics(r["kinetics"]))
            for r in config.get("reactions", [])
        ],
    )
    state = _parse_state(system, config.get("state", {}))

    solver = KineticSolver(reactions)
    solver.set_options(_parse_options(config.get("solver", {})))
    if "partition" in config:
        solver.set_partition(config["partition"])

    time = config["time"]
    outputs = config.get("outputs") or [f"n[{name}]" for name in system.species_names()]
    data = _simulate(
        solver,
        state,
        float(time.get("t0", 0.0)),
        float(time["t1"]),
        float(time["dt"]),
        outputs,
    )

    json_output = json.dumps(data, indent=2)
    typer.echo(json_output)

    if output:
        with open(output, "w") as f:
            f.write(json_output)


@app.command()
def nacl_demo(
    duration: Annotated[float, typer.Option(help="Simulation duration (s).")] = 10.0,
    dt: Annotated[float, typer.Option(help="Output interval (s).")] = 1.0,
    table: Annotated[bool, typer.Option(help="Print the final state table.")] = False,
) -> None:
    """Run the Na+ + Cl- = NaCl(aq) association with water in equilibrium."""
    system = nacl_system()
    state = ChemicalState(system)
    state.set_temperature(25.0, "degC")
    state.set_pressure(1.0, "bar")
    state.set_species_amounts([1.0, 0.001, 0.001, 0.0])

    solver = KineticSolver(nacl_reactions(system))
    solver.set_partition("equilibrium = H2O(l)")

    outputs = ["n[H2O(l)]", "n[Na+]", "n[Cl-]", "n[NaCl(aq)]", "b[Na]"]
    data = _simulate(solver, state, 0.0, duration, dt, outputs)
    typer.echo(json.dumps(data, indent=2))
    if table:
        typer.echo(format_table(state))
