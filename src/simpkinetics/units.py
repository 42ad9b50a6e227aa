"""Table-driven unit conversion.

Each unit maps to a dimension and a linear factor to the dimension's base unit
(mol, kg, K, Pa, molal, m³, s). Temperatures additionally carry an offset so
that ``base = value * factor + offset``.
"""

from __future__ import annotations

from dataclasses import dataclass

from simpkinetics.errors import UnitError


@dataclass(frozen=True)
class UnitDefinition:
    dimension: str
    factor: float
    offset: float = 0.0


_UNITS: dict[str, UnitDefinition] = {
    # amount
    "mol": UnitDefinition("amount", 1.0),
    "kmol": UnitDefinition("amount", 1.0e3),
    "mmol": UnitDefinition("amount", 1.0e-3),
    "umol": UnitDefinition("amount", 1.0e-6),
    "nmol": UnitDefinition("amount", 1.0e-9),
    # mass
    "kg": UnitDefinition("mass", 1.0),
    "g": UnitDefinition("mass", 1.0e-3),
    "mg": UnitDefinition("mass", 1.0e-6),
    "ug": UnitDefinition("mass", 1.0e-9),
    "t": UnitDefinition("mass", 1.0e3),
    "lb": UnitDefinition("mass", 0.45359237),
    # temperature
    "K": UnitDefinition("temperature", 1.0),
    "kelvin": UnitDefinition("temperature", 1.0),
    "degC": UnitDefinition("temperature", 1.0, 273.15),
    "celsius": UnitDefinition("temperature", 1.0, 273.15),
    "degF": UnitDefinition("temperature", 5.0 / 9.0, 459.67 * 5.0 / 9.0),
    "fahrenheit": UnitDefinition("temperature", 5.0 / 9.0, 459.67 * 5.0 / 9.0),
    "degR": UnitDefinition("temperature", 5.0 / 9.0),
    "rankine": UnitDefinition("temperature", 5.0 / 9.0),
    # pressure
    "Pa": UnitDefinition("pressure", 1.0),
    "pascal": UnitDefinition("pressure", 1.0),
    "kPa": UnitDefinition("pressure", 1.0e3),
    "MPa": UnitDefinition("pressure", 1.0e6),
    "GPa": UnitDefinition("pressure", 1.0e9),
    "bar": UnitDefinition("pressure", 1.0e5),
    "mbar": UnitDefinition("pressure", 1.0e2),
    "atm": UnitDefinition("pressure", 101325.0),
    "psi": UnitDefinition("pressure", 6894.757293168361),
    "mmHg": UnitDefinition("pressure", 133.322387415),
    "torr": UnitDefinition("pressure", 101325.0 / 760.0),
    # molality
    "molal": UnitDefinition("molality", 1.0),
    "mmolal": UnitDefinition("molality", 1.0e-3),
    "umolal": UnitDefinition("molality", 1.0e-6),
    "mol/kg": UnitDefinition("molality", 1.0),
    "mmol/kg": UnitDefinition("molality", 1.0e-3),
    # volume
    "m3": UnitDefinition("volume", 1.0),
    "L": UnitDefinition("volume", 1.0e-3),
    "mL": UnitDefinition("volume", 1.0e-6),
    "cm3": UnitDefinition("volume", 1.0e-6),
    "dm3": UnitDefinition("volume", 1.0e-3),
    # time
    "s": UnitDefinition("time", 1.0),
    "min": UnitDefinition("time", 60.0),
    "hour": UnitDefinition("time", 3600.0),
    "h": UnitDefinition("time", 3600.0),
    "day": UnitDefinition("time", 86400.0),
    "year": UnitDefinition("time", 365.25 * 86400.0),
}


def _lookup(units: str) -> UnitDefinition:
    definition = _UNITS.get(units.strip())
    if definition is None:
        raise UnitError(f"Unknown units `{units}`.")
    return definition


def dimension(units: str) -> str:
    """Return the dimension name of a unit string (e.g. ``"amount"``)."""
    return _lookup(units).dimension


def convertible(from_units: str, to_units: str) -> bool:
    """Return True if both unit strings are known and share a dimension."""
    source = _UNITS.get(from_units.strip())
    target = _UNITS.get(to_units.strip())
    if source is None or target is None:
        return False
    return source.dimension == target.dimension


def convert(value: float, from_units: str, to_units: str) -> float:
    """Convert ``value`` expressed in ``from_units`` into ``to_units``."""
    source = _lookup(from_units)
    target = _lookup(to_units)
    if source.dimension != target.dimension:
        raise UnitError(
            f"Cannot convert from `{from_units}` ({source.dimension}) "
            f"to `{to_units}` ({target.dimension})."
        )
    base = value * source.factor + source.offset
    return (base - target.offset) / target.factor
