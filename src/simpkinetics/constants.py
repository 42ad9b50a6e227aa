"""Physical constants used across SimpKinetics."""

R_GAS = 8.31446261815324  # J/(mol·K)

WATER_MOLAR_MASS = 0.018015268  # kg/mol

WATER_SPECIES = "H2O(l)"
HYDRON_SPECIES = "H+"

REFERENCE_PRESSURE = 1.0e5  # Pa

DEFAULT_TEMPERATURE = 298.15  # K
DEFAULT_PRESSURE = 1.0e5  # Pa

CHARGE_ELEMENT = "Z"
