from .base import ActivityModel, ThermoVector
from .ideal import IdealAqueous, IdealGas, IdealSolution

__all__ = ["ActivityModel", "ThermoVector", "IdealAqueous", "IdealGas", "IdealSolution"]
