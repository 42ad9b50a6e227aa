"""Base interface for activity models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

# Floor used in derivative denominators so zero amounts keep a finite Jacobian.
AMOUNT_FLOOR = 1.0e-300


@dataclass(frozen=True)
class ThermoVector:
    """A vector property together with its derivatives.

    Attributes:
        val: Property values, shape (n,).
        ddn: Derivatives with respect to the species amounts, shape (n, n).
    """

    val: np.ndarray
    ddn: np.ndarray


class ActivityModel(ABC):
    """Abstract base class for the activity model of one phase."""

    @abstractmethod
    def ln_activities(
        self, temperature: float, pressure: float, amounts: np.ndarray, names: tuple[str, ...]
    ) -> ThermoVector:
        """Natural log of the species activities in the phase and their amount derivatives."""
        pass

    @abstractmethod
    def volume(
        self,
        temperature: float,
        pressure: float,
        amounts: np.ndarray,
        molar_volumes: np.ndarray,
    ) -> float:
        """Calculate the phase volume (m³)."""
        pass
