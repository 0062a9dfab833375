"""Gas species tracked by the atmosphere."""

from __future__ import annotations

from enum import Enum


class GasKind(Enum):
    """Atmospheric gases, stored as total mass in kg."""

    NITROGEN = "nitrogen"
    OXYGEN = "oxygen"
    CARBON_DIOXIDE = "carbon_dioxide"
    ARGON = "argon"


# Photosynthesis on a CH2O basis: kg of gas per kg of fixed biomass.
CO2_PER_BIOMASS = 44.0 / 30.0
O2_PER_BIOMASS = 32.0 / 30.0
