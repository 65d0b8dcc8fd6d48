"""
Coolant and boiling-surface reference data.

This module holds the thermophysical property table for the dielectric
coolants used in two-phase immersion cooling, and the surface-enhancement
table used to scale the pool-boiling coefficient.

Property values are at 1 atm and saturation unless noted.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class FluidProperties:
    """Thermophysical properties of a coolant at its saturation point."""

    name: str
    formula: str
    T_sat: float   # °C @ 1 atm
    rho_l: float   # kg/m³ liquid density
    rho_v: float   # kg/m³ vapor density
    h_fg: float    # kJ/kg latent heat
    k_l: float     # W/mK liquid thermal conductivity
    mu_l: float    # Pa·s liquid dynamic viscosity
    c_pl: float    # J/kgK liquid specific heat
    sigma: float   # N/m surface tension
    Pr_l: float    # liquid Prandtl number
    GWP: float
    ODP: float

    @property
    def density_ratio(self) -> float:
        """Liquid-to-vapor density ratio."""
        return self.rho_l / self.rho_v

    def __repr__(self) -> str:
        return (f"FluidProperties(name='{self.name}', T_sat={self.T_sat}°C, "
                f"k_l={self.k_l} W/m·K, GWP={self.GWP:g})")


@dataclass(frozen=True)
class SurfaceType:
    """
    Boiling surface finish.

    C_sf and n are the Rohsenow surface-fluid constants; h_multiplier scales
    the plain-surface boiling coefficient.
    """

    name: str
    description: str
    C_sf: float
    n: float
    h_multiplier: float


_FLUIDS: Dict[str, FluidProperties] = {
    "novec-7100": FluidProperties(
        name="Novec 7100",
        formula="C₄F₉OCH₃",
        T_sat=61.0,
        rho_l=1510.0,
        rho_v=9.6,
        h_fg=112.0,
        k_l=0.069,
        mu_l=0.58e-3,
        c_pl=1183.0,
        sigma=0.0136,
        Pr_l=9.9,
        GWP=297.0,
        ODP=0.0,
    ),
    "novec-649": FluidProperties(
        name="Novec 649",
        formula="C₆F₁₂O",
        T_sat=49.0,
        rho_l=1600.0,
        rho_v=13.4,
        h_fg=88.0,
        k_l=0.059,
        mu_l=0.64e-3,
        c_pl=1103.0,
        sigma=0.0108,
        Pr_l=12.0,
        GWP=1.0,
        ODP=0.0,
    ),
    "fc-72": FluidProperties(
        name="FC-72",
        formula="C₆F₁₄",
        T_sat=56.0,
        rho_l=1680.0,
        rho_v=13.3,
        h_fg=88.0,
        k_l=0.057,
        mu_l=0.64e-3,
        c_pl=1100.0,
        sigma=0.010,
        Pr_l=12.3,
        GWP=9300.0,
        ODP=0.0,
    ),
    "hfe-7200": FluidProperties(
        name="HFE-7200",
        formula="C₄F₉OC₂H₅",
        T_sat=76.0,
        rho_l=1420.0,
        rho_v=7.4,
        h_fg=119.0,
        k_l=0.068,
        mu_l=0.61e-3,
        c_pl=1220.0,
        sigma=0.0136,
        Pr_l=10.9,
        GWP=55.0,
        ODP=0.0,
    ),
    "water": FluidProperties(
        name="Water (subcooled)",
        formula="H₂O",
        T_sat=100.0,
        rho_l=958.0,
        rho_v=0.6,
        h_fg=2257.0,
        k_l=0.68,
        mu_l=0.28e-3,
        c_pl=4217.0,
        sigma=0.0589,
        Pr_l=1.73,
        GWP=0.0,
        ODP=0.0,
    ),
}

_SURFACES: Dict[str, SurfaceType] = {
    "plain": SurfaceType(
        name="Plain (polished)",
        description="Flat polished copper/silicon surface",
        C_sf=0.013,
        n=1.7,
        h_multiplier=1.0,
    ),
    "sandblasted": SurfaceType(
        name="Sandblasted",
        description="Roughened metal surface",
        C_sf=0.0068,
        n=1.7,
        h_multiplier=1.5,
    ),
    "microporous": SurfaceType(
        name="Microporous coating",
        description="Sintered/porous coating, enhanced nucleation",
        C_sf=0.0042,
        n=1.7,
        h_multiplier=2.5,
    ),
    "microfinned": SurfaceType(
        name="Micro-fin array",
        description="Structured micro-fins, area enhancement",
        C_sf=0.005,
        n=1.7,
        h_multiplier=3.0,
    ),
    "nanostructured": SurfaceType(
        name="Nanostructured",
        description="Nano-wire/pillar array, max nucleation site density",
        C_sf=0.0035,
        n=1.7,
        h_multiplier=4.0,
    ),
}

FLUIDS: Mapping[str, FluidProperties] = MappingProxyType(_FLUIDS)
SURFACES: Mapping[str, SurfaceType] = MappingProxyType(_SURFACES)


def get_fluid(fluid_key: str) -> FluidProperties:
    """
    Look up a coolant by key.

    Args:
        fluid_key: Table key, e.g. "novec-7100"

    Returns:
        FluidProperties record

    Raises:
        ValueError: If the key is not in the table
    """
    try:
        return FLUIDS[fluid_key]
    except KeyError:
        available = ", ".join(FLUIDS)
        raise ValueError(f"Unknown fluid: {fluid_key}. Available: {available}") from None


def get_surface(surface_key: str) -> SurfaceType:
    """Look up a boiling surface by key; raises ValueError if unknown."""
    try:
        return SURFACES[surface_key]
    except KeyError:
        available = ", ".join(SURFACES)
        raise ValueError(f"Unknown surface: {surface_key}. Available: {available}") from None


def fluid_keys() -> List[str]:
    return list(FLUIDS)


def surface_keys() -> List[str]:
    return list(SURFACES)
