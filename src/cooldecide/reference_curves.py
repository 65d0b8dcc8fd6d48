"""
Literature pool-boiling curves for enhanced surfaces.

Base bands are for Novec 7100 at 1 atm, saturated, horizontal facing up,
with temperatures stored as wall superheat (K above T_sat) and heat flux
in kW/m². Condition modifiers shift them to other saturation temperatures,
subcooling levels and orientations:

    T_surf = T_sat + ΔT_sat − 0.3 × subcooling
    q''    = q''_base × (1 + 0.02 × subcooling) × f_orientation
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import numpy as np

from .thermal import ChipSpec, round_int


@dataclass(frozen=True)
class ReferenceBand:
    """Heat flux spread (kW/m²) observed at one surface temperature."""

    t_surf: float
    q_flux_min: float
    q_flux_max: float
    q_flux_avg: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "t_surf": self.t_surf,
            "q_flux_min": self.q_flux_min,
            "q_flux_max": self.q_flux_max,
            "q_flux_avg": self.q_flux_avg,
        }


@dataclass(frozen=True)
class ReferenceSurface:
    name: str
    description: str
    base_data: Tuple[ReferenceBand, ...]
    chf_range: Tuple[float, float]   # kW/m²
    h_range: Tuple[float, float]     # W/m²K
    references: Tuple[str, ...]


def _bands(*rows) -> Tuple[ReferenceBand, ...]:
    return tuple(ReferenceBand(*row) for row in rows)


_REFERENCE_SURFACES: Dict[str, ReferenceSurface] = {
    "plain": ReferenceSurface(
        name="Plain Copper",
        description="Polished or lightly roughened copper surface",
        base_data=_bands(
            (0, 0, 0, 0),
            (4, 5, 12, 8),
            (9, 18, 35, 25),
            (14, 40, 70, 55),
            (19, 75, 120, 95),
            (24, 110, 170, 140),
            (29, 140, 220, 180),
            (34, 160, 260, 210),
        ),
        chf_range=(180, 280),
        h_range=(2000, 5000),
        references=("El-Genk & Ali (2010)", "Rainey et al. (2003)"),
    ),
    "microporous": ReferenceSurface(
        name="Microporous Coating",
        description="Sintered powder or spray-coated porous layer",
        base_data=_bands(
            (0, 0, 0, 0),
            (2, 10, 25, 15),
            (5, 35, 60, 45),
            (9, 80, 130, 100),
            (13, 140, 210, 170),
            (17, 210, 300, 250),
            (21, 280, 380, 320),
            (25, 330, 420, 370),
        ),
        chf_range=(350, 500),
        h_range=(8000, 15000),
        references=("Chang & You (1997)", "You et al. (2003)"),
    ),
    "finned": ReferenceSurface(
        name="Finned / Pin-Fin Array",
        description="Micro-pin fins or extended surfaces for enhanced area",
        base_data=_bands(
            (0, 0, 0, 0),
            (3, 12, 30, 20),
            (7, 45, 85, 65),
            (11, 100, 160, 130),
            (15, 170, 260, 210),
            (19, 250, 380, 300),
            (23, 340, 480, 400),
            (27, 420, 580, 490),
            (31, 480, 650, 560),
        ),
        chf_range=(500, 750),
        h_range=(10000, 25000),
        references=("Wei & Joshi (2003)", "Kandlikar & Bapat (2007)", "Chu et al. (2012)"),
    ),
    "nanostructured": ReferenceSurface(
        name="Nanostructured Surface",
        description="CNT, nanowires, or nanocoatings for nucleation enhancement",
        base_data=_bands(
            (0, 0, 0, 0),
            (1, 8, 20, 14),
            (3, 30, 55, 40),
            (6, 70, 120, 90),
            (9, 130, 200, 160),
            (12, 200, 290, 240),
            (15, 280, 400, 330),
            (18, 360, 500, 420),
            (21, 420, 580, 490),
        ),
        chf_range=(450, 650),
        h_range=(12000, 30000),
        references=("Ahn et al. (2010)", "Chen et al. (2009)"),
    ),
    "lig": ReferenceSurface(
        name="Laser-Induced Graphene (LIG)",
        description="Porous graphene pattern created by laser ablation",
        base_data=_bands(
            (0, 0, 0, 0),
            (2, 15, 35, 25),
            (5, 50, 90, 70),
            (8, 110, 170, 140),
            (11, 180, 270, 220),
            (14, 260, 380, 310),
            (17, 350, 490, 410),
            (20, 430, 590, 500),
            (23, 500, 680, 580),
        ),
        chf_range=(550, 800),
        h_range=(15000, 35000),
        references=("MFTEL Lab (2024)", "Choi et al. (2022)"),
    ),
}

REFERENCE_SURFACES: Mapping[str, ReferenceSurface] = MappingProxyType(_REFERENCE_SURFACES)


def get_reference_surface(key: str) -> ReferenceSurface:
    try:
        return REFERENCE_SURFACES[key]
    except KeyError:
        available = ", ".join(REFERENCE_SURFACES)
        raise ValueError(f"Unknown reference surface: {key}. Available: {available}") from None


def subcooling_factor(subcooling_K: float) -> float:
    """CHF and flux gain from subcooling: +2% per K."""
    return 1 + subcooling_K * 0.02


def orientation_factor(orientation_deg: float) -> float:
    """Flux penalty: 0.9 vertical, 0.7 facing down, 1.0 otherwise."""
    if orientation_deg == 180:
        return 0.7
    if orientation_deg == 90:
        return 0.9
    return 1.0


def apply_conditions(
    base_data: Sequence[ReferenceBand],
    t_sat_C: float,
    subcooling_K: float = 0.0,
    orientation_deg: float = 0.0,
) -> List[ReferenceBand]:
    """
    Shift superheat-based bands to absolute surface temperature under the
    given conditions. Fluxes are rounded to whole kW/m².
    """
    factor = subcooling_factor(subcooling_K) * orientation_factor(orientation_deg)
    return [
        ReferenceBand(
            t_surf=t_sat_C + band.t_surf - subcooling_K * 0.3,
            q_flux_min=round_int(band.q_flux_min * factor),
            q_flux_max=round_int(band.q_flux_max * factor),
            q_flux_avg=round_int(band.q_flux_avg * factor),
        )
        for band in base_data
    ]


def adjusted_chf_range(
    surface: ReferenceSurface,
    subcooling_K: float = 0.0,
    orientation_deg: float = 0.0,
) -> Tuple[int, int]:
    """Critical heat flux range (kW/m²) under the given conditions."""
    factor = subcooling_factor(subcooling_K) * orientation_factor(orientation_deg)
    return (
        round_int(surface.chf_range[0] * factor),
        round_int(surface.chf_range[1] * factor),
    )


def interpolate_surface_temperature(
    bands: Sequence[ReferenceBand],
    q_flux_kW_m2: float,
) -> Optional[float]:
    """
    Surface temperature at a given flux, read off the average curve.

    Linear between bands, clamped to the end points. None if fewer than
    two bands.
    """
    if len(bands) < 2:
        return None
    ordered = sorted(bands, key=lambda b: b.q_flux_avg)
    q = np.array([b.q_flux_avg for b in ordered], dtype=float)
    t = np.array([b.t_surf for b in ordered], dtype=float)
    if q_flux_kW_m2 <= q[0]:
        return float(t[0])
    if q_flux_kW_m2 >= q[-1]:
        return float(t[-1])
    # first segment whose upper end reaches the flux
    i = int(np.searchsorted(q, q_flux_kW_m2, side="left"))
    q_lo, q_hi = q[i - 1], q[i]
    frac = (q_flux_kW_m2 - q_lo) / (q_hi - q_lo)
    return float(t[i - 1] + frac * (t[i] - t[i - 1]))


@dataclass(frozen=True)
class OperatingPoint:
    """Chip operating point read against a reference curve."""

    surface_key: str
    q_flux_kW_m2: float
    surface_temp_C: Optional[float]
    effective_h_W_m2K: Optional[float]
    chf_range_kW_m2: Tuple[int, int]
    within_chf: bool
    bands: Tuple[ReferenceBand, ...]

    def to_dict(self) -> Dict:
        return {
            "surface_key": self.surface_key,
            "q_flux_kW_m2": self.q_flux_kW_m2,
            "surface_temp_C": self.surface_temp_C,
            "effective_h_W_m2K": self.effective_h_W_m2K,
            "chf_range_kW_m2": list(self.chf_range_kW_m2),
            "within_chf": self.within_chf,
            "bands": [b.to_dict() for b in self.bands],
        }


def evaluate_operating_point(
    spec: ChipSpec,
    surface_key: str,
    t_sat_C: float,
    subcooling_K: float = 0.0,
    orientation_deg: float = 0.0,
) -> OperatingPoint:
    """
    Place a chip on a reference boiling curve.

    The effective h is referenced to ambient, and is None when the
    interpolated surface temperature is not above ambient.
    """
    surface = get_reference_surface(surface_key)
    bands = apply_conditions(surface.base_data, t_sat_C, subcooling_K, orientation_deg)
    q_kW_m2 = spec.heat_flux_W_m2 / 1000

    t_surf = interpolate_surface_temperature(bands, q_kW_m2)
    effective_h = None
    if t_surf is not None and t_surf > spec.ambient_temp_C:
        effective_h = q_kW_m2 * 1000 / (t_surf - spec.ambient_temp_C)

    chf = adjusted_chf_range(surface, subcooling_K, orientation_deg)
    within_chf = q_kW_m2 <= chf[1] if chf[1] > 0 else True

    return OperatingPoint(
        surface_key=surface_key,
        q_flux_kW_m2=q_kW_m2,
        surface_temp_C=t_surf,
        effective_h_W_m2K=effective_h,
        chf_range_kW_m2=chf,
        within_chf=within_chf,
        bands=tuple(bands),
    )
