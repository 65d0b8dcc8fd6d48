"""
Steady-state thermal estimation for chip cooling strategies.

This module converts a chip's thermal design power and die area into
heat-transfer coefficient, temperature rise, chip temperature and cooling
power figures for three strategies: natural air convection, forced air
convection (fan) and two-phase immersion cooling.

All strategies use the lumped relation:
    q'' = h × ΔT   →   ΔT = q'' / h
    T_chip = T_ref + ΔT

where T_ref is ambient air for the air methods and the coolant saturation
temperature for immersion.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union
import math

import numpy as np

from .fluids import FluidProperties, SurfaceType, get_fluid, get_surface


class CoolingMethod(Enum):
    """Cooling strategy selector."""
    NATURAL = "natural"
    FORCED = "forced"
    IMMERSION = "immersion"

    @classmethod
    def coerce(cls, value: Union["CoolingMethod", str]) -> "CoolingMethod":
        """Accept a member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown cooling method: {value}. Available: {available}") from None


MethodLike = Union[CoolingMethod, str]

# Lumped air-side coefficients (W/m²K)
H_AIR: Dict[CoolingMethod, float] = {
    CoolingMethod.NATURAL: 10.0,
    CoolingMethod.FORCED: 80.0,
}

AIR_METHOD_LABELS: Dict[CoolingMethod, str] = {
    CoolingMethod.NATURAL: "Natural Convection (Air)",
    CoolingMethod.FORCED: "Forced Convection (Fan)",
}

# Characteristic length for the single-phase flow term (m)
L_CHAR_M = 0.03

ANGLE_FACTOR_FLOOR = 0.4


def round_half_away(value, ndigits: int = 0):
    """Round half away from zero; works on scalars and numpy arrays."""
    scale = 10.0 ** ndigits
    arr = np.asarray(value, dtype=float)
    rounded = np.copysign(np.floor(np.abs(arr) * scale + 0.5), arr) / scale
    if rounded.ndim == 0:
        return float(rounded)
    return rounded


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return round_half_away(value, 1)


def round_int(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(round_half_away(value, 0))


@dataclass(frozen=True)
class ChipSpec:
    """Thermal load to be cooled."""

    tdp_watts: float
    chip_area_mm2: float
    ambient_temp_C: float = 25.0

    @property
    def chip_area_m2(self) -> float:
        return self.chip_area_mm2 * 1e-6

    @property
    def heat_flux_W_m2(self) -> float:
        """Heat flux at the die surface in W/m²."""
        return self.tdp_watts / self.chip_area_m2

    @property
    def heat_flux_W_cm2(self) -> float:
        """Heat flux at the die surface in W/cm²."""
        return self.tdp_watts / (self.chip_area_mm2 * 0.01)


@dataclass(frozen=True)
class ImmersionParams:
    """
    Immersion bath configuration.

    fluid_temp_C is the bulk (possibly subcooled) liquid temperature.
    angle_deg is the boiling surface inclination: 0 = horizontal facing up,
    90 = vertical, 180 = horizontal facing down.
    """

    fluid_key: str = "novec-7100"
    surface_key: str = "plain"
    fluid_temp_C: float = 50.0
    angle_deg: float = 0.0
    flow_velocity_m_s: float = 0.0

    @property
    def fluid(self) -> FluidProperties:
        return get_fluid(self.fluid_key)

    @property
    def surface(self) -> SurfaceType:
        return get_surface(self.surface_key)

    @property
    def subcooling_K(self) -> float:
        """Degrees below saturation of the bulk liquid (never negative)."""
        return max(0.0, self.fluid.T_sat - self.fluid_temp_C)


# Used by compute_selected when no immersion configuration is given
DEFAULT_IMMERSION_PARAMS = ImmersionParams(
    fluid_key="novec-7100",
    surface_key="plain",
    fluid_temp_C=50.0,
    angle_deg=0.0,
    flow_velocity_m_s=0.0,
)


@dataclass(frozen=True)
class CoolingResult:
    """Steady-state result for one cooling method."""

    chip_temp_C: float
    delta_T_K: float
    h_W_m2K: float
    heat_flux_W_cm2: float
    cooling_power_W: int
    method: str
    key: CoolingMethod

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "chip_temp_C": self.chip_temp_C,
            "delta_T_K": self.delta_T_K,
            "h_W_m2K": self.h_W_m2K,
            "heat_flux_W_cm2": self.heat_flux_W_cm2,
            "cooling_power_W": self.cooling_power_W,
            "method": self.method,
            "key": self.key.value,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Results for several methods, in the order they were requested."""

    results: Tuple[CoolingResult, ...]

    def by_key(self, method: MethodLike) -> Optional[CoolingResult]:
        """First result for the given method, or None."""
        key = CoolingMethod.coerce(method)
        for result in self.results:
            if result.key is key:
                return result
        return None

    def energy_savings(self, baseline: MethodLike, improved: MethodLike) -> Optional[int]:
        """Savings of `improved` over `baseline`; None if either is missing."""
        base = self.by_key(baseline)
        better = self.by_key(improved)
        if base is None or better is None:
            return None
        return energy_savings_percent(base, better)

    def summary(self) -> str:
        """Plain-text comparison table."""
        lines = [
            "=" * 78,
            f"{'Method':<32}{'T_chip °C':>10}{'ΔT K':>10}{'h W/m²K':>10}"
            f"{'q W/cm²':>9}{'P W':>7}",
            "-" * 78,
        ]
        for r in self.results:
            lines.append(
                f"{r.method:<32}{r.chip_temp_C:>10.1f}{r.delta_T_K:>10.1f}"
                f"{r.h_W_m2K:>10.1f}{r.heat_flux_W_cm2:>9.1f}{r.cooling_power_W:>7d}"
            )
        lines.append("=" * 78)
        return "\n".join(lines)

    def to_dict(self) -> Dict:
        return {"results": [r.to_dict() for r in self.results]}


def heat_flux(tdp_watts: float, chip_area_mm2: float) -> Tuple[float, float]:
    """
    Die heat flux in both unit systems.

    Args:
        tdp_watts: Dissipated power in W
        chip_area_mm2: Die area in mm²

    Returns:
        (q'' in W/m², q'' in W/cm²)
    """
    area_m2 = chip_area_mm2 * 1e-6
    q_W_m2 = tdp_watts / area_m2
    q_W_cm2 = tdp_watts / (chip_area_mm2 * 0.01)
    return q_W_m2, q_W_cm2


def fan_power(tdp_watts: float) -> float:
    """Fan draw: 15 W baseline plus 4% of the dissipated heat."""
    return tdp_watts * 0.04 + 15


def immersion_power(tdp_watts: float, flow_velocity_m_s: float = 0.0) -> float:
    """Pump and condenser draw: 3 W + 1% of heat + 8 W per m/s of forced flow."""
    pump_flow = flow_velocity_m_s * 8 if flow_velocity_m_s > 0 else 0.0
    return tdp_watts * 0.01 + 3 + pump_flow


def compute_air_method(spec: ChipSpec, method: MethodLike) -> CoolingResult:
    """
    Natural or forced air convection with a fixed lumped coefficient.

    Args:
        spec: Chip specification
        method: "natural" or "forced"

    Returns:
        CoolingResult referenced to ambient temperature
    """
    key = CoolingMethod.coerce(method)
    if key not in H_AIR:
        raise ValueError(f"Not an air cooling method: {key.value}")

    q_W_m2, q_W_cm2 = heat_flux(spec.tdp_watts, spec.chip_area_mm2)
    h = H_AIR[key]
    delta_T = q_W_m2 / h
    chip_temp = spec.ambient_temp_C + delta_T

    cooling_power = 0
    if key is CoolingMethod.FORCED:
        cooling_power = round_int(fan_power(spec.tdp_watts))

    return CoolingResult(
        chip_temp_C=round1(chip_temp),
        delta_T_K=round1(delta_T),
        h_W_m2K=h,
        heat_flux_W_cm2=round1(q_W_cm2),
        cooling_power_W=cooling_power,
        method=AIR_METHOD_LABELS[key],
        key=key,
    )


def angle_factor(angle_deg: float) -> float:
    """
    Boiling degradation with surface inclination.

    1.0 facing up (0°), ~0.7 vertical (90°), floored at 0.4 facing down.
    """
    angle_rad = angle_deg * math.pi / 180
    return max(ANGLE_FACTOR_FLOOR, 1 - 0.6 * math.sin(angle_rad / 2) ** 2)


def boiling_h_base(fluid: FluidProperties) -> float:
    """
    Plain-surface nucleate pool boiling coefficient in W/(m²·K).

    Empirical fit in the spirit of Rohsenow: higher liquid conductivity and
    density, lower surface tension and viscosity raise h.
    """
    return (800
            * (fluid.k_l / 0.06) ** 0.6
            * (0.012 / fluid.sigma) ** 0.3
            * (fluid.rho_l / 1500) ** 0.3
            / (fluid.mu_l / 0.5e-3) ** 0.2)


def forced_flow_h(fluid: FluidProperties, flow_velocity_m_s: float) -> float:
    """
    Single-phase forced convection added on top of boiling.

    Dittus-Boelter: Nu = 0.023 Re^0.8 Pr^0.4 over a 30 mm length.
    """
    if flow_velocity_m_s == 0:
        return 0.0
    Re = fluid.rho_l * flow_velocity_m_s * L_CHAR_M / fluid.mu_l
    return 0.023 * Re ** 0.8 * fluid.Pr_l ** 0.4 * (fluid.k_l / L_CHAR_M)


def calc_immersion_h(
    fluid: FluidProperties,
    surface: SurfaceType,
    angle_deg: float,
    flow_velocity_m_s: float,
) -> float:
    """
    Effective immersion heat transfer coefficient.

    h = h_base × surface multiplier × angle factor + h_flow

    Args:
        fluid: Coolant properties
        surface: Boiling surface finish
        angle_deg: Surface inclination in degrees [0, 180]
        flow_velocity_m_s: External forced flow velocity

    Returns:
        Heat transfer coefficient in W/(m²·K), rounded to 0.1
    """
    h_boiling = boiling_h_base(fluid) * surface.h_multiplier
    h_flow = forced_flow_h(fluid, flow_velocity_m_s)
    return round1(h_boiling * angle_factor(angle_deg) + h_flow)


def compute_immersion(
    tdp_watts: float,
    chip_area_mm2: float,
    params: ImmersionParams,
) -> CoolingResult:
    """
    Two-phase immersion cooling result.

    The chip surface sits at T_sat + superheat. Bulk subcooling only
    affects the condenser side, so fluid_temp_C does not shift chip_temp_C.

    Args:
        tdp_watts: Dissipated power in W
        chip_area_mm2: Die area in mm²
        params: Bath configuration

    Returns:
        CoolingResult referenced to the coolant saturation temperature
    """
    fluid = params.fluid
    surface = params.surface

    q_W_m2, q_W_cm2 = heat_flux(tdp_watts, chip_area_mm2)
    h = calc_immersion_h(fluid, surface, params.angle_deg, params.flow_velocity_m_s)

    delta_T = q_W_m2 / h
    chip_temp = fluid.T_sat + delta_T

    return CoolingResult(
        chip_temp_C=round1(chip_temp),
        delta_T_K=round1(delta_T),
        h_W_m2K=h,
        heat_flux_W_cm2=round1(q_W_cm2),
        cooling_power_W=round_int(immersion_power(tdp_watts, params.flow_velocity_m_s)),
        method=f"Immersion ({fluid.name})",
        key=CoolingMethod.IMMERSION,
    )


def compute_method(
    spec: ChipSpec,
    method: MethodLike,
    immersion_params: Optional[ImmersionParams] = None,
) -> CoolingResult:
    """Dispatch one method; immersion falls back to DEFAULT_IMMERSION_PARAMS."""
    key = CoolingMethod.coerce(method)
    if key is CoolingMethod.NATURAL or key is CoolingMethod.FORCED:
        return compute_air_method(spec, key)
    if key is CoolingMethod.IMMERSION:
        params = immersion_params if immersion_params is not None else DEFAULT_IMMERSION_PARAMS
        return compute_immersion(spec.tdp_watts, spec.chip_area_mm2, params)
    raise ValueError(f"Unhandled cooling method: {key}")


def compute_selected(spec: ChipSpec, methods: Iterable[MethodLike]) -> ComparisonResult:
    """
    Compute one result per requested method, in request order.

    Immersion always uses DEFAULT_IMMERSION_PARAMS here.
    """
    results: List[CoolingResult] = [compute_method(spec, m) for m in methods]
    return ComparisonResult(results=tuple(results))


def energy_savings_percent(baseline: CoolingResult, improved: CoolingResult) -> int:
    """
    Cooling power saved by `improved` relative to `baseline`, in percent.

    Returns 0 when the baseline draws no cooling power.
    """
    if baseline.cooling_power_W == 0:
        return 0
    saved = (baseline.cooling_power_W - improved.cooling_power_W) / baseline.cooling_power_W
    return round_int(saved * 100)
