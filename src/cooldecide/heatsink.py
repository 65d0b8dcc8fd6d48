"""
Air-cooled heat sink model.

A finer air-cooling estimate than the lumped coefficients in `thermal`:
heat is spread over a heat sink base area, h depends on air velocity, and
fan power follows from flow rate and fin pressure drop.

    ΔT = Q / (h × A_hs)
    P_fan = V̇ × Δp / η
"""

from dataclasses import dataclass
from typing import Dict, List
import numpy as np

from .thermal import ChipSpec, round1, round_int

# Chip temperature thresholds (°C)
T_CRITICAL_C = 85.0
T_WARNING_C = 70.0


def natural_convection_h(delta_T: float, L: float = 0.1) -> float:
    """
    Free convection from a horizontal plate, scaled to 5-25 W/m²K.

    h ≈ 1.32 (ΔT/L)^0.25
    """
    h = 1.32 * (abs(delta_T) / L) ** 0.25
    return max(5.0, min(25.0, h * 2))


def forced_convection_h(velocity_m_s: float, L: float = 0.1) -> float:
    """Forced air over a flat plate, capped at 250 W/m²K."""
    if velocity_m_s <= 0:
        return natural_convection_h(50, L)
    h = 10 + 12 * velocity_m_s ** 0.8
    return min(250.0, h)


def fan_power(flow_rate_m3_s: float, pressure_drop_Pa: float, efficiency: float = 0.5) -> float:
    """Shaft power in W."""
    return flow_rate_m3_s * pressure_drop_Pa / efficiency


def air_flow_rate(fan_rpm: float, fan_diameter_m: float = 0.12) -> float:
    """
    Volumetric flow in m³/s, Q ∝ RPM × D³.

    A 120 mm fan moves roughly 0.5-2 m³/min at 1000-3000 RPM.
    """
    Q = (fan_rpm / 1000) * fan_diameter_m ** 3 * 50
    return Q / 60


def pressure_drop(velocity_m_s: float, fin_density_fpi: float = 10) -> float:
    """Pressure drop across the fins in Pa, Δp ∝ ρv²."""
    return 0.5 * 1.2 * velocity_m_s * velocity_m_s * (1 + fin_density_fpi * 0.1)


def thermal_status(chip_temp_C: float) -> str:
    if chip_temp_C > T_CRITICAL_C:
        return "critical"
    if chip_temp_C > T_WARNING_C:
        return "warning"
    return "ok"


@dataclass(frozen=True)
class HeatSinkConfig:
    """Fan and heat sink inputs."""

    air_velocity_m_s: float = 3.0
    fan_rpm: float = 1500.0
    fan_diameter_mm: float = 120.0
    heatsink_area_cm2: float = 200.0
    fin_density_fpi: float = 12.0

    @property
    def heatsink_area_m2(self) -> float:
        return self.heatsink_area_cm2 * 1e-4

    @property
    def fan_diameter_m(self) -> float:
        return self.fan_diameter_mm / 1000


@dataclass(frozen=True)
class HeatSinkResult:
    """Natural and forced air results on a heat sink."""

    heat_flux_W_cm2: float
    natural_h_W_m2K: float
    forced_h_W_m2K: float
    natural_delta_T_K: float
    forced_delta_T_K: float
    natural_chip_temp_C: float
    forced_chip_temp_C: float
    flow_rate_m3_s: float
    pressure_drop_Pa: float
    fan_power_W: float
    cooling_pue: float

    @property
    def status(self) -> str:
        return thermal_status(self.forced_chip_temp_C)

    def to_dict(self) -> Dict:
        return {
            "heat_flux_W_cm2": self.heat_flux_W_cm2,
            "natural": {
                "h_W_m2K": self.natural_h_W_m2K,
                "delta_T_K": self.natural_delta_T_K,
                "chip_temp_C": self.natural_chip_temp_C,
            },
            "forced": {
                "h_W_m2K": self.forced_h_W_m2K,
                "delta_T_K": self.forced_delta_T_K,
                "chip_temp_C": self.forced_chip_temp_C,
            },
            "flow_rate_m3_s": self.flow_rate_m3_s,
            "pressure_drop_Pa": self.pressure_drop_Pa,
            "fan_power_W": self.fan_power_W,
            "cooling_pue": self.cooling_pue,
            "status": self.status,
        }


@dataclass(frozen=True)
class SweepPoint:
    """Heat sink performance at one air velocity."""

    velocity_m_s: float
    h_W_m2K: int
    chip_temp_C: float
    fan_power_W: float
    delta_T_K: float


def evaluate_heatsink(spec: ChipSpec, config: HeatSinkConfig = HeatSinkConfig()) -> HeatSinkResult:
    """
    Evaluate natural and fan-forced air cooling on a heat sink.

    Args:
        spec: Chip specification
        config: Fan and heat sink inputs

    Returns:
        HeatSinkResult (unrounded)
    """
    area = config.heatsink_area_m2
    natural_h = natural_convection_h(50)
    forced_h = forced_convection_h(config.air_velocity_m_s)

    natural_dT = spec.tdp_watts / (natural_h * area)
    forced_dT = spec.tdp_watts / (forced_h * area)

    flow = air_flow_rate(config.fan_rpm, config.fan_diameter_m)
    dp = pressure_drop(config.air_velocity_m_s, config.fin_density_fpi)
    p_fan = fan_power(flow, dp)

    pue = 1.0 if spec.tdp_watts == 0 else 1 + p_fan / spec.tdp_watts

    return HeatSinkResult(
        heat_flux_W_cm2=spec.heat_flux_W_cm2,
        natural_h_W_m2K=natural_h,
        forced_h_W_m2K=forced_h,
        natural_delta_T_K=natural_dT,
        forced_delta_T_K=forced_dT,
        natural_chip_temp_C=spec.ambient_temp_C + natural_dT,
        forced_chip_temp_C=spec.ambient_temp_C + forced_dT,
        flow_rate_m3_s=flow,
        pressure_drop_Pa=dp,
        fan_power_W=p_fan,
        cooling_pue=pue,
    )


def velocity_sweep(
    spec: ChipSpec,
    config: HeatSinkConfig = HeatSinkConfig(),
    v_max: float = 10.0,
    step: float = 0.5,
) -> List[SweepPoint]:
    """
    Heat sink performance from still air up to v_max.

    Fan RPM is scaled with velocity relative to the configured operating
    point; at 0 m/s the fan is off.

    Raises:
        ValueError: If config.air_velocity_m_s is not positive
    """
    if config.air_velocity_m_s <= 0:
        raise ValueError("air_velocity_m_s must be positive to scale fan speed")
    area = config.heatsink_area_m2
    points = []
    for v in np.arange(0.0, v_max + step / 2, step):
        v = float(v)
        h = natural_convection_h(50) if v == 0 else forced_convection_h(v)
        delta_T = spec.tdp_watts / (h * area)
        if v == 0:
            p_fan = 0.0
        else:
            rpm = config.fan_rpm * (v / config.air_velocity_m_s)
            flow = air_flow_rate(rpm, config.fan_diameter_m)
            p_fan = fan_power(flow, pressure_drop(v, config.fin_density_fpi))
        points.append(SweepPoint(
            velocity_m_s=v,
            h_W_m2K=round_int(h),
            chip_temp_C=round1(spec.ambient_temp_C + delta_T),
            fan_power_W=round1(p_fan),
            delta_T_K=round1(delta_T),
        ))
    return points
