"""
Plot-ready sweeps of the thermal model over heat flux.

Both generators sample the die heat flux linearly from 0 to the flux at
the given maximum TDP, and evaluate every requested cooling method at each
sample so several methods can be overlaid on one chart.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence
import numpy as np

from .thermal import (
    CoolingMethod,
    H_AIR,
    ImmersionParams,
    MethodLike,
    calc_immersion_h,
    round_half_away,
)

# Immersion reference when no bath configuration is supplied:
# roughly Novec 7100 on a plain surface.
DEFAULT_IMMERSION_H = 4000.0
DEFAULT_IMMERSION_T_REF = 61.0

DEFAULT_STEPS = 50


@dataclass(frozen=True)
class CurvePoint:
    """One heat-flux sample with a value per cooling method."""

    q_cm2: float
    values: Dict[CoolingMethod, float] = field(default_factory=dict)

    def __getitem__(self, method: MethodLike) -> float:
        return self.values[CoolingMethod.coerce(method)]

    def __contains__(self, method: MethodLike) -> bool:
        return CoolingMethod.coerce(method) in self.values

    def to_dict(self) -> Dict[str, float]:
        """Flatten to {"q_cm2": ..., "<method>": ...}."""
        row = {"q_cm2": self.q_cm2}
        for method, value in self.values.items():
            row[method.value] = value
        return row


@dataclass(frozen=True)
class PowerPoint(CurvePoint):
    """Cooling power (W) per method at one heat-flux sample."""


def _coerce_methods(methods: Iterable[MethodLike]) -> List[CoolingMethod]:
    return [CoolingMethod.coerce(m) for m in methods]


def flux_samples(chip_area_mm2: float, max_tdp: float, steps: int = DEFAULT_STEPS) -> np.ndarray:
    """
    Evenly spaced heat flux samples in W/cm².

    Returns steps + 1 values from 0 to max_tdp / (chip_area_mm2 × 0.01)
    inclusive.
    """
    q_max_cm2 = max_tdp / (chip_area_mm2 * 0.01)
    return q_max_cm2 * np.arange(steps + 1) / steps


def generate_temperature_curve(
    chip_area_mm2: float,
    max_tdp: float,
    ambient_temp_C: float,
    methods: Sequence[MethodLike],
    immersion_params: Optional[ImmersionParams] = None,
    steps: int = DEFAULT_STEPS,
) -> List[CurvePoint]:
    """
    Chip temperature against heat flux for each method.

    Air methods use T_amb + q''/h with the fixed air coefficients. Immersion
    uses T_sat + q''/h_imm, where h_imm is evaluated once for the given bath
    configuration (4000 W/m²K at 61 °C when none is given).

    Args:
        chip_area_mm2: Die area in mm²
        max_tdp: Power at the end of the sweep in W
        ambient_temp_C: Ambient air temperature
        methods: Methods to include, in column order
        immersion_params: Optional bath configuration
        steps: Number of intervals (steps + 1 points)

    Returns:
        List of CurvePoint, temperatures in °C rounded to 0.1
    """
    keys = _coerce_methods(methods)

    h_imm = DEFAULT_IMMERSION_H
    t_ref_imm = DEFAULT_IMMERSION_T_REF
    if immersion_params is not None and CoolingMethod.IMMERSION in keys:
        fluid = immersion_params.fluid
        h_imm = calc_immersion_h(
            fluid,
            immersion_params.surface,
            immersion_params.angle_deg,
            immersion_params.flow_velocity_m_s,
        )
        t_ref_imm = fluid.T_sat

    q_cm2 = flux_samples(chip_area_mm2, max_tdp, steps)
    q_W_m2 = q_cm2 * 1e4

    columns: Dict[CoolingMethod, np.ndarray] = {}
    for key in keys:
        if key is CoolingMethod.NATURAL or key is CoolingMethod.FORCED:
            columns[key] = round_half_away(ambient_temp_C + q_W_m2 / H_AIR[key], 1)
        elif key is CoolingMethod.IMMERSION:
            columns[key] = round_half_away(t_ref_imm + q_W_m2 / h_imm, 1)
        else:
            raise ValueError(f"Unhandled cooling method: {key}")

    return _assemble(CurvePoint, q_cm2, columns)


def generate_power_curve(
    chip_area_mm2: float,
    max_tdp: float,
    methods: Sequence[MethodLike],
    flow_velocity_m_s: float = 0.0,
    steps: int = DEFAULT_STEPS,
) -> List[PowerPoint]:
    """
    Cooling device power against heat flux for each method.

    The swept flux is converted back to a heat load Q in W, then:
        natural:   0
        forced:    Q × 0.04 + 15
        immersion: Q × 0.01 + 3 (+ 8 W per m/s of forced flow)
    """
    keys = _coerce_methods(methods)

    q_cm2 = flux_samples(chip_area_mm2, max_tdp, steps)
    Q = q_cm2 * (chip_area_mm2 * 0.01)
    pump_flow = flow_velocity_m_s * 8 if flow_velocity_m_s > 0 else 0.0

    columns: Dict[CoolingMethod, np.ndarray] = {}
    for key in keys:
        if key is CoolingMethod.NATURAL:
            columns[key] = np.zeros_like(q_cm2)
        elif key is CoolingMethod.FORCED:
            columns[key] = round_half_away(Q * 0.04 + 15, 1)
        elif key is CoolingMethod.IMMERSION:
            columns[key] = round_half_away(Q * 0.01 + 3 + pump_flow, 1)
        else:
            raise ValueError(f"Unhandled cooling method: {key}")

    return _assemble(PowerPoint, q_cm2, columns)


def _assemble(point_cls, q_cm2: np.ndarray, columns: Dict[CoolingMethod, np.ndarray]) -> List:
    q_rounded = round_half_away(q_cm2, 1)
    points = []
    for i in range(len(q_cm2)):
        values = {key: float(col[i]) for key, col in columns.items()}
        points.append(point_cls(q_cm2=float(q_rounded[i]), values=values))
    return points


def curve_to_records(points: Sequence[CurvePoint]) -> List[Dict[str, float]]:
    """Flatten a curve for tables and JSON."""
    return [p.to_dict() for p in points]
