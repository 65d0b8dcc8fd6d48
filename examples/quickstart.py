#!/usr/bin/env python3
"""
CoolDecide Quickstart Example
=============================
Demonstrates core functionality in 20 lines.
"""

from cooldecide import ChipSpec, ImmersionParams, compute_immersion, compute_selected, get_chip_preset

# 1. Compare all three methods for an H100
spec = get_chip_preset("NVIDIA H100 SXM").to_spec()
result = compute_selected(spec, ["natural", "forced", "immersion"])
print(result.summary())

# 2. Cooling power saved by immersion over forced air
print(f"Savings: {result.energy_savings('forced', 'immersion')}%")

# 3. Tune the bath: FC-72 on micro-fins with 1 m/s flow
params = ImmersionParams(fluid_key="fc-72", surface_key="microfinned", flow_velocity_m_s=1.0)
tuned = compute_immersion(spec.tdp_watts, spec.chip_area_mm2, params)
print(f"Tuned immersion - h: {tuned.h_W_m2K:.0f} W/m²K, T_chip: {tuned.chip_temp_C:.1f}°C")

# 4. A custom chip
custom = compute_selected(ChipSpec(tdp_watts=150, chip_area_mm2=300, ambient_temp_C=35), ["forced"])
print(f"Custom chip, forced air: {custom.results[0].chip_temp_C:.1f}°C")
