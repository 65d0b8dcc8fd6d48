#!/usr/bin/env python3
"""
Example: Comparing chip cooling strategies end to end.

This script walks through the CoolDecide library: method comparison,
immersion bath tuning, heat flux sweeps, the air heat sink model and
literature boiling curves.

Usage:
    python examples/cooling_comparison.py
"""

from cooldecide import (
    CHIP_PRESETS,
    FLUIDS,
    REFERENCE_SURFACES,
    SURFACES,
    ImmersionParams,
    apply_conditions,
    compute_immersion,
    compute_selected,
    evaluate_heatsink,
    evaluate_operating_point,
    generate_power_curve,
    generate_temperature_curve,
    get_chip_preset,
    velocity_sweep,
)


def main():
    print("=" * 70)
    print("COOLDECIDE - EXAMPLE")
    print("=" * 70)
    print()

    # =========================================================================
    # Example 1: Compare methods across presets
    # =========================================================================
    print("1. METHOD COMPARISON")
    print("-" * 50)

    for preset in CHIP_PRESETS[:4]:
        result = compute_selected(preset.to_spec(), ["forced", "immersion"])
        forced, immersion = result.results
        print(f"   {preset.name:<22} q={preset.heat_flux_W_cm2:5.1f} W/cm²  "
              f"forced {forced.cooling_power_W:>3d} W, immersion {immersion.cooling_power_W:>3d} W "
              f"({result.energy_savings('forced', 'immersion')}% saved)")
    print()

    # =========================================================================
    # Example 2: Coolant and surface choice
    # =========================================================================
    print("2. IMMERSION BATH TUNING (NVIDIA B200)")
    print("-" * 50)

    spec = get_chip_preset("NVIDIA B200").to_spec()
    for fluid_key in FLUIDS:
        for surface_key in ("plain", "microfinned"):
            params = ImmersionParams(fluid_key=fluid_key, surface_key=surface_key)
            r = compute_immersion(spec.tdp_watts, spec.chip_area_mm2, params)
            print(f"   {FLUIDS[fluid_key].name:<18} {SURFACES[surface_key].name:<18} "
                  f"h={r.h_W_m2K:>8.1f} W/m²K  T_chip={r.chip_temp_C:>8.1f}°C")
    print()

    # =========================================================================
    # Example 3: Heat flux sweeps
    # =========================================================================
    print("3. HEAT FLUX SWEEP")
    print("-" * 50)

    temps = generate_temperature_curve(spec.chip_area_mm2, spec.tdp_watts, 25.0,
                                       ["forced", "immersion"], steps=5)
    powers = generate_power_curve(spec.chip_area_mm2, spec.tdp_watts,
                                  ["forced", "immersion"], steps=5)
    for t, p in zip(temps, powers):
        print(f"   q={t.q_cm2:6.1f} W/cm²  forced {t['forced']:>9.1f}°C / {p['forced']:5.1f} W   "
              f"immersion {t['immersion']:>7.1f}°C / {p['immersion']:5.1f} W")
    print()

    # =========================================================================
    # Example 4: Air heat sink
    # =========================================================================
    print("4. AIR HEAT SINK (NVIDIA RTX 4080)")
    print("-" * 50)

    gpu = get_chip_preset("NVIDIA RTX 4080").to_spec()
    hs = evaluate_heatsink(gpu)
    print(f"   Forced: {hs.forced_chip_temp_C:.1f}°C ({hs.status}), fan {hs.fan_power_W:.2f} W, "
          f"PUE {hs.cooling_pue:.4f}")
    for point in velocity_sweep(gpu)[::4]:
        print(f"   v={point.velocity_m_s:4.1f} m/s  h={point.h_W_m2K:>3d}  T={point.chip_temp_C:6.1f}°C")
    print()

    # =========================================================================
    # Example 5: Literature boiling curves
    # =========================================================================
    print("5. REFERENCE BOILING CURVES (Google TPU v5e)")
    print("-" * 50)

    tpu = get_chip_preset("Google TPU v5e").to_spec()
    for key, surface in REFERENCE_SURFACES.items():
        op = evaluate_operating_point(tpu, key, t_sat_C=61.0, subcooling_K=5.0)
        print(f"   {surface.name:<30} T_surf={op.surface_temp_C:6.1f}°C  "
              f"CHF {op.chf_range_kW_m2[0]}-{op.chf_range_kW_m2[1]} kW/m²  "
              f"{'OK' if op.within_chf else 'ABOVE CHF'}")

    bands = apply_conditions(REFERENCE_SURFACES["lig"].base_data, 61.0, orientation_deg=90)
    print(f"   LIG vertical, max avg flux: {bands[-1].q_flux_avg} kW/m²")

    print()
    print("=" * 70)
    print("EXAMPLES COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
