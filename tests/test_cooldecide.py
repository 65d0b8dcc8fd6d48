"""
Test suite for the CoolDecide thermal engine.

Run with: pytest tests/test_cooldecide.py -v
"""

import math

import pytest
import numpy as np
from numpy.testing import assert_allclose


def novec_plain_h():
    """Hand-evaluated pool boiling h for Novec 7100 on a plain surface."""
    k, sigma, rho, mu = 0.069, 0.0136, 1510.0, 0.58e-3
    return 800 * (k / 0.06) ** 0.6 * (0.012 / sigma) ** 0.3 * (rho / 1500) ** 0.3 / (mu / 0.5e-3) ** 0.2


class TestFluids:
    """Test coolant and surface tables."""

    def test_fluid_table_keys(self):
        from cooldecide import FLUIDS

        assert list(FLUIDS) == ["novec-7100", "novec-649", "fc-72", "hfe-7200", "water"]

    def test_novec_7100_properties(self):
        from cooldecide import get_fluid

        fluid = get_fluid("novec-7100")
        assert fluid.name == "Novec 7100"
        assert fluid.T_sat == 61.0
        assert fluid.k_l == 0.069
        assert fluid.density_ratio == pytest.approx(1510.0 / 9.6)

    def test_surface_multipliers(self):
        from cooldecide import get_surface

        assert get_surface("plain").h_multiplier == 1.0
        assert get_surface("sandblasted").h_multiplier == 1.5
        assert get_surface("microporous").h_multiplier == 2.5
        assert get_surface("microfinned").h_multiplier == 3.0

    def test_unknown_fluid(self):
        from cooldecide import get_fluid

        with pytest.raises(ValueError, match="Available"):
            get_fluid("r134a")

    def test_unknown_surface(self):
        from cooldecide import get_surface

        with pytest.raises(ValueError, match="Unknown surface"):
            get_surface("velvet")

    def test_tables_are_read_only(self):
        from cooldecide import FLUIDS

        with pytest.raises(TypeError):
            FLUIDS["new"] = FLUIDS["water"]


class TestChips:
    """Test chip presets."""

    def test_preset_count(self):
        from cooldecide import CHIP_PRESETS

        assert len(CHIP_PRESETS) == 13

    def test_h100_preset(self):
        from cooldecide import get_chip_preset

        h100 = get_chip_preset("NVIDIA H100 SXM")
        assert h100.tdp_watts == 700.0
        assert h100.die_area_mm2 == 814.0
        assert h100.heat_flux_W_cm2 == pytest.approx(85.995, abs=1e-3)

    def test_to_spec(self):
        from cooldecide import get_chip_preset

        spec = get_chip_preset("AMD MI300X").to_spec(ambient_temp_C=35.0)
        assert spec.tdp_watts == 750.0
        assert spec.chip_area_mm2 == 750.0
        assert spec.ambient_temp_C == 35.0

    def test_unknown_preset(self):
        from cooldecide import get_chip_preset

        with pytest.raises(ValueError):
            get_chip_preset("Pentium 4")

    def test_categories(self):
        from cooldecide import presets_by_category

        groups = presets_by_category()
        assert set(groups) == {"Data Center", "Consumer", "Custom"}
        assert groups["Custom"][0].name == "Custom"


class TestRounding:
    """Test half-away-from-zero rounding."""

    def test_round1(self):
        from cooldecide import round1

        assert round1(2.25) == 2.3
        assert round1(-2.25) == -2.3
        assert round1(10749.386) == 10749.4

    def test_round_int_halves(self):
        from cooldecide.thermal import round_int

        assert round_int(0.5) == 1
        assert round_int(2.5) == 3
        assert round_int(-2.5) == -3

    def test_array_rounding(self):
        from cooldecide.thermal import round_half_away

        assert_allclose(round_half_away(np.array([0.05, 1.25, -1.25]), 1), [0.1, 1.3, -1.3])

    def test_nan_passes_through(self):
        from cooldecide import round1

        assert math.isnan(round1(float("nan")))


class TestHeatFlux:
    """Test heat flux conversion."""

    def test_h100(self):
        from cooldecide import heat_flux

        q_m2, q_cm2 = heat_flux(700, 814)
        assert q_m2 == pytest.approx(859950.86, rel=1e-8)
        assert q_cm2 == pytest.approx(85.995086, rel=1e-6)

    def test_units_agree(self):
        from cooldecide import heat_flux

        q_m2, q_cm2 = heat_flux(450, 608)
        assert q_m2 == pytest.approx(q_cm2 * 1e4)

    def test_zero_tdp(self):
        from cooldecide import heat_flux

        assert heat_flux(0, 500) == (0.0, 0.0)


class TestAirMethods:
    """Test natural and forced air convection."""

    def test_natural_h100(self):
        from cooldecide import ChipSpec, compute_air_method

        result = compute_air_method(ChipSpec(700, 814, 25), "natural")
        assert result.h_W_m2K == 10.0
        assert result.delta_T_K == 85995.1
        assert result.chip_temp_C == 86020.1
        assert result.heat_flux_W_cm2 == 86.0
        assert result.cooling_power_W == 0
        assert result.method == "Natural Convection (Air)"

    def test_forced_h100(self):
        from cooldecide import ChipSpec, CoolingMethod, compute_air_method

        result = compute_air_method(ChipSpec(700, 814, 25), CoolingMethod.FORCED)
        assert result.h_W_m2K == 80.0
        assert result.delta_T_K == 10749.4
        assert result.chip_temp_C == 10774.4
        assert result.cooling_power_W == 43
        assert result.key is CoolingMethod.FORCED

    def test_zero_tdp(self):
        from cooldecide import ChipSpec, compute_air_method

        natural = compute_air_method(ChipSpec(0, 500, 30), "natural")
        forced = compute_air_method(ChipSpec(0, 500, 30), "forced")
        assert natural.chip_temp_C == 30.0
        assert natural.delta_T_K == 0.0
        assert forced.cooling_power_W == 15

    def test_immersion_rejected(self):
        from cooldecide import ChipSpec, compute_air_method

        with pytest.raises(ValueError):
            compute_air_method(ChipSpec(100, 100), "immersion")


class TestImmersion:
    """Test the immersion boiling model."""

    def test_angle_factor(self):
        from cooldecide import angle_factor

        assert angle_factor(0) == pytest.approx(1.0)
        assert angle_factor(90) == pytest.approx(0.7)
        assert angle_factor(180) == pytest.approx(0.4)

    def test_angle_factor_monotonic(self):
        from cooldecide import angle_factor

        values = [angle_factor(a) for a in range(0, 181, 10)]
        assert all(a > b for a, b in zip(values, values[1:]))
        assert values[-1] == pytest.approx(0.4)
        assert angle_factor(170) > 0.4

    def test_boiling_h_base_novec(self):
        from cooldecide import boiling_h_base, get_fluid

        assert boiling_h_base(get_fluid("novec-7100")) == pytest.approx(novec_plain_h())
        assert boiling_h_base(get_fluid("novec-7100")) == pytest.approx(815.0, abs=0.5)

    def test_forced_flow_zero(self):
        from cooldecide import forced_flow_h, get_fluid

        assert forced_flow_h(get_fluid("fc-72"), 0) == 0.0

    def test_forced_flow_dittus_boelter(self):
        from cooldecide import forced_flow_h, get_fluid

        fluid = get_fluid("novec-7100")
        Re = 1510.0 * 1.0 * 0.03 / 0.58e-3
        expected = 0.023 * Re ** 0.8 * 9.9 ** 0.4 * (0.069 / 0.03)
        assert forced_flow_h(fluid, 1.0) == pytest.approx(expected)

    def test_calc_h_plain(self):
        from cooldecide import calc_immersion_h, get_fluid, get_surface

        h = calc_immersion_h(get_fluid("novec-7100"), get_surface("plain"), 0, 0)
        assert h == pytest.approx(novec_plain_h(), abs=0.05)

    def test_surface_scales_h(self):
        from cooldecide import calc_immersion_h, get_fluid, get_surface

        fluid = get_fluid("novec-7100")
        plain = calc_immersion_h(fluid, get_surface("plain"), 0, 0)
        finned = calc_immersion_h(fluid, get_surface("microfinned"), 0, 0)
        assert finned == pytest.approx(3 * plain, abs=0.2)

    def test_compute_immersion_defaults(self):
        from cooldecide import DEFAULT_IMMERSION_PARAMS, compute_immersion

        result = compute_immersion(700, 814, DEFAULT_IMMERSION_PARAMS)
        h = round(novec_plain_h(), 1)
        assert result.h_W_m2K == pytest.approx(h, abs=0.05)
        assert result.delta_T_K == pytest.approx(859950.86 / h, abs=0.1)
        assert result.chip_temp_C == pytest.approx(61.0 + 859950.86 / h, abs=0.1)
        assert result.cooling_power_W == 10
        assert result.method == "Immersion (Novec 7100)"

    def test_flow_raises_h_and_power(self):
        from cooldecide import ImmersionParams, compute_immersion

        still = compute_immersion(700, 814, ImmersionParams())
        flowing = compute_immersion(700, 814, ImmersionParams(flow_velocity_m_s=1.0))
        assert flowing.h_W_m2K > still.h_W_m2K
        assert flowing.chip_temp_C < still.chip_temp_C
        assert flowing.cooling_power_W == 18

    def test_subcooling_does_not_move_chip_temp(self):
        from cooldecide import ImmersionParams, compute_immersion

        warm = compute_immersion(700, 814, ImmersionParams(fluid_temp_C=60.0))
        cold = compute_immersion(700, 814, ImmersionParams(fluid_temp_C=20.0))
        assert warm.chip_temp_C == cold.chip_temp_C
        assert ImmersionParams(fluid_temp_C=20.0).subcooling_K == 41.0
        assert ImmersionParams(fluid_temp_C=80.0).subcooling_K == 0.0

    def test_chip_temp_uses_saturation(self):
        from cooldecide import ImmersionParams, compute_immersion

        result = compute_immersion(0, 500, ImmersionParams(fluid_key="water"))
        assert result.chip_temp_C == 100.0

    def test_unknown_keys(self):
        from cooldecide import ImmersionParams, compute_immersion

        with pytest.raises(ValueError):
            compute_immersion(100, 100, ImmersionParams(fluid_key="mineral-oil"))
        with pytest.raises(ValueError):
            compute_immersion(100, 100, ImmersionParams(surface_key="gold"))


class TestComparison:
    """Test multi-method comparison and savings."""

    def test_compute_selected_order(self):
        from cooldecide import ChipSpec, CoolingMethod, compute_selected

        result = compute_selected(ChipSpec(700, 814), ["immersion", "natural"])
        assert [r.key for r in result.results] == [CoolingMethod.IMMERSION, CoolingMethod.NATURAL]

    def test_compute_selected_empty(self):
        from cooldecide import ChipSpec, compute_selected

        assert compute_selected(ChipSpec(700, 814), []).results == ()

    def test_unknown_method(self):
        from cooldecide import ChipSpec, compute_selected

        with pytest.raises(ValueError, match="Unknown cooling method"):
            compute_selected(ChipSpec(700, 814), ["liquid-nitrogen"])

    def test_every_method_dispatches(self):
        from cooldecide import ChipSpec, CoolingMethod, compute_method

        for method in CoolingMethod:
            assert compute_method(ChipSpec(300, 500), method).key is method

    def test_energy_savings_h100(self):
        from cooldecide import ChipSpec, compute_selected

        result = compute_selected(ChipSpec(700, 814), ["natural", "forced", "immersion"])
        assert result.energy_savings("forced", "immersion") == 77

    def test_energy_savings_zero_baseline(self):
        from cooldecide import ChipSpec, compute_selected, energy_savings_percent

        result = compute_selected(ChipSpec(700, 814), ["natural", "immersion"])
        assert energy_savings_percent(result.results[0], result.results[1]) == 0

    def test_energy_savings_missing_method(self):
        from cooldecide import ChipSpec, compute_selected

        result = compute_selected(ChipSpec(700, 814), ["forced"])
        assert result.energy_savings("forced", "immersion") is None

    def test_summary_and_dict(self):
        from cooldecide import ChipSpec, compute_selected

        result = compute_selected(ChipSpec(700, 814), ["forced", "immersion"])
        assert "Forced Convection (Fan)" in result.summary()
        data = result.to_dict()
        assert data["results"][0]["key"] == "forced"
        assert data["results"][1]["cooling_power_W"] == 10

    def test_results_are_rounded(self):
        from cooldecide import CHIP_PRESETS, compute_selected

        for preset in CHIP_PRESETS:
            result = compute_selected(preset.to_spec(), ["natural", "forced", "immersion"])
            for r in result.results:
                assert isinstance(r.cooling_power_W, int)
                for value in (r.chip_temp_C, r.delta_T_K, r.h_W_m2K, r.heat_flux_W_cm2):
                    assert value * 10 == pytest.approx(round(value * 10), abs=1e-6)

    def test_repeat_calls_agree(self):
        from cooldecide import ChipSpec, ImmersionParams, compute_immersion, compute_selected

        spec = ChipSpec(350, 600, ambient_temp_C=30)
        methods = ["natural", "forced", "immersion"]
        assert compute_selected(spec, methods) == compute_selected(spec, methods)

        params = ImmersionParams(fluid_key="fc-72", surface_key="microfinned", flow_velocity_m_s=0.5)
        assert compute_immersion(350, 600, params) == compute_immersion(350, 600, params)


class TestCurves:
    """Test heat flux sweeps."""

    def test_flux_samples(self):
        from cooldecide import flux_samples

        q = flux_samples(814, 700)
        assert len(q) == 51
        assert q[0] == 0.0
        assert q[-1] == pytest.approx(700 / 8.14)

    def test_temperature_curve_default_immersion(self):
        from cooldecide import generate_temperature_curve

        points = generate_temperature_curve(814, 700, 25, ["natural", "forced", "immersion"])
        assert len(points) == 51
        assert points[0]["natural"] == 25.0
        assert points[0]["immersion"] == 61.0
        assert points[-1].q_cm2 == 86.0
        assert points[-1]["natural"] == 86020.1
        assert points[-1]["forced"] == 10774.4
        assert points[-1]["immersion"] == pytest.approx(61 + 859950.86 / 4000, abs=0.05)

    def test_temperature_curve_with_params(self):
        from cooldecide import ImmersionParams, generate_temperature_curve

        params = ImmersionParams(fluid_key="fc-72")
        points = generate_temperature_curve(814, 700, 25, ["immersion"], immersion_params=params)
        assert points[0]["immersion"] == 56.0
        assert "natural" not in points[0]

    def test_temperature_curve_monotonic(self):
        from cooldecide import generate_temperature_curve

        points = generate_temperature_curve(500, 300, 25, ["forced"], steps=20)
        values = [p["forced"] for p in points]
        assert len(values) == 21
        assert values == sorted(values)

    def test_power_curve(self):
        from cooldecide import generate_power_curve

        points = generate_power_curve(814, 700, ["natural", "forced", "immersion"])
        assert points[0]["forced"] == 15.0
        assert points[0]["immersion"] == 3.0
        assert points[-1]["natural"] == 0.0
        assert points[-1]["forced"] == 43.0
        assert points[-1]["immersion"] == 10.0

    def test_power_curve_flow(self):
        from cooldecide import generate_power_curve

        points = generate_power_curve(814, 700, ["immersion"], flow_velocity_m_s=1.0)
        assert points[-1]["immersion"] == 18.0

    def test_power_curve_monotonic(self):
        from cooldecide import generate_power_curve

        points = generate_power_curve(814, 700, ["natural", "forced", "immersion"])
        for method in ("natural", "forced", "immersion"):
            values = [p[method] for p in points]
            assert all(a <= b for a, b in zip(values, values[1:]))
        for method in ("forced", "immersion"):
            values = [p[method] for p in points]
            assert all(a < b for a, b in zip(values, values[1:]))

    def test_curves_repeatable(self):
        from cooldecide import ImmersionParams, curve_to_records, generate_power_curve, generate_temperature_curve

        methods = ["natural", "forced", "immersion"]
        params = ImmersionParams(fluid_key="hfe-7200")
        first = generate_temperature_curve(600, 350, 30, methods, immersion_params=params)
        second = generate_temperature_curve(600, 350, 30, methods, immersion_params=params)
        assert curve_to_records(first) == curve_to_records(second)
        assert curve_to_records(generate_power_curve(600, 350, methods)) == \
            curve_to_records(generate_power_curve(600, 350, methods))

    def test_every_method_in_curves(self):
        from cooldecide import CoolingMethod, generate_power_curve, generate_temperature_curve

        methods = list(CoolingMethod)
        assert all(m in generate_temperature_curve(500, 300, 25, methods, steps=2)[1] for m in methods)
        assert all(m in generate_power_curve(500, 300, methods, steps=2)[1] for m in methods)

    def test_records(self):
        from cooldecide import curve_to_records, generate_power_curve

        records = curve_to_records(generate_power_curve(814, 700, ["forced"], steps=2))
        assert records[0] == {"q_cm2": 0.0, "forced": 15.0}
        assert len(records) == 3


class TestHeatSink:
    """Test the air heat sink model."""

    def test_convection_coefficients(self):
        from cooldecide.heatsink import forced_convection_h, natural_convection_h

        assert natural_convection_h(50) == pytest.approx(2 * 1.32 * 500 ** 0.25)
        assert natural_convection_h(0) == 5.0
        assert forced_convection_h(3.0) == pytest.approx(10 + 12 * 3 ** 0.8)
        assert forced_convection_h(100.0) == 250.0

    def test_thermal_status(self):
        from cooldecide.heatsink import thermal_status

        assert thermal_status(60) == "ok"
        assert thermal_status(70) == "ok"
        assert thermal_status(85) == "warning"
        assert thermal_status(85.1) == "critical"

    def test_evaluate(self):
        from cooldecide import ChipSpec, HeatSinkConfig, evaluate_heatsink

        result = evaluate_heatsink(ChipSpec(100, 400), HeatSinkConfig())
        h = 10 + 12 * 3 ** 0.8
        assert result.forced_delta_T_K == pytest.approx(100 / (h * 0.02))
        assert result.forced_chip_temp_C == pytest.approx(25 + 100 / (h * 0.02))
        assert result.natural_delta_T_K > result.forced_delta_T_K
        assert result.fan_power_W > 0
        assert result.cooling_pue == pytest.approx(1 + result.fan_power_W / 100)

    def test_zero_tdp_pue(self):
        from cooldecide import ChipSpec, evaluate_heatsink

        result = evaluate_heatsink(ChipSpec(0, 400))
        assert result.cooling_pue == 1.0
        assert result.status == "ok"

    def test_velocity_sweep(self):
        from cooldecide import ChipSpec, velocity_sweep

        sweep = velocity_sweep(ChipSpec(100, 400))
        assert len(sweep) == 21
        assert sweep[0].velocity_m_s == 0.0
        assert sweep[0].fan_power_W == 0.0
        assert sweep[-1].velocity_m_s == 10.0
        assert sweep[-1].chip_temp_C < sweep[1].chip_temp_C

    def test_velocity_sweep_needs_operating_velocity(self):
        from cooldecide import ChipSpec, HeatSinkConfig, velocity_sweep

        with pytest.raises(ValueError, match="air_velocity_m_s"):
            velocity_sweep(ChipSpec(100, 400), HeatSinkConfig(air_velocity_m_s=0.0))

    def test_to_dict(self):
        from cooldecide import ChipSpec, evaluate_heatsink

        data = evaluate_heatsink(ChipSpec(700, 814)).to_dict()
        assert data["status"] == "critical"
        assert set(data["forced"]) == {"h_W_m2K", "delta_T_K", "chip_temp_C"}


class TestReferenceCurves:
    """Test literature boiling curves."""

    def test_surfaces(self):
        from cooldecide import REFERENCE_SURFACES

        assert list(REFERENCE_SURFACES) == ["plain", "microporous", "finned", "nanostructured", "lig"]

    def test_saturated_shift(self):
        from cooldecide import REFERENCE_SURFACES, apply_conditions

        bands = apply_conditions(REFERENCE_SURFACES["plain"].base_data, 61.0)
        assert bands[0].t_surf == 61.0
        assert bands[-1].t_surf == 95.0
        assert bands[-1].q_flux_avg == 210

    def test_subcooling_and_orientation(self):
        from cooldecide import REFERENCE_SURFACES, apply_conditions

        bands = apply_conditions(REFERENCE_SURFACES["plain"].base_data, 61.0,
                                 subcooling_K=10, orientation_deg=90)
        assert bands[-1].t_surf == pytest.approx(92.0)
        assert bands[-1].q_flux_avg == round(210 * 1.2 * 0.9)

    def test_orientation_factor(self):
        from cooldecide.reference_curves import orientation_factor

        assert orientation_factor(0) == 1.0
        assert orientation_factor(90) == 0.9
        assert orientation_factor(180) == 0.7
        assert orientation_factor(45) == 1.0

    def test_interpolation(self):
        from cooldecide import REFERENCE_SURFACES, apply_conditions, interpolate_surface_temperature

        bands = apply_conditions(REFERENCE_SURFACES["plain"].base_data, 61.0)
        assert interpolate_surface_temperature(bands, 40) == pytest.approx(72.5)
        assert interpolate_surface_temperature(bands, 0) == 61.0
        assert interpolate_surface_temperature(bands, 1000) == 95.0
        assert interpolate_surface_temperature(bands[:1], 10) is None

    def test_operating_point(self):
        from cooldecide import ChipSpec, evaluate_operating_point

        point = evaluate_operating_point(ChipSpec(100, 1000), "plain", 61.0)
        assert point.q_flux_kW_m2 == pytest.approx(100.0)
        assert point.surface_temp_C == pytest.approx(80 + 5 * 5 / 45)
        assert point.effective_h_W_m2K == pytest.approx(100000 / (80 + 25 / 45 - 25))
        assert point.within_chf is True

    def test_operating_point_beyond_chf(self):
        from cooldecide import ChipSpec, evaluate_operating_point

        point = evaluate_operating_point(ChipSpec(700, 814), "plain", 61.0)
        assert point.within_chf is False
        assert point.chf_range_kW_m2 == (180, 280)

    def test_unknown_surface(self):
        from cooldecide import ChipSpec, evaluate_operating_point

        with pytest.raises(ValueError):
            evaluate_operating_point(ChipSpec(100, 100), "graphite", 61.0)
