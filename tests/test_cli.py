"""
Tests for the command line interface and charts.

Run with: pytest tests/test_cli.py -v
"""

import json

import matplotlib
matplotlib.use("Agg")

import pytest


class TestCLI:
    """Test cooldecide sub-commands."""

    def test_no_command_prints_help(self, capsys):
        from cooldecide.cli import main

        assert main([]) == 0
        assert "compare" in capsys.readouterr().out

    def test_compare(self, capsys):
        from cooldecide.cli import main

        assert main(["compare", "--tdp", "700", "--area", "814"]) == 0
        out = capsys.readouterr().out
        assert "Forced Convection (Fan)" in out
        assert "Immersion (Novec 7100)" in out
        assert "+77% saved" in out

    def test_compare_preset_subset(self, capsys):
        from cooldecide.cli import main

        assert main(["compare", "--preset", "NVIDIA RTX 4090", "--methods", "natural"]) == 0
        out = capsys.readouterr().out
        assert "Natural Convection (Air)" in out
        assert "saved" not in out

    def test_missing_chip(self, capsys):
        from cooldecide.cli import main

        assert main(["compare"]) == 2
        assert "--preset" in capsys.readouterr().err

    def test_unknown_preset(self, capsys):
        from cooldecide.cli import main

        assert main(["compare", "--preset", "Pentium 4"]) == 2
        assert "Unknown chip preset" in capsys.readouterr().err

    def test_immersion(self, capsys):
        from cooldecide.cli import main

        assert main(["immersion", "--tdp", "700", "--area", "814", "--fluid", "fc-72"]) == 0
        assert "Immersion (FC-72)" in capsys.readouterr().out

    def test_immersion_unknown_surface(self):
        from cooldecide.cli import main

        assert main(["immersion", "--tdp", "700", "--area", "814", "--surface", "gold"]) == 2

    def test_curve_to_file(self, tmp_path, capsys):
        from cooldecide.cli import main

        out_file = tmp_path / "power.json"
        assert main(["curve", "power", "--tdp", "700", "--area", "814", "-o", str(out_file)]) == 0
        records = json.loads(out_file.read_text(encoding="utf-8"))
        assert len(records) == 51
        assert records[-1]["forced"] == 43.0
        assert "51 points" in capsys.readouterr().out

    def test_curve_stdout(self, capsys):
        from cooldecide.cli import main

        assert main(["curve", "temperature", "--tdp", "300", "--area", "500",
                     "--methods", "immersion", "--steps", "4"]) == 0
        records = json.loads(capsys.readouterr().out)
        assert len(records) == 5
        assert records[0]["immersion"] == 61.0

    def test_presets_and_fluids(self, capsys):
        from cooldecide.cli import main

        assert main(["presets"]) == 0
        assert "NVIDIA H100 SXM" in capsys.readouterr().out
        assert main(["fluids"]) == 0
        out = capsys.readouterr().out
        assert "novec-7100" in out
        assert "nanostructured" in out


class TestVisualization:
    """Test chart builders with the Agg backend."""

    def test_every_method_has_style(self):
        from cooldecide import CoolingMethod
        from cooldecide.visualization import COLORS, METHOD_NAMES

        for method in CoolingMethod:
            assert method in COLORS
            assert method in METHOD_NAMES

    def test_temperature_curve(self):
        import matplotlib.pyplot as plt
        from cooldecide import generate_temperature_curve
        from cooldecide.visualization import plot_temperature_curve

        points = generate_temperature_curve(814, 700, 25, ["natural", "forced", "immersion"], steps=10)
        fig = plot_temperature_curve(points)
        assert len(fig.axes[0].lines) == 4
        plt.close(fig)

    def test_power_curve_saved(self, tmp_path):
        import matplotlib.pyplot as plt
        from cooldecide import generate_power_curve
        from cooldecide.visualization import plot_power_curve

        path = tmp_path / "power.png"
        fig = plot_power_curve(generate_power_curve(814, 700, ["forced"], steps=5), save_path=str(path))
        assert path.exists()
        plt.close(fig)

    def test_comparison(self):
        import matplotlib.pyplot as plt
        from cooldecide import ChipSpec, compute_selected
        from cooldecide.visualization import plot_comparison

        fig = plot_comparison(compute_selected(ChipSpec(700, 814), ["natural", "forced", "immersion"]))
        assert len(fig.axes) == 2
        plt.close(fig)

    def test_reference_band(self):
        import matplotlib.pyplot as plt
        from cooldecide import REFERENCE_SURFACES, apply_conditions, new_dataset
        from cooldecide.visualization import plot_reference_band

        bands = apply_conditions(REFERENCE_SURFACES["lig"].base_data, 61.0)
        ds = new_dataset("Run", "experiment", [(75, 80), (65, 10)])
        fig = plot_reference_band(bands, [ds], operating_flux_kW_m2=300)
        assert len(fig.axes[0].lines) == 3
        plt.close(fig)
