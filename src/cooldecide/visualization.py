"""
Charts for cooling comparisons and boiling curves.

This module provides matplotlib plots for:
- Chip temperature vs heat flux, one line per cooling method
- Cooling power vs heat flux
- Side-by-side method comparison bars
- Reference boiling bands with measured datasets overlaid
"""

from typing import Any, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from .boiling_data import BoilingDataset
from .curves import CurvePoint, PowerPoint
from .reference_curves import ReferenceBand
from .thermal import ComparisonResult, CoolingMethod


COLORS = {
    CoolingMethod.NATURAL: "#f59e0b",    # Amber
    CoolingMethod.FORCED: "#ef4444",     # Red
    CoolingMethod.IMMERSION: "#0891b2",  # Cyan
    "band": "#14b8a6",
    "limit": "#6b7280",
}

DATASET_COLORS = ["#0891b2", "#059669", "#db2777", "#ca8a04", "#7c3aed",
                  "#ea580c", "#dc2626", "#2563eb", "#65a30d", "#c026d3"]

METHOD_NAMES = {
    CoolingMethod.NATURAL: "Natural convection",
    CoolingMethod.FORCED: "Forced air",
    CoolingMethod.IMMERSION: "Immersion",
}


def _plot_sweep(ax, points: Sequence[CurvePoint]) -> None:
    if not points:
        return
    q = [p.q_cm2 for p in points]
    for method in points[0].values:
        ax.plot(q, [p[method] for p in points], color=COLORS[method],
                linewidth=2, label=METHOD_NAMES[method])


def plot_temperature_curve(
    points: Sequence[CurvePoint],
    limit_C: Optional[float] = 85.0,
    title: str = "Chip Temperature vs Heat Flux",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None,
) -> Any:
    """
    Plot chip temperature against heat flux.

    Args:
        points: Output of generate_temperature_curve
        limit_C: Draw a dashed limit line at this temperature (None to skip)
        title: Plot title
        figsize: Figure size
        save_path: Path to save figure (optional)

    Returns:
        matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)
    _plot_sweep(ax, points)

    if limit_C is not None:
        ax.axhline(limit_C, color=COLORS["limit"], linestyle="--", linewidth=1.5,
                   label=f"Limit ({limit_C:g}°C)")

    ax.set_xlabel("Heat Flux (W/cm²)", fontsize=12)
    ax.set_ylabel("Chip Temperature (°C)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_power_curve(
    points: Sequence[PowerPoint],
    title: str = "Cooling Power vs Heat Flux",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None,
) -> Any:
    """Plot cooling device power against heat flux."""
    fig, ax = plt.subplots(figsize=figsize)
    _plot_sweep(ax, points)

    ax.set_xlabel("Heat Flux (W/cm²)", fontsize=12)
    ax.set_ylabel("Cooling Power (W)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_comparison(
    comparison: ComparisonResult,
    title: str = "Cooling Method Comparison",
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None,
) -> Any:
    """Bar charts of chip temperature and cooling power per method."""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    labels = [r.method for r in comparison.results]
    colors = [COLORS[r.key] for r in comparison.results]

    bars = ax1.bar(labels, [r.chip_temp_C for r in comparison.results], color=colors)
    ax1.set_ylabel("Chip Temperature (°C)", fontsize=12)
    ax1.set_yscale("log")
    for bar, r in zip(bars, comparison.results):
        ax1.annotate(f"{r.chip_temp_C:.1f}",
                     xy=(bar.get_x() + bar.get_width() / 2, bar.get_height()),
                     ha="center", va="bottom", fontsize=9)

    ax2.bar(labels, [r.cooling_power_W for r in comparison.results], color=colors)
    ax2.set_ylabel("Cooling Power (W)", fontsize=12)

    for ax in (ax1, ax2):
        ax.tick_params(axis="x", labelrotation=20)
        ax.grid(True, axis="y", alpha=0.3)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_reference_band(
    bands: Sequence[ReferenceBand],
    datasets: Sequence[BoilingDataset] = (),
    operating_flux_kW_m2: Optional[float] = None,
    title: str = "Boiling Curve",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None,
) -> Any:
    """
    Reference min/max band and average curve, with measured datasets on top.

    Datasets are drawn in temperature order; their stored order is kept.
    """
    fig, ax = plt.subplots(figsize=figsize)

    t = [b.t_surf for b in bands]
    ax.fill_between(t, [b.q_flux_min for b in bands], [b.q_flux_max for b in bands],
                    color=COLORS["band"], alpha=0.2, label="Literature range")
    ax.plot(t, [b.q_flux_avg for b in bands], color=COLORS["band"], linewidth=2,
            label="Literature average")

    for i, ds in enumerate(datasets):
        pts = ds.sorted_by_temperature()
        ax.plot([p.t_surf for p in pts], [p.q_flux for p in pts], marker="o",
                linewidth=1.5, color=DATASET_COLORS[i % len(DATASET_COLORS)], label=ds.name)

    if operating_flux_kW_m2 is not None:
        ax.axhline(operating_flux_kW_m2, color=COLORS["limit"], linestyle="--",
                   label=f"Chip flux ({operating_flux_kW_m2:.0f} kW/m²)")

    ax.set_xlabel("Surface Temperature (°C)", fontsize=12)
    ax.set_ylabel("Heat Flux (kW/m²)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig
