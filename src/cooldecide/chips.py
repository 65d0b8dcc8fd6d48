"""
Chip preset table.

Named accelerator and GPU models with their thermal design power and die
area. Used by the CLI and web layer to pre-fill a ChipSpec.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .thermal import ChipSpec


@dataclass(frozen=True)
class ChipPreset:
    """TDP and die size for a named chip."""

    name: str
    tdp_watts: float
    die_area_mm2: float
    category: str

    @property
    def heat_flux_W_cm2(self) -> float:
        return self.tdp_watts / (self.die_area_mm2 * 0.01)

    def to_spec(self, ambient_temp_C: float = 25.0) -> ChipSpec:
        """Build a ChipSpec for this preset."""
        return ChipSpec(
            tdp_watts=self.tdp_watts,
            chip_area_mm2=self.die_area_mm2,
            ambient_temp_C=ambient_temp_C,
        )


CHIP_PRESETS: Tuple[ChipPreset, ...] = (
    ChipPreset("NVIDIA H100 SXM", 700.0, 814.0, "Data Center"),
    ChipPreset("NVIDIA H200 SXM", 700.0, 814.0, "Data Center"),
    ChipPreset("NVIDIA A100 SXM", 400.0, 826.0, "Data Center"),
    ChipPreset("NVIDIA B200", 1000.0, 900.0, "Data Center"),
    ChipPreset("NVIDIA GB200 (dual)", 2700.0, 900.0, "Data Center"),
    ChipPreset("NVIDIA RTX 4090", 450.0, 608.0, "Consumer"),
    ChipPreset("NVIDIA RTX 5090", 575.0, 750.0, "Consumer"),
    ChipPreset("NVIDIA RTX 4080", 320.0, 379.0, "Consumer"),
    ChipPreset("AMD MI300X", 750.0, 750.0, "Data Center"),
    ChipPreset("AMD MI325X", 750.0, 750.0, "Data Center"),
    ChipPreset("Intel Gaudi 3", 600.0, 600.0, "Data Center"),
    ChipPreset("Google TPU v5e", 200.0, 400.0, "Data Center"),
    ChipPreset("Custom", 300.0, 500.0, "Custom"),
)


def get_chip_preset(name: str) -> ChipPreset:
    """
    Find a preset by its display name.

    Raises:
        ValueError: If no preset has that name
    """
    for preset in CHIP_PRESETS:
        if preset.name == name:
            return preset
    available = ", ".join(p.name for p in CHIP_PRESETS)
    raise ValueError(f"Unknown chip preset: {name}. Available: {available}")


def presets_by_category() -> Dict[str, List[ChipPreset]]:
    """Group presets by category, keeping table order."""
    groups: Dict[str, List[ChipPreset]] = {}
    for preset in CHIP_PRESETS:
        groups.setdefault(preset.category, []).append(preset)
    return groups
