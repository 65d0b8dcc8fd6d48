"""
CoolDecide
==========

Steady-state comparison of chip cooling strategies: natural air
convection, forced air (fan) convection and two-phase immersion cooling.

Give a chip's thermal design power and die area, and the package estimates
heat flux, heat transfer coefficient, chip temperature and cooling device
power for each method. It also produces heat-flux sweeps for charting and
manages measured boiling-curve datasets.

License: MIT
"""

__version__ = "0.1.0"

from .fluids import (
    FluidProperties,
    SurfaceType,
    FLUIDS,
    SURFACES,
    get_fluid,
    get_surface,
)

from .thermal import (
    CoolingMethod,
    ChipSpec,
    ImmersionParams,
    CoolingResult,
    ComparisonResult,
    DEFAULT_IMMERSION_PARAMS,
    heat_flux,
    angle_factor,
    boiling_h_base,
    forced_flow_h,
    calc_immersion_h,
    compute_air_method,
    compute_immersion,
    compute_method,
    compute_selected,
    energy_savings_percent,
    round1,
)

from .chips import (
    ChipPreset,
    CHIP_PRESETS,
    get_chip_preset,
    presets_by_category,
)

from .curves import (
    CurvePoint,
    PowerPoint,
    flux_samples,
    generate_temperature_curve,
    generate_power_curve,
    curve_to_records,
)

from .heatsink import (
    HeatSinkConfig,
    HeatSinkResult,
    evaluate_heatsink,
    velocity_sweep,
)

from .boiling_data import (
    BoilingDataPoint,
    BoilingDataset,
    DataSource,
    ExperimentMeta,
    LiteratureMeta,
    new_dataset,
    parse_csv,
    validate_points,
    merge_for_chart,
)

from .reference_curves import (
    REFERENCE_SURFACES,
    ReferenceBand,
    ReferenceSurface,
    apply_conditions,
    interpolate_surface_temperature,
    evaluate_operating_point,
)

__all__ = [
    "__version__",

    # Reference data
    "FluidProperties",
    "SurfaceType",
    "FLUIDS",
    "SURFACES",
    "get_fluid",
    "get_surface",
    "ChipPreset",
    "CHIP_PRESETS",
    "get_chip_preset",
    "presets_by_category",

    # Thermal engine
    "CoolingMethod",
    "ChipSpec",
    "ImmersionParams",
    "CoolingResult",
    "ComparisonResult",
    "DEFAULT_IMMERSION_PARAMS",
    "heat_flux",
    "angle_factor",
    "boiling_h_base",
    "forced_flow_h",
    "calc_immersion_h",
    "compute_air_method",
    "compute_immersion",
    "compute_method",
    "compute_selected",
    "energy_savings_percent",
    "round1",

    # Curves
    "CurvePoint",
    "PowerPoint",
    "flux_samples",
    "generate_temperature_curve",
    "generate_power_curve",
    "curve_to_records",

    # Heat sink
    "HeatSinkConfig",
    "HeatSinkResult",
    "evaluate_heatsink",
    "velocity_sweep",

    # Boiling data
    "BoilingDataPoint",
    "BoilingDataset",
    "DataSource",
    "ExperimentMeta",
    "LiteratureMeta",
    "new_dataset",
    "parse_csv",
    "validate_points",
    "merge_for_chart",

    # Reference curves
    "REFERENCE_SURFACES",
    "ReferenceBand",
    "ReferenceSurface",
    "apply_conditions",
    "interpolate_surface_temperature",
    "evaluate_operating_point",
]
