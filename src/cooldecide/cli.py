"""
Command-line interface for CoolDecide.

Usage:
    cooldecide compare --tdp W --area MM2 [--ambient C] [--methods natural forced immersion]
    cooldecide immersion --tdp W --area MM2 [--fluid KEY] [--surface KEY] [--angle DEG] [--velocity M/S]
    cooldecide curve {temperature,power} --tdp W --area MM2 [--output FILE]
    cooldecide presets
    cooldecide fluids
    cooldecide server [--port PORT]
"""

from pathlib import Path
import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)

METHOD_CHOICES = ["natural", "forced", "immersion"]


def _chip_spec(args):
    from cooldecide import ChipSpec, get_chip_preset

    if args.preset:
        preset = get_chip_preset(args.preset)
        return preset.to_spec(ambient_temp_C=args.ambient)
    if args.tdp is None or args.area is None:
        raise ValueError("Give --preset or both --tdp and --area")
    return ChipSpec(tdp_watts=args.tdp, chip_area_mm2=args.area, ambient_temp_C=args.ambient)


def cmd_compare(args):
    """Compare cooling methods for one chip."""
    from cooldecide import compute_selected

    spec = _chip_spec(args)
    result = compute_selected(spec, args.methods)
    print(result.summary())

    savings = result.energy_savings("forced", "immersion")
    if savings is not None:
        print(f"Immersion vs forced air cooling power: {savings:+d}% saved")
    return 0


def cmd_immersion(args):
    """Immersion result for an explicit bath configuration."""
    from cooldecide import ImmersionParams, compute_immersion

    spec = _chip_spec(args)
    params = ImmersionParams(
        fluid_key=args.fluid,
        surface_key=args.surface,
        fluid_temp_C=args.fluid_temp,
        angle_deg=args.angle,
        flow_velocity_m_s=args.velocity,
    )
    result = compute_immersion(spec.tdp_watts, spec.chip_area_mm2, params)
    for name, value in result.to_dict().items():
        print(f"  {name:<16} {value}")
    return 0


def cmd_curve(args):
    """Temperature or power sweep as JSON."""
    from cooldecide import (
        ImmersionParams,
        curve_to_records,
        generate_power_curve,
        generate_temperature_curve,
    )

    spec = _chip_spec(args)
    if args.kind == "temperature":
        params = ImmersionParams(
            fluid_key=args.fluid,
            surface_key=args.surface,
            angle_deg=args.angle,
            flow_velocity_m_s=args.velocity,
        )
        points = generate_temperature_curve(
            spec.chip_area_mm2, spec.tdp_watts, spec.ambient_temp_C,
            args.methods, immersion_params=params, steps=args.steps,
        )
    else:
        points = generate_power_curve(
            spec.chip_area_mm2, spec.tdp_watts, args.methods,
            flow_velocity_m_s=args.velocity, steps=args.steps,
        )

    text = json.dumps(curve_to_records(points), indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"{len(points)} points saved to {args.output}")
    else:
        print(text)
    return 0


def cmd_presets(args):
    """List chip presets."""
    from cooldecide import presets_by_category

    for category, presets in presets_by_category().items():
        print(f"{category}:")
        for p in presets:
            print(f"  {p.name:<24} {p.tdp_watts:>7.0f} W {p.die_area_mm2:>6.0f} mm² "
                  f"{p.heat_flux_W_cm2:>6.1f} W/cm²")
    return 0


def cmd_fluids(args):
    """List coolants and surfaces."""
    from cooldecide import FLUIDS, SURFACES

    print("Fluids:")
    for key, f in FLUIDS.items():
        print(f"  {key:<12} {f.name:<20} T_sat={f.T_sat:>5.0f}°C  GWP={f.GWP:g}")
    print("Surfaces:")
    for key, s in SURFACES.items():
        print(f"  {key:<16} {s.name:<22} ×{s.h_multiplier:g}")
    return 0


def cmd_server(args):
    """Start web server."""
    import uvicorn

    backend_dir = Path(__file__).resolve().parents[2] / "web" / "backend"
    uvicorn.run(
        "main:app",
        app_dir=str(backend_dir),
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def _add_chip_args(p):
    p.add_argument("--preset", help="Chip preset name, e.g. 'NVIDIA H100 SXM'")
    p.add_argument("--tdp", type=float, help="Thermal design power (W)")
    p.add_argument("--area", type=float, help="Die area (mm²)")
    p.add_argument("--ambient", type=float, default=25.0, help="Ambient temperature (°C)")


def _add_bath_args(p):
    p.add_argument("--fluid", default="novec-7100")
    p.add_argument("--surface", default="plain")
    p.add_argument("--angle", type=float, default=0.0, help="Surface inclination (°)")
    p.add_argument("--velocity", type=float, default=0.0, help="Forced flow velocity (m/s)")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="cooldecide",
        description="CoolDecide - compare natural, forced-air and immersion chip cooling",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compare
    p_compare = subparsers.add_parser("compare", help="Compare cooling methods")
    _add_chip_args(p_compare)
    p_compare.add_argument("--methods", nargs="+", choices=METHOD_CHOICES, default=METHOD_CHOICES)

    # immersion
    p_imm = subparsers.add_parser("immersion", help="Immersion cooling detail")
    _add_chip_args(p_imm)
    _add_bath_args(p_imm)
    p_imm.add_argument("--fluid-temp", type=float, default=50.0, help="Bulk fluid temperature (°C)")

    # curve
    p_curve = subparsers.add_parser("curve", help="Sweep over heat flux")
    p_curve.add_argument("kind", choices=["temperature", "power"])
    _add_chip_args(p_curve)
    _add_bath_args(p_curve)
    p_curve.add_argument("--methods", nargs="+", choices=METHOD_CHOICES, default=METHOD_CHOICES)
    p_curve.add_argument("--steps", type=int, default=50)
    p_curve.add_argument("-o", "--output", help="Output JSON file")

    subparsers.add_parser("presets", help="List chip presets")
    subparsers.add_parser("fluids", help="List coolants and surfaces")

    # server
    p_server = subparsers.add_parser("server", help="Start web server")
    p_server.add_argument("--host", default="0.0.0.0")
    p_server.add_argument("-p", "--port", type=int, default=8000)
    p_server.add_argument("--reload", action="store_true")

    return parser


COMMANDS = {
    "compare": cmd_compare,
    "immersion": cmd_immersion,
    "curve": cmd_curve,
    "presets": cmd_presets,
    "fluids": cmd_fluids,
    "server": cmd_server,
}


def main(argv=None):
    from cooldecide.config import Settings, configure_logging, get_settings

    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.verbose:
        settings = Settings(log_level="DEBUG")
    configure_logging(settings)

    if args.command not in COMMANDS:
        parser.print_help()
        return 0

    try:
        return COMMANDS[args.command](args)
    except ValueError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
