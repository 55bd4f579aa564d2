#!/usr/bin/env python3
# lighting_cli.py
# Run the lighting calculator from a design JSON ({"fixtures": [...], "room": {...}}).
#
#   lighting_cli.py calculate design.json --out ppfd_map.txt [--plots DIR]
#   lighting_cli.py optimize  design.json --target-ppfd 700 --ppf 1800 [--out layout.json]
#
# Messages go through the same dispatch as the background worker, so the CLI
# sees exactly what a host would.

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from lighting_config import load_config
from lighting_worker import handle
from ppfd_metrics import format_power_metrics_line


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Horticultural lighting calculator")
    sub = ap.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Heatmap, power metrics and spectrum")
    calc.add_argument("design", help="Design JSON with fixtures and room")
    calc.add_argument("--out", default="ppfd_map.txt", help="Heatmap output (x y z ppfd)")
    calc.add_argument("--spectrum-out", default=None, help="Optional spectrum JSON output")
    calc.add_argument("--plots", default=None, help="Directory for PNG visualizations")
    calc.add_argument("--resolution", type=int, default=None, help="Grid cells per axis")
    calc.add_argument("--samples", type=int, default=None, help="Monte Carlo samples")
    calc.add_argument("--seed", type=int, default=None, help="Monte Carlo seed")

    opt = sub.add_parser("optimize", help="Uniform fixture grid for a target PPFD")
    opt.add_argument("design", help="Design JSON with at least a room")
    opt.add_argument("--target-ppfd", type=float, default=None)
    opt.add_argument("--ppf", type=float, default=None, help="Fixture PPF (µmol/s)")
    opt.add_argument("--out", default=None, help="Write positions JSON here instead of stdout")
    return ap.parse_args(argv)


def load_design(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SystemExit(f"Design file not found: {path}")
    except json.JSONDecodeError as e:
        raise SystemExit(f"Design file is not valid JSON: {e}")


def _fail_on_error(replies):
    for r in replies:
        if r["type"] == "error":
            raise SystemExit(f"ERROR ({r.get('code')}): {r['error']}")


def write_ppfd_map(path: Path, heatmap, canopy_z: float):
    with path.open("w", encoding="utf-8") as f:
        for p in heatmap:
            f.write(f"{p['x']:.6f} {p['y']:.6f} {canopy_z:.6f} {p['value']:.6f}\n")


def cmd_calculate(args, design, config) -> int:
    options = dict(design.get("options") or {})
    for key in ("resolution", "samples", "seed"):
        if getattr(args, key) is not None:
            options[key] = getattr(args, key)
    data = {"fixtures": design.get("fixtures"), "room": design.get("room"), "options": options}

    replies = handle({"type": "calculate", "data": data}, config)
    _fail_on_error(replies)
    by_type = {r["type"]: r["data"] for r in replies}

    room = design["room"]
    canopy_z = float(room["dimensions"]["height"]) * config.canopy_fraction
    out = Path(args.out)
    write_ppfd_map(out, by_type["heatmap"], canopy_z)
    print(f"✔ Wrote {len(by_type['heatmap'])} heatmap points to {out}")
    print(format_power_metrics_line(by_type["metrics"]))

    if args.spectrum_out:
        Path(args.spectrum_out).write_text(json.dumps(by_type["spectrum"], indent=2))
        print(f"✔ Wrote spectrum to {args.spectrum_out}")

    if args.plots:
        from irradiance import light_sources_from_fixtures
        from visualize_ppfd import save_figures

        fixtures = [{"x": s.x, "y": s.y} for s in light_sources_from_fixtures(design["fixtures"])]
        unit = "ft" if room.get("unit") == "feet" else "m"
        for path in save_figures(by_type["heatmap"], Path(args.plots), fixtures=fixtures,
                                 spectrum=by_type["spectrum"], unit=unit):
            print(f" -> Saved {path}")
    return 0


def cmd_optimize(args, design, config) -> int:
    target = args.target_ppfd if args.target_ppfd is not None else design.get("targetPPFD")
    model = dict(design.get("fixtureModel") or {})
    if args.ppf is not None:
        model["ppf"] = args.ppf
    data = {"room": design.get("room"), "targetPPFD": target, "fixtureModel": model}

    replies = handle({"type": "optimize", "data": data}, config)
    _fail_on_error(replies)
    positions = replies[0]["data"]

    text = json.dumps(positions, indent=2)
    if args.out:
        Path(args.out).write_text(text)
        print(f"✔ Wrote {len(positions)} fixture positions to {args.out}")
    else:
        print(text)
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config()
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    design = load_design(Path(args.design))
    if args.command == "calculate":
        return cmd_calculate(args, design, config)
    return cmd_optimize(args, design, config)


if __name__ == "__main__":
    sys.exit(main())
