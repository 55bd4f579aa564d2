#!/usr/bin/env python3
# visualize_ppfd.py
# - Heatmap points -> regular grid (pandas pivot)
# - Annotated seaborn heatmap, pcolormesh with fixture overlay, spectrum plot
# - PNG files for the CLI, base64 data URLs for the HTTP bridge

from __future__ import annotations

import argparse
import base64
import logging
import sys
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)

MAX_ANNOT_CELLS = 35 * 35  # keep text readable


def heatmap_frame(points: Sequence[Dict[str, float]]) -> pd.DataFrame:
    """Pivot {x, y, value} points into a y-by-x table (rows = y)."""
    if not points:
        raise ValueError("no heatmap points to plot")
    df = pd.DataFrame(points, columns=["x", "y", "value"])
    df["xr"] = df["x"].round(6)
    df["yr"] = df["y"].round(6)
    return df.pivot_table(index="yr", columns="xr", values="value", aggfunc="mean")


def load_ppfd_map(path: Path) -> list[Dict[str, float]]:
    """Read 'x y z ppfd' lines (as written by lighting_cli.py)."""
    df = pd.read_csv(path, sep=r"\s+", header=None, names=["x", "y", "z", "ppfd"], comment="#")
    if df.empty:
        raise ValueError(f"PPFD file is empty: {path}")
    return [{"x": float(r.x), "y": float(r.y), "value": float(r.ppfd)} for r in df.itertuples()]


def _to_data_url(fig) -> str:
    """Serialize a matplotlib figure to a base64 data URL."""
    buf = BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight", dpi=160)
    plt.close(fig)
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode("ascii")
    return f"data:image/png;base64,{b64}"


def _limits(table: pd.DataFrame, vmin: Optional[float], vmax: Optional[float]) -> Tuple[float, float]:
    values = table.values
    lo = float(np.nanmin(values)) if vmin is None else vmin
    hi = float(np.nanmax(values)) if vmax is None else vmax
    if hi <= lo:
        hi = lo + 1.0
    return lo, hi


def plot_annotated_heatmap(points, *, vmin=None, vmax=None, cmap="jet", annot=True, unit="m"):
    table = heatmap_frame(points)
    lo, hi = _limits(table, vmin, vmax)
    Z = table.values
    x_ticks = np.round(table.columns.values, 2)
    y_ticks = np.round(table.index.values, 2)

    H, W = Z.shape
    if annot and H * W > MAX_ANNOT_CELLS:
        fy = int(np.ceil(H / 35))
        fx = int(np.ceil(W / 35))
        Z = Z[::fy, ::fx]
        x_ticks = x_ticks[::fx]
        y_ticks = y_ticks[::fy]
        logger.debug("Annotated heatmap downsampled from %dx%d to %dx%d", H, W, *Z.shape)

    fig, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(
        Z, vmin=lo, vmax=hi, cmap=cmap, ax=ax,
        xticklabels=x_ticks, yticklabels=y_ticks,
        annot=annot, fmt=".0f",
        annot_kws={"size": 6} if annot else None,
        linewidths=0.5, linecolor="gray",
        cbar_kws={"label": "PPFD (µmol/m²/s)"},
    )
    ax.invert_yaxis()
    ax.set_title("PPFD Heatmap (annotated)" if annot else "PPFD Heatmap")
    ax.set_xlabel(f"X ({unit})"); ax.set_ylabel(f"Y ({unit})")
    fig.tight_layout()
    return fig


def plot_heatmap_overlay(points, fixtures=None, *, vmin=None, vmax=None, cmap="jet", unit="m"):
    """pcolormesh of the grid with fixture centres marked."""
    table = heatmap_frame(points)
    lo, hi = _limits(table, vmin, vmax)
    xs = table.columns.values.astype(float)
    ys = table.index.values.astype(float)

    fig, ax = plt.subplots(figsize=(8, 6))
    pc = ax.pcolormesh(xs, ys, table.values, cmap=cmap, shading="nearest", vmin=lo, vmax=hi)
    fig.colorbar(pc, ax=ax, label="PPFD (µmol/m²/s)")
    if fixtures:
        fx = [float(f["x"]) for f in fixtures]
        fy = [float(f["y"]) for f in fixtures]
        ax.scatter(fx, fy, marker="x", s=35, color="white", linewidths=1.2,
                   label=f"Fixtures ({len(fx)})")
        ax.legend(loc="upper right", framealpha=0.9)
    ax.set_title("PPFD Heatmap with Fixtures")
    ax.set_xlabel(f"X ({unit})"); ax.set_ylabel(f"Y ({unit})")
    ax.set_aspect("equal", adjustable="box")
    fig.tight_layout()
    return fig


def plot_spectrum(spectrum: Sequence[Dict[str, float]]):
    wl = [p["wavelength"] for p in spectrum]
    it = [p["intensity"] for p in spectrum]
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(wl, it, color="black")
    ax.axvspan(400, 700, color="green", alpha=0.08, label="PAR")
    ax.set_xlim(min(wl), max(wl))
    ax.set_title("Facility Spectrum (mean of fixtures)")
    ax.set_xlabel("Wavelength (nm)"); ax.set_ylabel("Relative intensity")
    ax.legend(loc="upper right")
    fig.tight_layout()
    return fig


def heatmap_data_url(points, fixtures=None, unit="m") -> str:
    return _to_data_url(plot_heatmap_overlay(points, fixtures, unit=unit))


def save_figures(points, outdir: Path, fixtures=None, spectrum=None, *,
                 dpi=150, vmin=None, vmax=None, cmap="jet", annot=True, unit="m") -> list[Path]:
    outdir.mkdir(parents=True, exist_ok=True)
    written = []
    jobs = [
        ("ppfd_heatmap_annotated.png",
         lambda: plot_annotated_heatmap(points, vmin=vmin, vmax=vmax, cmap=cmap, annot=annot, unit=unit)),
        ("ppfd_heatmap_overlay.png",
         lambda: plot_heatmap_overlay(points, fixtures, vmin=vmin, vmax=vmax, cmap=cmap, unit=unit)),
    ]
    if spectrum:
        jobs.append(("spectrum.png", lambda: plot_spectrum(spectrum)))
    for name, build in jobs:
        fig = build()
        path = outdir / name
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        plt.close(fig)
        written.append(path)
        logger.info("Saved %s", path)
    return written


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="PPFD heatmap visualizations.")
    ap.add_argument("--input", default="ppfd_map.txt")
    ap.add_argument("--outdir", default="ppfd_visualizations")
    ap.add_argument("--vmin", type=float, default=None)
    ap.add_argument("--vmax", type=float, default=None)
    ap.add_argument("--cmap", default="jet")
    ap.add_argument("--dpi", type=int, default=300)
    ap.add_argument("--annot", dest="annot", action="store_true",
                    help="Annotate heatmap cells")
    ap.add_argument("--no-annot", dest="annot", action="store_false",
                    help="Disable annotations on heatmap")
    ap.set_defaults(annot=True)
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        points = load_ppfd_map(Path(args.input))
    except (OSError, ValueError) as e:
        print(f"Error reading '{args.input}': {e}")
        sys.exit(1)
    print(f"Loaded {len(points)} PPFD data points from '{args.input}'")
    for path in save_figures(points, Path(args.outdir), dpi=args.dpi, vmin=args.vmin,
                             vmax=args.vmax, cmap=args.cmap, annot=args.annot):
        print(f" -> Saved {path.name}")
    print(f"\nAll visualizations saved to '{args.outdir}'")


if __name__ == "__main__":
    main()
