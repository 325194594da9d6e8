"""
Unified CLI for the maize price surface pipeline.

Pipeline steps:
1) seasonal     -> <out>/seasonal_profiles.csv, national_profile.csv, coverage.csv
2) index        -> <out>/points.csv
3) interpolate  -> <out>/surface_<method>.csv (+ .json metadata)

Full run:
python -m interface.cli full-run --prices data/maize_prices.csv --boundary data/boundary.geojson --config config/pipeline.yaml --out data/gold
Step by step:
# 1) Seasonal profiles
python -m interface.cli seasonal --prices data/maize_prices.csv --config config/pipeline.yaml
# 2) Relative price index and point samples
python -m interface.cli index --prices data/maize_prices.csv --config config/pipeline.yaml
# 3) Surfaces from the point samples written by step 2
python -m interface.cli interpolate --points data/gold/points.csv --boundary data/boundary.geojson --config config/pipeline.yaml
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ingestion.transform.coerce import coerce_raw_prices
from ingestion.transform.reshape import PriceMatrix, reshape_observations
from ingestion.quality.contracts import PointSampleSchema
from interface.pipeline import check_anchor, run_index, run_pipeline, run_seasonal
from scripts.common import log_event, read_table, write_json, write_table
from spatial import build_grid, interpolate_all, load_boundary
from utils.config import PipelineConfig, load_config
from utils.data_quality import coverage_report

logger = logging.getLogger(__name__)


def _load_matrix(args: argparse.Namespace, config: PipelineConfig) -> PriceMatrix:
    raw = read_table(args.prices)
    observations = coerce_raw_prices(raw, missing_marker=config.missing_marker)
    return reshape_observations(observations)


def _out_dir(args: argparse.Namespace) -> Path:
    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    return out


def _write_seasonal(out: Path, seasonal, coverage: pd.DataFrame) -> None:
    write_table(seasonal.profiles, str(out / "seasonal_profiles.csv"), index=True)
    write_table(seasonal.national.to_frame(), str(out / "national_profile.csv"), index=True)
    status = coverage.join(seasonal.status)
    write_table(status, str(out / "coverage.csv"), index=True)


def _write_surfaces(out: Path, surfaces) -> List[str]:
    written = []
    for method, surface in surfaces.items():
        path = out / f"surface_{method}.csv"
        write_table(surface.to_frame(), str(path))
        write_json(surface.metadata(), str(out / f"surface_{method}.json"))
        written.append(str(path))
    return written


# =========================================================
# SEASONAL PROFILES
# =========================================================
def run_seasonal_step(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    print(f"[1/3] Decomposing market series ({config.decomposition_model})...")
    matrix = _load_matrix(args, config)
    seasonal = run_seasonal(matrix, config)
    out = _out_dir(args)
    _write_seasonal(out, seasonal, coverage_report(matrix.prices))
    log_event("seasonal", "decompose", {
        "markets": len(matrix.markets),
        "profiles": len(seasonal.profiles),
        "excluded": seasonal.excluded,
    })
    print(f"Seasonal profiles saved to {out}\n")


# =========================================================
# RELATIVE PRICE INDEX
# =========================================================
def run_index_step(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    print(f"[2/3] Computing relative price index against {config.anchor_market}...")
    matrix = _load_matrix(args, config)
    check_anchor(matrix, config)
    seasonal = run_seasonal(matrix, config) if config.require_seasonal else None
    points = run_index(matrix, config, seasonal)
    out = _out_dir(args)
    write_table(points, str(out / "points.csv"))
    log_event("index", "relative_index", {"anchor": config.anchor_market, "points": len(points)})
    print(f"Point samples saved to {out / 'points.csv'}\n")


# =========================================================
# INTERPOLATION
# =========================================================
def run_interpolate_step(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    methods = ", ".join(c.method for c in config.estimators)
    print(f"[3/3] Interpolating surfaces ({methods})...")
    points_path = Path(args.points)
    if not points_path.exists():
        raise FileNotFoundError(f"Point samples missing: {points_path}")
    points = PointSampleSchema.validate(pd.read_csv(points_path, dtype={"market": str}))
    boundary = load_boundary(args.boundary)
    grid = build_grid(boundary, args.resolution or config.resolution)
    surfaces = interpolate_all(points, grid, config.estimators)
    out = _out_dir(args)
    written = _write_surfaces(out, surfaces)
    log_event("interpolate", "surfaces", {"methods": list(surfaces), "files": written})
    print(f"Surfaces saved to {out}\n")


# =========================================================
# FULL RUN
# =========================================================
def run_full(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    if args.resolution:
        config = replace(config, resolution=args.resolution)
    print("Running full pipeline...")
    raw = read_table(args.prices)
    observations = coerce_raw_prices(raw, missing_marker=config.missing_marker)
    boundary = load_boundary(args.boundary)
    result = run_pipeline(observations, boundary, config)

    out = _out_dir(args)
    _write_seasonal(out, result.seasonal, result.coverage)
    write_table(result.relative_index.to_frame(), str(out / "relative_index.csv"), index=True)
    write_table(result.points, str(out / "points.csv"))
    written = _write_surfaces(out, result.surfaces)
    log_event("pipeline", "full_run", {
        "anchor": config.anchor_market,
        "markets": len(result.matrix.markets),
        "profiles": len(result.seasonal.profiles),
        "points": len(result.points),
        "surfaces": written,
    })
    print(f"All outputs saved to {out}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maize relative price surface pipeline")
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config/pipeline.yaml", help="YAML configuration file")
        p.add_argument("--out", default="data/gold", help="Output directory")

    p = sub.add_parser("seasonal", help="Per-market seasonal profiles and national profile")
    p.add_argument("--prices", required=True, help="Raw monthly price CSV")
    common(p)
    p.set_defaults(func=run_seasonal_step)

    p = sub.add_parser("index", help="Relative price index and point samples")
    p.add_argument("--prices", required=True, help="Raw monthly price CSV")
    common(p)
    p.set_defaults(func=run_index_step)

    p = sub.add_parser("interpolate", help="Interpolate point samples onto the country grid")
    p.add_argument("--points", required=True, help="Point samples CSV written by 'index'")
    p.add_argument("--boundary", required=True, help="Boundary GeoJSON")
    p.add_argument("--resolution", type=float, default=None, help="Override grid resolution (degrees)")
    common(p)
    p.set_defaults(func=run_interpolate_step)

    p = sub.add_parser("full-run", help="Run every step")
    p.add_argument("--prices", required=True, help="Raw monthly price CSV")
    p.add_argument("--boundary", required=True, help="Boundary GeoJSON")
    p.add_argument("--resolution", type=float, default=None, help="Override grid resolution (degrees)")
    common(p)
    p.set_defaults(func=run_full)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
