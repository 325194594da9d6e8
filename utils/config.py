"""Pipeline configuration.

Configuration lives in a YAML file (``config/pipeline.yaml`` by
default) parsed with :func:`yaml.safe_load` into a
:class:`PipelineConfig`.  The anchor market has no default: it is a
required choice of the analyst, not something inferred from the data.

Example ``pipeline.yaml``::

    anchor_market: Lilongwe
    relative_mode: ratio
    decomposition_model: additive
    resolution: 0.1
    estimators:
      - method: tps
      - method: idw
        idw_power: 2
      - method: rf
        forest_trees: 500
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from spatial.interpolate import InterpolationConfig

_DEFAULT_ESTIMATORS = [{"method": "tps"}, {"method": "idw"}, {"method": "rf"}]


@dataclass(frozen=True)
class PipelineConfig:
    anchor_market: str
    relative_mode: str = "ratio"
    decomposition_model: str = "additive"
    max_workers: int = 1
    resolution: float = 0.1
    require_seasonal: bool = False
    missing_marker: str = "-"
    estimators: List[InterpolationConfig] = field(
        default_factory=lambda: [InterpolationConfig.from_dict(e) for e in _DEFAULT_ESTIMATORS]
    )

    def __post_init__(self) -> None:
        if not self.anchor_market or not str(self.anchor_market).strip():
            raise ValueError("anchor_market must be configured")
        if self.relative_mode not in {"ratio", "difference"}:
            raise ValueError("relative_mode must be 'ratio' or 'difference'")
        if self.decomposition_model not in {"additive", "multiplicative"}:
            raise ValueError("decomposition_model must be 'additive' or 'multiplicative'")
        if int(self.max_workers) < 1:
            raise ValueError("max_workers must be >= 1")
        if not float(self.resolution) > 0:
            raise ValueError("resolution must be positive")
        if not self.estimators:
            raise ValueError("at least one estimator must be configured")


def config_from_dict(raw: Dict[str, Any]) -> PipelineConfig:
    """Build a :class:`PipelineConfig` from a parsed YAML mapping."""
    if not isinstance(raw, dict):
        raise ValueError("Configuration must be a mapping")
    known = set(PipelineConfig.__dataclass_fields__)
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown configuration key(s): {sorted(unknown)}")
    if "anchor_market" not in raw:
        raise ValueError("anchor_market must be configured")

    cfg = dict(raw)
    if "estimators" in cfg:
        cfg["estimators"] = [InterpolationConfig.from_dict(e or {}) for e in cfg["estimators"] or []]
    return PipelineConfig(**cfg)


def load_config(path: str | Path) -> PipelineConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return config_from_dict(raw)


__all__ = ["PipelineConfig", "config_from_dict", "load_config"]
