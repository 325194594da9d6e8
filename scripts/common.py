"""Common helper functions for I/O and auditing.

Throughout the pipeline we need to read and write tabular outputs to
disk.  This module centralises those operations.  It also implements
a simple audit logging mechanism that writes JSON lines into the
``logs/`` directory, enabling post‑hoc inspection of the pipeline's
behaviour.
"""

from __future__ import annotations

import json
import os
import pathlib
import datetime as _dt
from typing import Any, Dict

import pandas as pd


def ensure_dir(path: str) -> None:
    """Ensure that the directory exists."""
    if path:
        pathlib.Path(path).mkdir(parents=True, exist_ok=True)


def write_table(df: pd.DataFrame, path: str, *, index: bool = False) -> None:
    """Write a DataFrame to CSV, creating the parent directory if needed."""
    ensure_dir(os.path.dirname(str(path)))
    df.to_csv(path, index=index)


def read_table(path: str, **kwargs: Any) -> pd.DataFrame:
    """Read a CSV table, keeping text columns as strings.

    Everything is read as text so that the ingestion boundary, not the
    CSV parser, decides what a missing value is.
    """
    path = pathlib.Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")
    return pd.read_csv(path, dtype=str, keep_default_na=False, **kwargs)


def write_json(payload: Any, path: str) -> None:
    ensure_dir(os.path.dirname(str(path)))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


def log_event(layer: str, action: str, payload: Dict[str, Any], *, log_dir: str = "logs") -> None:
    """Append an event to the daily audit log.

    Logs are stored under ``logs/audit_YYYY‑MM‑DD.ndjson``.  Each line
    contains a JSON object with ``timestamp``, ``layer``, ``action`` and
    ``payload`` keys.  The timestamp is in UTC ISO8601 format.
    """
    ensure_dir(log_dir)
    now = _dt.datetime.now(_dt.timezone.utc)
    event = {
        "timestamp": now.isoformat().replace("+00:00", "Z"),
        "layer": layer,
        "action": action,
        "payload": payload,
    }
    fname = os.path.join(log_dir, f"audit_{now.date().isoformat()}.ndjson")
    with open(fname, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")
