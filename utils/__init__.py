"""Top‑level module for utility functions.

The :mod:`utils` package collects functionality shared across the
price surface pipeline:

>>> from utils import errors, data_quality

``errors`` holds the exception taxonomy, ``data_quality`` the coverage
diagnostics.  Configuration loading lives in :mod:`utils.config`; it is
not imported here because it depends on the spatial layer.
"""

from . import errors  # noqa: F401
from . import data_quality  # noqa: F401

__all__ = [
    "errors",
    "data_quality",
]
