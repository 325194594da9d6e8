"""
utils.errors
------------

Exception types raised by the price surface pipeline.

Two families exist.  ``InsufficientData`` is a *local* failure: it
concerns a single market and is caught by the per-market decomposition
map, which records the market as excluded and carries on.  Every other
error is a configuration or cross-cutting failure that aborts the run
with a descriptive message.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple


class PriceSurfaceError(Exception):
    """Base class for all pipeline errors."""


class InvalidMonth(PriceSurfaceError, ValueError):
    """Raised when a month label does not name a calendar month."""

    def __init__(self, values: Iterable[object]) -> None:
        self.values: List[object] = list(values)
        shown = ", ".join(repr(v) for v in self.values[:10])
        super().__init__(f"Unrecognised calendar month(s): {shown}")


class DuplicateObservation(PriceSurfaceError, ValueError):
    """Raised when a market reports more than one price for the same month."""

    def __init__(self, pairs: Iterable[Tuple[str, object]]) -> None:
        self.pairs: List[Tuple[str, object]] = list(pairs)
        shown = ", ".join(f"{m} @ {t}" for m, t in self.pairs[:10])
        more = "" if len(self.pairs) <= 10 else f" (+{len(self.pairs) - 10} more)"
        super().__init__(
            f"Conflicting price reports for {len(self.pairs)} (market, month) pair(s): "
            f"{shown}{more}. Deduplicate upstream."
        )


class InconsistentLocation(PriceSurfaceError, ValueError):
    """Raised when a market is reported at more than one set of coordinates."""

    def __init__(self, markets: Iterable[str]) -> None:
        self.markets: List[str] = list(markets)
        super().__init__(
            "Markets reported at more than one location: " + ", ".join(self.markets[:10])
        )


class InsufficientData(PriceSurfaceError):
    """Raised when a market series is too short for seasonal decomposition."""

    def __init__(self, market: Optional[str], observed: int, required: int, reason: str = "") -> None:
        self.market = market
        self.observed = observed
        self.required = required
        label = f"market {market!r}" if market is not None else "series"
        detail = reason or f"{observed} reported month(s), {required} required"
        super().__init__(f"Insufficient data for {label}: {detail}")


class AnchorNotFound(PriceSurfaceError, KeyError):
    """Raised when the configured anchor market is absent from the price matrix."""

    def __init__(self, anchor: str) -> None:
        self.anchor = anchor
        super().__init__(f"Anchor market {anchor!r} not found in price matrix")

    def __str__(self) -> str:
        return self.args[0]


class UnderdeterminedFit(PriceSurfaceError):
    """Raised when there are too few, or only collinear, samples to fit an estimator."""

    def __init__(self, method: str, n_samples: int, reason: str) -> None:
        self.method = method
        self.n_samples = n_samples
        super().__init__(f"Cannot fit {method} on {n_samples} sample(s): {reason}")


__all__ = [
    "PriceSurfaceError",
    "InvalidMonth",
    "DuplicateObservation",
    "InconsistentLocation",
    "InsufficientData",
    "AnchorNotFound",
    "UnderdeterminedFit",
]
