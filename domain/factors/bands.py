"""Threshold bands shared by the factor interpreters."""

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Band:
    """Values below `upper` (or equal to it when inclusive) map to `index`."""
    upper: float
    index: int
    inclusive: bool = False

    def contains(self, value: float) -> bool:
        return value < self.upper or (self.inclusive and value == self.upper)


def score_bucket(value: float, bands: Sequence[Band], above: int) -> int:
    """
    Map a metric onto a ladder index.

    Bands are checked in ascending order of `upper`; anything past the last
    band lands in `above`. Covers the whole real line, so extreme inputs
    resolve to the end buckets.
    """
    for band in bands:
        if band.contains(value):
            return band.index
    return above


def describe_bands(bands: Sequence[Band], above: int) -> list[str]:
    """Human-readable band edges for evidence payloads."""
    out = [f"{'<=' if b.inclusive else '<'} {b.upper:g} -> {b.index}" for b in bands]
    last = bands[-1]
    out.append(f"{'>' if last.inclusive else '>='} {last.upper:g} -> {above}")
    return out
