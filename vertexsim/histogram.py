"""A fixed-width one-dimensional histogram with running statistics."""

from __future__ import annotations

import math
from bisect import bisect_right
from itertools import accumulate
from typing import Protocol


class _RandomSource(Protocol):
    def random(self) -> float: ...


class Histogram:
    """Histogram with ``nbins`` equal bins over [low, high).

    Bin indices follow the usual convention: 0 is the underflow bin,
    1..nbins are the regular bins and nbins + 1 is the overflow bin.
    Statistics (mean, rms) are accumulated only from in-range fills.
    """

    def __init__(
        self,
        nbins: int,
        low: float,
        high: float,
        name: str = "",
        title: str = "",
    ) -> None:
        nbins = int(nbins)
        if nbins < 1:
            raise ValueError("a histogram needs at least one bin")
        if not high > low:
            raise ValueError("the upper edge must exceed the lower edge")
        self.nbins = nbins
        self.low = float(low)
        self.high = float(high)
        self.name = name
        self.title = title
        self.reset()

    @property
    def width(self) -> float:
        return (self.high - self.low) / self.nbins

    @property
    def size(self) -> int:
        """Number of cells, underflow and overflow included."""
        return self.nbins + 2

    @property
    def entries(self) -> int:
        return self._entries

    @property
    def contents(self) -> tuple[float, ...]:
        """Contents of the regular bins."""
        return tuple(self._contents[1:-1])

    def reset(self) -> None:
        """Empty every bin and clear the statistics."""
        self._contents = [0.0] * (self.nbins + 2)
        self._entries = 0
        self._sumw = 0.0
        self._sumw2 = 0.0
        self._sumwx = 0.0
        self._sumwx2 = 0.0

    def find_bin(self, value: float) -> int:
        if value < self.low:
            return 0
        if value >= self.high:
            return self.nbins + 1
        index = 1 + int(self.nbins * (value - self.low) / (self.high - self.low))
        return min(index, self.nbins)

    def fill(self, value: float, weight: float = 1.0) -> int:
        """Add ``weight`` to the bin holding ``value``; return that bin."""
        value = float(value)
        index = self.find_bin(value)
        self._contents[index] += weight
        self._entries += 1
        if 1 <= index <= self.nbins:
            self._sumw += weight
            self._sumw2 += weight * weight
            self._sumwx += weight * value
            self._sumwx2 += weight * value * value
        return index

    def _check_index(self, index: int) -> None:
        if not 0 <= index <= self.nbins + 1:
            raise IndexError(f"bin {index} outside 0..{self.nbins + 1}")

    def bin_content(self, index: int) -> float:
        self._check_index(index)
        return self._contents[index]

    def bin_low_edge(self, index: int) -> float:
        return self.low + (index - 1) * self.width

    def bin_center(self, index: int) -> float:
        return self.low + (index - 0.5) * self.width

    def maximum_bin(self) -> int:
        """First regular bin holding the largest content."""
        regular = self._contents[1:-1]
        return 1 + regular.index(max(regular))

    def mean(self) -> float:
        if self._sumw == 0.0:
            return 0.0
        return self._sumwx / self._sumw

    def rms(self) -> float:
        """Standard deviation of the in-range fills."""
        if self._sumw == 0.0:
            return 0.0
        mean = self._sumwx / self._sumw
        variance = self._sumwx2 / self._sumw - mean * mean
        return math.sqrt(max(variance, 0.0))

    def effective_entries(self) -> float:
        if self._sumw2 == 0.0:
            return 0.0
        return self._sumw * self._sumw / self._sumw2

    def rms_error(self) -> float:
        """Error on :meth:`rms` in the Gaussian approximation."""
        neff = self.effective_entries()
        if neff <= 0.0:
            return 0.0
        return self.rms() / math.sqrt(2.0 * neff)

    def sample(self, rng: _RandomSource) -> float:
        """Draw a value distributed as the histogram contents.

        A bin is chosen with probability proportional to its content and the
        value is spread uniformly inside it.
        """
        regular = self._contents[1:-1]
        total = sum(regular)
        if total <= 0.0:
            raise ValueError("cannot sample from an empty histogram")
        integral = [0.0, *(c / total for c in accumulate(regular))]
        r = rng.random()
        index = min(bisect_right(integral, r) - 1, self.nbins - 1)
        value = self.bin_low_edge(index + 1)
        step = integral[index + 1] - integral[index]
        if step > 0.0:
            value += self.width * (r - integral[index]) / step
        return value

    @classmethod
    def divide_binomial(
        cls,
        numerator: "Histogram",
        denominator: "Histogram",
        name: str = "",
        title: str = "",
    ) -> "Histogram":
        """Bin-by-bin ratio of two histograms; empty denominators give 0."""
        if (numerator.nbins, numerator.low, numerator.high) != (
            denominator.nbins,
            denominator.low,
            denominator.high,
        ):
            raise ValueError("histograms have different binning")
        ratio = cls(numerator.nbins, numerator.low, numerator.high, name, title)
        ratio._contents = [
            n / d if d != 0.0 else 0.0
            for n, d in zip(numerator._contents, denominator._contents)
        ]
        ratio._entries = denominator._entries
        return ratio

    def __repr__(self) -> str:
        return (
            f"Histogram({self.nbins}, {self.low}, {self.high}, "
            f"name={self.name!r}, entries={self._entries})"
        )