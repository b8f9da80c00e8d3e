"""Resolution and efficiency graphs of the vertex reconstruction."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from matplotlib.figure import Figure

from .histogram import Histogram
from .reconstruction import RESOLUTION_BINS

MULTIPLICITY_POINTS = (1.5, 4.5, 8.0, 12.5, 20.0, 30.0, 40.0, 50.0)
Z_POINTS = (-13.5, -9.0, -4.5, -1.9, 0.0, 1.9, 4.5, 9.0, 13.5)

EFFICIENCY_BINS = (10, 0.0, 50.0)

_MULTIPLICITY_CLASSES: tuple[tuple[str, Callable[[float], bool]], ...] = (
    ("[0, 3]", lambda m: m <= 3),
    ("[3, 6]", lambda m: 3 < m <= 6),
    ("[6, 10]", lambda m: 6 < m <= 10),
    ("[10, 15]", lambda m: 10 < m <= 15),
    ("[15, 25]", lambda m: 15 < m <= 25),
    ("[25, 35]", lambda m: 25 < m <= 35),
    ("[35, 45]", lambda m: 35 < m <= 45),
    ("[45, 58]", lambda m: m > 45),
)

# A z exactly at -12.5 falls in no class: both neighbouring classes exclude it.
_Z_CLASSES: tuple[tuple[str, Callable[[float], bool]], ...] = (
    ("-13.5 e -12.5", lambda z: z < -12.5),
    ("-12.5 e -6", lambda z: -12.5 < z <= -6.0),
    ("-6 e -3", lambda z: -6.0 < z <= -3.0),
    ("-3 e -0.7", lambda z: -3.0 < z <= -0.7),
    ("-0.7 e 0.7", lambda z: -0.7 < z <= 0.7),
    ("0.7 e 3", lambda z: 0.7 < z <= 3.0),
    ("3 e 6", lambda z: 3.0 < z <= 6.0),
    ("6 e 12.5", lambda z: 6.0 < z <= 12.5),
    ("12.5 e 13.5", lambda z: z > 12.5),
)


@dataclass(frozen=True)
class GraphPoint:
    """One point of a graph with its errors."""

    x: float
    y: float
    x_error: float = 0.0
    y_error: float = 0.0


def _resolution_points(
    xs: Sequence[float],
    classes: Sequence[tuple[str, Callable[[float], bool]]],
    keys: Sequence[float],
    residuals: Sequence[float],
    title: str,
) -> list[GraphPoint]:
    histograms = [
        Histogram(*RESOLUTION_BINS, f"Int{n}", f"{title} {label}")
        for n, (label, _) in enumerate(classes)
    ]
    for key, residual in zip(keys, residuals):
        for histogram, (_, belongs) in zip(histograms, classes):
            if belongs(key):
                histogram.fill(residual)
    return [
        GraphPoint(x, h.rms(), 0.0, h.rms_error()) for x, h in zip(xs, histograms)
    ]


def resolution_vs_multiplicity(
    reconstructed: Sequence[float],
    true_z: Sequence[float],
    multiplicities: Sequence[int],
) -> list[GraphPoint]:
    """RMS of true minus reconstructed z in eight multiplicity classes."""
    if not len(reconstructed) == len(true_z) == len(multiplicities):
        raise ValueError("input sequences differ in length")
    residuals = [t - r for r, t in zip(reconstructed, true_z)]
    return _resolution_points(
        MULTIPLICITY_POINTS,
        _MULTIPLICITY_CLASSES,
        multiplicities,
        residuals,
        "Risoluzione con molteplicita in",
    )


def resolution_vs_z(
    reconstructed: Sequence[float], true_z: Sequence[float]
) -> list[GraphPoint]:
    """RMS of true minus reconstructed z in nine classes of true z."""
    if len(reconstructed) != len(true_z):
        raise ValueError("input sequences differ in length")
    residuals = [t - r for r, t in zip(reconstructed, true_z)]
    return _resolution_points(
        Z_POINTS,
        _Z_CLASSES,
        true_z,
        residuals,
        "Risoluzione per Z generata tra",
    )


def efficiency_vs_multiplicity(
    total_multiplicities: Sequence[int],
    reconstructed_multiplicities: Sequence[int],
) -> list[GraphPoint]:
    """Reconstruction efficiency in ten multiplicity bins over [0, 50).

    The error is the binomial sqrt(eff * (1 - eff) / N); it is NaN for bins
    without events.
    """
    numerator = Histogram(*EFFICIENCY_BINS, "Numeratore", "eventi ricostruiti")
    denominator = Histogram(*EFFICIENCY_BINS, "Denominatore", "totali")
    for multiplicity in reconstructed_multiplicities:
        numerator.fill(multiplicity)
    for multiplicity in total_multiplicities:
        denominator.fill(multiplicity)
    ratio = Histogram.divide_binomial(numerator, denominator, "Divisione", "divisione")

    points = []
    for index in range(1, ratio.nbins + 1):
        events = denominator.bin_content(index)
        efficiency = ratio.bin_content(index)
        variance = efficiency * (1.0 - efficiency)
        if events == 0.0 or variance < 0.0:
            error = math.nan
        else:
            error = math.sqrt(variance / events)
        points.append(GraphPoint(ratio.bin_center(index), efficiency, 0.0, error))
    return points


def save_graph(
    points: Sequence[GraphPoint],
    title: str,
    xlabel: str,
    ylabel: str,
    path: str | Path,
) -> Path:
    """Draw the points joined by a line with error bars and save the image."""
    figure = Figure()
    axes = figure.subplots()
    axes.errorbar(
        [p.x for p in points],
        [p.y for p in points],
        xerr=[p.x_error for p in points],
        yerr=[p.y_error for p in points],
        fmt="-*",
    )
    axes.set_title(title)
    axes.set_xlabel(xlabel)
    axes.set_ylabel(ylabel)
    target = Path(path)
    figure.savefig(target)
    return target