"""Reconstruction of the primary vertex z from hits on the two layers.

Every pair of hits (one per layer) whose azimuths agree within the
acceptance window forms a tracklet. Each tracklet is extended to the beam
axis, and the vertex is taken as the mean of the candidates that fall near
the peak of their distribution.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .histogram import Histogram

# Width of the window around the histogram peak (cm).
WINDOW_WIDTH = 0.5

# Binning (nbins, low, high) of the histograms used in the reconstruction.
RESIDUAL_BINS = (200, -0.02, 0.02)
CANDIDATE_BINS = (200, -14.0, 14.0)
RESOLUTION_BINS = (200, -0.3, 0.3)


def acceptance_window(residuals: Histogram | Iterable[float]) -> float:
    """Azimuth matching window: four times the RMS of the phi residuals.

    ``residuals`` is either a filled Histogram or the raw differences
    phi1 - phi2, which are then binned over [-0.02, 0.02); values outside
    that range do not enter the RMS.
    """
    if isinstance(residuals, Histogram):
        histogram = residuals
    else:
        histogram = Histogram(
            *RESIDUAL_BINS, "hist_scarti", "istogramma scarti tra le phi"
        )
        for value in residuals:
            histogram.fill(value)
    return 4.0 * histogram.rms()


def candidate_vertex(z1: float, z2: float) -> float:
    """Where the tracklet through z1 (r = 4 cm) and z2 (r = 7 cm) meets the axis."""
    return (7.0 * z1 - 4.0 * z2) / 3.0


def vertex_candidates(
    window: float,
    layer1: Iterable[tuple[float, float]],
    layer2: Iterable[tuple[float, float]],
    histogram: Histogram | None = None,
) -> list[float]:
    """Vertex candidates of every compatible pair of hits.

    ``layer1`` and ``layer2`` hold (phi, z) pairs. A pair is compatible when
    its azimuths differ by less than ``window``. Candidates are filled into
    ``histogram`` when one is given, and returned in pair order.
    """
    second = list(layer2)
    candidates = [
        candidate_vertex(z1, z2)
        for phi1, z1 in layer1
        for phi2, z2 in second
        if abs(phi1 - phi2) < window
    ]
    if histogram is not None:
        for candidate in candidates:
            histogram.fill(candidate)
    return candidates


def reconstruct_z(histogram: Histogram, candidates: Sequence[float]) -> float | None:
    """Reconstructed vertex z, or None when the peak is not unique.

    The peak bin must hold strictly more counts than every other cell,
    underflow and overflow included. The result is the mean of the
    candidates lying strictly inside a 0.5 cm window centred on the peak.
    """
    peak_bin = histogram.maximum_bin()
    peak = int(histogram.bin_content(peak_bin))
    above = sum(
        1
        for index in range(histogram.size)
        if peak - histogram.bin_content(index) > 0
    )
    if above != histogram.size - 1:
        return None

    centre = histogram.bin_center(peak_bin)
    low = centre - WINDOW_WIDTH / 2.0
    high = centre + WINDOW_WIDTH / 2.0
    inside = [c for c in sorted(candidates) if low < c < high]
    if not inside:
        raise ValueError("no candidate lies in the window around the peak")
    return sum(inside) / len(inside)


def residual_histogram(
    reconstructed: Sequence[float], true_z: Sequence[float]
) -> Histogram:
    """Histogram of reconstructed minus true vertex z over [-0.3, 0.3) cm."""
    if len(reconstructed) != len(true_z):
        raise ValueError("reconstructed and true vertices differ in number")
    histogram = Histogram(*RESOLUTION_BINS, "hist_risoluzione", "Risoluzione totale")
    for rec, true in zip(reconstructed, true_z):
        histogram.fill(rec - true)
    return histogram