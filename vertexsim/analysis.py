"""Vertex reconstruction over a sample of simulated events.

Each event's hits are matched layer to layer within the azimuth acceptance
window, the vertex z is reconstructed from the tracklet candidates, and the
resolution and efficiency of the procedure are summarised.
"""

from __future__ import annotations

import argparse
import json
import math
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from .histogram import Histogram
from .plots import (
    GraphPoint,
    efficiency_vs_multiplicity,
    resolution_vs_multiplicity,
    resolution_vs_z,
    save_graph,
)
from .reconstruction import (
    CANDIDATE_BINS,
    acceptance_window,
    reconstruct_z,
    residual_histogram,
    vertex_candidates,
)
from .simulation import Event, load_events


@dataclass
class AnalysisResult:
    """Outcome of the reconstruction over a set of events.

    ``true_z``, ``reconstructed_z`` and ``reconstructed_multiplicities`` hold
    one entry per reconstructed event, in event order;
    ``total_multiplicities`` holds one entry per event.
    """

    total: int = 0
    not_reconstructed: int = 0
    true_z: list[float] = field(default_factory=list)
    reconstructed_z: list[float] = field(default_factory=list)
    total_multiplicities: list[int] = field(default_factory=list)
    reconstructed_multiplicities: list[int] = field(default_factory=list)

    @property
    def reconstructed(self) -> int:
        return self.total - self.not_reconstructed

    @property
    def efficiency(self) -> float:
        """Percentage of events reconstructed; NaN when there are none."""
        if self.total == 0:
            return math.nan
        return 100.0 * self.reconstructed / self.total

    def residuals(self) -> Histogram:
        """Histogram of reconstructed minus true z."""
        return residual_histogram(self.reconstructed_z, self.true_z)

    @property
    def resolution(self) -> float:
        """RMS of reconstructed minus true z (cm)."""
        return self.residuals().rms()


def analyse(events: Iterable[Event], window: float) -> AnalysisResult:
    """Reconstruct the vertex of every event with the given azimuth window."""
    result = AnalysisResult()
    histogram = Histogram(*CANDIDATE_BINS, "hist_vertice", "Candidati vertice")

    for event in events:
        histogram.reset()
        result.total += 1
        result.total_multiplicities.append(event.multiplicity)

        layer1 = [(hit.phi, hit.z) for hit in event.hits1]
        layer2 = [(hit.phi, hit.z) for hit in event.hits2]
        candidates = vertex_candidates(window, layer1, layer2, histogram)
        z = reconstruct_z(histogram, candidates)
        if z is None:
            result.not_reconstructed += 1
            continue

        result.true_z.append(event.vertex.z)
        result.reconstructed_z.append(z)
        result.reconstructed_multiplicities.append(event.multiplicity)

    return result


def format_summary(result: AnalysisResult) -> str:
    """Human-readable report of efficiency and resolution."""
    rule = "*" * 47
    lines = [
        rule,
        f"Simulated events: {result.total}",
        f"Reconstructed events: {result.reconstructed}",
        f"Events not reconstructed: {result.not_reconstructed}",
        f"Reconstruction efficiency: {result.efficiency:g} %",
        f"Resolution: {result.resolution:g} cm",
        rule,
    ]
    return "\n".join(lines)


def _read_residuals(path: str | Path) -> list[float]:
    values = []
    with open(path, encoding="utf-8") as stream:
        for number, line in enumerate(stream, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                values.append(float(text))
            except ValueError as exc:
                raise ValueError(f"{path}:{number}: not a number") from exc
    return values


def _points_to_list(points: Sequence[GraphPoint]) -> list[dict]:
    return [asdict(point) for point in points]


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconstruct primary vertices from simulated events."
    )
    parser.add_argument("--events", default="events.jsonl")
    parser.add_argument("--residuals", default="residuals.txt",
                        help="azimuth differences giving the matching window")
    parser.add_argument("--window", type=float, default=None,
                        help="azimuth matching window, overriding --residuals")
    parser.add_argument("--output-dir", default=".",
                        help="directory receiving the graphs")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the reconstruction, draw the graphs and print the summary."""
    args = _parse_args(argv)
    start = time.perf_counter()

    if args.window is not None:
        window = args.window
    else:
        window = acceptance_window(_read_residuals(args.residuals))

    result = analyse(load_events(args.events), window)

    output = Path(args.output_dir)
    output.mkdir(parents=True, exist_ok=True)
    graphs = {
        "resolution_vs_multiplicity": (
            resolution_vs_multiplicity(
                result.reconstructed_z,
                result.true_z,
                result.reconstructed_multiplicities,
            ),
            "Resolution vs multiplicity",
            "Multiplicity",
            "Resolution [cm]",
            "c1.png",
        ),
        "resolution_vs_z": (
            resolution_vs_z(result.reconstructed_z, result.true_z),
            "Resolution vs generated z",
            "Generated z [cm]",
            "Resolution [cm]",
            "c2.png",
        ),
        "efficiency_vs_multiplicity": (
            efficiency_vs_multiplicity(
                result.total_multiplicities, result.reconstructed_multiplicities
            ),
            "Efficiency vs multiplicity",
            "Multiplicity",
            "Efficiency",
            "c3.png",
        ),
    }
    for points, title, xlabel, ylabel, filename in graphs.values():
        save_graph(points, title, xlabel, ylabel, output / filename)
    (output / "graphs.json").write_text(
        json.dumps({key: _points_to_list(value[0]) for key, value in graphs.items()}),
        encoding="utf-8",
    )

    print(format_summary(result))
    elapsed = time.perf_counter() - start
    print(f"Real time {elapsed:.2f} s")
    return 0