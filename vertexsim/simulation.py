"""Monte Carlo generation of collision events in a two-layer barrel tracker.

Each event has a primary vertex spread around the origin and a number of
charged particles. Every particle is carried in a straight line through the
beam pipe and two cylindrical silicon layers, with optional multiple
scattering in each material. The impact points are smeared with the detector
resolution and random noise hits may be added on each layer.
"""

from __future__ import annotations

import argparse
import json
import math
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Protocol, Sequence

from .geometry import Cylinder, Hit, Line, Point
from .histogram import Histogram

BEAM_PIPE = Cylinder(3.0, 100.0)
LAYER1 = Cylinder(4.0, 27.0)
LAYER2 = Cylinder(7.0, 27.0)
DETECTOR_LENGTH = 27.0

# (radiation length, thickness) in cm
BERYLLIUM = (35.28, 0.08)
SILICON = (9.36, 0.02)

VERTEX_SIGMA_X = 0.01
VERTEX_SIGMA_Y = 0.01
VERTEX_SIGMA_Z = 5.3

SMEARING_SIGMA_Z = 0.012
SMEARING_DELTA_RPHI = 0.003

ETA_MIN = -2.0
ETA_MAX = 2.0

DEFAULT_SEED = 2126
DEFAULT_EVENTS = 1_000_000

NOISE_LABEL = -1


class _Fillable(Protocol):
    def fill(self, value: float) -> object: ...


@dataclass
class Event:
    """One collision: true vertex, multiplicity and the hits on both layers."""

    vertex: Point
    multiplicity: int
    hits1: list[Hit] = field(default_factory=list)
    hits2: list[Hit] = field(default_factory=list)


@dataclass
class TransportResult:
    """Impact of one particle on the two layers.

    ``on_layer1`` and ``on_layer2`` tell whether the track really crossed the
    sensitive part of each layer.
    """

    hit1: Hit
    hit2: Hit
    on_layer1: bool
    on_layer2: bool


def rotate(
    theta: float, phi: float, theta_prime: float, phi_prime: float
) -> tuple[float, float, float]:
    """Direction cosines of a direction given relative to another.

    ``theta_prime`` and ``phi_prime`` are angles in the frame whose z axis
    points along (theta, phi); the result is expressed in the laboratory.
    """
    sin_t, cos_t = math.sin(theta), math.cos(theta)
    sin_p, cos_p = math.sin(phi), math.cos(phi)
    matrix = (
        (-sin_p, -cos_p * cos_t, sin_t * cos_p),
        (cos_p, -cos_t * sin_p, sin_t * sin_p),
        (0.0, sin_t, cos_t),
    )
    sin_tp = math.sin(theta_prime)
    local = (
        sin_tp * math.cos(phi_prime),
        sin_tp * math.sin(phi_prime),
        math.cos(theta_prime),
    )
    x, y, z = (sum(m * c for m, c in zip(row, local)) for row in matrix)
    return x, y, z


class EventGenerator:
    """Random source for vertices, multiplicities and particle tracks."""

    def __init__(
        self,
        seed: int | None,
        eta_histogram: Histogram,
        multiplicity_histogram: Histogram,
    ) -> None:
        self.seed = seed
        self.rng = random.Random(seed)
        self.eta_histogram = eta_histogram
        self.multiplicity_histogram = multiplicity_histogram

    def vertex(self) -> Point:
        """Draw a primary vertex from the beam luminous region."""
        gauss = self.rng.gauss
        return Point(
            gauss(0.0, VERTEX_SIGMA_X),
            gauss(0.0, VERTEX_SIGMA_Y),
            gauss(0.0, VERTEX_SIGMA_Z),
        )

    def phi(self) -> float:
        """Uniform azimuth in [0, 2*pi)."""
        return 2.0 * math.pi * self.rng.random()

    def theta(self) -> float:
        """Polar angle from the pseudorapidity distribution, |eta| <= 2."""
        while True:
            eta = self.eta_histogram.sample(self.rng)
            if ETA_MIN <= eta <= ETA_MAX:
                break
        return 2.0 * math.atan(math.exp(-eta))

    def scattering_angle(self, radiation_length: float, thickness: float) -> float:
        """Projected multiple-scattering angle for a layer of material."""
        ratio = thickness / radiation_length
        theta0 = 0.0136 * math.sqrt(ratio) * (1.0 + 0.038 * math.log(ratio))
        return self.rng.gauss(0.0, theta0)

    def multiplicity(self) -> int:
        """Number of charged particles in an event."""
        return max(0, int(self.multiplicity_histogram.sample(self.rng)))

    def _scatter(self, line: Line, material: tuple[float, float]) -> None:
        theta, phi = line.direction
        phi_local = self.phi()
        theta_local = self.scattering_angle(*material)
        line.set_cosines(rotate(theta, phi, theta_local, phi_local))

    def transport(
        self, vertex: Point, multiple_scattering: bool = True
    ) -> TransportResult:
        """Carry one particle from ``vertex`` through pipe and both layers.

        The azimuth stored in each hit is the direction of the track when it
        reaches that layer.
        """
        phi = self.phi()
        theta = self.theta()
        line = Line(vertex, theta, phi)

        beam_point, _ = BEAM_PIPE.intersect(line)
        if multiple_scattering:
            self._scatter(line, BERYLLIUM)
        line.point = beam_point
        _, phi1 = line.direction

        point1, on_layer1 = LAYER1.intersect(line)
        hit1 = Hit(point1.z, phi1, 1)

        if multiple_scattering:
            self._scatter(line, SILICON)
        line.point = point1
        _, phi2 = line.direction

        point2, on_layer2 = LAYER2.intersect(line)
        hit2 = Hit(point2.z, phi2, 1)

        return TransportResult(hit1, hit2, on_layer1, on_layer2)


def generate_events(
    generator: EventGenerator,
    n_events: int,
    noise_points: int = 0,
    multiple_scattering: bool = True,
    residuals: _Fillable | None = None,
) -> Iterator[Event]:
    """Yield ``n_events`` simulated events.

    Signal hits are labelled with their index on the layer, noise hits with
    -1. When ``residuals`` is given (anything with a ``fill`` method, such as
    a Histogram), the smeared azimuth difference between the two layers is
    filled for every particle that crossed both.
    """
    if n_events < 0:
        raise ValueError("the number of events cannot be negative")
    if noise_points < 0:
        raise ValueError("the number of noise points cannot be negative")

    rng = generator.rng
    sigma_phi1 = SMEARING_DELTA_RPHI / LAYER1.radius
    sigma_phi2 = SMEARING_DELTA_RPHI / LAYER2.radius
    half = DETECTOR_LENGTH / 2.0

    for _ in range(n_events):
        vertex = generator.vertex()
        multiplicity = generator.multiplicity()
        event = Event(vertex, multiplicity)

        for _ in range(multiplicity):
            result = generator.transport(vertex, multiple_scattering)
            z1 = result.hit1.z + rng.gauss(0.0, SMEARING_SIGMA_Z)
            phi1 = result.hit1.phi + rng.gauss(0.0, sigma_phi1)
            z2 = result.hit2.z + rng.gauss(0.0, SMEARING_SIGMA_Z)
            phi2 = result.hit2.phi + rng.gauss(0.0, sigma_phi2)

            if result.on_layer1:
                event.hits1.append(Hit(z1, phi1, len(event.hits1)))
            if result.on_layer2:
                event.hits2.append(Hit(z2, phi2, len(event.hits2)))
            if residuals is not None and result.on_layer1 and result.on_layer2:
                residuals.fill(phi1 - phi2)

        for hits in (event.hits1, event.hits2):
            for _ in range(noise_points):
                z = -half + DETECTOR_LENGTH * rng.random()
                phi = 2.0 * math.pi * rng.random()
                hits.append(Hit(z, phi, NOISE_LABEL))

        yield event


def _event_to_dict(event: Event) -> dict:
    return {
        "vertex": [event.vertex.x, event.vertex.y, event.vertex.z],
        "multiplicity": event.multiplicity,
        "hits1": [[h.z, h.phi, h.label] for h in event.hits1],
        "hits2": [[h.z, h.phi, h.label] for h in event.hits2],
    }


def _event_from_dict(data: dict) -> Event:
    x, y, z = data["vertex"]
    return Event(
        Point(float(x), float(y), float(z)),
        int(data["multiplicity"]),
        [Hit(float(hz), float(hp), int(lb)) for hz, hp, lb in data["hits1"]],
        [Hit(float(hz), float(hp), int(lb)) for hz, hp, lb in data["hits2"]],
    )


def save_events(path: str | Path, events: Iterable[Event]) -> int:
    """Write events as JSON lines; return how many were written."""
    count = 0
    with open(path, "w", encoding="utf-8") as stream:
        for event in events:
            stream.write(json.dumps(_event_to_dict(event)))
            stream.write("\n")
            count += 1
    return count


def load_events(path: str | Path) -> Iterator[Event]:
    """Read events written by :func:`save_events`, one at a time."""
    with open(path, encoding="utf-8") as stream:
        for number, line in enumerate(stream, start=1):
            if not line.strip():
                continue
            try:
                yield _event_from_dict(json.loads(line))
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"{path}:{number}: malformed event") from exc


def _histogram_from_dict(data: dict, name: str) -> Histogram:
    histogram = Histogram(data["nbins"], data["low"], data["high"], name, name)
    contents = list(data["contents"])
    if len(contents) != histogram.nbins:
        raise ValueError(
            f"histogram {name!r} has {len(contents)} contents "
            f"for {histogram.nbins} bins"
        )
    for index, content in enumerate(contents, start=1):
        if content:
            histogram.fill(histogram.bin_center(index), float(content))
    return histogram


def load_kinematics(path: str | Path) -> tuple[Histogram, Histogram]:
    """Read the pseudorapidity and multiplicity distributions.

    The file is a JSON object with keys ``eta`` and ``multiplicity``, each
    holding ``nbins``, ``low``, ``high`` and the list of bin ``contents``.
    """
    with open(path, encoding="utf-8") as stream:
        data = json.load(stream)
    try:
        eta = _histogram_from_dict(data["eta"], "eta")
        multiplicity = _histogram_from_dict(data["multiplicity"], "multiplicity")
    except (KeyError, TypeError) as exc:
        raise ValueError(f"{path}: malformed kinematics file") from exc
    return eta, multiplicity


class _ValueLog:
    def __init__(self) -> None:
        self.values: list[float] = []

    def fill(self, value: float) -> None:
        self.values.append(value)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate collision events in a two-layer barrel tracker."
    )
    parser.add_argument("--events", type=int, default=DEFAULT_EVENTS)
    parser.add_argument("--noise", type=int, default=0,
                        help="noise hits added on each layer per event")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--no-scattering", action="store_true",
                        help="switch off multiple scattering")
    parser.add_argument("--kinematics", default="kinem.json")
    parser.add_argument("--output", default="events.jsonl")
    parser.add_argument("--residuals", default="residuals.txt",
                        help="file receiving the azimuth differences")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Generate events and write them with the azimuth residuals."""
    args = _parse_args(argv)
    start = time.perf_counter()

    eta, multiplicity = load_kinematics(args.kinematics)
    generator = EventGenerator(args.seed, eta, multiplicity)
    log = _ValueLog()
    events = generate_events(
        generator,
        args.events,
        noise_points=args.noise,
        multiple_scattering=not args.no_scattering,
        residuals=log,
    )
    written = save_events(args.output, events)
    Path(args.residuals).write_text(
        "".join(f"{value!r}\n" for value in log.values), encoding="utf-8"
    )

    elapsed = time.perf_counter() - start
    print(f"Events written: {written}")
    print(f"Real time {elapsed:.2f} s")
    return 0