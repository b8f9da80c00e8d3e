# vertexsim

`vertexsim` simulates collisions seen by a small cylindrical tracker and
reconstructs the longitudinal position (z) of the primary vertex from the
recorded hits.

The detector model is fixed:

* a beryllium beam pipe of radius 3 cm,
* a first silicon layer of radius 4 cm and a second of radius 7 cm,
  both 27 cm long.

Each event draws a vertex from a Gaussian beam spot (σx = σy = 0.01 cm,
σz = 5.3 cm), a charged-particle multiplicity, and for every particle a
uniform azimuth and a pseudorapidity restricted to |η| ≤ 2, both taken from
the kinematic distributions you supply. Particles travel in straight lines
through the beam pipe and both layers, optionally with multiple Coulomb
scattering in each material. Hit positions are smeared by the detector
resolution (0.012 cm in z, 0.003 cm in r·φ), and uniformly distributed
noise hits can be added to each layer.

Reconstruction pairs hits of the two layers whose azimuths differ by less
than an acceptance window (four times the RMS of the φ1 − φ2 residuals),
extends every such tracklet to the beam axis, and takes the mean of the
candidates lying in a 0.5 cm window around the most populated bin of the
candidate histogram. Events whose candidate histogram has no single clear
maximum are counted as not reconstructed.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command line

Two commands cover the whole chain.

```
vertexsim-generate
```

reads the kinematic distributions (`--kinematics`, default `kinem.json`),
generates events (`--events`, default 1 000 000; `--seed`, default 2126;
`--noise` noise hits per layer per event; `--no-scattering` to switch off
multiple scattering) and writes them as JSON lines to `--output` (default
`events.jsonl`). The azimuth differences φ1 − φ2 of particles that crossed
both layers go, one per line, to `--residuals` (default `residuals.txt`).

The kinematics file is a JSON object with the keys `eta` and
`multiplicity`, each holding `nbins`, `low`, `high` and the list of bin
`contents`.

```
vertexsim-analyse
```

reads the events (`--events`), derives the acceptance window from the
residuals file (`--residuals`) unless `--window` gives it directly,
reconstructs the vertex of each event and prints the numbers of simulated,
reconstructed and non-reconstructed events, the reconstruction efficiency
and the overall resolution. Into `--output-dir` (default the current
directory) it saves `c1.png` (resolution against multiplicity), `c2.png`
(resolution against generated z), `c3.png` (efficiency against
multiplicity) and `graphs.json` with the points of all three graphs.

## Library

The same steps are available from Python.

`vertexsim.geometry` holds `Point`, `Line` (built from a point and the
polar and azimuthal angles, or with `Line.from_cosines` from direction
cosines), `Cylinder` with `Cylinder.intersect`, which returns the crossing
point and whether it lies on the sensitive length, and `Hit`, the
(z, φ, label) triple recorded by a layer.

`vertexsim.histogram.Histogram` is a fixed-bin one-dimensional histogram
with underflow and overflow bins, filling, mean, RMS and its error,
sampling from the bin contents and `Histogram.divide_binomial` for the
bin-by-bin ratio of two histograms.

`vertexsim.simulation` holds the Monte Carlo:

* `load_kinematics` reads the pseudorapidity and multiplicity
  distributions,
* `EventGenerator` draws vertices, angles, multiplicities and scattering
  angles, and carries a particle through the detector with
  `EventGenerator.transport`, returning a `TransportResult`,
* `rotate` turns a direction given relative to a track into laboratory
  direction cosines,
* `generate_events` yields `Event` objects one at a time and can fill the
  azimuth residuals into anything with a `fill` method,
* `save_events` and `load_events` write and read them as JSON lines.

`vertexsim.reconstruction` provides `acceptance_window`,
`candidate_vertex`, `vertex_candidates`, `reconstruct_z` (which returns
`None` for events it cannot reconstruct) and `residual_histogram`.

`vertexsim.plots` turns the results into `GraphPoint` series with
`resolution_vs_multiplicity`, `resolution_vs_z` and
`efficiency_vs_multiplicity`, and draws them with `save_graph`.

`vertexsim.analysis.analyse` runs the full reconstruction over an iterable
of events and returns an `AnalysisResult` with the efficiency and
resolution; `format_summary` renders it as the text report printed by
`vertexsim-analyse`.

## What it does not do

No kinematic distributions come with the package: `vertexsim-generate`
needs a kinematics file in the JSON form above. Events, residuals and graph
points are stored only as JSON lines, plain text and JSON; the per-class
resolution histograms are used to compute the graphs and are not saved.