import json
import math

import pytest

from vertexsim.analysis import AnalysisResult, analyse, format_summary, main
from vertexsim.geometry import Hit, Point
from vertexsim.simulation import Event, save_events


def _straight_event(z_vertex, slopes, phis, multiplicity=None):
    """Event whose tracks are straight lines from the vertex."""
    hits1 = [Hit(z_vertex + 4.0 * k, phi, i) for i, (k, phi) in enumerate(zip(slopes, phis))]
    hits2 = [Hit(z_vertex + 7.0 * k, phi, i) for i, (k, phi) in enumerate(zip(slopes, phis))]
    return Event(
        Point(0.0, 0.0, z_vertex),
        len(slopes) if multiplicity is None else multiplicity,
        hits1,
        hits2,
    )


def test_single_event_reconstructs_true_vertex():
    event = _straight_event(1.0, [1.0, 0.5, -1.0], [0.5, 1.5, 2.5])
    result = analyse([event], 0.1)
    assert result.total == 1
    assert result.not_reconstructed == 0
    assert result.reconstructed == 1
    assert result.reconstructed_z == [pytest.approx(1.0)]
    assert result.true_z == [1.0]
    assert result.reconstructed_multiplicities == [3]


def test_event_without_hits_is_not_reconstructed():
    good = _straight_event(-2.0, [1.0, 0.3], [0.5, 2.0])
    empty = Event(Point(0.0, 0.0, 3.0), 4)
    result = analyse([good, empty], 0.1)
    assert result.total == 2
    assert result.not_reconstructed == 1
    assert result.total_multiplicities == [2, 4]
    assert result.reconstructed_multiplicities == [2]
    assert result.efficiency == pytest.approx(50.0)


def test_tied_peak_is_not_reconstructed():
    first = _straight_event(1.0, [1.0], [0.5])
    second = _straight_event(-5.0, [0.2], [2.5])
    event = Event(
        Point(0.0, 0.0, 1.0),
        2,
        first.hits1 + second.hits1,
        first.hits2 + second.hits2,
    )
    result = analyse([event], 0.1)
    assert result.not_reconstructed == 1
    assert result.reconstructed_z == []


def test_no_events_gives_nan_efficiency():
    result = analyse([], 0.1)
    assert result.total == 0
    assert math.isnan(result.efficiency)


def test_resolution_is_zero_for_exact_reconstruction():
    events = [
        _straight_event(z, [1.0, 0.5, -0.7], [0.5, 1.5, 2.5])
        for z in (-3.0, 0.5, 2.0)
    ]
    result = analyse(events, 0.1)
    assert result.reconstructed == 3
    assert result.resolution == pytest.approx(0.0, abs=1e-9)


def test_resolution_from_result_lists():
    result = AnalysisResult(
        total=2,
        true_z=[0.0, 0.0],
        reconstructed_z=[0.1, -0.1],
        total_multiplicities=[5, 5],
        reconstructed_multiplicities=[5, 5],
    )
    assert result.resolution == pytest.approx(0.1)
    assert result.efficiency == pytest.approx(100.0)


def test_format_summary_reports_counts():
    event = _straight_event(1.0, [1.0, 0.5], [0.5, 1.5])
    empty = Event(Point(0.0, 0.0, 0.0), 1)
    result = analyse([event, empty], 0.1)
    text = format_summary(result)
    assert "Simulated events: 2" in text
    assert "Reconstructed events: 1" in text
    assert "Events not reconstructed: 1" in text
    assert "50 %" in text


def test_main_writes_graphs_and_prints_summary(tmp_path, capsys):
    events = [
        _straight_event(z, [1.0, 0.5, -0.7], [0.5, 1.5, 2.5])
        for z in (-3.0, 0.5, 2.0)
    ]
    events_path = tmp_path / "events.jsonl"
    save_events(events_path, events)
    residuals_path = tmp_path / "residuals.txt"
    residuals_path.write_text("-0.01\n0.01\n", encoding="utf-8")
    out = tmp_path / "out"

    status = main(
        [
            "--events", str(events_path),
            "--residuals", str(residuals_path),
            "--output-dir", str(out),
        ]
    )

    assert status == 0
    for name in ("c1.png", "c2.png", "c3.png"):
        assert (out / name).stat().st_size > 0
    graphs = json.loads((out / "graphs.json").read_text(encoding="utf-8"))
    assert len(graphs["resolution_vs_multiplicity"]) == 8
    assert len(graphs["resolution_vs_z"]) == 9
    assert len(graphs["efficiency_vs_multiplicity"]) == 10
    printed = capsys.readouterr().out
    assert "Reconstructed events: 3" in printed


def test_main_rejects_malformed_residuals(tmp_path):
    events_path = tmp_path / "events.jsonl"
    save_events(events_path, [])
    residuals_path = tmp_path / "residuals.txt"
    residuals_path.write_text("abc\n", encoding="utf-8")
    with pytest.raises(ValueError):
        main(
            [
                "--events", str(events_path),
                "--residuals", str(residuals_path),
                "--output-dir", str(tmp_path / "out"),
            ]
        )