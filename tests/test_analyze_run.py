"""Tests for the offline run analysis helpers."""
import numpy as np
import pytest

import analyze_run
from orrery.core.logging_utils import RunLogger


@pytest.fixture
def recorded_run(tmp_path):
    with RunLogger(tmp_path, run_id="run") as logger:
        for t, phase in [(0.0, "PreRollMove"), (100.0, "PreRollMove"), (300.0, "Hold"), (400.0, "RocketFollow")]:
            logger.log_ts([t, 0.1, 0.2, 0.3, phase, 1.0, 2.0, 0.0, 0.0])
        logger.log_event(0.0, "sequence_start", "from=0.0000 to=0.5000")
        logger.log_event(400.0, "sequence_complete")
        logger.log_event(500.0, "sequence_start")
        logger.log_event(650.0, "sequence_cancel")
        logger.log_event(700.0, "skip")
    return logger.run_dir


class TestLoaders:

    def test_timeseries_keeps_phase_as_text(self, recorded_run):
        ts = analyze_run.load_timeseries(recorded_run / analyze_run.TIMESERIES_FILENAME)
        np.testing.assert_allclose(ts["t"], [0.0, 100.0, 300.0, 400.0])
        assert list(ts["phase"]) == ["PreRollMove", "PreRollMove", "Hold", "RocketFollow"]

    def test_events(self, recorded_run):
        events = analyze_run.load_events(recorded_run / analyze_run.EVENTS_FILENAME)
        assert events[0] == {"t": 0.0, "type": "sequence_start", "details": "from=0.0000 to=0.5000"}
        assert events[1]["details"] == ""


class TestSummaries:

    def test_event_counts(self, recorded_run):
        events = analyze_run.load_events(recorded_run / analyze_run.EVENTS_FILENAME)
        assert analyze_run.summarize_events(events) == {
            "sequence_start": 2,
            "sequence_complete": 1,
            "sequence_cancel": 1,
            "skip": 1,
        }

    def test_sequence_durations(self, recorded_run):
        events = analyze_run.load_events(recorded_run / analyze_run.EVENTS_FILENAME)
        assert analyze_run.sequence_durations(events) == [400.0, 150.0]

    def test_phase_durations(self, recorded_run):
        ts = analyze_run.load_timeseries(recorded_run / analyze_run.TIMESERIES_FILENAME)
        assert analyze_run.phase_durations(ts) == {"PreRollMove": 300.0, "Hold": 100.0}

    def test_phase_durations_need_two_samples(self):
        assert analyze_run.phase_durations({"t": np.array([1.0]), "phase": np.array(["Hold"])}) == {}


class TestFigures:

    def test_plots_are_written(self, recorded_run):
        ts = analyze_run.load_timeseries(recorded_run / analyze_run.TIMESERIES_FILENAME)
        events = analyze_run.load_events(recorded_run / analyze_run.EVENTS_FILENAME)
        fig_dir = analyze_run.ensure_fig_dir(recorded_run)
        analyze_run.plot_camera_angles(fig_dir, ts)
        analyze_run.plot_radius(fig_dir, ts, events)
        analyze_run.plot_path(fig_dir, ts)
        assert {p.name for p in fig_dir.iterdir()} == {"camera_angles.png", "radius.png", "traveller_path.png"}
