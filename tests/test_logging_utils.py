"""Tests for the CSV run recorder."""
import csv
import json

import pytest

from orrery.core.logging_utils import RunLogger, read_last_run


def _rows(path):
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


class TestRunLogger:

    def test_creates_run_directory_and_marker(self, tmp_path):
        logger = RunLogger(tmp_path, run_id="demo")
        assert logger.run_dir == tmp_path / "demo"
        assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "demo"
        assert read_last_run(tmp_path) == logger.run_dir
        logger.close()

    def test_run_id_collision_gets_suffix(self, tmp_path):
        first = RunLogger(tmp_path, run_id="demo")
        second = RunLogger(tmp_path, run_id="demo")
        assert second.run_id == "demo_01"
        first.close()
        second.close()

    def test_timeseries_rows(self, tmp_path):
        with RunLogger(tmp_path, run_id="ts") as logger:
            logger.log_ts([1000.0, 0.5, 0.25, 0.1, "Hold", 1.0, 2.0, 3.0, 0.0])
        rows = _rows(logger.timeseries_path)
        assert list(rows[0]) == RunLogger.TIMESERIES_HEADER
        assert rows[0]["phase"] == "Hold"
        assert float(rows[0]["yaw"]) == 0.5

    def test_wrong_row_length_rejected(self, tmp_path):
        with RunLogger(tmp_path) as logger:
            with pytest.raises(ValueError):
                logger.log_ts([1.0, 2.0])

    def test_event_details_are_escaped(self, tmp_path):
        with RunLogger(tmp_path) as logger:
            logger.log_event(5.0, "sequence_start", "from=0, to=1\nextra")
        rows = _rows(logger.events_path)
        assert rows == [{"t": "5", "type": "sequence_start", "details": "from=0; to=1 extra"}]

    def test_buffer_flushes_at_threshold(self, tmp_path):
        logger = RunLogger(tmp_path, events_flush_threshold=2)
        logger.log_event(1.0, "a")
        assert _rows(logger.events_path) == []
        logger.log_event(2.0, "b")
        assert [row["type"] for row in _rows(logger.events_path)] == ["a", "b"]
        logger.close()

    def test_close_is_idempotent(self, tmp_path):
        logger = RunLogger(tmp_path)
        logger.close()
        logger.close()
        assert logger.closed

    def test_meta(self, tmp_path):
        with RunLogger(tmp_path) as logger:
            logger.write_meta({"starting_location": "Earth", "target": "Mars"})
        meta = json.loads(logger.meta_path.read_text(encoding="utf-8"))
        assert meta == {"starting_location": "Earth", "target": "Mars"}


class TestReadLastRun:

    def test_missing_marker(self, tmp_path):
        assert read_last_run(tmp_path) is None

    def test_stale_marker(self, tmp_path):
        (tmp_path / "last_run.txt").write_text("gone", encoding="utf-8")
        assert read_last_run(tmp_path) is None
