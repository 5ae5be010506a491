"""Run recorder for camera and travel sessions."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional, Sequence


class RunLogger:
    """Buffered recorder writing a camera timeseries and an event log as CSV.

    Each run lives in its own directory under ``root_dir``; the id of the
    most recent run is written to ``root_dir/last_run.txt`` so analysis
    tools can pick it up without arguments.
    """

    TIMESERIES_HEADER = [
        "t",
        "yaw",
        "pitch",
        "radius",
        "phase",
        "cx",
        "cy",
        "cz",
        "alpha",
    ]
    EVENTS_HEADER = ["t", "type", "details"]

    def __init__(
        self,
        root_dir: str | Path = "data/runs",
        run_id: Optional[str] = None,
        *,
        timeseries_flush_threshold: int = 200,
        events_flush_threshold: int = 20,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

        base = run_id or datetime.now().strftime("%Y%m%d_%H%M%S") + "_orrery"
        candidate = base
        suffix = 1
        while (self.root_dir / candidate).exists():
            candidate = f"{base}_{suffix:02d}"
            suffix += 1

        self.run_id = candidate
        self.run_dir = self.root_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=False)

        self.timeseries_path = self.run_dir / "timeseries.csv"
        self.events_path = self.run_dir / "events.csv"
        self.meta_path = self.run_dir / "meta.json"

        self._ts_file = self.timeseries_path.open("w", newline="", encoding="utf-8")
        self._ts_file.write(",".join(self.TIMESERIES_HEADER) + "\n")
        self._ev_file = self.events_path.open("w", newline="", encoding="utf-8")
        self._ev_file.write(",".join(self.EVENTS_HEADER) + "\n")

        self._ts_buffer: list[str] = []
        self._ev_buffer: list[str] = []
        self._ts_threshold = max(1, timeseries_flush_threshold)
        self._ev_threshold = max(1, events_flush_threshold)
        self.closed = False

        (self.root_dir / "last_run.txt").write_text(self.run_id, encoding="utf-8")

    def write_meta(self, meta: Mapping[str, object]) -> None:
        with self.meta_path.open("w", encoding="utf-8") as fh:
            json.dump(dict(meta), fh, indent=2, sort_keys=True, default=str)

    def log_ts(self, values: Sequence[object]) -> None:
        if len(values) != len(self.TIMESERIES_HEADER):
            raise ValueError(
                f"expected {len(self.TIMESERIES_HEADER)} timeseries values, got {len(values)}"
            )
        self._ts_buffer.append(",".join(self._format_value(v) for v in values))
        if len(self._ts_buffer) >= self._ts_threshold:
            self._flush_timeseries()

    def log_event(self, t: float, kind: str, details: str = "") -> None:
        row = [self._format_value(t), kind, self._escape(details)]
        self._ev_buffer.append(",".join(row))
        if len(self._ev_buffer) >= self._ev_threshold:
            self._flush_events()

    def flush(self) -> None:
        self._flush_timeseries()
        self._flush_events()

    def close(self) -> None:
        if self.closed:
            return
        self.flush()
        self._ts_file.close()
        self._ev_file.close()
        self.closed = True

    def _flush_timeseries(self) -> None:
        if self._ts_buffer:
            self._ts_file.write("\n".join(self._ts_buffer) + "\n")
            self._ts_file.flush()
            self._ts_buffer.clear()

    def _flush_events(self) -> None:
        if self._ev_buffer:
            self._ev_file.write("\n".join(self._ev_buffer) + "\n")
            self._ev_file.flush()
            self._ev_buffer.clear()

    @staticmethod
    def _format_value(value: object) -> str:
        if isinstance(value, bool):
            return str(int(value))
        if isinstance(value, (int, float)):
            return f"{value:.10g}"
        return str(value)

    @staticmethod
    def _escape(text: str) -> str:
        # details is the last column; keep it on one line and comma-free
        return text.replace("\n", " ").replace(",", ";")

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None


def read_last_run(root_dir: str | Path = "data/runs") -> Path | None:
    """Directory of the most recent run, if the marker points at one."""

    marker = Path(root_dir) / "last_run.txt"
    if not marker.exists():
        return None
    run_dir = Path(root_dir) / marker.read_text(encoding="utf-8").strip()
    return run_dir if run_dir.is_dir() else None


__all__ = ["RunLogger", "read_last_run"]
