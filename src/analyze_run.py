"""Analyze a recorded orrery run and generate camera diagnostics."""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
TEXT_COLUMNS = {"phase"}
PHASE_COLORS = {
    "Idle": "#868e96",
    "PreRollMove": "#4dabf7",
    "Hold": "#ffa94d",
    "RocketFollow": "#94d82d",
    "Complete": "#9775fa",
}


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        columns: Dict[str, list] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                columns.setdefault(key, []).append(value if key in TEXT_COLUMNS else float(value))
    return {key: np.asarray(values) for key, values in columns.items()}


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        return [
            {"t": float(row["t"]), "type": row["type"], "details": row.get("details") or ""}
            for row in reader
            if row
        ]


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {
        "sequence_start": 0,
        "sequence_complete": 0,
        "sequence_cancel": 0,
        "skip": 0,
    }
    for event in events:
        if event["type"] in summary:
            summary[event["type"]] += 1
    return summary


def sequence_durations(events: List[dict]) -> List[float]:
    """Milliseconds from each sequence start to its completion or cancel."""

    durations: List[float] = []
    started: float | None = None
    for event in events:
        if event["type"] == "sequence_start":
            started = event["t"]
        elif event["type"] in ("sequence_complete", "sequence_cancel") and started is not None:
            durations.append(event["t"] - started)
            started = None
    return durations


def phase_durations(ts: Dict[str, np.ndarray]) -> Dict[str, float]:
    """Time spent in each camera phase, attributing each sample gap to its phase."""

    result: Dict[str, float] = {}
    t = ts.get("t")
    phases = ts.get("phase")
    if t is None or phases is None or t.size < 2:
        return result
    gaps = np.diff(t)
    for phase, gap in zip(phases[:-1], gaps):
        result[str(phase)] = result.get(str(phase), 0.0) + float(gap)
    return result


def plot_camera_angles(fig_dir: Path, ts: Dict[str, np.ndarray]) -> None:
    t_s = (ts["t"] - ts["t"][0]) / 1000.0
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(t_s, ts["yaw"], color="#4dabf7", label="yaw")
    ax.plot(t_s, ts["pitch"], color="#ffa94d", label="pitch")
    ax.set_xlabel("t [s]")
    ax.set_ylabel("angle [rad]")
    ax.set_title("Camera angles")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "camera_angles.png", dpi=150)
    plt.close(fig)


def plot_radius(fig_dir: Path, ts: Dict[str, np.ndarray], events: List[dict]) -> None:
    t0 = ts["t"][0]
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot((ts["t"] - t0) / 1000.0, ts["radius"], color="#94d82d")
    seen = set()
    for event in events:
        if event["type"] not in ("sequence_start", "sequence_complete", "sequence_cancel"):
            continue
        label = event["type"] if event["type"] not in seen else None
        seen.add(event["type"])
        ax.axvline((event["t"] - t0) / 1000.0, linestyle="--", alpha=0.5, label=label)
    if seen:
        ax.legend()
    ax.set_xlabel("t [s]")
    ax.set_ylabel("orbit radius [scene units]")
    ax.set_title("Camera radius")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "radius.png", dpi=150)
    plt.close(fig)


def plot_path(fig_dir: Path, ts: Dict[str, np.ndarray]) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    phases = ts.get("phase", np.array([]))
    for phase, color in PHASE_COLORS.items():
        mask = phases == phase
        if np.any(mask):
            ax.scatter(ts["cx"][mask], ts["cy"][mask], s=4, color=color, label=phase)
    ax.set_aspect("equal", "datalim")
    ax.set_xlabel("x [scene units]")
    ax.set_ylabel("y [scene units]")
    ax.set_title("Traveller path (ecliptic, top-down)")
    ax.legend(markerscale=3)
    fig.tight_layout()
    fig.savefig(fig_dir / "traveller_path.png", dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    meta: dict,
    event_summary: Dict[str, int],
    durations: List[float],
    phase_time: Dict[str, float],
) -> None:
    print(f"Run: {run_dir.name}")
    target = meta.get("target") or "-"
    print(f" Journey: {meta.get('starting_location', '?')} -> {target}")
    print(
        " Events:" +
        ",".join(f" {etype}: {count}" for etype, count in event_summary.items())
    )
    if durations:
        print(f" Mean sequence length: {np.mean(durations) / 1000.0:.2f} s over {len(durations)} sequences")
    else:
        print(" Mean sequence length: no finished sequences")
    for phase, ms in sorted(phase_time.items()):
        print(f"  {phase:<13} {ms / 1000.0:8.2f} s")


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze a recorded run and write figures.")
    parser.add_argument("run_dir", nargs="?", help="Path to a specific run directory")
    args = parser.parse_args()

    base_runs_dir = Path("data") / "runs"
    if args.run_dir:
        run_path = Path(args.run_dir)
        if not run_path.is_dir():
            run_path = base_runs_dir / args.run_dir
    else:
        last_run_file = base_runs_dir / "last_run.txt"
        if not last_run_file.exists():
            parser.error("No run given and last_run.txt is missing.")
        run_path = base_runs_dir / last_run_file.read_text(encoding="utf-8").strip()

    if not run_path.is_dir():
        parser.error(f"Run directory not found: {run_path}")

    meta_path = run_path / META_FILENAME
    ts_path = run_path / TIMESERIES_FILENAME
    ev_path = run_path / EVENTS_FILENAME

    if not ts_path.exists() or not ev_path.exists():
        parser.error("Run directory is missing timeseries.csv or events.csv.")

    meta: dict = {}
    if meta_path.exists():
        with meta_path.open("r", encoding="utf-8") as fh:
            meta = json.load(fh)

    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts or ts["t"].size == 0:
        parser.error("timeseries.csv is empty, nothing to analyze.")

    fig_dir = ensure_fig_dir(run_path)
    plot_camera_angles(fig_dir, ts)
    plot_radius(fig_dir, ts, events)
    plot_path(fig_dir, ts)

    print_summary(
        run_path,
        meta,
        summarize_events(events),
        sequence_durations(events),
        phase_durations(ts),
    )


if __name__ == "__main__":
    main()
