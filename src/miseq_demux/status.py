# src/miseq_demux/status.py
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Sequence
import time

import yaml
from rich.table import Table

from .config import Sample
from .utils.fs import atomic_write_text


@dataclass
class RunCounters:
    """
    Read counters for one run. Every event is counted once per mate, so all
    values move in steps of 2.
    """
    count: int = 0
    match: int = 0
    undetermined: int = 0
    index1_bad_mean: int = 0
    index2_bad_mean: int = 0
    index1_bad_min: int = 0
    index2_bad_min: int = 0

    def add(self, name: str, delta: int = 2) -> None:
        setattr(self, name, getattr(self, name) + delta)

    @property
    def dropped(self) -> int:
        return self.index1_bad_mean + self.index2_bad_mean + self.index1_bad_min + self.index2_bad_min

    @property
    def undetermined_percent(self) -> float:
        if self.count == 0:
            return 0.0
        return round(100 * self.undetermined / self.count, 1)

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def format_elapsed(seconds: float) -> str:
    s = int(seconds)
    return f"{s // 3600:02d}:{s % 3600 // 60:02d}:{s % 60:02d}"


class Status:
    """Counters plus the run context needed to report them."""

    def __init__(self, samples: Sequence[Sample], counters: RunCounters | None = None):
        self.samples = list(samples)
        self.counters = counters if counters is not None else RunCounters()
        self._start = time.monotonic()

    def time_elapsed(self) -> str:
        return format_elapsed(time.monotonic() - self._start)

    def to_dict(self) -> Dict[str, Any]:
        c = self.counters
        return {
            "count": c.count,
            "match": c.match,
            "undetermined": c.undetermined,
            "undetermined_percent": c.undetermined_percent,
            "index1_bad_mean": c.index1_bad_mean,
            "index2_bad_mean": c.index2_bad_mean,
            "index1_bad_min": c.index1_bad_min,
            "index2_bad_min": c.index2_bad_min,
            "sample_ids": [s.id for s in self.samples],
            "index1": sorted({s.index1 for s in self.samples}),
            "index2": sorted({s.index2 for s in self.samples}),
            "time_elapsed": self.time_elapsed(),
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    def __str__(self) -> str:
        return self.to_yaml()

    def save(self, path: Path) -> None:
        atomic_write_text(Path(path), self.to_yaml())

    def render(self) -> Table:
        table = Table(title="miseq-demux status")
        table.add_column("Counter")
        table.add_column("Reads", justify="right")
        rows: List[tuple[str, str]] = [(k, str(v)) for k, v in self.counters.as_dict().items()]
        rows.insert(3, ("undetermined_percent", f"{self.counters.undetermined_percent:.1f}"))
        rows.append(("time_elapsed", self.time_elapsed()))
        for k, v in rows:
            table.add_row(k, v)
        return table
