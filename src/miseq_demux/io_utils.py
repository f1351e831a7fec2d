# src/miseq_demux/io_utils.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

FASTQ_EXTS = (".fastq", ".fq", ".fastq.gz", ".fq.gz", ".fastq.bz2", ".fq.bz2")


def ensure_dir(d: Path) -> Path:
    d.mkdir(parents=True, exist_ok=True)
    return d


def find_fastqs(root: Path) -> List[Path]:
    """
    Recursively find FASTQ files under `root`.
    """
    out: List[Path] = []
    for p in root.rglob("*"):
        name = p.name.lower()
        if p.is_file() and name.endswith(FASTQ_EXTS):
            out.append(p)
    return sorted(out)


def expand_fastq_args(paths: Iterable[Path]) -> List[Path]:
    """Replace directories with the FASTQ files found beneath them."""
    out: List[Path] = []
    for p in paths:
        out.extend(find_fastqs(p) if p.is_dir() else [p])
    return out
