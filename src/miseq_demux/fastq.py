# src/miseq_demux/fastq.py
from __future__ import annotations
from dataclasses import dataclass, replace
from functools import cached_property
from pathlib import Path
from typing import IO, Iterator, Tuple
import bz2, gzip

from .errors import FastqFormatError

PHRED_OFFSET = 33

SUFFIXES = {"none": ".fastq", "gzip": ".fastq.gz", "bzip2": ".fastq.bz2"}


@dataclass(frozen=True)
class FastqRecord:
    name: str
    seq: str
    qual: str

    # computed once per record; the quality gate reads mean and min of each index
    @cached_property
    def scores(self) -> Tuple[int, ...]:
        return tuple(ord(c) - PHRED_OFFSET for c in self.qual)

    @cached_property
    def scores_mean(self) -> float:
        scores = self.scores
        return sum(scores) / len(scores) if scores else 0.0

    @cached_property
    def scores_min(self) -> int:
        return min(self.scores, default=0)

    def with_name(self, name: str) -> "FastqRecord":
        return replace(self, name=name)

    def to_fastq(self) -> str:
        return f"@{self.name}\n{self.seq}\n+\n{self.qual}\n"


def open_fastq(path: Path | str, mode: str = "r", compress: str | None = None) -> IO[str]:
    """
    Open a FASTQ file in text mode.

    For reading, compression is taken from the suffix (.gz / .bz2). For
    writing, `compress` ('none', 'gzip', 'bzip2') decides.
    """
    path = str(path)
    if compress is None:
        compress = "gzip" if path.endswith(".gz") else "bzip2" if path.endswith(".bz2") else "none"
    text_mode = "rt" if mode.startswith("r") else "wt"
    if compress == "gzip":
        return gzip.open(path, text_mode)
    if compress == "bzip2":
        return bz2.open(path, text_mode)
    if compress == "none":
        return open(path, text_mode.rstrip("t"))
    raise ValueError(f"Unknown compression: {compress}")


def read_fastq(fq: IO[str]) -> Iterator[FastqRecord]:
    """Yield records from an open FASTQ handle; malformed input is a hard stop."""
    while True:
        name = fq.readline()
        if not name:
            return
        name = name.rstrip("\r\n")
        if not name:
            # tolerate trailing blank lines only
            if any(line.strip() for line in fq):
                raise FastqFormatError("Blank line inside FASTQ data")
            return
        seq = fq.readline(); plus = fq.readline(); qual = fq.readline()
        if not qual:
            raise FastqFormatError(f"Truncated FASTQ record: {name}")
        seq = seq.rstrip("\r\n"); plus = plus.rstrip("\r\n"); qual = qual.rstrip("\r\n")
        if not name.startswith("@"):
            raise FastqFormatError(f"Bad FASTQ header (expected '@'): {name}")
        if not plus.startswith("+"):
            raise FastqFormatError(f"Bad FASTQ separator (expected '+') in record {name}")
        if len(seq) != len(qual):
            raise FastqFormatError(f"Sequence and quality lengths differ in record {name}")
        yield FastqRecord(name=name[1:], seq=seq, qual=qual)


class FastqWriter:
    """Append-only FASTQ sink."""

    def __init__(self, path: Path | str, compress: str = "none"):
        self.path = Path(path)
        self._fh = open_fastq(self.path, "w", compress=compress)

    def write(self, record: FastqRecord) -> None:
        self._fh.write(record.to_fastq())

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "FastqWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
