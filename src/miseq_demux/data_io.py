# src/miseq_demux/data_io.py
from __future__ import annotations
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import re

from .config import Sample
from .errors import DataIOError
from .fastq import SUFFIXES, FastqRecord, FastqWriter, open_fastq, read_fastq
from .io_utils import ensure_dir
from .utils.logging import get_logger

log = get_logger(__name__)

# sample, lane, read, chunk as in Illumina bcl2fastq names: _S1_L001_R1_001
_SLR_RE = re.compile(r"(_S\d+_L\d{3}_R[12]_\d{3})")

INPUT_TAGS = ("_I1_", "_I2_", "_R1_", "_R2_")

RecordTuple = Tuple[FastqRecord, FastqRecord, FastqRecord, FastqRecord]


def extract_suffix(files: Sequence[Path | str], pattern: str, compress: str = "none") -> str:
    """
    Pull the sample/lane/read suffix from the single file matching `pattern`.

    >>> extract_suffix(["Sample1_S1_L001_R1_001.fastq.gz"], "_R1_")
    '_S1_L001_R1_001.fastq'
    """
    hits = [f for f in files if pattern in Path(f).name]
    if len(hits) != 1:
        raise DataIOError(f"Expecting exactly 1 hit for {pattern} but got: {', '.join(map(str, hits))}")
    m = _SLR_RE.search(Path(hits[0]).name)
    if not m:
        raise DataIOError(f"Unable to parse file SLR from: {hits[0]}")
    return m.group(1) + SUFFIXES[compress]


def identify_input_files(files: Sequence[Path | str]) -> List[Path]:
    """Order the inputs as index1, index2, read1, read2."""
    out: List[Path] = []
    for tag in INPUT_TAGS:
        hit = next((Path(f) for f in files if tag in Path(f).name), None)
        if hit is None:
            raise DataIOError(f"No input FASTQ file matching {tag}")
        out.append(hit)
    return out


class DataIO:
    """
    Owns the four input streams and the per-sample output sinks.

    Output sinks are addressed by sample ordinal; ``len(samples)`` is the
    Undetermined bucket. Both open_* methods are context managers that close
    every handle they opened, whatever the exit path.
    """

    def __init__(
        self,
        samples: Sequence[Sample],
        fastq_files: Sequence[Path | str],
        compress: str = "none",
        output_dir: Path | str = ".",
    ):
        self.samples = list(samples)
        self.compress = compress
        self.output_dir = Path(output_dir)
        self.suffix1 = extract_suffix(fastq_files, "_R1_", compress)
        self.suffix2 = extract_suffix(fastq_files, "_R2_", compress)
        self.input_files = identify_input_files(fastq_files)
        self.undetermined = len(self.samples)
        seen: Dict[Path, int] = {}
        for i, pair in self.output_paths().items():
            for p in pair:
                if p in seen:
                    raise DataIOError(f"Output file {p} is claimed by buckets {seen[p]} and {i}")
                seen[p] = i
        self._readers: Optional[List[Iterator[FastqRecord]]] = None
        self._sinks: Dict[int, Tuple[FastqWriter, FastqWriter]] = {}

    def output_paths(self) -> Dict[int, Tuple[Path, Path]]:
        paths = {
            i: (self.output_dir / f"{s.id}{self.suffix1}", self.output_dir / f"{s.id}{self.suffix2}")
            for i, s in enumerate(self.samples)
        }
        paths[self.undetermined] = (
            self.output_dir / f"Undetermined{self.suffix1}",
            self.output_dir / f"Undetermined{self.suffix2}",
        )
        return paths

    @contextmanager
    def open_input_files(self) -> Iterator["DataIO"]:
        with ExitStack() as stack:
            handles = [stack.enter_context(open_fastq(p)) for p in self.input_files]
            self._readers = [read_fastq(h) for h in handles]
            log.debug(f"Opened inputs: {', '.join(map(str, self.input_files))}")
            try:
                yield self
            finally:
                self._readers = None

    @contextmanager
    def open_output_files(self) -> Iterator["DataIO"]:
        ensure_dir(self.output_dir)
        with ExitStack() as stack:
            for i, (fwd, rev) in self.output_paths().items():
                self._sinks[i] = (
                    stack.enter_context(FastqWriter(fwd, self.compress)),
                    stack.enter_context(FastqWriter(rev, self.compress)),
                )
            try:
                yield self
            finally:
                self._sinks = {}

    def records(self) -> Iterator[RecordTuple]:
        """
        Yield one record from each input per step. Stops quietly at the first
        exhausted stream; unequal file lengths are not reported.
        """
        if self._readers is None:
            raise DataIOError("Input files are not open")
        readers = self._readers
        while True:
            entries = [next(r, None) for r in readers]
            if any(e is None for e in entries):
                return
            yield tuple(entries)  # type: ignore[misc]

    def __getitem__(self, ordinal: int) -> Tuple[FastqWriter, FastqWriter]:
        return self._sinks[ordinal]
