# src/miseq_demux/demultiplexer.py
from __future__ import annotations
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Sequence, Tuple

from rich.console import Console
from rich.live import Live

from .config import DemuxOptions, Thresholds
from .data_io import DataIO, RecordTuple
from .fastq import FastqRecord
from .index_builder import LookupTable, build_index
from .samples import read_samples
from .status import RunCounters, Status
from .utils.logging import get_logger

log = get_logger(__name__)

LOG_NAME = "Demultiplex.log"
PROGRESS_EVERY = 1_000

ProgressCallback = Callable[[RunCounters], None]


class Sink(Protocol):
    def write(self, record: FastqRecord) -> None: ...


class OutputRouter(Protocol):
    def __getitem__(self, ordinal: int) -> Tuple[Sink, Sink]: ...


def index_quality_failure(index1: FastqRecord, index2: FastqRecord, thresholds: Thresholds) -> Optional[str]:
    """
    Name of the counter charged for a failed quality gate, or None if both
    indexes pass. Mean checks run before min checks and only the first failure
    counts.
    """
    if index1.scores_mean < thresholds.scores_mean:
        return "index1_bad_mean"
    if index2.scores_mean < thresholds.scores_mean:
        return "index2_bad_mean"
    if index1.scores_min < thresholds.scores_min:
        return "index1_bad_min"
    if index2.scores_min < thresholds.scores_min:
        return "index2_bad_min"
    return None


def demultiplex(
    records: Iterable[RecordTuple],
    lookup: LookupTable,
    thresholds: Thresholds,
    router: OutputRouter,
    counters: RunCounters,
    progress: Optional[ProgressCallback] = None,
) -> RunCounters:
    """
    Route each (index1, index2, read1, read2) tuple to its sample's sinks.

    Pairs failing a quality gate are dropped. Pairs whose barcodes are not in
    `lookup` go to the undetermined sinks with the raw index sequences appended
    to the read names. The loop ends with `records`; callers feeding unequal
    streams get counts for the aligned prefix only.
    """
    undetermined = lookup.undetermined
    for index1, index2, read1, read2 in records:
        counters.count += 2

        failed = index_quality_failure(index1, index2, thresholds)
        if failed:
            counters.add(failed, 2)
        else:
            sample = lookup.lookup(index1.seq, index2.seq)
            if sample is not None:
                counters.match += 2
                fwd, rev = router[sample]
                fwd.write(read1)
                rev.write(read2)
            else:
                counters.undetermined += 2
                fwd, rev = router[undetermined]
                fwd.write(read1.with_name(f"{read1.name} {index1.seq}"))
                rev.write(read2.with_name(f"{read2.name} {index2.seq}"))

        if progress is not None and counters.count % PROGRESS_EVERY == 0:
            try:
                progress(counters)
            except Exception as e:
                log.warning(f"Progress display failed: {e}")
    return counters


def run(fastq_files: Sequence[Path | str], options: DemuxOptions, console: Optional[Console] = None) -> Status:
    """
    Read the sample sheet, build the barcode index, demultiplex the four
    FASTQ files into `options.output_dir` and save Demultiplex.log there.
    """
    if options.samples_file is None:
        raise ValueError("samples_file is required")
    samples = read_samples(options.samples_file, options.revcomp_index1, options.revcomp_index2)
    lookup = build_index(samples, options.mismatches_max, keying=options.keying)
    data_io = DataIO(samples, fastq_files, options.compress, options.output_dir)
    status = Status(samples)
    console = console or Console()

    with ExitStack() as stack:
        ios_in = stack.enter_context(data_io.open_input_files())
        ios_out = stack.enter_context(data_io.open_output_files())
        progress: Optional[ProgressCallback] = None
        if options.verbose:
            live = stack.enter_context(Live(status.render(), console=console, auto_refresh=False))
            progress = lambda _: live.update(status.render(), refresh=True)
        demultiplex(ios_in.records(), lookup, options.thresholds, ios_out, status.counters, progress)

    if options.verbose:
        console.print(status.render())
    status.save(Path(options.output_dir) / LOG_NAME)
    c = status.counters
    log.info(f"Processed {c.count} reads: {c.match} matched, {c.undetermined} undetermined, {c.dropped} dropped")
    return status
