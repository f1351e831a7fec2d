# src/miseq_demux/cli.py
from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import typer
import yaml
from rich.table import Table
from rich.console import Console

from .utils.logging import setup_logging
from .config import DemuxOptions
from .demultiplexer import run as run_demultiplex
from .errors import DemuxError
from .io_utils import expand_fastq_args
from .samples import read_samples

app = typer.Typer(add_completion=False, help="Demultiplex MiSeq paired-end FASTQ files by dual index barcodes")
console = Console()


@app.callback()
def _main(verbose: int = typer.Option(0, "-v", count=True, help="-v/-vv for more logs")):
    setup_logging(verbose)


@app.command()
def run(
    fastq: List[Path] = typer.Argument(..., exists=True, help="I1, I2, R1 and R2 FASTQ files (or directories holding them)"),
    samples_file: Optional[Path] = typer.Option(None, "--samples-file", "-s", exists=True, dir_okay=False, help="Tab separated ID/Index1/Index2 file"),
    config: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="YAML file with default options"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    mismatches_max: Optional[int] = typer.Option(None, "--mismatches-max", "-m", min=0, help="Max substitutions per index [default: 0]"),
    scores_min: Optional[int] = typer.Option(None, help="Drop pair if any index base scores below this [default: 16]"),
    scores_mean: Optional[int] = typer.Option(None, help="Drop pair if an index mean score is below this [default: 16]"),
    revcomp_index1: bool = typer.Option(False, "--revcomp-index1", help="Reverse-complement index1 from the sample sheet"),
    revcomp_index2: bool = typer.Option(False, "--revcomp-index2", help="Reverse-complement index2 from the sample sheet"),
    compress: Optional[str] = typer.Option(None, help="Output compression: none|gzip|bzip2"),
    progress: bool = typer.Option(False, "--progress", help="Show live counters while running"),
):
    overrides = dict(
        samples_file=samples_file,
        output_dir=output_dir,
        mismatches_max=mismatches_max,
        scores_min=scores_min,
        scores_mean=scores_mean,
        revcomp_index1=revcomp_index1 or None,
        revcomp_index2=revcomp_index2 or None,
        compress=compress,
        verbose=progress or None,
    )
    try:
        if config:
            options = DemuxOptions.from_yaml(config, **overrides)
        else:
            options = DemuxOptions(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if options.samples_file is None:
        raise typer.BadParameter("--samples-file is required (on the command line or in --config)")

    try:
        status = run_demultiplex(expand_fastq_args(fastq), options, console=console)
    except (DemuxError, OSError) as e:
        console.print(f"[red]Error[/]: {e}")
        raise typer.Exit(1)
    c = status.counters
    console.print(f"[green]Done[/]: {c.match}/{c.count} reads matched, log in {options.output_dir / 'Demultiplex.log'}")


@app.command()
def samples(
    samples_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    revcomp_index1: bool = typer.Option(False, "--revcomp-index1"),
    revcomp_index2: bool = typer.Option(False, "--revcomp-index2"),
):
    """Validate a sample sheet and show the barcodes that will be used."""
    try:
        rows = read_samples(samples_file, revcomp_index1, revcomp_index2)
    except DemuxError as e:
        console.print(f"[red]Error[/]: {e}")
        raise typer.Exit(1)
    table = Table(title=str(samples_file))
    table.add_column("#", justify="right")
    table.add_column("ID", overflow="fold")
    table.add_column("Index1")
    table.add_column("Index2")
    for i, s in enumerate(rows):
        table.add_row(str(i), s.id, s.index1, s.index2)
    console.print(table)


@app.command()
def status(log: Path = typer.Argument(Path("Demultiplex.log"), exists=True, dir_okay=False, help="Demultiplex.log from a previous run")):
    """Show a saved run report."""
    with open(log) as fh:
        report = yaml.safe_load(fh) or {}
    table = Table(title=f"miseq-demux status: {log}")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for k, v in report.items():
        table.add_row(str(k), ", ".join(map(str, v)) if isinstance(v, list) else str(v))
    console.print(table)
