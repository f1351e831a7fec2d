from pathlib import Path
import pytest


def write_fastq(path: Path, *records: tuple) -> Path:
    path.write_text("".join(f"@{n}\n{s}\n+\n{q}\n" for n, s, q in records))
    return path


@pytest.fixture
def run_files(tmp_path: Path):
    """One read pair with observed indexes Aa/cC and a one-sample sheet aT/Cg."""
    inp = tmp_path / "in"
    inp.mkdir()
    samples = inp / "samples.txt"
    samples.write_text("#ID\tIndex1\tIndex2\nsample1\taT\tCg\n")
    fastqs = [
        write_fastq(inp / "x_S1_L001_I1_001x.fq", ("index1", "Aa", "II")),
        write_fastq(inp / "x_S1_L001_I2_001x.fq", ("index2", "cC", "II")),
        write_fastq(inp / "x_S1_L001_R1_001x.fq", ("read1", "A", "I")),
        write_fastq(inp / "x_S1_L001_R2_001x.fq", ("read2", "G", "I")),
    ]
    return samples, fastqs, tmp_path / "out"
