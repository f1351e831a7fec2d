# src/miseq_demux/samples.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Set, Tuple
import csv

from .config import Sample
from .errors import SampleReaderError
from .utils.logging import get_logger

log = get_logger(__name__)

_COMPLEMENT = str.maketrans("ATCGN", "TAGCN")

# output files for unmatched pairs are named after this id
RESERVED_ID = "Undetermined"


def reverse_complement(seq: str) -> str:
    return seq.upper().translate(_COMPLEMENT)[::-1]


def read_samples(
    file_path: Path | str,
    revcomp_index1: bool = False,
    revcomp_index2: bool = False,
) -> List[Sample]:
    """
    Parse a tab separated 'ID<TAB>Index1<TAB>Index2' sample sheet.

    Rows whose ID starts with '#' and blank rows are skipped. Barcodes are
    upper-cased and, if requested, reverse-complemented. Every problem found
    is logged before a single SampleReaderError is raised.
    """
    samples: List[Sample] = []
    errors: List[str] = []
    with open(file_path, "r", newline="") as f:
        reader = csv.reader(f, delimiter="\t")
        for lineno, row in enumerate(reader, start=1):
            if not row or not row[0].strip() or row[0].startswith("#"):
                continue
            if len(row) != 3:
                errors.append(f"Line {lineno}: expected 3 columns, got {len(row)}")
                continue
            sample_id, index1, index2 = (c.strip() for c in row)
            index1 = reverse_complement(index1) if revcomp_index1 else index1.upper()
            index2 = reverse_complement(index2) if revcomp_index2 else index2.upper()
            samples.append(Sample(id=sample_id, index1=index1, index2=index2))

    errors.extend(check_index_combo(samples))
    errors.extend(check_unique_id(samples))
    errors.extend(check_reserved_id(samples))
    if errors:
        for e in errors:
            log.warning(e)
        raise SampleReaderError(f"{len(errors)} error(s) found in sample file {file_path}")
    log.info(f"Read {len(samples)} samples from {file_path}")
    return samples


def check_index_combo(samples: List[Sample]) -> List[str]:
    errors: List[str] = []
    seen: Dict[Tuple[str, str], str] = {}
    for s in samples:
        combo = (s.index1, s.index2)
        if combo in seen:
            errors.append(f"Samples with same index combo\t{s.id}\t{seen[combo]}")
        else:
            seen[combo] = s.id
    return errors


def check_unique_id(samples: List[Sample]) -> List[str]:
    errors: List[str] = []
    seen: Set[str] = set()
    for s in samples:
        if s.id in seen:
            errors.append(f"Non-unique sample id\t{s.id}")
        seen.add(s.id)
    return errors


def check_reserved_id(samples: List[Sample]) -> List[str]:
    return [
        f"Sample id is reserved for unmatched reads\t{s.id}"
        for s in samples
        if s.id.lower() == RESERVED_ID.lower()
    ]
