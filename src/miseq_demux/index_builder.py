# src/miseq_demux/index_builder.py
from __future__ import annotations
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Set, Tuple, Union

from .config import Sample
from .errors import IndexAmbiguityError
from .utils.logging import get_logger

log = get_logger(__name__)

ALPHABET = "ATCG"

Keying = Literal["exact", "hash"]
Fingerprint = Union[Tuple[str, str], int]


def fingerprint(index1: str, index2: str, keying: Keying = "exact") -> Fingerprint:
    """
    Key for an observed barcode pair.

    keying="exact" keys on the upper-cased (index1, index2) pair itself.
    keying="hash" keys on the built-in hash of the upper-cased concatenation,
    which is only stable within one interpreter process and can collide
    when barcode lengths vary (AT+CGA vs ATC+GA).
    """
    if keying == "hash":
        return hash(f"{index1}{index2}".upper())
    return (index1.upper(), index2.upper())


def permutate_word(word: str, alphabet: str = ALPHABET) -> List[str]:
    """All single-position substitutions of `word`, the no-change ones included."""
    return [
        f"{word[:pos]}{char}{word[pos + 1:]}"
        for pos in range(len(word))
        for char in alphabet
    ]


def hamming_ball(word: str, radius: int, alphabet: str = ALPHABET) -> Set[str]:
    """
    Every string within Hamming distance `radius` of `word`.

    Grown one substitution round at a time, so for an alphabet of 4 and a word
    of length L the result holds sum(C(L, k) * 3**k for k <= radius) strings.
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    ball = {word}
    for _ in range(radius):
        grown = set(ball)
        for w in ball:
            grown.update(permutate_word(w, alphabet))
        ball = grown
    return ball


class LookupTable:
    """Barcode fingerprint -> sample ordinal. Read-only once built."""

    def __init__(self, samples: Sequence[Sample], keying: Keying = "exact"):
        self.samples = list(samples)
        self.keying = keying
        self._table: Dict[Fingerprint, int] = {}

    @property
    def undetermined(self) -> int:
        return len(self.samples)

    def lookup(self, index1: str, index2: str) -> Optional[int]:
        return self._table.get(fingerprint(index1, index2, self.keying))

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: Fingerprint) -> bool:
        return key in self._table

    def __getitem__(self, key: Fingerprint) -> int:
        return self._table[key]

    def _insert(self, ordinal: int, index1: str, index2: str) -> None:
        key = fingerprint(index1, index2, self.keying)
        owner = self._table.get(key)
        if owner is not None:
            raise IndexAmbiguityError(
                self.samples[owner].id, self.samples[ordinal].id, index1, index2
            )
        self._table[key] = ordinal


def build_index(
    samples: Iterable[Sample],
    mismatches_max: int,
    keying: Keying = "exact",
) -> LookupTable:
    """
    Index every index1/index2 combination within `mismatches_max`
    substitutions (per index) of each sample's barcodes.

    Samples are visited in registry order and the first one to claim a
    fingerprint owns it; a later claim raises IndexAmbiguityError and no
    table is returned.
    """
    if mismatches_max < 0:
        raise ValueError(f"mismatches_max must be >= 0, got {mismatches_max}")
    table = LookupTable(list(samples), keying=keying)
    for i, sample in enumerate(table.samples):
        ball1 = hamming_ball(sample.index1.upper(), mismatches_max)
        ball2 = hamming_ball(sample.index2.upper(), mismatches_max)
        # sorted so a collision is always reported on the same barcode pair
        members2 = sorted(ball2)
        for index1 in sorted(ball1):
            for index2 in members2:
                table._insert(i, index1, index2)
        log.debug(f"{sample.id}: {len(ball1)} x {len(ball2)} index combinations")
    log.info(f"Built index with {len(table)} keys for {len(table.samples)} samples (mismatches_max={mismatches_max})")
    return table
