# src/miseq_demux/errors.py
from __future__ import annotations


class DemuxError(Exception):
    """Base class for errors the command line reports without a traceback."""


class SampleReaderError(DemuxError):
    pass


class IndexAmbiguityError(DemuxError):
    """Two samples' mismatch neighbourhoods share a barcode pair."""

    def __init__(self, owner_id: str, sample_id: str, index1: str, index2: str):
        self.owner_id = owner_id
        self.sample_id = sample_id
        self.index1 = index1
        self.index2 = index2
        super().__init__(
            f"Index combo of {index1} and {index2} already exists for "
            f"sample id: {owner_id} and {sample_id}"
        )


class DataIOError(DemuxError):
    pass


class FastqFormatError(DemuxError):
    pass
