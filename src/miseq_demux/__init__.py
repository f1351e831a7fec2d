"""Demultiplex paired-end Illumina reads by their dual index barcodes."""

__version__ = "0.1.0"
