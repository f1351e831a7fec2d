# src/miseq_demux/config.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pathlib import Path
from typing import Any, Dict, Literal, Optional
import yaml


class Sample(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    index1: str = Field(..., description="Index1 (i7) barcode sequence")
    index2: str = Field(..., description="Index2 (i5) barcode sequence")

    def __str__(self) -> str:
        return "\t".join((self.id, self.index1, self.index2))


class Thresholds(BaseModel):
    """Phred score gates applied to both index reads."""
    model_config = ConfigDict(frozen=True)

    scores_min: int
    scores_mean: int


class DemuxOptions(BaseModel):
    samples_file: Optional[Path] = None
    output_dir: Path = Path(".")
    mismatches_max: int = Field(0, ge=0, description="Substitutions allowed per index")
    scores_min: int = Field(16, description="Drop pair if any index base scores below this")
    scores_mean: int = Field(16, description="Drop pair if an index mean score is below this")
    revcomp_index1: bool = False
    revcomp_index2: bool = False
    compress: Literal["none", "gzip", "bzip2"] = "none"
    keying: Literal["exact", "hash"] = "exact"
    verbose: bool = False

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(scores_min=self.scores_min, scores_mean=self.scores_mean)

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> "DemuxOptions":
        """Load options from YAML; non-None ``overrides`` win over file values."""
        with open(path, "r") as fh:
            data: Dict[str, Any] = yaml.safe_load(fh) or {}
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)
