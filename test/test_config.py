from pathlib import Path
import pytest
from pydantic import ValidationError
from miseq_demux.config import DemuxOptions, Sample


def test_options_load(tmp_path: Path):
    y = tmp_path / "o.yaml"
    y.write_text("""
samples_file: samples.txt
mismatches_max: 1
compress: gzip
""")
    o = DemuxOptions.from_yaml(y)
    assert o.mismatches_max == 1 and o.compress == "gzip"
    assert o.samples_file == Path("samples.txt")
    assert o.scores_min == 16 and o.scores_mean == 16


def test_overrides_win_unless_none(tmp_path: Path):
    y = tmp_path / "o.yaml"
    y.write_text("mismatches_max: 1\nscores_min: 20\n")
    o = DemuxOptions.from_yaml(y, mismatches_max=2, scores_min=None)
    assert o.mismatches_max == 2 and o.scores_min == 20
    assert o.thresholds.scores_min == 20 and o.thresholds.scores_mean == 16


def test_bad_options_rejected():
    with pytest.raises(ValidationError):
        DemuxOptions(mismatches_max=-1)
    with pytest.raises(ValidationError):
        DemuxOptions(compress="zip")


def test_sample_is_frozen():
    s = Sample(id="A", index1="ATCG", index2="TCCG")
    assert str(s) == "A\tATCG\tTCCG"
    with pytest.raises(ValidationError):
        s.index1 = "GGGG"
