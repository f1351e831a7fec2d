from itertools import product
from math import comb
import pytest
from miseq_demux.config import Sample
from miseq_demux.errors import IndexAmbiguityError
from miseq_demux.index_builder import build_index, fingerprint, hamming_ball, permutate_word

SAMPLES1 = [Sample(id="A", index1="AT", index2="CG")]
SAMPLES2 = [Sample(id="A", index1="AT", index2="CG"), Sample(id="B", index1="AA", index2="CC")]


def test_permutate_word_includes_identity():
    assert permutate_word("AA") == ["AA", "TA", "CA", "GA", "AA", "AT", "AC", "AG"]


@pytest.mark.parametrize("length", [1, 2, 3, 4, 6])
def test_ball_size(length):
    word = "ACGTAC"[:length]
    for m in range(0, min(length, 3) + 1):
        expected = sum(comb(length, k) * 3 ** k for k in range(m + 1))
        assert len(hamming_ball(word, m)) == expected


def test_ball_members_within_distance():
    ball = hamming_ball("ACGT", 2)
    assert all(sum(a != b for a, b in zip(w, "ACGT")) <= 2 for w in ball)
    assert "TGGT" in ball and "TGCT" not in ball


def test_build_mismatches_0():
    table = build_index(SAMPLES1, 0)
    assert len(table) == 1
    assert table[("AT", "CG")] == 0
    assert table.undetermined == 1


def test_build_mismatches_1():
    table = build_index(SAMPLES1, 1)
    keys = set(product(["AT", "AA", "AC", "AG", "TT", "CT", "GT"],
                                      ["CG", "CA", "CT", "CC", "AG", "TG", "GG"]))
    assert len(table) == len(keys) == 49
    assert all(table[k] == 0 for k in keys)


def test_exact_mode_case_insensitive():
    table = build_index([Sample(id="A", index1="aT", index2="Cg")], 0)
    assert table.lookup("at", "cG") == 0
    assert table.lookup("AA", "CG") is None
    assert table.lookup("AT", "CC") is None


def test_ambiguous_index_combo_fails():
    with pytest.raises(IndexAmbiguityError) as exc:
        build_index(SAMPLES2, 1)
    e = exc.value
    assert (e.owner_id, e.sample_id) == ("A", "B")
    assert (e.index1, e.index2) == ("AA", "CA")
    assert "A and B" in str(e) and "AA and CA" in str(e)


def test_same_samples_exact_ok():
    table = build_index(SAMPLES2, 0)
    assert table.lookup("AA", "CC") == 1


def test_disjoint_balls_never_collide():
    samples = [Sample(id="X", index1="AAAA", index2="CCCC"), Sample(id="Y", index1="GGGG", index2="TTTT")]
    table = build_index(samples, 1)
    assert len(table) == 2 * 13 * 13
    assert table.lookup("AAAT", "CCCC") == 0
    assert table.lookup("GGGG", "TATT") == 1


def test_hash_keying():
    table = build_index(SAMPLES1, 1, keying="hash")
    assert fingerprint("aa", "cg", "hash") == hash("AACG")
    assert table.lookup("AA", "CG") == 0
    with pytest.raises(IndexAmbiguityError):
        build_index(SAMPLES2, 1, keying="hash")


def test_negative_mismatches_rejected():
    with pytest.raises(ValueError):
        build_index(SAMPLES1, -1)


def test_mixed_length_barcodes_are_distinct():
    # AT+CGA and ATC+GA concatenate to the same string but are different pairs
    samples = [Sample(id="A", index1="AT", index2="CGA"), Sample(id="B", index1="ATC", index2="GA")]
    table = build_index(samples, 0)
    assert table.lookup("AT", "CGA") == 0
    assert table.lookup("ATC", "GA") == 1
    assert table.lookup("ATCG", "A") is None
    assert fingerprint("at", "cga") == ("AT", "CGA")
