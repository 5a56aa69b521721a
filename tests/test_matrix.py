import io
import logging
from collections import Counter

import numpy as np
import pytest
from forestsplit import (
    BestSplitAllocs,
    CatFeature,
    FeatureMatrix,
    GiniTarget,
    NumFeature,
    RegressionTarget,
    load_afm,
    parse_afm,
)


def _random_matrix(n=80, seed=0):
    rng = np.random.RandomState(seed)
    x1 = rng.normal(size=n)
    x2 = rng.randint(0, 4, size=n)
    cats = rng.choice(list("pqrstu"), size=n)
    y = np.where(x1 + (cats == "p") > 0.3, "yes", "no")
    return FeatureMatrix.from_columns(
        {"N:x1": x1, "N:x2": x2, "C:c": cats, "C:y": y}, categorical=["C:c", "C:y"])


# -----------------------------------------------------------------------------
# Structure
# -----------------------------------------------------------------------------
def test_from_columns_builds_typed_columns():
    fm = _random_matrix()
    assert len(fm) == 4
    assert fm.n_cases() == 80
    assert isinstance(fm.feature("N:x1"), NumFeature)
    assert isinstance(fm.feature("C:c"), CatFeature)
    assert fm.case_labels[:3] == ["0", "1", "2"]
    assert fm.max_cats() == 6
    assert [fm.map[f.name] for f in fm.data] == [0, 1, 2, 3]


def test_from_columns_unknown_categorical():
    with pytest.raises(ValueError):
        FeatureMatrix.from_columns({"N:x": [1, 2]}, categorical=["C:missing"])


def test_append_checks_length_and_name():
    fm = FeatureMatrix([NumFeature("N:a", [1.0, 2.0])])
    with pytest.raises(ValueError):
        fm.append(NumFeature("N:b", [1.0]))
    with pytest.raises(ValueError):
        fm.append(NumFeature("N:a", [3.0, 4.0]))
    fm.append(NumFeature("N:b", [3.0, 4.0]))
    assert fm.map == {"N:a": 0, "N:b": 1}


# -----------------------------------------------------------------------------
# Best split across columns
# -----------------------------------------------------------------------------
@pytest.mark.parametrize("leaf_size", [1, 5, 20])
def test_best_splitter_respects_leaf_size(leaf_size):
    fm = _random_matrix()
    target = GiniTarget(fm.feature("C:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target, random_state=0)
    cases = np.arange(fm.n_cases())
    splitter, dec = fm.best_splitter(target, cases, [0, 1, 2], allocs, leaf_size=leaf_size)
    assert splitter is not None
    assert dec > 0
    l, r, m = splitter.split(fm, cases)
    assert len(l) >= leaf_size and len(r) >= leaf_size
    assert len(l) + len(r) + len(m) == len(cases)


def test_best_splitter_ties_go_to_first_candidate():
    x = [1, 2, 3, 4, 5, 6]
    fm = FeatureMatrix.from_columns(
        {"N:a": x, "N:b": x, "C:y": list("AAABBB")}, categorical=["C:y"])
    target = GiniTarget(fm.feature("C:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target)
    splitter, dec = fm.best_splitter(target, np.arange(6), [0, 1], allocs)
    assert splitter.feature == "N:a"
    assert splitter.value == 3.5
    assert dec == pytest.approx(0.5)
    splitter, _ = fm.best_splitter(target, np.arange(6), [1, 0], allocs)
    assert splitter.feature == "N:b"


def test_best_splitter_reports_constant_candidates():
    fm = FeatureMatrix.from_columns(
        {"N:k": [1, 1, 1, 1], "N:x": [1, 2, 3, 4], "C:y": list("AABB")}, categorical=["C:y"])
    target = GiniTarget(fm.feature("C:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target)
    constants = []
    splitter, dec = fm.best_splitter(target, np.arange(4), [0, 1], allocs, constants=constants)
    assert constants == [0]
    assert str(splitter) == "N:x <= 2.5000"
    assert dec == pytest.approx(0.5)


def test_best_splitter_without_improvement():
    fm = FeatureMatrix.from_columns(
        {"N:x": [1, 2, 3, 4], "C:y": list("AAAA")}, categorical=["C:y"])
    target = GiniTarget(fm.feature("C:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target)
    assert fm.best_splitter(target, np.arange(4), [0], allocs) == (None, 0.0)


def test_best_splitter_regression_with_categorical_predictor():
    cats = ["a", "b", "c"] * 6
    y = [{"a": 1.0, "b": 1.0, "c": 9.0}[c] for c in cats]
    fm = FeatureMatrix.from_columns({"C:c": cats, "N:y": y}, categorical=["C:c"])
    target = RegressionTarget(fm.feature("N:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target)
    splitter, dec = fm.best_splitter(target, np.arange(18), [0], allocs)
    assert splitter.left in (frozenset({"c"}), frozenset({"a", "b"}))
    # pure split removes all variance
    assert dec == pytest.approx(target.impurity(np.arange(18)))


def test_best_splitter_with_bagged_cases():
    fm = _random_matrix(n=30, seed=3)
    target = GiniTarget(fm.feature("C:y"))
    allocs = BestSplitAllocs.for_matrix(fm, target, random_state=0)
    cases = allocs.rng.randint(0, 30, size=45)
    splitter, dec = fm.best_splitter(target, cases, [0, 1, 2], allocs, leaf_size=3)
    assert splitter is not None and dec > 0
    assert allocs.sorted_cases.size >= 45


# -----------------------------------------------------------------------------
# Contrasts, imputation and encoding
# -----------------------------------------------------------------------------
def test_contrast_all_appends_shuffled_copies():
    fm = _random_matrix()
    originals = [f.name for f in fm.data]
    fm.contrast_all(random_state=0)
    assert len(fm) == 8
    for i, name in enumerate(originals):
        fake = fm.data[4 + i]
        assert fake.name == name + ":SHUFFLED"
        assert fm.map[fake.name] == 4 + i
        orig = fm.feature(name)
        assert Counter(orig.get_str(j) for j in range(80)) == \
            Counter(fake.get_str(j) for j in range(80))


def test_add_contrasts_keeps_names_unique():
    fm = FeatureMatrix([NumFeature("N:a", np.arange(10.0))])
    fm.add_contrasts(3, random_state=0)
    assert [f.name for f in fm.data] == [
        "N:a", "N:a:SHUFFLED", "N:a:SHUFFLED2", "N:a:SHUFFLED3"]
    assert all(fm.map[f.name] == i for i, f in enumerate(fm.data))
    for f in fm.data[1:]:
        assert sorted(f.data) == list(range(10))


def test_contrasts_leave_existing_columns_unchanged():
    fm = _random_matrix()
    fm.feature("N:x1").put_missing(7)
    before = [(f.data.copy(), f.missing.copy()) for f in fm.data]
    fm.add_contrasts(5, random_state=1)
    snapshot = [(f.data.copy(), f.missing.copy()) for f in fm.data]
    fm.contrast_all(random_state=2)
    assert len(fm) == 4 + 5 + 9
    for f, (data, missing) in zip(fm.data[:4], before):
        np.testing.assert_array_equal(f.data, data)
        np.testing.assert_array_equal(f.missing, missing)
    for f, (data, missing) in zip(fm.data[:9], snapshot):
        np.testing.assert_array_equal(f.data, data)
        np.testing.assert_array_equal(f.missing, missing)


def test_add_contrasts_rejects_bad_input():
    with pytest.raises(ValueError):
        _random_matrix().add_contrasts(-1)
    with pytest.raises(ValueError):
        FeatureMatrix().add_contrasts(2)
    FeatureMatrix().add_contrasts(0)


def test_impute_missing():
    fm = FeatureMatrix.from_columns(
        {"N:x": [1.0, None, 5.0], "C:c": ["u", "v", "NA"]}, categorical=["C:c"])
    fm.impute_missing()
    assert fm.feature("N:x").data.tolist() == [1.0, 3.0, 5.0]
    assert fm.feature("C:c").get_str(2) == "u"
    assert not any(f.missing_vals() for f in fm.data)


def test_encode_to_num():
    fm = FeatureMatrix.from_columns(
        {"N:x": [1.0, 2.0], "C:c": ["u", "v"]}, categorical=["C:c"])
    out = fm.encode_to_num()
    assert [f.name for f in out.data] == ["N:x", "N:c==u", "N:c==v"]
    assert out.case_labels == fm.case_labels
    assert all(isinstance(f, NumFeature) for f in out.data)
    assert len(fm) == 2


# -----------------------------------------------------------------------------
# AFM reader
# -----------------------------------------------------------------------------
AFM = (
    "id\tc1\tc2\tc3\n"
    "N:age\t1\t2.5\tNA\n"
    "C:color\tred\tblue\tred\n"
    "B:flag\t1\t0\t?\n"
)


def test_parse_afm():
    fm = parse_afm(io.StringIO(AFM))
    assert fm.case_labels == ["c1", "c2", "c3"]
    assert [f.name for f in fm.data] == ["N:age", "C:color", "B:flag"]
    age = fm.feature("N:age")
    assert isinstance(age, NumFeature)
    assert age.data[:2].tolist() == [1.0, 2.5]
    assert age.missing.tolist() == [False, False, True]
    color = fm.feature("C:color")
    assert isinstance(color, CatFeature)
    assert color.n_cats() == 2
    flag = fm.feature("B:flag")
    assert isinstance(flag, CatFeature)
    assert flag.missing.tolist() == [False, False, True]


def test_parse_afm_empty_and_header_only():
    assert len(parse_afm(io.StringIO(""))) == 0
    fm = parse_afm(io.StringIO("id\ta\tb\n"))
    assert len(fm) == 0
    assert fm.case_labels == ["a", "b"]
    assert fm.n_cases() == 2


def test_parse_afm_skips_blank_rows():
    fm = parse_afm(io.StringIO("id\ta\tb\n\nN:x\t1\t2\n"))
    assert [f.name for f in fm.data] == ["N:x"]


def test_parse_afm_stops_at_malformed_row(caplog):
    text = AFM.replace("C:color\tred\tblue\tred\n", "C:color\tred\tblue\n")
    with caplog.at_level(logging.ERROR, logger="forestsplit.matrix"):
        fm = parse_afm(io.StringIO(text))
    assert [f.name for f in fm.data] == ["N:age"]
    assert "Error reading AFM line 3" in caplog.text


def test_parse_afm_stops_at_duplicate_name(caplog):
    text = AFM + "N:age\t3\t4\t5\n"
    with caplog.at_level(logging.ERROR, logger="forestsplit.matrix"):
        fm = parse_afm(io.StringIO(text))
    assert len(fm) == 3
    assert "duplicate" in caplog.text


def test_load_afm(tmp_path):
    path = tmp_path / "data.afm"
    path.write_text(AFM)
    fm = load_afm(str(path))
    assert len(fm) == 3
    assert fm.n_cases() == 3
