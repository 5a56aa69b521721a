import numpy as np
from forestsplit import BestSplitAllocs, FeatureMatrix, GiniTarget, RegressionTarget


def test_for_matrix_sizing():
    fm = FeatureMatrix.from_columns(
        {"C:x": list("abcde"), "C:y": list("AABBA"), "N:z": [1, 2, 3, 4, 5]},
        categorical=["C:x", "C:y"])
    allocs = BestSplitAllocs.for_matrix(fm, GiniTarget(fm.feature("C:y")))
    assert allocs.counters.shape == (3, 5)
    assert allocs.counter.shape == (5,)
    assert allocs.stats.shape == (3, 3)
    assert allocs.sorted_cases.size == 5

    numeric_only = FeatureMatrix.from_columns({"N:z": [1, 2]})
    allocs = BestSplitAllocs.for_matrix(numeric_only, RegressionTarget(numeric_only.feature("N:z")))
    assert allocs.max_cats == 1


def test_case_buffer_grows_for_repeated_cases():
    allocs = BestSplitAllocs(4, 2)
    assert allocs.case_buffer(3).size == 3
    buf = allocs.case_buffer(9)
    assert buf.size == 9
    assert allocs.sorted_cases.size == 9
    assert allocs.case_buffer(2).size == 2


def test_snapshot_and_restore():
    allocs = BestSplitAllocs(4, 3)
    allocs.counters[0] = [1, 2, 3]
    allocs.stats[1] = [4, 5, 6]
    state = allocs.snapshot()
    allocs.counters[:] = 7
    allocs.stats[:] = 8
    allocs.restore(state)
    assert allocs.counters[0].tolist() == [1, 2, 3]
    assert allocs.stats[1].tolist() == [4, 5, 6]
    assert allocs.counters[2].tolist() == [0, 0, 0]
    allocs.reset()
    assert not allocs.counters.any() and not allocs.stats.any()


def test_seeded_generator_is_reproducible():
    a = BestSplitAllocs(10, 2, random_state=42)
    b = BestSplitAllocs(10, 2, random_state=42)
    assert np.array_equal(a.rng.permutation(10), b.rng.permutation(10))
    rng = np.random.RandomState(0)
    assert BestSplitAllocs(1, 1, random_state=rng).rng is rng
