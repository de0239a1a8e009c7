import io

import numpy as np
import pytest

from sparsemcmc.csc import CscMatrix, SparseError, TripletMatrix, load_triplet
from sparsemcmc.perm import pinv


@pytest.fixture
def dense():
    return np.array([[1.0, 0.0, -2.0], [0.0, 3.0, 0.5], [4.0, -1.0, 0.0]])


def test_from_dense_round_trip(dense):
    a = CscMatrix.from_dense(dense)
    assert np.array_equal(a.to_dense(), dense)
    assert a.nnz == dense.size


def test_from_dense_rejects_vectors():
    with pytest.raises(SparseError):
        CscMatrix.from_dense([1.0, 2.0])


def test_constructor_validates_pointers():
    with pytest.raises(SparseError):
        CscMatrix(2, 2, [0, 1], [0], [1.0])
    with pytest.raises(SparseError):
        CscMatrix(2, 1, [0, 1], [5], [1.0])


def test_transpose(dense):
    a = CscMatrix.from_dense(dense)
    assert np.array_equal(a.transpose(True).to_dense(), dense.T)
    pattern = a.transpose(False)
    assert pattern.x is None
    assert pattern.i == a.transpose(True).i


def test_multiply_matches_numpy(dense):
    b = np.array([[2.0, 1.0], [0.0, -1.0], [1.0, 3.0]])
    c = CscMatrix.from_dense(dense).multiply(CscMatrix.from_dense(b))
    assert np.allclose(c.to_dense(), dense @ b)
    assert (c.m, c.n) == (3, 2)


def test_multiply_dense_keeps_row_order(dense):
    c = CscMatrix.from_dense(dense).multiply(CscMatrix.from_dense(dense))
    for j in range(c.n):
        assert c.i[c.p[j]:c.p[j + 1]] == list(range(c.m))


def test_multiply_dimension_mismatch(dense):
    with pytest.raises(SparseError):
        CscMatrix.from_dense(dense).multiply(CscMatrix.from_dense(np.ones((2, 2))))


def test_norm(dense):
    assert CscMatrix.from_dense(dense).norm() == pytest.approx(np.abs(dense).sum(axis=0).max())


def test_norm_needs_values(dense):
    with pytest.raises(SparseError):
        CscMatrix.from_dense(dense).transpose(False).norm()


def test_gaxpy(dense):
    x = [1.0, -2.0, 0.5]
    y = [3.0, 0.0, 1.0]
    result = CscMatrix.from_dense(dense).gaxpy(x, y)
    assert np.allclose(result, np.array(y) + dense @ np.array(x))
    assert y == [3.0, 0.0, 1.0]


def test_sum_duplicates():
    a = CscMatrix(3, 2, [0, 3, 4], [0, 2, 0, 1], [1.0, 2.0, 3.0, 4.0])
    before = a.to_dense()
    a.sum_duplicates()
    assert np.array_equal(a.to_dense(), before)
    assert a.nnz == 3
    column0 = a.i[a.p[0]:a.p[1]]
    assert len(set(column0)) == len(column0)


def test_fkeep_upper_triangle(dense):
    a = CscMatrix.from_dense(dense)
    kept = a.fkeep(lambda i, j, _v: i <= j)
    assert kept == a.nnz
    assert np.array_equal(a.to_dense(), np.triu(dense))


def test_droptol(dense):
    a = CscMatrix.from_dense(dense)
    a.droptol(1.0)
    assert all(abs(v) > 1.0 for v in a.x)
    assert np.array_equal(a.to_dense(), np.where(np.abs(dense) > 1.0, dense, 0.0))


def test_dropzeros(dense):
    a = CscMatrix.from_dense(dense)
    a.dropzeros()
    assert a.nnz == np.count_nonzero(dense)
    assert np.array_equal(a.to_dense(), dense)


def test_permute(dense):
    p = [2, 0, 1]
    q = [1, 2, 0]
    c = CscMatrix.from_dense(dense).permute(pinv(p), q, True)
    assert np.array_equal(c.to_dense(), dense[np.ix_(p, q)])


def test_permute_identity(dense):
    a = CscMatrix.from_dense(dense)
    assert a.permute(None, None, True) == a


def test_format_header_and_brief():
    big = np.arange(1.0, 26.0).reshape(5, 5)
    a = CscMatrix.from_dense(big)
    full = a.format(False)
    short = a.format(True)
    assert full.startswith(f"{a.m}-by-{a.n}, nzmax: {a.nnz} nnz: {a.nnz}")
    assert short.rstrip("\n").endswith("  ...")
    assert len(short.splitlines()) < len(full.splitlines())


def test_triplet_entry_grows_dimensions():
    t = TripletMatrix()
    t.entry(4, 1, 2.5)
    t.entry(0, 6, -1.0)
    assert (t.m, t.n) == (5, 7)
    assert t.rows == [4, 0] and t.cols == [1, 6]


def test_triplet_entry_rejects_negative():
    with pytest.raises(SparseError):
        TripletMatrix().entry(-1, 0, 1.0)


def test_triplet_format():
    t = TripletMatrix()
    t.entry(1, 2, 0.5)
    lines = t.format(False).splitlines()
    assert lines[0].startswith("triplet: 2-by-3")
    assert lines[1] == "    1 2 : 0.5"


def test_load_triplet():
    t = load_triplet(io.StringIO("0 0 1.5\n2 1 -3\n"))
    assert t.rows == [0, 2]
    assert t.cols == [0, 1]
    assert t.values == [1.5, -3.0]
    assert (t.m, t.n) == (3, 2)


def test_load_triplet_stops_at_bad_text():
    t = load_triplet(io.StringIO("1 1 2.0\nx 0 1.0\n0 0 5.0\n"))
    assert t.rows == [1]
    assert t.values == [2.0]


def test_load_triplet_negative_index():
    with pytest.raises(SparseError):
        load_triplet(io.StringIO("-1 0 1.0\n"))