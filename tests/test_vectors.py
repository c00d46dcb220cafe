import pytest

from codetect.vectors import (
    ScoredItem,
    cosine_similarity,
    dot_product,
    euclidean_distance,
    magnitude,
    normalize,
    top_k_by_cosine_similarity,
)


@pytest.mark.parametrize(
    "a, b, want",
    [
        ([1, 0, 0], [1, 0, 0], 1.0),
        ([1, 0, 0], [0, 1, 0], 0.0),
        ([1, 0, 0], [-1, 0, 0], -1.0),
        ([1, 2, 3], [1, 2, 3], 1.0),
        ([1, 2, 3], [1, 2], 0.0),
        ([], [], 0.0),
        ([0, 0, 0], [1, 2, 3], 0.0),
    ],
    ids=[
        "identical",
        "orthogonal",
        "opposite",
        "similar",
        "different-lengths",
        "empty",
        "zero-vector",
    ],
)
def test_cosine_similarity(a, b, want):
    assert cosine_similarity(a, b) == pytest.approx(want, abs=1e-4)


@pytest.mark.parametrize(
    "a, b, want",
    [
        ([1, 2, 3], [4, 5, 6], 32.0),
        ([1, 0], [0, 1], 0.0),
        ([1, 2], [1, 2, 3], 0.0),
    ],
)
def test_dot_product(a, b, want):
    assert dot_product(a, b) == pytest.approx(want, abs=1e-4)


@pytest.mark.parametrize(
    "v, want",
    [
        ([1, 0, 0], 1.0),
        ([3, 4], 5.0),
        ([0, 0, 0], 0.0),
    ],
)
def test_magnitude(v, want):
    assert magnitude(v) == pytest.approx(want, abs=1e-4)


def test_normalize_gives_unit_vector():
    result = normalize([3, 4])
    assert magnitude(result) == pytest.approx(1.0, abs=1e-4)
    assert result == pytest.approx([0.6, 0.8])


def test_normalize_zero_vector_unchanged():
    assert normalize([0, 0, 0]) == [0, 0, 0]


@pytest.mark.parametrize(
    "a, b, want",
    [
        ([1, 2, 3], [1, 2, 3], 0.0),
        ([0, 0], [3, 4], 5.0),
        ([1, 2], [1, 2, 3], 0.0),
    ],
)
def test_euclidean_distance(a, b, want):
    assert euclidean_distance(a, b) == pytest.approx(want, abs=1e-4)


QUERY = [1, 0, 0]
VECTORS = [
    [1, 0, 0],
    [0, 1, 0],
    [0.7, 0.7, 0],
    [-1, 0, 0],
]


def test_top_k_returns_k_results():
    assert len(top_k_by_cosine_similarity(QUERY, VECTORS, 2)) == 2


def test_top_k_sorted_descending():
    results = top_k_by_cosine_similarity(QUERY, VECTORS, 4)
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert [r.index for r in results] == [0, 2, 1, 3]


def test_top_k_highest_first():
    results = top_k_by_cosine_similarity(QUERY, VECTORS, 1)
    assert results[0].index == 0
    assert results[0].score == pytest.approx(1.0, abs=1e-4)


def test_top_k_larger_than_input():
    assert len(top_k_by_cosine_similarity(QUERY, VECTORS, 10)) == len(VECTORS)


def test_top_k_empty_vectors():
    assert top_k_by_cosine_similarity(QUERY, [], 5) == []


def test_top_k_non_positive_k():
    assert top_k_by_cosine_similarity(QUERY, VECTORS, 0) == []


def test_scored_item_equality():
    assert top_k_by_cosine_similarity([1, 0], [[2, 0]], 1) == [ScoredItem(0, 1.0)]