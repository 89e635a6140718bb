import math

import pytest

from bookstore.services.similarity import Candidate, cosine_similarity, rank


def test_identical_vectors_score_one():
    a = [0.3, -1.2, 4.0, 0.0]
    assert cosine_similarity(a, a) == pytest.approx(1.0)


def test_similarity_is_symmetric():
    a, b = [1.0, 2.0, 3.0], [-2.0, 0.5, 1.0]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_known_values():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 1.0], [1.0, 0.0]) == pytest.approx(1 / math.sqrt(2))


def test_scale_does_not_matter():
    assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "a,b",
    [
        (None, [1.0, 2.0]),
        ([1.0, 2.0], None),
        (None, None),
        ([1.0, 2.0], [1.0, 2.0, 3.0]),
        ([0.0, 0.0], [1.0, 2.0]),
        ([1.0, 2.0], [0.0, 0.0]),
        ([], []),
    ],
)
def test_degenerate_pairs_score_exactly_zero(a, b):
    assert cosine_similarity(a, b) == 0.0


def test_rank_sorts_descending_and_truncates():
    query = [1.0, 0.0]
    cands = [
        Candidate(1, [0.0, 1.0], "orthogonal"),
        Candidate(2, [1.0, 0.1], "close"),
        Candidate(3, [-1.0, 0.0], "opposite"),
        Candidate(4, [1.0, 1.0], "diagonal"),
    ]
    out = rank(query, cands, limit=3)
    assert [r.book_id for r in out] == [2, 4, 1]
    assert len(out) == 3
    scores = [r.score for r in out]
    assert scores == sorted(scores, reverse=True)
    assert out[0].title == "close"


def test_rank_ties_keep_candidate_order():
    query = [1.0, 1.0]
    cands = [Candidate(i, [2.0, 2.0]) for i in (7, 3, 9, 1)]
    assert [r.book_id for r in rank(query, cands, limit=10)] == [7, 3, 9, 1]


def test_rank_scores_bad_candidates_as_zero_without_raising():
    query = [1.0, 0.0]
    cands = [
        Candidate(1, [1.0, 0.0, 0.0]),
        Candidate(2, None),
        Candidate(3, [0.5, 0.0]),
        Candidate(4, [-1.0, 0.0]),
    ]
    out = rank(query, cands, limit=10)
    assert [r.book_id for r in out] == [3, 1, 2, 4]
    assert out[1].score == 0.0 and out[2].score == 0.0


def test_rank_limit_larger_than_candidates():
    assert len(rank([1.0], [Candidate(1, [1.0])], limit=5)) == 1


def test_rank_non_positive_limit_is_empty():
    assert rank([1.0], [Candidate(1, [1.0])], limit=0) == []


def test_scored_book_to_dict():
    out = rank([1.0], [Candidate(5, [2.0], "Five")], limit=1)
    assert out[0].to_dict() == {"book_id": 5, "score": pytest.approx(1.0), "title": "Five"}
