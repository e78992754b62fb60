import numpy as np
import pytest
from numpy.testing import assert_array_equal

from ldadmm.base import TopicWordStats, DMMStats, LDAStats
from ldadmm.errors import ConsistencyError


def test_dmm_random_init_invariants(news_corpus):
    stats = DMMStats(news_corpus, 3)
    stats.random_init(np.random.RandomState(0))
    stats.check_invariants()
    assert stats.DT.sum() == news_corpus.n_doc
    assert_array_equal(stats.TW.sum(0), news_corpus.word_count())
    assert_array_equal(stats.sum_T, stats.TW.sum(1))


def test_lda_random_init_invariants(news_corpus):
    stats = LDAStats(news_corpus, 3)
    stats.random_init(np.random.RandomState(0))
    stats.check_invariants()
    assert_array_equal(stats.DT.sum(1), [len(doc) for doc in news_corpus.docs])
    assert_array_equal(stats.TW.sum(0), news_corpus.word_count())


def test_dmm_decrement_increment(short_corpus):
    stats = DMMStats(short_corpus, 2)
    stats.assignment_init(['0 0 0', '1 1', '0 0 0'])
    assert_array_equal(stats.DT, [2, 1])
    assert_array_equal(stats.TW, [[3, 1, 2], [0, 1, 1]])

    stats.decrement(0)
    assert_array_equal(stats.DT, [1, 1])
    assert_array_equal(stats.TW, [[1, 0, 2], [0, 1, 1]])
    assert_array_equal(stats.sum_T, [3, 2])

    stats.increment(0, 1)
    assert_array_equal(stats.z, [1, 1, 0])
    assert_array_equal(stats.TW, [[1, 0, 2], [2, 2, 1]])
    stats.check_invariants()


def test_lda_decrement_increment(short_corpus):
    stats = LDAStats(short_corpus, 2)
    stats.assignment_init(['0 1 0', '1 1', '0 0 1'])
    stats.decrement(0, 1)
    assert_array_equal(stats.DT[0], [2, 0])
    assert stats.TW[1, 1] == 1
    stats.increment(0, 1, 0)
    assert_array_equal(stats.DT[0], [3, 0])
    assert_array_equal(stats.assignments()[0], [0, 0, 0])
    stats.check_invariants()


def test_unpaired_calls_are_rejected(short_corpus):
    stats = DMMStats(short_corpus, 2)
    stats.random_init(np.random.RandomState(1))
    with pytest.raises(RuntimeError):
        stats.increment(0, 1)
    stats.decrement(0)
    with pytest.raises(RuntimeError):
        stats.decrement(1)
    with pytest.raises(RuntimeError):
        stats.increment(1, 0)


def test_topic_ids_taken_modulo_topic_count(short_corpus):
    stats = LDAStats(short_corpus, 2)
    stats.assignment_init(['2 3 4', '5 7', '0 1 9'])
    assert_array_equal(stats.assignments()[0], [0, 1, 0])
    assert_array_equal(stats.assignments()[2], [0, 1, 1])


@pytest.mark.parametrize('lines', [
    ['0 0 0', '1 1'],
    ['0 0 0', '1 1', '0 0 0', '1'],
    ['0 0 0', '1 1 1', '0 0 0'],
    ['0 0', '1 1', '0 0 0'],
    ['0 0 0', 'x y', '0 0 0'],
])
def test_inconsistent_assignment_file(short_corpus, lines):
    with pytest.raises(ConsistencyError):
        DMMStats(short_corpus, 2).assignment_init(lines)
    with pytest.raises(ConsistencyError):
        LDAStats(short_corpus, 2).assignment_init(lines)


def test_frozen_topic_word_counts(short_corpus):
    frozen = TopicWordStats(2, 3, np.array([[4, 0, 1], [0, 2, 2]]), frozen=True)
    assert_array_equal(frozen.sum_T, [5, 4])
    with pytest.raises(RuntimeError):
        frozen.add_token(0, 0)

    stats = DMMStats(short_corpus, 2, topic_word=frozen)
    stats.random_init(np.random.RandomState(3))
    stats.decrement(1)
    stats.increment(1, 0)
    assert_array_equal(stats.TW, [[4, 0, 1], [0, 2, 2]])
    stats.check_invariants()


def test_topic_word_shape_mismatch():
    with pytest.raises(ConsistencyError):
        TopicWordStats(2, 3, np.zeros([2, 4], dtype=int))
