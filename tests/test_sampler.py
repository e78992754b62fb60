import io
import os

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from ldadmm import ModelConfig, run_model, GibbsDMM, GibbsLDA, GibbsSampler, CheckpointWriter, SamplingError
from ldadmm.corpus import read_corpus

from conftest import SHORT_DOCS, write_lines


def read_rows(path, dtype=float):
    with io.open(path, 'r', encoding='utf-8') as f:
        return [np.array([dtype(v) for v in line.split()]) for line in f]


def test_short_corpus_end_to_end(tmp_path):
    corpus_path = write_lines(tmp_path / 'short.txt', SHORT_DOCS)
    config = ModelConfig(model='DMM', corpus=corpus_path, n_topic=2, alpha=0.1, beta=0.1, n_iter=1,
                         n_top_words=2, name='short', seed=5)
    model = run_model(config)

    assert model.corpus.vocab.word2id == {'a': 0, 'b': 1, 'c': 2}
    model.stats.check_invariants()
    assert model.stats.DT.sum() == 3
    assert_array_equal(model.stats.TW.sum(0), [3, 2, 3])

    out = lambda suffix: str(tmp_path / ('short.' + suffix))
    for suffix in ('paras', 'vocabulary', 'topicAssignments', 'topWords', 'phi', 'theta', 'WTcount', 'IDcorpus'):
        assert os.path.exists(out(suffix)), suffix

    theta = read_rows(out('theta'))
    assert len(theta) == 3
    for row in theta:
        assert abs(row.sum() - 1.) < 1e-9

    with io.open(out('vocabulary'), encoding='utf-8') as f:
        assert f.read() == 'a 0\nb 1\nc 2\n'
    with io.open(out('IDcorpus'), encoding='utf-8') as f:
        assert f.read() == '0 0 1 \n1 2 \n0 2 2 \n'
    with io.open(out('topWords'), encoding='utf-8') as f:
        top_words = [line for line in f.read().split('\n') if line]
    assert [line.split(':')[0] for line in top_words] == ['Topic0', 'Topic1']
    assert all(len(line.split()) == 3 for line in top_words)

    assignments = read_rows(out('topicAssignments'), int)
    for row, topic in zip(assignments, model.stats.z):
        assert np.all(row == topic)
    assert_array_equal(read_rows(out('WTcount'), int), model.stats.TW)
    assert_allclose(read_rows(out('phi')), model.topic_word_prob())


def test_parameters_record(tmp_path, news_path):
    config = ModelConfig(model='LDA', corpus=news_path, n_topic=3, alpha=0.1, beta=0.01, n_iter=2,
                         n_top_words=5, name='news', save_step=1, seed=1, output_dir=str(tmp_path / 'out'))
    run_model(config)
    with io.open(str(tmp_path / 'out' / 'news.paras'), encoding='utf-8') as f:
        assert f.read() == ('-model\tLDA\n-corpus\t%s\n-ntopics\t3\n-alpha\t0.1\n-beta\t0.01\n'
                            '-niters\t2\n-twords\t5\n-name\tnews\n-sstep\t1\n' % news_path)


@pytest.mark.parametrize('model', ['LDA', 'DMM'])
def test_seeded_runs_write_identical_assignments(tmp_path, news_path, model):
    contents = list()
    for run in ('first', 'second'):
        config = ModelConfig(model=model, corpus=news_path, n_topic=3, n_iter=5, name='news', seed=2024,
                             output_dir=str(tmp_path / run))
        run_model(config)
        with io.open(str(tmp_path / run / 'news.topicAssignments'), 'rb') as f:
            contents.append(f.read())
    assert contents[0] == contents[1]


def test_save_step(tmp_path, news_path):
    config = ModelConfig(model='DMM', corpus=news_path, n_topic=2, n_iter=5, name='news', save_step=2, seed=0,
                         output_dir=str(tmp_path))
    run_model(config)
    names = set(os.listdir(str(tmp_path)))
    for suffix in ('topWords', 'theta', 'topicAssignments', 'phi'):
        assert 'news-2.' + suffix in names
        assert 'news-4.' + suffix in names
        assert 'news.' + suffix in names
        assert 'news-5.' + suffix not in names
    assert 'news-2.paras' not in names


@pytest.mark.parametrize('model_class', [GibbsLDA, GibbsDMM])
def test_warm_start_reproduces_counts(tmp_path, news_path, model_class):
    corpus = read_corpus(news_path)
    model = model_class(3, seed=8).fit(corpus, max_iter=4)
    writer = CheckpointWriter(str(tmp_path))
    writer.write_assignments(model.assignments(), 'warm')

    with io.open(str(tmp_path / 'warm.topicAssignments'), encoding='utf-8') as f:
        restarted = model_class(3, seed=9)
        restarted.initialize(corpus, f)
    assert_array_equal(restarted.stats.TW, model.stats.TW)
    assert_array_equal(restarted.stats.sum_T, model.stats.sum_T)
    assert_array_equal(restarted.stats.DT, model.stats.DT)


def test_warm_start_from_config(tmp_path, news_path):
    first = run_model(ModelConfig(model='DMM', corpus=news_path, n_topic=4, n_iter=3, name='a', seed=1,
                                  output_dir=str(tmp_path)))
    config = ModelConfig(model='DMM', corpus=news_path, n_topic=2, n_iter=0, name='b', seed=1,
                         init_file=str(tmp_path / 'a.topicAssignments'), output_dir=str(tmp_path))
    second = run_model(config)
    assert_array_equal(second.stats.z, first.stats.z % 2)
    with io.open(str(tmp_path / 'b.paras'), encoding='utf-8') as f:
        assert '-initFile\t%s\n' % config.init_file in f.read()


@pytest.mark.parametrize('model_class', [GibbsLDA, GibbsDMM])
def test_checkpoint_does_not_change_state(tmp_path, news_corpus, model_class):
    model = model_class(3, seed=4).fit(news_corpus, max_iter=2)
    TW, DT = model.stats.TW.copy(), model.stats.DT.copy()
    assignments = [topics.copy() for topics in model.assignments()]
    rng_state = model.rng.get_state()

    model.checkpoint(CheckpointWriter(str(tmp_path)), 'snapshot')
    model.checkpoint(CheckpointWriter(str(tmp_path)), 'snapshot')

    assert_array_equal(model.stats.TW, TW)
    assert_array_equal(model.stats.DT, DT)
    for a, b in zip(model.assignments(), assignments):
        assert_array_equal(a, b)
    assert_array_equal(model.rng.get_state()[1], rng_state[1])
    assert model.rng.get_state()[2] == rng_state[2]


def test_sampler_states_and_callback(tmp_path, news_corpus):
    model = GibbsLDA(2, seed=0)
    model.initialize(news_corpus)
    seen = list()
    sampler = GibbsSampler(model, 3, callback=lambda m: seen.append(m.stats.DT.sum()))
    assert sampler.state == 'initialized'
    sampler.run(CheckpointWriter(str(tmp_path)), ModelConfig(model='LDA', corpus='news.txt', name='cb'))
    assert sampler.state == 'completed'
    assert sampler.iteration == 3
    assert seen == [news_corpus.n_word] * 3


def test_sampling_error_stops_the_run(tmp_path, news_corpus):
    model = GibbsDMM(2, alpha=-10., beta=0.01, seed=0)
    model.initialize(news_corpus)
    sampler = GibbsSampler(model, 3, verbose=False)
    with pytest.raises(SamplingError):
        sampler.run(CheckpointWriter(str(tmp_path)), ModelConfig(model='DMM', corpus='news.txt', name='bad'))
    assert sampler.state == 'failed'
    assert sampler.iteration == 0
    assert not os.path.exists(str(tmp_path / 'bad.theta'))
    assert os.path.exists(str(tmp_path / 'bad.paras'))


def test_write_failure_propagates(tmp_path, news_corpus):
    blocker = tmp_path / 'file'
    blocker.write_text(u'')
    model = GibbsLDA(2, seed=0)
    model.initialize(news_corpus)
    sampler = GibbsSampler(model, 1)
    with pytest.raises(OSError):
        sampler.run(CheckpointWriter(str(blocker / 'out')), ModelConfig(model='LDA', corpus='news.txt'))
    assert sampler.state == 'failed'
