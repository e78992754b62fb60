import io

import numpy as np

from .errors import CorpusError, SamplingError


def sampling_from_dist(prob, rng):
    """ Sample index from a list of unnormalised probability distribution

    A threshold is drawn uniformly from [0, sum(prob)) and the first index whose
    cumulative weight exceeds it is returned.

    Parameters
    ----------
    prob: ndarray
        array of unnormalised probability distribution
    rng: numpy.random.RandomState
        random source owned by the caller

    Returns
    -------
    new_topic: return a sampled index
    """
    prob = np.asarray(prob, dtype=float)
    if prob.size == 0:
        raise SamplingError('cannot sample from an empty distribution')
    if not np.all(np.isfinite(prob)) or np.any(prob < 0):
        raise SamplingError('distribution has negative or non-finite weights: %s' % prob)
    c_sum = prob.cumsum()
    if c_sum[-1] <= 0:
        raise SamplingError('distribution has no positive weight: %s' % prob)

    thr = c_sum[-1] * rng.rand()
    new_topic = int(np.searchsorted(c_sum, thr, side='right'))
    # rounding in cumsum may push thr onto the last boundary
    return min(new_topic, prob.size - 1)


def get_random_state(seed=None):
    """ Return a RandomState from a seed, or the given RandomState itself """
    if isinstance(seed, np.random.RandomState):
        return seed
    return np.random.RandomState(seed)


def isfloat(value):
    """
    Check the value is convertable to float value
    """
    try:
        float(value)
        return True
    except ValueError:
        return False


def log_normalize(log_prob_vector):
    """
    returns a probability vector of log probability vector
    """
    log_prob_vector = log_prob_vector - log_prob_vector.max()
    prob = np.exp(log_prob_vector)
    return prob / prob.sum()


def top_word_ids(topic_word_matrix, topic, n_words=20):
    """ word ids of a topic ordered by descending weight; ties keep ascending word id """
    order = np.argsort(-topic_word_matrix[topic], kind='mergesort')
    return order[:n_words]


def format_float(value):
    return repr(float(value))


def format_int(value):
    return '%d' % value


def write_matrix(f, matrix, fmt=format_float):
    """ write each row of `matrix` on its own line, values followed by a space """
    for row in matrix:
        f.write(''.join(fmt(v) + ' ' for v in row))
        f.write('\n')


def write_top_words(f, topic_word_prob, vocab, n_words=20):
    for ti in range(topic_word_prob.shape[0]):
        f.write('Topic%d:' % ti)
        for wi in top_word_ids(topic_word_prob, ti, n_words):
            f.write(' %s(%s)' % (vocab[wi], repr(round(float(topic_word_prob[ti, wi]), 6))))
        f.write('\n\n')


def read_matrix(path, dtype=float):
    """ read a whitespace-separated matrix, one row per line """
    rows = list()
    try:
        with io.open(path, 'r', encoding='utf-8') as f:
            for line_no, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    rows.append([dtype(v) for v in line.split()])
                except ValueError:
                    raise CorpusError('%s:%d: row is not numeric' % (path, line_no))
    except (IOError, UnicodeDecodeError) as e:
        raise CorpusError('cannot read matrix %s: %s' % (path, e))
    if len(set(len(row) for row in rows)) > 1:
        raise CorpusError('%s: rows have different lengths' % path)
    return np.array(rows, dtype=dtype)
