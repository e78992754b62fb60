import numpy as np
from scipy.special import gammaln

from .base import LDAStats
from .formatted_logger import formatted_logger
from .utils import sampling_from_dist, get_random_state

logger = formatted_logger('GibbsLDA')


def lda_weights(word, DT_d, TW, sum_T, alpha, beta, beta_sum):
    """ unnormalised probability of each topic for one token,
    (DT[d, t] + alpha) * (TW[t, w] + beta) / (sum_T[t] + beta_sum)

    Counts must already exclude the token itself.
    """
    return (DT_d + alpha) * (TW[:, word] + beta) / (sum_T + beta_sum)


class GibbsLDA:
    """
    Latent dirichlet allocation,
    Blei, David M and Ng, Andrew Y and Jordan, Michael I, 2003

    Latent Dirichlet allocation with collapsed Gibbs sampling

    Attributes
    ----------
    stats: LDAStats
        topic assignment of each word token and the counts derived from them
    """

    model_name = 'LDA'

    def __init__(self, n_topic, alpha=0.1, beta=0.01, seed=None, **kwargs):
        self.n_topic = n_topic
        self.alpha = alpha
        self.beta = beta
        self.alpha_sum = n_topic * alpha
        self.rng = get_random_state(seed)
        self.logger = kwargs.pop('logger', logger)

        self.corpus = None
        self.stats = None
        self.beta_sum = None

    def initialize(self, corpus, assignment_lines=None):
        """

        Parameters
        ----------
        corpus: Corpus
        assignment_lines: iterable of str, optional
            topic of every token, one line per document

        """
        self.corpus = corpus
        self.beta_sum = corpus.n_voca * self.beta
        self.stats = LDAStats(corpus, self.n_topic)

        self.logger.info('Corpus size: %d docs, %d words', corpus.n_doc, corpus.n_word)
        self.logger.info('Vocabulary size: %d', corpus.n_voca)
        self.logger.info('Number of topics: %d, alpha: %s, beta: %s', self.n_topic, self.alpha, self.beta)
        if assignment_lines is None:
            self.logger.info('Randomly initializing topic assignments ...')
            self.stats.random_init(self.rng)
        else:
            self.logger.info('Reading topic-assignment file ...')
            self.stats.assignment_init(assignment_lines)

    def run_sweep(self):
        stats = self.stats
        for di in range(self.corpus.n_doc):
            doc = self.corpus.docs[di]
            for wi in range(len(doc)):
                word = doc[wi]
                stats.decrement(di, wi)

                # compute conditional probability of a topic of current word wi
                prob = lda_weights(word, stats.DT[di], stats.TW, stats.sum_T, self.alpha, self.beta, self.beta_sum)

                stats.increment(di, wi, sampling_from_dist(prob, self.rng))

    def fit(self, corpus, max_iter=100, assignment_lines=None):
        """ Gibbs sampling for LDA

        Parameters
        ----------
        corpus: Corpus
        max_iter: int
            maximum number of Gibbs sampling iteration

        """
        self.initialize(corpus, assignment_lines)
        for iteration in range(max_iter):
            self.run_sweep()
        return self

    def checkpoint(self, writer, name):
        writer.write_checkpoint(self, name)

    def topic_word_count(self):
        return self.stats.TW

    def topic_word_prob(self):
        return (self.stats.TW + self.beta) / (self.stats.sum_T + self.beta_sum)[:, np.newaxis]

    def doc_topic_prob(self):
        DT = self.stats.DT
        return (DT + self.alpha) / (DT.sum(1) + self.alpha_sum)[:, np.newaxis]

    def assignments(self):
        return self.stats.assignments()

    def log_likelihood(self):
        """
        likelihood function
        """
        DT, TW, sum_T = self.stats.DT, self.stats.TW, self.stats.sum_T
        n_doc, n_voca = self.corpus.n_doc, self.corpus.n_voca
        ll = n_doc * gammaln(self.alpha_sum)
        ll -= n_doc * self.n_topic * gammaln(self.alpha)
        ll += self.n_topic * gammaln(self.beta_sum)
        ll -= self.n_topic * n_voca * gammaln(self.beta)

        ll += gammaln(DT + self.alpha).sum() - gammaln(DT.sum(1) + self.alpha_sum).sum()
        ll += gammaln(TW + self.beta).sum() - gammaln(sum_T + self.beta_sum).sum()

        return ll
