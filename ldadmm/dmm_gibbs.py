import numpy as np
from scipy.special import gammaln

from .base import DMMStats
from .formatted_logger import formatted_logger
from .utils import sampling_from_dist, get_random_state, log_normalize

logger = formatted_logger('GibbsDMM')


def dmm_log_weights(doc, ranks, DT, TW, sum_T, alpha, beta, beta_sum):
    """ unnormalised log probability of each topic for one document

    weight(t) = (DT[t] + alpha) * prod_i (TW[t, w_i] + beta + r_i - 1) / (sum_T[t] + beta_sum + i - 1)

    Repeated tokens of one word type are successive draws from the same topic, so
    each factor sees the counts left by the tokens before it. Counts must already
    exclude the document itself. The product is summed in log space; a long document
    would otherwise underflow every topic to zero.

    Parameters
    ----------
    doc: ndarray
        word ids of the document
    ranks: ndarray
        occurrence rank of each token in the document (1-based)
    DT: ndarray, shape (n_topic)
        number of documents assigned to each topic
    TW: ndarray, shape (n_topic, n_voca)
    sum_T: ndarray, shape (n_topic)

    Returns
    -------
    log_prob: ndarray, shape (n_topic)
        -inf where a factor is zero, nan where one is negative
    """
    numer = TW[:, doc] + beta + ranks - 1
    denom = sum_T[:, np.newaxis] + beta_sum + np.arange(len(doc))
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.log(DT + alpha) + np.log(numer / denom).sum(1)


def dmm_doc_topic_prob(docs, DT, alpha, phi):
    """ topic mixture of each document, (DT[t] + alpha) * prod_i phi[t, w_i] normalised over topics

    The product is taken in log space so long documents do not underflow.
    """
    log_phi = np.log(phi)
    log_prior = np.log(DT + alpha)
    theta = np.zeros([len(docs), len(DT)])
    for di, doc in enumerate(docs):
        theta[di] = log_normalize(log_prior + log_phi[:, doc].sum(1))
    return theta


class GibbsDMM:
    """
    Dirichlet multinomial mixture model for short texts,
    Yin, Jianhua and Wang, Jianyong, KDD 2014

    One topic per document, inferred with collapsed Gibbs sampling.

    Attributes
    ----------
    n_topic: int
        a number of topics to be inferred through the Gibbs sampling
    alpha: float
        symmetric parameter of Dirichlet prior for document-topic distribution
    beta: float
        symmetric parameter of Dirichlet prior for topic-word distribution
    stats: DMMStats
        document-topic and topic-word counts, created by `initialize`
    """

    model_name = 'DMM'

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
        """ build the counts from a random draw, or from `assignment_lines` when given """
        self.corpus = corpus
        self.beta_sum = corpus.n_voca * self.beta
        self.stats = DMMStats(corpus, self.n_topic)

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
        """ resample the topic of every document, in corpus order """
        stats = self.stats
        for di in range(self.corpus.n_doc):
            stats.decrement(di)
            log_prob = dmm_log_weights(self.corpus.docs[di], self.corpus.ranks[di], stats.DT, stats.TW, stats.sum_T,
                                       self.alpha, self.beta, self.beta_sum)
            stats.increment(di, sampling_from_dist(log_normalize(log_prob), self.rng))

    def fit(self, corpus, max_iter=100, assignment_lines=None):
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
        return dmm_doc_topic_prob(self.corpus.docs, self.stats.DT, self.alpha, self.topic_word_prob())

    def assignments(self):
        return self.stats.assignments()

    def log_likelihood(self):
        """
        joint log likelihood of the words and the document topics
        """
        DT, TW, sum_T = self.stats.DT, self.stats.TW, self.stats.sum_T
        ll = gammaln(self.alpha_sum) - gammaln(self.corpus.n_doc + self.alpha_sum)
        ll += (gammaln(DT + self.alpha) - gammaln(self.alpha)).sum()
        ll += self.n_topic * gammaln(self.beta_sum) - gammaln(sum_T + self.beta_sum).sum()
        ll += (gammaln(TW + self.beta) - gammaln(self.beta)).sum()
        return ll
