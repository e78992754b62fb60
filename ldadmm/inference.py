import io
import os

import numpy as np
from scipy.special import gammaln

from .base import TopicWordStats, DMMStats, LDAStats
from .config import read_paras
from .corpus import Vocabulary, read_corpus
from .dmm_gibbs import dmm_log_weights, dmm_doc_topic_prob
from .errors import CorpusError, ConsistencyError
from .formatted_logger import formatted_logger
from .utils import sampling_from_dist, get_random_state, log_normalize, read_matrix

logger = formatted_logger('GibbsInference')


class PretrainedModel:
    """ frozen topic-word distribution of a fitted model

    Attributes
    ----------
    config: ModelConfig
        parameters the model was trained with
    vocab: Vocabulary
        training vocabulary; new documents are coded against it
    topic_word: TopicWordStats
        frozen topic-word counts, all zero when only `phi` is known
    phi: ndarray, shape (n_topic, n_voca)
        topic-word probabilities
    has_counts: boolean
        False when the model was loaded from probabilities alone
    """

    def __init__(self, config, vocab, TW=None, phi=None):
        self.config = config
        self.vocab = vocab
        self.n_topic = config.n_topic
        self.alpha = config.alpha
        self.beta = config.beta
        self.beta_sum = len(vocab) * config.beta
        self.has_counts = TW is not None

        if TW is None and phi is None:
            raise ValueError('a pretrained model needs topic-word counts or probabilities')
        if TW is not None:
            self.topic_word = TopicWordStats(self.n_topic, len(vocab), TW, frozen=True)
            phi = (self.topic_word.TW + self.beta) / (self.topic_word.sum_T + self.beta_sum)[:, np.newaxis]
        else:
            self.topic_word = TopicWordStats(self.n_topic, len(vocab), frozen=True)
        self.phi = np.asarray(phi, dtype=float)
        if self.phi.shape != (self.n_topic, len(vocab)):
            raise ConsistencyError('topic-word probabilities have shape %s, expected %s'
                                   % (self.phi.shape, (self.n_topic, len(vocab))))

    @classmethod
    def load(cls, paras_path, logger=logger):
        """ load the model described by a `.paras` record

        Topic-word counts are read from `<name>.WTcount`, or rebuilt from the training
        corpus and `<name>.topicAssignments`; failing both, probabilities are read
        from `<name>.phi`. Files are looked up next to the `.paras` record.
        """
        config = read_paras(paras_path)
        prefix = os.path.join(config.output_dir, config.name)
        vocab = Vocabulary.read(prefix + '.vocabulary')
        logger.info('Loaded pretrained %s model: %d topics, vocabulary size %d',
                    config.model, config.n_topic, len(vocab))

        if os.path.exists(prefix + '.WTcount'):
            logger.info('Reading topic-word counts from %s.WTcount', prefix)
            return cls(config, vocab, TW=read_matrix(prefix + '.WTcount', int))

        corpus_path = cls._training_corpus(config)
        if corpus_path is not None and os.path.exists(prefix + '.topicAssignments'):
            logger.info('Rebuilding topic-word counts from %s and %s.topicAssignments', corpus_path, prefix)
            corpus = read_corpus(corpus_path, vocab)
            stats = LDAStats(corpus, config.n_topic)
            try:
                with io.open(prefix + '.topicAssignments', 'r', encoding='utf-8') as f:
                    stats.assignment_init(f)
            except (IOError, UnicodeDecodeError) as e:
                raise CorpusError('cannot read topic assignments %s.topicAssignments: %s' % (prefix, e))
            return cls(config, vocab, TW=stats.TW)

        if os.path.exists(prefix + '.phi'):
            logger.info('Reading topic-word probabilities from %s.phi', prefix)
            return cls(config, vocab, phi=read_matrix(prefix + '.phi', float))

        raise CorpusError('no topic-word counts or probabilities found for %s' % prefix)

    @staticmethod
    def _training_corpus(config):
        if config.corpus is None:
            return None
        if os.path.exists(config.corpus):
            return config.corpus
        relative = os.path.join(config.output_dir, config.corpus)
        if os.path.exists(relative):
            return relative
        return None


class _BaseInference:
    """ samples document-level topics of new documents against a PretrainedModel

    The topic-word counts are never changed; only the document counts evolve.
    """

    stats_class = None

    def __init__(self, pretrained, seed=None, **kwargs):
        self.pretrained = pretrained
        self.n_topic = pretrained.n_topic
        self.alpha = pretrained.alpha
        self.beta = pretrained.beta
        self.beta_sum = pretrained.beta_sum
        self.alpha_sum = self.n_topic * self.alpha
        self.rng = get_random_state(seed)
        self.logger = kwargs.pop('logger', logger)

        self.corpus = None
        self.stats = None

    def read_corpus(self, path):
        """ code a new corpus against the pretrained vocabulary, dropping unknown words """
        return read_corpus(path, self.pretrained.vocab)

    def initialize(self, corpus, assignment_lines=None):
        if corpus.vocab is not self.pretrained.vocab:
            raise ConsistencyError('the corpus must be coded with the pretrained vocabulary')
        self.corpus = corpus
        self.stats = self.stats_class(corpus, self.n_topic, topic_word=self.pretrained.topic_word)

        self.logger.info('Corpus size: %d docs, %d words', corpus.n_doc, corpus.n_word)
        if assignment_lines is None:
            self.logger.info('Randomly initializing topic assignments ...')
            self.stats.random_init(self.rng)
        else:
            self.logger.info('Reading topic-assignment file ...')
            self.stats.assignment_init(assignment_lines)

    def fit(self, corpus, max_iter=100):
        self.initialize(corpus)
        for iteration in range(max_iter):
            self.run_sweep()
        return self

    def checkpoint(self, writer, name):
        writer.write_checkpoint(self, name)

    def topic_word_count(self):
        if self.pretrained.has_counts:
            return self.pretrained.topic_word.TW
        return None

    def topic_word_prob(self):
        return self.pretrained.phi

    def assignments(self):
        return self.stats.assignments()

    def _word_log_likelihood(self):
        log_phi = np.log(self.pretrained.phi)
        return sum(log_phi[topics, doc].sum() for doc, topics in zip(self.corpus.docs, self.assignments()))


class GibbsDMMInference(_BaseInference):
    """ topic of each new document under a pretrained DMM

    With topic-word counts the same sequential likelihood as training is used, so repeated
    words see the counts left by earlier ones. With probabilities alone each token
    contributes phi[t, w].
    """

    model_name = 'DMMinf'
    stats_class = DMMStats

    def run_sweep(self):
        stats = self.stats
        pretrained = self.pretrained
        log_phi = np.log(pretrained.phi)
        for di in range(self.corpus.n_doc):
            doc = self.corpus.docs[di]
            stats.decrement(di)
            if pretrained.has_counts:
                log_prob = dmm_log_weights(doc, self.corpus.ranks[di], stats.DT, stats.TW, stats.sum_T,
                                           self.alpha, self.beta, self.beta_sum)
            else:
                with np.errstate(divide='ignore', invalid='ignore'):
                    log_prob = np.log(stats.DT + self.alpha) + log_phi[:, doc].sum(1)
            stats.increment(di, sampling_from_dist(log_normalize(log_prob), self.rng))

    def doc_topic_prob(self):
        return dmm_doc_topic_prob(self.corpus.docs, self.stats.DT, self.alpha, self.pretrained.phi)

    def log_likelihood(self):
        """ log p(words, topics | phi) of the new documents """
        DT = self.stats.DT
        ll = gammaln(self.alpha_sum) - gammaln(self.corpus.n_doc + self.alpha_sum)
        ll += (gammaln(DT + self.alpha) - gammaln(self.alpha)).sum()
        return ll + self._word_log_likelihood()


class GibbsLDAInference(_BaseInference):
    """ topic of each token of new documents under a pretrained LDA """

    model_name = 'LDAinf'
    stats_class = LDAStats

    def run_sweep(self):
        stats = self.stats
        phi = self.pretrained.phi
        for di in range(self.corpus.n_doc):
            doc = self.corpus.docs[di]
            for wi in range(len(doc)):
                stats.decrement(di, wi)
                prob = (stats.DT[di] + self.alpha) * phi[:, doc[wi]]
                stats.increment(di, wi, sampling_from_dist(prob, self.rng))

    def doc_topic_prob(self):
        DT = self.stats.DT
        return (DT + self.alpha) / (DT.sum(1) + self.alpha_sum)[:, np.newaxis]

    def log_likelihood(self):
        """ log p(words, topics | phi) of the new documents """
        DT = self.stats.DT
        ll = self.corpus.n_doc * (gammaln(self.alpha_sum) - self.n_topic * gammaln(self.alpha))
        ll += gammaln(DT + self.alpha).sum() - gammaln(DT.sum(1) + self.alpha_sum).sum()
        return ll + self._word_log_likelihood()
