import numpy as np

from .errors import ConsistencyError


class TopicWordStats:
    """ topic-word counts shared by every model

    Attributes
    ----------
    TW: ndarray, shape (n_topic, n_voca)
        number of occurrences of each word type assigned to each topic
    sum_T: ndarray, shape (n_topic)
        number of word tokens assigned to each topic, always the row sum of TW
    frozen: boolean
        if True, counts come from a pretrained model and must not change
    """

    def __init__(self, n_topic, n_voca, TW=None, frozen=False):
        self.n_topic = n_topic
        self.n_voca = n_voca
        if TW is None:
            TW = np.zeros([n_topic, n_voca], dtype=int)
        self.TW = np.asarray(TW)
        if self.TW.shape != (n_topic, n_voca):
            raise ConsistencyError('topic-word matrix has shape %s, expected %s'
                                   % (self.TW.shape, (n_topic, n_voca)))
        self.sum_T = self.TW.sum(1)
        self.frozen = frozen

    def add(self, words, topic, delta=1):
        """ add `delta` occurrences of every token in `words` to `topic` """
        if self.frozen:
            raise RuntimeError('pretrained topic-word counts are read only')
        np.add.at(self.TW[topic], words, delta)
        self.sum_T[topic] += delta * len(words)

    def add_token(self, word, topic, delta=1):
        if self.frozen:
            raise RuntimeError('pretrained topic-word counts are read only')
        self.TW[topic, word] += delta
        self.sum_T[topic] += delta

    def check_invariants(self, word_count=None):
        if np.any(self.TW < 0):
            raise RuntimeError('negative topic-word count')
        if not np.array_equal(self.sum_T, self.TW.sum(1)):
            raise RuntimeError('sum_T %s differs from topic-word row sums %s' % (self.sum_T, self.TW.sum(1)))
        if word_count is not None and not np.array_equal(self.TW.sum(0), word_count):
            raise RuntimeError('topic-word column sums differ from corpus word frequencies')


def _parse_topics(line, di, n_topic):
    try:
        return np.array([int(t) for t in line.split()], dtype=int) % n_topic
    except ValueError:
        raise ConsistencyError('topic assignment of document %d is not a list of integers: %r' % (di, line.strip()))


class _BaseStats:
    """ bookkeeping shared by the per-document and per-token assignment stores

    A resampling step is a `decrement` of one unit followed by the paired `increment`
    of the same unit; no other unit may be touched while one is open.
    """

    def __init__(self, corpus, n_topic, topic_word=None):
        self.corpus = corpus
        self.n_topic = n_topic
        if topic_word is None:
            topic_word = TopicWordStats(n_topic, corpus.n_voca)
        self.topic_word = topic_word
        self._open = None

    @property
    def TW(self):
        return self.topic_word.TW

    @property
    def sum_T(self):
        return self.topic_word.sum_T

    def _begin(self, unit):
        if self._open is not None:
            raise RuntimeError('unit %s decremented while %s is still open' % (unit, self._open))
        self._open = unit

    def _end(self, unit):
        if self._open != unit:
            raise RuntimeError('unit %s incremented without a paired decrement (open: %s)' % (unit, self._open))
        self._open = None

    def _check_lines(self, lines):
        n_doc = 0
        n_word = 0
        for di, line in enumerate(lines):
            if di >= self.corpus.n_doc:
                raise ConsistencyError('topic assignment file has more lines than the %d documents of the corpus'
                                       % self.corpus.n_doc)
            topics = _parse_topics(line, di, self.n_topic)
            if len(topics) != len(self.corpus.docs[di]):
                raise ConsistencyError('document %d has %d tokens but %d topic assignments'
                                       % (di, len(self.corpus.docs[di]), len(topics)))
            n_doc += 1
            n_word += len(topics)
            yield di, topics
        if n_doc != self.corpus.n_doc or n_word != self.corpus.n_word:
            raise ConsistencyError('topic assignment file covers %d documents and %d words, corpus has %d and %d'
                                   % (n_doc, n_word, self.corpus.n_doc, self.corpus.n_word))


class DMMStats(_BaseStats):
    """ one topic per document

    Attributes
    ----------
    DT: ndarray, shape (n_topic)
        number of documents assigned to each topic
    z: ndarray, shape (n_doc)
        topic of each document
    """

    def __init__(self, corpus, n_topic, topic_word=None):
        super(DMMStats, self).__init__(corpus, n_topic, topic_word)
        self.DT = np.zeros(n_topic, dtype=int)
        self.z = np.zeros(corpus.n_doc, dtype=int)

    def _assign(self, di, topic):
        self.z[di] = topic
        self.DT[topic] += 1
        if not self.topic_word.frozen:
            self.topic_word.add(self.corpus.docs[di], topic, 1)

    def random_init(self, rng):
        for di in range(self.corpus.n_doc):
            self._assign(di, rng.randint(self.n_topic))

    def assignment_init(self, lines):
        """ replay topic assignments, one line per document; the first id of a line is its topic """
        for di, topics in self._check_lines(lines):
            self._assign(di, topics[0] if len(topics) else 0)

    def decrement(self, di):
        self._begin(di)
        topic = self.z[di]
        self.DT[topic] -= 1
        if not self.topic_word.frozen:
            self.topic_word.add(self.corpus.docs[di], topic, -1)

    def increment(self, di, topic):
        self._end(di)
        self._assign(di, topic)

    def assignments(self):
        """ per-token topic ids of each document """
        return [np.repeat(self.z[di], len(doc)) for di, doc in enumerate(self.corpus.docs)]

    def check_invariants(self):
        if self.DT.sum() != self.corpus.n_doc or np.any(self.DT < 0):
            raise RuntimeError('document-topic counts %s do not cover %d documents' % (self.DT, self.corpus.n_doc))
        if not np.array_equal(np.bincount(self.z, minlength=self.n_topic), self.DT):
            raise RuntimeError('document-topic counts disagree with assignments')
        self.topic_word.check_invariants(None if self.topic_word.frozen else self.corpus.word_count())


class LDAStats(_BaseStats):
    """ one topic per token

    Attributes
    ----------
    DT: ndarray, shape (n_doc, n_topic)
        number of tokens of each document assigned to each topic
    z: list of ndarray
        topic of each token, aligned with the corpus documents
    """

    def __init__(self, corpus, n_topic, topic_word=None):
        super(LDAStats, self).__init__(corpus, n_topic, topic_word)
        self.DT = np.zeros([corpus.n_doc, n_topic], dtype=int)
        self.z = list()

    def _assign_doc(self, di, topics):
        doc = self.corpus.docs[di]
        self.z.append(topics)
        np.add.at(self.DT[di], topics, 1)
        if not self.topic_word.frozen:
            for word, topic in zip(doc, topics):
                self.topic_word.add_token(word, topic, 1)

    def random_init(self, rng):
        for di, doc in enumerate(self.corpus.docs):
            self._assign_doc(di, rng.randint(self.n_topic, size=len(doc)))

    def assignment_init(self, lines):
        for di, topics in self._check_lines(lines):
            self._assign_doc(di, topics)

    def decrement(self, di, wi):
        self._begin((di, wi))
        topic = self.z[di][wi]
        self.DT[di, topic] -= 1
        if not self.topic_word.frozen:
            self.topic_word.add_token(self.corpus.docs[di][wi], topic, -1)

    def increment(self, di, wi, topic):
        self._end((di, wi))
        self.z[di][wi] = topic
        self.DT[di, topic] += 1
        if not self.topic_word.frozen:
            self.topic_word.add_token(self.corpus.docs[di][wi], topic, 1)

    def assignments(self):
        return self.z

    def check_invariants(self):
        lengths = np.array([len(doc) for doc in self.corpus.docs], dtype=int)
        if np.any(self.DT < 0) or not np.array_equal(self.DT.sum(1), lengths):
            raise RuntimeError('document-topic counts do not match document lengths')
        self.topic_word.check_invariants(None if self.topic_word.frozen else self.corpus.word_count())
