import io
from collections import Counter

import numpy as np

from .errors import CorpusError


class Vocabulary:
    """ bidirectional mapping between word strings and dense integer ids

    Ids are assigned in first-occurrence order; output matrices are column-indexed by them.
    """

    def __init__(self, words=None):
        self.word2id = dict()
        self.id2word = list()
        for word in words or ():
            self.add(word)

    def add(self, word):
        """ return the id of `word`, assigning the next free id when it is new """
        if word not in self.word2id:
            self.word2id[word] = len(self.id2word)
            self.id2word.append(word)
        return self.word2id[word]

    def get(self, word, default=None):
        return self.word2id.get(word, default)

    def __len__(self):
        return len(self.id2word)

    def __contains__(self, word):
        return word in self.word2id

    def __getitem__(self, word_id):
        return self.id2word[word_id]

    @classmethod
    def read(cls, path):
        """ load a `.vocabulary` file of `word id` lines """
        entries = dict()
        try:
            with io.open(path, 'r', encoding='utf-8') as f:
                for line_no, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    parts = line.split()
                    if len(parts) != 2:
                        raise CorpusError('%s:%d: expected "word id", got %r' % (path, line_no, line.strip()))
                    word, word_id = parts
                    try:
                        entries[int(word_id)] = word
                    except ValueError:
                        raise CorpusError('%s:%d: word id is not an integer: %r' % (path, line_no, word_id))
        except (IOError, UnicodeDecodeError) as e:
            raise CorpusError('cannot read vocabulary %s: %s' % (path, e))

        if sorted(entries) != list(range(len(entries))):
            raise CorpusError('%s: word ids are not dense from 0' % path)
        return cls(entries[i] for i in range(len(entries)))


def occurrence_ranks(doc):
    """ for each token, how many times its word type has appeared in the document so far

    Example: the document "a a b a b c d c" gives [1, 2, 1, 3, 2, 1, 1, 2]
    """
    seen = Counter()
    ranks = np.zeros(len(doc), dtype=int)
    for wi, word in enumerate(doc):
        seen[word] += 1
        ranks[wi] = seen[word]
    return ranks


class Corpus:
    """ integer-coded corpus

    Attributes
    ----------
    vocab: Vocabulary
        word <-> id mapping used to code the documents
    docs: list of ndarray
        word ids of each document in token order
    ranks: list of ndarray
        occurrence rank of each token, aligned with `docs`
    n_doc: int
        number of documents
    n_word: int
        number of tokens in the corpus
    """

    def __init__(self, vocab, docs):
        self.vocab = vocab
        self.docs = [np.asarray(doc, dtype=int) for doc in docs]
        self.ranks = [occurrence_ranks(doc) for doc in self.docs]
        self.n_doc = len(self.docs)
        self.n_word = int(sum(len(doc) for doc in self.docs))

    @property
    def n_voca(self):
        return len(self.vocab)

    def word_count(self):
        """ corpus frequency of each word id """
        cnt = np.zeros(self.n_voca, dtype=int)
        for doc in self.docs:
            np.add.at(cnt, doc, 1)
        return cnt

    def __len__(self):
        return self.n_doc


def build_corpus(lines, vocab=None):
    """ Tokenize raw lines, one document per line, into an integer-coded corpus

    Parameters
    ----------
    lines: iterable of str
        whitespace-tokenized documents; blank lines are skipped
    vocab: Vocabulary, optional
        a fixed vocabulary; tokens it does not contain are dropped and a line
        made only of such tokens becomes an empty document. When omitted a new
        vocabulary is grown in first-occurrence order.

    Returns
    -------
    corpus: Corpus
    """
    grow = vocab is None
    if grow:
        vocab = Vocabulary()

    docs = list()
    for line in lines:
        tokens = line.split()
        if len(tokens) == 0:
            continue
        if grow:
            docs.append([vocab.add(word) for word in tokens])
        else:
            docs.append([vocab.word2id[word] for word in tokens if word in vocab])
    return Corpus(vocab, docs)


def read_corpus(path, vocab=None):
    """ read a UTF-8 corpus file, one document per line; see `build_corpus` """
    try:
        with io.open(path, 'r', encoding='utf-8') as f:
            return build_corpus(f, vocab)
    except (IOError, UnicodeDecodeError) as e:
        raise CorpusError('cannot read corpus %s: %s' % (path, e))
