import io
import os

from .config import format_paras
from .utils import write_matrix, write_top_words, format_int


class CheckpointWriter:
    """ writes the outputs of a run as `<output_dir>/<name>.<suffix>` flat files

    Every file is opened and closed within a single call. Writing only reads the
    model, so a checkpoint never changes the sampling state.

    Attributes
    ----------
    output_dir: str
        directory receiving the files, created when missing
    n_top_words: int
        number of most probable words written for each topic
    """

    def __init__(self, output_dir, n_top_words=20):
        self.output_dir = output_dir
        self.n_top_words = n_top_words

    def path(self, name, suffix):
        return os.path.join(self.output_dir, '%s.%s' % (name, suffix))

    def _open(self, name, suffix):
        if not os.path.isdir(self.output_dir):
            os.makedirs(self.output_dir)
        path = self.path(name, suffix)
        return io.open(path, 'w', encoding='utf-8')

    def write_parameters(self, config):
        with self._open(config.name, 'paras') as f:
            f.write(format_paras(config))

    def write_vocabulary(self, vocab, name):
        with self._open(name, 'vocabulary') as f:
            for word_id, word in enumerate(vocab.id2word):
                f.write('%s %d\n' % (word, word_id))

    def write_id_corpus(self, corpus, name):
        with self._open(name, 'IDcorpus') as f:
            write_matrix(f, corpus.docs, format_int)

    def write_assignments(self, assignments, name):
        with self._open(name, 'topicAssignments') as f:
            write_matrix(f, assignments, format_int)

    def write_top_words(self, topic_word_prob, vocab, name):
        with self._open(name, 'topWords') as f:
            write_top_words(f, topic_word_prob, vocab.id2word, self.n_top_words)

    def write_phi(self, topic_word_prob, name):
        with self._open(name, 'phi') as f:
            write_matrix(f, topic_word_prob)

    def write_theta(self, doc_topic_prob, name):
        with self._open(name, 'theta') as f:
            write_matrix(f, doc_topic_prob)

    def write_topic_word_count(self, topic_word_count, name):
        with self._open(name, 'WTcount') as f:
            write_matrix(f, topic_word_count, format_int)

    def write_checkpoint(self, model, name):
        """ top words, topic mixtures, topic assignments and topic-word probabilities of `model` """
        phi = model.topic_word_prob()
        self.write_top_words(phi, model.corpus.vocab, name)
        self.write_theta(model.doc_topic_prob(), name)
        self.write_assignments(model.assignments(), name)
        self.write_phi(phi, name)
