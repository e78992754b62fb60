import io
import os

from .errors import CorpusError
from .utils import isfloat

MODELS = ('LDA', 'DMM', 'LDAinf', 'DMMinf')


class ModelConfig:
    """ parameters of one run

    Attributes
    ----------
    model: str
        one of 'LDA', 'DMM', 'LDAinf', 'DMMinf'
    corpus: str
        path of the corpus, one document per line
    n_topic: int
        number of topics, ignored by inference models which take it from `paras`
    alpha: float
        symmetric parameter of Dirichlet prior for document-topic distribution
    beta: float
        symmetric parameter of Dirichlet prior for topic-word distribution
    n_iter: int
        number of Gibbs sampling iterations
    n_top_words: int
        number of most probable words written for each topic
    name: str
        experiment name, the prefix of every output file
    init_file: str
        optional topic-assignment file to start sampling from
    save_step: int
        write intermediate outputs every `save_step` iterations, 0 writes only the last sample
    paras: str
        `.paras` file of the pretrained model used by inference models
    seed: int
        seed of the random source, None for a non-reproducible run
    output_dir: str
        directory receiving the outputs, the corpus directory by default
    """

    def __init__(self, model='LDA', corpus=None, n_topic=20, alpha=0.1, beta=0.01, n_iter=2000,
                 n_top_words=20, name='model', init_file=None, save_step=0, paras=None, seed=None,
                 output_dir=None):
        self.model = model
        self.corpus = corpus
        self.n_topic = n_topic
        self.alpha = alpha
        self.beta = beta
        self.n_iter = n_iter
        self.n_top_words = n_top_words
        self.name = name
        self.init_file = init_file
        self.save_step = save_step
        self.paras = paras
        self.seed = seed
        if output_dir is None and corpus is not None:
            output_dir = os.path.dirname(os.path.abspath(corpus))
        self.output_dir = output_dir

    @property
    def is_inference(self):
        return self.model.endswith('inf')

    def validate(self):
        if self.model not in MODELS:
            raise ValueError('model must be one of %s, got %r' % (', '.join(MODELS), self.model))
        if self.corpus is None:
            raise ValueError('a corpus path is required')
        if self.n_topic <= 0:
            raise ValueError('number of topics must be positive')
        if self.alpha <= 0 or self.beta <= 0:
            raise ValueError('alpha and beta must be positive')
        if self.n_iter < 0 or self.n_top_words < 0 or self.save_step < 0:
            raise ValueError('iterations, top words and save step must not be negative')
        if self.is_inference and self.paras is None:
            raise ValueError('%s needs the .paras file of a pretrained model' % self.model)
        return self


def format_paras(config):
    """ the `.paras` record of a run, one `-key<TAB>value` line per parameter """
    lines = ['-model\t%s' % config.model]
    if config.corpus is not None:
        lines.append('-corpus\t%s' % config.corpus)
    if config.paras:
        lines.append('-paras\t%s' % config.paras)
    lines.append('-ntopics\t%d' % config.n_topic)
    lines.append('-alpha\t%s' % repr(float(config.alpha)))
    lines.append('-beta\t%s' % repr(float(config.beta)))
    lines.append('-niters\t%d' % config.n_iter)
    lines.append('-twords\t%d' % config.n_top_words)
    lines.append('-name\t%s' % config.name)
    if config.init_file:
        lines.append('-initFile\t%s' % config.init_file)
    if config.save_step > 0:
        lines.append('-sstep\t%d' % config.save_step)
    return '\n'.join(lines) + '\n'


_keys = {
    '-model': ('model', str),
    '-corpus': ('corpus', str),
    '-paras': ('paras', str),
    '-ntopics': ('n_topic', int),
    '-alpha': ('alpha', float),
    '-beta': ('beta', float),
    '-niters': ('n_iter', int),
    '-twords': ('n_top_words', int),
    '-name': ('name', str),
    '-initFile': ('init_file', str),
    '-sstep': ('save_step', int),
}


def read_paras(path):
    """ read a `.paras` record back into a ModelConfig

    Unknown keys are ignored. The output directory is the record's own directory.
    """
    values = dict()
    try:
        with io.open(path, 'r', encoding='utf-8') as f:
            for line in f:
                parts = line.strip().split(None, 1)
                if len(parts) != 2 or parts[0] not in _keys:
                    continue
                attr, cast = _keys[parts[0]]
                if cast is not str and not isfloat(parts[1]):
                    raise CorpusError('%s: %s is not a number: %r' % (path, parts[0], parts[1]))
                values[attr] = cast(float(parts[1])) if cast is int else cast(parts[1])
    except (IOError, UnicodeDecodeError) as e:
        raise CorpusError('cannot read parameters %s: %s' % (path, e))

    for required in ('model', 'n_topic', 'alpha', 'beta'):
        if required not in values:
            raise CorpusError('%s: missing parameter %s' % (path, required))
    values['output_dir'] = os.path.dirname(os.path.abspath(path))
    return ModelConfig(**values)
