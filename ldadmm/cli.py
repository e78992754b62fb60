import argparse
import io
import logging
import sys

from .checkpoint import CheckpointWriter
from .config import ModelConfig, MODELS
from .corpus import read_corpus
from .dmm_gibbs import GibbsDMM
from .errors import CorpusError, LDADMMError
from .formatted_logger import formatted_logger
from .inference import PretrainedModel, GibbsDMMInference, GibbsLDAInference
from .lda_gibbs import GibbsLDA
from .sampler import GibbsSampler

_trainers = {'LDA': GibbsLDA, 'DMM': GibbsDMM}
_inferencers = {'LDAinf': GibbsLDAInference, 'DMMinf': GibbsDMMInference}


def _read_assignments(path):
    try:
        with io.open(path, 'r', encoding='utf-8') as f:
            return f.readlines()
    except (IOError, UnicodeDecodeError) as e:
        raise CorpusError('cannot read topic assignments %s: %s' % (path, e))


def build_model(config, logger):
    """ create and initialize the model a config asks for """
    if config.is_inference:
        pretrained = PretrainedModel.load(config.paras, logger=logger)
        if pretrained.config.model != config.model[:-len('inf')]:
            logger.warning('%s applied to a model trained as %s', config.model, pretrained.config.model)
        model = _inferencers[config.model](pretrained, seed=config.seed, logger=logger)
        corpus = model.read_corpus(config.corpus)
        config.n_topic, config.alpha, config.beta = model.n_topic, model.alpha, model.beta
    else:
        model = _trainers[config.model](config.n_topic, config.alpha, config.beta, seed=config.seed, logger=logger)
        logger.info('Reading topic modeling corpus %s ...', config.corpus)
        corpus = read_corpus(config.corpus)

    assignment_lines = _read_assignments(config.init_file) if config.init_file else None
    model.initialize(corpus, assignment_lines)
    return model


def run_model(config, logger=None):
    """ fit or apply a topic model as described by `config` and write all of its outputs

    Returns the sampled model.
    """
    config.validate()
    if logger is None:
        logger = formatted_logger(config.model)
    model = build_model(config, logger)
    writer = CheckpointWriter(config.output_dir, config.n_top_words)
    sampler = GibbsSampler(model, config.n_iter, config.save_step, logger=logger)
    return sampler.run(writer, config)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='ldadmm', description='LDA and DMM topic models with collapsed Gibbs sampling')
    parser.add_argument('-model', choices=MODELS, required=True,
                        help='LDA, DMM, or LDAinf / DMMinf to infer topics of unseen documents with a pretrained model')
    parser.add_argument('-corpus', required=True, help='corpus file, one document per line')
    parser.add_argument('-ntopics', type=int, default=20, help='number of topics')
    parser.add_argument('-alpha', type=float, default=0.1)
    parser.add_argument('-beta', type=float, default=0.01)
    parser.add_argument('-niters', type=int, default=2000, help='number of Gibbs sampling iterations')
    parser.add_argument('-twords', type=int, default=20, help='number of most probable words for each topic')
    parser.add_argument('-name', default='model', help='experiment name')
    parser.add_argument('-initFile', default=None, help='topic-assignment file to start from')
    parser.add_argument('-sstep', type=int, default=0, help='save the outputs every sstep iterations')
    parser.add_argument('-paras', default=None, help='.paras file of a pretrained model')
    parser.add_argument('-seed', type=int, default=None, help='seed of the random source')
    parser.add_argument('-output', default=None, help='output directory, the corpus directory by default')
    parser.add_argument('-log', default=None, help='also write the log to this file')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = ModelConfig(model=args.model, corpus=args.corpus, n_topic=args.ntopics, alpha=args.alpha,
                         beta=args.beta, n_iter=args.niters, n_top_words=args.twords, name=args.name,
                         init_file=args.initFile, save_step=args.sstep, paras=args.paras, seed=args.seed,
                         output_dir=args.output)
    logger = formatted_logger(args.model, file_path=args.log)
    try:
        run_model(config, logger)
    except (LDADMMError, ValueError, IOError) as e:
        logger.error('%s: %s', type(e).__name__, e)
        return 1
    finally:
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            logger.removeHandler(handler)
            handler.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
