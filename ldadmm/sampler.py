import time

from .formatted_logger import formatted_logger

logger = formatted_logger('GibbsSampler')


class GibbsSampler:
    """ runs `n_iter` sweeps of a model and writes its outputs

    The model must already be initialized. `.paras` and `.vocabulary` are written before
    the first sweep; with `save_step > 0` the outputs of iteration i are written as
    `<name>-<i>` every `save_step` iterations before the last; the last sample is
    always written as `<name>`, along with the `.IDcorpus` and `.WTcount` diagnostics.

    Attributes
    ----------
    state: str
        'initialized', 'running', 'completed' or 'failed'
    iteration: int
        number of completed sweeps
    callback: callable
        called with the model after every sweep
    verbose: boolean
        if True, log the log likelihood after every sweep
    """

    def __init__(self, model, n_iter, save_step=0, callback=None, verbose=True, logger=logger):
        self.model = model
        self.n_iter = n_iter
        self.save_step = save_step
        self.callback = callback
        self.verbose = verbose
        self.logger = logger
        self.state = 'initialized'
        self.iteration = 0

    def run(self, writer, config):
        """ sample and write outputs under `config.name`; any error leaves the state 'failed' """
        name = config.name
        self.state = 'running'
        try:
            writer.write_parameters(config)
            writer.write_vocabulary(self.model.corpus.vocab, name)

            self.logger.info('Running Gibbs sampling inference: %d iterations', self.n_iter)
            for iteration in range(1, self.n_iter + 1):
                tic = time.time()
                self.model.run_sweep()
                self.iteration = iteration
                if self.verbose:
                    self.logger.info('[ITER] %d,\telapsed time:%.2f,\tlog_likelihood:%.2f',
                                     iteration, time.time() - tic, self.model.log_likelihood())
                if self.callback is not None:
                    self.callback(self.model)

                if self.save_step > 0 and iteration % self.save_step == 0 and iteration < self.n_iter:
                    self.logger.info('Saving the output from the %d-th sample', iteration)
                    self.model.checkpoint(writer, '%s-%d' % (name, iteration))

            self.logger.info('Writing output from the last sample ...')
            self.model.checkpoint(writer, name)
            writer.write_id_corpus(self.model.corpus, name)
            topic_word_count = self.model.topic_word_count()
            if topic_word_count is not None:
                writer.write_topic_word_count(topic_word_count, name)
        except BaseException:
            self.state = 'failed'
            raise
        self.state = 'completed'
        self.logger.info('Sampling completed!')
        return self.model
