class LDADMMError(Exception):
    """ Base class of errors raised while fitting or applying a topic model """


class CorpusError(LDADMMError):
    """ The corpus, or an artifact of a pretrained model, cannot be read or parsed """


class ConsistencyError(LDADMMError):
    """ A topic-assignment file or pretrained matrix disagrees with the corpus it is applied to """


class SamplingError(LDADMMError):
    """ A conditional distribution has no positive mass, usually because of an invalid hyper-parameter """
