from .corpus import Vocabulary, Corpus, build_corpus, read_corpus
from .dmm_gibbs import GibbsDMM
from .lda_gibbs import GibbsLDA
from .inference import PretrainedModel, GibbsDMMInference, GibbsLDAInference
from .sampler import GibbsSampler
from .checkpoint import CheckpointWriter
from .config import ModelConfig
from .errors import LDADMMError, CorpusError, ConsistencyError, SamplingError
from .cli import run_model
