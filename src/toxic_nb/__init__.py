"""toxic-nb -- Naive Bayes toxic comment classification over word counts."""

__version__ = "0.1.0"

from .classifier import (
    NaiveBayesModel,
    classify,
    classify_batch,
    log_likelihood_ratio,
)
from .config import Settings
from .corpus import (
    documents_from_records,
    filter_rare_tokens,
    label_from_ratings,
    labels_from_ratings,
    load_corpus,
    read_ratings,
    read_token_records,
)
from .errors import (
    CorpusFormatError,
    DegenerateClassError,
    EmptyDocumentError,
    ToxicNBError,
)
from .evaluation import ClassificationMetrics, compute_metrics, evaluate_batch
from .models import (
    BatchResult,
    Document,
    DocumentFailure,
    Label,
    MissingTokenPolicy,
    Prediction,
    TokenRecord,
)
from .pipeline import PipelineResult, cross_validate, run_pipeline
from .splitting import Split, compute_priors, stratified_k_fold, train_test_split
from .tables import (
    FrequencyTable,
    ProbabilityTable,
    build_frequency_table,
    derive_probabilities,
    rank_words,
)

__all__ = [
    # Core
    "build_frequency_table",
    "derive_probabilities",
    "FrequencyTable",
    "ProbabilityTable",
    "classify",
    "classify_batch",
    "log_likelihood_ratio",
    "NaiveBayesModel",
    "rank_words",
    # Data model
    "Document",
    "TokenRecord",
    "Label",
    "MissingTokenPolicy",
    "Prediction",
    "DocumentFailure",
    "BatchResult",
    # Errors
    "ToxicNBError",
    "DegenerateClassError",
    "EmptyDocumentError",
    "CorpusFormatError",
    # Splitting
    "Split",
    "train_test_split",
    "compute_priors",
    "stratified_k_fold",
    # Evaluation
    "ClassificationMetrics",
    "compute_metrics",
    "evaluate_batch",
    # Corpus
    "read_token_records",
    "read_ratings",
    "documents_from_records",
    "label_from_ratings",
    "labels_from_ratings",
    "filter_rare_tokens",
    "load_corpus",
    # Pipeline
    "Settings",
    "PipelineResult",
    "run_pipeline",
    "cross_validate",
]
