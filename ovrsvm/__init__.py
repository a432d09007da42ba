"""
ovrsvm: One-vs-Rest SVM classification for tabular data

Turns a labeled table into a multiclass classifier by training one binary
support vector machine per class, and classifies new rows with a
margin-based decision rule that is reproducible down to its tie-breaks.
"""

from .decision import ScoredLabel, decision_scores, evaluate_accuracy, predict, predict_input
from .errors import (
    DatasetParseError,
    DimensionMismatch,
    EmptyDataset,
    EmptyFeatureSet,
    InsufficientLabels,
    InvalidHyperparameter,
    LabelColumnIsFeature,
    MissingLabelColumn,
    ModelNotTrained,
    NonNumericFeature,
    OvrSvmError,
    TrainingCancelled,
    TrainingError,
    TrainingFailed,
    UnknownFeatureColumn,
    UnnamedFeatures,
    ValidationError,
)
from .features import Dataset, extract_features
from .ingest import SAMPLE_IRIS_CSV, default_columns, parse_csv_text, read_dataset
from .kernels import (
    KernelKind,
    KernelSpec,
    LinearKernel,
    PolynomialKernel,
    RbfKernel,
    SigmoidKernel,
    resolve_kernel,
)
from .ovr import MulticlassModel, train_model
from .session import Session, TrainingConfig

__version__ = "0.1.0"
