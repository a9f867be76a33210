"""NMT Evaluation Module."""

from .metrics import compute_bleu, MetricsResult
from .evaluate import Evaluator

__all__ = [
    "compute_bleu",
    "MetricsResult",
    "Evaluator",
]
