"""
NMT Evaluation Metrics.

BLEU via SacreBLEU for standardized, reproducible scores.

Hypotheses and references here are normalized, space-tokenized
sentences, so the score is comparable across runs of this project
but not with published detokenized BLEU.
"""

from dataclasses import dataclass
from typing import List, Optional, Dict, Any

import sacrebleu


@dataclass
class MetricsResult:
    """Container for evaluation metrics."""
    bleu: Optional[float] = None
    bleu_signature: Optional[str] = None
    n_examples: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'bleu': self.bleu,
            'bleu_signature': self.bleu_signature,
            'n_examples': self.n_examples,
        }

    def __str__(self) -> str:
        if self.bleu is None:
            return f"BLEU: n/a ({self.n_examples} examples)"
        return f"BLEU: {self.bleu:.2f} ({self.n_examples} examples)"


def compute_bleu(
    hypotheses: List[str],
    references: List[str]
) -> Dict[str, Any]:
    """Compute corpus BLEU.

    Args:
        hypotheses: Generated translations.
        references: Reference translations, aligned with hypotheses.

    Returns:
        Dictionary with 'score', 'signature', 'precisions' and 'bp'.
    """
    if len(hypotheses) != len(references):
        raise ValueError(
            f"Got {len(hypotheses)} hypotheses for {len(references)} references"
        )

    metric = sacrebleu.BLEU(tokenize="none")
    bleu = metric.corpus_score(hypotheses, [references])

    return {
        'score': bleu.score,
        'signature': str(metric.get_signature()),
        'precisions': bleu.precisions,
        'bp': bleu.bp,
    }
