"""
Evaluation Pipeline for NMT.

Translates held-out sentence pairs and scores them against references.
"""

import json
from pathlib import Path
from typing import List, Optional, Tuple
from tqdm import tqdm

from .metrics import compute_bleu, MetricsResult


class Evaluator:
    """Evaluation pipeline for a Translator.

    Args:
        translator: Translator instance.
    """

    def __init__(self, translator):
        self.translator = translator

    def evaluate_pairs(
        self,
        pairs: List[Tuple[str, str]],
        batch_size: int = 32,
        output_file: Optional[str] = None,
        verbose: bool = True
    ) -> MetricsResult:
        """Evaluate on normalized (source, reference) pairs.

        Args:
            pairs: Held-out sentence pairs.
            batch_size: Sentences decoded per forward pass.
            output_file: Optional JSON path for the translations.
            verbose: Whether to print progress.

        Returns:
            MetricsResult with BLEU.
        """
        if not pairs:
            return MetricsResult()

        sources = [source for source, _ in pairs]
        references = [target for _, target in pairs]

        if verbose:
            print(f"Evaluating on {len(sources)} examples...")

        hypotheses = []
        for i in tqdm(range(0, len(sources), batch_size),
                      desc="Translating", disable=not verbose):
            hypotheses.extend(self.translator.translate_batch(sources[i:i + batch_size]))

        bleu = compute_bleu(hypotheses, references)
        result = MetricsResult(
            bleu=bleu['score'],
            bleu_signature=bleu['signature'],
            n_examples=len(pairs)
        )

        if verbose:
            print(f"\n{result}")

        if output_file:
            self._save_translations(sources, hypotheses, references, result, output_file)

        return result

    def _save_translations(self, sources, hypotheses, references, result, output_file):
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        records = [
            {'source': s, 'hypothesis': h, 'reference': r}
            for s, h, r in zip(sources, hypotheses, references)
        ]
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({'metrics': result.to_dict(), 'translations': records},
                      f, indent=2, ensure_ascii=False)

        print(f"Translations saved to {path}")
