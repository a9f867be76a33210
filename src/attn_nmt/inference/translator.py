"""
High-Level Translation API.

Provides a simple interface for translation that handles:
- Normalization and indexing of raw sentences
- Greedy decoding
- Mapping output IDs back to words
"""

import torch
from typing import Dict, List, Optional

from .greedy import greedy_decode
from ..training.dataset import normalize_string, pad_sequences, one_hot


class Translator:
    """High-level translator interface.

    Args:
        model: Trained Seq2Seq model.
        input_vocab: Source vocabulary used at training time.
        output_vocab: Target vocabulary used at training time.
        device: Device for inference.
        max_steps: Maximum decoder steps per sentence.
        oov_policy: "unk" substitutes unknown words, "error" raises
            UnknownWordError.
    """

    def __init__(
        self,
        model,
        input_vocab,
        output_vocab,
        device: Optional[torch.device] = None,
        max_steps: int = 12,
        oov_policy: str = "unk"
    ):
        if oov_policy not in ("unk", "error"):
            raise ValueError(f"oov_policy must be 'unk' or 'error', got {oov_policy!r}")

        self.model = model
        self.input_vocab = input_vocab
        self.output_vocab = output_vocab
        self.device = device or torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        self.max_steps = max_steps
        self.strict = oov_policy == "error"

        self.model = self.model.to(self.device)
        self.model.eval()

    def predict_batch(self, sentences: List[str]) -> List[List[str]]:
        """Decode raw sentences into target word lists.

        Sentences are decoded in groups of equal indexed length, so no
        source is padded and each result matches decoding it alone.
        """
        sequences = [
            self.input_vocab.indexes_from_sentence(normalize_string(s), strict=self.strict)
            for s in sentences
        ]

        groups: Dict[int, List[int]] = {}
        for position, seq in enumerate(sequences):
            groups.setdefault(len(seq), []).append(position)

        results: List[List[str]] = [[] for _ in sequences]
        for positions in groups.values():
            src_ids = pad_sequences([sequences[p] for p in positions], self.model.pad_id)
            src = one_hot(src_ids, self.model.input_vocab_size).to(self.device)

            output_ids = greedy_decode(self.model, src, max_steps=self.max_steps)

            for position, ids in zip(positions, output_ids):
                results[position] = self.output_vocab.sentence_from_indexes(ids)

        return results

    def predict(self, sentence: str) -> List[str]:
        """Decode one raw sentence into a list of target words."""
        return self.predict_batch([sentence])[0]

    def translate(self, sentence: str) -> str:
        """Translate one raw sentence to a space-joined string."""
        return " ".join(self.predict(sentence))

    def translate_batch(self, sentences: List[str]) -> List[str]:
        """Translate several raw sentences; each result matches `translate`."""
        if not sentences:
            return []
        return [" ".join(words) for words in self.predict_batch(sentences)]

    @classmethod
    def from_checkpoint(
        cls,
        checkpoint_path: str,
        device: Optional[torch.device] = None,
        **kwargs
    ) -> 'Translator':
        """Load translator from a checkpoint written by the Trainer.

        Args:
            checkpoint_path: Path to model checkpoint.
            device: Device for inference.
            **kwargs: Additional arguments passed to __init__.
        """
        from ..model.seq2seq import Seq2Seq
        from ..training.utils import load_checkpoint

        device = device or torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        meta = load_checkpoint(checkpoint_path, device=device)

        if meta['config'] is None or meta['input_vocab'] is None or meta['output_vocab'] is None:
            raise ValueError(
                f"Checkpoint {checkpoint_path} lacks model config or vocabularies"
            )

        model = Seq2Seq.from_config(meta['config'])
        model.load_state_dict(meta['model_state_dict'])

        return cls(model, meta['input_vocab'], meta['output_vocab'], device=device, **kwargs)
