"""
Attention-based Neural Machine Translation (NMT).

GRU encoder-decoder with additive attention for English-French translation.

Modules:
    - vocabulary: Word-level vocabulary with reserved SOS/EOS/UNK/PAD slots
    - model: Encoder, additive attention and attention decoder
    - training: Corpus loading, batching and the SGD training loop
    - inference: Greedy decoding and the high-level translator
    - evaluation: BLEU scoring on held-out pairs
"""

from .config import NMTConfig, ModelConfig
from .vocabulary import Vocabulary

__version__ = "1.0.0"
__all__ = ["NMTConfig", "ModelConfig", "Vocabulary"]
