"""NMT Model Module."""

from .seq2seq import Seq2Seq, create_model_from_config
from .encoder import Encoder
from .decoder import AttentionDecoder
from .attention import AdditiveAttention

__all__ = [
    "Seq2Seq",
    "create_model_from_config",
    "Encoder",
    "AttentionDecoder",
    "AdditiveAttention",
]
