"""
Complete Encoder-Decoder Model for Neural Machine Translation.

Combines the GRU encoder and the attention decoder into a
sequence-to-sequence model with teacher forcing.
"""

import random
import torch
import torch.nn as nn
import torch.nn.functional as F
from typing import Tuple, Dict, Any, Optional

from .encoder import Encoder
from .decoder import AttentionDecoder


class Seq2Seq(nn.Module):
    """GRU encoder-decoder with additive attention.

    Args:
        input_vocab_size: Source one-hot width.
        output_vocab_size: Target one-hot width.
        hidden_size: Embedding and hidden dimension.
        dropout: Dropout probability on embedded inputs.
        sos_id: Start-of-sentence token ID.
        eos_id: End-of-sentence token ID.
        unk_id: Unknown-word token ID.
        pad_id: Padding token ID.
    """

    def __init__(
        self,
        input_vocab_size: int,
        output_vocab_size: int,
        hidden_size: int = 128,
        dropout: float = 0.2,
        sos_id: int = 1,
        eos_id: int = 2,
        unk_id: int = 3,
        pad_id: int = 4
    ):
        super().__init__()

        # Store config
        self.input_vocab_size = input_vocab_size
        self.output_vocab_size = output_vocab_size
        self.hidden_size = hidden_size
        self.dropout_p = dropout
        self.sos_id = sos_id
        self.eos_id = eos_id
        self.unk_id = unk_id
        self.pad_id = pad_id

        self.encoder = Encoder(input_vocab_size, hidden_size, dropout)
        self.decoder = AttentionDecoder(output_vocab_size, hidden_size, dropout)

    def encode(self, src: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Encode a one-hot source batch.

        Returns:
            Tuple of (encoder_outputs, initial decoder state).
        """
        return self.encoder(src)

    def decode_step(
        self,
        prev_token: torch.Tensor,
        hidden: torch.Tensor,
        encoder_outputs: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Run one decoder step. See AttentionDecoder.forward."""
        return self.decoder(prev_token, hidden, encoder_outputs)

    def sos_input(self, batch_size: int, device: torch.device) -> torch.Tensor:
        """One-hot SOS rows broadcast across the batch."""
        sos = torch.full((batch_size,), self.sos_id, dtype=torch.long, device=device)
        return self.to_one_hot(sos)

    def to_one_hot(self, token_ids: torch.Tensor) -> torch.Tensor:
        """One-hot encode target token IDs of shape (batch,)."""
        return F.one_hot(token_ids, num_classes=self.output_vocab_size).float()

    def forward(
        self,
        src: torch.Tensor,
        tgt_ids: torch.Tensor,
        teacher_forcing_ratio: float = 0.5
    ) -> torch.Tensor:
        """Decode a full target batch.

        At every step a coin flip with probability `teacher_forcing_ratio`
        decides whether the next input is the true token or the model's
        own arg-max prediction.

        Args:
            src: One-hot source, (src_len, batch, input_vocab_size).
            tgt_ids: Target IDs ending in EOS/PAD, (tgt_len, batch).
            teacher_forcing_ratio: Probability of feeding the true token.

        Returns:
            Per-step distributions of shape (tgt_len, batch, output_vocab_size).
        """
        tgt_len, batch_size = tgt_ids.size()

        encoder_outputs, hidden = self.encode(src)
        decoder_input = self.sos_input(batch_size, src.device)

        outputs = []
        for t in range(tgt_len):
            probs, hidden, _ = self.decode_step(decoder_input, hidden, encoder_outputs)
            outputs.append(probs)

            if random.random() < teacher_forcing_ratio:
                next_ids = tgt_ids[t]
            else:
                next_ids = probs.argmax(dim=-1)
            decoder_input = self.to_one_hot(next_ids.detach())

        return torch.stack(outputs, dim=0)

    def get_config(self) -> Dict[str, Any]:
        """Get model configuration for saving."""
        return {
            'input_vocab_size': self.input_vocab_size,
            'output_vocab_size': self.output_vocab_size,
            'hidden_size': self.hidden_size,
            'dropout': self.dropout_p,
            'sos_id': self.sos_id,
            'eos_id': self.eos_id,
            'unk_id': self.unk_id,
            'pad_id': self.pad_id,
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Seq2Seq':
        """Create model from configuration dictionary."""
        return cls(**config)

    def count_parameters(self) -> int:
        """Count trainable parameters."""
        return sum(p.numel() for p in self.parameters() if p.requires_grad)

    def count_parameters_readable(self) -> str:
        """Get human-readable parameter count."""
        n = self.count_parameters()
        if n >= 1e6:
            return f"{n / 1e6:.2f}M"
        elif n >= 1e3:
            return f"{n / 1e3:.2f}K"
        return str(n)


def create_model_from_config(config, input_vocab_size: Optional[int] = None,
                             output_vocab_size: Optional[int] = None) -> Seq2Seq:
    """Create a Seq2Seq model from an NMTConfig.

    Vocabulary sizes default to the ones stored in `config.model`.
    """
    model_cfg = config.model

    return Seq2Seq(
        input_vocab_size=input_vocab_size or model_cfg.input_vocab_size,
        output_vocab_size=output_vocab_size or model_cfg.output_vocab_size,
        hidden_size=model_cfg.hidden_size,
        dropout=model_cfg.dropout,
        sos_id=model_cfg.sos_id,
        eos_id=model_cfg.eos_id,
        unk_id=model_cfg.unk_id,
        pad_id=model_cfg.pad_id
    )
