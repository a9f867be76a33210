"""
Attention Decoder Implementation.

One decoding step:
    prev token -> Embedding -> Dropout -> embedded
    state + encoder outputs -> Attention -> context
    [embedded; context] -> GRUCell -> new state
    new state -> Linear -> ReLU -> Softmax -> next-token distribution
"""

import torch
import torch.nn as nn
import torch.nn.functional as F
from typing import Tuple

from .attention import AdditiveAttention


class AttentionDecoder(nn.Module):
    """GRU decoder that attends over encoder outputs at every step.

    The recurrent state is passed in and returned rather than stored,
    so the caller decides where a sequence starts (normally from the
    encoder's projected final state).

    Args:
        vocab_size: Target one-hot width.
        hidden_size: Embedding and hidden dimension.
        dropout: Dropout applied to embedded inputs during training.
    """

    def __init__(
        self,
        vocab_size: int,
        hidden_size: int,
        dropout: float = 0.2
    ):
        super().__init__()

        self.vocab_size = vocab_size
        self.hidden_size = hidden_size

        self.embedding = nn.Embedding(vocab_size, hidden_size)
        self.dropout = nn.Dropout(dropout)
        self.attention = AdditiveAttention(hidden_size)
        self.rnn = nn.GRUCell(2 * hidden_size, hidden_size)
        self.output_projection = nn.Linear(hidden_size, vocab_size)

    def forward(
        self,
        prev_token: torch.Tensor,
        hidden: torch.Tensor,
        encoder_outputs: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Advance the decoder by one timestep.

        Args:
            prev_token: One-hot previous token, (batch, vocab_size).
            hidden: Decoder state, (batch, hidden_size).
            encoder_outputs: Shape (src_len, batch, hidden_size).

        Returns:
            Tuple of (probs, hidden, attention_weights).
            - probs: Next-token distribution, (batch, vocab_size).
            - hidden: Updated state, (batch, hidden_size).
            - attention_weights: Shape (src_len, batch).
        """
        embedded = self.dropout(prev_token @ self.embedding.weight)

        context, attention_weights = self.attention(encoder_outputs, hidden)

        hidden = self.rnn(torch.cat([embedded, context], dim=-1), hidden)

        logits = F.relu(self.output_projection(hidden))
        probs = F.softmax(logits, dim=-1)

        return probs, hidden, attention_weights
