"""
Additive Attention Implementation.

Implements the alignment model from "Neural Machine Translation by
Jointly Learning to Align and Translate" (Bahdanau et al., 2014):

    score_i = v . tanh(W1 h_i + W2 d)
    a       = softmax(score) over encoder timesteps
    context = sum_i a_i h_i
"""

import torch
import torch.nn as nn
import torch.nn.functional as F
from typing import Tuple


class AdditiveAttention(nn.Module):
    """Additive (Bahdanau) attention over encoder timesteps.

    Args:
        hidden_size: Dimension of encoder outputs and decoder state.
    """

    def __init__(self, hidden_size: int):
        super().__init__()

        self.hidden_size = hidden_size

        self.w1 = nn.Linear(hidden_size, hidden_size, bias=False)  # encoder side
        self.w2 = nn.Linear(hidden_size, hidden_size)              # decoder side
        self.v = nn.Linear(hidden_size, 1, bias=False)

    def forward(
        self,
        encoder_outputs: torch.Tensor,
        decoder_state: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Compute the context vector.

        Args:
            encoder_outputs: Shape (src_len, batch, hidden_size).
            decoder_state: Current decoder hidden state, (batch, hidden_size).

        Returns:
            Tuple of (context, weights).
            - context: Shape (batch, hidden_size), same as one encoder output.
            - weights: Shape (src_len, batch); sums to 1 over src_len.
        """
        # (src_len, batch, hidden) + (1, batch, hidden)
        energy = torch.tanh(self.w1(encoder_outputs) + self.w2(decoder_state).unsqueeze(0))

        # (src_len, batch)
        scores = self.v(energy).squeeze(-1)

        # Normalize over timesteps, not over the batch
        weights = F.softmax(scores, dim=0)

        context = (weights.unsqueeze(-1) * encoder_outputs).sum(dim=0)

        return context, weights
