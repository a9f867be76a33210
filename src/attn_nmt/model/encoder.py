"""
GRU Encoder Implementation.

Reads a one-hot source batch one timestep at a time:
    x_t -> Embedding -> Dropout -> GRUCell -> h_t

The final hidden state is linearly projected to initialize the decoder.
"""

import torch
import torch.nn as nn
from typing import Tuple


class Encoder(nn.Module):
    """Unidirectional GRU encoder over one-hot inputs.

    Args:
        vocab_size: Source one-hot width.
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
        self.rnn = nn.GRUCell(hidden_size, hidden_size)

        # Maps the last hidden state to the decoder's initial state
        self.projection = nn.Linear(hidden_size, hidden_size)

    def embed(self, x: torch.Tensor) -> torch.Tensor:
        """Multiply one-hot rows by the embedding matrix.

        Args:
            x: One-hot tensor of shape (batch, vocab_size).

        Returns:
            Embedded tensor of shape (batch, hidden_size).
        """
        return self.dropout(x @ self.embedding.weight)

    def forward(self, x: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Encode a batch.

        The recurrent state starts from zeros on every call, so each
        batch is encoded independently.

        Args:
            x: One-hot source of shape (src_len, batch, vocab_size).

        Returns:
            Tuple of (outputs, projected).
            - outputs: Hidden state per timestep, (src_len, batch, hidden_size).
            - projected: Projected final hidden state, (batch, hidden_size).
        """
        src_len, batch_size, _ = x.size()
        hidden = x.new_zeros(batch_size, self.hidden_size)

        outputs = []
        for t in range(src_len):
            hidden = self.rnn(self.embed(x[t]), hidden)
            outputs.append(hidden)

        outputs = torch.stack(outputs, dim=0)
        projected = self.projection(hidden)

        return outputs, projected
