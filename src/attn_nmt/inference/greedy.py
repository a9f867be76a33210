"""
Greedy Decoding for NMT.

Always picks the most likely next token and feeds it back in.
Decoding stops at EOS or after a fixed number of steps.
"""

import torch
from typing import List


@torch.no_grad()
def greedy_decode(
    model,
    src: torch.Tensor,
    max_steps: int = 12
) -> List[List[int]]:
    """Greedy decoding.

    The step cap bounds the output for models that never learn to
    produce EOS reliably.

    Args:
        model: Seq2Seq model.
        src: One-hot source of shape (src_len, batch, input_vocab_size).
        max_steps: Maximum decoder steps per sequence.

    Returns:
        One list of token IDs per batch element, EOS excluded.
    """
    model.eval()
    batch_size = src.size(1)

    encoder_outputs, hidden = model.encode(src)
    decoder_input = model.sos_input(batch_size, src.device)

    outputs: List[List[int]] = [[] for _ in range(batch_size)]
    finished = [False] * batch_size

    for _ in range(max_steps):
        probs, hidden, _ = model.decode_step(decoder_input, hidden, encoder_outputs)
        next_token = probs.argmax(dim=-1)  # (batch,)

        for i, token in enumerate(next_token.tolist()):
            if finished[i]:
                continue
            if token == model.eos_id:
                finished[i] = True
            else:
                outputs[i].append(token)

        if all(finished):
            break

        decoder_input = model.to_one_hot(next_token)

    return outputs
