"""
Training Utilities.

Provides:
- Deterministic seeding for reproducibility
- Checkpoint saving and loading (with vocabularies)
- Per-epoch metrics logging
- Early stopping
"""

import os
import random
from pathlib import Path
from typing import Optional, Dict, Any
import json
import numpy as np
import torch
from torch import nn

from ..vocabulary import Vocabulary


def set_seed(seed: int = 42):
    """Seed Python, NumPy and torch RNGs.

    The teacher-forcing coin flip uses Python's `random`, so all three
    must be seeded for a repeatable run.
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)
    os.environ['PYTHONHASHSEED'] = str(seed)


def get_device(device: Optional[str] = None) -> torch.device:
    """Resolve a device name, preferring CUDA when available."""
    if device is not None:
        return torch.device(device)
    if torch.cuda.is_available():
        return torch.device('cuda')
    return torch.device('cpu')


def save_checkpoint(
    path: Path,
    model: nn.Module,
    optimizer: Optional[torch.optim.Optimizer] = None,
    epoch: int = 0,
    best_val_loss: float = float('inf'),
    config: Optional[Dict] = None,
    input_vocab: Optional[Vocabulary] = None,
    output_vocab: Optional[Vocabulary] = None
):
    """Save a training checkpoint.

    Vocabularies are stored alongside the weights so that a checkpoint
    alone is enough to translate.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    checkpoint = {
        'epoch': epoch,
        'best_val_loss': best_val_loss,
        'model_state_dict': model.state_dict(),
    }

    if optimizer is not None:
        checkpoint['optimizer_state_dict'] = optimizer.state_dict()
    if config is not None:
        checkpoint['config'] = config
    if input_vocab is not None:
        checkpoint['input_vocab'] = input_vocab.to_dict()
    if output_vocab is not None:
        checkpoint['output_vocab'] = output_vocab.to_dict()

    torch.save(checkpoint, path)
    print(f"Checkpoint saved: {path}")


def load_checkpoint(
    path: Path,
    model: Optional[nn.Module] = None,
    optimizer: Optional[torch.optim.Optimizer] = None,
    device: Optional[torch.device] = None
) -> Dict[str, Any]:
    """Load a training checkpoint.

    Args:
        path: Path to checkpoint file.
        model: Optional model to load weights into.
        optimizer: Optional optimizer to load state into.
        device: Device to map tensors to.

    Returns:
        Dictionary with epoch, best_val_loss, config, model_state_dict
        and the rebuilt vocabularies (None when absent).
    """
    if device is None:
        device = torch.device('cpu')

    checkpoint = torch.load(path, map_location=device)

    if model is not None:
        model.load_state_dict(checkpoint['model_state_dict'])

    if optimizer is not None and 'optimizer_state_dict' in checkpoint:
        optimizer.load_state_dict(checkpoint['optimizer_state_dict'])

    print(f"Checkpoint loaded: {path}")
    print(f"  Epoch: {checkpoint.get('epoch', 'N/A')}")

    input_vocab = checkpoint.get('input_vocab')
    output_vocab = checkpoint.get('output_vocab')

    return {
        'epoch': checkpoint.get('epoch', 0),
        'best_val_loss': checkpoint.get('best_val_loss', float('inf')),
        'config': checkpoint.get('config'),
        'model_state_dict': checkpoint['model_state_dict'],
        'input_vocab': Vocabulary.from_dict(input_vocab) if input_vocab else None,
        'output_vocab': Vocabulary.from_dict(output_vocab) if output_vocab else None,
    }


class EarlyStopping:
    """Stop training when the test loss stops improving.

    Args:
        patience: Number of epochs without improvement before stopping.
        min_delta: Minimum decrease that counts as improvement.
    """

    def __init__(self, patience: int = 5, min_delta: float = 0.001):
        self.patience = patience
        self.min_delta = min_delta

        self.counter = 0
        self.best_value = None
        self.should_stop = False

    def __call__(self, value: float) -> bool:
        """Record a new loss; return True once patience is exhausted."""
        if self.best_value is None or value < self.best_value - self.min_delta:
            self.best_value = value
            self.counter = 0
            return False

        self.counter += 1
        if self.counter >= self.patience:
            self.should_stop = True
        return self.should_stop


class MetricsTracker:
    """Collect per-batch values and append per-epoch averages to a JSONL log."""

    def __init__(self, log_file: Optional[Path] = None):
        self.history: Dict[str, list] = {}
        self.current: Dict[str, list] = {}
        self.log_file = log_file

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)

    def update(self, **kwargs):
        """Record values for the current epoch."""
        for key, value in kwargs.items():
            if isinstance(value, torch.Tensor):
                value = value.item()
            self.current.setdefault(key, []).append(value)

    def epoch_end(self, epoch: int, **extra) -> Dict[str, float]:
        """Average the epoch's values, log them and reset."""
        stats = {
            key: sum(values) / len(values)
            for key, values in self.current.items() if values
        }
        stats.update(extra)

        for key, value in stats.items():
            self.history.setdefault(key, []).append(value)

        if self.log_file is not None:
            with open(self.log_file, 'a') as f:
                f.write(json.dumps({'epoch': epoch, **stats}) + '\n')

        self.current = {}
        return stats
