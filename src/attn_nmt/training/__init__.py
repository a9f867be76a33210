"""NMT Training Module."""

from .trainer import Trainer, MaskedCrossEntropyLoss
from .dataset import (
    TranslationDataset,
    normalize_string,
    read_pairs,
    filter_pair,
    filter_pairs,
    prepare_data,
    train_test_split,
    pad_sequences,
    batch_sequences,
    create_dataloader,
)
from .utils import set_seed, save_checkpoint, load_checkpoint

__all__ = [
    "Trainer",
    "MaskedCrossEntropyLoss",
    "TranslationDataset",
    "normalize_string",
    "read_pairs",
    "filter_pair",
    "filter_pairs",
    "prepare_data",
    "train_test_split",
    "pad_sequences",
    "batch_sequences",
    "create_dataloader",
    "set_seed",
    "save_checkpoint",
    "load_checkpoint",
]
