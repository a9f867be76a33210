"""
Translation Dataset and DataLoader utilities.

Handles:
- Loading the tab-separated parallel corpus
- Normalizing and filtering sentence pairs
- Building source/target vocabularies
- Padding, timestep-major layout and one-hot encoding of batches
"""

import random
import re
import unicodedata
from pathlib import Path
from typing import List, Tuple, Optional, Dict, Sequence, Union

import torch
import torch.nn.functional as F
from torch.utils.data import Dataset, DataLoader

from ..config import ENG_PREFIXES
from ..errors import MalformedLineError, EmptyCorpusError
from ..vocabulary import Vocabulary, PAD_ID


Pair = Tuple[str, str]


def unicode_to_ascii(s: str) -> str:
    """Drop combining marks after NFD decomposition ("é" -> "e")."""
    return "".join(
        c for c in unicodedata.normalize("NFD", s)
        if unicodedata.category(c) != "Mn"
    )


def normalize_string(s: str) -> str:
    """Lowercase, strip accents and space-separate sentence punctuation.

    Any run of characters other than letters and .!? becomes one space:
        "J'ai froid." -> "j ai froid ."
    """
    s = unicode_to_ascii(s.lower().strip())
    s = re.sub(r"([.!?])", r" \1", s)
    s = re.sub(r"[^a-zA-Z.!?]+", r" ", s)
    return s.strip()


def read_pairs(data_path: Union[str, Path]) -> List[Pair]:
    """Load normalized sentence pairs from a tab-separated file.

    Each non-blank line is `<source>\\t<target>`; extra columns
    (e.g. attribution) are ignored.

    Raises:
        MalformedLineError: A line has no tab delimiter.
    """
    with open(data_path, "r", encoding="utf-8") as f:
        lines = f.read().split("\n")

    pairs = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 2:
            raise MalformedLineError(line, line_number)
        pairs.append((normalize_string(parts[0]), normalize_string(parts[1])))

    return pairs


def filter_pair(
    pair: Pair,
    max_length: int = 10,
    prefixes: Sequence[str] = ENG_PREFIXES
) -> bool:
    """Keep a pair only if both sides fit and the source has a known opening."""
    source, target = pair
    return (
        len(source.split()) <= max_length
        and len(target.split()) <= max_length
        and source.startswith(tuple(prefixes))
    )


def filter_pairs(
    pairs: List[Pair],
    max_length: int = 10,
    prefixes: Sequence[str] = ENG_PREFIXES
) -> List[Pair]:
    """Keep pairs that pass `filter_pair`, preserving their order."""
    return [pair for pair in pairs if filter_pair(pair, max_length, prefixes)]


def prepare_data(data_config) -> Tuple[Vocabulary, Vocabulary, List[Pair]]:
    """Read, filter and index the corpus.

    Args:
        data_config: DataConfig with path, length limit and prefixes.

    Returns:
        Tuple of (input_vocab, output_vocab, filtered_pairs).

    Raises:
        EmptyCorpusError: Nothing survives reading and filtering.
    """
    print(f"Reading lines from {data_config.data_path}...")
    pairs = read_pairs(data_config.data_path)
    print(f"Read {len(pairs)} sentence pairs")

    pairs = filter_pairs(pairs, data_config.max_length, data_config.eng_prefixes)
    print(f"Trimmed to {len(pairs)} sentence pairs")

    if not pairs:
        raise EmptyCorpusError(
            f"No sentence pairs left after filtering {data_config.data_path}"
        )

    input_vocab = Vocabulary(data_config.source_lang)
    output_vocab = Vocabulary(data_config.target_lang)
    for source, target in pairs:
        input_vocab.observe(source)
        output_vocab.observe(target)

    print("Counted words:")
    print(f"  {input_vocab.name}: {input_vocab.n_words}")
    print(f"  {output_vocab.name}: {output_vocab.n_words}")

    return input_vocab, output_vocab, pairs


def train_test_split(
    pairs: List[Pair],
    ratio: float = 0.9,
    seed: Optional[int] = None
) -> Tuple[List[Pair], List[Pair]]:
    """Shuffle and split pairs into train and test sets.

    A single pair goes to the training set with an empty test set.

    Raises:
        EmptyCorpusError: No pairs, or the ratio leaves one side empty.
    """
    if not pairs:
        raise EmptyCorpusError("Cannot split an empty corpus")

    shuffled = list(pairs)
    random.Random(seed).shuffle(shuffled)

    if len(shuffled) == 1:
        return shuffled, []

    n_train = int(len(shuffled) * ratio)
    if n_train == 0 or n_train == len(shuffled):
        raise EmptyCorpusError(
            f"Split ratio {ratio} leaves an empty side for {len(shuffled)} pairs"
        )
    return shuffled[:n_train], shuffled[n_train:]


def pad_sequences(sequences: Sequence[Sequence[int]], pad_id: int = PAD_ID) -> torch.Tensor:
    """Right-pad sequences to the longest one, timestep-major.

    Returns:
        LongTensor of shape (max_len, n_sequences).
    """
    max_len = max(len(seq) for seq in sequences)
    padded = torch.full((max_len, len(sequences)), pad_id, dtype=torch.long)
    for i, seq in enumerate(sequences):
        padded[:len(seq), i] = torch.as_tensor(seq, dtype=torch.long)
    return padded


def one_hot(indices: torch.Tensor, vocab_size: int) -> torch.Tensor:
    """Float one-hot encoding along a new last dimension."""
    return F.one_hot(indices, num_classes=vocab_size).float()


def batch_sequences(
    sequences: Sequence[Sequence[int]],
    batch_size: int,
    vocab_size: int,
    pad_id: int = PAD_ID
) -> List[torch.Tensor]:
    """Chunk, pad and one-hot encode indexed sequences.

    Sequences are grouped in input order into chunks of `batch_size`
    (the last chunk may be shorter). Shuffle before calling for random
    batch composition.

    Returns:
        One tensor per chunk of shape (max_len, chunk_size, vocab_size);
        `tensor[i]` is the one-hot matrix of position i across the chunk.
    """
    batches = []
    for start in range(0, len(sequences), batch_size):
        chunk = sequences[start:start + batch_size]
        batches.append(one_hot(pad_sequences(chunk, pad_id), vocab_size))
    return batches


class TranslationDataset(Dataset):
    """Dataset of indexed sentence pairs.

    Args:
        pairs: Normalized (source, target) sentence pairs.
        input_vocab: Source vocabulary.
        output_vocab: Target vocabulary.
    """

    def __init__(
        self,
        pairs: List[Pair],
        input_vocab: Vocabulary,
        output_vocab: Vocabulary
    ):
        self.pairs = pairs
        self.input_vocab = input_vocab
        self.output_vocab = output_vocab

    def __len__(self) -> int:
        return len(self.pairs)

    def __getitem__(self, idx: int) -> Dict[str, List[int]]:
        source, target = self.pairs[idx]
        return {
            'src_ids': self.input_vocab.indexes_from_sentence(source),
            'tgt_ids': self.output_vocab.indexes_from_sentence(target),
        }


def collate_fn(
    batch: List[Dict[str, List[int]]],
    src_vocab_size: int,
    pad_id: int = PAD_ID
) -> Dict[str, torch.Tensor]:
    """Collate indexed pairs into one padded, timestep-major batch.

    Returns:
        Dictionary with:
        - src: One-hot source of shape (src_len, batch, src_vocab_size)
        - src_ids: Source IDs of shape (src_len, batch)
        - tgt_ids: Target IDs of shape (tgt_len, batch)
    """
    src_ids = pad_sequences([item['src_ids'] for item in batch], pad_id)
    tgt_ids = pad_sequences([item['tgt_ids'] for item in batch], pad_id)

    return {
        'src': one_hot(src_ids, src_vocab_size),
        'src_ids': src_ids,
        'tgt_ids': tgt_ids,
    }


def create_dataloader(
    dataset: TranslationDataset,
    batch_size: int,
    shuffle: bool = True,
    pad_id: int = PAD_ID
) -> DataLoader:
    """Create DataLoader for a translation dataset.

    Batches are rebuilt on every pass; with `shuffle` the chunk
    membership changes from epoch to epoch.
    """
    src_vocab_size = dataset.input_vocab.size

    def collate_wrapper(batch):
        return collate_fn(batch, src_vocab_size=src_vocab_size, pad_id=pad_id)

    return DataLoader(
        dataset,
        batch_size=batch_size,
        shuffle=shuffle,
        collate_fn=collate_wrapper,
        num_workers=0
    )
