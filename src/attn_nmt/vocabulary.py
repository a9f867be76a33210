"""
Word-level Vocabulary for NMT.

Maps whitespace-separated words to integer IDs and back.

Reserved IDs:
    1: <SOS>
    2: <EOS>
    3: <UNK>
    4: <PAD>

ID 0 is never assigned. New words receive n_words + 1, so a vocabulary
with n_words entries needs a one-hot width of n_words + 1.
"""

from typing import Dict, List, Any

from .errors import UnknownWordError


SOS_TOKEN = "<SOS>"
EOS_TOKEN = "<EOS>"
UNK_TOKEN = "<UNK>"
PAD_TOKEN = "<PAD>"

SOS_ID = 1
EOS_ID = 2
UNK_ID = 3
PAD_ID = 4

SPECIAL_TOKENS = {SOS_ID: SOS_TOKEN, EOS_ID: EOS_TOKEN, UNK_ID: UNK_TOKEN, PAD_ID: PAD_TOKEN}


class Vocabulary:
    """Growable word <-> index mapping for one language.

    The three maps are only mutated together by `observe`, so
    `index2word[k] == w` holds exactly when `word2index[w] == k`.
    Reserved tokens live in `index2word` only; they are never counted.

    Args:
        name: Language name (e.g. "eng").
    """

    def __init__(self, name: str):
        self.name = name
        self.word2index: Dict[str, int] = {}
        self.word2count: Dict[str, int] = {}
        self.index2word: Dict[int, str] = dict(SPECIAL_TOKENS)
        self.n_words = len(SPECIAL_TOKENS)

    def observe(self, sentence: str) -> None:
        """Register every word of a sentence, counting repeats.

        An empty or whitespace-only sentence registers nothing.
        """
        for word in sentence.split():
            self._add_word(word)

    def _add_word(self, word: str) -> None:
        if word in self.word2index:
            self.word2count[word] += 1
            return
        index = self.n_words + 1
        self.word2index[word] = index
        self.word2count[word] = 1
        self.index2word[index] = word
        self.n_words = index

    def __len__(self) -> int:
        return self.n_words

    def __contains__(self, word: str) -> bool:
        return word in self.word2index

    @property
    def size(self) -> int:
        """One-hot width covering every assigned index."""
        return self.n_words + 1

    def index_of(self, word: str, strict: bool = False) -> int:
        """Look up a word, substituting UNK unless `strict`."""
        index = self.word2index.get(word)
        if index is None:
            if strict:
                raise UnknownWordError(word, self.name)
            return UNK_ID
        return index

    def indexes_from_sentence(self, sentence: str, strict: bool = False) -> List[int]:
        """Convert a sentence to IDs terminated by a single EOS.

        Args:
            sentence: Normalized, whitespace-tokenized sentence.
            strict: Raise UnknownWordError instead of substituting UNK.

        Returns:
            List of word IDs ending with EOS_ID.
        """
        indexes = [self.index_of(word, strict=strict) for word in sentence.split()]
        indexes.append(EOS_ID)
        return indexes

    def sentence_from_indexes(self, indexes: List[int], skip_special_tokens: bool = True) -> List[str]:
        """Convert IDs back to words.

        Unassigned IDs (such as 0) decode as UNK.
        """
        words = []
        for index in indexes:
            if skip_special_tokens and index in SPECIAL_TOKENS:
                continue
            words.append(self.index2word.get(index, UNK_TOKEN))
        return words

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage inside a checkpoint."""
        return {
            "name": self.name,
            "word2index": dict(self.word2index),
            "word2count": dict(self.word2count),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vocabulary":
        """Rebuild a vocabulary saved with `to_dict`."""
        vocab = cls(data["name"])
        for word, index in sorted(data["word2index"].items(), key=lambda item: item[1]):
            vocab.word2index[word] = index
            vocab.word2count[word] = data["word2count"].get(word, 0)
            vocab.index2word[index] = word
            vocab.n_words = max(vocab.n_words, index)
        return vocab

    def __repr__(self) -> str:
        return f"Vocabulary(name={self.name!r}, n_words={self.n_words})"
