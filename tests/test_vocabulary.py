"""
Unit tests for the word-level vocabulary.

Tests cover:
- Reserved indices and index assignment
- Count bookkeeping on repeated observation
- Sentence <-> index conversion and OOV policy
- Serialization used by checkpoints
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestVocabularyGrowth(unittest.TestCase):
    """Test observe() and index assignment."""

    def test_reserved_indices(self):
        """A fresh vocabulary only holds the four reserved tokens."""
        from attn_nmt.vocabulary import Vocabulary

        vocab = Vocabulary("eng")

        self.assertEqual(vocab.n_words, 4)
        self.assertEqual(
            vocab.index2word,
            {1: "<SOS>", 2: "<EOS>", 3: "<UNK>", 4: "<PAD>"}
        )
        self.assertEqual(vocab.word2index, {})
        self.assertEqual(vocab.size, 5)

    def test_new_words_get_next_index(self):
        """Novel words are numbered from 5 in order of appearance."""
        from attn_nmt.vocabulary import Vocabulary

        vocab = Vocabulary("eng")
        vocab.observe("i am cold .")

        self.assertEqual(vocab.word2index, {"i": 5, "am": 6, "cold": 7, ".": 8})
        self.assertEqual(vocab.n_words, 8)
        self.assertEqual(vocab.index2word[7], "cold")

    def test_reobserve_keeps_size_and_counts(self):
        """Observing the same tokens again only increments counts."""
        from attn_nmt.vocabulary import Vocabulary

        vocab = Vocabulary("eng")
        vocab.observe("you are you")
        size = vocab.n_words

        vocab.observe("are you")

        self.assertEqual(vocab.n_words, size)
        self.assertEqual(vocab.word2count["you"], 3)
        self.assertEqual(vocab.word2count["are"], 2)

    def test_maps_stay_consistent(self):
        """index2word[k] == w exactly when word2index[w] == k."""
        from attn_nmt.vocabulary import Vocabulary

        vocab = Vocabulary("fra")
        for sentence in ["je suis la", "tu es la", "il est ici ."]:
            vocab.observe(sentence)

        for word, index in vocab.word2index.items():
            self.assertEqual(vocab.index2word[index], word)
        for index, word in vocab.index2word.items():
            if index > 4:
                self.assertEqual(vocab.word2index[word], index)
        self.assertEqual(len(vocab.index2word), vocab.n_words)

    def test_empty_sentence_observes_nothing(self):
        """Empty and blank sentences add no entries."""
        from attn_nmt.vocabulary import Vocabulary

        vocab = Vocabulary("eng")
        vocab.observe("")
        vocab.observe("   ")

        self.assertEqual(vocab.n_words, 4)
        self.assertNotIn("", vocab)


class TestSentenceConversion(unittest.TestCase):
    """Test sentence <-> index conversion."""

    def setUp(self):
        from attn_nmt.vocabulary import Vocabulary

        self.vocab = Vocabulary("eng")
        self.vocab.observe("i am cold .")

    def test_single_trailing_eos(self):
        """Indexed sentences end with EOS exactly once."""
        from attn_nmt.vocabulary import EOS_ID

        for sentence in ["i am cold .", "cold", "", "i i i"]:
            indexes = self.vocab.indexes_from_sentence(sentence)
            self.assertEqual(indexes[-1], EOS_ID)
            self.assertEqual(indexes.count(EOS_ID), 1)

        self.assertEqual(self.vocab.indexes_from_sentence("i am cold ."), [5, 6, 7, 8, 2])

    def test_unknown_words_map_to_unk(self):
        """Unknown words become UNK under the default policy."""
        from attn_nmt.vocabulary import UNK_ID

        indexes = self.vocab.indexes_from_sentence("i am hot")
        self.assertEqual(indexes, [5, 6, UNK_ID, 2])

    def test_strict_unknown_word_raises(self):
        """Strict lookup refuses unknown words."""
        from attn_nmt.errors import UnknownWordError

        with self.assertRaises(UnknownWordError) as ctx:
            self.vocab.indexes_from_sentence("i am hot", strict=True)
        self.assertEqual(ctx.exception.word, "hot")

    def test_sentence_from_indexes(self):
        """Decoding skips reserved tokens and maps unassigned IDs to UNK."""
        words = self.vocab.sentence_from_indexes([1, 5, 6, 4, 7, 2])
        self.assertEqual(words, ["i", "am", "cold"])

        words = self.vocab.sentence_from_indexes([5, 0])
        self.assertEqual(words, ["i", "<UNK>"])

    def test_dict_round_trip(self):
        """to_dict/from_dict rebuilds identical maps."""
        from attn_nmt.vocabulary import Vocabulary

        self.vocab.observe("i am")
        restored = Vocabulary.from_dict(self.vocab.to_dict())

        self.assertEqual(restored.name, "eng")
        self.assertEqual(restored.word2index, self.vocab.word2index)
        self.assertEqual(restored.word2count, self.vocab.word2count)
        self.assertEqual(restored.index2word, self.vocab.index2word)
        self.assertEqual(restored.n_words, self.vocab.n_words)


if __name__ == '__main__':
    unittest.main()
