"""Unit tests for NMT configuration."""

import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestNMTConfig(unittest.TestCase):
    """Test NMT configuration."""

    def test_base_defaults(self):
        """Base preset carries the reference hyperparameters."""
        from attn_nmt.config import get_base_config

        config = get_base_config()

        self.assertEqual(config.model.hidden_size, 128)
        self.assertEqual(config.model.dropout, 0.2)
        self.assertEqual(config.training.batch_size, 32)
        self.assertEqual(config.training.learning_rate, 0.1)
        self.assertEqual(config.training.max_epochs, 15)
        self.assertEqual(config.training.teacher_forcing_ratio, 0.5)
        self.assertEqual(config.data.max_length, 10)
        self.assertEqual(config.data.train_split, 0.9)
        self.assertEqual(len(config.data.eng_prefixes), 12)
        self.assertEqual(config.inference.max_steps, 12)

    def test_reserved_ids(self):
        """Config IDs agree with the vocabulary's reserved IDs."""
        from attn_nmt.config import ModelConfig
        from attn_nmt import vocabulary

        config = ModelConfig()
        self.assertEqual(
            (config.sos_id, config.eos_id, config.unk_id, config.pad_id),
            (vocabulary.SOS_ID, vocabulary.EOS_ID, vocabulary.UNK_ID, vocabulary.PAD_ID)
        )

    def test_model_config_validation(self):
        """Invalid model settings fail validation."""
        from attn_nmt.config import ModelConfig

        with self.assertRaises(AssertionError):
            ModelConfig(hidden_size=0)
        with self.assertRaises(AssertionError):
            ModelConfig(dropout=1.0)
        with self.assertRaises(AssertionError):
            ModelConfig(output_vocab_size=4)

    def test_inference_policy_validation(self):
        """Only the known OOV policies are accepted."""
        from attn_nmt.config import InferenceConfig

        with self.assertRaises(AssertionError):
            InferenceConfig(oov_policy="drop")

    def test_presets_are_independent(self):
        """Mutating one preset leaves fresh presets untouched."""
        from attn_nmt.config import get_base_config, get_debug_config

        debug = get_debug_config()
        debug.data.eng_prefixes.append("it is")

        self.assertEqual(debug.model.hidden_size, 16)
        self.assertEqual(len(get_base_config().data.eng_prefixes), 12)

    def test_save_load_round_trip(self):
        """A saved config loads back equal."""
        from attn_nmt.config import NMTConfig, get_debug_config

        config = get_debug_config()
        config.model.input_vocab_size = 42
        config.data.data_path = "corpus/eng-fra.txt"

        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "config.json"
            config.save(path)
            loaded = NMTConfig.load(path)

        self.assertEqual(loaded, config)


if __name__ == '__main__':
    unittest.main()
