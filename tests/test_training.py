"""
Unit tests for the training loop.

Tests cover:
- Masked cross-entropy ignoring padding
- One SGD step reaching every parameter
- Epoch loop, checkpoints and metrics log
- Early stopping
"""

import json
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import torch

from test_utils import TRAINING_CORPUS, create_temp_test_file, cleanup_test_files, make_debug_config


class TestMaskedCrossEntropyLoss(unittest.TestCase):
    """Test the PAD-masked loss."""

    def test_padding_targets_contribute_nothing(self):
        """PAD targets add no loss."""
        from attn_nmt.training.trainer import MaskedCrossEntropyLoss

        criterion = MaskedCrossEntropyLoss(vocab_size=10, pad_id=4)
        probs = torch.softmax(torch.randn(2, 10), dim=-1)

        loss = criterion(probs, torch.tensor([6, 4]))
        expected = -torch.log(probs[0, 6]) / 2

        self.assertTrue(torch.allclose(loss, expected, atol=1e-6))

    def test_all_padding_is_zero(self):
        """An all-PAD target gives zero loss."""
        from attn_nmt.training.trainer import MaskedCrossEntropyLoss

        criterion = MaskedCrossEntropyLoss(vocab_size=10, pad_id=4)
        probs = torch.softmax(torch.randn(3, 10), dim=-1)

        loss = criterion(probs, torch.tensor([4, 4, 4]))
        self.assertEqual(loss.item(), 0.0)

    def test_no_gradient_through_padding(self):
        """PAD positions receive no gradient."""
        from attn_nmt.training.trainer import MaskedCrossEntropyLoss

        criterion = MaskedCrossEntropyLoss(vocab_size=10, pad_id=4)
        logits = torch.randn(2, 10, requires_grad=True)

        criterion(torch.softmax(logits, dim=-1), torch.tensor([6, 4])).backward()

        self.assertTrue(torch.all(logits.grad[1] == 0))
        self.assertFalse(torch.all(logits.grad[0] == 0))


class TrainerTestCase(unittest.TestCase):
    """Builds a tiny corpus, vocabularies and model for trainer tests."""

    def setUp(self):
        from attn_nmt.training.dataset import (
            prepare_data, train_test_split, TranslationDataset, create_dataloader
        )
        from attn_nmt.model.seq2seq import create_model_from_config
        from attn_nmt.training.utils import set_seed

        set_seed(0)

        self.data_path = create_temp_test_file(TRAINING_CORPUS)
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.config = make_debug_config(self.tmp_dir.name, data_path=self.data_path)

        self.input_vocab, self.output_vocab, pairs = prepare_data(self.config.data)
        self.train_pairs, self.test_pairs = train_test_split(pairs, ratio=0.75, seed=0)

        self.config.model.input_vocab_size = self.input_vocab.size
        self.config.model.output_vocab_size = self.output_vocab.size

        self.train_loader = create_dataloader(
            TranslationDataset(self.train_pairs, self.input_vocab, self.output_vocab),
            batch_size=self.config.training.batch_size
        )
        self.test_loader = create_dataloader(
            TranslationDataset(self.test_pairs, self.input_vocab, self.output_vocab),
            batch_size=self.config.training.batch_size,
            shuffle=False
        )
        self.model = create_model_from_config(self.config)

    def tearDown(self):
        cleanup_test_files(self.data_path)
        self.tmp_dir.cleanup()

    def make_trainer(self):
        from attn_nmt.training.trainer import Trainer

        return Trainer(
            model=self.model,
            config=self.config,
            train_dataloader=self.train_loader,
            val_dataloader=self.test_loader,
            input_vocab=self.input_vocab,
            output_vocab=self.output_vocab,
            device=torch.device('cpu')
        )


class TestTrainer(TrainerTestCase):
    """Test Trainer behaviour on a tiny corpus."""

    def test_corpus_filtering(self):
        """"It is raining" is dropped by the prefix filter."""
        self.assertEqual(len(self.train_pairs) + len(self.test_pairs), 9)

    def test_train_step_updates_every_parameter(self):
        """One step changes every parameter."""
        trainer = self.make_trainer()
        before = {name: p.detach().clone() for name, p in self.model.named_parameters()}

        loss = trainer.train_step(next(iter(self.train_loader)))

        self.assertGreater(loss, 0.0)
        for name, param in self.model.named_parameters():
            self.assertIsNotNone(param.grad, name)
            self.assertFalse(torch.equal(param.detach(), before[name]), name)

    def test_loss_is_sum_of_masked_step_losses(self):
        """Batch loss sums -log p(target) over non-PAD steps, divided by batch size."""
        trainer = self.make_trainer()
        self.model.eval()
        batch = next(iter(self.train_loader))

        with torch.no_grad():
            loss = trainer.compute_loss(batch, teacher_forcing_ratio=1.0)
            probs = self.model(batch['src'], batch['tgt_ids'], teacher_forcing_ratio=1.0)

        tgt_ids = batch['tgt_ids']
        batch_size = tgt_ids.size(1)
        expected = 0.0
        for t in range(tgt_ids.size(0)):
            for b in range(batch_size):
                token = tgt_ids[t, b].item()
                if token != self.model.pad_id:
                    expected -= torch.log(probs[t, b, token]).item() / batch_size

        self.assertTrue(torch.isfinite(loss))
        self.assertAlmostEqual(loss.item(), expected, delta=1e-3)

    def test_validate_returns_mean_loss(self):
        """Validation gives a positive loss and leaves the model in eval mode."""
        trainer = self.make_trainer()

        val_loss = trainer.validate()

        self.assertGreater(val_loss, 0.0)
        self.assertFalse(self.model.training)

    def test_train_writes_checkpoints_and_log(self):
        """Training writes checkpoints and the metrics log."""
        trainer = self.make_trainer()
        trainer.train()

        model_dir = Path(self.tmp_dir.name)
        for name in ("best.pt", "epoch_1.pt", "final.pt"):
            self.assertTrue((model_dir / name).exists(), name)

        with open(model_dir / "training_log.jsonl") as f:
            entries = [json.loads(line) for line in f]
        self.assertEqual(len(entries), self.config.training.max_epochs)
        self.assertIn('train_loss', entries[0])
        self.assertIn('val_loss', entries[0])

    def test_resume_restores_state(self):
        """Loading a checkpoint restores weights and epoch."""
        from attn_nmt.model.seq2seq import create_model_from_config

        trainer = self.make_trainer()
        trainer.train()

        self.model = create_model_from_config(self.config)
        resumed = self.make_trainer()
        resumed.load_checkpoint(str(Path(self.tmp_dir.name) / "final.pt"))

        self.assertEqual(resumed.epoch, trainer.epoch + 1)
        self.assertEqual(resumed.best_val_loss, trainer.best_val_loss)
        for (name, a), (_, b) in zip(trainer.model.state_dict().items(),
                                     resumed.model.state_dict().items()):
            self.assertTrue(torch.equal(a, b), name)


class TestCheckpointUtils(TrainerTestCase):
    """Test save_checkpoint/load_checkpoint."""

    def test_vocabularies_round_trip(self):
        """Vocabularies survive a checkpoint round trip."""
        from attn_nmt.training.utils import save_checkpoint, load_checkpoint

        path = Path(self.tmp_dir.name) / "ckpt" / "model.pt"
        save_checkpoint(
            path, self.model,
            epoch=3,
            config=self.model.get_config(),
            input_vocab=self.input_vocab,
            output_vocab=self.output_vocab
        )

        meta = load_checkpoint(path)

        self.assertEqual(meta['epoch'], 3)
        self.assertEqual(meta['config'], self.model.get_config())
        self.assertEqual(meta['input_vocab'].word2index, self.input_vocab.word2index)
        self.assertEqual(meta['output_vocab'].index2word, self.output_vocab.index2word)


class TestEarlyStopping(unittest.TestCase):
    """Test EarlyStopping."""

    def test_stops_after_patience(self):
        """Stopping triggers after patience epochs without progress."""
        from attn_nmt.training.utils import EarlyStopping

        stopper = EarlyStopping(patience=2, min_delta=0.1)

        self.assertFalse(stopper(5.0))
        self.assertFalse(stopper(4.0))   # improved
        self.assertFalse(stopper(3.95))  # within min_delta
        self.assertTrue(stopper(3.99))


class TestSeeding(unittest.TestCase):
    """Test set_seed reproducibility."""

    def test_same_seed_same_weights(self):
        """The same seed builds identical models."""
        from attn_nmt.model.seq2seq import Seq2Seq
        from attn_nmt.training.utils import set_seed

        set_seed(7)
        first = Seq2Seq(10, 10, hidden_size=8)
        set_seed(7)
        second = Seq2Seq(10, 10, hidden_size=8)

        for a, b in zip(first.parameters(), second.parameters()):
            self.assertTrue(torch.equal(a, b))


if __name__ == '__main__':
    unittest.main()
