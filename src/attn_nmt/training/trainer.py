"""
Main Training Loop for NMT.

Per batch:
- Encode the source once
- Step the decoder through the target with a teacher-forcing coin flip
- Sum the masked cross-entropy of every step
- Take one SGD step on the summed loss
"""

import time
from pathlib import Path
from typing import Optional, Dict
import torch
import torch.nn as nn
import torch.nn.functional as F
from torch.optim import SGD
from torch.utils.data import DataLoader
from tqdm import tqdm

from .utils import (
    save_checkpoint, load_checkpoint,
    EarlyStopping, MetricsTracker, get_device
)


class MaskedCrossEntropyLoss(nn.Module):
    """Cross-entropy over predicted probabilities that ignores padding.

    The class-weight vector is 1 everywhere except 0 at the PAD index,
    so padded target positions contribute neither loss nor gradient.
    The loss is summed over the batch and divided by the batch size.

    Args:
        vocab_size: Target vocabulary (one-hot) width.
        pad_id: Index of the padding token.
        eps: Floor applied to probabilities before the log.
    """

    def __init__(self, vocab_size: int, pad_id: int = 4, eps: float = 1e-9):
        super().__init__()
        self.vocab_size = vocab_size
        self.pad_id = pad_id
        self.eps = eps

        weight = torch.ones(vocab_size)
        weight[pad_id] = 0.0
        self.register_buffer('weight', weight)

    def forward(self, probs: torch.Tensor, target: torch.Tensor) -> torch.Tensor:
        """Compute the loss for one decoder step.

        Args:
            probs: Distributions of shape (batch, vocab_size).
            target: True token IDs of shape (batch,).

        Returns:
            Scalar loss tensor.
        """
        log_probs = torch.log(probs.clamp_min(self.eps))
        loss = F.nll_loss(log_probs, target, weight=self.weight, reduction='sum')
        return loss / target.size(0)


class Trainer:
    """Trainer for the attention encoder-decoder.

    Handles:
    - One SGD step per batch on the summed per-step loss
    - Test-set loss after every epoch
    - Checkpointing and optional early stopping

    Args:
        model: Seq2Seq model.
        config: NMTConfig.
        train_dataloader: Training data loader.
        val_dataloader: Test data loader.
        input_vocab: Source vocabulary (stored in checkpoints).
        output_vocab: Target vocabulary (stored in checkpoints).
        device: Device for training.
    """

    def __init__(
        self,
        model: nn.Module,
        config,
        train_dataloader: DataLoader,
        val_dataloader: Optional[DataLoader] = None,
        input_vocab=None,
        output_vocab=None,
        device: Optional[torch.device] = None
    ):
        self.model = model
        self.config = config
        self.train_dataloader = train_dataloader
        self.val_dataloader = val_dataloader
        self.input_vocab = input_vocab
        self.output_vocab = output_vocab

        # Device setup
        self.device = device or get_device()
        self.model = self.model.to(self.device)

        train_cfg = config.training

        self.criterion = MaskedCrossEntropyLoss(
            vocab_size=model.output_vocab_size,
            pad_id=model.pad_id
        ).to(self.device)

        self.optimizer = SGD(model.parameters(), lr=train_cfg.learning_rate)

        # Training state
        self.epoch = 0
        self.best_val_loss = float('inf')

        self.early_stopping = None
        if train_cfg.patience is not None:
            self.early_stopping = EarlyStopping(
                patience=train_cfg.patience,
                min_delta=train_cfg.min_delta
            )
        self.metrics_tracker = MetricsTracker(
            log_file=Path(config.model_dir) / "training_log.jsonl"
        )

        self.teacher_forcing_ratio = train_cfg.teacher_forcing_ratio
        self.max_grad_norm = train_cfg.max_grad_norm

        print(f"Trainer initialized:")
        print(f"  Device: {self.device}")
        print(f"  Total parameters: {model.count_parameters_readable()}")

    def compute_loss(self, batch: Dict[str, torch.Tensor], teacher_forcing_ratio: float) -> torch.Tensor:
        """Run the model over a batch and sum the per-step losses."""
        src = batch['src'].to(self.device)
        tgt_ids = batch['tgt_ids'].to(self.device)

        probs = self.model(src, tgt_ids, teacher_forcing_ratio=teacher_forcing_ratio)

        loss = probs.new_zeros(())
        for t in range(tgt_ids.size(0)):
            loss = loss + self.criterion(probs[t], tgt_ids[t])
        return loss

    def train_step(self, batch: Dict[str, torch.Tensor]) -> float:
        """Forward, backward and one optimizer step for a single batch.

        Returns:
            The summed batch loss.
        """
        self.optimizer.zero_grad()

        loss = self.compute_loss(batch, self.teacher_forcing_ratio)
        loss.backward()

        if self.max_grad_norm is not None:
            nn.utils.clip_grad_norm_(self.model.parameters(), self.max_grad_norm)

        self.optimizer.step()
        return loss.item()

    def train_epoch(self) -> Dict[str, float]:
        """Train for one epoch.

        Returns:
            Dictionary with training metrics.
        """
        self.model.train()
        epoch_loss = 0.0
        num_batches = 0

        progress_bar = tqdm(
            self.train_dataloader,
            desc=f"Epoch {self.epoch + 1}",
            dynamic_ncols=True
        )

        for batch in progress_bar:
            loss = self.train_step(batch)

            epoch_loss += loss
            num_batches += 1

            progress_bar.set_postfix({'loss': f"{epoch_loss / num_batches:.4f}"})
            self.metrics_tracker.update(train_loss=loss)

        avg_loss = epoch_loss / num_batches if num_batches > 0 else 0
        return {'train_loss': avg_loss}

    @torch.no_grad()
    def validate(self) -> float:
        """Mean summed batch loss over the test set.

        Decoding is fully teacher-forced so the figure does not depend
        on the coin flip.
        """
        self.model.eval()
        total_loss = 0.0
        num_batches = 0

        for batch in tqdm(self.val_dataloader, desc="Validating", leave=False):
            total_loss += self.compute_loss(batch, teacher_forcing_ratio=1.0).item()
            num_batches += 1

        avg_loss = total_loss / num_batches if num_batches > 0 else 0
        print(f"\nTest loss: {avg_loss:.4f}")

        return avg_loss

    def train(self):
        """Main training loop."""
        max_epochs = self.config.training.max_epochs

        print(f"\nStarting training...")
        print(f"  Epochs: {max_epochs}")
        print(f"  Batches per epoch: {len(self.train_dataloader)}")
        print(f"  Learning rate: {self.config.training.learning_rate}")

        start_time = time.time()

        for epoch in range(self.epoch, max_epochs):
            self.epoch = epoch
            epoch_start = time.time()

            train_metrics = self.train_epoch()

            if self.val_dataloader:
                val_loss = self.validate()
                train_metrics['val_loss'] = val_loss

                if val_loss < self.best_val_loss:
                    self.best_val_loss = val_loss
                    self.save_checkpoint("best.pt")

            self.metrics_tracker.epoch_end(epoch, **train_metrics)
            epoch_time = time.time() - epoch_start

            print(f"\nEpoch {epoch + 1} completed in {epoch_time:.1f}s")
            print(f"  Train loss: {train_metrics['train_loss']:.4f}")
            if 'val_loss' in train_metrics:
                print(f"  Test loss: {train_metrics['val_loss']:.4f}")

            self.save_checkpoint(f"epoch_{epoch + 1}.pt")

            if (self.early_stopping is not None and 'val_loss' in train_metrics
                    and self.early_stopping(train_metrics['val_loss'])):
                print(f"\nEarly stopping triggered at epoch {epoch + 1}")
                break

        self.save_checkpoint("final.pt")

        total_time = time.time() - start_time
        print(f"\nTraining completed in {total_time / 60:.1f} minutes")
        if self.val_dataloader:
            print(f"Best test loss: {self.best_val_loss:.4f}")

    def save_checkpoint(self, filename: str):
        """Save training checkpoint."""
        save_checkpoint(
            path=Path(self.config.model_dir) / filename,
            model=self.model,
            optimizer=self.optimizer,
            epoch=self.epoch,
            best_val_loss=self.best_val_loss,
            config=self.model.get_config(),
            input_vocab=self.input_vocab,
            output_vocab=self.output_vocab
        )

    def load_checkpoint(self, path: str):
        """Resume from a checkpoint; training continues at the next epoch."""
        meta = load_checkpoint(
            path=Path(path),
            model=self.model,
            optimizer=self.optimizer,
            device=self.device
        )

        self.epoch = meta['epoch'] + 1
        self.best_val_loss = meta['best_val_loss']
