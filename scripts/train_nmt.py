#!/usr/bin/env python3
"""
Training Script for the attention encoder-decoder.

Trains an English-French model on a tab-separated sentence-pair file.

Usage:
    python scripts/train_nmt.py --data data/eng-fra.txt
    python scripts/train_nmt.py --config debug --epochs 2
    python scripts/train_nmt.py --resume models/translation/epoch_5.pt --evaluate
"""

import argparse
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attn_nmt.config import get_base_config, get_debug_config
from attn_nmt.model.seq2seq import create_model_from_config
from attn_nmt.training.dataset import (
    TranslationDataset,
    prepare_data,
    train_test_split,
    create_dataloader
)
from attn_nmt.training.trainer import Trainer
from attn_nmt.training.utils import set_seed, get_device
from attn_nmt.inference.translator import Translator
from attn_nmt.evaluation.evaluate import Evaluator


def parse_args():
    parser = argparse.ArgumentParser(description="Train attention GRU translator")

    # Config
    parser.add_argument("--config", type=str, default="base",
                       choices=["base", "debug"],
                       help="Configuration preset")

    # Data
    parser.add_argument("--data", type=str, default=None,
                       help="Tab-separated sentence pairs (overrides config)")
    parser.add_argument("--max-length", type=int, default=None,
                       help="Maximum tokens per sentence (overrides config)")

    # Training
    parser.add_argument("--epochs", type=int, default=None,
                       help="Number of epochs (overrides config)")
    parser.add_argument("--batch-size", type=int, default=None,
                       help="Batch size (overrides config)")
    parser.add_argument("--lr", type=float, default=None,
                       help="Learning rate (overrides config)")
    parser.add_argument("--hidden-size", type=int, default=None,
                       help="Hidden size (overrides config)")
    parser.add_argument("--teacher-forcing", type=float, default=None,
                       help="Teacher forcing ratio (overrides config)")

    # Checkpointing
    parser.add_argument("--resume", type=str, default=None,
                       help="Path to checkpoint to resume from")
    parser.add_argument("--output-dir", type=str,
                       default="models/translation",
                       help="Output directory for checkpoints")

    # Hardware
    parser.add_argument("--device", type=str, default=None,
                       help="Device (cuda, cpu)")

    # Misc
    parser.add_argument("--seed", type=int, default=None,
                       help="Random seed (overrides config)")
    parser.add_argument("--evaluate", action="store_true",
                       help="Report BLEU on the test split after training")

    return parser.parse_args()


def main():
    args = parse_args()

    print("=" * 60)
    print("Attention GRU Translation Training")
    print("=" * 60)

    print(f"\nConfiguration: {args.config}")
    config = get_base_config() if args.config == "base" else get_debug_config()

    # Override config with CLI arguments
    if args.data is not None:
        config.data.data_path = args.data
    if args.max_length is not None:
        config.data.max_length = args.max_length
    if args.epochs is not None:
        config.training.max_epochs = args.epochs
    if args.batch_size is not None:
        config.training.batch_size = args.batch_size
    if args.lr is not None:
        config.training.learning_rate = args.lr
    if args.hidden_size is not None:
        config.model.hidden_size = args.hidden_size
    if args.teacher_forcing is not None:
        config.training.teacher_forcing_ratio = args.teacher_forcing
    if args.seed is not None:
        config.training.seed = args.seed

    set_seed(config.training.seed)

    device = get_device(args.device)
    print(f"Device: {device}")

    config.model_dir = Path(args.output_dir)
    config.model_dir.mkdir(parents=True, exist_ok=True)

    # Corpus
    print("\n--- Data ---")
    input_vocab, output_vocab, pairs = prepare_data(config.data)
    train_pairs, test_pairs = train_test_split(
        pairs, ratio=config.data.train_split, seed=config.training.seed
    )
    print(f"Train pairs: {len(train_pairs)}")
    print(f"Test pairs: {len(test_pairs)}")

    config.model.input_vocab_size = input_vocab.size
    config.model.output_vocab_size = output_vocab.size

    train_dataloader = create_dataloader(
        TranslationDataset(train_pairs, input_vocab, output_vocab),
        batch_size=config.training.batch_size,
        shuffle=config.training.shuffle,
        pad_id=config.model.pad_id
    )

    val_dataloader = None
    if test_pairs:
        val_dataloader = create_dataloader(
            TranslationDataset(test_pairs, input_vocab, output_vocab),
            batch_size=config.training.batch_size,
            shuffle=False,
            pad_id=config.model.pad_id
        )

    # Model
    print("\n--- Model ---")
    model = create_model_from_config(config)
    print(f"Parameters: {model.count_parameters_readable()}")
    print(f"Architecture: GRU-{config.model.hidden_size}d + additive attention")

    trainer = Trainer(
        model=model,
        config=config,
        train_dataloader=train_dataloader,
        val_dataloader=val_dataloader,
        input_vocab=input_vocab,
        output_vocab=output_vocab,
        device=device
    )

    if args.resume:
        print(f"\nResuming from {args.resume}")
        trainer.load_checkpoint(args.resume)

    config.save(config.model_dir / "config.json")

    print("\n--- Training ---")
    trainer.train()

    if args.evaluate and test_pairs:
        print("\n--- Evaluation ---")
        translator = Translator(
            trainer.model, input_vocab, output_vocab,
            device=device,
            max_steps=config.inference.max_steps
        )
        Evaluator(translator).evaluate_pairs(
            test_pairs,
            batch_size=config.training.batch_size,
            output_file=str(config.model_dir / "test_translations.json")
        )

    print("\nTraining complete!")


if __name__ == "__main__":
    main()
