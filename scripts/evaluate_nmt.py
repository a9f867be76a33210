#!/usr/bin/env python3
"""
Evaluation Script.

Scores a trained checkpoint with BLEU on a tab-separated corpus,
after the same normalization and filtering used for training.

Usage:
    python scripts/evaluate_nmt.py --checkpoint models/translation/best.pt --data data/eng-fra.txt
    python scripts/evaluate_nmt.py --checkpoint best.pt --data test.txt --samples 10
"""

import argparse
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import torch

from attn_nmt.config import DataConfig
from attn_nmt.inference import Translator
from attn_nmt.evaluation import Evaluator
from attn_nmt.training.dataset import read_pairs, filter_pairs


def parse_args():
    parser = argparse.ArgumentParser(description="Evaluate a trained translator")

    parser.add_argument("--checkpoint", type=str, required=True,
                       help="Path to model checkpoint")
    parser.add_argument("--data", type=str, required=True,
                       help="Tab-separated sentence pairs")

    parser.add_argument("--output", type=str, default=None,
                       help="Path to save translations (JSON)")
    parser.add_argument("--samples", type=int, default=0,
                       help="Number of sample translations to show")
    parser.add_argument("--batch-size", type=int, default=32,
                       help="Sentences per decoding batch")
    parser.add_argument("--max-steps", type=int, default=12,
                       help="Maximum decoder steps per sentence")

    parser.add_argument("--device", type=str, default=None,
                       help="Device (cuda, cpu)")

    return parser.parse_args()


def main():
    args = parse_args()

    print("=" * 60)
    print("Translation Evaluation")
    print("=" * 60)

    device = torch.device(args.device) if args.device else None

    translator = Translator.from_checkpoint(
        args.checkpoint, device=device, max_steps=args.max_steps
    )
    print(f"Device: {translator.device}")

    data_config = DataConfig()
    pairs = filter_pairs(read_pairs(args.data), data_config.max_length, data_config.eng_prefixes)
    print(f"Evaluation pairs after filtering: {len(pairs)}")

    if args.samples > 0 and pairs:
        print("\n--- Samples ---")
        for source, target in random.sample(pairs, min(args.samples, len(pairs))):
            print(f"\n> {source}")
            print(f"= {target}")
            print(f"< {translator.translate(source)}")

    print("\n--- Metrics ---")
    Evaluator(translator).evaluate_pairs(
        pairs,
        batch_size=args.batch_size,
        output_file=args.output
    )


if __name__ == "__main__":
    main()
