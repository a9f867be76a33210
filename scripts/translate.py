#!/usr/bin/env python3
"""
CLI Translation Tool.

Translate English sentences with a trained checkpoint and print the
decoded French tokens.

Usage:
    python scripts/translate.py --checkpoint models/translation/best.pt --text "I am cold."
    python scripts/translate.py --checkpoint best.pt --file input.txt --output translations.txt
    python scripts/translate.py --checkpoint best.pt --interactive
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import torch

from attn_nmt.errors import UnknownWordError
from attn_nmt.inference import Translator


def parse_args():
    parser = argparse.ArgumentParser(description="Translate text with a trained model")

    parser.add_argument("--checkpoint", type=str, required=True,
                       help="Path to model checkpoint")

    # Input
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("--text", type=str,
                            help="Sentence to translate")
    input_group.add_argument("--file", type=str,
                            help="File with sentences to translate (one per line)")
    input_group.add_argument("--interactive", action="store_true",
                            help="Interactive translation mode")

    # Output
    parser.add_argument("--output", type=str, default=None,
                       help="Output file for translations")

    # Decoding
    parser.add_argument("--max-steps", type=int, default=12,
                       help="Maximum decoder steps per sentence")
    parser.add_argument("--strict", action="store_true",
                       help="Fail on unknown words instead of using <UNK>")

    parser.add_argument("--device", type=str, default=None,
                       help="Device (cuda, cpu)")

    return parser.parse_args()


def interactive_mode(translator: Translator):
    """Run interactive translation loop."""
    print("\nInteractive translation mode")
    print("Type 'quit' or 'exit' to stop")
    print("-" * 40)

    while True:
        try:
            text = input("\nEnglish: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if text.lower() in ("quit", "exit"):
            break
        if not text:
            continue

        try:
            print(f"French: {translator.translate(text)}")
        except UnknownWordError as e:
            print(f"Error: {e}")


def main():
    args = parse_args()

    device = torch.device(args.device) if args.device else None

    print(f"Loading model from {args.checkpoint}...")
    translator = Translator.from_checkpoint(
        args.checkpoint,
        device=device,
        max_steps=args.max_steps,
        oov_policy="error" if args.strict else "unk"
    )
    print(f"Model loaded on {translator.device}")

    if args.interactive:
        interactive_mode(translator)
        return

    if args.text is not None:
        texts = [args.text]
    else:
        with open(args.file, "r", encoding="utf-8") as f:
            texts = [line.strip() for line in f if line.strip()]
        print(f"Translating {len(texts)} sentences...")

    translations = translator.translate_batch(texts)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            for translation in translations:
                f.write(translation + "\n")
        print(f"Translations saved to {args.output}")
    else:
        for text, translation in zip(texts, translations):
            print(f"\n{text}")
            print(f"-> {translation}")


if __name__ == "__main__":
    main()
