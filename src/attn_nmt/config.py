"""
NMT Configuration Module.

Defines all hyperparameters and settings for the translation system.
Uses dataclasses for type safety and easy serialization.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, List
import json


# English sentence openings kept by the corpus filter.
# Matched against the normalized source sentence ("i'm" -> "i m").
ENG_PREFIXES = [
    "i am ", "i m ",
    "he is", "he s ",
    "she is", "she s ",
    "you are", "you re ",
    "we are", "we re ",
    "they are", "they re ",
]


@dataclass
class ModelConfig:
    """Encoder-decoder architecture configuration.

    Vocabulary sizes are one-hot widths and are filled in once the
    vocabularies have been built from the corpus.
    """

    # Vocabulary (one-hot widths)
    input_vocab_size: int = 5
    output_vocab_size: int = 5

    # Model dimensions
    hidden_size: int = 128

    # Regularization
    dropout: float = 0.2

    # Reserved token IDs (see Vocabulary)
    sos_id: int = 1
    eos_id: int = 2
    unk_id: int = 3
    pad_id: int = 4

    def __post_init__(self):
        """Validate configuration."""
        assert self.hidden_size > 0, \
            f"hidden_size ({self.hidden_size}) must be positive"
        assert 0.0 <= self.dropout < 1.0, \
            f"dropout ({self.dropout}) must be in [0, 1)"
        assert self.input_vocab_size > self.pad_id, \
            f"input_vocab_size ({self.input_vocab_size}) must cover reserved ids"
        assert self.output_vocab_size > self.pad_id, \
            f"output_vocab_size ({self.output_vocab_size}) must cover reserved ids"


@dataclass
class TrainingConfig:
    """Training hyperparameters.

    Plain SGD with a fixed learning rate, one optimizer step per batch.
    """

    batch_size: int = 32
    learning_rate: float = 0.1
    max_epochs: int = 15

    # Probability of feeding the ground-truth token at each decoder step
    teacher_forcing_ratio: float = 0.5

    # Gradient clipping (None disables)
    max_grad_norm: Optional[float] = None

    # Early stopping on test loss (None disables)
    patience: Optional[int] = None
    min_delta: float = 0.001

    shuffle: bool = True

    # Reproducibility
    seed: int = 42


@dataclass
class DataConfig:
    """Corpus location and filtering settings."""

    data_path: str = "data/eng-fra.txt"

    # Maximum tokens per sentence (both sides)
    max_length: int = 10
    eng_prefixes: List[str] = field(default_factory=lambda: list(ENG_PREFIXES))

    # Fraction of filtered pairs used for training
    train_split: float = 0.9

    source_lang: str = "eng"
    target_lang: str = "fra"


@dataclass
class InferenceConfig:
    """Decoding settings."""

    # Hard cap on emitted tokens per sentence
    max_steps: int = 12

    # "unk" substitutes unknown words with <UNK>, "error" raises
    oov_policy: str = "unk"

    def __post_init__(self):
        assert self.oov_policy in ("unk", "error"), \
            f"oov_policy must be 'unk' or 'error', got {self.oov_policy!r}"


@dataclass
class NMTConfig:
    """Complete NMT system configuration."""

    model: ModelConfig = field(default_factory=ModelConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    data: DataConfig = field(default_factory=DataConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)

    model_dir: Path = Path("models/translation")

    def save(self, path: Path):
        """Save configuration to JSON file."""
        config_dict = {
            "model": asdict(self.model),
            "training": asdict(self.training),
            "data": asdict(self.data),
            "inference": asdict(self.inference),
            "model_dir": str(self.model_dir),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_dict, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Path) -> "NMTConfig":
        """Load configuration from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)

        return cls(
            model=ModelConfig(**config_dict["model"]),
            training=TrainingConfig(**config_dict["training"]),
            data=DataConfig(**config_dict["data"]),
            inference=InferenceConfig(**config_dict["inference"]),
            model_dir=Path(config_dict["model_dir"]),
        )


def get_base_config() -> NMTConfig:
    """Reference configuration: 128-d GRUs, 15 epochs of SGD at lr 0.1."""
    return NMTConfig()


def get_debug_config() -> NMTConfig:
    """Minimal configuration for debugging and testing."""
    config = NMTConfig()
    config.model.hidden_size = 16
    config.model.dropout = 0.0
    config.training.batch_size = 4
    config.training.max_epochs = 1
    return config
