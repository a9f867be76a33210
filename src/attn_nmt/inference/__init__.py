"""NMT Inference Module."""

from .greedy import greedy_decode
from .translator import Translator

__all__ = [
    "greedy_decode",
    "Translator",
]
