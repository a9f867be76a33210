"""Exceptions raised by the NMT pipeline."""

from typing import Optional


class NMTError(Exception):
    """Base class for translation pipeline errors."""


class MalformedLineError(NMTError, ValueError):
    """A corpus line is not `<source>\\t<target>`."""

    def __init__(self, line: str, line_number: Optional[int] = None):
        self.line = line
        self.line_number = line_number
        where = f"line {line_number}" if line_number is not None else "line"
        super().__init__(f"Malformed corpus {where} (missing tab delimiter): {line!r}")


class EmptyCorpusError(NMTError, ValueError):
    """No sentence pairs are left to train or evaluate on."""


class UnknownWordError(NMTError, ValueError):
    """A word is missing from the vocabulary and UNK substitution is disabled."""

    def __init__(self, word: str, vocabulary: str):
        self.word = word
        self.vocabulary = vocabulary
        super().__init__(f"Word {word!r} is not in the {vocabulary} vocabulary")
