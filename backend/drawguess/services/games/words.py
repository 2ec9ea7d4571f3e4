import random
from typing import Iterable, Optional


DEFAULT_WORDS = [
    "apple", "banana", "cat", "dog", "car", "house", "tree", "sun",
    "moon", "star", "computer", "phone", "book", "chair", "table",
    "guitar", "pizza", "camera", "clock", "flower", "mountain", "ocean",
]


class WordPool:
    """Fixed list of candidate words with uniform random selection."""

    def __init__(self, words: Optional[Iterable[str]] = None, rng: Optional[random.Random] = None):
        self._words = [w.strip() for w in (DEFAULT_WORDS if words is None else words) if w and w.strip()]
        if not self._words:
            raise ValueError('word pool must contain at least one word')
        self._rng = rng or random.Random()

    def __len__(self):
        return len(self._words)

    def pick(self) -> str:
        return self._rng.choice(self._words)
