import random
from typing import Optional


def is_anagram(a: str, b: str) -> bool:
    """True if ``a`` is a letter-for-letter rearrangement of ``b`` (case-sensitive)."""
    return sorted(a) == sorted(b)


def scramble(word: str, rng: Optional[random.Random] = None) -> str:
    """Return a random permutation of the letters in ``word``.

    The result may equal the input; short words come back unchanged.
    """
    if len(word) <= 1:
        return word
    letters = list(word)
    (rng or random.Random()).shuffle(letters)
    return ''.join(letters)
