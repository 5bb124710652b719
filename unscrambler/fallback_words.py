"""
Built-in word dictionary for playing without the word APIs.
Words are organized by length (3-10 letters, 25 per length).
"""

import random
import logging
from typing import Dict, List, Optional

from .errors import EmptyResult
from .word_source import WordSource

logger = logging.getLogger(__name__)

FALLBACK_WORDS: Dict[int, List[str]] = {
    3: ["cat", "dog", "hat", "run", "sky", "art", "box", "cup", "day", "eye", "fun", "gem", "hip", "ice", "joy", "key", "lip", "map", "oak", "owl", "pen", "red", "sun", "top", "way"],
    4: ["book", "time", "love", "life", "home", "hope", "mind", "soul", "star", "tree", "wind", "bird", "door", "fire", "gold", "moon", "rain", "seed", "song", "wave", "year", "zone", "bell", "card", "desk"],
    5: ["house", "world", "peace", "happy", "smart", "dream", "earth", "faith", "grace", "heart", "light", "music", "ocean", "power", "quiet", "smile", "space", "storm", "truth", "voice", "water", "youth", "cloud", "dance", "flame"],
    6: ["garden", "nature", "family", "friend", "simple", "beauty", "bridge", "canvas", "dragon", "energy", "forest", "heaven", "island", "jungle", "legend", "memory", "mirror", "palace", "rhythm", "shadow", "spirit", "sunset", "temple", "valley", "wonder"],
    7: ["freedom", "harmony", "journey", "success", "balance", "courage", "destiny", "eclipse", "fantasy", "gravity", "history", "insight", "justice", "mystery", "passion", "rainbow", "silence", "thunder", "victory", "whisper", "horizon", "kitchen", "blanket", "lantern", "compass"],
    8: ["universe", "infinity", "kindness", "strength", "learning", "blessing", "creation", "devotion", "eternity", "festival", "heritage", "innocent", "laughter", "mountain", "paradise", "question", "radiance", "serenity", "treasure", "virtuous", "wellness", "elephant", "dinosaur", "notebook", "sunshine"],
    9: ["adventure", "discovery", "knowledge", "happiness", "beautiful", "butterfly", "celebrate", "enchanted", "fortunate", "nostalgia", "chocolate", "crocodile", "telescope", "pineapple", "community", "dangerous", "education", "furniture", "gardening", "important", "landscape", "lightning", "tradition", "umbrellas", "wonderful"],
    10: ["friendship", "experience", "technology", "creativity", "innovation", "aspiration", "brilliance", "confidence", "dedication", "enthusiasm", "generosity", "leadership", "motivation", "optimistic", "passionate", "thoughtful", "background", "collection", "television", "restaurant", "basketball", "strawberry", "playground", "photograph", "understand"],
}


def get_fallback_words(word_length: int, words: Optional[Dict[int, List[str]]] = None) -> List[str]:
    """All words of exactly ``word_length`` letters from ``words`` (the built-in list by default)."""
    words = FALLBACK_WORDS if words is None else words
    return [w for w in words.get(word_length, []) if len(w) == word_length]


class OfflineWordSource(WordSource):
    """Serves words from the built-in dictionary and validates against it."""

    def __init__(self, words: Optional[Dict[int, List[str]]] = None, rng: Optional[random.Random] = None):
        self.words = words if words is not None else FALLBACK_WORDS
        self._rng = rng or random.Random()
        self._known = {w for group in self.words.values() for w in group}
        self.max_length = max((n for n in self.words if get_fallback_words(n, self.words)), default=None)

    def fetch_words(self, count: int, length: int) -> List[str]:
        available = get_fallback_words(length, self.words)
        if not available:
            logger.error(f"No offline words available for length {length}")
            raise EmptyResult(f"No offline words of length {length}")
        selected = self._rng.sample(available, min(count, len(available)))
        logger.info(f"Selected {len(selected)} offline word(s) from pool of {len(available)}")
        return selected

    def check_dictionary(self, word: str) -> bool:
        return (word or '').strip().lower() in self._known
