from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field, model_validator

from .anagram import is_anagram


class WordPair(NamedTuple):
    """A word as shown to the player and the word it came from."""
    scrambled: str
    original: str


class GuessRecord(NamedTuple):
    text: str
    was_correct: bool


class SessionState(str, Enum):
    AWAITING_WORD = "awaiting_word"
    ACTIVE = "active"
    ENDED = "ended"


class GameSnapshot(BaseModel):
    """Serializable state of a game, as written to a save file.

    ``scrambled_word`` must be a rearrangement of ``original_word``; both are
    empty when the game was saved while waiting for a word.
    """

    score: int = Field(0, ge=0)
    time_remaining: float = Field(60.0, ge=0)
    word_length: int = Field(4, ge=1)
    original_word: str = ""
    scrambled_word: str = ""
    level: int = Field(1, ge=1)
    correct_count: int = Field(0, ge=0)
    game_over: bool = False

    @model_validator(mode="after")
    def check_word_pair(self):
        if self.scrambled_word and not self.original_word:
            raise ValueError("scrambled_word given without original_word")
        if self.scrambled_word and not is_anagram(self.scrambled_word, self.original_word):
            raise ValueError("scrambled_word is not a rearrangement of original_word")
        return self
