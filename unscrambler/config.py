import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)


def load_environment(env_file: Optional[str] = None) -> None:
    """Load variables from a .env file without overriding the real environment."""
    path = env_file or find_dotenv(usecwd=True)
    if path and Path(path).exists():
        logger.debug(f"Loading environment from {path}")
        load_dotenv(path, override=False)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer for {name}; using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        logger.warning(f"Invalid number for {name}; using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class GameConfig:
    """Tunable rules and endpoints for one game.

    ``length_step_every`` is the number of correct answers needed before the
    word length grows by one letter.
    """

    def __init__(
        self,
        start_time_secs: float = 60.0,
        start_word_length: int = 4,
        correct_points: int = 10,
        incorrect_penalty: int = 5,
        time_bonus_secs: float = 5.0,
        time_penalty_secs: float = 5.0,
        length_step_every: int = 7,
        max_word_length: int = 15,
        rescramble_on_miss: bool = False,
        batch_size: int = 10,
        retry_cooldown_secs: float = 1.0,
        word_api_url: str = "https://random-word-api.herokuapp.com",
        dictionary_api_url: str = "https://api.dictionaryapi.dev/api/v2",
        request_timeout_secs: float = 10.0,
        max_retries: int = 2,
        save_file: str = "save_game.json",
        stats_file: str = "game_data/stats.json",
    ):
        if length_step_every < 1:
            raise ValueError("length_step_every must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if start_word_length < 1 or start_word_length > max_word_length:
            raise ValueError(
                f"start_word_length must be between 1 and {max_word_length}"
            )
        self.start_time_secs = start_time_secs
        self.start_word_length = start_word_length
        self.correct_points = correct_points
        self.incorrect_penalty = incorrect_penalty
        self.time_bonus_secs = time_bonus_secs
        self.time_penalty_secs = time_penalty_secs
        self.length_step_every = length_step_every
        self.max_word_length = max_word_length
        self.rescramble_on_miss = rescramble_on_miss
        self.batch_size = batch_size
        self.retry_cooldown_secs = retry_cooldown_secs
        self.word_api_url = word_api_url.rstrip('/')
        self.dictionary_api_url = dictionary_api_url.rstrip('/')
        self.request_timeout_secs = request_timeout_secs
        self.max_retries = max_retries
        self.save_file = save_file
        self.stats_file = stats_file

    @classmethod
    def from_env(cls, **overrides) -> "GameConfig":
        """Build a config from environment variables; keyword overrides win."""
        values = {
            "start_time_secs": _env_float('START_TIME_SECS', 60.0),
            "start_word_length": _env_int('START_WORD_LENGTH', 4),
            "length_step_every": _env_int('LENGTH_STEP_EVERY', 7),
            "max_word_length": _env_int('MAX_WORD_LENGTH', 15),
            "rescramble_on_miss": _env_bool('RESCRAMBLE_ON_MISS', False),
            "batch_size": _env_int('WORD_BATCH_SIZE', 10),
            "retry_cooldown_secs": _env_float('REFILL_RETRY_COOLDOWN_SECS', 1.0),
            "word_api_url": os.getenv('WORD_API_URL', "https://random-word-api.herokuapp.com"),
            "dictionary_api_url": os.getenv('DICTIONARY_API_URL', "https://api.dictionaryapi.dev/api/v2"),
            "request_timeout_secs": _env_float('REQUEST_TIMEOUT_SECS', 10.0),
            "max_retries": _env_int('WORD_API_MAX_RETRIES', 2),
            "save_file": os.getenv('SAVE_FILE', "save_game.json"),
            "stats_file": os.getenv('STATS_FILE', "game_data/stats.json"),
        }
        values.update(overrides)
        return cls(**values)
