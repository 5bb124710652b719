import threading

import pytest

from unscrambler.config import GameConfig
from unscrambler.errors import EmptyResult
from unscrambler.word_source import WordSource


class FakeWordSource(WordSource):
    """Canned words and dictionary answers, no network.

    ``outcomes`` is consumed one entry per fetch: a list of words or an
    exception to raise. Once exhausted, ``words_by_length`` answers.
    """

    def __init__(self, words_by_length=None, valid_words=(), outcomes=None, gate=None):
        self.words_by_length = words_by_length or {}
        self.valid_words = set(valid_words)
        self.outcomes = list(outcomes or [])
        self.gate = gate
        self.fetch_calls = []
        self.dictionary_calls = []
        self._lock = threading.Lock()

    def fetch_words(self, count, length):
        with self._lock:
            self.fetch_calls.append((count, length))
        if self.gate is not None:
            self.gate.wait(5)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return list(outcome)
        words = self.words_by_length.get(length)
        if not words:
            raise EmptyResult(f"no words of length {length}")
        return list(words)

    def check_dictionary(self, word):
        self.dictionary_calls.append(word)
        if isinstance(self.valid_words, Exception):
            raise self.valid_words
        return word in self.valid_words


class HeldRunner:
    """Collects background tasks so a test decides when they run."""

    def __init__(self):
        self.tasks = []

    def __call__(self, task):
        self.tasks.append(task)

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for task in tasks:
            task()


def run_now(task):
    task()


@pytest.fixture
def held_runner():
    return HeldRunner()


@pytest.fixture
def config():
    return GameConfig(
        start_time_secs=60,
        start_word_length=4,
        length_step_every=7,
        batch_size=3,
        retry_cooldown_secs=0,
    )
