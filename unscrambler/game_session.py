import time
import queue
import random
import logging
from typing import Callable, Dict, List, Optional

from .anagram import is_anagram, scramble
from .config import GameConfig
from .models import GameSnapshot, GuessRecord, SessionState, WordPair
from .word_buffer import WordBuffer, start_daemon_thread
from .word_source import WordSource

logger = logging.getLogger(__name__)


class WordSession:
    """One timed game.

    Drive it from a single foreground loop: call ``tick()`` (or
    ``notify_tick_elapsed``) regularly and ``submit_guess`` on input. Word
    refills and dictionary lookups run on background workers; their results
    are applied on the next tick, so no call here waits on the network.
    """

    def __init__(
        self,
        source: WordSource,
        config: Optional[GameConfig] = None,
        buffer: Optional[WordBuffer] = None,
        runner: Optional[Callable[[Callable[[], None]], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        start: bool = True,
    ):
        self.config = config or GameConfig.from_env()
        self.source = source
        self._runner = runner or start_daemon_thread
        self._clock = clock
        self._rng = rng
        source_max = getattr(source, "max_length", None)
        self.max_word_length = min(self.config.max_word_length, source_max or self.config.max_word_length)
        self.buffer = buffer or WordBuffer(
            source,
            target_length=min(self.config.start_word_length, self.max_word_length),
            batch_size=self.config.batch_size,
            retry_cooldown_secs=self.config.retry_cooldown_secs,
            runner=self._runner,
            clock=clock,
            rng=rng,
        )

        self.state = SessionState.AWAITING_WORD
        self.score = 0
        self.time_budget = float(self.config.start_time_secs)
        self.elapsed = 0.0
        self.word_length = min(self.config.start_word_length, self.max_word_length)
        self.correct_count = 0
        self.current_pair: Optional[WordPair] = None
        self.guess_history: List[GuessRecord] = []
        self.last_result = ""

        # Dictionary lookups report back through this queue: (token, guess, is_correct)
        self._results: "queue.Queue" = queue.Queue()
        self._pending_guess: Optional[str] = None
        self._guess_token = 0
        self._last_tick = clock()

        if start:
            self.refresh_word()

    @property
    def time_remaining(self) -> float:
        return max(0.0, self.time_budget - self.elapsed)

    @property
    def level(self) -> int:
        return self.correct_count // self.config.length_step_every + 1

    @property
    def is_over(self) -> bool:
        return self.state is SessionState.ENDED

    @property
    def validating(self) -> bool:
        return self._pending_guess is not None

    def refresh_word(self) -> bool:
        """Take the next word from the buffer if the session is waiting for one."""
        if self.state is not SessionState.AWAITING_WORD:
            return False
        pair = self.buffer.try_take_word()
        if pair is None and self.buffer.pending_count:
            # Refill finished before try_take_word returned
            pair = self.buffer.try_take_word()
        if pair is None:
            return False
        self.current_pair = pair
        self.state = SessionState.ACTIVE
        logger.debug(f"New word: {pair.scrambled} ({pair.original})")
        return True

    def submit_guess(self, text: str) -> bool:
        """
        Submit the player's guess for the current word.

        Returns True if the guess was accepted for evaluation. Guesses are
        ignored after the game ends, while no word is shown, or when blank.
        Only one dictionary check runs at a time: a guess typed while the
        previous one is still being checked is rejected, not queued, and the
        caller should tell the player to try again.
        """
        if self.state is not SessionState.ACTIVE or self.current_pair is None:
            return False
        guess = (text or '').strip().lower()
        if not guess:
            return False
        if self._pending_guess is not None:
            logger.info(f"Ignoring guess '{guess}' while '{self._pending_guess}' is being checked")
            return False

        original = self.current_pair.original
        if guess == original:
            self._apply_result(guess, True)
        elif not is_anagram(guess, original):
            self._apply_result(guess, False)
        else:
            # Another arrangement of the same letters; only a dictionary word counts
            self._pending_guess = guess
            self._guess_token += 1
            token = self._guess_token
            self._runner(lambda: self._validate(token, guess, original))
            self.poll()
        return True

    def _validate(self, token: int, guess: str, original: str) -> None:
        try:
            valid = bool(self.source.check_dictionary(guess))
        except Exception:
            logger.exception(f"Dictionary check for '{guess}' failed")
            valid = False
        self._results.put((token, guess, valid and is_anagram(guess, original)))

    def poll(self) -> None:
        """Apply any finished dictionary checks."""
        while True:
            try:
                token, guess, correct = self._results.get_nowait()
            except queue.Empty:
                return
            if self.state is SessionState.ENDED or token != self._guess_token or self._pending_guess is None:
                logger.debug(f"Discarding stale validation result for '{guess}'")
                continue
            self._pending_guess = None
            self._apply_result(guess, correct)

    def _apply_result(self, guess: str, correct: bool) -> None:
        self.guess_history.append(GuessRecord(guess, correct))
        if correct:
            self._correct_answer()
        else:
            self._incorrect_answer()

    def _correct_answer(self) -> None:
        self.score += self.config.correct_points
        self.time_budget += self.config.time_bonus_secs
        self.correct_count += 1
        self.last_result = "Correct!"
        logger.info(f"Correct answer '{self.current_pair.original}'; score {self.score}")

        if (self.correct_count % self.config.length_step_every == 0
                and self.word_length < self.max_word_length):
            self.word_length += 1
            self.buffer.set_target_length(self.word_length)
            logger.info(f"Word length increased to {self.word_length}")

        self.current_pair = None
        self.state = SessionState.AWAITING_WORD
        self.refresh_word()

    def _incorrect_answer(self) -> None:
        self.score = max(0, self.score - self.config.incorrect_penalty)
        self.time_budget = max(self.elapsed, self.time_budget - self.config.time_penalty_secs)
        self.last_result = "Incorrect"
        logger.info(f"Incorrect answer; score {self.score}, {self.time_remaining:.1f}s left")

        if self.time_remaining <= 0:
            self._end()
            return
        if self.config.rescramble_on_miss:
            original = self.current_pair.original
            self.current_pair = WordPair(scramble(original, self._rng), original)

    def notify_tick_elapsed(self, seconds: float) -> None:
        """Advance the game clock by ``seconds`` and apply background results."""
        if self.state is SessionState.ENDED:
            return
        if seconds < 0:
            raise ValueError("elapsed time cannot be negative")
        self.elapsed += seconds
        if self.time_remaining <= 0:
            self._end()
            return
        self.poll()
        if self.state is SessionState.AWAITING_WORD:
            self.refresh_word()

    def tick(self) -> None:
        """Advance the game clock by the wall-clock time since the last tick."""
        now = self._clock()
        delta = now - self._last_tick
        self._last_tick = now
        self.notify_tick_elapsed(max(0.0, delta))

    def _end(self) -> None:
        self.state = SessionState.ENDED
        self.elapsed = max(self.elapsed, self.time_budget)
        self._pending_guess = None
        self.buffer.close()
        logger.info(f"Game over. Final score: {self.score}")

    def current_display_state(self) -> Dict:
        """What the front-end needs to draw one frame."""
        pair = self.current_pair
        return {
            "state": self.state.value,
            "scrambled_letters": list(pair.scrambled) if pair and self.state is SessionState.ACTIVE else [],
            "time_remaining": self.time_remaining,
            "score": self.score,
            "word_length": self.word_length,
            "level": self.level,
            "guess_history": [{"text": g.text, "was_correct": g.was_correct} for g in self.guess_history],
            "loading": self.state is SessionState.AWAITING_WORD,
            "validating": self.validating,
            "last_result": self.last_result,
        }

    def get_game_summary(self) -> Dict:
        total = len(self.guess_history)
        correct = sum(1 for g in self.guess_history if g.was_correct)
        return {
            "score": self.score,
            "correct_guesses": correct,
            "total_guesses": total,
            "guess_ratio": (correct / total) if total else 0.0,
            "word_length": self.word_length,
            "level": self.level,
            "time_played": self.elapsed,
            "game_over": self.is_over,
        }

    def to_snapshot(self) -> GameSnapshot:
        pair = self.current_pair
        return GameSnapshot(
            score=self.score,
            time_remaining=self.time_remaining,
            word_length=self.word_length,
            original_word=pair.original if pair else "",
            scrambled_word=pair.scrambled if pair else "",
            level=self.level,
            correct_count=self.correct_count,
            game_over=self.is_over,
        )

    @classmethod
    def from_snapshot(cls, snapshot: GameSnapshot, source: WordSource, config: Optional[GameConfig] = None, **kwargs) -> "WordSession":
        """Rebuild a session from a saved snapshot; the clock restarts at the saved time remaining."""
        session = cls(source, config=config, start=False, **kwargs)
        session.score = snapshot.score
        session.time_budget = snapshot.time_remaining
        session.word_length = min(snapshot.word_length, session.max_word_length)
        session.correct_count = snapshot.correct_count
        session.buffer.set_target_length(session.word_length)

        if snapshot.game_over or snapshot.time_remaining <= 0:
            session._end()
        elif snapshot.original_word:
            scrambled = snapshot.scrambled_word or scramble(snapshot.original_word, session._rng)
            session.current_pair = WordPair(scrambled, snapshot.original_word)
            session.state = SessionState.ACTIVE
        else:
            session.refresh_word()
        return session
