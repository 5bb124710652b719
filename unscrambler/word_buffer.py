"""
Pre-fetched word queue fed by a background refill.

The foreground loop calls ``try_take_word`` once per tick and never waits on
the network. When the queue is empty a single refill is handed to a worker;
the queue and the in-flight flag are guarded by one lock that is never held
across the network call.
"""

import time
import random
import logging
import threading
from functools import partial
from typing import Callable, List, Optional

from .anagram import scramble
from .errors import WordSourceError
from .models import WordPair
from .word_source import WordSource

logger = logging.getLogger(__name__)


def start_daemon_thread(target: Callable[[], None]) -> None:
    """Default worker launcher: run ``target`` on a fresh daemon thread."""
    th = threading.Thread(target=target, daemon=True, name="unscrambler-worker")
    th.start()


class WordBuffer:
    def __init__(
        self,
        source: WordSource,
        target_length: int = 4,
        batch_size: int = 10,
        retry_cooldown_secs: float = 0.0,
        runner: Optional[Callable[[Callable[[], None]], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.target_length = target_length
        self.batch_size = batch_size
        self.retry_cooldown_secs = retry_cooldown_secs
        self._runner = runner or start_daemon_thread
        self._clock = clock
        self._rng = rng

        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self.pending: List[str] = []
        self.fetch_in_flight = False
        self.closed = False
        self.refills_started = 0
        self._last_failure: Optional[float] = None

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self.pending)

    def try_take_word(self) -> Optional[WordPair]:
        """Pop and scramble one pending word, or start a refill and return None."""
        refill_length = None
        with self._lock:
            if self.pending:
                word = self.pending.pop()
            else:
                word = None
                refill_length = self._claim_refill()

        if word is not None:
            return WordPair(scramble(word, self._rng), word)

        if refill_length is not None:
            try:
                self._runner(partial(self._refill, refill_length))
            except Exception:
                with self._lock:
                    self.fetch_in_flight = False
                raise
        return None

    def _claim_refill(self) -> Optional[int]:
        # Caller holds self._lock
        if self.closed or self.fetch_in_flight:
            return None
        if (self._last_failure is not None
                and self._clock() - self._last_failure < self.retry_cooldown_secs):
            return None
        self.fetch_in_flight = True
        self.refills_started += 1
        return self.target_length

    def _refill(self, length: int) -> None:
        words = None
        try:
            words = self.source.fetch_words(self.batch_size, length)
        except WordSourceError as e:
            logger.warning(f"Word refill for length {length} failed: {e}")
        except Exception:
            logger.exception(f"Unexpected error refilling words of length {length}")
        finally:
            with self._lock:
                self.fetch_in_flight = False
                if words is None:
                    self._last_failure = self._clock()
                elif self.closed:
                    logger.info(f"Discarding {len(words)} word(s) fetched after the buffer closed")
                else:
                    fresh = [w for w in words if len(w) == self.target_length]
                    if len(fresh) < len(words):
                        logger.info(f"Dropped {len(words) - len(fresh)} word(s) of stale length {length}")
                    self.pending.extend(fresh)
                    self._last_failure = None
                    logger.info(f"Buffer refilled with {len(fresh)} word(s); {len(self.pending)} pending")
                self._changed.notify_all()

    def set_target_length(self, length: int) -> None:
        """Change the word length for future refills, dropping pending words of other lengths."""
        with self._lock:
            if length == self.target_length:
                return
            self.target_length = length
            before = len(self.pending)
            self.pending = [w for w in self.pending if len(w) == length]
            logger.info(f"Target word length now {length}; discarded {before - len(self.pending)} pending word(s)")

    def wait_for_words(self, timeout: Optional[float] = None) -> bool:
        """Block until words are pending or the buffer closes. Not for the render loop."""
        with self._changed:
            self._changed.wait_for(lambda: bool(self.pending) or self.closed, timeout)
            return bool(self.pending)

    def wait_for_refill(self, timeout: Optional[float] = None) -> bool:
        """Block until no refill is in flight. Returns False on timeout."""
        with self._changed:
            return self._changed.wait_for(lambda: not self.fetch_in_flight, timeout)

    def close(self) -> None:
        with self._lock:
            self.closed = True
            self.pending.clear()
            self._changed.notify_all()
