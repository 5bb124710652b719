"""
Word sources: where candidate words come from and how guesses are checked
against a dictionary.

``HttpWordSource`` talks to a random-word API and a dictionary API with
``requests``. ``OfflineWordSource`` (see ``fallback_words``) serves a built-in
list and needs no network. Both can be injected into a ``WordBuffer`` and a
``WordSession``.
"""

import json
import time
import random
import logging
import urllib.parse
from typing import List, Optional

import requests

from .config import GameConfig
from .errors import NetworkError, ParseError, EmptyResult

logger = logging.getLogger(__name__)


class WordSource:
    """Interface for anything that can supply words and validate guesses."""

    # Longest word length this source can serve; None means no known limit
    max_length: Optional[int] = None

    def fetch_words(self, count: int, length: int) -> List[str]:
        """
        Fetch ``count`` words of exactly ``length`` letters.

        Raises:
            NetworkError: the provider could not be reached
            ParseError: the response was not a list of words
            EmptyResult: no usable words came back
        """
        raise NotImplementedError

    def check_dictionary(self, word: str) -> bool:
        """Return True if ``word`` is a dictionary word. Failures count as False."""
        raise NotImplementedError


def sanitize_word_payload(text: str) -> List[str]:
    """Split a bracketed, comma separated payload such as ``["cat","dog"]``.

    Used when a response body is not valid JSON.
    """
    cleaned = text.replace('[', '').replace(']', '').replace('"', '')
    return [part.strip() for part in cleaned.split(',') if part.strip()]


class HttpWordSource(WordSource):
    def __init__(self, config: Optional[GameConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or GameConfig.from_env()
        self.word_api_url = self.config.word_api_url
        self.dictionary_api_url = self.config.dictionary_api_url
        self.timeout = self.config.request_timeout_secs
        self.max_retries = self.config.max_retries
        self.initial_backoff = 0.5  # seconds
        # Optional shared connection pool; module-level requests.get otherwise
        self._session = session

    def _get(self, url: str, **kwargs) -> requests.Response:
        getter = self._session.get if self._session is not None else requests.get
        return getter(url, timeout=self.timeout, **kwargs)

    def _request_words(self, url: str, params: dict, retry_count: int = 0) -> requests.Response:
        """GET with exponential backoff retry on transport errors and bad statuses."""
        try:
            response = self._get(url, params=params)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            if retry_count >= self.max_retries:
                logger.warning(f"Word API request failed after {retry_count + 1} attempt(s): {e}")
                raise NetworkError(str(e)) from e

            backoff = self.initial_backoff * (2 ** retry_count)
            jitter = random.uniform(0, 0.1 * backoff)
            wait_time = backoff + jitter
            logger.warning(
                f"Word API request failed. Retrying in {wait_time:.2f} seconds... "
                f"(Attempt {retry_count + 1}/{self.max_retries})"
            )
            time.sleep(wait_time)
            return self._request_words(url, params, retry_count + 1)

    def _parse_words(self, response: requests.Response) -> List[str]:
        try:
            payload = response.json()
        except (ValueError, json.JSONDecodeError):
            logger.warning("Word API returned non-JSON body; sanitizing text payload")
            return sanitize_word_payload(response.text or '')

        if not isinstance(payload, list):
            raise ParseError(f"Expected a JSON array of words, got {type(payload).__name__}")
        if not all(isinstance(item, str) for item in payload):
            raise ParseError("Word list contains non-string items")
        return payload

    def fetch_words(self, count: int, length: int) -> List[str]:
        url = f"{self.word_api_url}/word"
        params = {"number": count, "length": length}
        logger.info(f"Fetching {count} word(s) of length {length}")
        response = self._request_words(url, params)

        words = []
        for raw in self._parse_words(response):
            word = raw.strip().lower()
            if len(word) != length or not word.isalpha():
                logger.warning(f"Dropping unusable word {raw!r} for length {length}")
                continue
            words.append(word)

        if not words:
            raise EmptyResult(f"No usable words of length {length}")
        logger.debug(f"Fetched words: {words}")
        return words

    def check_dictionary(self, word: str) -> bool:
        word = (word or '').strip()
        if not word:
            return False
        url = f"{self.dictionary_api_url}/entries/en/{urllib.parse.quote(word)}"
        try:
            response = self._get(url)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Dictionary lookup for '{word}' failed: {e}")
            return False
        valid = response.status_code == 200
        logger.info(f"Dictionary lookup '{word}': {'found' if valid else 'not found'} ({response.status_code})")
        return valid
