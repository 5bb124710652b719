"""
Error types for the Word Unscrambler game.

Word source errors are recovered inside the word buffer and never reach the
session or the front-end. Save file errors are reported to the caller.
"""


class WordSourceError(Exception):
    """Base class for failures reported by a word source."""


class NetworkError(WordSourceError):
    """Transport failure or non-success status from a remote word API."""


class ParseError(WordSourceError):
    """Response body could not be turned into a list of words."""


class EmptyResult(WordSourceError):
    """Provider returned no usable words for the request."""


class SaveFileError(Exception):
    """Save file is missing, unreadable, or does not hold a game snapshot."""
