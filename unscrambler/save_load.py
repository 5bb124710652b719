import os
import json
import base64
import logging
from pathlib import Path
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError

from .errors import SaveFileError
from .models import GameSnapshot

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _load_fernet(key: Optional[str] = None) -> Fernet:
    """Encryption key from the argument, WORD_ENCRYPTION_KEY, or a derived development key."""
    key = key or os.getenv('WORD_ENCRYPTION_KEY')
    if key:
        try:
            return Fernet(key.encode())
        except ValueError as e:
            raise SaveFileError(f"Invalid WORD_ENCRYPTION_KEY: {e}") from e
    salt = b'word_unscrambler'  # Fixed salt for development
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=100000,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(b'default_key')))


def save_game(snapshot: GameSnapshot, path: PathLike, key: Optional[str] = None) -> Path:
    """
    Write a snapshot as JSON.

    While the game is still running the original word is encrypted so the
    answer cannot be read from the save file.
    """
    data = snapshot.model_dump()
    data["word_encrypted"] = False
    if data["original_word"] and not snapshot.game_over:
        data["original_word"] = _load_fernet(key).encrypt(data["original_word"].encode()).decode()
        data["word_encrypted"] = True

    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise SaveFileError(f"Could not write save file {file_path}: {e}") from e
    logger.info(f"Game saved to {file_path}")
    return file_path


def load_game(path: PathLike, key: Optional[str] = None) -> GameSnapshot:
    """Read a snapshot written by ``save_game``."""
    file_path = Path(path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SaveFileError(f"No save file at {file_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise SaveFileError(f"Could not read save file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise SaveFileError(f"Save file {file_path} does not hold a game")

    if data.pop("word_encrypted", False):
        try:
            data["original_word"] = _load_fernet(key).decrypt(str(data.get("original_word", "")).encode()).decode()
        except InvalidToken as e:
            raise SaveFileError("Saved word could not be decrypted; check WORD_ENCRYPTION_KEY") from e

    try:
        snapshot = GameSnapshot(**data)
    except ValidationError as e:
        raise SaveFileError(f"Save file {file_path} is not a valid game: {e}") from e
    logger.info(f"Game loaded from {file_path}")
    return snapshot
