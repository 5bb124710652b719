import os
import json
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

from unscrambler.errors import SaveFileError
from unscrambler.models import GameSnapshot
from unscrambler.save_load import load_game, save_game
from unscrambler.stats import ScoreBoard


@pytest.fixture
def snapshot():
    return GameSnapshot(
        score=30,
        time_remaining=42.5,
        word_length=5,
        original_word="stone",
        scrambled_word="notes",
        level=1,
        correct_count=3,
    )


@pytest.fixture
def key():
    return Fernet.generate_key().decode()


@pytest.mark.integration
def test_save_encrypts_word_while_running(tmp_path, snapshot, key):
    path = tmp_path / "save_game.json"
    save_game(snapshot, path, key=key)

    with open(path) as f:
        raw = json.load(f)
    assert raw["word_encrypted"] is True
    assert raw["original_word"] != "stone"
    assert raw["scrambled_word"] == "notes"
    assert raw["score"] == 30

    loaded = load_game(path, key=key)
    assert loaded == snapshot


@pytest.mark.integration
def test_key_from_environment(tmp_path, snapshot, key):
    path = tmp_path / "save.json"
    with patch.dict(os.environ, {'WORD_ENCRYPTION_KEY': key}):
        save_game(snapshot, path)
        assert load_game(path).original_word == "stone"
    with pytest.raises(SaveFileError):
        load_game(path, key=Fernet.generate_key().decode())


@pytest.mark.integration
def test_finished_game_saved_in_plain_text(tmp_path):
    snapshot = GameSnapshot(score=50, time_remaining=0, word_length=6,
                            original_word="stones", scrambled_word="onests", game_over=True)
    path = tmp_path / "nested" / "done.json"
    save_game(snapshot, path)
    with open(path) as f:
        raw = json.load(f)
    assert raw["original_word"] == "stones"
    assert load_game(path).game_over is True


@pytest.mark.integration
def test_load_errors(tmp_path):
    with pytest.raises(SaveFileError):
        load_game(tmp_path / "missing.json")

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json")
    with pytest.raises(SaveFileError):
        load_game(corrupt)

    not_a_game = tmp_path / "list.json"
    not_a_game.write_text("[1, 2]")
    with pytest.raises(SaveFileError):
        load_game(not_a_game)

    bad_pair = tmp_path / "bad_pair.json"
    bad_pair.write_text(json.dumps({"score": 0, "original_word": "stone", "scrambled_word": "zzzzz"}))
    with pytest.raises(SaveFileError):
        load_game(bad_pair)


@pytest.mark.unit
def test_snapshot_validation():
    with pytest.raises(ValueError):
        GameSnapshot(score=-5)
    with pytest.raises(ValueError):
        GameSnapshot(original_word="", scrambled_word="abc")
    assert GameSnapshot().time_remaining == 60.0


@pytest.mark.integration
def test_score_board(tmp_path):
    stats_file = tmp_path / "stats" / "stats.json"
    board = ScoreBoard(str(stats_file))
    board.record_game({"score": 20, "correct_guesses": 2, "total_guesses": 3, "word_length": 4}, "ana")
    board.record_game({"score": 50, "correct_guesses": 5, "total_guesses": 5, "word_length": 4}, "ben")
    board.record_game({"score": 20, "correct_guesses": 3, "total_guesses": 6, "word_length": 4}, "cy")

    leaders = ScoreBoard(str(stats_file)).get_leaderboard()
    assert [g["nickname"] for g in leaders] == ["ben", "cy", "ana"]
    assert len(board.get_leaderboard(limit=1)) == 1


@pytest.mark.integration
def test_score_board_ignores_bad_file(tmp_path):
    stats_file = tmp_path / "stats.json"
    stats_file.write_text("garbage")
    board = ScoreBoard(str(stats_file))
    assert board.get_leaderboard() == []


@pytest.mark.integration
def test_save_to_unwritable_path(tmp_path, snapshot, key):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    with pytest.raises(SaveFileError):
        save_game(snapshot, blocker / "save.json", key=key)


@pytest.mark.integration
def test_malformed_key_in_environment(tmp_path, snapshot, key):
    path = tmp_path / "save.json"
    save_game(snapshot, path, key=key)
    with patch.dict(os.environ, {'WORD_ENCRYPTION_KEY': 'not-a-fernet-key'}):
        with pytest.raises(SaveFileError):
            load_game(path)
        with pytest.raises(SaveFileError):
            save_game(snapshot, tmp_path / "other.json")
