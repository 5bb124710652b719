"""
Terminal front-end for the Word Unscrambler game.

The loop ticks every 100 ms. Input lines are read on a daemon thread and
handed over through a queue, so neither typing nor the word APIs stall the
clock.
"""

import sys
import time
import queue
import logging
import argparse
import threading

from .config import GameConfig, load_environment
from .errors import SaveFileError
from .fallback_words import OfflineWordSource
from .game_session import WordSession
from .log_setup import configure_logging
from .save_load import load_game, save_game
from .stats import ScoreBoard
from .word_source import HttpWordSource

logger = logging.getLogger(__name__)

TICK_SECS = 0.1


def _read_lines(stream, lines: "queue.Queue") -> None:
    try:
        for line in stream:
            lines.put(line.rstrip('\n'))
    except (OSError, ValueError) as e:
        logger.warning(f"Stopped reading input: {e}")
    lines.put(None)


def _render(display: dict) -> str:
    if display["state"] == "ended":
        return f"Time's up! Final score: {display['score']}"
    header = f"[{display['time_remaining']:5.1f}s] Score: {display['score']}  Level: {display['level']}"
    if display["loading"]:
        return f"{header}  Loading next word..."
    word = ' '.join(display["scrambled_letters"]).upper()
    status = " (checking...)" if display["validating"] else ""
    result = f"  {display['last_result']}" if display["last_result"] else ""
    return f"{header}  Word: {word}{status}{result}"


def run(session: WordSession, config: GameConfig, nickname: str, stdin=None) -> dict:
    lines: "queue.Queue" = queue.Queue()
    threading.Thread(target=_read_lines, args=(stdin or sys.stdin, lines), daemon=True).start()

    last_shown = None
    last_second = None
    while not session.is_over:
        session.tick()
        try:
            line = lines.get_nowait()
        except queue.Empty:
            line = ''
        if line is None or line.strip() == ':quit':
            break
        if line.strip() == ':save':
            try:
                save_game(session.to_snapshot(), config.save_file)
                print(f"Saved to {config.save_file}")
            except SaveFileError as e:
                logger.warning(f"Save failed: {e}")
                print(f"Could not save game: {e}")
        elif line:
            if not session.submit_guess(line) and session.validating:
                print(f"Still checking your last guess; '{line.strip()}' ignored.")

        display = session.current_display_state()
        shown = (display["state"], tuple(display["scrambled_letters"]), display["score"],
                 display["validating"], display["last_result"], len(display["guess_history"]))
        second = int(display["time_remaining"])
        if shown != last_shown or (second != last_second and second % 10 == 0):
            print(_render(display))
            last_shown, last_second = shown, second
        time.sleep(TICK_SECS)

    print(_render(session.current_display_state()))
    summary = session.get_game_summary()
    print(f"Correct: {summary['correct_guesses']}/{summary['total_guesses']}")
    if session.is_over:
        ScoreBoard(config.stats_file).record_game(summary, nickname)
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Unscramble as many words as you can before time runs out.")
    parser.add_argument('--offline', action='store_true', help='use the built-in word list instead of the web APIs')
    parser.add_argument('--nickname', default='player', help='name recorded on the score board')
    parser.add_argument('--load', metavar='FILE', help='resume a saved game')
    parser.add_argument('--step-every', type=int, help='correct answers needed per extra letter')
    parser.add_argument('--batch-size', type=int, help='words fetched per refill')
    parser.add_argument('--leaderboard', action='store_true', help='show the best recorded games and exit')
    args = parser.parse_args(argv)

    load_environment()
    configure_logging()

    overrides = {}
    if args.step_every is not None:
        overrides["length_step_every"] = args.step_every
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    try:
        config = GameConfig.from_env(**overrides)
    except ValueError as e:
        parser.error(str(e))

    if args.leaderboard:
        for rank, game in enumerate(ScoreBoard(config.stats_file).get_leaderboard(), start=1):
            print(f"{rank:2d}. {game['nickname']:<12} {game['score']:>5}  ({game['correct_guesses']} words)")
        return 0

    source = OfflineWordSource() if args.offline else HttpWordSource(config)
    if args.load:
        try:
            session = WordSession.from_snapshot(load_game(args.load), source, config)
        except SaveFileError as e:
            print(f"Could not load game: {e}", file=sys.stderr)
            return 1
    else:
        session = WordSession(source, config)

    print("Type your answer and press Enter. Commands: :save, :quit")
    run(session, config, args.nickname)
    return 0


if __name__ == '__main__':
    sys.exit(main())
