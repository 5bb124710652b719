from typing import Dict, List
import json
import logging
from pathlib import Path
from datetime import datetime

logger = logging.getLogger(__name__)


class ScoreBoard:
    """Finished games kept in a local JSON file."""

    def __init__(self, stats_file: str = "game_data/stats.json"):
        self.stats_file = Path(stats_file)
        self._load_stats()

    def _load_stats(self) -> None:
        """Load statistics from file or start empty."""
        self.stats = {"games": []}
        if not self.stats_file.exists():
            return
        try:
            with open(self.stats_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict) and isinstance(data.get("games"), list):
                self.stats = data
            else:
                logger.warning(f"Ignoring malformed stats file {self.stats_file}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read stats file {self.stats_file}: {e}")

    def _save_stats(self) -> None:
        self.stats_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.stats_file, 'w', encoding='utf-8') as f:
            json.dump(self.stats, f, indent=2)

    def record_game(self, game_summary: Dict, nickname: str = "player") -> Dict:
        """Record a finished game's summary."""
        record = {
            "timestamp": datetime.now().isoformat(),
            "nickname": nickname or "player",
            "score": int(game_summary.get("score", 0)),
            "correct_guesses": int(game_summary.get("correct_guesses", 0)),
            "total_guesses": int(game_summary.get("total_guesses", 0)),
            "word_length": int(game_summary.get("word_length", 0)),
        }
        self.stats["games"].append(record)
        self._save_stats()
        logger.info(f"Recorded game for {record['nickname']} with score {record['score']}")
        return record

    def get_leaderboard(self, limit: int = 10) -> List[Dict]:
        """Best games first: highest score, then most correct answers."""
        games = sorted(
            self.stats["games"],
            key=lambda g: (g.get("score", 0), g.get("correct_guesses", 0)),
            reverse=True,
        )
        return games[:limit]
