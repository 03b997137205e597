import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from arcade import db
from arcade.models import LeaderboardEntry


class LeaderboardStore:
    """Win counters per username, persisted through Flask-SQLAlchemy.

    Ranking is wins descending, then insertion order, so the earliest
    registered player wins a tie.
    """

    def __init__(self, size: int = 10, logger: Optional[logging.Logger] = None):
        self.size = size
        self.logger = logger or logging.getLogger(__name__)

    def ensure_player(self, username: Optional[str]) -> Optional[LeaderboardEntry]:
        if not username:
            return None
        entry = LeaderboardEntry.query.filter_by(username=username).first()
        if entry:
            return entry
        entry = LeaderboardEntry(username=username, wins=0)
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            self.logger.exception(f"[leaderboard] could not register username={username}")
            return None
        return entry

    def award_win(self, username: Optional[str], game_type: str) -> Optional[List[Dict]]:
        """Record a win and return the refreshed top list, or None if nothing was stored."""
        if not username:
            return None
        try:
            entry = LeaderboardEntry.query.filter_by(username=username).first()
            if not entry:
                entry = LeaderboardEntry(username=username, wins=0)
                db.session.add(entry)
            entry.record_win(game_type)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            self.logger.exception(f"[leaderboard] could not record win username={username} type={game_type}")
            return None
        self.logger.info(f"[leaderboard] win username={username} type={game_type} total={entry.wins}")
        return self.top()

    def top(self, limit: Optional[int] = None) -> List[Dict]:
        limit = self.size if limit is None else limit
        entries = (
            LeaderboardEntry.query
            .order_by(LeaderboardEntry.wins.desc(), LeaderboardEntry.id.asc())
            .limit(limit)
            .all()
        )
        return [e.to_rank_dict() for e in entries]

    def stats(self, username: str) -> Optional[Dict]:
        entry = LeaderboardEntry.query.filter_by(username=username).first()
        return entry.to_dict() if entry else None
