from datetime import datetime, timezone
import json

from arcade import db


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    wins = db.Column(db.Integer, default=0, nullable=False)
    game_wins = db.Column(db.Text, nullable=True)  # JSON-encoded {game_type: wins}
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    @property
    def games(self):
        try:
            return json.loads(self.game_wins) if self.game_wins else {}
        except ValueError:
            return {}

    def record_win(self, game_type):
        games = self.games
        games[game_type] = games.get(game_type, 0) + 1
        self.game_wins = json.dumps(games)
        self.wins = (self.wins or 0) + 1

    def to_rank_dict(self):
        return {'name': self.username, 'wins': self.wins}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.username,
            'wins': self.wins,
            'games': self.games,
        }
