import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///arcade.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000').split(',') if o.strip()]
    # Memory: how long a mismatched pair stays face-up (seconds)
    MATCH_SETTLE_DELAY_SEC = float(os.environ.get('MATCH_SETTLE_DELAY_SEC', '1.0'))
    # Math wars: correct answers needed to win
    SPEED_DUEL_WIN_SCORE = int(os.environ.get('SPEED_DUEL_WIN_SCORE', '10'))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '10'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '500'))
    # Optional: close rooms with no activity for this long (sec). 0 disables.
    ROOM_IDLE_TIMEOUT_SEC = int(os.environ.get('ROOM_IDLE_TIMEOUT_SEC', '0'))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '30'))
    # Optional: fixed seed for PINs, boards and questions (debugging only)
    RANDOM_SEED = int(os.environ['RANDOM_SEED']) if os.environ.get('RANDOM_SEED') else None
