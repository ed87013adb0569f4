import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///sleep_history_database.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Guess-the-word round timing (seconds)
    WORD_GAME_DURATION_SEC = int(os.environ.get('WORD_GAME_DURATION_SEC', '15'))
    WORD_GAME_TICK_SEC = int(os.environ.get('WORD_GAME_TICK_SEC', '1'))
    # Countdown warning buzz fires on every tick at or under this many seconds
    WORD_GAME_WARNING_SEC = int(os.environ.get('WORD_GAME_WARNING_SEC', '5'))
    # Worker threads for sleep tracker storage calls
    SLEEP_WORKERS = int(os.environ.get('SLEEP_WORKERS', '1'))
    # Finished rounds stay readable this long before the registry drops them
    WORD_GAME_RETENTION_SEC = int(os.environ.get('WORD_GAME_RETENTION_SEC', '300'))
