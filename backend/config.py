import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///turn_timer.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Tick cadence for the active player's clock (seconds)
    TICK_INTERVAL_SEC = int(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Key the player collection is saved under in the stored_value table
    PLAYERS_STORAGE_KEY = os.environ.get('PLAYERS_STORAGE_KEY', 'players')
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
