import os


def _env_list(name, default):
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _env_list('CORS_ORIGINS', [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Minimum connected players before a countdown/session may run
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Phase timers (seconds)
    COUNTDOWN_DURATION_SEC = int(os.environ.get('COUNTDOWN_DURATION_SEC', '20'))
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '60'))
    INTERMISSION_SEC = int(os.environ.get('INTERMISSION_SEC', '5'))
    SESSION_DURATION_SEC = int(os.environ.get('SESSION_DURATION_SEC', '600'))
    SCORE_RESET_DELAY_SEC = int(os.environ.get('SCORE_RESET_DELAY_SEC', '10'))
    # gameState broadcast interval while a round is running
    STATE_TICK_SEC = int(os.environ.get('STATE_TICK_SEC', '1'))
    GUESS_POINTS = int(os.environ.get('GUESS_POINTS', '10'))
    DRAWER_POINTS = int(os.environ.get('DRAWER_POINTS', '5'))
    # Cancel a running countdown when players drop below MIN_PLAYERS
    CANCEL_COUNTDOWN_BELOW_MIN = _env_bool('CANCEL_COUNTDOWN_BELOW_MIN', True)
    # Optional comma separated override of the built-in word pool
    WORD_LIST = _env_list('WORD_LIST', [])
