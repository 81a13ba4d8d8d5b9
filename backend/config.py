import json
import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///flipcard.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Browser origins allowed to call the games/scoring API
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',')
    # Where the game engine posts its results (the relay)
    RELAY_URL = os.environ.get('RELAY_URL', 'http://localhost:5000/relay/')
    # Where the relay forwards to (the scoring service)
    RELAY_BACKEND_URL = os.environ.get('RELAY_BACKEND_URL', 'http://localhost:5000/api/scoring/')
    # Delayed actions (seconds)
    MISMATCH_DELAY_SEC = float(os.environ.get('MISMATCH_DELAY_SEC', '1.0'))
    WIN_REVEAL_DELAY_SEC = float(os.environ.get('WIN_REVEAL_DELAY_SEC', '0.5'))
    # Optional JSON object of city -> country pairs; None uses the built-in set
    CARD_PAIRS = json.loads(os.environ['CARD_PAIRS']) if os.environ.get('CARD_PAIRS') else None
    # Idle boards older than this are swept when a new game is created (0 disables)
    SESSION_TTL_SEC = float(os.environ.get('SESSION_TTL_SEC', '1800'))
    # Timeout for the game engine's own calls to the relay
    RELAY_CLIENT_TIMEOUT_SEC = float(os.environ.get('RELAY_CLIENT_TIMEOUT_SEC', '10'))
