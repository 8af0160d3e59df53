import os

_DEFAULT_ORIGINS = 'http://localhost:5173,http://127.0.0.1:5173'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///stuffhappens.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Client-side round timer (seconds); the server only reports it
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '30'))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', _DEFAULT_ORIGINS).split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: alternate card catalog for `flask seed-cards` / `flask db-reset`
    CARD_DATA_PATH = os.environ.get('CARD_DATA_PATH')
