import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Ensure the backend root (containing the `stuffhappens` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from stuffhappens import create_app, db
from stuffhappens.models import Card, User
from stuffhappens.services.games.catalog import CardCatalog


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    ROUND_DURATION_SEC = 30
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    CARD_DATA_PATH = None


class OrderedCatalog(CardCatalog):
    """Catalog whose draws are deterministic: lowest eligible ids first."""

    def draw_random(self, count, exclude_ids=()):
        if count <= 0:
            return []
        exclude = set(exclude_ids)
        eligible = [c for c in Card.query.order_by(Card.id).all() if c.id not in exclude]
        return eligible[:count]


class StepClock:
    """Clock advancing one minute per call, so start times never tie."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import stuffhappens.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """App on a file-backed SQLite database, shared by threads with their own contexts."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'stuffhappens.db'}"

    application = create_app(FileConfig)
    with application.app_context():
        import stuffhappens.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_cards(flask_app):
    """Insert cards given as (name, bad_luck_index) pairs; returns {name: id}."""
    def _make(*entries):
        ids = {}
        for name, index in entries:
            card = Card(name=name, image=f'{name.lower()}.png', bad_luck_index=index, theme='Test')
            db.session.add(card)
            db.session.flush()
            ids[name] = card.id
        db.session.commit()
        return ids
    return _make


@pytest.fixture()
def abcd(make_cards):
    """A(1), B(5), C(9) are drawn first; D(7) is the next round's card."""
    return make_cards(('A', 1.0), ('B', 5.0), ('C', 9.0), ('D', 7.0))


@pytest.fixture()
def user(flask_app):
    u = User(username='player1')
    u.set_password('password123')
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture()
def other_user(flask_app):
    u = User(username='player2')
    u.set_password('securepass')
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture()
def auth_client(client, user):
    res = client.post('/api/login', json={'username': 'player1', 'password': 'password123'})
    assert res.status_code == 200
    return client


@pytest.fixture()
def ordered_catalog(flask_app):
    return OrderedCatalog()


@pytest.fixture()
def use_ordered_catalog(monkeypatch):
    """Make every engine built by the routes draw deterministically."""
    monkeypatch.setattr(CardCatalog, 'draw_random', OrderedCatalog.draw_random)
