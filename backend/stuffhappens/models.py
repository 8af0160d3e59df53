from stuffhappens import db, bcrypt
from flask_login import UserMixin
from stuffhappens.services.games.rules import HAND_STATUSES, OUTCOME_IN_PROGRESS


def _isoformat(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    games = db.relationship('Game', back_populates='user', cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Card(db.Model):
    __tablename__ = 'card'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    image = db.Column(db.String(256), nullable=False)
    bad_luck_index = db.Column(db.Float, unique=True, nullable=False)
    theme = db.Column(db.String(64), nullable=False)

    def to_dict(self, reveal=True):
        """Serialize the card; the bad luck index is only included when revealed."""
        payload = {
            'id': self.id,
            'name': self.name,
            'image': self.image,
            'theme': self.theme,
        }
        if reveal:
            payload['bad_luck_index'] = self.bad_luck_index
        return payload


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    start_time = db.Column(db.DateTime(timezone=True), nullable=False)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)
    outcome = db.Column(db.String(16), nullable=False, default=OUTCOME_IN_PROGRESS)  # in_progress, Won, Lost
    cards_collected = db.Column(db.Integer, nullable=False, default=0)
    # Card dealt for the round awaiting resolution
    dealt_card_id = db.Column(db.Integer, db.ForeignKey('card.id'), nullable=True)
    user = db.relationship('User', back_populates='games')
    events = db.relationship('GameCard', back_populates='game', cascade='all, delete-orphan')

    @property
    def is_finished(self):
        return self.outcome != OUTCOME_IN_PROGRESS

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'start_time': _isoformat(self.start_time),
            'end_time': _isoformat(self.end_time),
            'outcome': self.outcome,
            'cards_collected': self.cards_collected,
        }


class GameCard(db.Model):
    """One card's terminal state within a game (append-only)."""
    __tablename__ = 'game_card'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'card_id', name='uq_game_card_game_card'),
        db.UniqueConstraint('game_id', 'round', name='uq_game_card_game_round'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    card_id = db.Column(db.Integer, db.ForeignKey('card.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.String(16), nullable=False)  # initial, won, lost, discarded
    round = db.Column(db.Integer, nullable=True)
    guess_time = db.Column(db.DateTime(timezone=True), nullable=True)
    is_correct_guess = db.Column(db.Boolean, nullable=True)
    game = db.relationship('Game', back_populates='events')
    card = db.relationship('Card')

    @property
    def in_hand(self):
        return self.status in HAND_STATUSES

    def to_dict(self):
        payload = self.card.to_dict(reveal=True)
        payload.update({
            'status': self.status,
            'round': self.round,
            'guess_time': _isoformat(self.guess_time),
            'is_correct_guess': self.is_correct_guess,
        })
        return payload
