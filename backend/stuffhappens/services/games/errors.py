"""Errors raised by the game services.

Each carries the HTTP status the route layer answers with, so handlers can
render them without knowing which operation failed.
"""


class GameError(Exception):
    status_code = 400
    message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'error': self.message}


class InsufficientCards(GameError):
    status_code = 500
    message = 'Not enough cards to start a game.'


class CardNotFound(GameError):
    status_code = 404
    message = 'Card not found.'


class GameNotFound(GameError):
    status_code = 404
    message = 'Game not found.'


class NoCardsRemaining(GameError):
    status_code = 404
    message = 'No more unique cards available for this game.'


class PersistenceFailure(GameError):
    status_code = 500
    message = 'Failed to save game state.'


class GameAlreadyFinished(GameError):
    status_code = 409
    message = 'This game is already finished.'


class RoundAlreadyResolved(GameError):
    status_code = 409
    message = 'This round has already been resolved.'


class CardAlreadyPlayed(GameError):
    status_code = 409
    message = 'This card has already been played in this game.'


class InvalidRound(GameError):
    message = 'Round number is out of sequence.'


class InvalidPlacement(GameError):
    message = 'Placement index is out of range.'


class InvalidHand(GameError):
    message = 'Proposed hand does not match the cards held in this game.'


class CardNotDealt(GameError):
    status_code = 409
    message = 'That card was not dealt for this round.'
