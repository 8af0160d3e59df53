from typing import List

from .store import GameStore


def get_history(user_id: int, store=None) -> List[dict]:
    """Return every game of the user, newest first, with its card trail.

    Each game carries ``game_cards``: all of its events joined to card
    details, ascending by bad luck index. One events query per game.
    """
    store = store or GameStore()
    history = []
    for game in store.query_games_for_user(user_id):
        payload = game.to_dict()
        payload['game_cards'] = [event.to_dict() for event in store.query_events_for_game(game.id)]
        history.append(payload)
    return history
