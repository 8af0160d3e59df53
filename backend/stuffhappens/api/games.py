from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from stuffhappens.services.games.demo import DemoEngine
from stuffhappens.services.games.engine import GameSessionEngine
from stuffhappens.services.games.errors import GameError
from stuffhappens.services.games.history import get_history


games = Blueprint('games', __name__)


@games.errorhandler(GameError)
def handle_game_error(err):
    current_app.logger.warning(f"[game-error] path={request.path} status={err.status_code} error={err.message}")
    return jsonify(err.to_dict()), err.status_code


def _int(value):
    # bool is an int subclass; a JSON true is not a valid id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    # JSON clients may send 2.0 for 2; 1.9 and "2" are rejected
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _hand(value, need_index=True):
    """Parse a list of {id, bad_luck_index} objects into (id, index) pairs."""
    if not isinstance(value, list):
        return None
    entries = []
    for item in value:
        if not isinstance(item, dict):
            return None
        card_id = _int(item.get('id'))
        index = item.get('bad_luck_index')
        if card_id is None:
            return None
        if need_index:
            if isinstance(index, bool) or not isinstance(index, (int, float)):
                return None
            index = float(index)
        entries.append((card_id, index))
    return entries


@games.route('/games/start', methods=['POST'])
@login_required
def start_game():
    result = GameSessionEngine().start(current_user.id)
    result['round_duration_sec'] = int(current_app.config.get('ROUND_DURATION_SEC', 30))
    return jsonify(result), 201


@games.route('/games/<int:game_id>/next-round', methods=['GET'])
@login_required
def next_round(game_id):
    return jsonify(GameSessionEngine().next_round_card(game_id, user_id=current_user.id))


@games.route('/games/<int:game_id>/guess', methods=['POST'])
@login_required
def submit_guess(game_id):
    """
    Judges where the player placed the round's card.

    Body: card_id, player_hand ([{id, bad_luck_index}] in the order the
    player sees it), placement_index, round_number.
    """
    data = request.get_json(silent=True) or {}
    card_id = _int(data.get('card_id'))
    placement_index = _int(data.get('placement_index'))
    round_number = _int(data.get('round_number'))
    # Indices for held cards come from the database, only ids are used here
    player_hand = _hand(data.get('player_hand'), need_index=False)
    if card_id is None or placement_index is None or round_number is None or player_hand is None:
        return jsonify({'error': 'Invalid input for guess.'}), 400

    result = GameSessionEngine().resolve_guess(
        game_id, card_id, player_hand, placement_index, round_number, user_id=current_user.id
    )
    return jsonify(result)


@games.route('/games/<int:game_id>/lose-round', methods=['POST'])
@login_required
def lose_round(game_id):
    """
    Records a round the player let time run out on.
    """
    data = request.get_json(silent=True) or {}
    card_id = _int(data.get('card_id'))
    round_number = _int(data.get('round_number'))
    if card_id is None or round_number is None:
        return jsonify({'error': 'Invalid input for losing round.'}), 400

    result = GameSessionEngine().resolve_timeout(game_id, card_id, round_number, user_id=current_user.id)
    result['message'] = 'Round lost/card discarded.'
    return jsonify(result)


@games.route('/history', methods=['GET'])
@login_required
def history():
    return jsonify(get_history(current_user.id))


@games.route('/demo-game/start', methods=['POST'])
def start_demo():
    return jsonify(DemoEngine().start_demo())


@games.route('/demo-game/guess', methods=['POST'])
def demo_guess():
    data = request.get_json(silent=True) or {}
    initial_cards = _hand(data.get('initial_cards'))
    new_card_id = _int(data.get('new_card_id'))
    placement_index = _int(data.get('placement_index'))
    if initial_cards is None or new_card_id is None or placement_index is None:
        return jsonify({'error': 'Invalid input for demo guess.'}), 400

    return jsonify(DemoEngine().resolve_demo_guess(initial_cards, new_card_id, placement_index))
