"""Round rules that are independent from HTTP and the database.

Rule of thumb:
- OK: thresholds, ordering checks, pure transformations over hands.
- Not OK: touching the DB session, Flask, datetime.now(), random draws.

A hand entry is an ``(card_id, bad_luck_index)`` pair.
"""
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidPlacement

INITIAL_HAND_SIZE = 3
# Cards that must be won on top of the initial hand
CARDS_TO_WIN = 3
ROUNDS_TO_LOSE = 3

# Game outcomes
OUTCOME_IN_PROGRESS = 'in_progress'
OUTCOME_WON = 'Won'
OUTCOME_LOST = 'Lost'

# Game card statuses
STATUS_INITIAL = 'initial'
STATUS_WON = 'won'
STATUS_LOST = 'lost'
STATUS_DISCARDED = 'discarded'
# Written by an older schema; read for the lost count, never written
STATUS_PROPOSED = 'proposed'

HAND_STATUSES = (STATUS_INITIAL, STATUS_WON)
LOST_STATUSES = (STATUS_LOST, STATUS_DISCARDED)

HandEntry = Tuple[int, float]


def insert_at(hand: Sequence[HandEntry], entry: HandEntry, placement_index: int) -> List[HandEntry]:
    """Return a copy of ``hand`` with ``entry`` inserted at ``placement_index``."""
    if placement_index < 0 or placement_index > len(hand):
        raise InvalidPlacement(f'Placement index must be between 0 and {len(hand)}.')
    trial = list(hand)
    trial.insert(placement_index, entry)
    return trial


def is_non_decreasing(sequence: Sequence[HandEntry]) -> bool:
    return all(left[1] <= right[1] for left, right in zip(sequence, sequence[1:]))


def judge_placement(hand: Sequence[HandEntry], entry: HandEntry, placement_index: int) -> bool:
    """Decide whether placing ``entry`` at ``placement_index`` keeps ``hand`` sorted.

    Equal indices are not a contradiction.
    """
    return is_non_decreasing(insert_at(hand, entry, placement_index))


def decide_outcome(won_count: int, lost_count: int) -> Optional[str]:
    """Terminal outcome for the given counts, or None while the game goes on."""
    if won_count >= CARDS_TO_WIN:
        return OUTCOME_WON
    if lost_count >= ROUNDS_TO_LOSE:
        return OUTCOME_LOST
    return None


def sort_by_index(cards):
    """Sort card-like objects (or dicts) ascending by bad luck index."""
    def _key(card):
        return card['bad_luck_index'] if isinstance(card, dict) else card.bad_luck_index
    return sorted(cards, key=_key)
