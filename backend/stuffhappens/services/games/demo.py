import logging
from typing import Sequence

from .catalog import CardCatalog
from .errors import CardNotFound, InsufficientCards
from .rules import INITIAL_HAND_SIZE, HandEntry, judge_placement, sort_by_index

logger = logging.getLogger(__name__)


class DemoEngine:
    """Single-round game for anonymous players. Nothing is persisted."""

    def __init__(self, catalog=None):
        self.catalog = catalog or CardCatalog()

    def start_demo(self) -> dict:
        initial = self.catalog.draw_random(INITIAL_HAND_SIZE)
        if len(initial) < INITIAL_HAND_SIZE:
            raise InsufficientCards('Not enough cards for demo game.')
        initial = sort_by_index(initial)
        extra = self.catalog.draw_random(1, [card.id for card in initial])
        if not extra:
            raise InsufficientCards('Not enough unique cards for demo game.')
        logger.info(f"[demo-start] cards={[card.id for card in initial]} new_card={extra[0].id}")
        return {
            'initial_cards': [card.to_dict(reveal=True) for card in initial],
            'new_card': extra[0].to_dict(reveal=False),
        }

    def resolve_demo_guess(self, initial_cards: Sequence[HandEntry], new_card_id: int, placement_index: int) -> dict:
        # The hand is whatever the caller sent; there is no stored state to check it against
        card = self.catalog.get_by_id(new_card_id)
        if card is None:
            raise CardNotFound('New card not found for demo game.')
        is_correct = judge_placement(initial_cards, (card.id, card.bad_luck_index), placement_index)
        return {
            'is_correct': is_correct,
            'bad_luck_index': card.bad_luck_index,
            'won_card': card.to_dict(reveal=True) if is_correct else None,
        }
