import json
import logging
import os
from typing import Iterable, List, Optional

from stuffhappens import db
from stuffhappens.models import Card

logger = logging.getLogger(__name__)

DEFAULT_THEME = 'University Life'
DEFAULT_CARD_DATA = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'data', 'cards.json')


def load_card_data(path: Optional[str] = None) -> list:
    """Read card entries (name, image, bad_luck_index[, theme]) from a JSON file."""
    with open(path or DEFAULT_CARD_DATA, encoding='utf-8') as fh:
        return json.load(fh)


class CardCatalog:
    """Read access to the card catalog plus the random card selector."""

    def count(self) -> int:
        return Card.query.count()

    def get_by_id(self, card_id) -> Optional[Card]:
        return db.session.get(Card, card_id)

    def draw_random(self, count: int, exclude_ids: Iterable[int] = ()) -> List[Card]:
        """Draw up to ``count`` distinct cards uniformly at random.

        Cards in ``exclude_ids`` are never returned. When fewer eligible cards
        remain the result is short; callers that need an exact count decide
        whether that is an error.
        """
        if count <= 0:
            return []
        query = Card.query
        exclude = list(exclude_ids)
        if exclude:
            query = query.filter(Card.id.notin_(exclude))
        return query.order_by(db.func.random()).limit(count).all()

    def seed(self, entries: Iterable[dict]) -> int:
        """Add cards to the session; the caller commits."""
        added = 0
        for entry in entries:
            db.session.add(Card(
                name=entry['name'],
                image=entry['image'],
                bad_luck_index=float(entry['bad_luck_index']),
                theme=entry.get('theme') or DEFAULT_THEME,
            ))
            added += 1
        db.session.flush()
        logger.info(f"[catalog-seed] cards={added}")
        return added
