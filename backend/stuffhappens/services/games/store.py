"""SQLAlchemy implementation of the game persistence port.

The session engine only talks to storage through a ``GameStore``; swap in
another object with the same methods to run the engine against a
different backend. Write methods add/flush but never commit: wrap them in
``atomic()`` so a multi-row mutation lands all at once or not at all.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stuffhappens import db
from stuffhappens.models import Card, Game, GameCard
from .errors import PersistenceFailure, RoundAlreadyResolved
from .rules import LOST_STATUSES, OUTCOME_IN_PROGRESS, STATUS_PROPOSED, STATUS_WON

logger = logging.getLogger(__name__)


class GameStore:

    @contextmanager
    def atomic(self):
        """Commit everything written inside the block, or roll it all back."""
        try:
            yield
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            logger.warning(f"[store-conflict] {exc.orig}")
            raise RoundAlreadyResolved() from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"[store-rollback] {exc}")
            raise PersistenceFailure() from exc
        except Exception:
            db.session.rollback()
            raise

    # ---- writes ----

    def insert_game(self, user_id: int, start_time) -> int:
        game = Game(user_id=user_id, start_time=start_time, outcome=OUTCOME_IN_PROGRESS, cards_collected=0)
        db.session.add(game)
        db.session.flush()
        return game.id

    def insert_game_card_event(self, game_id: int, card_id: int, status: str,
                               round=None, guess_time=None, correct=None) -> GameCard:
        event = GameCard(
            game_id=game_id,
            card_id=card_id,
            status=status,
            round=round,
            guess_time=guess_time,
            is_correct_guess=correct,
        )
        db.session.add(event)
        db.session.flush()
        return event

    def update_game_outcome(self, game_id: int, end_time, outcome: str, collected_count: int) -> bool:
        """Write the termination fields; only an in-progress game is updated."""
        updated = (
            Game.query
            .filter(Game.id == game_id, Game.outcome == OUTCOME_IN_PROGRESS)
            .update(
                {'end_time': end_time, 'outcome': outcome, 'cards_collected': collected_count},
                synchronize_session='fetch',
            )
        )
        return updated == 1

    def update_dealt_card(self, game_id: int, card_id: Optional[int]) -> None:
        """Remember the card dealt for the pending round; None once it resolves."""
        Game.query.filter(Game.id == game_id).update({'dealt_card_id': card_id}, synchronize_session='fetch')

    # ---- reads ----

    def get_game(self, game_id: int) -> Optional[Game]:
        return db.session.get(Game, game_id)

    def query_events_for_game(self, game_id: int) -> List[GameCard]:
        return (
            GameCard.query
            .join(Card, GameCard.card_id == Card.id)
            .filter(GameCard.game_id == game_id)
            .order_by(Card.bad_luck_index.asc())
            .all()
        )

    def query_involved_card_ids(self, game_id: int) -> Set[int]:
        rows = db.session.query(GameCard.card_id).filter(GameCard.game_id == game_id).all()
        return {row.card_id for row in rows}

    def query_won_count(self, game_id: int) -> int:
        return GameCard.query.filter_by(game_id=game_id, status=STATUS_WON).count()

    def query_lost_count(self, game_id: int) -> int:
        return GameCard.query.filter(
            GameCard.game_id == game_id,
            or_(
                GameCard.status.in_(LOST_STATUSES),
                # Older rows recorded a failed guess as 'proposed' + incorrect
                (GameCard.status == STATUS_PROPOSED) & (GameCard.is_correct_guess.is_(False)),
            ),
        ).count()

    def query_resolved_round_count(self, game_id: int) -> int:
        return GameCard.query.filter(GameCard.game_id == game_id, GameCard.round.isnot(None)).count()

    def query_games_for_user(self, user_id: int) -> List[Game]:
        return (
            Game.query
            .filter_by(user_id=user_id)
            .order_by(Game.start_time.desc(), Game.id.desc())
            .all()
        )
