"""Game session state machine and round resolution.

A game starts ``in_progress`` with three initial cards and ends exactly
once, as ``Won`` after three correct placements or ``Lost`` after three
failed rounds (wrong guess or timeout). Every mutating operation on a game
runs under that game's lock and writes through ``GameStore.atomic()``.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from .catalog import CardCatalog
from .errors import (
    CardAlreadyPlayed,
    CardNotDealt,
    CardNotFound,
    GameAlreadyFinished,
    GameNotFound,
    InsufficientCards,
    InvalidHand,
    InvalidRound,
    NoCardsRemaining,
    RoundAlreadyResolved,
)
from .rules import (
    INITIAL_HAND_SIZE,
    OUTCOME_LOST,
    OUTCOME_WON,
    STATUS_DISCARDED,
    STATUS_INITIAL,
    STATUS_LOST,
    STATUS_WON,
    HandEntry,
    decide_outcome,
    judge_placement,
    sort_by_index,
)
from .store import GameStore

logger = logging.getLogger(__name__)

class _GameLock:
    __slots__ = ('lock', 'holders')

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


# Only games with an operation in flight have an entry
_game_locks: Dict[int, _GameLock] = {}
_game_locks_guard = threading.Lock()


@contextmanager
def _locked(game_id: int):
    """Serialize work on one game; the entry goes away with its last holder."""
    with _game_locks_guard:
        entry = _game_locks.get(game_id)
        if entry is None:
            entry = _game_locks[game_id] = _GameLock()
        entry.holders += 1
    try:
        with entry.lock:
            yield
    finally:
        with _game_locks_guard:
            entry.holders -= 1
            if not entry.holders:
                del _game_locks[game_id]


def _utcnow():
    return datetime.now(timezone.utc)


class GameSessionEngine:
    """Runs registered-user games against an injected store and catalog."""

    def __init__(self, store=None, catalog=None, clock=None):
        self.store = store or GameStore()
        self.catalog = catalog or CardCatalog()
        self.clock = clock or _utcnow

    # ---- lookups ----

    def get_game(self, game_id: int, user_id: Optional[int] = None):
        """Fetch a game, treating games owned by someone else as missing."""
        game = self.store.get_game(game_id)
        if game is None or (user_id is not None and game.user_id != user_id):
            raise GameNotFound()
        return game

    def _get_in_progress(self, game_id: int, user_id: Optional[int]):
        game = self.get_game(game_id, user_id)
        if game.is_finished:
            raise GameAlreadyFinished()
        return game

    def _get_card(self, card_id: int):
        card = self.catalog.get_by_id(card_id)
        if card is None:
            raise CardNotFound()
        return card

    # ---- operations ----

    def start(self, user_id: int) -> dict:
        cards = self.catalog.draw_random(INITIAL_HAND_SIZE)
        if len(cards) < INITIAL_HAND_SIZE:
            raise InsufficientCards()
        cards = sort_by_index(cards)
        initial_cards = [card.to_dict(reveal=True) for card in cards]

        with self.store.atomic():
            game_id = self.store.insert_game(user_id, self.clock())
            for card in cards:
                self.store.insert_game_card_event(game_id, card.id, STATUS_INITIAL)

        logger.info(f"[game-start] game={game_id} user={user_id} cards={[c['id'] for c in initial_cards]}")
        return {'game_id': game_id, 'initial_cards': initial_cards}

    def next_round_card(self, game_id: int, user_id: Optional[int] = None) -> dict:
        """Deal a card not yet involved in the game, with its index hidden.

        The dealt card is kept on the game until its round resolves, so asking
        again before then returns the same card.
        """
        with _locked(game_id):
            game = self._get_in_progress(game_id, user_id)
            round_number = self.store.query_resolved_round_count(game_id) + 1
            card = self.catalog.get_by_id(game.dealt_card_id) if game.dealt_card_id else None
            if card is None:
                involved = self.store.query_involved_card_ids(game_id)
                drawn = self.catalog.draw_random(1, involved)
                if not drawn:
                    raise NoCardsRemaining()
                card = drawn[0]
                with self.store.atomic():
                    self.store.update_dealt_card(game_id, card.id)
                logger.info(f"[round-deal] game={game_id} round={round_number} card={card.id}")
            return {'card': card.to_dict(reveal=False), 'round_number': round_number}

    def resolve_guess(self, game_id: int, card_id: int, proposed_hand: Sequence[HandEntry],
                      placement_index: int, round_number: int, user_id: Optional[int] = None) -> dict:
        with _locked(game_id):
            game = self._get_in_progress(game_id, user_id)
            card = self._get_card(card_id)
            self._check_round(game, card.id, round_number)
            trial_hand = self._authoritative_hand(game_id, proposed_hand)
            is_correct = judge_placement(trial_hand, (card.id, card.bad_luck_index), placement_index)
            won_card = card.to_dict(reveal=True) if is_correct else None
            bad_luck_index = card.bad_luck_index

            with self.store.atomic():
                self.store.insert_game_card_event(
                    game_id, card.id, STATUS_WON if is_correct else STATUS_LOST,
                    round=round_number, guess_time=self.clock(), correct=is_correct,
                )
                self.store.update_dealt_card(game_id, None)
                summary = self._settle(game_id)

        logger.info(
            f"[round-guess] game={game_id} round={round_number} card={card_id} correct={is_correct} "
            f"won={summary['cards_won_count']} lost={summary['cards_lost_count']}"
        )
        summary.update({
            'is_correct': is_correct,
            'bad_luck_index': bad_luck_index,
            'won_card': won_card,
        })
        return summary

    def resolve_timeout(self, game_id: int, card_id: int, round_number: int,
                        user_id: Optional[int] = None) -> dict:
        """Resolve a round the player ran out of time on; always a loss."""
        with _locked(game_id):
            game = self._get_in_progress(game_id, user_id)
            card = self._get_card(card_id)
            self._check_round(game, card.id, round_number)

            with self.store.atomic():
                self.store.insert_game_card_event(
                    game_id, card.id, STATUS_DISCARDED,
                    round=round_number, guess_time=self.clock(), correct=False,
                )
                self.store.update_dealt_card(game_id, None)
                summary = self._settle(game_id)

        logger.info(f"[round-timeout] game={game_id} round={round_number} card={card_id} lost={summary['cards_lost_count']}")
        return summary

    def end_game(self, game_id: int, outcome: str, collected_count: int) -> None:
        """Terminate an in-progress game; a finished game is left untouched."""
        if outcome not in (OUTCOME_WON, OUTCOME_LOST):
            raise ValueError(f'Unknown outcome {outcome!r}')
        with _locked(game_id):
            with self.store.atomic():
                self._end(game_id, outcome, collected_count)

    # ---- internals ----

    def _check_round(self, game, card_id: int, round_number: int) -> None:
        if round_number < 1:
            raise InvalidRound('Round numbers start at 1.')
        resolved = self.store.query_resolved_round_count(game.id)
        if round_number <= resolved:
            raise RoundAlreadyResolved(f'Round {round_number} has already been resolved.')
        if round_number != resolved + 1:
            raise InvalidRound(f'Expected round {resolved + 1}, got {round_number}.')
        if card_id in self.store.query_involved_card_ids(game.id):
            raise CardAlreadyPlayed()
        if game.dealt_card_id != card_id:
            raise CardNotDealt()

    def _authoritative_hand(self, game_id: int, proposed_hand: Sequence[HandEntry]):
        """Re-key the caller's hand ordering with the stored bad luck indices."""
        held = {e.card_id: e.card.bad_luck_index for e in self.store.query_events_for_game(game_id) if e.in_hand}
        proposed_ids = [entry[0] for entry in proposed_hand]
        if len(proposed_ids) != len(held) or set(proposed_ids) != set(held):
            raise InvalidHand()
        return [(card_id, held[card_id]) for card_id in proposed_ids]

    def _settle(self, game_id: int) -> dict:
        """Recount the event log and terminate the game when a threshold is hit."""
        events = self.store.query_events_for_game(game_id)
        hand = [e.to_dict() for e in events if e.in_hand]
        won = self.store.query_won_count(game_id)
        lost = self.store.query_lost_count(game_id)
        outcome = decide_outcome(won, lost)
        if outcome:
            self._end(game_id, outcome, len(hand))
        return {
            'current_cards': hand,
            'game_outcome': outcome,
            'cards_won_count': won,
            'cards_lost_count': lost,
            'cards_collected': len(hand),
        }

    def _end(self, game_id: int, outcome: str, collected_count: int) -> None:
        if not self.store.update_game_outcome(game_id, self.clock(), outcome, collected_count):
            if self.store.get_game(game_id) is None:
                raise GameNotFound()
            raise GameAlreadyFinished()
        logger.info(f"[game-end] game={game_id} outcome={outcome} collected={collected_count}")
