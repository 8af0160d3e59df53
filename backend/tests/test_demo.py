import pytest

from conftest import OrderedCatalog
from stuffhappens.models import Game, GameCard
from stuffhappens.services.games.demo import DemoEngine
from stuffhappens.services.games.errors import CardNotFound, InsufficientCards, InvalidPlacement


def test_start_demo_hides_only_the_new_card(flask_app, abcd):
    result = DemoEngine(catalog=OrderedCatalog()).start_demo()
    assert [c['id'] for c in result['initial_cards']] == [abcd['A'], abcd['B'], abcd['C']]
    assert all('bad_luck_index' in c for c in result['initial_cards'])
    assert result['new_card']['id'] == abcd['D']
    assert 'bad_luck_index' not in result['new_card']


def test_start_demo_with_random_catalog(flask_app, make_cards):
    make_cards(*[(f'card{i}', float(i)) for i in range(8)])
    result = DemoEngine().start_demo()
    initial_ids = [c['id'] for c in result['initial_cards']]
    indices = [c['bad_luck_index'] for c in result['initial_cards']]
    assert len(set(initial_ids)) == 3
    assert indices == sorted(indices)
    assert result['new_card']['id'] not in initial_ids


def test_start_demo_needs_four_cards(flask_app, make_cards):
    make_cards(('A', 1.0), ('B', 5.0))
    with pytest.raises(InsufficientCards):
        DemoEngine().start_demo()


def test_start_demo_fails_without_a_fourth_card(flask_app, make_cards):
    make_cards(('A', 1.0), ('B', 5.0), ('C', 9.0))
    with pytest.raises(InsufficientCards):
        DemoEngine().start_demo()


def test_demo_guess_is_judged_and_not_persisted(flask_app, abcd):
    demo = DemoEngine()
    hand = [(abcd['A'], 1.0), (abcd['B'], 5.0), (abcd['C'], 9.0)]

    right = demo.resolve_demo_guess(hand, abcd['D'], 2)
    assert right['is_correct'] is True
    assert right['bad_luck_index'] == 7.0
    assert right['won_card']['id'] == abcd['D']

    wrong = demo.resolve_demo_guess(hand, abcd['D'], 0)
    assert wrong['is_correct'] is False
    assert wrong['won_card'] is None

    assert Game.query.count() == 0
    assert GameCard.query.count() == 0


def test_demo_guess_errors(flask_app, abcd):
    demo = DemoEngine()
    hand = [(abcd['A'], 1.0), (abcd['B'], 5.0), (abcd['C'], 9.0)]
    with pytest.raises(CardNotFound):
        demo.resolve_demo_guess(hand, 9999, 0)
    with pytest.raises(InvalidPlacement):
        demo.resolve_demo_guess(hand, abcd['D'], 4)
