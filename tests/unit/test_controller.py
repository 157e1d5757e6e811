"""Unit tests for controller.py - session flow and state transitions."""

import pytest
from teenpatti import controller as controller_module
from teenpatti.cards import Card
from teenpatti.controller import GameController, apply_action, start_game
from teenpatti.exceptions import (
    AlreadySeen,
    InvalidHandSize,
    InvalidPhase,
    InvalidSetup,
    PlayerFolded,
    UnknownPlayer,
)
from teenpatti.hand_evaluator import HandRank
from teenpatti.records import GameStats
from teenpatti.rules import TeenPattiRules
from teenpatti.state import ActionType, BetAction, GamePhase


class MemoryStore:
    """In-memory stand-in for database.GameStore."""

    def __init__(self, history=None, stats=None):
        self.history = list(history or [])
        self.stats = stats or GameStats()
        self.saves = 0

    def load_history(self):
        return list(self.history)

    def load_stats(self):
        return self.stats

    def save_history(self, results):
        self.history = list(results)
        self.saves += 1

    def save_stats(self, stats):
        self.stats = stats


def bet(player_id, action_type, amount=0):
    return BetAction(type=action_type, player_id=player_id, amount=amount)


def assert_pot_invariant(controller):
    assert controller.state.pot == sum(p.total_bet for p in controller.state.players)


@pytest.fixture
def controller():
    game = GameController(store=MemoryStore())
    for name in ('Alice', 'Bob', 'Cara'):
        game.add_player(name)
    return game


def ids(controller):
    return [p.id for p in controller.state.players]


class TestRoster:
    """Tests for adding and removing players."""

    def test_add_player(self, controller):
        players = controller.state.players
        assert [p.name for p in players] == ['Alice', 'Bob', 'Cara']
        assert [p.turn_order for p in players] == [1, 2, 3]
        assert players[0].initial_balance == 1000
        assert len(set(ids(controller))) == 3

    def test_add_player_trims_name(self, controller):
        player = controller.add_player('  Dev  ')
        assert player.name == 'Dev'

    def test_blank_name(self, controller):
        with pytest.raises(InvalidSetup):
            controller.add_player('   ')

    def test_table_full(self):
        game = GameController(rules=TeenPattiRules(max_players=2))
        game.add_player('Alice')
        game.add_player('Bob')
        with pytest.raises(InvalidSetup, match="full"):
            game.add_player('Cara')

    def test_no_roster_changes_during_game(self, controller):
        controller.start_game()
        with pytest.raises(InvalidSetup):
            controller.add_player('Dev')
        with pytest.raises(InvalidSetup):
            controller.remove_player(ids(controller)[0])

    def test_remove_player(self, controller):
        controller.remove_player(ids(controller)[1])
        assert [p.name for p in controller.state.players] == ['Alice', 'Cara']

    def test_remove_unknown_player(self, controller):
        with pytest.raises(UnknownPlayer):
            controller.remove_player('ghost')

    def test_rename_player(self, controller):
        controller.rename_player(ids(controller)[0], 'Alicia')
        assert controller.state.players[0].name == 'Alicia'

    def test_set_blind(self, controller):
        player = controller.set_blind(ids(controller)[0], True)
        assert player.is_blind
        assert player.plays_blind

    def test_set_cards(self, controller):
        cards = [Card('K', 'hearts'), Card('K', 'spades'), Card('K', 'clubs')]
        controller.set_cards(ids(controller)[0], cards)
        assert controller.evaluate_player(ids(controller)[0]).rank == HandRank.TRAIL
        assert controller.evaluate_player(ids(controller)[1]) is None

    def test_set_cards_wrong_size(self, controller):
        with pytest.raises(InvalidHandSize):
            controller.set_cards(ids(controller)[0], [Card('K', 'hearts')])


class TestStartGame:
    """Tests for starting a game."""

    def test_needs_two_players(self):
        game = GameController()
        game.add_player('Alice')
        with pytest.raises(InvalidSetup, match="At least 2 players"):
            game.start_game()

    def test_collects_boot(self, controller):
        controller.start_game()
        state = controller.state

        assert state.is_game_active
        assert state.betting_phase == GamePhase.BETTING
        assert state.pot == 30
        assert state.current_bet == 10
        assert state.current_round == 1
        assert state.dealer_index == 0
        assert state.current_player_index == 1
        assert all(p.total_bet == 10 and p.current_bet == 10 for p in state.players)
        assert_pot_invariant(controller)

    def test_custom_boot(self, controller):
        controller.start_game(boot_amount=25)
        assert controller.state.pot == 75
        assert controller.state.boot_amount == 25

    def test_cannot_start_twice(self, controller):
        controller.start_game()
        with pytest.raises(InvalidSetup):
            controller.start_game()

    def test_dealer_rotates_each_game(self, controller):
        controller.start_game()
        controller.end_game()
        controller.start_game()
        assert controller.state.dealer_index == 1
        assert controller.state.current_player_index == 2

    def test_players_reset_between_games(self, controller):
        controller.start_game()
        controller.process_action(bet(ids(controller)[1], ActionType.SEE))
        controller.process_action(bet(ids(controller)[1], ActionType.FOLD))
        controller.end_game()
        controller.start_game()
        assert not any(p.is_folded or p.has_seen for p in controller.state.players)
        assert controller.state.pot == 30


class TestActions:
    """Tests for processing actions."""

    def test_chaal_advances_turn(self, controller):
        controller.start_game()
        bob = ids(controller)[1]

        result = controller.process_action(bet(bob, ActionType.CHAAL, 20))

        assert result['success']
        state = controller.state
        assert state.players[1].total_bet == 30
        assert state.players[1].current_bet == 20
        assert state.current_bet == 20
        assert state.current_player_index == 2
        assert state.pot == 50
        assert_pot_invariant(controller)

    def test_rejected_action_leaves_state(self, controller):
        controller.start_game()
        before = controller.state

        result = controller.process_action(bet(ids(controller)[1], ActionType.CHAAL, 5))

        assert result == {'success': False, 'error': 'Minimum bet is 20', 'reason': 'below_minimum'}
        assert controller.state is before

    def test_out_of_turn(self, controller):
        controller.start_game()
        result = controller.process_action(bet(ids(controller)[0], ActionType.CHAAL, 20))
        assert not result['success']
        assert result['reason'] == 'out_of_turn'

    def test_unknown_player(self, controller):
        controller.start_game()
        result = controller.process_action(bet('ghost', ActionType.CHAAL, 20))
        assert result['reason'] == 'unknown_player'

    def test_see_keeps_turn(self, controller):
        controller.start_game()
        bob = ids(controller)[1]
        controller.set_blind(bob, True)

        result = controller.process_action(bet(bob, ActionType.SEE))

        assert result['success']
        player = controller.state.players[1]
        assert player.has_seen
        assert not player.is_blind
        assert controller.state.current_player_index == 1

    def test_see_twice(self, controller):
        controller.start_game()
        bob = ids(controller)[1]
        controller.process_action(bet(bob, ActionType.SEE))
        result = controller.process_action(bet(bob, ActionType.SEE))
        assert result['reason'] == 'already_seen'

    def test_cannot_go_blind_after_seeing(self, controller):
        controller.start_game()
        bob = ids(controller)[1]
        controller.process_action(bet(bob, ActionType.SEE))
        with pytest.raises(AlreadySeen):
            controller.set_blind(bob, True)

    def test_blind_player_bets_single_stake(self, controller):
        controller.set_blind(ids(controller)[1], True)
        controller.start_game()
        result = controller.process_action(bet(ids(controller)[1], ActionType.BLIND, 10))
        assert result['success']
        assert controller.state.current_bet == 10

    def test_fold_skips_player(self, controller):
        controller.start_game()
        alice, bob, cara = ids(controller)

        controller.process_action(bet(bob, ActionType.FOLD))
        assert controller.state.current_player_index == 2
        controller.process_action(bet(cara, ActionType.CHAAL, 20))
        assert controller.state.current_player_index == 0
        controller.process_action(bet(alice, ActionType.CHAAL, 40))
        assert controller.state.current_player_index == 2

    def test_pack_is_fold(self, controller):
        controller.start_game()
        controller.process_action(bet(ids(controller)[1], ActionType.PACK))
        assert controller.state.players[1].is_folded
        assert not controller.state.players[1].is_active

    def test_last_player_standing_goes_to_showdown(self, controller):
        controller.start_game()
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.FOLD))
        controller.process_action(bet(cara, ActionType.FOLD))

        assert controller.state.betting_phase == GamePhase.SHOWDOWN
        # the pointer does not move once nobody else is left
        assert controller.state.current_player_index == 2

    def test_folded_player_cannot_act(self, controller):
        controller.start_game()
        bob = ids(controller)[1]
        controller.process_action(bet(bob, ActionType.FOLD))
        result = controller.process_action(bet(bob, ActionType.CHAAL, 20))
        assert result['reason'] == 'player_folded'

    def test_show_needs_two_players(self, controller):
        controller.start_game()
        result = controller.process_action(bet(ids(controller)[1], ActionType.SHOW, 20))
        assert result['reason'] == 'show_requires_two_players'

    def test_show_moves_to_showdown(self, controller):
        controller.start_game()
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.CHAAL, 20))
        controller.process_action(bet(cara, ActionType.FOLD))
        controller.process_action(bet(alice, ActionType.SEE))

        result = controller.process_action(bet(alice, ActionType.SHOW, 40))

        assert result == {'success': True, 'phase': 'showdown'}
        assert controller.state.pot == 90
        assert_pot_invariant(controller)

        rejected = controller.process_action(bet(bob, ActionType.CHAAL, 80))
        assert rejected['reason'] == 'invalid_phase'

    def test_no_actions_without_game(self, controller):
        result = controller.process_action(bet(ids(controller)[0], ActionType.CHAAL, 20))
        assert result['reason'] == 'invalid_phase'

    def test_boot_rejected_after_collection(self, controller):
        controller.start_game()
        result = controller.process_action(bet(ids(controller)[1], ActionType.BOOT, 10))
        assert result['reason'] == 'invalid_phase'

    def test_every_action_type_has_handler(self):
        assert set(controller_module._HANDLERS) == set(ActionType)

    def test_apply_action_is_pure(self, controller):
        controller.start_game()
        before = controller.state
        after = apply_action(before, bet(ids(controller)[1], ActionType.CHAAL, 20))
        assert before.pot == 30
        assert after.pot == 50


class TestBootPhase:
    """Tests for collecting the boot one player at a time."""

    def test_boot_in_turn(self, controller):
        controller.start_game(collect_boot=False)
        alice, bob, cara = ids(controller)
        assert controller.state.betting_phase == GamePhase.BOOT
        assert controller.state.pot == 0

        assert controller.process_action(bet(bob, ActionType.BOOT, 10))['success']
        assert controller.process_action(bet(cara, ActionType.BOOT, 10))['success']
        assert controller.state.betting_phase == GamePhase.BOOT
        assert controller.process_action(bet(alice, ActionType.BOOT, 10))['success']

        assert controller.state.betting_phase == GamePhase.BETTING
        assert controller.state.pot == 30
        assert controller.state.current_player_index == 1

    def test_wrong_boot_amount(self, controller):
        controller.start_game(collect_boot=False)
        result = controller.process_action(bet(ids(controller)[1], ActionType.BOOT, 5))
        assert result['reason'] == 'invalid_boot_amount'

    def test_fold_completes_boot(self, controller):
        controller.start_game(collect_boot=False)
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.BOOT, 10))
        controller.process_action(bet(cara, ActionType.BOOT, 10))

        result = controller.process_action(bet(alice, ActionType.FOLD))

        assert result == {'success': True, 'phase': 'betting'}
        assert controller.state.current_player_index == 1
        assert controller.process_action(bet(bob, ActionType.CHAAL, 20))['success']
        assert controller.state.players[1].total_bet == 30
        assert controller.state.pot == 50
        assert_pot_invariant(controller)

    def test_fold_before_everyone_booted(self, controller):
        controller.start_game(collect_boot=False)
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.BOOT, 10))
        controller.process_action(bet(cara, ActionType.FOLD))
        assert controller.state.betting_phase == GamePhase.BOOT

    def test_no_betting_during_boot(self, controller):
        controller.start_game(collect_boot=False)
        result = controller.process_action(bet(ids(controller)[1], ActionType.CHAAL, 20))
        assert result['reason'] == 'invalid_phase'

    def test_winner_not_before_betting(self, controller):
        controller.start_game(collect_boot=False)
        with pytest.raises(InvalidPhase):
            controller.declare_winner(ids(controller)[0])


class TestDeclareWinner:
    """Tests for settling a game."""

    def play_to_show(self, controller):
        controller.start_game()
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.CHAAL, 20))
        controller.process_action(bet(cara, ActionType.FOLD))
        controller.process_action(bet(alice, ActionType.SHOW, 40))
        return alice, bob, cara

    def test_settles_and_finishes(self, controller):
        alice, bob, cara = self.play_to_show(controller)

        result = controller.declare_winner(bob)

        state = controller.state
        assert result.winner == 'Bob'
        assert result.pot_amount == 90
        assert result.rounds == 1
        assert state.betting_phase == GamePhase.FINISHED
        assert not state.is_game_active
        assert state.winner.id == bob
        assert state.game_history == (result,)
        assert state.players[1].total_points == 90
        assert state.players[1].net_profit == 60
        assert state.players[0].net_profit == -50
        assert state.players[2].net_profit == -10
        assert_pot_invariant(controller)

    def test_blind_winner_bonus(self, controller):
        controller.set_blind(ids(controller)[1], True)
        controller.start_game()
        alice, bob, cara = ids(controller)
        controller.process_action(bet(bob, ActionType.BLIND, 10))
        controller.process_action(bet(cara, ActionType.FOLD))
        controller.process_action(bet(alice, ActionType.FOLD))

        result = controller.declare_winner(bob)
        assert result.pot_amount == 60  # pot of 40 plus half

    def test_updates_stats_and_persists(self, controller):
        alice, bob, cara = self.play_to_show(controller)
        controller.set_cards(bob, [Card('2', 'hearts'), Card('2', 'spades'), Card('9', 'clubs')])

        controller.declare_winner(bob)

        stats = controller.stats
        assert stats.total_games == 1
        assert stats.total_amount_won == 90
        assert stats.total_amount_lost == 60
        assert stats.average_pot == 90
        assert stats.favorite_hand == HandRank.PAIR
        assert controller.store.saves == 1
        assert controller.store.history[0].winner == 'Bob'
        assert controller.store.stats == stats

    def test_folded_player_cannot_win(self, controller):
        alice, bob, cara = self.play_to_show(controller)
        with pytest.raises(PlayerFolded):
            controller.declare_winner(cara)

    def test_unknown_winner(self, controller):
        self.play_to_show(controller)
        with pytest.raises(UnknownPlayer):
            controller.declare_winner('ghost')

    def test_new_round_counts_in_result(self, controller):
        controller.start_game()
        controller.new_round()
        controller.new_round()
        result = controller.declare_winner(ids(controller)[0])
        assert result.rounds == 3

    def test_new_round_needs_game(self, controller):
        with pytest.raises(InvalidPhase):
            controller.new_round()

    def test_points_carry_into_next_game(self, controller):
        alice, bob, cara = self.play_to_show(controller)
        controller.declare_winner(bob)
        controller.start_game()
        assert controller.state.players[1].total_points == 90
        assert controller.state.players[1].total_wins == 1
        assert controller.state.winner is None


class TestControllerLoad:
    """Tests for loading and resetting persisted data."""

    def test_load_from_store(self, controller):
        TestDeclareWinner().play_to_show(controller)
        controller.declare_winner(ids(controller)[1])
        store = controller.store

        restored = GameController.load(store)

        assert restored.state.game_history == tuple(store.history)
        assert restored.stats == store.stats

    def test_reset_history(self, controller):
        TestDeclareWinner().play_to_show(controller)
        controller.declare_winner(ids(controller)[1])

        controller.reset_history()

        assert controller.state.game_history == ()
        assert controller.stats == GameStats()
        assert controller.store.history == []


class TestGameStateView:
    """Tests for get_game_state."""

    def test_view_during_game(self, controller):
        controller.start_game()
        view = controller.get_game_state()

        assert view['pot'] == 30
        assert view['betting_phase'] == 'betting'
        assert view['current_player_id'] == ids(controller)[1]
        assert view['bet_limits'] == {'min_bet': 20, 'max_bet': 40, 'show_cost': 20, 'is_blind': False}
        assert view['round_settled'] is True
        assert view['play_sequence'] == ids(controller)[1:] + ids(controller)[:1]

    def test_view_before_game(self, controller):
        view = controller.get_game_state()
        assert view['bet_limits'] is None
        assert view['current_player_id'] is None
        assert view['is_game_active'] is False

    def test_start_game_reducer(self, controller):
        state = start_game(controller.state, boot_amount=5)
        assert state.pot == 15
        assert controller.state.pot == 0
