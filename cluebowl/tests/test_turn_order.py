"""Tests for performer/guesser pairing and the turn queue."""

import random

import pytest

from cluebowl.game.turn_order import TurnOrder


def assert_single_cycle(order: TurnOrder) -> None:
    """shows_for visits every player exactly once and never pairs a player with themselves."""
    players = order.players
    assert set(order.shows_for) == set(players)
    assert sorted(order.shows_for.values()) == sorted(players)
    for performer, guesser in order.shows_for.items():
        assert performer != guesser

    start = players[0]
    seen = [start]
    current = order.shows_for[start]
    while current != start:
        assert current not in seen
        seen.append(current)
        current = order.shows_for[current]
    assert len(seen) == len(players)


class TestTurnOrder:
    def test_add_player_keeps_registration_order(self):
        order = TurnOrder()
        for name in ["a", "b", "c"]:
            assert order.add_player(name) is True
        assert order.players == ["a", "b", "c"]

    def test_duplicate_registration_is_a_no_op(self):
        order = TurnOrder()
        order.add_player("a")
        assert order.add_player("a") is False
        assert order.players == ["a"]
        assert order.num_players() == 1

    def test_two_players_show_to_each_other(self):
        order = TurnOrder()
        order.add_player("A")
        order.add_player("B")
        order.make_turn_order()
        assert order.shows_for == {"A": "B", "B": "A"}

    @pytest.mark.parametrize("size", [2, 3, 4, 5, 8, 13])
    def test_make_turn_order_is_a_single_cycle(self, size):
        order = TurnOrder()
        for i in range(size):
            order.add_player(f"p{i}")
        for seed in range(25):
            random.seed(seed)
            order.make_turn_order()
            assert_single_cycle(order)

    def test_make_turn_order_varies(self):
        order = TurnOrder()
        for i in range(5):
            order.add_player(f"p{i}")
        pairings = set()
        for seed in range(30):
            random.seed(seed)
            order.make_turn_order()
            pairings.add(tuple(sorted(order.shows_for.items())))
        assert len(pairings) > 1

    @pytest.mark.parametrize("size", [0, 1])
    def test_make_turn_order_needs_two_players(self, size):
        order = TurnOrder()
        for i in range(size):
            order.add_player(f"p{i}")
        with pytest.raises(ValueError):
            order.make_turn_order()

    def test_reset_queue_refills_in_registration_order(self):
        """An empty queue with three players refills to three and re-pairs."""
        order = TurnOrder()
        for name in ["a", "b", "c"]:
            order.add_player(name)
        order.had_turn = ["c", "b"]
        assert order.num_waiting() == 0

        order.reset_queue()

        assert order.num_waiting() == 3
        assert order.awaiting_turn == ["a", "b", "c"]
        assert order.had_turn == []
        assert_single_cycle(order)

    def test_reset_queue_copies_players(self):
        order = TurnOrder()
        order.add_player("a")
        order.add_player("b")
        order.reset_queue()
        order.next_performer()
        assert order.players == ["a", "b"]

    def test_next_performer_pops_from_the_end(self):
        order = TurnOrder()
        for name in ["a", "b", "c"]:
            order.add_player(name)
        order.reset_queue()
        assert [order.next_performer() for _ in range(3)] == ["c", "b", "a"]
        assert order.num_waiting() == 0

    def test_guesser_for(self):
        order = TurnOrder()
        order.add_player("a")
        order.add_player("b")
        order.make_turn_order()
        assert order.guesser_for("a") == "b"
