from datetime import datetime, timedelta

import pytest

from brandquiz.game.models import Player
from brandquiz.leaderboard.store import LeaderboardStore


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_solo_scores_sorted_and_capped():
    store = LeaderboardStore()
    for i, score in enumerate([30, 90, 10, 60]):
        store.add_solo_score(f'p{i}', score, '🙂')
    top = store.top_solo(3)
    assert [e.score for e in top] == [90, 60, 30]
    assert top[0].to_dict()['nickname'] == 'p1'


def test_daily_only_counts_today():
    clock = Clock(datetime(2024, 5, 1, 12, 0))
    store = LeaderboardStore(clock=clock)
    store.add_solo_score('yesterday', 100)
    clock.now += timedelta(days=1)
    store.add_solo_score('today', 20)
    assert [e.nickname for e in store.top_daily()] == ['today']
    assert len(store.top_solo()) == 2


def test_game_summary_records_ranked_players():
    store = LeaderboardStore(clock=Clock(datetime(2024, 5, 1, 12, 0)))
    ranked = [Player('a', 'Ann', score=40), Player('b', 'Bob', score=20)]
    summary = store.add_game_summary(ranked, 5)
    data = summary.to_dict()
    assert data['winner'] == 'Ann'
    assert data['questionCount'] == 5
    assert data['id'].startswith('game_')
    assert [p['nickname'] for p in data['players']] == ['Ann', 'Bob']
    assert store.multiplayer_games() == [summary]


def test_delete_uses_displayed_order():
    store = LeaderboardStore()
    store.add_solo_score('low', 10)
    store.add_solo_score('high', 99)
    # Index 0 is the top of the displayed board, not the first appended.
    assert store.delete_entry('solo', 0)
    assert [e.nickname for e in store.top_solo()] == ['low']
    assert not store.delete_entry('solo', 5)


def test_clear_and_unknown_kind():
    store = LeaderboardStore()
    store.add_solo_score('x', 1)
    store.clear('daily')
    assert store.top_daily() == []
    assert len(store.top_solo()) == 1
    with pytest.raises(ValueError):
        store.clear('weekly')
