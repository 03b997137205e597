from arcade.models import LeaderboardEntry
from arcade.services.leaderboard import LeaderboardStore


def test_ensure_player_creates_once(flask_app):
    store = LeaderboardStore()
    first = store.ensure_player('alice')
    second = store.ensure_player('alice')
    assert first.id == second.id
    assert LeaderboardEntry.query.count() == 1
    assert first.wins == 0


def test_blank_username_is_ignored(flask_app):
    store = LeaderboardStore()
    assert store.ensure_player(None) is None
    assert store.ensure_player('') is None
    assert store.award_win(None, 'memory') is None
    assert LeaderboardEntry.query.count() == 0


def test_award_win_counts_per_game(flask_app):
    store = LeaderboardStore()
    store.ensure_player('alice')
    store.award_win('alice', 'memory')
    ranking = store.award_win('alice', 'tictactoe')
    assert ranking == [{'name': 'alice', 'wins': 2}]
    assert store.stats('alice')['games'] == {'memory': 1, 'tictactoe': 1}


def test_award_win_creates_missing_player(flask_app):
    store = LeaderboardStore()
    assert store.award_win('zoe', 'mathwars') == [{'name': 'zoe', 'wins': 1}]


def test_ranking_orders_by_wins_then_registration(flask_app):
    store = LeaderboardStore()
    for name in ['bob', 'alice', 'carol']:
        store.ensure_player(name)
    store.award_win('alice', 'memory')
    store.award_win('bob', 'memory')
    ranking = store.award_win('carol', 'memory')
    assert [r['name'] for r in ranking] == ['bob', 'alice', 'carol']

    ranking = store.award_win('carol', 'mathwars')
    assert ranking[0] == {'name': 'carol', 'wins': 2}
    assert [r['name'] for r in ranking[1:]] == ['bob', 'alice']


def test_top_is_capped(flask_app):
    store = LeaderboardStore(size=3)
    for i in range(5):
        store.award_win(f'player{i}', 'memory')
    assert len(store.top()) == 3
    assert len(store.top(5)) == 5


def test_stats_for_unknown_player(flask_app):
    assert LeaderboardStore().stats('nobody') is None
