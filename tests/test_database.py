# tests/test_database.py
from database import (delete_game_state, execute_query, insert_result, is_postgres, leaderboard,
                      load_game_state, mark_recorded, personal_best, player_rank, save_game_state)


def seed(conn):
    cur = conn.cursor()
    insert_result(cur, 'NeonRunner', 'EASY', 120.5, mistakes=1)
    insert_result(cur, 'NeonRunner', 'EASY', 98.0)
    insert_result(cur, 'VoidWalker', 'EASY', 110.0, hints_used=2)
    insert_result(cur, 'ByteSmasher', 'EASY', 140.0)
    insert_result(cur, 'ByteSmasher', 'HARD', 300.0)
    conn.commit()
    return cur


def test_tables_created(conn):
    assert not is_postgres(conn)
    cur = conn.cursor()
    execute_query(cur, "SELECT name FROM sqlite_master WHERE type='table'")
    tables = [row[0] for row in cur.fetchall()]
    assert 'results' in tables
    assert 'games' in tables


def test_personal_best(conn):
    cur = seed(conn)
    assert personal_best(cur, 'NeonRunner', 'EASY') == 98.0
    assert personal_best(cur, 'NeonRunner', 'HARD') is None


def test_leaderboard_orders_best_times(conn):
    cur = seed(conn)
    rows = leaderboard(cur, 'EASY')
    assert [row['name'] for row in rows] == ['NeonRunner', 'VoidWalker', 'ByteSmasher']
    assert rows[0] == {'rank': 1, 'name': 'NeonRunner', 'best_time': 98.0, 'games': 2}


def test_leaderboard_limit_and_difficulty(conn):
    cur = seed(conn)
    assert len(leaderboard(cur, 'EASY', limit=2)) == 2
    assert [row['name'] for row in leaderboard(cur, 'HARD')] == ['ByteSmasher']
    assert leaderboard(cur, 'EXPERT') == []


def test_player_rank(conn):
    cur = seed(conn)
    assert player_rank(cur, 'NeonRunner', 'EASY') == 1
    assert player_rank(cur, 'ByteSmasher', 'EASY') == 3
    assert player_rank(cur, 'ByteSmasher', 'HARD') == 1
    assert player_rank(cur, 'Nobody', 'EASY') == 0


def test_game_state_round_trip(conn):
    cur = conn.cursor()
    assert load_game_state(cur, 'abc') is None

    save_game_state(cur, 'abc', {'values': '0' * 81, 'mistakes': 0})
    save_game_state(cur, 'abc', {'values': '0' * 81, 'mistakes': 2})
    conn.commit()

    assert load_game_state(cur, 'abc') == {'values': '0' * 81, 'mistakes': 2}


def test_mark_recorded_only_once(conn):
    cur = conn.cursor()
    save_game_state(cur, 'abc', {})
    conn.commit()

    assert mark_recorded(cur, 'abc')
    assert not mark_recorded(cur, 'abc')
    assert not mark_recorded(cur, 'missing')


def test_delete_keeps_recorded_games(conn):
    cur = conn.cursor()
    save_game_state(cur, 'open', {})
    save_game_state(cur, 'done', {})
    mark_recorded(cur, 'done')

    delete_game_state(cur, 'open')
    delete_game_state(cur, 'done')
    conn.commit()

    assert load_game_state(cur, 'open') is None
    assert load_game_state(cur, 'done') == {}
