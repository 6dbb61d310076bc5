# database.py
import sqlite3
import json
import logging

import psycopg2

from config import Config

logger = logging.getLogger(__name__)

def get_db(db_path=None, database_url=None):
    """Get database connection: PostgreSQL when a URL is configured, SQLite otherwise"""
    database_url = database_url if database_url is not None else Config.DATABASE_URL
    if database_url:
        try:
            return psycopg2.connect(database_url, sslmode=Config.DB_SSLMODE)
        except psycopg2.Error as e:
            logger.error(f"PostgreSQL connection failed: {e}")
            raise
    # Use SQLite for development
    return get_sqlite_db(db_path or Config.DB_PATH)

def get_sqlite_db(db_path):
    """Get SQLite database connection"""
    try:
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        return conn
    except sqlite3.Error as e:
        logger.error(f"SQLite connection failed: {e}")
        raise

def is_postgres(conn):
    """Check if connection is PostgreSQL"""
    return isinstance(conn, psycopg2.extensions.connection)

def execute_query(cur, query, params=None):
    """Execute query with proper parameter formatting for database type"""
    if params is None:
        params = ()

    # Convert SQLite ? placeholders to %s for PostgreSQL
    if isinstance(cur, psycopg2.extensions.cursor) and '?' in query:
        query = query.replace('?', '%s')
    cur.execute(query, params)

    return cur

def init_db(db_path=None, database_url=None):
    conn = None
    try:
        conn = get_db(db_path, database_url)
        cur = conn.cursor()

        if is_postgres(conn):
            cur.execute("""
                CREATE TABLE IF NOT EXISTS results(
                    id SERIAL PRIMARY KEY,
                    name TEXT NOT NULL,
                    difficulty TEXT NOT NULL,
                    seconds DOUBLE PRECISION NOT NULL,
                    mistakes INTEGER NOT NULL DEFAULT 0,
                    hints_used INTEGER NOT NULL DEFAULT 0,
                    game_id TEXT UNIQUE,
                    played_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        else:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS results(
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    difficulty TEXT NOT NULL,
                    seconds REAL NOT NULL,
                    mistakes INTEGER NOT NULL DEFAULT 0,
                    hints_used INTEGER NOT NULL DEFAULT 0,
                    game_id TEXT UNIQUE,
                    played_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

        # Live games; the solution never leaves the server
        cur.execute("""
            CREATE TABLE IF NOT EXISTS games(
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                recorded INTEGER NOT NULL DEFAULT 0,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_results_difficulty ON results(difficulty, seconds)")

        conn.commit()
        cur.close()
        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Database initialization error: {e}")
        if conn:
            conn.rollback()
        raise
    finally:
        if conn:
            conn.close()

def save_game_state(cur, game_id, data):
    """Insert or replace the serialized state of a game"""
    execute_query(cur, '''
        INSERT INTO games(id, data) VALUES(?,?)
        ON CONFLICT(id) DO UPDATE SET data=excluded.data, updated_at=CURRENT_TIMESTAMP
    ''', (game_id, json.dumps(data)))

def load_game_state(cur, game_id):
    """Serialized state of a game, or None if the id is unknown"""
    execute_query(cur, 'SELECT data FROM games WHERE id=?', (game_id,))
    row = cur.fetchone()
    return json.loads(row[0]) if row else None

def delete_game_state(cur, game_id):
    execute_query(cur, 'DELETE FROM games WHERE id=? AND recorded=0', (game_id,))

def mark_recorded(cur, game_id):
    """Flag a game as recorded. False if it was already recorded or does not exist"""
    execute_query(cur, 'UPDATE games SET recorded=1 WHERE id=? AND recorded=0', (game_id,))
    return cur.rowcount == 1

def insert_result(cur, name, difficulty, seconds, mistakes=0, hints_used=0, game_id=None):
    execute_query(cur, 'INSERT INTO results(name,difficulty,seconds,mistakes,hints_used,game_id) VALUES(?,?,?,?,?,?)',
                  (name, difficulty, seconds, mistakes, hints_used, game_id))

def personal_best(cur, name, difficulty):
    """Best time of a player on a difficulty, or None"""
    execute_query(cur, 'SELECT MIN(seconds) FROM results WHERE name=? AND difficulty=?', (name, difficulty))
    row = cur.fetchone()
    return row[0] if row and row[0] is not None else None

def leaderboard(cur, difficulty, limit=25):
    """Best time per player for a difficulty, fastest first"""
    execute_query(cur, '''
        SELECT name, MIN(seconds) as best_time, COUNT(id) as games
        FROM results WHERE difficulty=?
        GROUP BY name ORDER BY best_time ASC, name ASC LIMIT ?
    ''', (difficulty, limit))
    return [
        {'rank': i, 'name': row[0], 'best_time': row[1], 'games': row[2]}
        for i, row in enumerate(cur.fetchall(), start=1)
    ]

def player_rank(cur, name, difficulty):
    """1-based position of a player's best time, 0 if the player has no result"""
    best = personal_best(cur, name, difficulty)
    if best is None:
        return 0
    execute_query(cur, '''
        SELECT COUNT(*) FROM (
            SELECT name, MIN(seconds) as best FROM results
            WHERE difficulty=? GROUP BY name
        ) AS bests WHERE best < ?
    ''', (difficulty, best))
    return cur.fetchone()[0] + 1
