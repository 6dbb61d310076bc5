import os

class Config:
    # Base directory
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    DB_PATH = os.environ.get("DB_PATH") or os.path.join(BASE_DIR, "sudoku.db")

    # PostgreSQL is used instead of SQLite when DATABASE_URL is set
    DATABASE_URL = os.environ.get("DATABASE_URL", "")
    DB_SSLMODE = os.environ.get("DB_SSLMODE", "require")

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-please")
    SESSION_COOKIE_NAME = "aether_sudoku_session"

    # Game rules
    DEFAULT_DIFFICULTY = os.environ.get("DEFAULT_DIFFICULTY", "EASY")
    MAX_MISTAKES = int(os.environ.get("MAX_MISTAKES", "3"))
    HINTS_PER_GAME = int(os.environ.get("HINTS_PER_GAME", "3"))

    # Leaderboard
    LEADERBOARD_LIMIT = int(os.environ.get("LEADERBOARD_LIMIT", "25"))
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "32"))

    # Logging
    LOG_FILE = os.environ.get("LOG_FILE", "app.log")
    LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", "10000"))
    LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", "3"))

    # Branding
    BRAND = os.environ.get("BRAND", "Aether RPG • Sudoku Protocol")
