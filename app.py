from flask import Flask, request, session, jsonify, send_file, g
import os, io, logging, secrets
from logging.handlers import RotatingFileHandler
from dotenv import load_dotenv

# Load environment variables before the config class reads them
load_dotenv()

from config import Config
from database import (get_db, init_db, insert_result, personal_best, leaderboard, player_rank,
                      save_game_state, load_game_state, delete_game_state, mark_recorded)
from puzzles import GameSession, GameError, DIFFICULTIES, generate_puzzle_pdf
from puzzles.sudoku import normalize_difficulty

app = Flask(__name__)
app.config.from_object(Config)

# Configure logging
def setup_logging():
    logging.basicConfig(level=logging.INFO)
    handler = RotatingFileHandler(app.config['LOG_FILE'],
                                  maxBytes=app.config['LOG_MAX_BYTES'],
                                  backupCount=app.config['LOG_BACKUP_COUNT'])
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)

def get_db_connection():
    """Database connection shared by everything in the current request"""
    if 'db' not in g:
        try:
            g.db = get_db(app.config['DB_PATH'], app.config['DATABASE_URL'])
        except Exception as e:
            app.logger.error(f"Database connection error: {e}")
            raise
    return g.db

@app.teardown_appcontext
def close_db(e=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()

def load_game():
    """Restore the game whose id is in the Flask session, or None"""
    game_id = session.get('game_id')
    if not game_id:
        return None

    cur = get_db_connection().cursor()
    data = load_game_state(cur, game_id)
    cur.close()
    if data is None:
        session.pop('game_id', None)
        return None

    try:
        return GameSession.from_dict(data)
    except (GameError, KeyError, ValueError, TypeError) as e:
        app.logger.warning(f"Discarding unreadable game {game_id}: {e}")
        session.pop('game_id', None)
        return None

def save_game(game):
    """Store the game server-side; the cookie only carries its id"""
    conn = get_db_connection()
    cur = conn.cursor()
    save_game_state(cur, session['game_id'], game.to_dict())
    conn.commit()
    cur.close()

def require_game():
    game = load_game()
    if game is None:
        raise GameError('No active puzzle')
    return game

def read_int(data, key, required=True):
    """Read an integer field from a JSON body; floats, strings and booleans are refused"""
    value = data.get(key)
    if value is None and not required:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f'{key} must be an integer')
    return value

def read_move():
    """Read row, col and digit from a JSON body"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError('JSON object body required')
    return read_int(data, 'row'), read_int(data, 'col'), read_int(data, 'digit', required=False)

def sanitize_name(name):
    """Trim a player name and strip markup characters."""
    if not isinstance(name, str):
        return ''
    name = name.strip().replace('<', '').replace('>', '')
    return name[:app.config['MAX_NAME_LENGTH']]

@app.errorhandler(GameError)
def game_error(error):
    return jsonify({'error': str(error)}), 400

@app.errorhandler(ValueError)
def bad_request(error):
    return jsonify({'error': str(error)}), 400

@app.route('/')
def index():
    return jsonify({'name': app.config['BRAND'], 'difficulties': DIFFICULTIES})

@app.route('/api/new_puzzle')
def api_new_puzzle():
    diff = normalize_difficulty(request.args.get('difficulty', app.config['DEFAULT_DIFFICULTY']))
    try:
        game = GameSession(diff, app.config['MAX_MISTAKES'], app.config['HINTS_PER_GAME'])
        game.new_game()

        # Drop the previous unrecorded game of this browser
        previous = session.get('game_id')
        if previous:
            cur = get_db_connection().cursor()
            delete_game_state(cur, previous)
            cur.close()

        session['game_id'] = secrets.token_hex(16)
        save_game(game)

        app.logger.info(f"New puzzle generated with difficulty {diff}")
        return jsonify(game.public_state())

    except Exception as e:
        app.logger.error(f"New puzzle error: {e}")
        return jsonify({'error': 'Failed to generate puzzle'}), 500

@app.route('/api/state')
def api_state():
    game = require_game()
    return jsonify(game.public_state())

@app.route('/api/move', methods=['POST'])
def api_move():
    game = require_game()
    row, col, digit = read_move()

    result = game.apply_move(row, col, digit)
    save_game(game)

    if result['outcome'] == 'rejected':
        app.logger.info(f"Incorrect number at ({row},{col}); mistakes: {game.mistakes}")
    result.update(game.public_state())
    return jsonify(result)

@app.route('/api/validate', methods=['POST'])
def api_validate():
    game = require_game()
    row, col, digit = read_move()
    return jsonify({'row': row, 'col': col, 'digit': digit, 'valid': game.validate(row, col, digit)})

@app.route('/api/note', methods=['POST'])
def api_note():
    game = require_game()
    row, col, digit = read_move()

    notes = game.toggle_note(row, col, digit)
    save_game(game)
    return jsonify({'row': row, 'col': col, 'notes': notes})

@app.route('/api/hint', methods=['POST'])
def api_hint():
    game = require_game()

    r, c, val = game.hint()
    save_game(game)

    app.logger.info(f"Hint used. Hints left: {game.hints_left}")
    return jsonify({'r': r, 'c': c, 'val': val, 'hints_left': game.hints_left,
                    'complete': game.is_complete})

@app.route('/api/record_result', methods=['POST'])
def record_result():
    game = require_game()
    if not game.is_complete:
        return jsonify({'error': 'Puzzle not completed'}), 400

    name = sanitize_name((request.get_json(silent=True) or {}).get('name'))
    if not name:
        return jsonify({'error': 'name is required'}), 400

    game_id = session['game_id']
    seconds = game.elapsed_seconds()
    conn = get_db_connection()
    try:
        cur = conn.cursor()

        # Recorded flag lives server-side so a replayed cookie cannot record twice
        if not mark_recorded(cur, game_id):
            conn.rollback()
            return jsonify({'error': 'Result already recorded'}), 409

        insert_result(cur, name, game.difficulty, seconds, game.mistakes,
                      game.hints_per_game - game.hints_left, game_id)
        conn.commit()

        best = personal_best(cur, name, game.difficulty)
        rank = player_rank(cur, name, game.difficulty)
        cur.close()

        app.logger.info(f"Result recorded for {name}: {seconds}s, best: {best}s, rank: {rank}")
        return jsonify({'status': 'ok', 'seconds': seconds, 'best_time': best, 'rank': rank,
                        'personal_best': seconds == best})

    except Exception as e:
        app.logger.error(f"Record result error: {e}")
        conn.rollback()
        return jsonify({'error': 'Failed to record result'}), 500

@app.route('/api/leaderboard')
def api_leaderboard():
    diff = normalize_difficulty(request.args.get('difficulty', app.config['DEFAULT_DIFFICULTY']))
    try:
        cur = get_db_connection().cursor()
        rows = leaderboard(cur, diff, app.config['LEADERBOARD_LIMIT'])
        cur.close()
        return jsonify({'difficulty': diff, 'rows': rows})

    except Exception as e:
        app.logger.error(f"Leaderboard error: {e}")
        return jsonify({'error': 'Failed to load leaderboard'}), 500

@app.route('/api/puzzle.pdf')
def download_puzzle():
    game = require_game()
    try:
        buf = io.BytesIO()
        generate_puzzle_pdf(game.board, game.difficulty, buf)
        buf.seek(0)

        return send_file(buf, as_attachment=True,
                         download_name=f'sudoku_{game.difficulty.lower()}.pdf',
                         mimetype='application/pdf')

    except Exception as e:
        app.logger.error(f"Puzzle PDF error: {e}")
        return jsonify({'error': 'Failed to generate download'}), 500

@app.errorhandler(404)
def not_found(error):
    app.logger.warning(f"404 error: {error}")
    return jsonify({'error': 'Not found'}), 404

@app.errorhandler(500)
def internal_error(error):
    app.logger.error(f"500 error: {error}")
    return jsonify({'error': 'Internal server error'}), 500

if __name__ == '__main__':
    setup_logging()
    app.logger.info("Starting Aether Sudoku service...")
    try:
        init_db(app.config['DB_PATH'], app.config['DATABASE_URL'])
        app.logger.info("Database initialized successfully")
    except Exception as e:
        app.logger.error(f"Database initialization failed: {e}")

    app.run(debug=os.environ.get('DEBUG') == '1', host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
