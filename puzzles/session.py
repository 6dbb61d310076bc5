# puzzles/session.py
import random
import time
import logging

from .sudoku import GameError, Sudoku, normalize_difficulty, validate_board

logger = logging.getLogger(__name__)

GENERATING = 'generating'
IN_PROGRESS = 'in_progress'
COMPLETE = 'complete'

PLACED = 'placed'
CLEARED = 'cleared'
REJECTED = 'rejected'
IGNORED = 'ignored'


def check_cell(row, col):
    if not (0 <= row <= 8 and 0 <= col <= 8):
        raise ValueError(f"Cell ({row}, {col}) is outside the board")


def check_digit(digit, allow_empty=True):
    if digit is None and allow_empty:
        return
    low = 0 if allow_empty else 1
    if not isinstance(digit, int) or isinstance(digit, bool) or not low <= digit <= 9:
        raise ValueError(f"Invalid digit: {digit!r}")


class GameSession:
    """
    The move flow around one Sudoku engine: mistakes, notes, hints and
    the generating -> in_progress -> complete state machine.
    """

    def __init__(self, difficulty='EASY', max_mistakes=3, hints=3):
        self.difficulty = normalize_difficulty(difficulty)
        self.max_mistakes = max_mistakes
        self.hints_per_game = hints
        self.engine = Sudoku()
        self.board = []
        self.state = None
        self.mistakes = 0
        self.hints_left = hints
        self.started_at = None
        self.finished_at = None

    def new_game(self, difficulty=None):
        """Generate a fresh puzzle, replacing any previous one."""
        if difficulty is not None:
            self.difficulty = normalize_difficulty(difficulty)

        self.state = GENERATING
        self.board = self.engine.generate(self.difficulty)
        self.state = IN_PROGRESS

        self.mistakes = 0
        self.hints_left = self.hints_per_game
        self.started_at = time.time()
        self.finished_at = None
        return self.board

    def _require_game(self):
        if self.state is None or not self.board:
            raise GameError('No active puzzle')

    def _finish_if_won(self):
        if self.engine.check_win(self.board):
            self.state = COMPLETE
            self.finished_at = time.time()
            logger.info(f"{self.difficulty} puzzle completed in {self.elapsed_seconds()}s")
        return self.state == COMPLETE

    def apply_move(self, row, col, digit):
        """
        Apply a player's digit at (row, col). 0 or None clears the cell.
        A digit that differs from the solution is rejected and counted as a
        mistake; the board is left untouched.
        """
        self._require_game()
        check_cell(row, col)
        check_digit(digit)

        cell = self.board[row][col]
        if cell['is_initial'] or self.state == COMPLETE:
            return {'outcome': IGNORED, 'legal': False, 'complete': self.state == COMPLETE}

        if not digit:
            cell['value'] = None
            return {'outcome': CLEARED, 'legal': True, 'complete': False}

        legal = self.engine.validate_move(self.board, row, col, digit)

        if digit != self.engine.get_solution_at(row, col):
            self.mistakes += 1
            return {'outcome': REJECTED, 'legal': legal, 'complete': False}

        cell['value'] = digit
        cell['notes'] = []
        return {'outcome': PLACED, 'legal': legal, 'complete': self._finish_if_won()}

    def validate(self, row, col, digit):
        """Structural check of a digit against the current board."""
        self._require_game()
        check_cell(row, col)
        check_digit(digit, allow_empty=False)
        return self.engine.validate_move(self.board, row, col, digit)

    def toggle_note(self, row, col, digit):
        """Add or remove a pencil mark on an empty, non-initial cell."""
        self._require_game()
        check_cell(row, col)
        check_digit(digit, allow_empty=False)

        cell = self.board[row][col]
        if cell['is_initial'] or cell['value'] is not None:
            return cell['notes']

        if digit in cell['notes']:
            cell['notes'].remove(digit)
        else:
            cell['notes'] = sorted(cell['notes'] + [digit])
        return cell['notes']

    def hint(self):
        """Reveal a random empty cell. Returns (row, col, value)."""
        self._require_game()
        if self.state == COMPLETE:
            raise GameError('Puzzle already completed')
        if self.hints_left <= 0:
            raise GameError('No hints left')

        empties = [(r, c) for r in range(9) for c in range(9)
                   if self.board[r][c]['value'] is None]
        if not empties:
            raise GameError('No empty cells')

        r, c = random.choice(empties)
        val = self.engine.get_solution_at(r, c)
        self.board[r][c]['value'] = val
        self.board[r][c]['notes'] = []
        self.hints_left -= 1

        self._finish_if_won()
        return r, c, val

    def elapsed_seconds(self):
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else time.time()
        return round(end - self.started_at, 1)

    @property
    def is_complete(self):
        return self.state == COMPLETE

    def public_state(self):
        """Everything a client may see. The solution is never included."""
        return {
            'board': self.board,
            'difficulty': self.difficulty,
            'state': self.state,
            'mistakes': self.mistakes,
            'max_mistakes': self.max_mistakes,
            'hints_left': self.hints_left,
            'elapsed': self.elapsed_seconds(),
        }

    def to_dict(self):
        """Compact JSON-safe form, stored server-side by the web layer."""
        solution = self.engine.solution
        notes = {}
        for r in range(9):
            for c in range(9):
                if self.board[r][c]['notes']:
                    notes[str(r * 9 + c)] = self.board[r][c]['notes']
        return {
            'difficulty': self.difficulty,
            'state': self.state,
            'solution': ''.join(str(v) for row in solution for v in row),
            'values': ''.join(str(cell['value'] or 0) for row in self.board for cell in row),
            'given': ''.join('1' if cell['is_initial'] else '0' for row in self.board for cell in row),
            'notes': notes,
            'mistakes': self.mistakes,
            'max_mistakes': self.max_mistakes,
            'hints_per_game': self.hints_per_game,
            'hints_left': self.hints_left,
            'started_at': self.started_at,
            'finished_at': self.finished_at,
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild a session saved with to_dict()."""
        game = cls(data['difficulty'], data['max_mistakes'], data['hints_per_game'])

        digits = [int(ch) for ch in data['solution']]
        if len(digits) != 81 or 0 in digits:
            raise GameError('Stored puzzle is corrupt')
        solution = [digits[r * 9:(r + 1) * 9] for r in range(9)]
        if not validate_board(solution):
            raise GameError('Stored puzzle is corrupt')
        game.engine = Sudoku(solution)

        values = data['values']
        given = data['given']
        notes = data.get('notes', {})
        game.board = [
            [
                {
                    'value': int(values[r * 9 + c]) or None,
                    'is_initial': given[r * 9 + c] == '1',
                    'notes': list(notes.get(str(r * 9 + c), [])),
                }
                for c in range(9)
            ]
            for r in range(9)
        ]

        game.state = data['state']
        game.mistakes = data['mistakes']
        game.hints_left = data['hints_left']
        game.started_at = data['started_at']
        game.finished_at = data['finished_at']
        return game
