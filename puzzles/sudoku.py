# puzzles/sudoku.py
import random
import logging

logger = logging.getLogger(__name__)


class GameError(Exception):
    """A request the rules of the game refuse (no hints left, no game...)."""


# Number of cells cleared from the solved grid for each difficulty
DIFFICULTIES = {
    'EASY': 30,
    'MEDIUM': 40,
    'HARD': 50,
    'EXPERT': 60,
}


def normalize_difficulty(difficulty):
    """
    Canonical upper-case name of a difficulty.
    Raises ValueError for an unknown difficulty name.
    """
    key = str(difficulty).strip().upper()
    if key not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty: {difficulty}")
    return key


def cells_to_remove(difficulty):
    """Look up how many cells a difficulty clears."""
    return DIFFICULTIES[normalize_difficulty(difficulty)]


def solve_sudoku(board):
    """
    Fill the board in place using backtracking.
    Returns True if solved, False otherwise.
    """
    empty = find_empty(board)
    if not empty:
        return True

    row, col = empty

    # Try numbers in random order for more variety
    numbers = list(range(1, 10))
    random.shuffle(numbers)

    for num in numbers:
        if is_valid_placement(board, row, col, num):
            board[row][col] = num

            if solve_sudoku(board):
                return True

            board[row][col] = 0

    return False


def find_empty(board):
    """
    Find an empty cell in the board.
    Returns (row, col) or None if no empty cells.
    """
    for i in range(9):
        for j in range(9):
            if not board[i][j]:
                return i, j
    return None


def is_valid_placement(board, row, col, num):
    """
    Check if placing num at (row, col) is legal with respect to the
    other cells of its row, column and 3x3 box. The target cell itself
    is ignored, so an already placed value does not conflict with itself.
    """
    # Check row
    for i in range(9):
        if i != col and board[row][i] == num:
            return False

    # Check column
    for i in range(9):
        if i != row and board[i][col] == num:
            return False

    # Check 3x3 box
    start_row, start_col = 3 * (row // 3), 3 * (col // 3)
    for i in range(start_row, start_row + 3):
        for j in range(start_col, start_col + 3):
            if (i, j) != (row, col) and board[i][j] == num:
                return False

    return True


def validate_board(board):
    """Check that every filled cell of a value grid is free of conflicts."""
    if not board or len(board) != 9 or any(len(row) != 9 for row in board):
        return False
    for i in range(9):
        for j in range(9):
            num = board[i][j]
            if num and not is_valid_placement(board, i, j, num):
                return False
    return True


def grid_values(board):
    """Project a board of cells onto its displayed values (None = empty)."""
    return [[cell['value'] for cell in row] for row in board]


def create_puzzle(solution, count):
    """
    Clear `count` random cells from a copy of the solution and wrap the
    result into cells. Uniqueness of the resulting puzzle is not checked.
    """
    puzzle = [row[:] for row in solution]

    while count > 0:
        row, col = random.randint(0, 8), random.randint(0, 8)
        if puzzle[row][col] != 0:
            puzzle[row][col] = 0
            count -= 1

    return [
        [
            {'value': val or None, 'is_initial': val != 0, 'notes': []}
            for val in row
        ]
        for row in puzzle
    ]


class Sudoku:
    """
    One puzzle engine per game. Holds the canonical solution of the last
    generated puzzle and grades boards against it.
    """

    def __init__(self, solution=None):
        self._solution = [row[:] for row in solution] if solution else []

    def generate(self, difficulty):
        """Generate a new puzzle board and keep its solution."""
        count = cells_to_remove(difficulty)

        board = [[0] * 9 for _ in range(9)]
        solve_sudoku(board)
        self._solution = board

        logger.debug(f"Generated {difficulty} puzzle, clearing {count} cells")
        return create_puzzle(self._solution, count)

    def _require_solution(self):
        if not self._solution:
            raise GameError('No puzzle generated yet')

    def validate_move(self, board, row, col, value):
        # Basic rules only: no duplicate in row, col or 3x3 box
        return is_valid_placement(grid_values(board), row, col, value)

    def check_win(self, board):
        self._require_solution()
        for r in range(9):
            for c in range(9):
                val = board[r][c]['value']
                if val is None or val != self._solution[r][c]:
                    return False
        return True

    def get_solution_at(self, row, col):
        self._require_solution()
        return self._solution[row][col]

    @property
    def solution(self):
        return [row[:] for row in self._solution]
