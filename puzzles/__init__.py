# puzzles/__init__.py
from .sudoku import Sudoku, GameError, DIFFICULTIES, is_valid_placement
from .session import GameSession
from .pdf_utils import generate_puzzle_pdf

__all__ = ['Sudoku', 'DIFFICULTIES', 'is_valid_placement', 'GameSession', 'GameError', 'generate_puzzle_pdf']
