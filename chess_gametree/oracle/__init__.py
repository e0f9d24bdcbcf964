"""
Position Oracle Module

The tree is rules-agnostic: legality, normalization and resulting positions
all come from a swappable PositionOracle.

Key Components:
    - PositionOracle (ABC): the narrow interface consumed by the tree
    - ChessOracle: python-chess implementation (FEN positions, SAN notation)
    - Side: colour enum shared with the data model

Data Flow:
    (position, move text) → oracle.apply_move() → AppliedMove(notation, position)
                                                 or InvalidMoveError
"""

from chess_gametree.oracle.base import AppliedMove, InvalidMoveError, PositionOracle, Side
from chess_gametree.oracle.python_chess import ChessOracle

__all__ = ['AppliedMove', 'InvalidMoveError', 'PositionOracle', 'Side', 'ChessOracle']
