"""
Linear/Tree Conversion Module

Key Components:
    - MovePair: one numbered scoresheet row (interchange format)
    - convert_moves / to_tree: move pairs → main-line GameTree
    - to_linear: GameTree main line → move pairs

Data Flow:
    OCR / import → [MovePair] → to_tree() → GameTree → to_linear() → export
"""

from chess_gametree.convert.linear import (
    ConversionFailure,
    ConversionResult,
    MovePair,
    convert_moves,
    to_linear,
    to_tree,
)

__all__ = [
    'ConversionFailure',
    'ConversionResult',
    'MovePair',
    'convert_moves',
    'to_linear',
    'to_tree',
]
