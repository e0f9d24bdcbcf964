"""
Utilities Module

Sample games and helpers for tests, demos and the command-line tools.

Key Components:
    - SAMPLE_GAMES: known-legal games in move-pair form
    - counter_ids: deterministic node ids
    - play_line: play a sequence of moves through the mutation engine
"""

from chess_gametree.utils.testing import (
    ITALIAN,
    RUY_LOPEZ,
    SAMPLE_GAMES,
    SCHOLARS_MATE,
    SampleGame,
    counter_ids,
    play_line,
)

__all__ = [
    'ITALIAN',
    'RUY_LOPEZ',
    'SAMPLE_GAMES',
    'SCHOLARS_MATE',
    'SampleGame',
    'counter_ids',
    'play_line',
]
