"""
Sample Games and Test Helpers

Small, known-legal games and helpers for building trees in tests and demos.

Sample Games:
    1. Ruy Lopez: 12 full moves of the Closed Spanish main line
    2. Scholar's Mate: 4 plies ending in mate, odd length (dangling white)
    3. Italian: short line used as a variation source

Helpers:
    - counter_ids: deterministic id factory ("n1", "n2", ...)
    - play_line: play a sequence of moves from a node through play_move
"""

import itertools
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from chess_gametree.convert.linear import MovePair
from chess_gametree.oracle import PositionOracle
from chess_gametree.tree.errors import MutationResult
from chess_gametree.tree.model import GameTree
from chess_gametree.tree.mutations import play_move


@dataclass
class SampleGame:
    """
    A sample game as move pairs.

    Attributes:
        name: Short identifier
        pairs: Moves in interchange format
        description: Human-readable description
    """
    name: str
    pairs: List[MovePair]
    description: str = ""

    @property
    def plies(self) -> int:
        return sum(1 for pair in self.pairs for text in (pair.white, pair.black) if text)


def _pairs(*rows) -> List[MovePair]:
    return [MovePair(i, white, black) for i, (white, black) in enumerate(rows, start=1)]


RUY_LOPEZ = SampleGame(
    name="ruy_lopez",
    pairs=_pairs(
        ("e4", "e5"), ("Nf3", "Nc6"), ("Bb5", "a6"), ("Ba4", "Nf6"),
        ("O-O", "Be7"), ("Re1", "b5"), ("Bb3", "d6"), ("c3", "O-O"),
        ("h3", "Na5"), ("Bc2", "c5"), ("d4", "Qc7"), ("Nbd2", "Bd7"),
    ),
    description="Closed Spanish, Chigorin",
)

SCHOLARS_MATE = SampleGame(
    name="scholars_mate",
    pairs=_pairs(("e4", "e5"), ("Bc4", "Nc6"), ("Qh5", "Nf6"), ("Qxf7#", "")),
    description="Mate on f7 in four; ends on a white move",
)

ITALIAN = SampleGame(
    name="italian",
    pairs=_pairs(("e4", "e5"), ("Nf3", "Nc6"), ("Bc4", "Bc5")),
    description="Giuoco Piano",
)

SAMPLE_GAMES = [RUY_LOPEZ, SCHOLARS_MATE, ITALIAN]


def counter_ids(prefix: str = "n") -> Callable[[], str]:
    """Id factory yielding prefix1, prefix2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def play_line(
    tree: GameTree,
    moves: Iterable[str],
    from_node_id: Optional[str] = None,
    oracle: Optional[PositionOracle] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> GameTree:
    """
    Play ``moves`` one after another, starting at ``from_node_id``.

    Args:
        tree: Starting tree
        moves: Move texts in order
        from_node_id: First move is played from here (default: current node)
        oracle: Rules authority
        id_factory: Node id factory

    Returns:
        Tree after the last move, with it selected

    Raises:
        ValueError: If any move is rejected
    """
    node_id = tree.current_node if from_node_id is None else from_node_id
    for move_text in moves:
        result: MutationResult = play_move(tree, node_id, move_text, oracle=oracle, id_factory=id_factory)
        if not result.ok:
            raise ValueError(f"Cannot play {move_text!r}: {result.detail}")
        tree = result.tree
        node_id = tree.current_node
    return tree
