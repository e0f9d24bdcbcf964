"""
Conversion between flat move-pair lists and game trees.

The move-pair list is the interchange format shared with scoresheet OCR and
file export:

    [MovePair(1, "e4", "e5"), MovePair(2, "Nf3", "Nc6"), MovePair(3, "Bb5", "")]

It only carries the main line, so variations are dropped by to_linear() and
never produced by to_tree().
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from chess_gametree.config import TreeConfig
from chess_gametree.oracle import ChessOracle, PositionOracle, Side
from chess_gametree.tree.errors import TreeError
from chess_gametree.tree.model import GameTree, new_tree
from chess_gametree.tree.mutations import play_move

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovePair:
    """One numbered row of a scoresheet; an empty string means "no move"."""

    move_number: int
    white: str = ""
    black: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"moveNumber": self.move_number, "white": self.white, "black": self.black}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MovePair":
        return cls(
            move_number=int(data.get("moveNumber", 0)),
            white=data.get("white") or "",
            black=data.get("black") or "",
        )


@dataclass(frozen=True)
class ConversionFailure:
    """A move that was skipped while building a tree."""

    move_number: int
    side: Side
    text: str
    reason: str


@dataclass
class ConversionResult:
    """Tree built from a move list plus every move that had to be skipped."""

    tree: GameTree
    failures: List[ConversionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def convert_moves(
    pairs: Iterable[MovePair],
    oracle: Optional[PositionOracle] = None,
    config: Optional[TreeConfig] = None,
) -> ConversionResult:
    """
    Build a main-line tree from move pairs.

    Moves are applied white then black, pair by pair. A rejected move is
    recorded and skipped so a partially recognized game still produces a
    usable tree.

    Args:
        pairs: Move pairs in game order
        oracle: Rules authority (default: ChessOracle configured from ``config``)
        config: Start position and id factory (default: TreeConfig())

    Returns:
        ConversionResult whose tree has the last main-line move selected
    """
    config = config or TreeConfig()
    if oracle is None:
        oracle = ChessOracle(accept_uci=config.accept_uci, chess960=config.chess960)

    tree = new_tree(config.start_position, oracle=oracle, tree_id=config.id_factory())
    failures: List[ConversionFailure] = []

    for pair in pairs:
        for side, text in ((Side.WHITE, pair.white), (Side.BLACK, pair.black)):
            if not text or not text.strip():
                continue
            result = play_move(tree, tree.current_node, text, oracle=oracle, id_factory=config.id_factory)
            if result.error is TreeError.INVALID_MOVE:
                failures.append(ConversionFailure(pair.move_number, side, text, result.detail))
                logger.warning(f"Skipping invalid {side.name.lower()} move {pair.move_number}: {text}")
                continue
            tree = result.tree

    if failures:
        logger.info(f"Built tree with {len(tree.main_line)} plies, skipped {len(failures)} moves")
    return ConversionResult(tree=tree, failures=failures)


def to_tree(
    pairs: Iterable[MovePair],
    oracle: Optional[PositionOracle] = None,
    config: Optional[TreeConfig] = None,
) -> GameTree:
    """Build a main-line tree from move pairs (see convert_moves)."""
    return convert_moves(pairs, oracle=oracle, config=config).tree


def to_linear(tree: GameTree) -> List[MovePair]:
    """
    Flatten the main line into move pairs.

    A pair is closed by a black move or by the end of the line; a line that
    starts with a black move yields a first pair with an empty white.
    """
    pairs: List[MovePair] = []
    pending: Optional[MovePair] = None

    for node_id in tree.main_line:
        node = tree.nodes.get(node_id)
        if node is None:
            continue

        if node.side is Side.WHITE:
            if pending is not None:
                pairs.append(pending)
            pending = MovePair(node.move_number, node.notation, "")
        else:
            if pending is None:
                pairs.append(MovePair(node.move_number, "", node.notation))
            else:
                pairs.append(MovePair(pending.move_number, pending.white, node.notation))
            pending = None

    if pending is not None:
        pairs.append(pending)
    return pairs
