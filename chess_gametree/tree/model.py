"""
Move Tree Data Model

A game is a main line of plies plus arbitrarily nested variations. Nodes live
in a flat id → MoveNode store; lines (the main line and every variation) are
tuples of ids.

Structure:
    GameTree
      ├── main_line: (n1, n2, n3, ...)
      └── nodes: {id: MoveNode}
                   └── variations: ((v1, v2), (w1,), ...)   # alternatives to
                                                            # the node after it

Immutability:
    MoveNode and GameTree are frozen dataclasses. Lines are tuples and the
    node store is exposed through MappingProxyType, so a tree that has been
    handed out can never change underneath its holder. Editing functions build
    new values and share every untouched MoveNode with the previous tree.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from chess_gametree.config import uuid_id
from chess_gametree.oracle import ChessOracle, PositionOracle, Side

# current_node value for "no move played yet"
ROOT = ""

Line = Tuple[str, ...]


@dataclass(frozen=True)
class MoveNode:
    """
    One ply of the game.

    Attributes:
        id: Unique identifier across the whole tree
        notation: Normalized move text (SAN)
        position: Position encoding after this move
        move_number: Full-move number of this ply
        side: Side that made this move
        parent_id: Node this move was played from (None for the first ply)
        is_main_line: True iff the node is on the main line
        variations: Alternatives to the node following this one
        comment: Free text, None when absent
        annotation: Suffix marker such as "!?", None when absent
    """

    id: str
    notation: str
    position: str
    move_number: int
    side: Side
    parent_id: Optional[str] = None
    is_main_line: bool = False
    variations: Tuple[Line, ...] = ()
    comment: Optional[str] = None
    annotation: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "variations", tuple(tuple(line) for line in self.variations))

    @property
    def label(self) -> str:
        """Human readable move label, e.g. "12. Nf3" or "12... Nc6"."""
        dots = "." if self.side is Side.WHITE else "..."
        return f"{self.move_number}{dots} {self.notation}{self.annotation or ''}"

    def with_variations(self, variations: Iterable[Line]) -> "MoveNode":
        return replace(self, variations=tuple(variations))


@dataclass(frozen=True)
class GameTree:
    """
    Immutable game aggregate.

    Attributes:
        id: Tree identifier
        root_position: Position before any move
        current_node: Selected node id, or ROOT
        nodes: Read-only node store (id → MoveNode)
        main_line: Ids of the principal continuation, in order
    """

    id: str
    root_position: str
    current_node: str = ROOT
    nodes: Mapping[str, MoveNode] = field(default_factory=dict)
    main_line: Line = ()

    def __post_init__(self):
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        object.__setattr__(self, "main_line", tuple(self.main_line))

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[MoveNode]:
        return iter(self.nodes.values())

    def get(self, node_id: str) -> Optional[MoveNode]:
        return self.nodes.get(node_id)

    def position_at(self, node_id: str) -> Optional[str]:
        """Position after ``node_id`` (root position for ROOT), None if unknown."""
        if node_id == ROOT:
            return self.root_position
        node = self.nodes.get(node_id)
        return node.position if node is not None else None

    @property
    def current(self) -> Optional[MoveNode]:
        return self.nodes.get(self.current_node)

    @property
    def current_position(self) -> str:
        node = self.current
        return node.position if node is not None else self.root_position

    @property
    def is_empty(self) -> bool:
        return not self.main_line

    def evolve(self, **changes) -> "GameTree":
        """Return a copy with ``changes`` applied (dataclasses.replace)."""
        return replace(self, **changes)


def new_tree(
    root_position: Optional[str] = None,
    oracle: Optional[PositionOracle] = None,
    tree_id: Optional[str] = None,
) -> GameTree:
    """
    Create an empty tree.

    Args:
        root_position: Starting position (default: the oracle's new game)
        oracle: Oracle providing the default starting position
        tree_id: Tree identifier (default: random)

    Returns:
        GameTree with no moves and current_node == ROOT
    """
    if root_position is None:
        root_position = (oracle or ChessOracle()).new_game()
    return GameTree(id=tree_id or uuid_id(), root_position=root_position)
