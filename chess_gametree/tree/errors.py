"""
Error kinds and result values for tree operations.

Editing functions never raise for expected failures. They return a
MutationResult carrying the (unchanged) input tree and a TreeError, and the
caller decides whether to surface it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from chess_gametree.tree.model import GameTree


class TreeError(Enum):
    """Why an edit was rejected."""

    INVALID_MOVE = "invalid_move"
    NODE_NOT_FOUND = "node_not_found"
    VARIATION_NOT_FOUND = "variation_not_found"
    ROOT_VARIATION = "root_variation"  # no branch node exists before the first ply
    INVALID_ANNOTATION = "invalid_annotation"
    AMBIGUOUS_VARIATION_SHAPE = "ambiguous_variation_shape"


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of an editing operation.

    Attributes:
        tree: New tree on success, the input tree on failure
        error: None on success
        detail: Human readable explanation of the failure
    """

    tree: GameTree
    error: Optional[TreeError] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


class TreeParseError(ValueError):
    """Raised when plain data cannot be turned into a GameTree.

    ``kind`` is set when the failure maps onto a TreeError (an unknown node id,
    a legacy variation shape); it is None for plain malformed input.
    """

    def __init__(self, message: str, kind: Optional[TreeError] = None):
        self.kind = kind
        super().__init__(message)
