"""
Abstract Position Oracle Interface

The move tree never decides chess legality on its own. Every move that enters
a tree is first handed to a PositionOracle, which either accepts it (returning
the normalized notation and the resulting position) or rejects it.

Key Principles:
    1. Oracles are stateless: positions go in, positions come out
    2. Positions are opaque strings to the tree (FEN for ChessOracle)
    3. A rejected move raises InvalidMoveError; nothing else is signalled

Convention:
    - Notation returned by apply_move() is the canonical form stored in nodes
    - turn() reports the side to move *in* the given position
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class Side(Enum):
    """Colour of the side that made (or is to make) a move."""

    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class InvalidMoveError(ValueError):
    """Raised by an oracle when a move (or position) is rejected."""

    def __init__(self, move_text: str, position: str, reason: str = ""):
        self.move_text = move_text
        self.position = position
        self.reason = reason
        message = f"Invalid move {move_text!r} in position {position!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclass(frozen=True)
class AppliedMove:
    """
    Outcome of a successfully applied move.

    Attributes:
        notation: Normalized move text (SAN for ChessOracle)
        position: Position encoding after the move
    """

    notation: str
    position: str


class PositionOracle(ABC):
    """
    Abstract base class for the rules authority consumed by the tree.

    Methods:
        new_game(): Starting position encoding
        apply_move(position, move_text): Validate and play one move
        turn(position): Side to move in a position
        fullmove_number(position): Full-move counter of a position
    """

    @abstractmethod
    def new_game(self) -> str:
        """Return the encoding of the standard starting position."""
        pass

    @abstractmethod
    def apply_move(self, position: str, move_text: str) -> AppliedMove:
        """
        Apply a move to a position.

        Args:
            position: Position encoding before the move
            move_text: Move as typed or recognized by the caller

        Returns:
            AppliedMove with the normalized notation and resulting position

        Raises:
            InvalidMoveError: If the move (or the position) is not acceptable
        """
        pass

    @abstractmethod
    def turn(self, position: str) -> Side:
        """Return the side to move in ``position``."""
        pass

    @abstractmethod
    def fullmove_number(self, position: str) -> int:
        """Return the full-move counter of ``position``."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
