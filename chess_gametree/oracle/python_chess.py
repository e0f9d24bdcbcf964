"""
python-chess backed Position Oracle.

Positions are FEN strings. Moves are parsed as SAN and, when enabled, as UCI
coordinates (``e2e4``); the notation handed back is always SAN.
"""

import logging

import chess

from chess_gametree.oracle.base import AppliedMove, InvalidMoveError, PositionOracle, Side

logger = logging.getLogger(__name__)


def _is_uci(text: str) -> bool:
    try:
        chess.Move.from_uci(text)
    except ValueError:
        return False
    return True


class ChessOracle(PositionOracle):
    """Position oracle over ``chess.Board``."""

    def __init__(self, accept_uci: bool = True, chess960: bool = False):
        """
        Initialize the oracle.

        Args:
            accept_uci: Also accept UCI coordinate moves such as "e2e4"
            chess960: Interpret positions and castling as Chess960
        """
        self.accept_uci = accept_uci
        self.chess960 = chess960

    def new_game(self) -> str:
        return chess.Board(chess960=self.chess960).fen()

    def apply_move(self, position: str, move_text: str) -> AppliedMove:
        board = self._board(position)
        text = (move_text or "").strip()
        if not text:
            raise InvalidMoveError(move_text, position, "empty move")

        move = self._parse(board, text, position)
        if not move:
            raise InvalidMoveError(move_text, position, "null move")
        notation = board.san(move)
        board.push(move)
        return AppliedMove(notation=notation, position=board.fen())

    def turn(self, position: str) -> Side:
        board = self._board(position)
        return Side.WHITE if board.turn == chess.WHITE else Side.BLACK

    def fullmove_number(self, position: str) -> int:
        return self._board(position).fullmove_number

    def _board(self, position: str) -> chess.Board:
        try:
            return chess.Board(position, chess960=self.chess960)
        except ValueError as e:
            raise InvalidMoveError("", position, f"bad position: {e}") from e

    def _parse(self, board: chess.Board, text: str, position: str) -> chess.Move:
        """
        Parse move text against a board.

        python-chess signals every parse failure (illegal, ambiguous or
        malformed) with a ValueError subclass. Its SAN parser also takes
        coordinate moves, so SAN-only oracles screen those out first.
        """
        if not self.accept_uci and _is_uci(text):
            raise InvalidMoveError(text, position, "coordinate notation not accepted")
        try:
            return board.parse_san(text)
        except ValueError as san_error:
            if not self.accept_uci:
                raise InvalidMoveError(text, position, str(san_error)) from san_error
            try:
                move = board.parse_uci(text)
            except ValueError:
                logger.debug(f"Rejected move {text!r}: {san_error}")
                raise InvalidMoveError(text, position, str(san_error)) from san_error
            return move

    def __repr__(self) -> str:
        return f"ChessOracle(accept_uci={self.accept_uci}, chess960={self.chess960})"
