"""
Game session: the presentation layer's handle on a move tree.

A GameSession owns the current GameTree, funnels every edit through the pure
mutation functions and tells listeners about each new tree. The engine has no
locking of its own; the session serializes edits so a host that allows
concurrent user actions still applies them one at a time.

Threading:
    - Edits run under a lock (one pending mutation at a time)
    - Listeners are called outside the lock, in commit order: the thread
      already delivering also delivers trees committed meanwhile
    - A failing listener is logged and does not undo the edit
"""

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

from chess_gametree.config import TreeConfig
from chess_gametree.convert import ConversionResult, MovePair, convert_moves, to_linear
from chess_gametree.oracle import ChessOracle, PositionOracle
from chess_gametree.tree import mutations, navigation
from chess_gametree.tree.errors import MutationResult, TreeParseError
from chess_gametree.tree.model import ROOT, GameTree, new_tree
from chess_gametree.tree.path import VariationRef
from chess_gametree.tree.serialization import tree_from_dict, tree_to_dict
from chess_gametree.tree.validator import TreeValidator

logger = logging.getLogger(__name__)

TreeListener = Callable[[GameTree], None]


class GameSession:
    """
    Mutable holder of an immutable GameTree.

    Attributes:
        config: Tree configuration (start position, id factory, parsing)
        oracle: Rules authority used for every edit

    Methods:
        subscribe: Register an on_tree_changed listener
        play_move / create_variation / promote_variation / delete_variation:
            structural edits
        add_comment / set_annotation: node metadata edits
        select / go_next / go_previous / go_up / go_down / go_start / go_end:
            cursor movement
        new_game / load_moves / load_dict: replace the whole tree
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        oracle: Optional[PositionOracle] = None,
        tree: Optional[GameTree] = None,
    ):
        self.config = config or TreeConfig()
        self.oracle = oracle or ChessOracle(
            accept_uci=self.config.accept_uci, chess960=self.config.chess960
        )
        self._tree = tree if tree is not None else self._empty_tree()
        self._lock = threading.Lock()
        self._listeners: List[TreeListener] = []
        self._pending: Deque[GameTree] = deque()
        self._delivering = False

    @property
    def tree(self) -> GameTree:
        """Current snapshot (safe to keep: trees never change)."""
        return self._tree

    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        """
        Register ``listener`` to be called with every new tree.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _empty_tree(self) -> GameTree:
        return new_tree(self.config.start_position, oracle=self.oracle, tree_id=self.config.id_factory())

    def _notify(self, tree: GameTree):
        for listener in list(self._listeners):
            try:
                listener(tree)
            except Exception:
                logger.exception(f"on_tree_changed listener {listener!r} failed")

    def _commit(self, tree: GameTree):
        # Caller holds self._lock.
        self._tree = tree
        self._pending.append(tree)

    def _deliver(self):
        """Hand committed trees to listeners, oldest first."""
        with self._lock:
            if self._delivering:
                return
            self._delivering = True
        while True:
            with self._lock:
                if not self._pending:
                    self._delivering = False
                    return
                tree = self._pending.popleft()
            try:
                self._notify(tree)
            except BaseException:
                with self._lock:
                    self._delivering = False
                raise

    def _replace(self, tree: GameTree):
        with self._lock:
            self._commit(tree)
        self._deliver()

    def _edit(self, edit: Callable[[GameTree], MutationResult]) -> Tuple[MutationResult, bool]:
        with self._lock:
            result = edit(self._tree)
            changed = result.ok and result.tree is not self._tree
            if changed:
                self._commit(result.tree)
        if changed:
            self._deliver()
        elif not result.ok:
            logger.info(f"Edit rejected ({result.error.value}): {result.detail}")
        return result, changed

    def _apply(self, edit: Callable[[GameTree], MutationResult]) -> MutationResult:
        return self._edit(edit)[0]

    # Structural edits

    def play_move(self, move_text: str, from_node_id: Optional[str] = None) -> MutationResult:
        """Play ``move_text`` from ``from_node_id`` (default: the current node)."""
        return self._apply(
            lambda tree: mutations.play_move(
                tree,
                tree.current_node if from_node_id is None else from_node_id,
                move_text,
                oracle=self.oracle,
                id_factory=self.config.id_factory,
            )
        )

    def create_variation(self, parent_node_id: str, move_text: str) -> MutationResult:
        return self._apply(
            lambda tree: mutations.create_variation(
                tree, parent_node_id, move_text, oracle=self.oracle, id_factory=self.config.id_factory
            )
        )

    def promote_variation(self, ref: VariationRef) -> MutationResult:
        return self._apply(lambda tree: mutations.promote_variation(tree, ref))

    def delete_variation(self, ref: VariationRef) -> MutationResult:
        return self._apply(lambda tree: mutations.delete_variation(tree, ref))

    def add_comment(self, node_id: str, comment: Optional[str]) -> MutationResult:
        return self._apply(lambda tree: mutations.add_comment(tree, node_id, comment))

    def set_annotation(self, node_id: str, annotation: Optional[str]) -> MutationResult:
        return self._apply(lambda tree: mutations.set_annotation(tree, node_id, annotation))

    # Cursor movement

    def select(self, node_id: str) -> MutationResult:
        return self._apply(lambda tree: mutations.select_node(tree, node_id))

    def _go(self, target: Callable[[GameTree], Optional[str]]) -> bool:
        def edit(tree: GameTree) -> MutationResult:
            node_id = target(tree)
            if node_id is None or node_id == tree.current_node:
                return MutationResult(tree=tree)
            return mutations.select_node(tree, node_id)

        return self._edit(edit)[1]

    def go_next(self) -> bool:
        return self._go(lambda tree: navigation.next_node(tree, tree.current_node))

    def go_previous(self) -> bool:
        return self._go(lambda tree: navigation.previous_node(tree, tree.current_node))

    def go_down(self) -> bool:
        """Enter the first variation of the current move."""
        return self._go(lambda tree: navigation.variation_down(tree, tree.current_node))

    def go_up(self) -> bool:
        """Leave the current variation for the line it branches from."""
        return self._go(lambda tree: navigation.variation_up(tree, tree.current_node))

    def go_start(self) -> bool:
        return self._go(lambda tree: ROOT)

    def go_end(self) -> bool:
        return self._go(navigation.line_end)

    # Whole-tree replacement

    def new_game(self) -> GameTree:
        tree = self._empty_tree()
        logger.info(f"Started new game {tree.id}")
        self._replace(tree)
        return tree

    def load_moves(self, pairs: Iterable[MovePair]) -> ConversionResult:
        """Replace the tree with one built from move pairs."""
        result = convert_moves(pairs, oracle=self.oracle, config=self.config)
        logger.info(
            f"Loaded game {result.tree.id}: {len(result.tree.main_line)} plies, "
            f"{len(result.failures)} skipped"
        )
        self._replace(result.tree)
        return result

    def load_dict(self, data: Dict[str, Any]) -> GameTree:
        """
        Replace the tree with a ``tree_to_dict`` snapshot.

        Raises:
            TreeParseError: If the snapshot is malformed or, with
                ``config.validate_on_load``, violates a tree invariant
        """
        tree = tree_from_dict(data)
        if self.config.validate_on_load:
            report = TreeValidator(self.oracle).validate(tree)
            if not report.is_valid:
                raise TreeParseError(
                    f"Snapshot failed validation: {report.errors[0]}"
                )
        self._replace(tree)
        return tree

    def to_linear(self) -> List[MovePair]:
        return to_linear(self._tree)

    def to_dict(self) -> Dict[str, Any]:
        return tree_to_dict(self._tree)
