"""
Mutation Engine

Pure editing functions over GameTree values. Each one takes a tree and
returns a MutationResult; on failure the result carries the very same input
tree plus a TreeError, so a rejected edit can never corrupt state.

Copy-on-write:
    Only the nodes an edit touches are rebuilt (dataclasses.replace), along
    with the top-level node dict and, where it changes, the main line. Every
    other MoveNode object is shared between the old and new tree.

Legality:
    Moves are validated and normalized by a PositionOracle. The engine never
    inspects move text beyond comparing normalized notations.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional

from chess_gametree.config import uuid_id
from chess_gametree.oracle import AppliedMove, ChessOracle, InvalidMoveError, PositionOracle, Side
from chess_gametree.tree.errors import MutationResult, TreeError
from chess_gametree.tree.model import ROOT, GameTree, Line, MoveNode
from chess_gametree.tree.path import (
    NodePath,
    VariationRef,
    continuation,
    line_of,
    reachable_ids,
    resolve_path,
)

logger = logging.getLogger(__name__)

# Suffix annotations accepted by set_annotation (PGN NAGs $1-$6)
ANNOTATIONS = ("!", "?", "!!", "??", "!?", "?!")

_DEFAULT_ORACLE = ChessOracle()

IdFactory = Callable[[], str]


def _fail(tree: GameTree, error: TreeError, detail: str) -> MutationResult:
    logger.debug(f"Rejected edit ({error.value}): {detail}")
    return MutationResult(tree=tree, error=error, detail=detail)


def _allocate_id(tree: GameTree, id_factory: Optional[IdFactory]) -> str:
    factory = id_factory or uuid_id
    for _ in range(100):
        node_id = factory()
        if node_id != ROOT and node_id not in tree.nodes:
            return node_id
    raise RuntimeError("id factory keeps producing ids already present in the tree")


def _build_node(
    tree: GameTree,
    parent: Optional[MoveNode],
    applied: AppliedMove,
    node_id: str,
    is_main_line: bool,
    oracle: PositionOracle,
) -> MoveNode:
    if parent is None:
        side = oracle.turn(tree.root_position)
        move_number = oracle.fullmove_number(tree.root_position)
    else:
        side = parent.side.opposite
        # a black move completes the full move
        move_number = parent.move_number + (1 if parent.side is Side.BLACK else 0)

    return MoveNode(
        id=node_id,
        notation=applied.notation,
        position=applied.position,
        move_number=move_number,
        side=side,
        parent_id=parent.id if parent is not None else None,
        is_main_line=is_main_line,
    )


def _with_line(node: MoveNode, index: int, line: Line) -> MoveNode:
    """Copy of ``node`` with variation ``index`` replaced by ``line``."""
    variations = list(node.variations)
    variations[index] = line
    return node.with_variations(variations)


def _navigate(tree: GameTree, node_id: str) -> MutationResult:
    logger.debug(f"Move already present, selecting {node_id}")
    return MutationResult(tree=tree.evolve(current_node=node_id))


def _existing_child(
    tree: GameTree, node: MoveNode, path: NodePath, notation: str
) -> Optional[str]:
    """Id of a node already playing ``notation`` from ``node``'s position."""
    next_id = continuation(tree, path)
    if next_id is not None and tree.nodes[next_id].notation == notation:
        return next_id
    return _existing_variation(tree, node, notation)


def _existing_variation(tree: GameTree, node: MoveNode, notation: str) -> Optional[str]:
    for line in node.variations:
        if line and tree.nodes[line[0]].notation == notation:
            return line[0]
    return None


def play_move(
    tree: GameTree,
    from_node_id: str,
    move_text: str,
    oracle: Optional[PositionOracle] = None,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """
    Play a move from a node, extending or branching as appropriate.

    Attachment rules:
        - ROOT on an empty tree: the move becomes main_line[0]
        - last node of the main line: the main line grows
        - last node of a variation: that variation grows
        - anywhere else: a new single-move variation hangs off ``from_node_id``

    If the same move already exists from that position (as the continuation
    on the node's own line or as the first move of one of its variations) the
    existing node is selected instead of creating a duplicate.

    Args:
        tree: Tree to edit
        from_node_id: Node the move is played from, or ROOT
        move_text: Move text, normalized by the oracle
        oracle: Rules authority (default: shared ChessOracle)
        id_factory: Callable producing new node ids (default: uuid4 hex)

    Returns:
        MutationResult whose tree has current_node set to the played move
    """
    oracle = oracle or _DEFAULT_ORACLE

    parent: Optional[MoveNode] = None
    if from_node_id != ROOT:
        parent = tree.nodes.get(from_node_id)
        if parent is None:
            return _fail(tree, TreeError.NODE_NOT_FOUND, f"Node not found: {from_node_id}")

    position = parent.position if parent is not None else tree.root_position
    try:
        applied = oracle.apply_move(position, move_text)
    except InvalidMoveError as e:
        return _fail(tree, TreeError.INVALID_MOVE, str(e))

    nodes: Dict[str, MoveNode] = dict(tree.nodes)

    if parent is None:
        if tree.main_line:
            first = tree.nodes[tree.main_line[0]]
            if first.notation == applied.notation:
                return _navigate(tree, first.id)
            return _fail(
                tree,
                TreeError.ROOT_VARIATION,
                f"Cannot branch {applied.notation} before the first move {first.notation}",
            )
        node = _build_node(tree, None, applied, _allocate_id(tree, id_factory), True, oracle)
        nodes[node.id] = node
        logger.debug(f"Started main line with {node.label}")
        return MutationResult(
            tree=tree.evolve(nodes=nodes, main_line=(node.id,), current_node=node.id)
        )

    path = resolve_path(tree, from_node_id)
    if path is None:
        return _fail(
            tree, TreeError.NODE_NOT_FOUND, f"Node {from_node_id} is not reachable from the main line"
        )

    existing = _existing_child(tree, parent, path, applied.notation)
    if existing is not None:
        return _navigate(tree, existing)

    node_id = _allocate_id(tree, id_factory)
    line = line_of(tree, path)
    main_line = tree.main_line

    if path.index_in_line == len(line) - 1 and path.on_main_line:
        node = _build_node(tree, parent, applied, node_id, True, oracle)
        main_line = main_line + (node.id,)
        logger.debug(f"Extended main line with {node.label}")
    elif path.index_in_line == len(line) - 1:
        node = _build_node(tree, parent, applied, node_id, False, oracle)
        ref = path.variation
        branch = nodes[ref.branch_id]
        nodes[branch.id] = _with_line(branch, ref.index, line + (node.id,))
        logger.debug(f"Extended variation {ref.index} of {ref.branch_id} with {node.label}")
    else:
        node = _build_node(tree, parent, applied, node_id, False, oracle)
        nodes[parent.id] = parent.with_variations(parent.variations + ((node.id,),))
        logger.debug(f"Branched new variation at {parent.label}: {node.label}")

    nodes[node.id] = node
    return MutationResult(
        tree=tree.evolve(nodes=nodes, main_line=main_line, current_node=node.id)
    )


def create_variation(
    tree: GameTree,
    parent_node_id: str,
    move_text: str,
    oracle: Optional[PositionOracle] = None,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """
    Start a new variation at ``parent_node_id`` regardless of the cursor.

    An existing variation of the parent that already starts with the move is
    selected instead of being duplicated.
    """
    oracle = oracle or _DEFAULT_ORACLE

    parent = tree.nodes.get(parent_node_id)
    if parent is None:
        return _fail(tree, TreeError.NODE_NOT_FOUND, f"Parent node not found: {parent_node_id}")

    existing = _existing_variation(tree, parent, (move_text or "").strip())
    if existing is not None:
        return _navigate(tree, existing)

    try:
        applied = oracle.apply_move(parent.position, move_text)
    except InvalidMoveError as e:
        return _fail(tree, TreeError.INVALID_MOVE, str(e))

    existing = _existing_variation(tree, parent, applied.notation)
    if existing is not None:
        return _navigate(tree, existing)

    node = _build_node(tree, parent, applied, _allocate_id(tree, id_factory), False, oracle)
    nodes: Dict[str, MoveNode] = dict(tree.nodes)
    nodes[parent.id] = parent.with_variations(parent.variations + ((node.id,),))
    nodes[node.id] = node

    logger.debug(f"Created variation {len(parent.variations)} at {parent.label}: {node.label}")
    return MutationResult(tree=tree.evolve(nodes=nodes, current_node=node.id))


def _locate_variation(tree: GameTree, ref: VariationRef):
    branch = tree.nodes.get(ref.branch_id)
    if branch is None:
        return None, _fail(tree, TreeError.NODE_NOT_FOUND, f"Branch node not found: {ref.branch_id}")
    if not 0 <= ref.index < len(branch.variations) or not branch.variations[ref.index]:
        return None, _fail(
            tree,
            TreeError.VARIATION_NOT_FOUND,
            f"Node {ref.branch_id} has no variation {ref.index}",
        )
    return branch, None


def promote_variation(tree: GameTree, ref: VariationRef) -> MutationResult:
    """
    Swap a variation with the continuation it is an alternative to.

    The line holding the branch node becomes ``line[:branch + 1] + variation``
    and the previous continuation takes the variation's slot in the branch
    node's ``variations`` (or disappears from it if there was none). Nested
    variations travel with their line unchanged. When the branch node sits on
    the main line, ``is_main_line`` is flipped on the swapped nodes; promoting
    a nested variation moves it one level up.

    Args:
        tree: Tree to edit
        ref: (branch node id, variation index) to promote

    Returns:
        MutationResult; current_node is left untouched
    """
    branch, failure = _locate_variation(tree, ref)
    if failure is not None:
        return failure

    path = resolve_path(tree, branch.id)
    if path is None:
        return _fail(
            tree, TreeError.NODE_NOT_FOUND, f"Node {branch.id} is not reachable from the main line"
        )

    variation = branch.variations[ref.index]
    line = line_of(tree, path)
    cut = path.index_in_line + 1
    demoted = line[cut:]
    promoted_line = line[:cut] + variation

    variations = list(branch.variations)
    if demoted:
        variations[ref.index] = demoted
    else:
        del variations[ref.index]

    nodes: Dict[str, MoveNode] = dict(tree.nodes)
    nodes[branch.id] = branch.with_variations(variations)
    main_line = tree.main_line

    if path.on_main_line:
        for node_id in variation:
            nodes[node_id] = replace(nodes[node_id], is_main_line=True)
        for node_id in demoted:
            nodes[node_id] = replace(nodes[node_id], is_main_line=False)
        main_line = promoted_line
    else:
        outer = path.steps[-1]
        outer_branch = nodes[outer.branch_id]
        nodes[outer.branch_id] = _with_line(outer_branch, outer.variation_index, promoted_line)

    logger.debug(f"Promoted variation {ref.index} at {branch.label}")
    return MutationResult(tree=tree.evolve(nodes=nodes, main_line=main_line))


def delete_variation(tree: GameTree, ref: VariationRef) -> MutationResult:
    """
    Remove a variation and every node nested under it.

    If the selected node is removed, the selection moves to the branch node.
    """
    branch, failure = _locate_variation(tree, ref)
    if failure is not None:
        return failure

    removed = reachable_ids(tree, [branch.variations[ref.index]])
    removed.discard(branch.id)

    nodes: Dict[str, MoveNode] = {
        node_id: node for node_id, node in tree.nodes.items() if node_id not in removed
    }
    variations = list(branch.variations)
    del variations[ref.index]
    nodes[branch.id] = branch.with_variations(variations)

    current = tree.current_node if tree.current_node not in removed else branch.id

    logger.debug(f"Deleted variation {ref.index} at {branch.label} ({len(removed)} nodes)")
    return MutationResult(tree=tree.evolve(nodes=nodes, current_node=current))


def add_comment(tree: GameTree, node_id: str, comment: Optional[str]) -> MutationResult:
    """Replace the comment of ``node_id``; an empty comment clears it."""
    node = tree.nodes.get(node_id)
    if node is None:
        return _fail(tree, TreeError.NODE_NOT_FOUND, f"Node not found: {node_id}")

    nodes: Dict[str, MoveNode] = dict(tree.nodes)
    nodes[node_id] = replace(node, comment=comment or None)
    return MutationResult(tree=tree.evolve(nodes=nodes))


def set_annotation(tree: GameTree, node_id: str, annotation: Optional[str]) -> MutationResult:
    """Set (or clear, with None/"") the suffix annotation of ``node_id``."""
    node = tree.nodes.get(node_id)
    if node is None:
        return _fail(tree, TreeError.NODE_NOT_FOUND, f"Node not found: {node_id}")

    annotation = (annotation or "").strip() or None
    if annotation is not None and annotation not in ANNOTATIONS:
        return _fail(tree, TreeError.INVALID_ANNOTATION, f"Unknown annotation: {annotation!r}")

    nodes: Dict[str, MoveNode] = dict(tree.nodes)
    nodes[node_id] = replace(node, annotation=annotation)
    return MutationResult(tree=tree.evolve(nodes=nodes))


def select_node(tree: GameTree, node_id: str) -> MutationResult:
    """Move the cursor to ``node_id`` (or ROOT)."""
    if node_id != ROOT and node_id not in tree.nodes:
        return _fail(tree, TreeError.NODE_NOT_FOUND, f"Node not found: {node_id}")
    return MutationResult(tree=tree.evolve(current_node=node_id))
